"""
Leitura de XML fiscal com lxml, independente de namespace.

Todas as buscas usam o curinga {*}, então o mesmo código lê XML com o
namespace da SEFAZ, com namespaces de prefeituras ou sem namespace algum.
"""
import hashlib
import logging
from typing import Optional, Union

from lxml import etree

from fiscal_calculator import to_decimal

logger = logging.getLogger(__name__)

XmlInput = Union[str, bytes]


def _xml_parser(encoding: Optional[str] = None) -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        huge_tree=False,
        encoding=encoding,
    )


def load_root(xml: XmlInput) -> Optional[etree._Element]:
    """
    Faz o parse do documento.

    Texto é codificado em UTF-8 (a declaração do XML é ignorada); bytes
    respeitam a codificação declarada.

    Returns:
        Elemento raiz, ou None se o XML for vazio ou mal formado
    """
    if isinstance(xml, str):
        data, parser = xml.encode('utf-8'), _xml_parser('utf-8')
    else:
        data, parser = xml, _xml_parser()

    if not data or not data.strip():
        logger.warning('XML vazio recebido')
        return None

    try:
        return etree.fromstring(data, parser)
    except (etree.XMLSyntaxError, ValueError) as e:
        logger.warning(f'XML mal formado: {e}')
        return None


def content_hash(xml: XmlInput) -> str:
    """SHA-256 (hex) do conteúdo recebido."""
    data = xml.encode('utf-8') if isinstance(xml, str) else xml
    return hashlib.sha256(data).hexdigest()


def local_name(node: etree._Element) -> str:
    return etree.QName(node).localname


def find(node: Optional[etree._Element], tag: str) -> Optional[etree._Element]:
    """Primeiro descendente com o nome local informado."""
    if node is None:
        return None
    return node.find(f'.//{{*}}{tag}')


def find_child(
    node: Optional[etree._Element], tag: str
) -> Optional[etree._Element]:
    """Filho direto com o nome local informado."""
    if node is None:
        return None
    return node.find(f'{{*}}{tag}')


def find_all(node: Optional[etree._Element], tag: str) -> list:
    if node is None:
        return []
    return node.findall(f'.//{{*}}{tag}')


def first_element_child(
    node: Optional[etree._Element],
) -> Optional[etree._Element]:
    """Primeiro filho que é elemento (ignora comentários)."""
    if node is None:
        return None
    return next((child for child in node if isinstance(child.tag, str)), None)


def text_of(node: Optional[etree._Element]) -> str:
    if node is None or node.text is None:
        return ''
    return node.text.strip()


def get_text(node: Optional[etree._Element], tag: str) -> str:
    """Texto do primeiro descendente `tag`; ausente vira ''."""
    return text_of(find(node, tag))


def get_child_text(node: Optional[etree._Element], tag: str) -> str:
    return text_of(find_child(node, tag))


def get_number(node: Optional[etree._Element], tag: str) -> float:
    """Valor numérico do primeiro descendente `tag`; ausente ou inválido vira 0."""
    return to_number(get_text(node, tag))


def to_number(text: str) -> float:
    dec = to_decimal(text)
    return float(dec) if dec is not None else 0.0
