"""
Escrita de XML fiscal com lxml.

Os geradores montam a árvore elemento a elemento; o lxml cuida do escape de
texto e atributos. Elementos opcionais só entram quando o valor existe.
"""
import logging
import re
from decimal import Decimal
from typing import Any, Optional

from lxml import etree

from fiscal_calculator import quantize, to_decimal

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

# caracteres fora do XML 1.0 (controle, surrogates soltos, U+FFFE/U+FFFF)
INVALID_XML_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]')


def xml_text(value: Any) -> str:
    """Texto pronto para o XML: remove caracteres que o XML 1.0 não aceita."""
    return INVALID_XML_CHARS.sub('', str(value))


def format_decimal(value: Any, places: int) -> str:
    """
    Formata número com quantidade fixa de casas (arredondamento ROUND_HALF_UP).

    Args:
        value: Número a formatar
        places: Casas decimais (0 para inteiro)

    Returns:
        Texto como '27.70' ou '13.8500000000'
    """
    dec = to_decimal(value)
    if dec is None:
        raise ValueError(f'Valor numérico inválido para o XML: {value!r}')
    return format(quantize(dec, Decimal(1).scaleb(-places)), 'f')


def format_plain_number(value: Any) -> str:
    """Número sem casas fixas: 2.0 -> '2', 2.5 -> '2.5'."""
    dec = to_decimal(value)
    if dec is None:
        raise ValueError(f'Valor numérico inválido para o XML: {value!r}')
    if dec == dec.to_integral_value():
        return str(int(dec))
    return format(dec.normalize(), 'f')


def _has_text(value: Any) -> bool:
    return value is not None and xml_text(value) != ''


class XmlWriter:
    """
    Construtor de elementos em um namespace padrão (ou sem namespace).

    Todos os elementos criados pertencem ao mesmo namespace, então só a raiz
    declara o xmlns.
    """

    def __init__(self, namespace: Optional[str] = None):
        self.namespace = namespace

    def _qualified(self, tag: str) -> str:
        if self.namespace:
            return f'{{{self.namespace}}}{tag}'
        return tag

    def root(self, tag: str, **attrs: str) -> etree._Element:
        nsmap = {None: self.namespace} if self.namespace else None
        element = etree.Element(self._qualified(tag), nsmap=nsmap)
        for name, value in attrs.items():
            element.set(name, xml_text(value))
        return element

    def element(
        self, parent: etree._Element, tag: str, text: Any = None, **attrs: str
    ) -> etree._Element:
        """Elemento obrigatório. Texto None vira elemento vazio."""
        child = etree.SubElement(parent, self._qualified(tag))
        for name, value in attrs.items():
            child.set(name, xml_text(value))
        if text is not None:
            child.text = xml_text(text)
        return child

    def optional(
        self, parent: etree._Element, tag: str, value: Any
    ) -> Optional[etree._Element]:
        """Elemento de texto emitido só quando o valor não é vazio."""
        if not _has_text(value):
            return None
        return self.element(parent, tag, value)

    def decimal(
        self, parent: etree._Element, tag: str, value: Any, places: int
    ) -> etree._Element:
        return self.element(parent, tag, format_decimal(value, places))

    def optional_decimal(
        self, parent: etree._Element, tag: str, value: Any, places: int
    ) -> Optional[etree._Element]:
        """Valor numérico emitido quando informado (zero também conta)."""
        if value is None:
            return None
        return self.decimal(parent, tag, value, places)

    def serialize(self, root: etree._Element, declaration: bool = False) -> str:
        """
        Serializa sem indentação. Contêineres sem filhos saem como
        <tag></tag>, nunca como <tag/>.
        """
        for node in root.iter():
            if len(node) == 0 and node.text is None:
                node.text = ''

        xml_str = etree.tostring(root, encoding='unicode')
        if declaration:
            xml_str = XML_DECLARATION + xml_str

        logger.debug(
            f'XML {etree.QName(root).localname} gerado ({len(xml_str)} caracteres)'
        )
        return xml_str
