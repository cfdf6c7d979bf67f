"""
Leitura de NFS-e no layout ABRASF.

O bloco InfNfse é procurado em qualquer nível, então o mesmo código lê
CompNfse isolada, ConsultarNfseResposta e envelopes SOAP de prefeituras.
"""
import logging
from typing import Optional

from lxml import etree

from fiscal_schemas.nfse_data import ItemNFSe, NFSeData, ParteNFSe, ValoresNFSe
from fiscal_xml.xml_reader import (
    XmlInput,
    content_hash,
    find,
    get_child_text,
    get_number,
    get_text,
    load_root,
    local_name,
)

logger = logging.getLogger(__name__)

DESCRICAO_PADRAO = 'Serviço prestado'

ISS_RETIDO_SIM = {'1', 'true', 'True', 'S', 's'}


def _find_inf_nfse(root: etree._Element) -> Optional[etree._Element]:
    if local_name(root) == 'InfNfse':
        return root
    return find(root, 'InfNfse')


def _first(node: Optional[etree._Element], *tags: str) -> Optional[etree._Element]:
    for tag in tags:
        found = find(node, tag)
        if found is not None:
            return found
    return None


def _prestador(inf: etree._Element) -> ParteNFSe:
    prestador = _first(inf, 'PrestadorServico', 'Prestador')
    ident = find(prestador, 'IdentificacaoPrestador')
    if ident is None:
        ident = prestador
    return ParteNFSe(
        cnpj_cpf=get_text(ident, 'Cnpj') or get_text(ident, 'Cpf'),
        razao_social=get_child_text(prestador, 'RazaoSocial'),
        inscricao_municipal=get_text(ident, 'InscricaoMunicipal'),
    )


def _tomador(inf: etree._Element) -> ParteNFSe:
    tomador = _first(inf, 'TomadorServico', 'Tomador')
    ident = find(tomador, 'IdentificacaoTomador')
    cpf_cnpj = find(ident, 'CpfCnpj')
    return ParteNFSe(
        cnpj_cpf=get_text(cpf_cnpj, 'Cnpj') or get_text(cpf_cnpj, 'Cpf'),
        razao_social=get_child_text(tomador, 'RazaoSocial')
        or get_child_text(tomador, 'Nome'),
        inscricao_municipal=get_text(ident, 'InscricaoMunicipal'),
    )


def _valores(valores: Optional[etree._Element]) -> ValoresNFSe:
    return ValoresNFSe(
        valor_servicos=get_number(valores, 'ValorServicos'),
        valor_deducoes=get_number(valores, 'ValorDeducoes'),
        valor_pis=get_number(valores, 'ValorPis'),
        valor_cofins=get_number(valores, 'ValorCofins'),
        valor_iss=get_number(valores, 'ValorIss'),
        base_calculo=get_number(valores, 'BaseCalculo'),
        aliquota=get_number(valores, 'Aliquota'),
        iss_retido=get_text(valores, 'IssRetido') in ISS_RETIDO_SIM,
        valor_liquido=get_number(valores, 'ValorLiquidoNfse'),
    )


def parse_nfse_xml(xml: XmlInput) -> Optional[NFSeData]:
    """
    Lê uma NFS-e ABRASF.

    A discriminação vira um único item (unidade SV, quantidade 1) com o
    valor dos serviços.

    Returns:
        NFSeData, ou None se o XML for mal formado ou não tiver InfNfse
    """
    root = load_root(xml)
    if root is None:
        return None

    inf = _find_inf_nfse(root)
    if inf is None:
        logger.warning('XML sem InfNfse: não é uma NFS-e reconhecida')
        return None

    servico = find(inf, 'Servico')
    valores_node = find(servico, 'Valores')
    if valores_node is None:
        valores_node = find(inf, 'Valores')
    valores = _valores(valores_node)

    discriminacao = (
        get_text(servico, 'Discriminacao')
        or get_child_text(inf, 'OutrasInformacoes')
        or DESCRICAO_PADRAO
    )

    item = ItemNFSe(
        descricao=discriminacao,
        valor_unitario=valores.valor_servicos,
        valor_total=valores.valor_servicos,
        valor_iss=valores.valor_iss,
        valor_pis=valores.valor_pis,
        valor_cofins=valores.valor_cofins,
    )

    nfse = NFSeData(
        numero=get_child_text(inf, 'Numero'),
        serie=get_text(find(inf, 'IdentificacaoRps'), 'Serie'),
        codigo_verificacao=get_child_text(inf, 'CodigoVerificacao'),
        data_emissao=get_child_text(inf, 'DataEmissao'),
        competencia=get_text(inf, 'Competencia'),
        prestador=_prestador(inf),
        tomador=_tomador(inf),
        valores=valores,
        discriminacao=discriminacao,
        itens=[item],
        xml_hash=content_hash(xml),
    )

    logger.debug(
        f'NFS-e {nfse.numero or "sem número"} lida: serviços {valores.valor_servicos:.2f}'
    )
    return nfse
