"""
Leitura do XML da NF-e (nfeProc ou NFe isolada) para o modelo de exibição.
"""
import logging
from typing import List, Optional

from lxml import etree

from fiscal_formatter import (
    FORMA_PAGAMENTO,
    INDICADOR_PAGAMENTO,
    MODALIDADE_FRETE,
    describe_code,
    format_access_key,
)
from fiscal_schemas.nfe_data import (
    Empresa,
    Endereco,
    ImpostosItem,
    ItemNFE,
    NFEData,
    PagamentoNFE,
    ParcelaNFE,
    TotaisNFE,
    Transportadora,
    TransporteNFE,
    Volumes,
)
from fiscal_xml.xml_reader import (
    XmlInput,
    content_hash,
    find,
    find_all,
    first_element_child,
    get_text,
    get_number,
    load_root,
)

logger = logging.getLogger(__name__)


def _endereco(node: Optional[etree._Element]) -> Endereco:
    return Endereco(
        logradouro=get_text(node, 'xLgr'),
        numero=get_text(node, 'nro'),
        bairro=get_text(node, 'xBairro'),
        cidade=get_text(node, 'xMun'),
        uf=get_text(node, 'UF'),
        cep=get_text(node, 'CEP'),
        pais=get_text(node, 'xPais'),
    )


def _emitente(emit: Optional[etree._Element]) -> Empresa:
    ender = find(emit, 'enderEmit')
    return Empresa(
        cnpj=get_text(emit, 'CNPJ') or get_text(emit, 'CPF'),
        razao_social=get_text(emit, 'xNome'),
        nome_fantasia=get_text(emit, 'xFant'),
        inscricao_estadual=get_text(emit, 'IE'),
        inscricao_municipal=get_text(emit, 'IM'),
        endereco=_endereco(ender),
        telefone=get_text(ender, 'fone'),
    )


def _destinatario(dest: Optional[etree._Element]) -> Empresa:
    ender = find(dest, 'enderDest')
    return Empresa(
        cnpj=get_text(dest, 'CNPJ') or get_text(dest, 'CPF'),
        razao_social=get_text(dest, 'xNome'),
        inscricao_estadual=get_text(dest, 'IE'),
        endereco=_endereco(ender),
        telefone=get_text(ender, 'fone'),
        email=get_text(dest, 'email'),
    )


def _impostos(imposto: Optional[etree._Element]) -> ImpostosItem:
    # ICMS, PIS e COFINS: o grupo vem no primeiro filho (ICMS00, PISNT...)
    icms = first_element_child(find(imposto, 'ICMS'))
    ipi_node = find(imposto, 'IPI')
    ipi = find(ipi_node, 'IPITrib')
    if ipi is None:
        ipi = find(ipi_node, 'IPINT')
    pis = first_element_child(find(imposto, 'PIS'))
    cofins = first_element_child(find(imposto, 'COFINS'))

    return ImpostosItem(
        icms_base=get_number(icms, 'vBC'),
        icms_aliquota=get_number(icms, 'pICMS'),
        icms_valor=get_number(icms, 'vICMS'),
        ipi_base=get_number(ipi, 'vBC'),
        ipi_aliquota=get_number(ipi, 'pIPI'),
        ipi_valor=get_number(ipi, 'vIPI'),
        pis_cst=get_text(pis, 'CST'),
        cofins_cst=get_text(cofins, 'CST'),
        valor_total_tributos=get_number(imposto, 'vTotTrib'),
    )


def _item(det: etree._Element) -> ItemNFE:
    prod = find(det, 'prod')
    try:
        numero = int(det.get('nItem') or 0)
    except ValueError:
        numero = 0

    return ItemNFE(
        numero=numero,
        codigo=get_text(prod, 'cProd'),
        descricao=get_text(prod, 'xProd'),
        ncm=get_text(prod, 'NCM'),
        cfop=get_text(prod, 'CFOP'),
        unidade=get_text(prod, 'uCom'),
        quantidade=get_number(prod, 'qCom'),
        valor_unitario=get_number(prod, 'vUnCom'),
        valor_total=get_number(prod, 'vProd'),
        impostos=_impostos(find(det, 'imposto')),
    )


def _totais(total: Optional[etree._Element]) -> TotaisNFE:
    icms_tot = find(total, 'ICMSTot')
    if icms_tot is None:
        icms_tot = total
    return TotaisNFE(
        base_calculo_icms=get_number(icms_tot, 'vBC'),
        valor_icms=get_number(icms_tot, 'vICMS'),
        valor_icms_desonerado=get_number(icms_tot, 'vICMSDeson'),
        base_calculo_st=get_number(icms_tot, 'vBCST'),
        valor_st=get_number(icms_tot, 'vST'),
        valor_produtos=get_number(icms_tot, 'vProd'),
        valor_frete=get_number(icms_tot, 'vFrete'),
        valor_seguro=get_number(icms_tot, 'vSeg'),
        valor_desconto=get_number(icms_tot, 'vDesc'),
        valor_ii=get_number(icms_tot, 'vII'),
        valor_ipi=get_number(icms_tot, 'vIPI'),
        valor_pis=get_number(icms_tot, 'vPIS'),
        valor_cofins=get_number(icms_tot, 'vCOFINS'),
        valor_outros=get_number(icms_tot, 'vOutro'),
        valor_nota=get_number(icms_tot, 'vNF'),
        valor_total_tributos=get_number(icms_tot, 'vTotTrib'),
    )


def _transporte(transp: Optional[etree._Element]) -> TransporteNFE:
    transporta = find(transp, 'transporta')
    vol = find(transp, 'vol')

    transportadora = None
    if transporta is not None:
        transportadora = Transportadora(
            cnpj=get_text(transporta, 'CNPJ') or get_text(transporta, 'CPF'),
            razao_social=get_text(transporta, 'xNome'),
            inscricao_estadual=get_text(transporta, 'IE'),
            endereco=get_text(transporta, 'xEnder'),
            cidade=get_text(transporta, 'xMun'),
            uf=get_text(transporta, 'UF'),
        )

    volumes = None
    if vol is not None:
        volumes = Volumes(
            quantidade=get_number(vol, 'qVol'),
            especie=get_text(vol, 'esp'),
        )

    return TransporteNFE(
        modalidade_frete=describe_code(MODALIDADE_FRETE, get_text(transp, 'modFrete')),
        transportadora=transportadora,
        volumes=volumes,
    )


def _pagamento(pag: Optional[etree._Element]) -> PagamentoNFE:
    det_pag = find(pag, 'detPag')
    return PagamentoNFE(
        indicador=describe_code(INDICADOR_PAGAMENTO, get_text(det_pag, 'indPag')),
        forma_pagamento=describe_code(FORMA_PAGAMENTO, get_text(det_pag, 'tPag')),
        valor=get_number(det_pag, 'vPag'),
    )


def _parcelas(inf_nfe: etree._Element) -> List[ParcelaNFE]:
    return [
        ParcelaNFE(
            numero=get_text(dup, 'nDup'),
            vencimento=get_text(dup, 'dVenc'),
            valor=get_number(dup, 'vDup'),
        )
        for dup in find_all(find(inf_nfe, 'cobr'), 'dup')
    ]


def parse_nfe_xml(xml: XmlInput) -> Optional[NFEData]:
    """
    Lê uma NF-e autorizada (nfeProc) ou apenas o bloco NFe.

    Args:
        xml: Conteúdo do arquivo (texto ou bytes)

    Returns:
        NFEData com campos ausentes como '' ou 0, ou None se o XML for mal
        formado ou não tiver infNFe
    """
    root = load_root(xml)
    if root is None:
        return None

    inf_nfe = find(root, 'infNFe')
    if inf_nfe is None and etree.QName(root).localname == 'infNFe':
        inf_nfe = root
    if inf_nfe is None:
        logger.warning('XML sem infNFe: não é uma NF-e reconhecida')
        return None

    inf_prot = find(root, 'infProt')
    ide = find(inf_nfe, 'ide')

    chave = get_text(inf_prot, 'chNFe') or (inf_nfe.get('Id') or '').replace(
        'NFe', ''
    )

    nfe = NFEData(
        chave_acesso=chave,
        chave_acesso_formatada=format_access_key(chave),
        numero=get_text(ide, 'nNF'),
        serie=get_text(ide, 'serie'),
        data_emissao=get_text(ide, 'dhEmi') or get_text(ide, 'dEmi'),
        data_entrada=get_text(ide, 'dhSaiEnt') or get_text(ide, 'dSaiEnt'),
        natureza_operacao=get_text(ide, 'natOp'),
        protocolo=get_text(inf_prot, 'nProt'),
        status=get_text(inf_prot, 'xMotivo'),
        emitente=_emitente(find(inf_nfe, 'emit')),
        destinatario=_destinatario(find(inf_nfe, 'dest')),
        itens=[_item(det) for det in find_all(inf_nfe, 'det')],
        totais=_totais(find(inf_nfe, 'total')),
        transporte=_transporte(find(inf_nfe, 'transp')),
        pagamento=_pagamento(find(inf_nfe, 'pag')),
        parcelas=_parcelas(inf_nfe),
        informacoes_adicionais=get_text(find(inf_nfe, 'infAdic'), 'infCpl'),
        xml_hash=content_hash(xml),
    )

    logger.debug(
        f'NF-e {nfe.numero or "sem número"} lida: {len(nfe.itens)} item(ns), '
        f'total {nfe.totais.valor_nota:.2f}'
    )
    return nfe
