"""
Gerador do XML da NF-e 4.00 (nfeProc) a partir de dados já validados.

Não assina, não valida contra o XSD e não confere a sequência de nItem:
apenas serializa o que recebeu, na ordem do layout.
"""
import logging
from typing import Any, Mapping, Union

from lxml import etree

from fiscal_schemas.nfe_document import (
    NFeAddress,
    NFeDocument,
    NFeEmitter,
    NFeItem,
    NFePagamento,
    NFeRecipient,
    NFeTotals,
    NFeTransp,
)
from fiscal_xml.xml_writer import XmlWriter, format_plain_number

logger = logging.getLogger(__name__)

NAMESPACE_NFE = 'http://www.portalfiscal.inf.br/nfe'
VERSAO_NFE = '4.00'

CST_ICMS_PADRAO = '00'
CST_IPI_PADRAO = '99'
CST_PIS_COFINS_PADRAO = '08'


class NFeXmlBuilder:
    """Monta os grupos ide, emit, dest, det, total, transp, pag e infAdic."""

    def __init__(self, document: NFeDocument):
        self.doc = document
        self.writer = XmlWriter(NAMESPACE_NFE)

    def build(self) -> str:
        """
        Constrói o XML completo.

        Returns:
            str: XML com declaração, raiz nfeProc
        """
        w = self.writer
        nfe_proc = w.root('nfeProc', versao=VERSAO_NFE)
        nfe = w.element(nfe_proc, 'NFe')
        inf_nfe = w.element(
            nfe, 'infNFe', Id=f'NFe{self.doc.access_key or ""}', versao=VERSAO_NFE
        )

        self._add_ide(inf_nfe)
        self._add_emit(inf_nfe, self.doc.emitter)
        self._add_dest(inf_nfe, self.doc.recipient)
        for item in self.doc.items:
            self._add_det(inf_nfe, item)
        self._add_total(inf_nfe, self.doc.totals)
        if self.doc.transp is not None:
            self._add_transp(inf_nfe, self.doc.transp)
        if self.doc.pagamento is not None:
            self._add_pag(inf_nfe, self.doc.pagamento)
        if self.doc.inf_cpl:
            inf_adic = w.element(inf_nfe, 'infAdic')
            w.element(inf_adic, 'infCpl', self.doc.inf_cpl)

        return w.serialize(nfe_proc, declaration=True)

    def _add_ide(self, parent: etree._Element) -> None:
        w = self.writer
        ide = w.element(parent, 'ide')
        w.element(ide, 'serie', self.doc.series)
        w.element(ide, 'nNF', self.doc.number)
        w.element(ide, 'dhEmi', self.doc.issue_date)
        w.optional(ide, 'dhSaiEnt', self.doc.entry_date)

    def _add_address(
        self, parent: etree._Element, tag: str, address: NFeAddress
    ) -> None:
        w = self.writer
        ender = w.element(parent, tag)
        w.optional(ender, 'xLgr', address.street)
        w.optional(ender, 'nro', address.number)
        w.optional(ender, 'xBairro', address.neighborhood)
        w.optional(ender, 'xMun', address.city)
        w.optional(ender, 'UF', address.uf)
        w.optional(ender, 'CEP', address.cep)
        w.optional(ender, 'xPais', address.country)
        w.optional(ender, 'fone', address.phone)

    def _add_emit(self, parent: etree._Element, emitter: NFeEmitter) -> None:
        w = self.writer
        emit = w.element(parent, 'emit')
        w.element(emit, 'CNPJ', emitter.cnpj)
        w.element(emit, 'xNome', emitter.name)
        w.optional(emit, 'xFant', emitter.fantasy_name)
        self._add_address(emit, 'enderEmit', emitter.address)
        w.optional(emit, 'IE', emitter.ie)
        w.optional(emit, 'IM', emitter.im)
        w.optional(emit, 'CNAE', emitter.cnae)
        w.optional(emit, 'CRT', emitter.crt)

    def _add_dest(self, parent: etree._Element, recipient: NFeRecipient) -> None:
        w = self.writer
        dest = w.element(parent, 'dest')
        # 11 caracteres = CPF; qualquer outro tamanho sai como CNPJ
        doc_tag = 'CPF' if len(recipient.cnpj_cpf.strip()) == 11 else 'CNPJ'
        w.element(dest, doc_tag, recipient.cnpj_cpf)
        w.element(dest, 'xNome', recipient.name)
        self._add_address(dest, 'enderDest', recipient.address)
        w.optional(dest, 'IE', recipient.ie)
        w.optional(dest, 'email', recipient.email)

    def _add_det(self, parent: etree._Element, item: NFeItem) -> None:
        w = self.writer
        det = w.element(parent, 'det', nItem=str(item.line_number))

        prod = w.element(det, 'prod')
        w.optional(prod, 'cProd', item.code)
        w.element(prod, 'xProd', item.description)
        w.optional(prod, 'NCM', item.ncm)
        w.optional(prod, 'CEST', item.cest)
        w.optional(prod, 'CFOP', item.cfop)
        w.element(prod, 'uCom', item.unit)
        w.decimal(prod, 'qCom', item.quantity, 4)
        w.decimal(prod, 'vUnCom', item.unit_price, 10)
        w.decimal(prod, 'vProd', item.total_price, 2)
        w.element(prod, 'uTrib', item.unit)
        w.decimal(prod, 'qTrib', item.quantity, 4)
        w.decimal(prod, 'vUnTrib', item.unit_price, 10)
        w.element(prod, 'indTot', '1')

        imposto = w.element(det, 'imposto')
        taxes = item.taxes
        if taxes is None:
            return

        if taxes.icms is not None:
            icms = w.element(w.element(imposto, 'ICMS'), 'ICMS00')
            w.optional(icms, 'orig', taxes.icms.orig)
            w.element(icms, 'CST', taxes.icms.cst or CST_ICMS_PADRAO)
            w.optional(icms, 'modBC', taxes.icms.mod_bc)
            w.optional_decimal(icms, 'vBC', taxes.icms.v_bc, 2)
            w.optional_decimal(icms, 'pICMS', taxes.icms.p_icms, 4)
            w.optional_decimal(icms, 'vICMS', taxes.icms.v_icms, 2)

        if taxes.ipi is not None:
            ipi = w.element(w.element(imposto, 'IPI'), 'IPITrib')
            w.element(ipi, 'CST', taxes.ipi.cst or CST_IPI_PADRAO)
            w.optional_decimal(ipi, 'vBC', taxes.ipi.v_bc, 2)
            w.optional_decimal(ipi, 'pIPI', taxes.ipi.p_ipi, 2)
            w.optional_decimal(ipi, 'vIPI', taxes.ipi.v_ipi, 2)

        if taxes.pis is not None:
            pis = w.element(w.element(imposto, 'PIS'), 'PISNT')
            w.element(pis, 'CST', taxes.pis.cst or CST_PIS_COFINS_PADRAO)

        if taxes.cofins is not None:
            cofins = w.element(w.element(imposto, 'COFINS'), 'COFINSNT')
            w.element(cofins, 'CST', taxes.cofins.cst or CST_PIS_COFINS_PADRAO)

    def _add_total(self, parent: etree._Element, totals: NFeTotals) -> None:
        w = self.writer
        icms_tot = w.element(w.element(parent, 'total'), 'ICMSTot')
        w.optional_decimal(icms_tot, 'vProd', totals.v_prod, 2)
        w.optional_decimal(icms_tot, 'vFrete', totals.v_frete, 2)
        w.optional_decimal(icms_tot, 'vDesc', totals.v_desc, 2)
        w.optional_decimal(icms_tot, 'vIPI', totals.v_ipi, 2)
        w.decimal(icms_tot, 'vNF', totals.v_nf, 2)
        w.optional_decimal(icms_tot, 'vTotTrib', totals.v_tot_trib, 2)

    def _add_transp(self, parent: etree._Element, transp: NFeTransp) -> None:
        w = self.writer
        node = w.element(parent, 'transp')
        w.element(node, 'modFrete', transp.mod_frete)

        transporter = transp.transporter
        if transporter is not None:
            transporta = w.element(node, 'transporta')
            w.optional(transporta, 'CNPJ', transporter.cnpj)
            w.optional(transporta, 'xNome', transporter.name)
            w.optional(transporta, 'IE', transporter.ie)
            w.optional(transporta, 'xEnder', transporter.address)
            w.optional(transporta, 'xMun', transporter.city)
            w.optional(transporta, 'UF', transporter.uf)

        volume = transp.volume
        if volume is not None:
            vol = w.element(node, 'vol')
            if volume.quantity is not None:
                w.element(vol, 'qVol', format_plain_number(volume.quantity))
            w.optional(vol, 'esp', volume.specie)

    def _add_pag(self, parent: etree._Element, pagamento: NFePagamento) -> None:
        w = self.writer
        det_pag = w.element(w.element(parent, 'pag'), 'detPag')
        w.optional(det_pag, 'indPag', pagamento.ind_pag)
        w.optional(det_pag, 'tPag', pagamento.t_pag)
        w.optional_decimal(det_pag, 'vPag', pagamento.v_pag, 2)


def build_nfe_xml(params: Union[NFeDocument, Mapping[str, Any]]) -> str:
    """
    Gera o XML da NF-e.

    Args:
        params: NFeDocument ou dict com as mesmas chaves (camelCase aceito)

    Returns:
        XML da NF-e como texto

    Raises:
        pydantic.ValidationError: se o dict não puder ser convertido
    """
    document = (
        params
        if isinstance(params, NFeDocument)
        else NFeDocument.model_validate(params)
    )
    logger.debug(
        f'Gerando XML da NF-e {document.number} com {len(document.items)} item(ns)'
    )
    return NFeXmlBuilder(document).build()
