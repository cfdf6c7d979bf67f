"""
Gerador do XML da NFS-e no layout ABRASF (CompNfse/Nfse/InfNfse).

Sem declaração XML e sem namespace: o documento é embutido em lotes ou
envelopes de cada prefeitura.
"""
import logging
from typing import Any, Mapping, Optional, Union

from lxml import etree

from fiscal_schemas.nfse_document import (
    NFSeContato,
    NFSeDocument,
    NFSeEndereco,
    NFSeValores,
)
from fiscal_xml.xml_writer import XmlWriter

logger = logging.getLogger(__name__)

# (tag, atributo, casas decimais) na ordem do layout, depois de ValorServicos
VALORES_OPCIONAIS = [
    ('ValorDeducoes', 'valor_deducoes', 2),
    ('ValorPis', 'valor_pis', 2),
    ('ValorCofins', 'valor_cofins', 2),
    ('ValorInss', 'valor_inss', 2),
    ('ValorIr', 'valor_ir', 2),
    ('ValorCsll', 'valor_csll', 2),
    ('IssRetido', 'iss_retido', 0),
    ('ValorIss', 'valor_iss', 2),
    ('ValorIssRetido', 'valor_iss_retido', 2),
    ('BaseCalculo', 'base_calculo', 2),
    ('Aliquota', 'aliquota', 4),
    ('ValorLiquidoNfse', 'valor_liquido_nfse', 2),
    ('DescontoIncondicionado', 'desconto_incondicionado', 2),
    ('DescontoCondicionado', 'desconto_condicionado', 2),
]


class NFSeXmlBuilder:
    def __init__(self, document: NFSeDocument):
        self.doc = document
        self.writer = XmlWriter()

    def build(self) -> str:
        w = self.writer
        doc = self.doc

        comp_nfse = w.root('CompNfse')
        inf_nfse = w.element(w.element(comp_nfse, 'Nfse'), 'InfNfse')

        w.element(inf_nfse, 'Numero', doc.numero)
        w.optional(inf_nfse, 'CodigoVerificacao', doc.codigo_verificacao)
        w.element(inf_nfse, 'DataEmissao', doc.data_emissao)

        rps = w.element(inf_nfse, 'IdentificacaoRps')
        w.element(rps, 'Numero', doc.rps.numero)
        w.optional(rps, 'Serie', doc.rps.serie)
        w.optional(rps, 'Tipo', doc.rps.tipo)

        w.element(inf_nfse, 'DataEmissaoRps', doc.data_emissao.split('T')[0])
        w.element(inf_nfse, 'Competencia', doc.competencia)
        w.optional(inf_nfse, 'OutrasInformacoes', doc.outras_informacoes)

        servico = w.element(inf_nfse, 'Servico')
        self._add_valores(servico, doc.valores)
        w.element(servico, 'ItemListaServico', doc.item_lista_servico)
        w.element(
            servico, 'CodigoTributacaoMunicipio', doc.codigo_tributacao_municipio
        )
        w.element(servico, 'Discriminacao', doc.discriminacao)
        w.element(servico, 'CodigoMunicipio', doc.codigo_municipio)

        self._add_prestador(inf_nfse)
        self._add_tomador(inf_nfse)

        if doc.orgao_gerador is not None:
            orgao = w.element(inf_nfse, 'OrgaoGerador')
            w.optional(orgao, 'CodigoMunicipio', doc.orgao_gerador.codigo_municipio)
            w.optional(orgao, 'Uf', doc.orgao_gerador.uf)

        return w.serialize(comp_nfse)

    def _add_valores(self, parent: etree._Element, valores: NFSeValores) -> None:
        w = self.writer
        node = w.element(parent, 'Valores')
        w.decimal(node, 'ValorServicos', valores.valor_servicos, 2)
        for tag, attr, places in VALORES_OPCIONAIS:
            w.optional_decimal(node, tag, getattr(valores, attr), places)

    def _add_endereco(
        self, parent: etree._Element, endereco: Optional[NFSeEndereco]
    ) -> None:
        if endereco is None:
            return
        w = self.writer
        node = w.element(parent, 'Endereco')
        w.optional(node, 'Endereco', endereco.endereco)
        w.optional(node, 'Numero', endereco.numero)
        w.optional(node, 'Complemento', endereco.complemento)
        w.optional(node, 'Bairro', endereco.bairro)
        w.optional(node, 'CodigoMunicipio', endereco.codigo_municipio)
        w.optional(node, 'Uf', endereco.uf)
        w.optional(node, 'Cep', endereco.cep)

    def _add_contato(
        self, parent: etree._Element, contato: Optional[NFSeContato]
    ) -> None:
        if contato is None:
            return
        w = self.writer
        node = w.element(parent, 'Contato')
        w.optional(node, 'Telefone', contato.telefone)
        w.optional(node, 'Email', contato.email)

    def _add_prestador(self, parent: etree._Element) -> None:
        w = self.writer
        prestador = self.doc.prestador
        node = w.element(parent, 'PrestadorServico')
        ident = w.element(node, 'IdentificacaoPrestador')
        w.element(ident, 'Cnpj', prestador.cnpj)
        w.optional(ident, 'InscricaoMunicipal', prestador.inscricao_municipal)
        w.element(node, 'RazaoSocial', prestador.razao_social)
        w.optional(node, 'NomeFantasia', prestador.nome_fantasia)
        self._add_endereco(node, prestador.endereco)
        self._add_contato(node, prestador.contato)

    def _add_tomador(self, parent: etree._Element) -> None:
        w = self.writer
        tomador = self.doc.tomador
        node = w.element(parent, 'TomadorServico')
        ident = w.element(node, 'IdentificacaoTomador')
        cpf_cnpj = w.element(ident, 'CpfCnpj')
        doc_tag = 'Cpf' if len(tomador.cnpj_cpf.strip()) == 11 else 'Cnpj'
        w.element(cpf_cnpj, doc_tag, tomador.cnpj_cpf)
        w.optional(ident, 'InscricaoMunicipal', tomador.inscricao_municipal)
        w.element(node, 'RazaoSocial', tomador.razao_social)
        self._add_endereco(node, tomador.endereco)
        self._add_contato(node, tomador.contato)


def build_nfse_xml(params: Union[NFSeDocument, Mapping[str, Any]]) -> str:
    """
    Gera o XML da NFS-e ABRASF.

    Args:
        params: NFSeDocument ou dict com as mesmas chaves (camelCase aceito)

    Returns:
        XML como texto, sem declaração

    Raises:
        pydantic.ValidationError: se o dict não puder ser convertido
    """
    document = (
        params
        if isinstance(params, NFSeDocument)
        else NFSeDocument.model_validate(params)
    )
    logger.debug(f'Gerando XML da NFS-e {document.numero}')
    return NFSeXmlBuilder(document).build()
