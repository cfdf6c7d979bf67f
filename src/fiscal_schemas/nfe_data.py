"""
Modelo de exibição de uma NF-e lida a partir do XML recebido.

Campos ausentes no XML viram "" (texto) ou 0.0 (valores), nunca None, para
que a tela possa exibir qualquer campo sem checagem adicional.
"""
from typing import List, Optional

from pydantic import Field

from fiscal_schemas.base_model import FiscalBaseModel


class Endereco(FiscalBaseModel):
    logradouro: str = ''
    numero: str = ''
    bairro: str = ''
    cidade: str = ''
    uf: str = ''
    cep: str = ''
    pais: str = ''


class Empresa(FiscalBaseModel):
    cnpj: str = ''
    razao_social: str = ''
    nome_fantasia: str = ''
    inscricao_estadual: str = ''
    inscricao_municipal: str = ''
    endereco: Endereco = Field(default_factory=Endereco)
    telefone: str = ''
    email: str = ''


class ImpostosItem(FiscalBaseModel):
    icms_base: float = 0.0
    icms_aliquota: float = 0.0
    icms_valor: float = 0.0
    ipi_base: float = 0.0
    ipi_aliquota: float = 0.0
    ipi_valor: float = 0.0
    pis_cst: str = ''
    cofins_cst: str = ''
    valor_total_tributos: float = 0.0


class ItemNFE(FiscalBaseModel):
    numero: int = 0
    codigo: str = ''
    descricao: str = ''
    ncm: str = ''
    cfop: str = ''
    unidade: str = ''
    quantidade: float = 0.0
    valor_unitario: float = 0.0
    valor_total: float = 0.0
    impostos: ImpostosItem = Field(default_factory=ImpostosItem)


class TotaisNFE(FiscalBaseModel):
    base_calculo_icms: float = 0.0
    valor_icms: float = 0.0
    valor_icms_desonerado: float = 0.0
    base_calculo_st: float = 0.0
    valor_st: float = 0.0
    valor_produtos: float = 0.0
    valor_frete: float = 0.0
    valor_seguro: float = 0.0
    valor_desconto: float = 0.0
    valor_ii: float = 0.0
    valor_ipi: float = 0.0
    valor_pis: float = 0.0
    valor_cofins: float = 0.0
    valor_outros: float = 0.0
    valor_nota: float = 0.0
    valor_total_tributos: float = 0.0


class Transportadora(FiscalBaseModel):
    cnpj: str = ''
    razao_social: str = ''
    inscricao_estadual: str = ''
    endereco: str = ''
    cidade: str = ''
    uf: str = ''


class Volumes(FiscalBaseModel):
    quantidade: float = 0.0
    especie: str = ''


class TransporteNFE(FiscalBaseModel):
    modalidade_frete: str = ''
    transportadora: Optional[Transportadora] = None
    volumes: Optional[Volumes] = None


class PagamentoNFE(FiscalBaseModel):
    indicador: str = ''
    forma_pagamento: str = ''
    valor: float = 0.0


class ParcelaNFE(FiscalBaseModel):
    numero: str = ''
    vencimento: str = ''
    valor: float = 0.0


class NFEData(FiscalBaseModel):
    chave_acesso: str = ''
    chave_acesso_formatada: str = ''
    numero: str = ''
    serie: str = ''
    data_emissao: str = ''
    data_entrada: str = ''
    natureza_operacao: str = ''
    protocolo: str = ''
    status: str = ''
    emitente: Empresa = Field(default_factory=Empresa)
    destinatario: Empresa = Field(default_factory=Empresa)
    itens: List[ItemNFE] = Field(default_factory=list)
    totais: TotaisNFE = Field(default_factory=TotaisNFE)
    transporte: TransporteNFE = Field(default_factory=TransporteNFE)
    pagamento: PagamentoNFE = Field(default_factory=PagamentoNFE)
    parcelas: List[ParcelaNFE] = Field(default_factory=list)
    informacoes_adicionais: str = ''
    xml_hash: str = ''
