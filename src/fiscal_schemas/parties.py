"""
Modelos de emitente, destinatário, transporte, impostos de produto e dados
de serviço usados pelos validadores de formulário.
"""
from typing import Optional

from pydantic import Field

from fiscal_schemas.base_model import FiscalBaseModel


class PartyAddress(FiscalBaseModel):
    street: Optional[str] = None
    number: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    uf: Optional[str] = None
    cep: Optional[str] = None
    country: Optional[str] = None


class EmitterData(FiscalBaseModel):
    cnpj: Optional[str] = None
    name: Optional[str] = None
    fantasy_name: Optional[str] = None
    ie: Optional[str] = None
    im: Optional[str] = None
    cnae: Optional[str] = None
    crt: Optional[str] = None
    address: Optional[PartyAddress] = None
    phone: Optional[str] = None


class RecipientData(FiscalBaseModel):
    cnpj_cpf: Optional[str] = None
    name: Optional[str] = None
    ie: Optional[str] = None
    email: Optional[str] = None
    address: Optional[PartyAddress] = None
    phone: Optional[str] = None


class Transporter(FiscalBaseModel):
    cnpj: Optional[str] = None
    name: Optional[str] = None
    ie: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    uf: Optional[str] = None


class TransportVolume(FiscalBaseModel):
    quantity: Optional[float] = None
    specie: Optional[str] = None


class TransportData(FiscalBaseModel):
    mod_frete: Optional[str] = None
    transporter: Optional[Transporter] = None
    volume: Optional[TransportVolume] = None


class IpiTaxes(FiscalBaseModel):
    v_bc: Optional[float] = Field(default=None, alias='vBC')
    p_ipi: Optional[float] = Field(default=None, alias='pIPI')
    v_ipi: Optional[float] = Field(default=None, alias='vIPI')


class CstOnly(FiscalBaseModel):
    cst: Optional[str] = None


class ProductTaxes(FiscalBaseModel):
    v_bc: Optional[float] = Field(default=None, alias='vBC')
    p_icms: Optional[float] = Field(default=None, alias='pICMS')
    v_icms: Optional[float] = Field(default=None, alias='vICMS')
    ipi: Optional[IpiTaxes] = None
    v_tot_trib: Optional[float] = Field(default=None, alias='vTotTrib')
    pis: Optional[CstOnly] = None
    cofins: Optional[CstOnly] = None


class ServiceValues(FiscalBaseModel):
    valor_servicos: Optional[float] = None
    valor_deducoes: Optional[float] = None
    valor_pis: Optional[float] = None
    valor_cofins: Optional[float] = None
    valor_inss: Optional[float] = None
    valor_ir: Optional[float] = None
    valor_csll: Optional[float] = None
    iss_retido: Optional[float] = None
    valor_iss: Optional[float] = None
    valor_iss_retido: Optional[float] = None
    base_calculo: Optional[float] = None
    aliquota: Optional[float] = None
    valor_liquido_nfse: Optional[float] = None
    desconto_incondicionado: Optional[float] = None
    desconto_condicionado: Optional[float] = None


class ServiceData(FiscalBaseModel):
    item_lista_servico: Optional[str] = None
    codigo_tributacao_municipio: Optional[str] = None
    discriminacao: Optional[str] = None
    codigo_municipio: Optional[str] = None
    valores: Optional[ServiceValues] = None
