"""
Dados de entrada do gerador de XML da NF-e 4.00.

O gerador confia que estes dados já passaram pelos validadores; nada aqui
confere dígitos verificadores nem a sequência de nItem.
"""
from typing import List, Optional

from pydantic import Field

from fiscal_schemas.base_model import FiscalBaseModel
from fiscal_schemas.parties import CstOnly, Transporter, TransportVolume


class NFeAddress(FiscalBaseModel):
    street: Optional[str] = None
    number: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    uf: Optional[str] = None
    cep: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None


class NFeEmitter(FiscalBaseModel):
    cnpj: str
    name: str
    fantasy_name: Optional[str] = None
    ie: Optional[str] = None
    im: Optional[str] = None
    cnae: Optional[str] = None
    crt: Optional[str] = None
    address: NFeAddress = Field(default_factory=NFeAddress)


class NFeRecipient(FiscalBaseModel):
    cnpj_cpf: str
    name: str
    ie: Optional[str] = None
    email: Optional[str] = None
    address: NFeAddress = Field(default_factory=NFeAddress)


class NFeIcms(FiscalBaseModel):
    v_bc: Optional[float] = Field(default=None, alias='vBC')
    p_icms: Optional[float] = Field(default=None, alias='pICMS')
    v_icms: Optional[float] = Field(default=None, alias='vICMS')
    cst: Optional[str] = None
    mod_bc: Optional[str] = Field(default=None, alias='modBC')
    orig: Optional[str] = None


class NFeIpi(FiscalBaseModel):
    c_enq: Optional[str] = None
    v_bc: Optional[float] = Field(default=None, alias='vBC')
    p_ipi: Optional[float] = Field(default=None, alias='pIPI')
    v_ipi: Optional[float] = Field(default=None, alias='vIPI')
    cst: Optional[str] = None


class NFeItemTaxes(FiscalBaseModel):
    icms: Optional[NFeIcms] = None
    ipi: Optional[NFeIpi] = None
    pis: Optional[CstOnly] = None
    cofins: Optional[CstOnly] = None


class NFeItem(FiscalBaseModel):
    line_number: int
    code: Optional[str] = None
    description: str
    ncm: Optional[str] = None
    cest: Optional[str] = None
    cfop: Optional[str] = None
    unit: str
    quantity: float
    unit_price: float
    total_price: float
    taxes: Optional[NFeItemTaxes] = None


class NFeTotals(FiscalBaseModel):
    v_nf: float = Field(alias='vNF')
    v_prod: Optional[float] = None
    v_desc: Optional[float] = None
    v_frete: Optional[float] = None
    v_ipi: Optional[float] = Field(default=None, alias='vIPI')
    v_tot_trib: Optional[float] = None


class NFeTransp(FiscalBaseModel):
    mod_frete: str
    transporter: Optional[Transporter] = None
    volume: Optional[TransportVolume] = None


class NFePagamento(FiscalBaseModel):
    ind_pag: Optional[str] = None
    t_pag: Optional[str] = None
    v_pag: Optional[float] = None


class NFeDocument(FiscalBaseModel):
    access_key: Optional[str] = None
    number: str
    series: str
    issue_date: str
    entry_date: Optional[str] = None
    emitter: NFeEmitter
    recipient: NFeRecipient
    items: List[NFeItem] = Field(default_factory=list)
    totals: NFeTotals
    transp: Optional[NFeTransp] = None
    pagamento: Optional[NFePagamento] = None
    inf_cpl: Optional[str] = None
