"""
Dados de entrada do gerador de XML da NFS-e (layout ABRASF).
"""
from typing import Optional

from fiscal_schemas.base_model import FiscalBaseModel
from fiscal_schemas.parties import ServiceValues


class NFSeRps(FiscalBaseModel):
    numero: str
    serie: Optional[str] = None
    tipo: Optional[str] = None


class NFSeValores(ServiceValues):
    valor_servicos: float


class NFSeEndereco(FiscalBaseModel):
    endereco: Optional[str] = None
    numero: Optional[str] = None
    complemento: Optional[str] = None
    bairro: Optional[str] = None
    codigo_municipio: Optional[str] = None
    uf: Optional[str] = None
    cep: Optional[str] = None


class NFSeContato(FiscalBaseModel):
    telefone: Optional[str] = None
    email: Optional[str] = None


class NFSePrestador(FiscalBaseModel):
    cnpj: str
    inscricao_municipal: Optional[str] = None
    razao_social: str
    nome_fantasia: Optional[str] = None
    endereco: Optional[NFSeEndereco] = None
    contato: Optional[NFSeContato] = None


class NFSeTomador(FiscalBaseModel):
    cnpj_cpf: str
    inscricao_municipal: Optional[str] = None
    razao_social: str
    endereco: Optional[NFSeEndereco] = None
    contato: Optional[NFSeContato] = None


class NFSeOrgaoGerador(FiscalBaseModel):
    codigo_municipio: Optional[str] = None
    uf: Optional[str] = None


class NFSeDocument(FiscalBaseModel):
    numero: str
    codigo_verificacao: Optional[str] = None
    data_emissao: str
    rps: NFSeRps
    competencia: str
    outras_informacoes: Optional[str] = None
    valores: NFSeValores
    item_lista_servico: str
    codigo_tributacao_municipio: str
    discriminacao: str
    codigo_municipio: str
    prestador: NFSePrestador
    tomador: NFSeTomador
    orgao_gerador: Optional[NFSeOrgaoGerador] = None
