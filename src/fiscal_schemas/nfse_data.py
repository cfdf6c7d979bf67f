from typing import List

from pydantic import Field

from fiscal_schemas.base_model import FiscalBaseModel


class ParteNFSe(FiscalBaseModel):
    cnpj_cpf: str = ''
    razao_social: str = ''
    inscricao_municipal: str = ''


class ValoresNFSe(FiscalBaseModel):
    valor_servicos: float = 0.0
    valor_deducoes: float = 0.0
    valor_pis: float = 0.0
    valor_cofins: float = 0.0
    valor_iss: float = 0.0
    base_calculo: float = 0.0
    aliquota: float = 0.0
    iss_retido: bool = False
    valor_liquido: float = 0.0


class ItemNFSe(FiscalBaseModel):
    numero: int = 1
    descricao: str = ''
    unidade: str = 'SV'
    quantidade: float = 1.0
    valor_unitario: float = 0.0
    valor_total: float = 0.0
    valor_iss: float = 0.0
    valor_pis: float = 0.0
    valor_cofins: float = 0.0


class NFSeData(FiscalBaseModel):
    """NFS-e lida do XML, com um único item sintético para a discriminação."""

    numero: str = ''
    serie: str = ''
    codigo_verificacao: str = ''
    data_emissao: str = ''
    competencia: str = ''
    prestador: ParteNFSe = Field(default_factory=ParteNFSe)
    tomador: ParteNFSe = Field(default_factory=ParteNFSe)
    valores: ValoresNFSe = Field(default_factory=ValoresNFSe)
    discriminacao: str = ''
    itens: List[ItemNFSe] = Field(default_factory=list)
    xml_hash: str = ''
