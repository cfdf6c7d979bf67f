"""
Modelos do lançamento manual de documentos fiscais.
"""
from enum import Enum
from typing import Any, Optional, Union

from pydantic import field_validator

from fiscal_schemas.base_model import FiscalBaseModel


class DocumentKind(str, Enum):
    PRODUTO = 'produto'
    SERVICO = 'servico'
    AVULSO = 'avulso'

    @classmethod
    def coerce(cls, value: object) -> Optional['DocumentKind']:
        """Aceita o enum ou o texto ('produto', 'servico', 'avulso')."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class FiscalHeader(FiscalBaseModel):
    """Cabeçalho digitado pelo usuário (valores ainda em texto)."""

    number: Optional[str] = None
    series: Optional[str] = None
    access_key: Optional[str] = None
    issue_date: Optional[str] = None
    emitter_cnpj: Optional[str] = None
    total: Optional[Union[str, float]] = None
    kind: DocumentKind

    @field_validator('kind', mode='before')
    @classmethod
    def normalize_kind(cls, value: Any) -> Any:
        kind = DocumentKind.coerce(value)
        return value if kind is None else kind


class ManualProductItem(FiscalBaseModel):
    code: Optional[str] = None
    description: Optional[str] = None
    ncm: Optional[str] = None
    quantity: Optional[float] = None
    unit: Optional[str] = None
    unit_price: Optional[float] = None


class ManualServiceItem(FiscalBaseModel):
    service_code: Optional[str] = None
    description: Optional[str] = None
    net_value: Optional[float] = None
    iss_value: Optional[float] = None
