"""
Formatos de retorno dos validadores.

Nenhum validador levanta exceção por dado inválido: todos devolvem um destes
modelos, para que a interface exiba todos os erros de uma vez.
"""
from typing import Dict, List

from pydantic import Field

from fiscal_schemas.base_model import FiscalBaseModel


class ValidationResult(FiscalBaseModel):
    is_valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_errors(cls, errors: Dict[str, str]) -> 'ValidationResult':
        return cls(is_valid=not errors, errors=dict(errors))


class ItemError(FiscalBaseModel):
    index: int
    message: str


class ItemsValidationResult(FiscalBaseModel):
    is_valid: bool
    errors: List[ItemError] = Field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: List[ItemError]) -> 'ItemsValidationResult':
        return cls(is_valid=not errors, errors=list(errors))


class TotalConsistencyResult(FiscalBaseModel):
    is_valid: bool
    expected: float
    provided: float
