import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any, Iterable, Mapping, Optional, Union

from fiscal_schemas.manual_entry import DocumentKind
from fiscal_schemas.validation_result import TotalConsistencyResult

logger = logging.getLogger(__name__)

# Diferença máxima (exclusiva) entre o total digitado e a soma dos itens.
TOTAL_TOLERANCE = Decimal('0.01')

CENTAVOS = Decimal('0.01')

Number = Union[int, float, Decimal]


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Converte número (ou texto numérico no formato Python) para Decimal.

    Args:
        value: Valor a converter

    Returns:
        Decimal finito, ou None se o valor for ausente ou inválido
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        dec = value
    else:
        try:
            dec = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            return None
    return dec if dec.is_finite() else None


def quantize(value: Decimal, places: Decimal = CENTAVOS) -> Decimal:
    """Arredonda meio-para-cima (ROUND_HALF_UP) na quantidade de casas pedida."""
    with localcontext() as ctx:
        # dígitos inteiros + casas pedidas precisam caber na precisão
        ctx.prec = max(28, value.adjusted() - places.as_tuple().exponent + 2)
        return value.quantize(places, rounding=ROUND_HALF_UP)


def round_money(value: Any) -> float:
    """Arredonda para 2 casas; ausente ou inválido vira 0.0."""
    dec = to_decimal(value)
    if dec is None:
        return 0.0
    return float(quantize(dec))


def parse_money(value: Union[str, Number, None]) -> float:
    """
    Converte um valor monetário em formato brasileiro para float.

    Números são apenas arredondados. Em textos, "." é separador de milhar e
    "," é separador decimal: "1.234,56" -> 1234.56.

    Texto vazio ou que não pode ser interpretado vira 0.0 em vez de erro,
    para manter as somas seguras. Quem precisa distinguir "vazio" de "zero"
    deve checar o texto antes (como faz validate_manual_header).

    Returns:
        Valor arredondado em 2 casas decimais
    """
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return round_money(value)

    text = str(value or '').strip()
    if not text:
        return 0.0

    normalized = text.replace('.', '').replace(',', '.')
    dec = to_decimal(normalized)
    if dec is None:
        logger.debug(f"Valor monetário '{text}' não reconhecido. Usando 0")
        return 0.0

    return float(quantize(dec))


def _is_product_kind(kind: Union[DocumentKind, str, None]) -> bool:
    return DocumentKind.coerce(kind) == DocumentKind.PRODUTO


def item_value(item: Any, field: str, alias: str) -> Decimal:
    """
    Lê um campo numérico de um item (modelo pydantic ou dict com chave
    snake_case ou camelCase). Ausente ou inválido conta como zero.
    """
    if isinstance(item, Mapping):
        raw = item.get(alias, item.get(field))
    else:
        raw = getattr(item, field, None)
    return to_decimal(raw) or Decimal('0')


def compute_items_total(
    kind: Union[DocumentKind, str], items: Iterable[Any]
) -> float:
    """
    Soma esperada dos itens: quantidade x valor unitário para produtos,
    soma dos valores líquidos para serviços.
    """
    if not isinstance(items, (list, tuple)):
        return 0.0

    total = Decimal('0')
    if _is_product_kind(kind):
        for item in items:
            total += item_value(item, 'quantity', 'quantity') * item_value(
                item, 'unit_price', 'unitPrice'
            )
    else:
        for item in items:
            total += item_value(item, 'net_value', 'netValue')

    return float(quantize(total))


def validate_total_consistency(
    total: Union[str, Number, None],
    kind: Union[DocumentKind, str],
    items: Iterable[Any],
) -> TotalConsistencyResult:
    """
    Confere o total digitado contra a soma calculada dos itens.

    A diferença precisa ser menor que um centavo (TOTAL_TOLERANCE).
    """
    provided = parse_money(total)
    expected = compute_items_total(kind, items)

    difference = abs(Decimal(str(provided)) - Decimal(str(expected)))
    is_valid = difference < TOTAL_TOLERANCE

    if not is_valid:
        logger.debug(
            f'Total divergente: informado {provided:.2f}, calculado {expected:.2f}'
        )

    return TotalConsistencyResult(
        is_valid=is_valid, expected=expected, provided=provided
    )


def _percent_of(base: Optional[Number], rate: Optional[Number]) -> float:
    base_dec = to_decimal(base) or Decimal('0')
    rate_dec = to_decimal(rate) or Decimal('0')
    return float(quantize(base_dec * rate_dec / Decimal('100')))


def compute_icms(v_bc: Optional[Number], p_icms: Optional[Number]) -> float:
    """ICMS = base de cálculo x alíquota / 100, em 2 casas."""
    return _percent_of(v_bc, p_icms)


def compute_ipi(v_bc: Optional[Number], p_ipi: Optional[Number]) -> float:
    """IPI = base de cálculo x alíquota / 100, em 2 casas."""
    return _percent_of(v_bc, p_ipi)


def compute_iss(base: Optional[Number], aliquota: Optional[Number]) -> float:
    """ISS = base de cálculo x alíquota / 100, em 2 casas."""
    return _percent_of(base, aliquota)
