import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from fiscal_calculator import parse_money
from fiscal_schemas.manual_entry import (
    DocumentKind,
    FiscalHeader,
    ManualProductItem,
    ManualServiceItem,
)
from fiscal_schemas.parties import (
    EmitterData,
    PartyAddress,
    ProductTaxes,
    RecipientData,
    ServiceData,
    ServiceValues,
    TransportData,
)
from fiscal_schemas.validation_result import (
    ItemError,
    ItemsValidationResult,
    ValidationResult,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar('ModelT', bound=BaseModel)

CNPJ_WEIGHTS_1 = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
CNPJ_WEIGHTS_2 = [6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]

ACCESS_KEY_LENGTH = 44


# ---------------------------------------------------------------------------
# Identificadores (CNPJ, CPF, chave de acesso)
# ---------------------------------------------------------------------------


def only_digits(value: Any) -> str:
    """Remove tudo que não for dígito. None vira ''."""
    if value is None:
        return ''
    return re.sub(r'[^0-9]', '', str(value))


normalize_cnpj_cpf = only_digits


def _mod11_digit(total: int) -> int:
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def validate_cnpj(cnpj: Any) -> Tuple[bool, str]:
    """
    Valida CNPJ usando algoritmo oficial brasileiro.

    Args:
        cnpj: CNPJ para validar (com ou sem formatação)

    Returns:
        Tupla (válido, mensagem)
    """
    cnpj_clean = only_digits(cnpj)

    if len(cnpj_clean) != 14:
        return (
            False,
            f'CNPJ deve ter 14 dígitos (encontrado: {len(cnpj_clean)})',
        )

    if cnpj_clean in [d * 14 for d in '0123456789']:
        return False, 'CNPJ com todos os dígitos iguais é inválido'

    sum_1 = sum(int(cnpj_clean[i]) * CNPJ_WEIGHTS_1[i] for i in range(12))
    if int(cnpj_clean[12]) != _mod11_digit(sum_1):
        return False, 'Primeiro dígito verificador inválido'

    sum_2 = sum(int(cnpj_clean[i]) * CNPJ_WEIGHTS_2[i] for i in range(13))
    if int(cnpj_clean[13]) != _mod11_digit(sum_2):
        return False, 'Segundo dígito verificador inválido'

    return True, 'CNPJ válido'


def validate_cpf(cpf: Any) -> Tuple[bool, str]:
    """
    Valida CPF usando algoritmo oficial brasileiro.

    Args:
        cpf: CPF para validar (com ou sem formatação)

    Returns:
        Tupla (válido, mensagem)
    """
    cpf_clean = only_digits(cpf)

    if len(cpf_clean) != 11:
        return (
            False,
            f'CPF deve ter 11 dígitos (encontrado: {len(cpf_clean)})',
        )

    if cpf_clean in [d * 11 for d in '0123456789']:
        return False, 'CPF com todos os dígitos iguais é inválido'

    sum_1 = sum(int(cpf_clean[i]) * (10 - i) for i in range(9))
    if int(cpf_clean[9]) != _mod11_digit(sum_1):
        return False, 'Primeiro dígito verificador inválido'

    sum_2 = sum(int(cpf_clean[i]) * (11 - i) for i in range(10))
    if int(cpf_clean[10]) != _mod11_digit(sum_2):
        return False, 'Segundo dígito verificador inválido'

    return True, 'CPF válido'


def is_valid_cnpj(value: Any) -> bool:
    return validate_cnpj(value)[0]


def is_valid_cpf(value: Any) -> bool:
    return validate_cpf(value)[0]


def is_valid_access_key(value: Any) -> bool:
    """Chave de acesso da NF-e: apenas confere os 44 dígitos."""
    return len(only_digits(value)) == ACCESS_KEY_LENGTH


def access_key_check_digit(key_body: str) -> int:
    """
    Calcula o dígito verificador (módulo 11) dos 43 primeiros dígitos da
    chave de acesso. Pesos de 2 a 9 aplicados da direita para a esquerda.
    """
    digits = only_digits(key_body)[: ACCESS_KEY_LENGTH - 1]
    weights = list(range(2, 10)) * 6
    total = sum(
        int(digit) * weights[pos] for pos, digit in enumerate(reversed(digits))
    )
    remainder = total % 11
    return 0 if remainder in (0, 1) else 11 - remainder


def describe_access_key(value: Any) -> Optional[Dict[str, Any]]:
    """
    Decompõe a chave de acesso em seus campos.

    Estrutura: UF(2) + AAMM(4) + CNPJ(14) + Modelo(2) + Série(3) +
               Número(9) + Tipo(1) + Código(8) + DV(1) = 44 dígitos

    Returns:
        Dict com os campos e 'dv_valido', ou None se não tiver 44 dígitos
    """
    key = only_digits(value)
    if len(key) != ACCESS_KEY_LENGTH:
        return None

    return {
        'uf': key[0:2],
        'ano_mes': key[2:6],
        'cnpj': key[6:20],
        'modelo': key[20:22],
        'serie': key[22:25],
        'numero': key[25:34],
        'tipo_emissao': key[34:35],
        'codigo': key[35:43],
        'dv': key[43:44],
        'dv_valido': int(key[43]) == access_key_check_digit(key[:43]),
    }


# ---------------------------------------------------------------------------
# Auxiliares
# ---------------------------------------------------------------------------


def _is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def _field_keys(model_cls: Type[BaseModel]) -> Dict[str, str]:
    """Mapeia nome do atributo e alias para o alias (chave usada nos erros)."""
    keys = {}
    for name, info in model_cls.model_fields.items():
        alias = info.alias or name
        keys[name] = alias
        keys[alias] = alias
    return keys


def _load(
    model_cls: Type[ModelT], data: Any
) -> Tuple[Optional[ModelT], Dict[str, str]]:
    """
    Constrói o modelo a partir de um dict (ou aceita o próprio modelo).
    Erros de tipo viram erros de campo, nunca exceção.
    """
    if isinstance(data, model_cls):
        return data, {}

    try:
        return model_cls.model_validate(data if data is not None else {}), {}
    except ValidationError as e:
        keys = _field_keys(model_cls)
        errors: Dict[str, str] = {}
        for err in e.errors():
            loc = err.get('loc') or ('__root__',)
            field = keys.get(str(loc[0]), str(loc[0]))
            errors.setdefault(field, f'Valor inválido para {field}')
        logger.debug(f'{model_cls.__name__} com campos inválidos: {list(errors)}')
        return None, errors


def _out_of_percent_range(value: Optional[float]) -> bool:
    return value is not None and (value < 0 or value > 100)


# ---------------------------------------------------------------------------
# Lançamento manual
# ---------------------------------------------------------------------------


def validate_manual_header(
    params: Union[FiscalHeader, Dict[str, Any]]
) -> ValidationResult:
    """
    Valida o cabeçalho de um documento fiscal digitado manualmente.

    Todos os campos são conferidos (os erros se acumulam). Série e CNPJ do
    emitente só são exigidos para NF de produto ou serviço; a chave de acesso
    de 44 dígitos só para NF de produto.

    Args:
        params: FiscalHeader ou dict com as mesmas chaves

    Returns:
        ValidationResult com erros por campo (number, series, accessKey,
        issueDate, emitterCnpj, total)
    """
    header, errors = _load(FiscalHeader, params)
    if header is None:
        return ValidationResult.from_errors(errors)

    if _is_blank(header.number):
        errors['number'] = 'Número do documento é obrigatório'
    if _is_blank(header.issue_date):
        errors['issueDate'] = 'Data de emissão é obrigatória'
    if _is_blank(header.total):
        errors['total'] = 'Valor total é obrigatório'

    if header.kind != DocumentKind.AVULSO:
        if _is_blank(header.series):
            errors['series'] = 'Série da NF é obrigatória'
        if _is_blank(header.emitter_cnpj) or not is_valid_cnpj(
            header.emitter_cnpj
        ):
            errors['emitterCnpj'] = 'CNPJ do emitente inválido'

        if header.kind == DocumentKind.PRODUTO:
            if _is_blank(header.access_key) or not is_valid_access_key(
                header.access_key
            ):
                errors[
                    'accessKey'
                ] = 'Chave de acesso (44 dígitos) é obrigatória'

    if parse_money(header.total) <= 0:
        errors['total'] = 'Valor total deve ser maior que zero'

    return ValidationResult.from_errors(errors)


def _product_item_errors(item: ManualProductItem) -> List[str]:
    messages = []
    if _is_blank(item.description):
        messages.append('Descrição é obrigatória')
    if item.quantity is None or item.quantity <= 0:
        messages.append('Quantidade deve ser maior que zero')
    if item.unit_price is None or item.unit_price < 0:
        messages.append('Valor unitário inválido')
    return messages


def _service_item_errors(item: ManualServiceItem) -> List[str]:
    messages = []
    if _is_blank(item.description):
        messages.append('Descrição é obrigatória')
    if item.net_value is None or item.net_value <= 0:
        messages.append('Valor líquido deve ser maior que zero')
    if item.iss_value is not None and item.iss_value < 0:
        messages.append('ISS inválido')
    return messages


def validate_manual_items(
    kind: Union[DocumentKind, str], items: Iterable[Any]
) -> ItemsValidationResult:
    """
    Valida os itens de um lançamento manual.

    Produto: descrição, quantidade > 0 e valor unitário >= 0.
    Serviço: descrição, valor líquido > 0 e ISS >= 0 quando informado.
    Coleta os problemas de todos os itens; índice -1 indica erro da lista.
    """
    if not isinstance(items, (list, tuple)) or len(items) == 0:
        return ItemsValidationResult.from_errors(
            [ItemError(index=-1, message='Inclua pelo menos um item')]
        )

    document_kind = DocumentKind.coerce(kind)
    if document_kind is None:
        return ItemsValidationResult.from_errors(
            [ItemError(index=-1, message=f'Tipo de documento inválido: {kind}')]
        )

    if document_kind == DocumentKind.PRODUTO:
        model_cls, check = ManualProductItem, _product_item_errors
    else:
        model_cls, check = ManualServiceItem, _service_item_errors

    errors: List[ItemError] = []
    for index, raw_item in enumerate(items):
        item, load_errors = _load(model_cls, raw_item)
        if item is None:
            errors.extend(
                ItemError(index=index, message=message)
                for message in load_errors.values()
            )
            continue
        errors.extend(
            ItemError(index=index, message=message) for message in check(item)
        )

    return ItemsValidationResult.from_errors(errors)


# ---------------------------------------------------------------------------
# Emitente, destinatário, transporte, impostos e serviço
# ---------------------------------------------------------------------------


def _address_errors(
    address: Optional[PartyAddress], owner: str, errors: Dict[str, str]
) -> None:
    address = address or PartyAddress()
    if _is_blank(address.city):
        errors['city'] = f'Cidade do {owner} é obrigatória'
    if _is_blank(address.uf):
        errors['uf'] = f'UF do {owner} é obrigatória'
    if _is_blank(address.cep):
        errors['cep'] = f'CEP do {owner} é obrigatório'


def validate_emitter(emitter: Union[EmitterData, Dict[str, Any]]) -> ValidationResult:
    data, errors = _load(EmitterData, emitter)
    if data is None:
        return ValidationResult.from_errors(errors)

    if _is_blank(data.cnpj) or not is_valid_cnpj(data.cnpj):
        errors['cnpj'] = 'CNPJ do emitente inválido'
    if _is_blank(data.name):
        errors['name'] = 'Nome/Razão Social do emitente é obrigatório'
    _address_errors(data.address, 'emitente', errors)

    return ValidationResult.from_errors(errors)


def validate_recipient(
    recipient: Union[RecipientData, Dict[str, Any]]
) -> ValidationResult:
    """Destinatário: 14 dígitos valida como CNPJ, qualquer outro como CPF."""
    data, errors = _load(RecipientData, recipient)
    if data is None:
        return ValidationResult.from_errors(errors)

    document = only_digits(data.cnpj_cpf)
    valid = is_valid_cnpj(document) if len(document) == 14 else is_valid_cpf(document)
    if not valid:
        errors['cnpjCpf'] = 'CPF/CNPJ do destinatário inválido'
    if _is_blank(data.name):
        errors['name'] = 'Nome/Razão Social do destinatário é obrigatório'
    _address_errors(data.address, 'destinatário', errors)

    return ValidationResult.from_errors(errors)


def validate_transport(
    transport: Union[TransportData, Dict[str, Any]]
) -> ValidationResult:
    data, errors = _load(TransportData, transport)
    if data is None:
        return ValidationResult.from_errors(errors)

    if _is_blank(data.mod_frete):
        errors['modFrete'] = 'Modalidade de frete é obrigatória'
    if (
        data.transporter
        and data.transporter.cnpj
        and not is_valid_cnpj(data.transporter.cnpj)
    ):
        errors['transporterCnpj'] = 'CNPJ do transportador inválido'
    if (
        data.volume
        and data.volume.quantity is not None
        and data.volume.quantity < 0
    ):
        errors['volumeQuantity'] = 'Quantidade de volumes inválida'

    return ValidationResult.from_errors(errors)


def validate_product_taxes(
    taxes: Union[ProductTaxes, Dict[str, Any]]
) -> ValidationResult:
    """Valores não podem ser negativos; alíquotas ficam entre 0 e 100."""
    data, errors = _load(ProductTaxes, taxes)
    if data is None:
        return ValidationResult.from_errors(errors)

    if data.v_bc is not None and data.v_bc < 0:
        errors['vBC'] = 'Base de cálculo ICMS inválida'
    if _out_of_percent_range(data.p_icms):
        errors['pICMS'] = 'Alíquota ICMS inválida'
    if data.v_icms is not None and data.v_icms < 0:
        errors['vICMS'] = 'Valor ICMS inválido'

    ipi = data.ipi
    if ipi is not None:
        if ipi.v_bc is not None and ipi.v_bc < 0:
            errors['ipiVBC'] = 'Base de cálculo IPI inválida'
        if _out_of_percent_range(ipi.p_ipi):
            errors['ipiPI'] = 'Alíquota IPI inválida'
        if ipi.v_ipi is not None and ipi.v_ipi < 0:
            errors['ipiVI'] = 'Valor IPI inválido'

    return ValidationResult.from_errors(errors)


def validate_service_data(
    service: Union[ServiceData, Dict[str, Any]]
) -> ValidationResult:
    data, errors = _load(ServiceData, service)
    if data is None:
        return ValidationResult.from_errors(errors)

    if _is_blank(data.item_lista_servico):
        errors['itemListaServico'] = 'Item da Lista de Serviço é obrigatório'
    if _is_blank(data.codigo_tributacao_municipio):
        errors[
            'codigoTributacaoMunicipio'
        ] = 'Código de Tributação do Município é obrigatório'
    if _is_blank(data.discriminacao):
        errors['discriminacao'] = 'Discriminação do serviço é obrigatória'
    if _is_blank(data.codigo_municipio):
        errors['codigoMunicipio'] = 'Código do Município é obrigatório'

    values = data.valores or ServiceValues()
    if values.valor_servicos is None or values.valor_servicos <= 0:
        errors['valorServicos'] = 'Valor dos serviços é obrigatório'
    if _out_of_percent_range(values.aliquota):
        errors['aliquota'] = 'Alíquota inválida'
    if values.valor_iss is not None and values.valor_iss < 0:
        errors['valorIss'] = 'Valor de ISS inválido'
    if values.valor_liquido_nfse is not None and values.valor_liquido_nfse < 0:
        errors['valorLiquidoNfse'] = 'Valor líquido inválido'

    return ValidationResult.from_errors(errors)
