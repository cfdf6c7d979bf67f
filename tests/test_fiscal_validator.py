import pytest

from fiscal_schemas.manual_entry import DocumentKind, FiscalHeader, ManualProductItem
from fiscal_validator import (
    access_key_check_digit,
    describe_access_key,
    is_valid_access_key,
    is_valid_cnpj,
    is_valid_cpf,
    only_digits,
    validate_cnpj,
    validate_emitter,
    validate_manual_header,
    validate_manual_items,
    validate_product_taxes,
    validate_recipient,
    validate_service_data,
    validate_transport,
)

VALID_CNPJ = '11.222.333/0001-81'
VALID_CPF = '529.982.247-25'
ACCESS_KEY = '31251219537752003482550010000750031327461407'


def make_header(**overrides) -> dict:
    header = {
        'number': '75003',
        'series': '1',
        'accessKey': ACCESS_KEY,
        'issueDate': '2025-12-04',
        'emitterCnpj': VALID_CNPJ,
        'total': '1.234,56',
        'kind': 'produto',
    }
    header.update(overrides)
    return header


def make_address(**overrides) -> dict:
    address = {'city': 'VESPASIANO', 'uf': 'MG', 'cep': '33206240'}
    address.update(overrides)
    return address


# ---------------------------------------------------------------------------
# CNPJ / CPF / chave de acesso
# ---------------------------------------------------------------------------


def test_known_valid_cnpj():
    assert is_valid_cnpj(VALID_CNPJ)
    assert is_valid_cnpj('11222333000181')


@pytest.mark.parametrize('last_two', ['80', '82', '71', '91', '00'])
def test_cnpj_check_digit_mutation_is_rejected(last_two):
    assert not is_valid_cnpj('112223330001' + last_two)


@pytest.mark.parametrize(
    'value', ['00000000000000', '11111111111111', '1122233300018', '', None, 123]
)
def test_invalid_cnpj(value):
    assert not is_valid_cnpj(value)


def test_validate_cnpj_reports_reason():
    valid, message = validate_cnpj('123')
    assert not valid
    assert '14 dígitos' in message

    valid, message = validate_cnpj('11222333000182')
    assert not valid
    assert message == 'Segundo dígito verificador inválido'


def test_cpf():
    assert is_valid_cpf(VALID_CPF)
    assert is_valid_cpf('52998224725')
    assert not is_valid_cpf('52998224724')
    assert not is_valid_cpf('11111111111')
    assert not is_valid_cpf('5299822472')
    assert not is_valid_cpf(None)


def test_access_key_is_a_length_gate():
    assert is_valid_access_key('12345678901234567890123456789012345678901234')
    assert is_valid_access_key('0' * 44)
    assert is_valid_access_key('3125 1219 5377 5200 3482 5500 1000 0750 0313 2746 1407')
    assert not is_valid_access_key('1' * 43)
    assert not is_valid_access_key('1' * 45)
    assert not is_valid_access_key(None)


def test_only_digits():
    assert only_digits('11.222.333/0001-81') == '11222333000181'
    assert only_digits(None) == ''


def test_access_key_check_digit_matches_describe():
    body = ACCESS_KEY[:43]
    digit = access_key_check_digit(body)
    key = body + str(digit)

    info = describe_access_key(key)

    assert info['dv_valido'] is True
    assert info['uf'] == '31'
    assert info['ano_mes'] == '2512'
    assert info['cnpj'] == '19537752003482'
    assert info['modelo'] == '55'
    assert info['serie'] == '001'
    assert info['numero'] == '000075003'


def test_describe_access_key_detects_wrong_digit():
    body = ACCESS_KEY[:43]
    wrong = (access_key_check_digit(body) + 1) % 10
    assert describe_access_key(body + str(wrong))['dv_valido'] is False


def test_describe_access_key_requires_44_digits():
    assert describe_access_key('123') is None


# ---------------------------------------------------------------------------
# Cabeçalho
# ---------------------------------------------------------------------------


def test_complete_product_header_is_valid():
    result = validate_manual_header(make_header())
    assert result.is_valid
    assert result.errors == {}


def test_service_header_does_not_require_access_key():
    result = validate_manual_header(make_header(kind='servico', accessKey=''))
    assert result.is_valid


def test_product_header_requires_access_key():
    result = validate_manual_header(make_header(accessKey=''))
    assert not result.is_valid
    assert result.errors['accessKey'] == 'Chave de acesso (44 dígitos) é obrigatória'


def test_product_header_rejects_short_access_key():
    result = validate_manual_header(make_header(accessKey='1234'))
    assert 'accessKey' in result.errors


def test_blank_product_header_accumulates_errors():
    blank = {
        'number': '',
        'series': '',
        'accessKey': '',
        'issueDate': '',
        'emitterCnpj': '',
        'total': '',
        'kind': 'produto',
    }
    result = validate_manual_header(blank)

    assert not result.is_valid
    assert set(result.errors) == {
        'number',
        'series',
        'issueDate',
        'emitterCnpj',
        'total',
        'accessKey',
    }
    assert result.errors['total'] == 'Valor total deve ser maior que zero'


def test_avulso_only_requires_number_date_and_total():
    result = validate_manual_header(
        make_header(kind='avulso', series='', emitterCnpj='', accessKey='')
    )
    assert result.is_valid


def test_invalid_emitter_cnpj():
    result = validate_manual_header(make_header(emitterCnpj='11.222.333/0001-82'))
    assert result.errors == {'emitterCnpj': 'CNPJ do emitente inválido'}


@pytest.mark.parametrize('total', ['0', '0,00', '-5', 'abc'])
def test_total_must_be_positive(total):
    result = validate_manual_header(make_header(total=total))
    assert result.errors['total'] == 'Valor total deve ser maior que zero'


def test_header_accepts_model_and_enum():
    header = FiscalHeader(
        number='1',
        series='1',
        issue_date='2025-01-01',
        emitter_cnpj=VALID_CNPJ,
        total=10.5,
        kind=DocumentKind.SERVICO,
    )
    assert validate_manual_header(header).is_valid


def test_unknown_kind_is_reported_not_raised():
    result = validate_manual_header(make_header(kind='xyz'))
    assert not result.is_valid
    assert 'kind' in result.errors


# ---------------------------------------------------------------------------
# Itens
# ---------------------------------------------------------------------------


def test_items_are_required():
    result = validate_manual_items('produto', [])
    assert not result.is_valid
    assert result.errors[0].index == -1
    assert result.errors[0].message == 'Inclua pelo menos um item'


def test_items_must_be_a_list():
    result = validate_manual_items('produto', None)
    assert not result.is_valid
    assert result.errors[0].index == -1


def test_single_product_item_is_valid():
    items = [{'description': 'Parafuso', 'quantity': 10, 'unitPrice': 1.5}]
    assert validate_manual_items('produto', items).is_valid


def test_single_service_item_is_valid():
    items = [{'description': 'Monitoramento', 'netValue': 200, 'issValue': 20}]
    assert validate_manual_items(DocumentKind.SERVICO, items).is_valid


def test_product_item_errors_are_collected_per_index():
    items = [
        ManualProductItem(description='Ok', quantity=1, unit_price=0),
        {'description': '', 'quantity': 0, 'unitPrice': -1},
    ]
    result = validate_manual_items('produto', items)

    assert not result.is_valid
    assert [e.index for e in result.errors] == [1, 1, 1]
    assert [e.message for e in result.errors] == [
        'Descrição é obrigatória',
        'Quantidade deve ser maior que zero',
        'Valor unitário inválido',
    ]


def test_service_item_errors():
    items = [{'description': 'Serviço', 'netValue': 0, 'issValue': -1}]
    result = validate_manual_items('servico', items)

    assert [e.message for e in result.errors] == [
        'Valor líquido deve ser maior que zero',
        'ISS inválido',
    ]


def test_avulso_items_follow_service_rules():
    items = [{'description': 'Recibo', 'netValue': 50}]
    assert validate_manual_items('avulso', items).is_valid


def test_non_numeric_item_value_becomes_item_error():
    items = [{'description': 'Parafuso', 'quantity': 'muitos', 'unitPrice': 1}]
    result = validate_manual_items('produto', items)

    assert not result.is_valid
    assert result.errors[0].index == 0
    assert 'quantity' in result.errors[0].message


# ---------------------------------------------------------------------------
# Emitente, destinatário, transporte, impostos, serviço
# ---------------------------------------------------------------------------


def test_valid_emitter():
    emitter = {'cnpj': VALID_CNPJ, 'name': 'ORGUEL', 'address': make_address()}
    assert validate_emitter(emitter).is_valid


def test_emitter_without_address():
    result = validate_emitter({'cnpj': '123', 'name': ''})
    assert result.errors == {
        'cnpj': 'CNPJ do emitente inválido',
        'name': 'Nome/Razão Social do emitente é obrigatório',
        'city': 'Cidade do emitente é obrigatória',
        'uf': 'UF do emitente é obrigatória',
        'cep': 'CEP do emitente é obrigatório',
    }


@pytest.mark.parametrize('document', [VALID_CNPJ, VALID_CPF])
def test_recipient_accepts_cnpj_or_cpf(document):
    recipient = {'cnpjCpf': document, 'name': 'BBM', 'address': make_address()}
    assert validate_recipient(recipient).is_valid


def test_recipient_with_invalid_document():
    recipient = {'cnpjCpf': '52998224700', 'name': 'BBM', 'address': make_address()}
    result = validate_recipient(recipient)
    assert result.errors == {'cnpjCpf': 'CPF/CNPJ do destinatário inválido'}


def test_transport():
    assert validate_transport({'modFrete': '0'}).is_valid

    result = validate_transport(
        {
            'modFrete': '',
            'transporter': {'cnpj': '16561409000200'},
            'volume': {'quantity': -1},
        }
    )
    assert set(result.errors) == {'modFrete', 'transporterCnpj', 'volumeQuantity'}


def test_transport_without_transporter_cnpj_is_valid():
    result = validate_transport({'modFrete': '9', 'transporter': {'name': 'Correio'}})
    assert result.is_valid


def test_product_taxes():
    valid = {'vBC': 27.7, 'pICMS': 7, 'vICMS': 1.94, 'ipi': {'vBC': 0, 'pIPI': 0}}
    assert validate_product_taxes(valid).is_valid
    assert validate_product_taxes({}).is_valid

    result = validate_product_taxes(
        {
            'vBC': -1,
            'pICMS': 101,
            'vICMS': -1,
            'ipi': {'vBC': -1, 'pIPI': 120, 'vIPI': -2},
        }
    )
    assert set(result.errors) == {'vBC', 'pICMS', 'vICMS', 'ipiVBC', 'ipiPI', 'ipiVI'}


def test_service_data():
    service = {
        'itemListaServico': '1102',
        'codigoTributacaoMunicipio': '1102',
        'discriminacao': 'Monitoramento de alarme',
        'codigoMunicipio': '1302603',
        'valores': {'valorServicos': 346, 'aliquota': 2, 'valorIss': 6.92},
    }
    assert validate_service_data(service).is_valid


def test_service_data_missing_everything():
    result = validate_service_data({})
    assert set(result.errors) == {
        'itemListaServico',
        'codigoTributacaoMunicipio',
        'discriminacao',
        'codigoMunicipio',
        'valorServicos',
    }


def test_service_data_value_ranges():
    result = validate_service_data(
        {
            'itemListaServico': '1102',
            'codigoTributacaoMunicipio': '1102',
            'discriminacao': 'X',
            'codigoMunicipio': '1302603',
            'valores': {
                'valorServicos': 100,
                'aliquota': 150,
                'valorIss': -1,
                'valorLiquidoNfse': -1,
            },
        }
    )
    assert result.errors == {
        'aliquota': 'Alíquota inválida',
        'valorIss': 'Valor de ISS inválido',
        'valorLiquidoNfse': 'Valor líquido inválido',
    }


@pytest.mark.parametrize('kind', ['Servico', ' SERVICO ', DocumentKind.SERVICO])
def test_header_and_items_normalise_kind_alike(kind):
    header = validate_manual_header(make_header(kind=kind, accessKey=''))
    items = validate_manual_items(kind, [{'description': 'Monitoramento', 'netValue': 10}])

    assert header.is_valid
    assert items.is_valid
