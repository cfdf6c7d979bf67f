import pytest

from fiscal_formatter import (
    FORMA_PAGAMENTO,
    MODALIDADE_FRETE,
    describe_code,
    format_access_key,
    format_cnpj_cpf,
    format_currency,
    items_dataframe,
    status_label,
    totals_dataframe,
)
from fiscal_schemas.nfe_data import ImpostosItem, ItemNFE, NFEData, TotaisNFE


def make_nfe() -> NFEData:
    return NFEData(
        numero='75003',
        itens=[
            ItemNFE(
                numero=1,
                codigo='0901030046',
                descricao='CONJUNTO PARAFUSO',
                ncm='73084000',
                cfop='6910',
                unidade='PC',
                quantidade=2.0,
                valor_unitario=13.85,
                valor_total=27.7,
                impostos=ImpostosItem(icms_valor=1.94),
            ),
            ItemNFE(numero=2, descricao='ARRUELA', quantidade=1.0, valor_total=0.3),
        ],
        totais=TotaisNFE(valor_produtos=28.0, valor_nota=28.0, valor_icms=1.94),
    )


@pytest.mark.parametrize(
    'value, expected',
    [
        ('11222333000181', '11.222.333/0001-81'),
        ('11.222.333/0001-81', '11.222.333/0001-81'),
        ('52998224725', '529.982.247-25'),
        ('123', '123'),
        (None, ''),
    ],
)
def test_format_cnpj_cpf(value, expected):
    assert format_cnpj_cpf(value) == expected


def test_format_access_key():
    assert format_access_key('31251219537752003482550010000750031327461407') == (
        '3125 1219 5377 5200 3482 5500 1000 0750 0313 2746 1407'
    )
    assert format_access_key('') == ''


@pytest.mark.parametrize(
    'value, expected',
    [
        (1234.5, 'R$ 1.234,50'),
        (0, 'R$ 0,00'),
        (1000000, 'R$ 1.000.000,00'),
        (-10, '-R$ 10,00'),
        (None, 'R$ 0,00'),
    ],
)
def test_format_currency(value, expected):
    assert format_currency(value) == expected


def test_status_label():
    assert status_label('Autorizado o uso da NF-e') == 'Autorizada'
    assert status_label('Uso Denegado') == 'Uso Denegado'
    assert status_label('') == 'Sem protocolo'


def test_describe_code():
    assert describe_code(FORMA_PAGAMENTO, '17') == 'PIX'
    assert describe_code(MODALIDADE_FRETE, '9') == 'Sem Frete'
    assert describe_code(FORMA_PAGAMENTO, '77') == '77'


def test_items_dataframe():
    df = items_dataframe(make_nfe())

    assert len(df) == 2
    assert list(df.columns) == [
        'Item',
        'Código',
        'Descrição',
        'NCM',
        'CFOP',
        'Unidade',
        'Quantidade',
        'Valor Unitário',
        'Valor Total',
        'ICMS',
        'IPI',
    ]
    assert df.iloc[0]['Descrição'] == 'CONJUNTO PARAFUSO'
    assert df.iloc[0]['ICMS'] == 1.94
    assert df.iloc[1]['Valor Total'] == 0.3


def test_items_dataframe_without_items_keeps_columns():
    df = items_dataframe(NFEData())
    assert df.empty
    assert 'Valor Total' in df.columns


def test_totals_dataframe():
    df = totals_dataframe(make_nfe())
    values = dict(zip(df['Descrição'], df['Valor']))

    assert len(df) == 16
    assert values['Valor Total da Nota'] == 'R$ 28,00'
    assert values['Valor ICMS'] == 'R$ 1,94'
    assert values['Frete'] == 'R$ 0,00'
