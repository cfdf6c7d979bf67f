from typing import Any, Dict

import pandas as pd

from fiscal_calculator import round_money
from fiscal_schemas.nfe_data import NFEData
from fiscal_validator import only_digits

FORMA_PAGAMENTO: Dict[str, str] = {
    '01': 'Dinheiro',
    '02': 'Cheque',
    '03': 'Cartão de Crédito',
    '04': 'Cartão de Débito',
    '05': 'Crédito Loja',
    '10': 'Vale Alimentação',
    '11': 'Vale Refeição',
    '12': 'Vale Presente',
    '13': 'Vale Combustível',
    '14': 'Duplicata Mercantil',
    '15': 'Boleto Bancário',
    '16': 'Depósito Bancário',
    '17': 'PIX',
    '18': 'Transferência Bancária',
    '19': 'Programa de Fidelidade',
    '90': 'Sem Pagamento',
    '99': 'Outros',
}

INDICADOR_PAGAMENTO: Dict[str, str] = {
    '0': 'À Vista',
    '1': 'A Prazo',
}

MODALIDADE_FRETE: Dict[str, str] = {
    '0': 'Por conta do Emitente',
    '1': 'Por conta do Destinatário',
    '2': 'Por conta de Terceiros',
    '3': 'Transporte Próprio Remetente',
    '4': 'Transporte Próprio Destinatário',
    '9': 'Sem Frete',
}


def describe_code(table: Dict[str, str], code: str) -> str:
    """Descrição do código; código desconhecido é devolvido como veio."""
    return table.get(code, code)


def format_cnpj_cpf(value: Any) -> str:
    """
    Aplica a máscara de CNPJ (00.000.000/0000-00) ou CPF (000.000.000-00).

    Valores com outra quantidade de dígitos são devolvidos sem alteração.
    """
    digits = only_digits(value)
    if len(digits) == 14:
        return f'{digits[:2]}.{digits[2:5]}.{digits[5:8]}/{digits[8:12]}-{digits[12:]}'
    if len(digits) == 11:
        return f'{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}'
    return '' if value is None else str(value)


def format_access_key(value: Any) -> str:
    """Chave de acesso em blocos de 4 dígitos separados por espaço."""
    digits = only_digits(value)
    return ' '.join(digits[i : i + 4] for i in range(0, len(digits), 4))


def format_currency(value: Any) -> str:
    """Valor em reais: 1234.5 -> 'R$ 1.234,50'."""
    amount = round_money(value)
    text = f'{abs(amount):,.2f}'.replace(',', '_').replace('.', ',').replace('_', '.')
    sign = '-' if amount < 0 else ''
    return f'{sign}R$ {text}'


def status_label(status: str) -> str:
    """Rótulo curto do status do protocolo (xMotivo)."""
    if status and 'autoriz' in status.lower():
        return 'Autorizada'
    return status or 'Sem protocolo'


def items_dataframe(nfe: NFEData) -> pd.DataFrame:
    """Tabela de itens da NF-e para exibição."""
    rows = [
        {
            'Item': item.numero,
            'Código': item.codigo,
            'Descrição': item.descricao,
            'NCM': item.ncm,
            'CFOP': item.cfop,
            'Unidade': item.unidade,
            'Quantidade': item.quantidade,
            'Valor Unitário': item.valor_unitario,
            'Valor Total': item.valor_total,
            'ICMS': item.impostos.icms_valor,
            'IPI': item.impostos.ipi_valor,
        }
        for item in nfe.itens
    ]
    columns = [
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
    return pd.DataFrame(rows, columns=columns)


def totals_dataframe(nfe: NFEData) -> pd.DataFrame:
    """Totais da NF-e em duas colunas (descrição, valor formatado)."""
    totais = nfe.totais
    labels = [
        ('Base de Cálculo ICMS', totais.base_calculo_icms),
        ('Valor ICMS', totais.valor_icms),
        ('ICMS Desonerado', totais.valor_icms_desonerado),
        ('Base de Cálculo ST', totais.base_calculo_st),
        ('Valor ST', totais.valor_st),
        ('Valor dos Produtos', totais.valor_produtos),
        ('Frete', totais.valor_frete),
        ('Seguro', totais.valor_seguro),
        ('Desconto', totais.valor_desconto),
        ('II', totais.valor_ii),
        ('IPI', totais.valor_ipi),
        ('PIS', totais.valor_pis),
        ('COFINS', totais.valor_cofins),
        ('Outras Despesas', totais.valor_outros),
        ('Valor Total da Nota', totais.valor_nota),
        ('Total de Tributos', totais.valor_total_tributos),
    ]
    return pd.DataFrame(
        [{'Descrição': label, 'Valor': format_currency(value)} for label, value in labels]
    )
