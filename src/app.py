from typing import Dict, List, Optional

import pandas as pd
import streamlit as st

from fiscal_calculator import compute_items_total, validate_total_consistency
from fiscal_formatter import (
    format_access_key,
    format_cnpj_cpf,
    format_currency,
    items_dataframe,
    status_label,
    totals_dataframe,
)
from fiscal_schemas.manual_entry import DocumentKind
from fiscal_schemas.nfe_data import Empresa, NFEData
from fiscal_schemas.nfse_data import NFSeData
from fiscal_settings import VIEWER_PAGE_TITLE, configure_logging
from fiscal_validator import (
    describe_access_key,
    validate_manual_header,
    validate_manual_items,
)
from fiscal_xml.nfe_parser import parse_nfe_xml
from fiscal_xml.nfse_parser import parse_nfse_xml

configure_logging()

KIND_LABELS = {
    DocumentKind.PRODUTO: "NF de Produto",
    DocumentKind.SERVICO: "NF de Serviço",
    DocumentKind.AVULSO: "Documento Avulso",
}

# coluna exibida -> chave aceita pelos modelos de item
PRODUCT_COLUMNS = {
    "Código": "code",
    "Descrição": "description",
    "NCM": "ncm",
    "Quantidade": "quantity",
    "Unidade": "unit",
    "Valor Unitário": "unitPrice",
}
SERVICE_COLUMNS = {
    "Código do Serviço": "serviceCode",
    "Descrição": "description",
    "Valor Líquido": "netValue",
    "ISS": "issValue",
}


def main():
    st.set_page_config(layout="wide", page_title=VIEWER_PAGE_TITLE)

    st.title(VIEWER_PAGE_TITLE)
    st.subheader("Visualização e lançamento de documentos fiscais")
    st.divider()

    tabs = st.tabs(["Visualizar XML", "Lançamento manual"])

    with tabs[0]:
        show_xml_viewer()

    with tabs[1]:
        show_manual_entry()


def show_xml_viewer():
    uploaded_file = st.file_uploader(
        "Arraste e solte o XML da NF-e ou NFS-e",
        type=["xml"],
        key="xml_uploader",
    )
    if uploaded_file is None:
        st.info("Envie um arquivo XML para visualizar o documento.")
        return

    content = uploaded_file.getvalue()

    nfe = parse_nfe_xml(content)
    if nfe is not None:
        show_nfe(nfe)
        return

    nfse = parse_nfse_xml(content)
    if nfse is not None:
        show_nfse(nfse)
        return

    st.error(
        f"Não foi possível ler '{uploaded_file.name}': o arquivo não é uma NF-e "
        "nem uma NFS-e reconhecida."
    )


def show_company(title: str, company: Empresa):
    st.write(f"**{title}**")
    st.markdown(
        f"""
        - {company.razao_social or '-'}
        - CNPJ/CPF: {format_cnpj_cpf(company.cnpj) or '-'}
        - IE: {company.inscricao_estadual or '-'}
        - {company.endereco.logradouro} {company.endereco.numero}, {company.endereco.bairro}
        - {company.endereco.cidade}/{company.endereco.uf} {company.endereco.cep}
        """
    )


def show_nfe(nfe: NFEData):
    with st.expander("📄 NF-e", expanded=True):
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Número", nfe.numero or "-")
        c2.metric("Série", nfe.serie or "-")
        c3.metric("Valor Total", format_currency(nfe.totais.valor_nota))
        c4.metric("Status", status_label(nfe.status))

        st.write(f"**Chave de acesso:** {nfe.chave_acesso_formatada or '-'}")
        key_info = describe_access_key(nfe.chave_acesso)
        if key_info is not None and not key_info["dv_valido"]:
            st.warning("Dígito verificador da chave de acesso não confere.")
        st.write(
            f"**Emissão:** {nfe.data_emissao or '-'}  |  "
            f"**Natureza:** {nfe.natureza_operacao or '-'}  |  "
            f"**Protocolo:** {nfe.protocolo or '-'}"
        )

    with st.expander("🏢 Emitente e Destinatário", expanded=True):
        col1, col2 = st.columns(2)
        with col1:
            show_company("Emitente", nfe.emitente)
        with col2:
            show_company("Destinatário", nfe.destinatario)

    with st.expander("📦 Itens", expanded=True):
        st.dataframe(items_dataframe(nfe), width="stretch", hide_index=True)

    with st.expander("💰 Totais", expanded=False):
        st.table(totals_dataframe(nfe))

    with st.expander("🚚 Transporte e Pagamento", expanded=False):
        col1, col2 = st.columns(2)
        with col1:
            st.write(f"**Frete:** {nfe.transporte.modalidade_frete or '-'}")
            if nfe.transporte.transportadora is not None:
                st.write(
                    f"**Transportadora:** {nfe.transporte.transportadora.razao_social}"
                )
            if nfe.transporte.volumes is not None:
                st.write(
                    f"**Volumes:** {nfe.transporte.volumes.quantidade:g} "
                    f"{nfe.transporte.volumes.especie}"
                )
        with col2:
            st.write(
                f"**Pagamento:** {nfe.pagamento.forma_pagamento or '-'} "
                f"({nfe.pagamento.indicador or '-'}) "
                f"{format_currency(nfe.pagamento.valor)}"
            )
            if nfe.parcelas:
                st.table(
                    pd.DataFrame(
                        [
                            {
                                "Parcela": p.numero,
                                "Vencimento": p.vencimento,
                                "Valor": format_currency(p.valor),
                            }
                            for p in nfe.parcelas
                        ]
                    )
                )

    if nfe.informacoes_adicionais:
        with st.expander("📝 Informações Adicionais", expanded=False):
            st.code(nfe.informacoes_adicionais, language=None)

    st.caption(f"SHA-256: {nfe.xml_hash}")


def show_nfse(nfse: NFSeData):
    with st.expander("📄 NFS-e", expanded=True):
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Número", nfse.numero or "-")
        c2.metric("Verificação", nfse.codigo_verificacao or "-")
        c3.metric("Valor dos Serviços", format_currency(nfse.valores.valor_servicos))
        c4.metric("ISS", format_currency(nfse.valores.valor_iss))
        st.write(
            f"**Emissão:** {nfse.data_emissao or '-'}  |  "
            f"**Competência:** {nfse.competencia or '-'}  |  "
            f"**ISS retido:** {'Sim' if nfse.valores.iss_retido else 'Não'}"
        )

    with st.expander("🏢 Prestador e Tomador", expanded=True):
        col1, col2 = st.columns(2)
        for col, title, party in (
            (col1, "Prestador", nfse.prestador),
            (col2, "Tomador", nfse.tomador),
        ):
            with col:
                st.write(f"**{title}**")
                st.markdown(
                    f"""
                    - {party.razao_social or '-'}
                    - CNPJ/CPF: {format_cnpj_cpf(party.cnpj_cpf) or '-'}
                    - Inscrição Municipal: {party.inscricao_municipal or '-'}
                    """
                )

    with st.expander("🧾 Serviço", expanded=True):
        st.code(nfse.discriminacao, language=None)
        st.dataframe(
            pd.DataFrame([item.model_dump() for item in nfse.itens]),
            width="stretch",
            hide_index=True,
        )

    st.caption(f"SHA-256: {nfse.xml_hash}")


def editor_rows(df: pd.DataFrame, columns: Dict[str, str]) -> List[dict]:
    """Linhas do editor como dicts com as chaves dos modelos; linhas vazias saem."""
    df = df.rename(columns=columns).dropna(how="all")
    df = df.astype(object).where(df.notna(), None)
    return df.to_dict("records")


def show_manual_entry():
    kind = st.radio(
        "Tipo de documento",
        options=list(KIND_LABELS),
        format_func=lambda k: KIND_LABELS[k],
        horizontal=True,
        key="manual_kind",
    )
    columns = PRODUCT_COLUMNS if kind == DocumentKind.PRODUTO else SERVICE_COLUMNS

    with st.form("manual_entry_form"):
        c1, c2, c3 = st.columns(3)
        number = c1.text_input("Número")
        series = c2.text_input("Série")
        issue_date = c3.text_input("Data de emissão", placeholder="2025-12-04")
        c1, c2, c3 = st.columns(3)
        emitter_cnpj = c1.text_input("CNPJ do emitente")
        access_key = c2.text_input("Chave de acesso")
        total = c3.text_input("Valor total", placeholder="1.234,56")

        st.write("**Itens**")
        items_df = st.data_editor(
            pd.DataFrame(columns=list(columns)),
            num_rows="dynamic",
            width="stretch",
            key=f"items_editor_{kind.value}",
        )
        submitted = st.form_submit_button("Validar", type="primary")

    if not submitted:
        return

    header = {
        "number": number,
        "series": series,
        "accessKey": access_key,
        "issueDate": issue_date,
        "emitterCnpj": emitter_cnpj,
        "total": total,
        "kind": kind,
    }
    items = editor_rows(items_df, columns)

    show_validation_results(header, kind, items)


def show_validation_results(header: dict, kind: DocumentKind, items: List[dict]):
    header_result = validate_manual_header(header)
    items_result = validate_manual_items(kind, items)
    consistency = validate_total_consistency(header["total"], kind, items)

    with st.expander("🔍 Resultado da Validação", expanded=True):
        c1, c2, c3 = st.columns(3)
        c1.metric("Cabeçalho", "OK" if header_result.is_valid else "Com erros")
        c2.metric("Itens", "OK" if items_result.is_valid else "Com erros")
        c3.metric(
            "Soma dos itens",
            format_currency(compute_items_total(kind, items)),
            delta=None if consistency.is_valid else "Diverge do total",
            delta_color="inverse",
        )

        if header_result.errors:
            st.table(
                pd.DataFrame(
                    list(header_result.errors.items()), columns=["Campo", "Erro"]
                )
            )
        if items_result.errors:
            st.table(
                pd.DataFrame(
                    [
                        {
                            "Item": "Lista" if e.index < 0 else str(e.index + 1),
                            "Erro": e.message,
                        }
                        for e in items_result.errors
                    ]
                )
            )

        message: Optional[str] = None
        if not consistency.is_valid:
            message = (
                f"Total informado {format_currency(consistency.provided)} difere da "
                f"soma dos itens {format_currency(consistency.expected)}."
            )
        if header_result.is_valid and items_result.is_valid and message is None:
            st.success("Documento válido para lançamento.")
        elif message:
            st.warning(message)

        if kind == DocumentKind.PRODUTO and header.get("accessKey"):
            st.caption(f"Chave: {format_access_key(header['accessKey'])}")


if __name__ == "__main__":
    main()
