import hashlib
import logging

import pytest

from fiscal_xml.nfse_builder import build_nfse_xml
from fiscal_xml.nfse_parser import DESCRICAO_PADRAO, parse_nfse_xml

from factories import make_nfse_params

NFSE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<ConsultarLoteRpsResposta xmlns="http://www.abrasf.org.br/nfse.xsd">
  <ListaNfse>
    <CompNfse>
      <Nfse versao="2.01">
        <InfNfse Id="NFS12738">
          <Numero>12738</Numero>
          <CodigoVerificacao>2B9B.5DE5.C27E</CodigoVerificacao>
          <DataEmissao>2025-12-01T12:58:26</DataEmissao>
          <IdentificacaoRps>
            <Numero>6585</Numero>
            <Serie>2</Serie>
            <Tipo>1</Tipo>
          </IdentificacaoRps>
          <Competencia>2025-12-01</Competencia>
          <OutrasInformacoes>REFERENTE AO SERVIÇO DE MONITORAMENTO</OutrasInformacoes>
          <Servico>
            <Valores>
              <ValorServicos>346.00</ValorServicos>
              <ValorPis>2.25</ValorPis>
              <ValorCofins>10.38</ValorCofins>
              <IssRetido>1</IssRetido>
              <ValorIss>6.92</ValorIss>
              <BaseCalculo>346.00</BaseCalculo>
              <Aliquota>0.0200</Aliquota>
              <ValorLiquidoNfse>326.45</ValorLiquidoNfse>
            </Valores>
            <ItemListaServico>1102</ItemListaServico>
            <Discriminacao>SERVIÇO DE MONITORAMENTO DE ALARME</Discriminacao>
            <CodigoMunicipio>1302603</CodigoMunicipio>
          </Servico>
          <PrestadorServico>
            <IdentificacaoPrestador>
              <Cnpj>13684457000104</Cnpj>
              <InscricaoMunicipal>13822201</InscricaoMunicipal>
            </IdentificacaoPrestador>
            <RazaoSocial>3D SERVICOS EMPRESARIAIS LTDA</RazaoSocial>
          </PrestadorServico>
          <TomadorServico>
            <IdentificacaoTomador>
              <CpfCnpj><Cnpj>13844973000159</Cnpj></CpfCnpj>
              <InscricaoMunicipal>20035101</InscricaoMunicipal>
            </IdentificacaoTomador>
            <RazaoSocial>BBM SERVICOS, ALUGUEL DE MAQUINAS E TECNOLOGIA LTDA</RazaoSocial>
          </TomadorServico>
        </InfNfse>
      </Nfse>
    </CompNfse>
  </ListaNfse>
</ConsultarLoteRpsResposta>"""


def make_inf_nfse(body: str) -> str:
    return f'<CompNfse><Nfse><InfNfse><Numero>99</Numero>{body}</InfNfse></Nfse></CompNfse>'


@pytest.fixture
def nfse():
    return parse_nfse_xml(NFSE_XML)


def test_header(nfse):
    assert nfse.numero == '12738'
    assert nfse.serie == '2'
    assert nfse.codigo_verificacao == '2B9B.5DE5.C27E'
    assert nfse.data_emissao == '2025-12-01T12:58:26'
    assert nfse.competencia == '2025-12-01'


def test_values(nfse):
    valores = nfse.valores
    assert valores.valor_servicos == 346.0
    assert valores.valor_pis == 2.25
    assert valores.valor_cofins == 10.38
    assert valores.valor_iss == 6.92
    assert valores.base_calculo == 346.0
    assert valores.aliquota == 0.02
    assert valores.valor_liquido == 326.45
    assert valores.valor_deducoes == 0.0
    assert valores.iss_retido is True


def test_parties(nfse):
    assert nfse.prestador.cnpj_cpf == '13684457000104'
    assert nfse.prestador.razao_social == '3D SERVICOS EMPRESARIAIS LTDA'
    assert nfse.prestador.inscricao_municipal == '13822201'

    assert nfse.tomador.cnpj_cpf == '13844973000159'
    assert nfse.tomador.razao_social.startswith('BBM SERVICOS')
    assert nfse.tomador.inscricao_municipal == '20035101'


def test_discriminacao_becomes_single_item(nfse):
    assert nfse.discriminacao == 'SERVIÇO DE MONITORAMENTO DE ALARME'
    assert len(nfse.itens) == 1

    item = nfse.itens[0]
    assert item.numero == 1
    assert item.descricao == 'SERVIÇO DE MONITORAMENTO DE ALARME'
    assert item.unidade == 'SV'
    assert item.quantidade == 1.0
    assert item.valor_unitario == 346.0
    assert item.valor_total == 346.0
    assert item.valor_iss == 6.92


def test_hash_is_sha256_of_content(nfse):
    assert nfse.xml_hash == hashlib.sha256(NFSE_XML.encode('utf-8')).hexdigest()


def test_discriminacao_falls_back_to_other_information():
    xml = make_inf_nfse(
        '<OutrasInformacoes>Locação de andaimes</OutrasInformacoes>'
        '<Servico><Valores><ValorServicos>10</ValorServicos></Valores></Servico>'
    )
    nfse = parse_nfse_xml(xml)

    assert nfse.discriminacao == 'Locação de andaimes'
    assert nfse.itens[0].valor_total == 10.0


def test_discriminacao_default_text():
    nfse = parse_nfse_xml(make_inf_nfse(''))

    assert nfse.numero == '99'
    assert nfse.discriminacao == DESCRICAO_PADRAO
    assert nfse.itens[0].valor_total == 0.0
    assert nfse.valores.iss_retido is False


@pytest.mark.parametrize('flag, expected', [('1', True), ('2', False), ('true', True)])
def test_iss_retido_flag(flag, expected):
    xml = make_inf_nfse(f'<Servico><Valores><IssRetido>{flag}</IssRetido></Valores></Servico>')
    assert parse_nfse_xml(xml).valores.iss_retido is expected


def test_tomador_with_cpf_and_nome():
    xml = make_inf_nfse(
        '<Tomador><IdentificacaoTomador><CpfCnpj><Cpf>52998224725</Cpf></CpfCnpj>'
        '</IdentificacaoTomador><Nome>Maria da Silva</Nome></Tomador>'
    )
    nfse = parse_nfse_xml(xml)

    assert nfse.tomador.cnpj_cpf == '52998224725'
    assert nfse.tomador.razao_social == 'Maria da Silva'


def test_prestador_without_identification_block():
    xml = make_inf_nfse(
        '<Prestador><Cnpj>13684457000104</Cnpj>'
        '<RazaoSocial>3D SERVICOS</RazaoSocial></Prestador>'
    )
    nfse = parse_nfse_xml(xml)

    assert nfse.prestador.cnpj_cpf == '13684457000104'
    assert nfse.prestador.razao_social == '3D SERVICOS'


def test_generated_xml_can_be_read_back():
    nfse = parse_nfse_xml(build_nfse_xml(make_nfse_params()))

    assert nfse.numero == '12738'
    assert nfse.serie == '2'
    assert nfse.prestador.cnpj_cpf == '13684457000104'
    assert nfse.tomador.cnpj_cpf == '13844973000159'
    assert nfse.valores.valor_servicos == 346.0
    assert nfse.discriminacao == 'SERVIÇO DE MONITORAMENTO DE ALARME'


@pytest.mark.parametrize(
    'xml',
    [
        '',
        'nada',
        '<CompNfse><Nfse>',
        '<CompNfse><Nfse></Nfse></CompNfse>',
        '<NFe><infNFe Id="NFe1"/></NFe>',
    ],
)
def test_invalid_or_foreign_xml_returns_none(xml):
    assert parse_nfse_xml(xml) is None


def test_successful_parse_logs_only_at_debug(caplog):
    caplog.set_level(logging.INFO, logger='fiscal_xml')
    assert parse_nfse_xml(NFSE_XML) is not None
    assert caplog.records == []
