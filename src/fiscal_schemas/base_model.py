from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class FiscalBaseModel(BaseModel):
    """
    Base imutável dos objetos de valor fiscais.

    Atributos em snake_case; aceita também os nomes camelCase usados pelos
    formulários e rotinas de importação (accessKey, unitPrice, cnpjCpf...).
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        coerce_numbers_to_str=True,
        allow_inf_nan=False,
    )
