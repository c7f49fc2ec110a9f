"""Record models for the remote store tables.

Field aliases are the store's column names; attribute names are what the
rest of the application uses.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StoreRecord(BaseModel):
    """Base class for records read from the backing store."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class CatalogItem(StoreRecord):
    """Crane record (``guindastes`` table).

    Capacity is not a column: it is derived from ``name`` by the catalog
    optimizer.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str | None = Field(default=None, alias="subgrupo")
    model: str | None = Field(default=None, alias="modelo")
    image_url: str | None = Field(default=None, alias="imagem_url")
    load_chart_url: str | None = Field(default=None, alias="grafico_carga_url")
    extra_images: list[Any] | None = Field(default=None, alias="imagens_adicionais")
    weight_kg: str | None = Field(default=None, alias="peso_kg")
    reference_code: str | None = Field(default=None, alias="codigo_referencia")
    configuration: str | None = Field(default=None, alias="configuração")
    has_control: bool | str | None = Field(default=None, alias="tem_contr")
    description: str | None = Field(default=None, alias="descricao")
    not_included: str | None = Field(default=None, alias="nao_incluido")
    finame: str | None = None
    ncm: str | None = None
    updated_at: str | None = None


class CatalogPage(BaseModel):
    """One page of the bulk catalog fetch."""

    data: list[CatalogItem]
    count: int


class VendorRecord(StoreRecord):
    """Vendor account (``users`` table)."""

    id: int
    name: str | None = Field(default=None, alias="nome")
    email: str
    role: str | None = Field(default=None, alias="tipo")
    region: str | None = Field(default=None, alias="regiao")
    password_hash: str | None = Field(default=None, alias="senha", exclude=True)
