from datetime import date, datetime
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from medicontrol.schemas.category import Category


def _normalize_expiry(value):
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    value = str(value).strip()
    if value:
        # Accept full timestamps but keep only the calendar date
        date.fromisoformat(value[:10])
        return value[:10]
    return value


ExpiryDate = Annotated[str, BeforeValidator(_normalize_expiry)]


class MedicationCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field("", alias="nome")
    manufacturer: str = Field("", alias="fabricante")
    form: str = Field("", alias="tipo")
    registry_code: str = Field("", alias="codigo_anvisa")
    quantity: int = Field(0, alias="quantidade", ge=0)
    expiry: ExpiryDate = Field("", alias="validade")
    price: float = Field(0.0, alias="preco", ge=0)
    category_id: str | None = Field(None, alias="categoria_id")


class MedicationUpdate(BaseModel):
    """Mutable catalog fields. Stock only changes through movements and sales."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias="nome", min_length=1)
    manufacturer: str = Field("", alias="fabricante")
    form: str = Field("", alias="tipo")
    registry_code: str = Field("", alias="codigo_anvisa")
    expiry: ExpiryDate = Field("", alias="validade")
    price: float = Field(0.0, alias="preco", ge=0)
    category_id: str | None = Field(None, alias="categoria_id")

    @model_validator(mode="before")
    @classmethod
    def _reject_quantity(cls, data):
        if isinstance(data, dict) and ("quantidade" in data or "quantity" in data):
            raise ValueError("Quantity cannot be edited; record a stock movement instead")
        return data


class Medication(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = Field("", alias="nome")
    manufacturer: str = Field("", alias="fabricante")
    form: str = Field("", alias="tipo")
    registry_code: str = Field("", alias="codigo_anvisa")
    quantity: int = Field(0, alias="quantidade")
    expiry: str = Field("", alias="validade")
    price: float = Field(0.0, alias="preco")
    created_at: datetime | None = Field(None, alias="criado_em")
    category_id: str = Field("", alias="categoria_id")
    category: Category = Field(default_factory=Category, alias="categoria")


class RegistryLookupResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias="nome")
    manufacturer: str = Field(..., alias="fabricante")
    exists: bool
