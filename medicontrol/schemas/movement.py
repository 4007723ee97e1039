from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MovementKind(str, Enum):
    ENTRY = "entry"
    EXIT = "exit"


# Labels used by the dashboard
KIND_ALIASES = {
    "entrada": MovementKind.ENTRY,
    "saida": MovementKind.EXIT,
    "saída": MovementKind.EXIT,
}


def parse_kind(value) -> MovementKind | None:
    if isinstance(value, MovementKind):
        return value
    key = str(value).strip().lower()
    if key in KIND_ALIASES:
        return KIND_ALIASES[key]
    try:
        return MovementKind(key)
    except ValueError:
        return None


class MovementCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    medication_id: str = Field(..., alias="medicamento_id")
    kind: str = Field(..., alias="tipo")
    quantity: int = Field(..., alias="quantidade")
    note: str = Field("", alias="observacao")

    @field_validator("note", mode="before")
    @classmethod
    def _none_note(cls, value):
        return value or ""


class Movement(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    medication_id: str = Field(..., alias="medicamento_id")
    kind: MovementKind = Field(..., alias="tipo")
    quantity: int = Field(..., alias="quantidade")
    created_at: datetime = Field(..., alias="data")
    note: str = Field("", alias="observacao")


class MovementWithMedication(Movement):
    medication_name: str = Field("", alias="nome_medicamento")
    medication_form: str = Field("", alias="tipo_medicamento")
