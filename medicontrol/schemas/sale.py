# schemas/sale.py

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class SaleItemCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    medication_id: str = Field(..., alias="medicamento_id")
    quantity: int = Field(..., alias="quantidade")


class SaleCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: List[SaleItemCreate] = Field(default_factory=list, alias="itens")


class SaleCreated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sale_id: int = Field(..., alias="venda_id")


class SaleItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    medication_id: str = Field(..., alias="medicamento_id")
    medication_name: str = Field("", alias="nome_medicamento")
    quantity: int = Field(..., alias="quantidade")
    unit_price: float = Field(..., alias="preco_unitario")
    line_total: float = Field(..., alias="total_item")


class SaleSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    created_at: datetime = Field(..., alias="data")
    user_id: int
    item_count: int = Field(..., alias="quantidade_itens")
    total_amount: float = Field(..., alias="total_venda")


class SaleDetail(SaleSummary):
    items: List[SaleItem] = Field(default_factory=list, alias="itens")
