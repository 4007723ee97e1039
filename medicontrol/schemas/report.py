# schemas/report.py

from pydantic import BaseModel, ConfigDict, Field


class UnitsSoldResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_units_sold: int = Field(..., alias="total_vendas")
