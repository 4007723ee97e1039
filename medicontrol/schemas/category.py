from pydantic import BaseModel, ConfigDict, Field


class CategoryCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias="nome", min_length=1)


class Category(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    name: str = Field("", alias="nome")
