from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


class ShoppingItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    quantity: str = Field("1", max_length=50)
    category: str = Field("general", max_length=50)
    purchased: bool = False

    @field_validator("name")
    def strip_name(cls, v):
        return v.strip()

    @field_validator("category")
    def normalize_category(cls, v):
        return (v or "general").lower().strip() or "general"


class ShoppingBulkCreate(BaseModel):
    items: List[ShoppingItemCreate] = Field(..., min_length=1)


class ShoppingItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    quantity: Optional[str] = Field(None, max_length=50)
    category: Optional[str] = Field(None, max_length=50)
    purchased: Optional[bool] = None

    @field_validator("category")
    def normalize_category(cls, v):
        if v is None:
            return v
        return v.lower().strip() or "general"
