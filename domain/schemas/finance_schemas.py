from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
import datetime

from domain.enums import PaymentMethod


class BillItem(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    price: float = Field(..., ge=0)
    quantity: float = Field(1, ge=0)


class ExpenseCreate(BaseModel):
    amount: float = Field(..., ge=0)
    category: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    date: Optional[datetime.date] = None
    bill_image_url: Optional[str] = None
    extracted_items: List[BillItem] = Field(default_factory=list)
    location: Optional[str] = Field(None, max_length=200)
    payment_method: PaymentMethod = PaymentMethod.CASH


class ExpenseUpdate(BaseModel):
    amount: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    date: Optional[datetime.date] = None
    extracted_items: Optional[List[BillItem]] = None
    location: Optional[str] = Field(None, max_length=200)
    payment_method: Optional[PaymentMethod] = None


class IncomeCreate(BaseModel):
    amount: float = Field(..., ge=0)
    category: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    source: Optional[str] = Field(None, max_length=200)
    date: Optional[datetime.date] = None


class IncomeUpdate(BaseModel):
    amount: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    source: Optional[str] = Field(None, max_length=200)
    date: Optional[datetime.date] = None


class BillAnalysisRequest(BaseModel):
    image_url: Optional[str] = None
    image_base64: Optional[str] = None
    mime_type: str = "image/jpeg"

    @model_validator(mode="after")
    def require_image(self):
        if not self.image_url and not self.image_base64:
            raise ValueError("image_url or image_base64 is required")
        return self


class BillTextRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=20000)
