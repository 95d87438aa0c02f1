"""Request schemas for AI-backed endpoints (nutrition estimation, food analysis, fitness chat)."""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, Dict, List, Optional


class NutritionEstimateRequest(BaseModel):
    food_name: str = Field(..., min_length=1, max_length=200)
    quantity: float = Field(100, gt=0)
    unit: str = Field("g", max_length=20)

    @field_validator("food_name")
    def strip_food_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("food_name is required")
        return v


class FoodTextRequest(BaseModel):
    text: str = Field(..., max_length=500)

    @field_validator("text")
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("text is required")
        return v


class FoodImageRequest(BaseModel):
    image_url: Optional[str] = None
    image_base64: Optional[str] = None
    mime_type: str = "image/jpeg"

    @model_validator(mode="after")
    def require_image(self):
        if not self.image_url and not self.image_base64:
            raise ValueError("image_url or image_base64 is required")
        return self


class ChatHistoryMessage(BaseModel):
    """
    One message of the client-echoed conversation. Assistant messages of the
    training flow carry ``stage`` and ``data`` so the next turn can resume it.
    """

    role: str
    content: Any = None
    stage: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


class FitnessChatRequest(BaseModel):
    message: str = Field(..., max_length=1000)
    conversation_history: List[ChatHistoryMessage] = Field(default_factory=list)

    @field_validator("message")
    def strip_message(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("message is required")
        return v
