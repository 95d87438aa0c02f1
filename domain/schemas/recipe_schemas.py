"""Pydantic schemas for recipe documents and recipe generation."""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


class RecipeIngredient(BaseModel):
    """Embedded ingredient in a recipe."""

    name: str = Field(..., min_length=1, max_length=200)
    quantity: str = ""
    grams: Optional[float] = Field(None, ge=0)


class RecipeStep(BaseModel):
    """Embedded step in a recipe."""

    step: str = Field(..., min_length=1)
    ingredient: Optional[str] = None


class RecipeBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    ingredients: List[RecipeIngredient] = Field(..., min_length=1)
    steps: List[RecipeStep] = Field(default_factory=list)
    calories_per_serving: float = Field(0, ge=0)
    protein_per_serving: float = Field(0, ge=0)
    carbs_per_serving: float = Field(0, ge=0)
    fat_per_serving: float = Field(0, ge=0)
    fiber_per_serving: float = Field(0, ge=0)
    servings: int = Field(1, ge=1)
    tags: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    prep_time: Optional[int] = Field(None, ge=0)
    cook_time: Optional[int] = Field(None, ge=0)
    category: Optional[str] = None
    external_id: Optional[str] = None

    @field_validator("title")
    def strip_title(cls, v):
        return v.strip()

    @field_validator("tags")
    def normalize_tags(cls, v):
        return [t.lower().strip() for t in v if t and t.strip()]


class RecipeCreate(RecipeBase):
    pass


class RecipeUpdate(RecipeBase):
    """Full replacement of the editable recipe fields."""


class RecipeGenerateRequest(BaseModel):
    ingredients: List[str] = Field(..., min_length=1)
    count: int = Field(3, ge=1)
    offset: int = Field(0, ge=0)

    @field_validator("ingredients")
    def clean_ingredients(cls, v):
        cleaned = [i.strip() for i in v if i and i.strip()]
        if not cleaned:
            raise ValueError("at least one ingredient is required")
        return cleaned
