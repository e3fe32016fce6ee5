"""Ingredient usage request schemas."""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class IngredientUsageCreate(BaseModel):
    """Create ingredient usage for a product at a branch."""
    ingredient_id: str = Field(..., min_length=1)
    branch_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    unit_id: str = Field(..., min_length=1, description="Amount unit")
    price: Optional[Decimal] = Field(None, ge=0)
    currency_id: Optional[str] = Field(None, description="Price unit; required when price is set")

    @model_validator(mode="after")
    def price_needs_currency(self):
        if self.price is not None and not self.currency_id:
            raise ValueError("currency_id is required when price is set")
        return self


class IngredientUsageUpdate(BaseModel):
    """Update ingredient usage (all fields optional)."""
    ingredient_id: Optional[str] = None
    branch_id: Optional[str] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    unit_id: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    currency_id: Optional[str] = None
