"""Schemas for price completeness and effective prices."""
from typing import List, Optional

from pydantic import BaseModel, Field

from menusight.schemas.propagation import BatchResult

BRANCH_SKIPPED = "skipped"
BRANCH_COMPLETE = "complete"
BRANCH_INCOMPLETE = "incomplete"


class BranchCompleteness(BaseModel):
    """Per-branch result: skipped when the branch has no linked sales methods."""
    branch_id: str
    branch_name: str = ""
    status: str = Field(..., description="skipped | complete | incomplete")
    linked_method_ids: List[str] = Field(default_factory=list)
    missing_method_ids: List[str] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.status != BRANCH_INCOMPLETE


class CompletenessReport(BaseModel):
    product_id: str
    product_name: str = ""
    complete: bool
    branches: List[BranchCompleteness] = Field(default_factory=list)
    warning: Optional[str] = None


class EffectivePrice(BaseModel):
    """Price that applies for one sales method at one branch."""
    method_id: str
    method_name: str = ""
    price_id: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    source: Optional[str] = Field(None, description="branch | default | None when no price exists")
    display: str = "--"


class PricePropagationResponse(BaseModel):
    """Batch result of a price save plus the product's completeness after it."""
    result: BatchResult
    completeness: Optional[CompletenessReport] = None
