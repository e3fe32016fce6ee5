"""
Propagation schemas: requests and the itemized batch result.
"""
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field

BATCH_OK = "ok"
BATCH_PARTIAL = "partial"
BATCH_FAILED = "failed"
BATCH_EMPTY = "empty"


class PairRef(BaseModel):
    """One (branch, sales method) unit of work."""
    branch_id: str = Field(..., min_length=1)
    method_id: str = Field(..., min_length=1)
    branch_name: Optional[str] = None


class PairOutcome(BaseModel):
    branch_id: str
    branch_name: str = ""
    method_id: str
    already_present: bool = False
    record_id: Optional[str] = None


class PairFailure(BaseModel):
    branch_id: str
    branch_name: str = ""
    method_id: str
    reason: str


class BatchResult(BaseModel):
    """
    Itemized result of a best-effort batch. Applied pairs stay applied even
    when siblings fail; callers may retry only the failures.
    """
    applied: List[PairOutcome] = Field(default_factory=list)
    failures: List[PairFailure] = Field(default_factory=list)

    @computed_field
    @property
    def status(self) -> str:
        if not self.applied and not self.failures:
            return BATCH_EMPTY
        if not self.failures:
            return BATCH_OK
        if not self.applied:
            return BATCH_FAILED
        return BATCH_PARTIAL

    @computed_field
    @property
    def warning_message(self) -> Optional[str]:
        """Single user-facing message listing each failed branch and reason."""
        if not self.failures:
            return None
        lines = [
            f"{f.branch_name or f.branch_id} ({f.method_id}): {f.reason}"
            for f in self.failures
        ]
        total = len(self.applied) + len(self.failures)
        return f"{len(self.failures)} of {total} assignments failed: " + "; ".join(lines)

    def failed_pairs(self) -> List[PairRef]:
        return [
            PairRef(branch_id=f.branch_id, method_id=f.method_id, branch_name=f.branch_name or None)
            for f in self.failures
        ]


class SalesMethodPropagationRequest(BaseModel):
    method_ids: List[str] = Field(..., min_length=1)
    apply_to_all_siblings: bool = Field(default=False, description="Apply to every branch of the same company")


class RetryRequest(BaseModel):
    pairs: List[PairRef] = Field(..., min_length=1)


class PricePropagationRequest(BaseModel):
    branch_id: str = Field(..., min_length=1, description="Reference branch")
    method_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0)
    currency_id: Optional[str] = None
    apply_to_all_siblings: bool = Field(default=False)
    # Explicit targets (e.g. retrying failed branches); must share the reference branch's company
    branch_ids: Optional[List[str]] = None


class BranchSummary(BaseModel):
    id: str
    name: str = ""
    company_id: Optional[str] = None


class SalesMethodSummary(BaseModel):
    id: str
    name: str = ""
    linked: bool = False
