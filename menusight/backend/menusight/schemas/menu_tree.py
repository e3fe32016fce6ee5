"""Menu category tree schemas."""
from typing import List, Optional

from pydantic import BaseModel, Field

VIEW_ADMIN = "admin"
VIEW_CUSTOMER = "customer"


class CategoryTreeNode(BaseModel):
    """One category assignment in tree order, annotated with its depth."""
    id: str
    category_id: Optional[str] = None
    name: str = ""
    parent_id: Optional[str] = Field(None, description="Parent assignment id as emitted (None for roots, including cycle breaks)")
    order: float = 0
    depth: int = 0
    indent: float = 0
    is_active: bool = True


class CategoryTreeResponse(BaseModel):
    menu_id: str
    view: str
    nodes: List[CategoryTreeNode] = Field(default_factory=list)


class ParentOption(BaseModel):
    """Candidate for the "choose a parent" selector."""
    id: str
    label: str
    depth: int = 0


class MenuCategoryCreate(BaseModel):
    """Add a category to a menu, optionally under an existing assignment."""
    category_id: str = Field(..., min_length=1)
    parent_id: Optional[str] = None


class MenuCategoryReparent(BaseModel):
    """Move an assignment under another one; parent_id None makes it a root."""
    parent_id: Optional[str] = None


class MenuProductSummary(BaseModel):
    """Active product placed in a category subtree of a menu."""
    id: str
    product_id: Optional[str] = None
    product_name: str = ""
    category_id: Optional[str] = None
    order: float = 0
