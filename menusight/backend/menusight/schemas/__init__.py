"""
Pydantic schemas for back-office records and request/response validation
"""
from .catalog import (
    Branch, BranchSalesMethod, Category, Company, MenuCategory, MenuProduct,
    Product, ProductIngredient, ProductPrice, SalesMethod,
)
from .menu_tree import CategoryTreeNode, CategoryTreeResponse, ParentOption
from .propagation import BatchResult, PairFailure, PairOutcome, PairRef
from .pricing import BranchCompleteness, CompletenessReport, EffectivePrice
from .ingredient import IngredientUsageCreate, IngredientUsageUpdate

__all__ = [
    "Branch",
    "BranchSalesMethod",
    "Category",
    "Company",
    "MenuCategory",
    "MenuProduct",
    "Product",
    "ProductIngredient",
    "ProductPrice",
    "SalesMethod",
    "CategoryTreeNode",
    "CategoryTreeResponse",
    "ParentOption",
    "BatchResult",
    "PairFailure",
    "PairOutcome",
    "PairRef",
    "BranchCompleteness",
    "CompletenessReport",
    "EffectivePrice",
    "IngredientUsageCreate",
    "IngredientUsageUpdate",
]
