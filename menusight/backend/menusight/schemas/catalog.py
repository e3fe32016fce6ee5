"""
Back-office record schemas (companies, branches, menus, categories, products,
sales methods, prices, ingredient usages).

Field names are snake_case; aliases match the back-office JSON (`_id`,
`salesMethod`, `isActive`, ...). Relation fields are typed `Ref`: a bare id
or a populated object. Read them through `menusight.utils.refs`.
"""
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field

from menusight.utils.refs import ref_id, ref_name, ref_object

Ref = Optional[Union[str, Dict[str, Any]]]


class BackofficeRecord(BaseModel):
    """Base for every record the back office returns."""
    id: str = Field(..., alias="_id")

    class Config:
        populate_by_name = True
        extra = "ignore"


class Company(BackofficeRecord):
    name: str = ""


class Branch(BackofficeRecord):
    """Branch: a physical location belonging to a company."""
    name: str = ""
    company: Ref = None
    is_deleted: bool = Field(default=False, alias="isDeleted")

    @property
    def company_id(self) -> Optional[str]:
        return ref_id(self.company)


class SalesMethod(BackofficeRecord):
    """Channel a product is sold through (counter sale, delivery, ...)."""
    name: str = ""
    description: Optional[str] = None
    parent: Ref = None


class Category(BackofficeRecord):
    name: str = ""
    is_active: bool = Field(default=True, alias="isActive")


class Product(BackofficeRecord):
    name: str = ""
    description: Optional[str] = None
    company: Ref = None
    default_sales_method: Ref = Field(default=None, alias="defaultSalesMethod")
    is_active: bool = Field(default=True, alias="isActive")

    @property
    def company_id(self) -> Optional[str]:
        return ref_id(self.company)


class MenuCategory(BackofficeRecord):
    """
    Category assignment: one occurrence of a Category inside a Menu.
    `parent` points to another MenuCategory of the same menu (not to a Category).
    """
    menu: Ref = None
    category: Ref = None
    parent: Ref = None
    order: float = 0
    is_active: bool = Field(default=True, alias="isActive")

    @property
    def category_id(self) -> Optional[str]:
        return ref_id(self.category)

    @property
    def parent_id(self) -> Optional[str]:
        return ref_id(self.parent)

    @property
    def name(self) -> str:
        return ref_name(self.category)

    @property
    def active(self) -> bool:
        """Active flag of the underlying Category when populated, else the assignment's own flag."""
        category = ref_object(self.category)
        if category is not None and "isActive" in category:
            return bool(category.get("isActive"))
        return self.is_active


class MenuProduct(BackofficeRecord):
    """Product placed in a menu under a Category (by Category id, not MenuCategory id)."""
    menu: Ref = None
    category: Ref = None
    product: Ref = None
    order: float = 0
    is_active: bool = Field(default=True, alias="isActive")

    @property
    def category_id(self) -> Optional[str]:
        return ref_id(self.category)

    @property
    def product_id(self) -> Optional[str]:
        return ref_id(self.product)

    @property
    def product_active(self) -> bool:
        """False when the product is not populated or the product itself is inactive."""
        product = ref_object(self.product)
        if product is None:
            return False
        return bool(product.get("isActive", True))


class BranchSalesMethod(BackofficeRecord):
    """Link between a branch and a sales method."""
    branch: Ref = None
    sales_method: Ref = Field(default=None, alias="salesMethod")
    is_active: bool = Field(default=True, alias="isActive")

    @property
    def branch_id(self) -> Optional[str]:
        return ref_id(self.branch)

    @property
    def sales_method_id(self) -> Optional[str]:
        return ref_id(self.sales_method)


class ProductPrice(BackofficeRecord):
    """
    Price of a product for one sales method.
    With a branch it is branch-specific; without one it is the method-level default.
    """
    product: Ref = None
    sales_method: Ref = Field(default=None, alias="salesMethod")
    price: Optional[float] = None
    currency_unit: Ref = Field(default=None, alias="currencyUnit")
    branch: Ref = None
    company: Ref = None

    @property
    def product_id(self) -> Optional[str]:
        return ref_id(self.product)

    @property
    def sales_method_id(self) -> Optional[str]:
        return ref_id(self.sales_method)

    @property
    def branch_id(self) -> Optional[str]:
        return ref_id(self.branch)


class ProductIngredient(BackofficeRecord):
    """Ingredient usage: quantity (and optional cost) of an ingredient in a product at a branch."""
    product: Ref = None
    ingredient: Ref = None
    branch: Ref = None
    amount: float = 0
    unit: Ref = None
    price: Optional[float] = None
    currency_unit: Ref = Field(default=None, alias="currencyUnit")

    @property
    def product_id(self) -> Optional[str]:
        return ref_id(self.product)
