"""
Shared fixtures: an in-memory back office that speaks the BackofficeClient
interface and can be told to fail specific calls.
"""
import threading
from typing import Any, Dict, List, Optional

import pytest

from menusight.exceptions import BackofficeError
from menusight.schemas.catalog import (
    Branch,
    BranchSalesMethod,
    MenuCategory,
    MenuProduct,
    Product,
    ProductIngredient,
    ProductPrice,
    SalesMethod,
)
from menusight.services.backoffice_client import BackofficeClient


class FakeBackoffice(BackofficeClient):
    """
    Back office held in dicts. Relation fields are stored the way the real
    API returns them: sales methods and categories populated, the rest bare ids.

    fail(op, *key) makes the matching call raise BackofficeError, e.g.
    fail("assign_sales_method", "b2", "m2").
    """

    def __init__(self):
        super().__init__(base_url="http://backoffice.test/api", token="test-token", timeout=1)
        self.lock = threading.Lock()
        self.branches: Dict[str, Dict[str, Any]] = {}
        self.methods: Dict[str, Dict[str, Any]] = {}
        self.links: List[Dict[str, Any]] = []
        self.products: Dict[str, Dict[str, Any]] = {}
        self.prices: List[Dict[str, Any]] = []
        self.menu_categories: Dict[str, List[Dict[str, Any]]] = {}
        self.menu_products: Dict[str, List[Dict[str, Any]]] = {}
        self.ingredients: List[Dict[str, Any]] = []
        self.failures: Dict[tuple, str] = {}
        self.calls: List[tuple] = []
        self._seq = 0

    # ----- test setup helpers -----

    def _next_id(self, prefix: str) -> str:
        with self.lock:
            self._seq += 1
            return f"{prefix}{self._seq}"

    def fail(self, op: str, *key: Any, message: str = "Internal server error") -> None:
        self.failures[(op,) + key] = message

    def clear_failures(self) -> None:
        self.failures.clear()

    def _call(self, op: str, *key: Any) -> None:
        with self.lock:
            self.calls.append((op,) + key)
        message = self.failures.get((op,) + key)
        if message is not None:
            raise BackofficeError(message, status_code=500)

    def add_branch(self, branch_id: str, name: str, company: str = "c1", deleted: bool = False) -> None:
        self.branches[branch_id] = {"_id": branch_id, "name": name, "company": company, "isDeleted": deleted}

    def add_method(self, method_id: str, name: str) -> None:
        self.methods[method_id] = {"_id": method_id, "name": name}

    def link(self, branch_id: str, method_id: str, active: bool = True) -> Dict[str, Any]:
        record = {
            "_id": self._next_id("link"),
            "branch": branch_id,
            "salesMethod": dict(self.methods.get(method_id) or {"_id": method_id}),
            "isActive": active,
        }
        with self.lock:
            self.links.append(record)
        return record

    def add_product(self, product_id: str, name: str, company: str = "c1") -> None:
        self.products[product_id] = {"_id": product_id, "name": name, "company": company, "isActive": True}

    def add_price(
        self,
        product_id: str,
        method_id: str,
        branch_id: Optional[str],
        price: float,
        currency: Any = None,
    ) -> str:
        record = {
            "_id": self._next_id("price"),
            "product": product_id,
            "salesMethod": method_id,
            "branch": branch_id,
            "price": price,
            "currencyUnit": currency,
        }
        with self.lock:
            self.prices.append(record)
        return record["_id"]

    def add_menu_category(
        self,
        menu_id: str,
        mc_id: str,
        name: str,
        parent: Optional[str] = None,
        order: float = 0,
        active: bool = True,
    ) -> None:
        self.menu_categories.setdefault(menu_id, []).append({
            "_id": mc_id,
            "menu": menu_id,
            "category": {"_id": f"cat-{mc_id}", "name": name, "isActive": active},
            "parent": parent,
            "order": order,
        })

    def add_menu_product(self, menu_id: str, category_id: str, product_id: str, name: str, active: bool = True) -> None:
        self.menu_products.setdefault(menu_id, []).append({
            "_id": self._next_id("mp"),
            "menu": menu_id,
            "category": category_id,
            "product": {"_id": product_id, "name": name, "isActive": active},
        })

    def linked(self, branch_id: str) -> List[str]:
        return [l["salesMethod"]["_id"] for l in self.links if l["branch"] == branch_id]

    # ----- menus -----

    def list_menu_categories(self, menu_id: str) -> List[MenuCategory]:
        self._call("list_menu_categories", menu_id)
        return [MenuCategory.model_validate(d) for d in self.menu_categories.get(menu_id, [])]

    def add_category_to_menu(self, menu_id: str, category_id: str, parent_id: Optional[str] = None) -> MenuCategory:
        self._call("add_category_to_menu", menu_id, category_id)
        record = {
            "_id": self._next_id("mc"),
            "menu": menu_id,
            "category": {"_id": category_id, "name": category_id},
            "parent": parent_id,
            "order": 0,
        }
        self.menu_categories.setdefault(menu_id, []).append(record)
        return MenuCategory.model_validate(record)

    def set_menu_category_parent(self, menu_id: str, menu_category_id: str, parent_id: Optional[str]) -> MenuCategory:
        self._call("set_menu_category_parent", menu_id, menu_category_id)
        for record in self.menu_categories.get(menu_id, []):
            if record["_id"] == menu_category_id:
                record["parent"] = parent_id
                return MenuCategory.model_validate(record)
        raise BackofficeError("Menu category not found", status_code=404)

    def list_menu_products(self, menu_id: str) -> List[MenuProduct]:
        self._call("list_menu_products", menu_id)
        return [MenuProduct.model_validate(d) for d in self.menu_products.get(menu_id, [])]

    # ----- branches & sales methods -----

    def list_branches(self, company_id: Optional[str] = None) -> List[Branch]:
        self._call("list_branches", company_id)
        return [
            Branch.model_validate(d) for d in self.branches.values()
            if company_id is None or d["company"] == company_id
        ]

    def get_branch(self, branch_id: str) -> Branch:
        self._call("get_branch", branch_id)
        if branch_id not in self.branches:
            raise BackofficeError("Branch not found", status_code=404)
        return Branch.model_validate(self.branches[branch_id])

    def list_sales_methods(self) -> List[SalesMethod]:
        self._call("list_sales_methods")
        return [SalesMethod.model_validate(d) for d in self.methods.values()]

    def list_branch_sales_methods(self, branch_id: str) -> List[BranchSalesMethod]:
        self._call("list_branch_sales_methods", branch_id)
        with self.lock:
            records = [dict(l) for l in self.links if l["branch"] == branch_id]
        return [BranchSalesMethod.model_validate(d) for d in records]

    def assign_sales_method(self, branch_id: str, method_id: str) -> BranchSalesMethod:
        self._call("assign_sales_method", branch_id, method_id)
        return BranchSalesMethod.model_validate(self.link(branch_id, method_id))

    def remove_sales_method(self, branch_id: str, method_id: str) -> None:
        self._call("remove_sales_method", branch_id, method_id)
        with self.lock:
            self.links[:] = [
                l for l in self.links
                if not (l["branch"] == branch_id and l["salesMethod"]["_id"] == method_id)
            ]

    # ----- products & prices -----

    def get_product(self, product_id: str) -> Product:
        self._call("get_product", product_id)
        if product_id not in self.products:
            raise BackofficeError("Product not found", status_code=404)
        return Product.model_validate(self.products[product_id])

    def list_products(self, company_id: Optional[str] = None) -> List[Product]:
        self._call("list_products", company_id)
        return [
            Product.model_validate(d) for d in self.products.values()
            if company_id is None or d["company"] == company_id
        ]

    def list_product_prices(self, product_id: str, branch_id: Optional[str] = None) -> List[ProductPrice]:
        self._call("list_product_prices", product_id)
        with self.lock:
            records = [
                dict(p) for p in self.prices
                if p["product"] == product_id and (branch_id is None or p["branch"] == branch_id)
            ]
        return [ProductPrice.model_validate(d) for d in records]

    def create_product_price(
        self,
        product_id: str,
        method_id: str,
        amount: float,
        currency_id: Optional[str] = None,
        branch_id: Optional[str] = None,
        company_id: Optional[str] = None,
    ) -> ProductPrice:
        self._call("create_product_price", branch_id, method_id)
        price_id = self.add_price(product_id, method_id, branch_id, amount, currency_id)
        return self._price(price_id)

    def _price(self, price_id: str) -> ProductPrice:
        with self.lock:
            record = next((dict(p) for p in self.prices if p["_id"] == price_id), None)
        if record is None:
            raise BackofficeError("Price not found", status_code=404)
        return ProductPrice.model_validate(record)

    def update_product_price(self, price_id: str, amount: float, currency_id: Optional[str] = None) -> ProductPrice:
        self._call("update_product_price", price_id)
        with self.lock:
            for record in self.prices:
                if record["_id"] == price_id:
                    record["price"] = amount
                    if currency_id:
                        record["currencyUnit"] = currency_id
        return self._price(price_id)

    def delete_product_price(self, price_id: str) -> None:
        self._call("delete_product_price", price_id)
        with self.lock:
            self.prices[:] = [p for p in self.prices if p["_id"] != price_id]

    # ----- ingredient usages -----

    def list_product_ingredients(self, product_id: str) -> List[ProductIngredient]:
        self._call("list_product_ingredients", product_id)
        return [ProductIngredient.model_validate(d) for d in self.ingredients if d["product"] == product_id]

    def create_product_ingredient(self, data: Dict[str, Any]) -> ProductIngredient:
        self._call("create_product_ingredient")
        record = {"_id": self._next_id("usage"), **data}
        self.ingredients.append(record)
        return ProductIngredient.model_validate(record)

    def update_product_ingredient(self, usage_id: str, data: Dict[str, Any]) -> ProductIngredient:
        self._call("update_product_ingredient", usage_id)
        for record in self.ingredients:
            if record["_id"] == usage_id:
                record.update(data)
                return ProductIngredient.model_validate(record)
        raise BackofficeError("Ingredient usage not found", status_code=404)

    def delete_product_ingredient(self, usage_id: str) -> None:
        self._call("delete_product_ingredient", usage_id)
        self.ingredients = [d for d in self.ingredients if d["_id"] != usage_id]


@pytest.fixture
def backoffice():
    return FakeBackoffice()


@pytest.fixture
def restaurant(backoffice):
    """
    Company c1 with branches b1 (Kadikoy) and b2 (Besiktas), a deleted branch
    b3, and branch b4 of another company. Sales methods m1 (Delivery) and
    m2 (Takeaway); product p1 (Lahmacun) of c1.
    """
    backoffice.add_branch("b1", "Kadikoy")
    backoffice.add_branch("b2", "Besiktas")
    backoffice.add_branch("b3", "Closed", deleted=True)
    backoffice.add_branch("b4", "Other Co", company="c2")
    backoffice.add_method("m1", "Delivery")
    backoffice.add_method("m2", "Takeaway")
    backoffice.add_product("p1", "Lahmacun")
    return backoffice
