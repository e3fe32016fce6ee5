"""
Back-office REST client.

The back office owns companies, branches, menus, products, prices and
ingredient usages. Every response is an envelope: {"message": ..., <key>: ...}.
Every failure (HTTP error, connection error, timeout, bad JSON) is raised as
BackofficeError so callers handle one exception type.
"""
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import requests

from menusight.config import settings
from menusight.exceptions import BackofficeError
from menusight.schemas.catalog import (
    BackofficeRecord,
    Branch,
    BranchSalesMethod,
    MenuCategory,
    MenuProduct,
    Product,
    ProductIngredient,
    ProductPrice,
    SalesMethod,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BackofficeRecord)


def _error_message(response: Optional[requests.Response]) -> str:
    """Prefer the back office's own "message" field; fall back to status text."""
    if response is None:
        return "Back office request failed"
    try:
        body = response.json()
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
    except ValueError:
        pass
    text = (response.text or "").strip()
    return text[:200] if text else f"Back office returned HTTP {response.status_code}"


class BackofficeClient:
    """Thin wrapper over the back-office API. Safe to share between threads (no session state)."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.backoffice_base_url).rstrip("/")
        self.token = token if token is not None else settings.BACKOFFICE_API_TOKEN
        self.timeout = timeout if timeout is not None else settings.BACKOFFICE_TIMEOUT_SECONDS

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = self.token if self.token.lower().startswith("bearer ") else f"Bearer {self.token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = requests.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            message = _error_message(e.response)
            status_code = e.response.status_code if e.response is not None else None
            logger.warning("Back office %s %s failed (%s): %s", method, path, status_code, message)
            raise BackofficeError(message, status_code=status_code) from e
        except requests.exceptions.Timeout as e:
            logger.warning("Back office %s %s timed out after %ss", method, path, self.timeout)
            raise BackofficeError(f"Back office did not respond within {self.timeout:g}s") from e
        except requests.exceptions.RequestException as e:
            logger.warning("Back office %s %s unreachable: %s", method, path, e)
            raise BackofficeError(f"Back office unreachable: {e}") from e

        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as e:
            raise BackofficeError("Back office returned a non-JSON response", status_code=response.status_code) from e
        if not isinstance(body, dict):
            raise BackofficeError("Back office returned an unexpected response", status_code=response.status_code)
        return body

    @staticmethod
    def _records(body: Dict[str, Any], key: str, model: Type[RecordT]) -> List[RecordT]:
        return [model.model_validate(raw) for raw in (body.get(key) or [])]

    @staticmethod
    def _record(body: Dict[str, Any], key: str, model: Type[RecordT]) -> RecordT:
        raw = body.get(key)
        if not isinstance(raw, dict):
            raise BackofficeError(f"Back office response is missing '{key}'")
        return model.model_validate(raw)

    # ----- Menus -----

    def list_menu_categories(self, menu_id: str) -> List[MenuCategory]:
        body = self._request("GET", f"/category-product/menus/{menu_id}/categories")
        return self._records(body, "menuCategories", MenuCategory)

    def add_category_to_menu(self, menu_id: str, category_id: str, parent_id: Optional[str] = None) -> MenuCategory:
        data: Dict[str, Any] = {"category": category_id}
        if parent_id:
            data["parent"] = parent_id
        body = self._request("POST", f"/category-product/menus/{menu_id}/categories", json=data)
        return self._record(body, "menuCategory", MenuCategory)

    def set_menu_category_parent(self, menu_id: str, menu_category_id: str, parent_id: Optional[str]) -> MenuCategory:
        body = self._request(
            "PUT",
            f"/category-product/menus/{menu_id}/categories/{menu_category_id}",
            json={"parent": parent_id},
        )
        return self._record(body, "menuCategory", MenuCategory)

    def list_menu_products(self, menu_id: str) -> List[MenuProduct]:
        body = self._request("GET", f"/category-product/menus/{menu_id}/products")
        return self._records(body, "menuProducts", MenuProduct)

    # ----- Branches & sales methods -----

    def list_branches(self, company_id: Optional[str] = None) -> List[Branch]:
        params = {"company": company_id} if company_id else None
        body = self._request("GET", "/companies-branches/branches", params=params)
        return self._records(body, "branches", Branch)

    def get_branch(self, branch_id: str) -> Branch:
        body = self._request("GET", f"/companies-branches/branches/{branch_id}")
        return self._record(body, "branch", Branch)

    def list_sales_methods(self) -> List[SalesMethod]:
        body = self._request("GET", "/category-product/sales-methods")
        return self._records(body, "methods", SalesMethod)

    def list_branch_sales_methods(self, branch_id: str) -> List[BranchSalesMethod]:
        body = self._request("GET", f"/category-product/branches/{branch_id}/sales-methods")
        return self._records(body, "salesMethods", BranchSalesMethod)

    def assign_sales_method(self, branch_id: str, method_id: str) -> BranchSalesMethod:
        body = self._request(
            "POST",
            f"/category-product/branches/{branch_id}/sales-methods",
            json={"salesMethod": method_id},
        )
        return self._record(body, "branchSalesMethod", BranchSalesMethod)

    def remove_sales_method(self, branch_id: str, method_id: str) -> None:
        self._request("DELETE", f"/category-product/branches/{branch_id}/sales-methods/{method_id}")

    # ----- Products & prices -----

    def get_product(self, product_id: str) -> Product:
        body = self._request("GET", f"/category-product/products/{product_id}")
        return self._record(body, "product", Product)

    def list_products(self, company_id: Optional[str] = None) -> List[Product]:
        params = {"company": company_id} if company_id else None
        body = self._request("GET", "/category-product/products", params=params)
        products = self._records(body, "products", Product)
        if company_id:
            # The products endpoint may ignore the filter; enforce it here.
            products = [p for p in products if p.company_id == company_id]
        return products

    def list_product_prices(self, product_id: str, branch_id: Optional[str] = None) -> List[ProductPrice]:
        params = {"branch": branch_id} if branch_id else None
        body = self._request("GET", f"/category-product/products/{product_id}/prices", params=params)
        return self._records(body, "prices", ProductPrice)

    def create_product_price(
        self,
        product_id: str,
        method_id: str,
        amount: float,
        currency_id: Optional[str] = None,
        branch_id: Optional[str] = None,
        company_id: Optional[str] = None,
    ) -> ProductPrice:
        data: Dict[str, Any] = {"salesMethod": method_id, "price": float(amount)}
        if currency_id:
            data["currencyUnit"] = currency_id
        if branch_id:
            data["branch"] = branch_id
        if company_id:
            data["company"] = company_id
        body = self._request("POST", f"/category-product/products/{product_id}/prices", json=data)
        return self._record(body, "price", ProductPrice)

    def update_product_price(self, price_id: str, amount: float, currency_id: Optional[str] = None) -> ProductPrice:
        data: Dict[str, Any] = {"price": float(amount)}
        if currency_id:
            data["currencyUnit"] = currency_id
        body = self._request("PUT", f"/category-product/prices/{price_id}", json=data)
        return self._record(body, "price", ProductPrice)

    def delete_product_price(self, price_id: str) -> None:
        self._request("DELETE", f"/category-product/prices/{price_id}")

    # ----- Ingredient usages -----

    def list_product_ingredients(self, product_id: str) -> List[ProductIngredient]:
        body = self._request("GET", "/category-product/product-ingredients", params={"product": product_id})
        return self._records(body, "ingredients", ProductIngredient)

    def create_product_ingredient(self, data: Dict[str, Any]) -> ProductIngredient:
        body = self._request("POST", "/category-product/product-ingredients", json=data)
        return self._record(body, "ingredient", ProductIngredient)

    def update_product_ingredient(self, usage_id: str, data: Dict[str, Any]) -> ProductIngredient:
        body = self._request("PUT", f"/category-product/product-ingredients/{usage_id}", json=data)
        return self._record(body, "ingredient", ProductIngredient)

    def delete_product_ingredient(self, usage_id: str) -> None:
        self._request("DELETE", f"/category-product/product-ingredients/{usage_id}")
