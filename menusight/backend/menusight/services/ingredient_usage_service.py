"""
Ingredient usage service: recipe lines of a product, per branch.

Create and update are guarded against duplicates: a usage that matches an
existing one on (branch, ingredient, amount, unit, price, price unit) is
rejected with DuplicateUsageError before anything is written.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from menusight.exceptions import DuplicateUsageError, NotFoundError
from menusight.schemas.catalog import ProductIngredient
from menusight.schemas.ingredient import IngredientUsageCreate, IngredientUsageUpdate
from menusight.services.backoffice_client import BackofficeClient
from menusight.services.duplicate_guard import find_duplicate_ingredient_usage
from menusight.utils.refs import ref_id, ref_name

logger = logging.getLogger(__name__)


def _usage_payload(product_id: str, data: IngredientUsageCreate) -> Dict[str, Any]:
    """Wire body for the back office."""
    payload: Dict[str, Any] = {
        "product": product_id,
        "ingredient": data.ingredient_id,
        "branch": data.branch_id,
        "amount": float(data.amount),
        "unit": data.unit_id,
    }
    if data.price is not None:
        payload["price"] = float(data.price)
        payload["currencyUnit"] = data.currency_id
    return payload


def _duplicate_message(existing: ProductIngredient) -> str:
    name = ref_name(existing.ingredient) or ref_id(existing.ingredient) or "This ingredient"
    branch = ref_name(existing.branch) or ref_id(existing.branch) or "this branch"
    return f"{name} is already used with the same amount and price at {branch}"


class IngredientUsageService:
    """CRUD over the back office's product-ingredient records, with the duplicate guard."""

    @staticmethod
    def list_usages(client: BackofficeClient, product_id: str, branch_id: Optional[str] = None) -> List[ProductIngredient]:
        usages = client.list_product_ingredients(product_id)
        if branch_id:
            usages = [u for u in usages if ref_id(u.branch) == branch_id]
        return usages

    @staticmethod
    def _guard(
        client: BackofficeClient,
        product_id: str,
        payload: Dict[str, Any],
        exclude_id: Optional[str] = None,
    ) -> None:
        candidate = ProductIngredient.model_validate({"_id": exclude_id or "", **payload})
        existing = client.list_product_ingredients(product_id)
        duplicate = find_duplicate_ingredient_usage(candidate, existing, exclude_id=exclude_id)
        if duplicate is not None:
            logger.info("Rejected duplicate ingredient usage for product %s (matches %s)", product_id, duplicate.id)
            raise DuplicateUsageError(
                _duplicate_message(duplicate),
                existing=duplicate.model_dump(by_alias=True),
            )

    @staticmethod
    def create_usage(client: BackofficeClient, product_id: str, data: IngredientUsageCreate) -> ProductIngredient:
        payload = _usage_payload(product_id, data)
        IngredientUsageService._guard(client, product_id, payload)
        usage = client.create_product_ingredient(payload)
        logger.info("Created ingredient usage %s for product %s", usage.id, product_id)
        return usage

    @staticmethod
    def update_usage(
        client: BackofficeClient,
        product_id: str,
        usage_id: str,
        data: IngredientUsageUpdate,
    ) -> ProductIngredient:
        """
        Merge the changes into the current record, re-check for duplicates
        (ignoring the record itself) and save.
        """
        current = next((u for u in client.list_product_ingredients(product_id) if u.id == usage_id), None)
        if current is None:
            raise NotFoundError(f"Ingredient usage {usage_id} not found for this product")

        changes = data.model_dump(exclude_unset=True)
        merged = IngredientUsageCreate(
            ingredient_id=changes.get("ingredient_id") or ref_id(current.ingredient) or "",
            branch_id=changes.get("branch_id") or ref_id(current.branch) or "",
            amount=changes.get("amount") or Decimal(str(current.amount)),
            unit_id=changes.get("unit_id") or ref_id(current.unit) or "",
            price=changes["price"] if "price" in changes else (
                Decimal(str(current.price)) if current.price is not None else None
            ),
            currency_id=changes.get("currency_id") or ref_id(current.currency_unit),
        )
        payload = _usage_payload(product_id, merged)
        if merged.price is None:
            payload["price"] = None
            payload["currencyUnit"] = None
        IngredientUsageService._guard(client, product_id, payload, exclude_id=usage_id)
        return client.update_product_ingredient(usage_id, payload)

    @staticmethod
    def delete_usage(client: BackofficeClient, product_id: str, usage_id: str) -> None:
        """Delete a usage of this product; usages of other products are not found."""
        if not any(u.id == usage_id for u in client.list_product_ingredients(product_id)):
            raise NotFoundError(f"Ingredient usage {usage_id} not found for this product")
        client.delete_product_ingredient(usage_id)
        logger.info("Deleted ingredient usage %s", usage_id)
