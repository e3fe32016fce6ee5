"""
Duplicate guard for ingredient usages and price records.

Pure functions over already-fetched records; no I/O.

Ingredient usages are duplicates when they agree on all of
(branch, ingredient, amount, amount unit, price, price unit).
Price records share a key when they agree on (product, sales method, branch).
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Optional, Tuple

from menusight.schemas.catalog import ProductIngredient, ProductPrice
from menusight.utils.refs import ref_id

UsageIdentity = Tuple[Optional[str], Optional[str], Optional[Decimal], Optional[str], Optional[Decimal], Optional[str]]


def _number(value: Any) -> Optional[Decimal]:
    """Normalise 2, 2.0, "2.00" and Decimal("2") to the same value; None stays None."""
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value)).normalize()
    except (InvalidOperation, ValueError):
        return None


def usage_identity(usage: ProductIngredient) -> UsageIdentity:
    return (
        ref_id(usage.branch),
        ref_id(usage.ingredient),
        _number(usage.amount),
        ref_id(usage.unit),
        _number(usage.price),
        ref_id(usage.currency_unit),
    )


def find_duplicate_ingredient_usage(
    candidate: ProductIngredient,
    existing: Iterable[ProductIngredient],
    exclude_id: Optional[str] = None,
) -> Optional[ProductIngredient]:
    """
    Return the first existing usage equivalent to candidate, or None.
    exclude_id skips one record (the usage being edited).
    """
    identity = usage_identity(candidate)
    for record in existing:
        if exclude_id and record.id == exclude_id:
            continue
        if usage_identity(record) == identity:
            return record
    return None


def is_duplicate(candidate: ProductIngredient, existing: Iterable[ProductIngredient]) -> bool:
    return find_duplicate_ingredient_usage(candidate, existing) is not None


def find_price_records(
    prices: Iterable[ProductPrice],
    product_id: str,
    method_id: str,
    branch_id: Optional[str],
) -> List[ProductPrice]:
    """
    All price records for the (product, method, branch) key. branch_id None
    selects method-level defaults. Records without a product field are taken
    to belong to product_id (the per-product endpoint omits it).
    """
    matches = []
    for price in prices:
        if price.product_id is not None and price.product_id != product_id:
            continue
        if price.sales_method_id != method_id:
            continue
        if price.branch_id != branch_id:
            continue
        matches.append(price)
    return matches
