"""
Price completeness checker.

A branch is complete for a product when every sales method linked to the
branch has at least one price record for (product, method, branch).
Method-level default prices (no branch) do not count.

- A branch with no linked methods is skipped (it is not configured, not incomplete).
- A product is complete when every non-skipped branch of its company is
  complete and at least one branch was not skipped. If every branch is
  skipped, nobody can sell the product: that is reported as incomplete.

The checks are O(branches x methods x prices) over small in-memory lists and
re-run on every price save, on product-list load and on the price screen.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from menusight.schemas.catalog import Branch, BranchSalesMethod, ProductPrice
from menusight.schemas.pricing import (
    BRANCH_COMPLETE,
    BRANCH_INCOMPLETE,
    BRANCH_SKIPPED,
    BranchCompleteness,
    CompletenessReport,
    EffectivePrice,
)
from menusight.services.backoffice_client import BackofficeClient
from menusight.services.duplicate_guard import find_price_records
from menusight.utils.refs import ref_name

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY_LABEL = "₺"
PRICE_SOURCE_BRANCH = "branch"
PRICE_SOURCE_DEFAULT = "default"


def linked_method_ids(links: Iterable[BranchSalesMethod]) -> List[str]:
    """Ids of the active sales methods linked to a branch, duplicates removed."""
    return list(dict.fromkeys(
        link.sales_method_id for link in links
        if link.is_active and link.sales_method_id
    ))


def branch_status(
    product_id: str,
    branch: Branch,
    method_ids: List[str],
    prices: Iterable[ProductPrice],
) -> BranchCompleteness:
    prices = list(prices)
    if not method_ids:
        return BranchCompleteness(branch_id=branch.id, branch_name=branch.name, status=BRANCH_SKIPPED)
    missing = [m for m in method_ids if not find_price_records(prices, product_id, m, branch.id)]
    return BranchCompleteness(
        branch_id=branch.id,
        branch_name=branch.name,
        status=BRANCH_INCOMPLETE if missing else BRANCH_COMPLETE,
        linked_method_ids=list(method_ids),
        missing_method_ids=missing,
    )


def is_branch_complete(
    product_id: str,
    branch_id: str,
    links: Iterable[BranchSalesMethod],
    prices: Iterable[ProductPrice],
) -> bool:
    """True when every linked method has a branch price; vacuously True with no linked methods."""
    row = branch_status(product_id, Branch(id=branch_id), linked_method_ids(links), prices)
    return row.status != BRANCH_INCOMPLETE


def evaluate_product(
    product_id: str,
    branches: Iterable[Branch],
    links_by_branch: Dict[str, List[BranchSalesMethod]],
    prices: Iterable[ProductPrice],
) -> Tuple[bool, List[BranchCompleteness]]:
    """Per-branch rows plus the product-level verdict."""
    prices = list(prices)
    rows = [
        branch_status(product_id, branch, linked_method_ids(links_by_branch.get(branch.id, [])), prices)
        for branch in branches
    ]
    evaluated = [row for row in rows if row.status != BRANCH_SKIPPED]
    complete = bool(evaluated) and all(row.status == BRANCH_COMPLETE for row in evaluated)
    return complete, rows


def is_product_complete(
    product_id: str,
    branches: Iterable[Branch],
    links_by_branch: Dict[str, List[BranchSalesMethod]],
    prices: Iterable[ProductPrice],
) -> bool:
    complete, _ = evaluate_product(product_id, branches, links_by_branch, prices)
    return complete


def _method_names(links_by_branch: Dict[str, List[BranchSalesMethod]]) -> Dict[str, str]:
    names: Dict[str, str] = {}
    for links in links_by_branch.values():
        for link in links:
            if link.sales_method_id:
                names.setdefault(link.sales_method_id, ref_name(link.sales_method))
    return names


def completeness_warning(rows: List[BranchCompleteness], method_names: Optional[Dict[str, str]] = None) -> Optional[str]:
    """Warning text for the UI indicator; None when complete."""
    method_names = method_names or {}
    evaluated = [row for row in rows if row.status != BRANCH_SKIPPED]
    if not evaluated:
        return "No branch can sell this product: no branch of the company has a sales method assigned."
    incomplete = [row for row in evaluated if row.status == BRANCH_INCOMPLETE]
    if not incomplete:
        return None
    parts = []
    for row in incomplete:
        missing = ", ".join(method_names.get(m) or m for m in row.missing_method_ids)
        parts.append(f"{row.branch_name or row.branch_id}: {missing}")
    return "Missing prices - " + "; ".join(parts)


def effective_price(
    prices: Iterable[ProductPrice],
    product_id: str,
    method_id: str,
    branch_id: Optional[str],
) -> Tuple[Optional[ProductPrice], Optional[str]]:
    """Branch-specific price if there is one, else the method-level default, else (None, None)."""
    prices = list(prices)
    if branch_id:
        branch_prices = find_price_records(prices, product_id, method_id, branch_id)
        if branch_prices:
            return branch_prices[0], PRICE_SOURCE_BRANCH
    defaults = find_price_records(prices, product_id, method_id, None)
    if defaults:
        return defaults[0], PRICE_SOURCE_DEFAULT
    return None, None


def display_price(record: Optional[ProductPrice]) -> str:
    """"12.5 TL" style label; "--" when there is no price."""
    if record is None or record.price is None:
        return "--"
    currency = ref_name(record.currency_unit) or DEFAULT_CURRENCY_LABEL
    return f"{record.price:g} {currency}"


class PriceCompletenessService:
    """Fetches what the checker needs from the back office and builds reports."""

    @staticmethod
    def _company_branches(client: BackofficeClient, company_id: Optional[str]) -> List[Branch]:
        if not company_id:
            return []
        return [
            b for b in client.list_branches(company_id)
            if b.company_id == company_id and not b.is_deleted
        ]

    @staticmethod
    def _links_by_branch(client: BackofficeClient, branches: List[Branch]) -> Dict[str, List[BranchSalesMethod]]:
        return {b.id: client.list_branch_sales_methods(b.id) for b in branches}

    @staticmethod
    def _report(
        product_id: str,
        product_name: str,
        branches: List[Branch],
        links_by_branch: Dict[str, List[BranchSalesMethod]],
        prices: List[ProductPrice],
    ) -> CompletenessReport:
        complete, rows = evaluate_product(product_id, branches, links_by_branch, prices)
        warning = None if complete else completeness_warning(rows, _method_names(links_by_branch))
        return CompletenessReport(
            product_id=product_id,
            product_name=product_name,
            complete=complete,
            branches=rows,
            warning=warning,
        )

    @staticmethod
    def for_product(client: BackofficeClient, product_id: str) -> CompletenessReport:
        """Completeness of one product across all branches of its company."""
        product = client.get_product(product_id)
        branches = PriceCompletenessService._company_branches(client, product.company_id)
        links = PriceCompletenessService._links_by_branch(client, branches)
        prices = client.list_product_prices(product_id)
        report = PriceCompletenessService._report(product.id, product.name, branches, links, prices)
        if not report.complete:
            logger.debug("Product %s has incomplete prices: %s", product_id, report.warning)
        return report

    @staticmethod
    def for_company_products(client: BackofficeClient, company_id: str) -> List[CompletenessReport]:
        """Product list screen: branch links are fetched once and shared by every product."""
        branches = PriceCompletenessService._company_branches(client, company_id)
        links = PriceCompletenessService._links_by_branch(client, branches)
        reports = []
        for product in client.list_products(company_id):
            prices = client.list_product_prices(product.id)
            reports.append(PriceCompletenessService._report(product.id, product.name, branches, links, prices))
        return reports

    @staticmethod
    def effective_prices(client: BackofficeClient, product_id: str, branch_id: str) -> List[EffectivePrice]:
        """Price that applies for each sales method linked to the branch."""
        links = [link for link in client.list_branch_sales_methods(branch_id) if link.is_active]
        prices = client.list_product_prices(product_id)
        result = []
        seen = set()
        for link in links:
            method_id = link.sales_method_id
            if not method_id or method_id in seen:
                continue
            seen.add(method_id)
            record, source = effective_price(prices, product_id, method_id, branch_id)
            result.append(EffectivePrice(
                method_id=method_id,
                method_name=ref_name(link.sales_method),
                price_id=record.id if record else None,
                amount=record.price if record else None,
                currency=ref_name(record.currency_unit) if record else None,
                source=source,
                display=display_price(record),
            ))
        return result
