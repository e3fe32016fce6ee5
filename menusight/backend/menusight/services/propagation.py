"""
Branch propagation engine.

Applies the same sales-method assignment or price to several branches in one
logical action. Every (branch, method) pair is an independent request:
- all pairs are submitted at once and awaited together (thread pool);
- no ordering between pairs, no rollback, no cancellation mid-batch;
- each failure is captured on its own pair and never aborts siblings.

The result lists applied pairs and failures (with reasons) so the caller can
warn once and retry only what failed. A batch where every pair failed is a
hard error (PropagationError), raised by require_progress().
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Callable, Iterable, List, Optional

from menusight.config import PRICE_STRATEGY_UPSERT, settings
from menusight.exceptions import BackofficeError, MenuSightError, PropagationError
from menusight.schemas.catalog import Branch
from menusight.schemas.propagation import BATCH_FAILED, BatchResult, PairFailure, PairOutcome, PairRef
from menusight.services.backoffice_client import BackofficeClient
from menusight.services.duplicate_guard import find_price_records

logger = logging.getLogger(__name__)

PairOperation = Callable[[PairRef], PairOutcome]


def _worker_count(pair_count: int) -> int:
    """One worker per pair unless PROPAGATION_MAX_WORKERS caps it."""
    cap = settings.PROPAGATION_MAX_WORKERS
    if cap and cap > 0:
        return max(1, min(cap, pair_count))
    return max(1, pair_count)


def run_batch(pairs: List[PairRef], operation: PairOperation, max_workers: Optional[int] = None) -> BatchResult:
    """
    Run operation for every pair concurrently and collect itemized results.
    Results keep the input pair order.
    """
    result = BatchResult()
    if not pairs:
        return result

    workers = max_workers or _worker_count(len(pairs))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="propagation") as pool:
        futures = [pool.submit(operation, pair) for pair in pairs]
        for pair, future in zip(pairs, futures):
            try:
                result.applied.append(future.result())
            except MenuSightError as e:
                logger.warning("Propagation failed for branch %s / method %s: %s", pair.branch_id, pair.method_id, e.message)
                result.failures.append(PairFailure(
                    branch_id=pair.branch_id,
                    branch_name=pair.branch_name or "",
                    method_id=pair.method_id,
                    reason=e.message,
                ))
            except Exception as e:
                logger.exception("Unexpected propagation error for branch %s / method %s", pair.branch_id, pair.method_id)
                result.failures.append(PairFailure(
                    branch_id=pair.branch_id,
                    branch_name=pair.branch_name or "",
                    method_id=pair.method_id,
                    reason=str(e) or type(e).__name__,
                ))
    logger.info("Propagation batch: %d applied, %d failed", len(result.applied), len(result.failures))
    return result


def require_progress(result: BatchResult, action: str = "Propagation") -> BatchResult:
    """Raise PropagationError when every pair failed; otherwise return the result unchanged."""
    if result.status == BATCH_FAILED:
        raise PropagationError(f"{action} failed for every branch: {result.warning_message}", result)
    return result


def _unique_branches(branches: Iterable[Branch]) -> List[Branch]:
    seen = set()
    unique = []
    for branch in branches:
        if branch.id not in seen:
            seen.add(branch.id)
            unique.append(branch)
    return unique


def build_pairs(branches: Iterable[Branch], method_ids: Iterable[str]) -> List[PairRef]:
    """Cross product of branches and method ids, duplicates removed, input order kept."""
    methods = list(dict.fromkeys(m for m in method_ids if m))
    return [
        PairRef(branch_id=branch.id, method_id=method_id, branch_name=branch.name)
        for branch in _unique_branches(branches)
        for method_id in methods
    ]


# ----- Target branches -----

def sibling_branches(client: BackofficeClient, reference_branch_id: str) -> List[Branch]:
    """
    All live branches of the reference branch's company, reference included.
    Always fetched fresh: branch membership can change between calls.
    """
    reference = client.get_branch(reference_branch_id)
    company_id = reference.company_id
    if not company_id:
        return [reference]
    siblings = [
        b for b in client.list_branches(company_id)
        if b.company_id == company_id and not b.is_deleted
    ]
    if not any(b.id == reference.id for b in siblings):
        siblings.insert(0, reference)
    return siblings


def resolve_target_branches(
    client: BackofficeClient,
    reference_branch_id: str,
    apply_to_all_siblings: bool = False,
    branch_ids: Optional[List[str]] = None,
) -> List[Branch]:
    """
    Branches a propagation applies to:
    - explicit branch_ids (must belong to the reference branch's company);
    - all siblings when apply_to_all_siblings;
    - otherwise just the reference branch.
    """
    if branch_ids:
        siblings = {b.id: b for b in sibling_branches(client, reference_branch_id)}
        unknown = [bid for bid in branch_ids if bid not in siblings]
        if unknown:
            raise MenuSightError(f"Branches not in the same company: {', '.join(unknown)}")
        return [siblings[bid] for bid in dict.fromkeys(branch_ids)]
    if apply_to_all_siblings:
        return sibling_branches(client, reference_branch_id)
    return [client.get_branch(reference_branch_id)]


def require_same_company(branches: Iterable[Branch], company_id: Optional[str]) -> List[Branch]:
    """Reject target branches that belong to a company other than company_id."""
    branches = list(branches)
    if not company_id:
        return branches
    foreign = [b.id for b in branches if b.company_id != company_id]
    if foreign:
        raise MenuSightError(f"Branches not in the product's company: {', '.join(foreign)}")
    return branches


# ----- Sales methods -----

def _ensure_sales_method(client: BackofficeClient, pair: PairRef) -> PairOutcome:
    """Assign the method to the branch unless an active link already exists (idempotent)."""
    for link in client.list_branch_sales_methods(pair.branch_id):
        if link.is_active and link.sales_method_id == pair.method_id:
            return PairOutcome(
                branch_id=pair.branch_id,
                branch_name=pair.branch_name or "",
                method_id=pair.method_id,
                already_present=True,
                record_id=link.id,
            )
    link = client.assign_sales_method(pair.branch_id, pair.method_id)
    return PairOutcome(
        branch_id=pair.branch_id,
        branch_name=pair.branch_name or "",
        method_id=pair.method_id,
        record_id=link.id,
    )


def propagate_sales_methods(client: BackofficeClient, branches: Iterable[Branch], method_ids: Iterable[str]) -> BatchResult:
    """Ensure every method is linked to every branch. One request chain per pair."""
    pairs = build_pairs(branches, method_ids)
    return run_batch(pairs, lambda pair: _ensure_sales_method(client, pair))


def retry_pairs(client: BackofficeClient, pairs: List[PairRef]) -> BatchResult:
    """Re-run "ensure assigned" for the given (usually previously failed) pairs only."""
    unique = list({(p.branch_id, p.method_id): p for p in pairs}.values())
    return run_batch(unique, lambda pair: _ensure_sales_method(client, pair))


# ----- Prices -----

def _replace_price(
    client: BackofficeClient,
    pair: PairRef,
    product_id: str,
    amount: Decimal,
    currency_id: Optional[str],
    company_id: Optional[str],
    strategy: str,
) -> PairOutcome:
    """
    Make (product, method, branch) carry the given price.

    upsert: update the existing record in place, create when absent.
    replace: delete every existing record for the key, then create. If the
    create fails after a delete, the pair fails and the old price stays gone.
    """
    existing = find_price_records(
        client.list_product_prices(product_id, branch_id=pair.branch_id),
        product_id,
        pair.method_id,
        pair.branch_id,
    )

    if strategy == PRICE_STRATEGY_UPSERT and existing:
        if len(existing) > 1:
            logger.warning(
                "%d price records for product %s / method %s / branch %s; updating %s only",
                len(existing), product_id, pair.method_id, pair.branch_id, existing[0].id,
            )
        record = client.update_product_price(existing[0].id, float(amount), currency_id)
        return PairOutcome(
            branch_id=pair.branch_id,
            branch_name=pair.branch_name or "",
            method_id=pair.method_id,
            already_present=True,
            record_id=record.id,
        )

    removed = 0
    for old in existing:
        client.delete_product_price(old.id)
        removed += 1
    try:
        record = client.create_product_price(
            product_id,
            pair.method_id,
            float(amount),
            currency_id=currency_id,
            branch_id=pair.branch_id,
            company_id=company_id,
        )
    except BackofficeError as e:
        if removed:
            raise BackofficeError(
                f"{e.message} (the previous price was removed and not restored)",
                status_code=e.status_code,
            ) from e
        raise
    return PairOutcome(
        branch_id=pair.branch_id,
        branch_name=pair.branch_name or "",
        method_id=pair.method_id,
        already_present=removed > 0,
        record_id=record.id,
    )


def propagate_price(
    client: BackofficeClient,
    product_id: str,
    branches: Iterable[Branch],
    method_id: str,
    amount: Decimal,
    currency_id: Optional[str] = None,
    company_id: Optional[str] = None,
    strategy: Optional[str] = None,
) -> BatchResult:
    """Set the product's price for one sales method on every branch. One pair per branch."""
    strategy = strategy or settings.price_replace_strategy
    pairs = build_pairs(branches, [method_id])
    return run_batch(
        pairs,
        lambda pair: _replace_price(client, pair, product_id, amount, currency_id, company_id, strategy),
    )
