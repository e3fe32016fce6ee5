"""
Branch sales-method API routes (assignment and propagation to sibling branches)
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from menusight.api.errors import to_http_exception
from menusight.dependencies import get_backoffice_client
from menusight.exceptions import MenuSightError
from menusight.schemas.propagation import (
    BatchResult,
    BranchSummary,
    RetryRequest,
    SalesMethodPropagationRequest,
    SalesMethodSummary,
)
from menusight.services.backoffice_client import BackofficeClient
from menusight.services.price_completeness import linked_method_ids
from menusight.services.propagation import (
    propagate_sales_methods,
    require_progress,
    resolve_target_branches,
    retry_pairs,
    sibling_branches,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/branches/{branch_id}/siblings", response_model=List[BranchSummary])
def get_sibling_branches(branch_id: str, client: BackofficeClient = Depends(get_backoffice_client)):
    """Live branches of the same company, this branch included."""
    try:
        branches = sibling_branches(client, branch_id)
    except MenuSightError as e:
        raise to_http_exception(e)
    return [BranchSummary(id=b.id, name=b.name, company_id=b.company_id) for b in branches]


@router.get("/branches/{branch_id}/sales-methods", response_model=List[SalesMethodSummary])
def get_branch_sales_methods(branch_id: str, client: BackofficeClient = Depends(get_backoffice_client)):
    """Every sales method, flagged with whether it is linked to the branch."""
    try:
        linked = set(linked_method_ids(client.list_branch_sales_methods(branch_id)))
        methods = client.list_sales_methods()
    except MenuSightError as e:
        raise to_http_exception(e)
    return [SalesMethodSummary(id=m.id, name=m.name, linked=m.id in linked) for m in methods]


@router.get("/branches/{branch_id}/sales-methods/available", response_model=List[SalesMethodSummary])
def get_available_sales_methods(branch_id: str, client: BackofficeClient = Depends(get_backoffice_client)):
    """Sales methods without an active link to the branch."""
    try:
        linked = set(linked_method_ids(client.list_branch_sales_methods(branch_id)))
        methods = client.list_sales_methods()
    except MenuSightError as e:
        raise to_http_exception(e)
    return [SalesMethodSummary(id=m.id, name=m.name) for m in methods if m.id not in linked]


@router.post("/branches/{branch_id}/sales-methods/propagate", response_model=BatchResult)
def propagate_branch_sales_methods(
    branch_id: str,
    body: SalesMethodPropagationRequest,
    client: BackofficeClient = Depends(get_backoffice_client),
):
    """
    Link the given sales methods to this branch, or to every branch of its
    company when apply_to_all_siblings is set.

    Partial failure is a 200 with status "partial" and a warning listing each
    failed branch; the failed pairs can be sent to /sales-methods/propagate/retry.
    Total failure is a 502.
    """
    try:
        branches = resolve_target_branches(client, branch_id, apply_to_all_siblings=body.apply_to_all_siblings)
        result = propagate_sales_methods(client, branches, body.method_ids)
        if result.failures:
            logger.warning("Sales-method propagation from branch %s: %s", branch_id, result.warning_message)
        return require_progress(result, "Sales method assignment")
    except MenuSightError as e:
        raise to_http_exception(e)


@router.post("/sales-methods/propagate/retry", response_model=BatchResult)
def retry_sales_method_propagation(body: RetryRequest, client: BackofficeClient = Depends(get_backoffice_client)):
    """Retry only the (branch, method) pairs that failed in an earlier propagation."""
    try:
        return require_progress(retry_pairs(client, body.pairs), "Sales method assignment retry")
    except MenuSightError as e:
        raise to_http_exception(e)


@router.delete("/branches/{branch_id}/sales-methods/{method_id}", status_code=status.HTTP_204_NO_CONTENT)
def unassign_sales_method(branch_id: str, method_id: str, client: BackofficeClient = Depends(get_backoffice_client)):
    """Unlink a sales method from one branch. Never propagated."""
    try:
        client.remove_sales_method(branch_id, method_id)
    except MenuSightError as e:
        raise to_http_exception(e)
    logger.info("Unassigned sales method %s from branch %s", method_id, branch_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
