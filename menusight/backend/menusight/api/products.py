"""
Product price API routes (propagation, completeness, effective prices)
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from menusight.api.errors import to_http_exception
from menusight.dependencies import get_backoffice_client
from menusight.exceptions import BackofficeError, MenuSightError
from menusight.schemas.pricing import CompletenessReport, EffectivePrice, PricePropagationResponse
from menusight.schemas.propagation import PricePropagationRequest
from menusight.services.backoffice_client import BackofficeClient
from menusight.services.price_completeness import PriceCompletenessService
from menusight.services.propagation import (
    propagate_price,
    require_progress,
    require_same_company,
    resolve_target_branches,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/products/{product_id}/prices/propagate", response_model=PricePropagationResponse)
def propagate_product_price(
    product_id: str,
    body: PricePropagationRequest,
    client: BackofficeClient = Depends(get_backoffice_client),
):
    """
    Set the product's price for one sales method on the reference branch, on
    every sibling branch (apply_to_all_siblings) or on explicit branch_ids.

    The completeness report is recomputed after the save. If that lookup
    fails the prices are still saved and completeness is returned as null.
    """
    try:
        product = client.get_product(product_id)
        branches = resolve_target_branches(
            client,
            body.branch_id,
            apply_to_all_siblings=body.apply_to_all_siblings,
            branch_ids=body.branch_ids,
        )
        branches = require_same_company(branches, product.company_id)
        result = propagate_price(
            client,
            product_id,
            branches,
            body.method_id,
            body.amount,
            currency_id=body.currency_id,
            company_id=product.company_id,
        )
        if result.failures:
            logger.warning("Price propagation for product %s: %s", product_id, result.warning_message)
        require_progress(result, "Price update")
    except MenuSightError as e:
        raise to_http_exception(e)

    try:
        completeness = PriceCompletenessService.for_product(client, product_id)
    except BackofficeError as e:
        logger.warning("Price completeness for product %s unavailable after save: %s", product_id, e.message)
        completeness = None
    return PricePropagationResponse(result=result, completeness=completeness)


@router.get("/products/{product_id}/price-completeness", response_model=CompletenessReport)
def get_product_price_completeness(product_id: str, client: BackofficeClient = Depends(get_backoffice_client)):
    """Whether every branch of the product's company has a price for each of its sales methods."""
    try:
        return PriceCompletenessService.for_product(client, product_id)
    except MenuSightError as e:
        raise to_http_exception(e)


@router.get("/companies/{company_id}/price-completeness", response_model=List[CompletenessReport])
def get_company_price_completeness(company_id: str, client: BackofficeClient = Depends(get_backoffice_client)):
    """Completeness indicator for every product of the company (product list screen)."""
    try:
        return PriceCompletenessService.for_company_products(client, company_id)
    except MenuSightError as e:
        raise to_http_exception(e)


@router.get("/products/{product_id}/effective-prices", response_model=List[EffectivePrice])
def get_effective_prices(
    product_id: str,
    branch_id: str = Query(..., min_length=1),
    client: BackofficeClient = Depends(get_backoffice_client),
):
    """Price that applies at the branch for each linked sales method (branch price, else default)."""
    try:
        return PriceCompletenessService.effective_prices(client, product_id, branch_id)
    except MenuSightError as e:
        raise to_http_exception(e)
