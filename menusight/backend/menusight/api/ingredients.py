"""
Product ingredient usage API routes
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from menusight.api.errors import to_http_exception
from menusight.dependencies import get_backoffice_client
from menusight.exceptions import MenuSightError
from menusight.schemas.catalog import ProductIngredient
from menusight.schemas.ingredient import IngredientUsageCreate, IngredientUsageUpdate
from menusight.services.backoffice_client import BackofficeClient
from menusight.services.ingredient_usage_service import IngredientUsageService

router = APIRouter()


@router.get("/products/{product_id}/ingredients", response_model=List[ProductIngredient])
def list_ingredient_usages(
    product_id: str,
    branch_id: Optional[str] = Query(None),
    client: BackofficeClient = Depends(get_backoffice_client),
):
    try:
        return IngredientUsageService.list_usages(client, product_id, branch_id)
    except MenuSightError as e:
        raise to_http_exception(e)


@router.post("/products/{product_id}/ingredients", response_model=ProductIngredient, status_code=status.HTTP_201_CREATED)
def create_ingredient_usage(
    product_id: str,
    body: IngredientUsageCreate,
    client: BackofficeClient = Depends(get_backoffice_client),
):
    """Add an ingredient usage. 409 when an identical usage already exists."""
    try:
        return IngredientUsageService.create_usage(client, product_id, body)
    except MenuSightError as e:
        raise to_http_exception(e)


@router.put("/products/{product_id}/ingredients/{usage_id}", response_model=ProductIngredient)
def update_ingredient_usage(
    product_id: str,
    usage_id: str,
    body: IngredientUsageUpdate,
    client: BackofficeClient = Depends(get_backoffice_client),
):
    try:
        return IngredientUsageService.update_usage(client, product_id, usage_id, body)
    except MenuSightError as e:
        raise to_http_exception(e)


@router.delete("/products/{product_id}/ingredients/{usage_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ingredient_usage(
    product_id: str,
    usage_id: str,
    client: BackofficeClient = Depends(get_backoffice_client),
):
    try:
        IngredientUsageService.delete_usage(client, product_id, usage_id)
    except MenuSightError as e:
        raise to_http_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
