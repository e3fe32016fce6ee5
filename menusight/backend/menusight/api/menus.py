"""
Menu category tree API routes
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from menusight.api.errors import to_http_exception
from menusight.dependencies import get_backoffice_client
from menusight.exceptions import MenuSightError, NotFoundError
from menusight.schemas.menu_tree import (
    VIEW_ADMIN,
    VIEW_CUSTOMER,
    CategoryTreeResponse,
    MenuCategoryCreate,
    MenuCategoryReparent,
    MenuProductSummary,
    ParentOption,
)
from menusight.services.backoffice_client import BackofficeClient
from menusight.services.category_tree import (
    active_nodes,
    build_category_tree,
    parent_options,
    products_in_category,
    validate_parent,
)
from menusight.utils.refs import ref_name

logger = logging.getLogger(__name__)

router = APIRouter()


def _tree_response(client: BackofficeClient, menu_id: str, view: str = VIEW_ADMIN, active_only: bool = False) -> CategoryTreeResponse:
    nodes = build_category_tree(client.list_menu_categories(menu_id), view=view)
    if active_only or view == VIEW_CUSTOMER:
        nodes = active_nodes(nodes)
    return CategoryTreeResponse(menu_id=menu_id, view=view, nodes=nodes)


@router.get("/menus/{menu_id}/category-tree", response_model=CategoryTreeResponse)
def get_category_tree(
    menu_id: str,
    view: str = Query(VIEW_ADMIN, pattern="^(admin|customer)$"),
    active_only: bool = Query(False, description="Hide inactive categories and everything below them"),
    client: BackofficeClient = Depends(get_backoffice_client),
):
    """
    Category assignments of a menu in tree order with depths.

    admin: siblings by explicit order, then name. customer: siblings by name,
    inactive categories hidden.
    """
    try:
        return _tree_response(client, menu_id, view=view, active_only=active_only)
    except MenuSightError as e:
        raise to_http_exception(e)


@router.get("/menus/{menu_id}/parent-options", response_model=List[ParentOption])
def get_parent_options(
    menu_id: str,
    node_id: Optional[str] = Query(None, description="Assignment being moved; it and its subtree are excluded"),
    client: BackofficeClient = Depends(get_backoffice_client),
):
    try:
        return parent_options(client.list_menu_categories(menu_id), node_id=node_id)
    except MenuSightError as e:
        raise to_http_exception(e)


@router.post("/menus/{menu_id}/categories", response_model=CategoryTreeResponse, status_code=status.HTTP_201_CREATED)
def add_category(
    menu_id: str,
    body: MenuCategoryCreate,
    client: BackofficeClient = Depends(get_backoffice_client),
):
    """Add a category to the menu, optionally under an existing assignment. Returns the updated tree."""
    try:
        validate_parent(client.list_menu_categories(menu_id), None, body.parent_id)
        created = client.add_category_to_menu(menu_id, body.category_id, body.parent_id)
        logger.info("Added category %s to menu %s as %s", body.category_id, menu_id, created.id)
        return _tree_response(client, menu_id)
    except MenuSightError as e:
        raise to_http_exception(e)


@router.put("/menus/{menu_id}/categories/{menu_category_id}/parent", response_model=CategoryTreeResponse)
def reparent_category(
    menu_id: str,
    menu_category_id: str,
    body: MenuCategoryReparent,
    client: BackofficeClient = Depends(get_backoffice_client),
):
    """Move an assignment under another one (or to the root). Moves that would create a cycle are rejected."""
    try:
        assignments = client.list_menu_categories(menu_id)
        if not any(mc.id == menu_category_id for mc in assignments):
            raise NotFoundError("Category is not part of this menu")
        validate_parent(assignments, menu_category_id, body.parent_id)
        client.set_menu_category_parent(menu_id, menu_category_id, body.parent_id)
        return _tree_response(client, menu_id)
    except MenuSightError as e:
        raise to_http_exception(e)


@router.get("/menus/{menu_id}/categories/{category_id}/products", response_model=List[MenuProductSummary])
def get_category_products(
    menu_id: str,
    category_id: str,
    client: BackofficeClient = Depends(get_backoffice_client),
):
    """Active products of the category and of every category below it in this menu."""
    try:
        products = products_in_category(
            client.list_menu_categories(menu_id),
            client.list_menu_products(menu_id),
            category_id,
        )
    except MenuSightError as e:
        raise to_http_exception(e)
    return [
        MenuProductSummary(
            id=mp.id,
            product_id=mp.product_id,
            product_name=ref_name(mp.product),
            category_id=mp.category_id,
            order=mp.order,
        )
        for mp in products
    ]
