"""
API routes for MenuSight
"""
from .menus import router as menus_router
from .branches import router as branches_router
from .products import router as products_router
from .ingredients import router as ingredients_router

__all__ = [
    "menus_router",
    "branches_router",
    "products_router",
    "ingredients_router",
]
