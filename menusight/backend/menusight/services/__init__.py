"""
Business logic services for MenuSight
"""
from .backoffice_client import BackofficeClient
from .ingredient_usage_service import IngredientUsageService
from .price_completeness import PriceCompletenessService

__all__ = [
    "BackofficeClient",
    "IngredientUsageService",
    "PriceCompletenessService",
]
