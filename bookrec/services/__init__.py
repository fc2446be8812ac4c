"""Service exports."""

from .catalog_cache import CatalogCache, CatalogEntry
from .identity_service import Account, IdentityService
from .issuance_service import IssuanceService, IssueResult, ReturnResult
from .fines_service import FineLine, FineReport, FineService
from .recommendation_service import RecommendationService
from .catalog_service import AddBookResult, CatalogService

__all__ = [
    "CatalogCache",
    "CatalogEntry",
    "Account",
    "IdentityService",
    "IssuanceService",
    "IssueResult",
    "ReturnResult",
    "FineLine",
    "FineReport",
    "FineService",
    "RecommendationService",
    "AddBookResult",
    "CatalogService",
]
