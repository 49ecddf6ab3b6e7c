"""
Technicals Services

Service layer wrapping the pure indicator and pattern engines.
Each service has a defined interface (contract) and implementation.
"""

from technicals.services.base import (
    BaseService,
    InsufficientDataError,
    ServiceError,
    ValidationError,
)
from technicals.services.indicators.interface import TechnicalServiceInterface
from technicals.services.indicators.service import (
    TechnicalService,
    create_cached_service,
    get_technical_service,
)

__all__ = [
    "BaseService",
    "InsufficientDataError",
    "ServiceError",
    "ValidationError",
    "TechnicalServiceInterface",
    "TechnicalService",
    "create_cached_service",
    "get_technical_service",
]
