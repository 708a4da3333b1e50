"""Business logic services."""

from .fact_service import (
    FALLBACK_MESSAGE,
    FactAPIError,
    FactService,
    FactServiceError,
    InvalidFactError,
)

__all__ = [
    "FALLBACK_MESSAGE",
    "FactAPIError",
    "FactService",
    "FactServiceError",
    "InvalidFactError",
]
