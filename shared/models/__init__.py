"""Shared Pydantic models for the cat facts service."""

from .common import (
    CatFact,
    FactResponse,
    HealthStatus,
    ServiceInfo,
)

__all__ = [
    "CatFact",
    "FactResponse",
    "HealthStatus",
    "ServiceInfo",
]
