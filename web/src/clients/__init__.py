"""External API clients."""

from .fact_client import FactAPIResponse, FactClient

__all__ = ["FactAPIResponse", "FactClient"]
