"""HTTP routers."""

from .facts import router as facts_router

__all__ = ["facts_router"]
