"""HTTP routers."""

from .distribution import router as distribution_router

__all__ = ["distribution_router"]
