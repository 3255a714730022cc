"""HTTP layer of the distribution service."""

from .errors import ApiError, api_error_handler
from .routes import distribution_router

__all__ = ["ApiError", "api_error_handler", "distribution_router"]
