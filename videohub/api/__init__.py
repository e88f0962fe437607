"""API package exports."""

from videohub.api.middleware import CorrelationIdMiddleware
from videohub.api.users import router

__all__ = ["router", "CorrelationIdMiddleware"]
