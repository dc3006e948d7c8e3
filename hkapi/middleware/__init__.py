"""HTTP middleware."""

from .correlation import CorrelationMiddleware

__all__ = ["CorrelationMiddleware"]
