"""Middleware for the HRMS API."""

from .auth import AuthMiddleware
from .error_handler import setup_exception_handlers
from .logging import LoggingMiddleware
from .timeout import TimeoutMiddleware

__all__ = ["AuthMiddleware", "setup_exception_handlers", "LoggingMiddleware", "TimeoutMiddleware"]
