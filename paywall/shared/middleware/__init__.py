# -*- coding: utf-8 -*-
"""
paywall/shared/middleware/__init__.py

Middlewares compartidos y registro de manejadores de error.
"""

from .exception_handler import (
    JSONExceptionMiddleware,
    get_request_id,
    register_exception_handlers,
)
from .request_logging import RequestLoggingMiddleware

__all__ = [
    "JSONExceptionMiddleware",
    "get_request_id",
    "register_exception_handlers",
    "RequestLoggingMiddleware",
]

# Fin del archivo paywall/shared/middleware/__init__.py
