# -*- coding: utf-8 -*-
"""
paywall/shared/middleware/request_logging.py

Middleware para logging de requests HTTP con método, path, status y duración.
Propaga el request id en el header X-Request-ID de la respuesta.

Autor: Equipo Paywall
Fecha: 2026-02-12
"""

from __future__ import annotations

import logging
import re
import time
from typing import Callable, List, Optional, Pattern

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .exception_handler import get_request_id

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Loguea el fin de cada request con métricas básicas.

    Args:
        app: ASGI app
        exclude_patterns: Lista de regex a excluir (default: /metrics, /health)
    """

    DEFAULT_EXCLUDE = [
        re.compile(r"^/metrics"),
        re.compile(r"^/health"),
        re.compile(r"^/favicon\.ico"),
    ]

    def __init__(self, app, exclude_patterns: Optional[List[Pattern]] = None):
        super().__init__(app)
        self.exclude_patterns = exclude_patterns or self.DEFAULT_EXCLUDE

    def _should_log(self, path: str) -> bool:
        return not any(pattern.match(path) for pattern in self.exclude_patterns)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = get_request_id(request)
        request.state.request_id = request_id

        path = request.url.path
        if not self._should_log(path):
            response = await call_next(request)
            response.headers.setdefault("X-Request-ID", request_id)
            return response

        start = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "request_completed request_id=%s method=%s path=%s status=%d duration_ms=%.2f",
                request_id, request.method, path, status, duration_ms,
            )

        response.headers.setdefault("X-Request-ID", request_id)
        return response


__all__ = ["RequestLoggingMiddleware"]

# Fin del archivo paywall/shared/middleware/request_logging.py
