# -*- coding: utf-8 -*-
"""
paywall/shared/middleware/exception_handler.py

Frontera de errores HTTP.

- register_exception_handlers(app): traduce PaywallError a JSON mapeando
  por ErrorCode (ERROR_STATUS_MAP), nunca por el texto del mensaje.
- JSONExceptionMiddleware: atrapa cualquier excepción no manejada y
  responde JSON 500 con request_id para correlación de logs.

Formato de respuesta:
    {"detail": {"error_code": ..., "message": ..., "request_id": ..., "details": {...}}}

Autor: Equipo Paywall
Fecha: 2026-02-12
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from paywall.shared.errors import ErrorCode, PaywallError

logger = logging.getLogger(__name__)

REQUEST_ID_HEADERS = ["x-request-id", "x-correlation-id"]


def get_request_id(request: Request) -> str:
    """Extrae request_id de headers o genera uno nuevo."""
    existing = getattr(request.state, "request_id", None)
    if existing:
        return existing
    for header in REQUEST_ID_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return uuid.uuid4().hex[:16]


async def paywall_error_handler(request: Request, exc: PaywallError) -> JSONResponse:
    request_id = get_request_id(request)

    if exc.code == ErrorCode.INVARIANT_VIOLATION:
        logger.critical(
            "invariant_violation request_id=%s path=%s message=%s context=%s",
            request_id, request.url.path, exc.message, exc.details,
        )
    elif exc.code == ErrorCode.INVALID_STATE:
        logger.warning(
            "invalid_state request_id=%s path=%s message=%s",
            request_id, request.url.path, exc.message,
        )
    elif exc.code == ErrorCode.GATEWAY_ERROR:
        logger.error(
            "gateway_error request_id=%s path=%s message=%s details=%s",
            request_id, request.url.path, exc.message, exc.details,
        )
    else:
        logger.info(
            "request_rejected request_id=%s path=%s error_code=%s",
            request_id, request.url.path, exc.code,
        )

    detail = exc.to_dict()
    detail["request_id"] = request_id
    # El detalle interno de una invariante no se expone al cliente
    if exc.code == ErrorCode.INVARIANT_VIOLATION:
        detail = {
            "error_code": exc.code.value,
            "message": "Internal consistency error",
            "request_id": request_id,
        }

    return JSONResponse(
        status_code=exc.http_status,
        content={"detail": detail},
        headers={"X-Request-ID": request_id},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PaywallError, paywall_error_handler)  # type: ignore[arg-type]


class JSONExceptionMiddleware(BaseHTTPMiddleware):
    """
    Middleware que captura excepciones no manejadas y devuelve JSON.

    Garantiza:
    - Content-Type: application/json (nunca text/plain)
    - error_code estable para UI
    - request_id para correlación de logs
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = get_request_id(request)
        request.state.request_id = request_id

        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                "unhandled_exception request_id=%s method=%s path=%s error=%r",
                request_id, request.method, request.url.path, e,
            )
            detail = {
                "error_code": "INTERNAL_SERVER_ERROR",
                "message": "Internal server error",
                "request_id": request_id,
            }
            return JSONResponse(
                status_code=500,
                content={"detail": detail},
                headers={"X-Request-ID": request_id},
            )


__all__ = [
    "JSONExceptionMiddleware",
    "get_request_id",
    "paywall_error_handler",
    "register_exception_handlers",
]

# Fin del archivo paywall/shared/middleware/exception_handler.py
