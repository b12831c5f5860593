# -*- coding: utf-8 -*-
"""
paywall/shared/errors.py

Excepciones de dominio del motor de compras.

Taxonomía cerrada: cada excepción lleva un ErrorCode (StrEnum) y la
frontera HTTP mapea por igualdad del código, nunca por el texto.

Los fallos de negocio esperados (reglas de cupón, validación de token)
NO usan excepciones: se devuelven como resultados con reason code.

Autor: Equipo Paywall
Fecha: 2026-02-04
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Dict, Optional


class ErrorCode(StrEnum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_STATE = "INVALID_STATE"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    UNAUTHORIZED = "UNAUTHORIZED"
    CONFLICT = "CONFLICT"
    GATEWAY_ERROR = "GATEWAY_ERROR"
    INVARIANT_VIOLATION = "INVARIANT_VIOLATION"


ERROR_STATUS_MAP: Dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.INVALID_STATE: 409,
    ErrorCode.VALIDATION_FAILED: 422,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.CONFLICT: 409,
    ErrorCode.GATEWAY_ERROR: 502,
    ErrorCode.INVARIANT_VIOLATION: 500,
}


class PaywallError(Exception):
    """Base de todas las excepciones de dominio."""

    code: ErrorCode = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def http_status(self) -> int:
        return ERROR_STATUS_MAP[self.code]

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error_code": self.code.value, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class NotFoundError(PaywallError):
    """Se lanza cuando no existe la compra, cupón, entitlement o juego."""
    code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            f"{resource} not found",
            details={"resource": resource, "id": str(identifier)},
        )


class InvalidStateError(PaywallError):
    """Se lanza cuando la máquina de estados rechaza una transición."""
    code = ErrorCode.INVALID_STATE

    def __init__(self, from_state, to_state, message: Optional[str] = None):
        self.from_state = from_state
        self.to_state = to_state
        default_msg = f"Invalid transition: {from_state} -> {to_state}"
        super().__init__(
            message or default_msg,
            details={"from_state": str(from_state), "to_state": str(to_state)},
        )


class ValidationFailedError(PaywallError):
    """Payload mal formado o regla de negocio violada (con razón legible)."""
    code = ErrorCode.VALIDATION_FAILED

    def __init__(self, reason: str, *, reason_code: Optional[str] = None):
        self.reason = reason
        self.reason_code = reason_code
        details = {"reason_code": reason_code} if reason_code else None
        super().__init__(reason, details=details)


class UnauthorizedError(PaywallError):
    """
    Token inválido, expirado o revocado.

    El mensaje es uniforme: no distingue "no existe" de "expiró"
    para evitar enumeración de tokens.
    """
    code = ErrorCode.UNAUTHORIZED

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class ConflictError(PaywallError):
    """Recurso duplicado u operación idéntica en curso."""
    code = ErrorCode.CONFLICT

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)


class GatewayError(PaywallError):
    """Fallo o respuesta irreconocible del gateway de pagos."""
    code = ErrorCode.GATEWAY_ERROR

    def __init__(self, message: str, *, retryable: bool = False, status_code: Optional[int] = None):
        self.retryable = retryable
        self.status_code = status_code
        super().__init__(
            message,
            details={"retryable": retryable, "status_code": status_code},
        )


class InvariantViolationError(PaywallError):
    """Violación de invariante financiera: aborta la operación, nunca se autocorrige."""
    code = ErrorCode.INVARIANT_VIOLATION

    def __init__(self, message: str, **context: Any):
        self.context = context
        super().__init__(message, details={k: str(v) for k, v in context.items()})


__all__ = [
    "ErrorCode",
    "ERROR_STATUS_MAP",
    "PaywallError",
    "NotFoundError",
    "InvalidStateError",
    "ValidationFailedError",
    "UnauthorizedError",
    "ConflictError",
    "GatewayError",
    "InvariantViolationError",
]

# Fin del archivo paywall/shared/errors.py
