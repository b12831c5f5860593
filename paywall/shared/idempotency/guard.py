# -*- coding: utf-8 -*-
"""
paywall/shared/idempotency/guard.py

IdempotencyGuard: deduplica cambios de estado disparados desde fuera
(entregas de webhook, confirmaciones repetidas del cliente).

Flujo de run(key, operation):
1. Si hay respuesta final cacheada -> se reproduce (replayed=True).
2. Reserva atómica de la clave; si otro request idéntico está en curso
   -> ConflictError (DUPLICATE_IN_FLIGHT).
3. Ejecuta la operación; éxito -> cachea respuesta con TTL (24h por defecto).
4. Fallo -> libera la reserva para que un reintento pueda ejecutarse.

Autor: Equipo Paywall
Fecha: 2026-02-05
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict

from paywall.shared.errors import ConflictError
from .store import IdempotencyKeyStore

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 86_400
DEFAULT_IN_FLIGHT_TTL_SECONDS = 300


@dataclass(frozen=True)
class IdempotentResult:
    response: Dict[str, Any]
    replayed: bool


def derive_key(namespace: str, *parts: Any) -> str:
    """
    Construye una clave con namespace a partir de partes arbitrarias.

    Las partes se concatenan con ':'; si el resultado es muy largo se
    resume con sha256 para mantener claves acotadas.

    Examples:
        >>> derive_key("webhook", "payment.updated", "evt_1")
        'webhook:payment.updated:evt_1'
    """
    body = ":".join(str(p) for p in parts)
    if len(body) > 200:
        body = hashlib.sha256(body.encode("utf-8")).hexdigest()
    return f"{namespace}:{body}"


class IdempotencyGuard:
    """Ejecuta operaciones a lo sumo una vez por clave dentro del TTL."""

    def __init__(
        self,
        store: IdempotencyKeyStore,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        in_flight_ttl_seconds: int = DEFAULT_IN_FLIGHT_TTL_SECONDS,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.in_flight_ttl_seconds = in_flight_ttl_seconds

    async def run(
        self,
        key: str,
        operation: Callable[[], Awaitable[Dict[str, Any]]],
    ) -> IdempotentResult:
        cached = await self.store.get(key)
        if cached is not None:
            logger.info("idempotency_replay key=%s", key)
            return IdempotentResult(response=cached, replayed=True)

        if not await self.store.reserve(key, self.in_flight_ttl_seconds):
            # Pudo completarse entre el get y el reserve
            cached = await self.store.get(key)
            if cached is not None:
                logger.info("idempotency_replay key=%s", key)
                return IdempotentResult(response=cached, replayed=True)
            logger.warning("idempotency_in_flight key=%s", key)
            raise ConflictError(
                "An identical request is already being processed",
                details={"reason_code": "DUPLICATE_IN_FLIGHT", "key": key},
            )

        try:
            response = await operation()
        except BaseException:
            await self.store.release(key)
            raise

        await self.store.set(key, response, self.ttl_seconds)
        return IdempotentResult(response=response, replayed=False)


__all__ = [
    "IdempotencyGuard",
    "IdempotentResult",
    "derive_key",
    "DEFAULT_TTL_SECONDS",
]

# Fin del archivo paywall/shared/idempotency/guard.py
