# -*- coding: utf-8 -*-
"""
paywall/shared/idempotency/__init__.py

Guardia de idempotencia y almacenes de claves.

Autor: Equipo Paywall
Fecha: 2026-02-05
"""

from .store import IdempotencyKeyStore, InMemoryIdempotencyStore, RedisIdempotencyStore
from .guard import IdempotencyGuard, IdempotentResult, derive_key, DEFAULT_TTL_SECONDS

__all__ = [
    "IdempotencyKeyStore",
    "InMemoryIdempotencyStore",
    "RedisIdempotencyStore",
    "IdempotencyGuard",
    "IdempotentResult",
    "derive_key",
    "DEFAULT_TTL_SECONDS",
]

# Fin del archivo paywall/shared/idempotency/__init__.py
