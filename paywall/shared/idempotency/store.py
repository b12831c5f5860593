# -*- coding: utf-8 -*-
"""
paywall/shared/idempotency/store.py

Almacenes de claves de idempotencia.

Contrato (IdempotencyKeyStore):
- get(key)                      -> respuesta cacheada (solo si la operación terminó)
- set(key, response, ttl)       -> guarda la respuesta final con TTL
- reserve(key, ttl)             -> check-then-set ATÓMICO de un marcador "en curso"
- release(key)                  -> libera la reserva tras un fallo (permite reintento)

Implementaciones:
- InMemoryIdempotencyStore: un solo proceso (dev/tests), asyncio.Lock + TTL monotónico
- RedisIdempotencyStore: producción, SET NX EX sobre redis.asyncio

Autor: Equipo Paywall
Fecha: 2026-02-05
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

_PENDING = "pending"
_COMPLETED = "completed"


class IdempotencyKeyStore(ABC):
    """Interfaz abstracta para almacenes de claves de idempotencia."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Respuesta final cacheada, o None si no existe / sigue en curso / expiró."""
        ...

    @abstractmethod
    async def set(self, key: str, response: Dict[str, Any], ttl_seconds: int) -> None:
        ...

    @abstractmethod
    async def reserve(self, key: str, ttl_seconds: int) -> bool:
        """
        Reserva la clave si no existe (atómico).

        Returns:
            True si esta llamada obtuvo la reserva, False si ya existía
            (en curso o completada).
        """
        ...

    @abstractmethod
    async def release(self, key: str) -> None:
        ...


class InMemoryIdempotencyStore(IdempotencyKeyStore):
    """
    Almacén en memoria del proceso.

    Válido para un solo worker; con varios procesos usar Redis.
    """

    def __init__(self, clock=time.monotonic) -> None:
        self._entries: Dict[str, Tuple[float, Dict[str, Any]]] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    def _live(self, key: str) -> Optional[Dict[str, Any]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, record = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return record

    def _sweep(self) -> None:
        now = self._clock()
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for k in expired:
            del self._entries[k]

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        async with self._lock:
            record = self._live(key)
        if record is None or record["state"] != _COMPLETED:
            return None
        return record["response"]

    async def set(self, key: str, response: Dict[str, Any], ttl_seconds: int) -> None:
        async with self._lock:
            self._entries[key] = (
                self._clock() + ttl_seconds,
                {"state": _COMPLETED, "response": response},
            )

    async def reserve(self, key: str, ttl_seconds: int) -> bool:
        async with self._lock:
            # Purga claves expiradas aunque nadie las vuelva a leer
            self._sweep()
            if self._live(key) is not None:
                return False
            self._entries[key] = (self._clock() + ttl_seconds, {"state": _PENDING})
            return True

    async def release(self, key: str) -> None:
        async with self._lock:
            record = self._live(key)
            if record is not None and record["state"] == _PENDING:
                del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)


class RedisIdempotencyStore(IdempotencyKeyStore):
    """
    Almacén sobre redis.asyncio.

    La reserva usa SET key value NX EX ttl: una sola operación atómica en el
    servidor, válida entre procesos y réplicas.
    """

    def __init__(self, client: Any, namespace: str = "paywall:idem") -> None:
        self._client = client
        self._namespace = namespace

    def _k(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        raw = await self._client.get(self._k(key))
        if raw is None:
            return None
        record = json.loads(raw)
        if record.get("state") != _COMPLETED:
            return None
        return record["response"]

    async def set(self, key: str, response: Dict[str, Any], ttl_seconds: int) -> None:
        payload = json.dumps({"state": _COMPLETED, "response": response}, default=str)
        await self._client.set(self._k(key), payload, ex=ttl_seconds)

    async def reserve(self, key: str, ttl_seconds: int) -> bool:
        payload = json.dumps({"state": _PENDING})
        acquired = await self._client.set(self._k(key), payload, ex=ttl_seconds, nx=True)
        return bool(acquired)

    async def release(self, key: str) -> None:
        raw = await self._client.get(self._k(key))
        if raw is None:
            return
        if json.loads(raw).get("state") == _PENDING:
            await self._client.delete(self._k(key))


__all__ = [
    "IdempotencyKeyStore",
    "InMemoryIdempotencyStore",
    "RedisIdempotencyStore",
]

# Fin del archivo paywall/shared/idempotency/store.py
