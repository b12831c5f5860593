# -*- coding: utf-8 -*-
"""
paywall/shared/redis/client.py

Cliente Redis async compartido por instancia de la app.
Lo construye el contenedor en el lifespan (no es singleton de módulo).

Features:
- Conexión perezosa (no bloquea en import ni en construcción)
- Best-effort: get_client() devuelve None si Redis no está disponible
- Lock asyncio para evitar conexiones duplicadas

Autor: Equipo Paywall
Fecha: 2026-02-05
"""
from __future__ import annotations

import asyncio
import logging
import os
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisClientManager:
    """
    Administra un cliente redis.asyncio con conexión perezosa.

    Best-effort: si Redis no está disponible, get_client() devuelve None y
    el llamador decide el fallback.
    """

    def __init__(self, redis_url: Optional[str]):
        self._redis_url = redis_url
        self._client: Optional[aioredis.Redis] = None
        self._connected: Optional[bool] = None  # None = no intentado
        self._connect_lock = asyncio.Lock()

        if self._redis_url:
            logger.debug("RedisClientManager: configured (lazy connect) pid=%d", os.getpid())
        else:
            logger.debug("RedisClientManager: REDIS_URL not configured pid=%d", os.getpid())

    @property
    def is_configured(self) -> bool:
        return bool(self._redis_url)

    @property
    def is_connected(self) -> bool:
        return self._connected is True

    async def get_client(self) -> Optional[aioredis.Redis]:
        """
        Devuelve el cliente (conecta la primera vez).

        Returns:
            Cliente Redis o None si no está configurado / falló la conexión.
        """
        if self._connected is not None:
            return self._client if self._connected else None

        if not self.is_configured:
            self._connected = False
            return None

        async with self._connect_lock:
            if self._connected is not None:
                return self._client if self._connected else None

            client = aioredis.from_url(
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            try:
                await client.ping()
            except (RedisError, OSError) as e:
                logger.warning("RedisClientManager: connection failed: %s", str(e))
                await client.aclose()
                self._connected = False
                return None

            self._client = client
            self._connected = True
            logger.info("RedisClientManager: connected pid=%d", os.getpid())
            return self._client

    async def close(self) -> None:
        """Cierra la conexión."""
        if self._client is not None:
            try:
                await self._client.aclose()
            except (RedisError, OSError) as e:
                logger.warning("RedisClientManager: close error: %s", str(e))
            finally:
                self._client = None
                self._connected = None


__all__ = ["RedisClientManager"]

# Fin del archivo paywall/shared/redis/client.py
