# -*- coding: utf-8 -*-
"""
paywall/shared/utils/http_retry_utils.py

Reintentos acotados con backoff exponencial y jitter para llamadas HTTP
salientes (gateway de pagos).

Solo se reintentan peticiones que el servidor deduplica (p. ej. POST con
idempotency_key de Square); el número de intentos siempre es finito.

Autor: Equipo Paywall
Fecha: 2026-02-06
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, FrozenSet

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_STATUS: FrozenSet[int] = frozenset({429, 500, 502, 503, 504})


async def retry_with_backoff(
    send: Callable[[], Awaitable[httpx.Response]],
    *,
    max_retries: int = 2,
    base_delay: float = 0.5,
    max_delay: float = 5.0,
    backoff_factor: float = 2.0,
    retry_on_status: FrozenSet[int] = RETRYABLE_STATUS,
) -> httpx.Response:
    """
    Ejecuta `send()` con reintentos ante errores de transporte y 429/5xx.

    Args:
        send: Corrutina sin argumentos que realiza la petición
        max_retries: Reintentos adicionales al primer intento
        base_delay: Delay inicial en segundos
        max_delay: Tope del delay en segundos
        backoff_factor: Multiplicador del delay por intento
        retry_on_status: Códigos HTTP que se reintentan

    Returns:
        La última respuesta obtenida (puede ser un 5xx si se agotaron intentos;
        el llamador decide cómo mapearla).

    Raises:
        httpx.TransportError: si el último intento falla a nivel de transporte
            (incluye timeouts).
    """
    if max_retries < 0:
        raise ValueError(f"max_retries debe ser >= 0, recibido: {max_retries}")

    delay = base_delay
    for attempt in range(max_retries + 1):
        is_last = attempt == max_retries
        try:
            response = await send()
        except httpx.TransportError as e:
            if is_last:
                logger.error(
                    "http_transport_error attempts=%d error=%s",
                    attempt + 1, type(e).__name__,
                )
                raise
            logger.warning(
                "http_transport_error attempt=%d/%d error=%s retry_in=%.2fs",
                attempt + 1, max_retries + 1, type(e).__name__, delay,
            )
        else:
            if response.status_code not in retry_on_status or is_last:
                return response
            logger.warning(
                "http_retryable_status status=%d attempt=%d/%d retry_in=%.2fs",
                response.status_code, attempt + 1, max_retries + 1, delay,
            )

        # Jitter para evitar thundering herd
        await asyncio.sleep(delay + random.uniform(0, 0.2 * delay))
        delay = min(delay * backoff_factor, max_delay)

    raise RuntimeError("unreachable: retry loop exited without result")


__all__ = ["retry_with_backoff", "RETRYABLE_STATUS"]

# Fin del archivo paywall/shared/utils/http_retry_utils.py
