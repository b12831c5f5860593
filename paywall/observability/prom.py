# -*- coding: utf-8 -*-
"""
paywall/observability/prom.py

Observabilidad Prometheus del paywall.

Incluye:
- Contadores de dominio (webhooks, transiciones de compras, alertas de conciliación)
- Middleware HTTP para conteo y latencia por ruta/estado
- Endpoint /metrics compatible con Prometheus (pull model)
- Soporte multiproceso (PROMETHEUS_MULTIPROC_DIR)

Autor: Equipo Paywall
Fecha: 2026-02-12
"""
from __future__ import annotations

import os
from time import perf_counter
from typing import Optional

from fastapi import FastAPI
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    multiprocess,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

# ===== Dominio =====
WEBHOOKS_TOTAL = Counter(
    "paywall_webhooks_total",
    "Webhook deliveries by event type and outcome",
    ["event_type", "outcome"],
)
PURCHASE_TRANSITIONS_TOTAL = Counter(
    "paywall_purchase_transitions_total",
    "Applied purchase status transitions",
    ["from_status", "to_status"],
)
RECONCILIATION_ALERTS_TOTAL = Counter(
    "paywall_reconciliation_alerts_total",
    "Gateway events that contradict recorded money movements",
    ["kind"],
)

# ===== Capa HTTP (labels: method/path-template/status) =====
REQUEST_COUNT = Counter(
    "paywall_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "paywall_http_request_latency_seconds",
    "Latency per request (s)",
    ["method", "path", "status"],
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Instrumenta peticiones HTTP usando la plantilla de ruta como label."""

    async def dispatch(self, request, call_next):
        start = perf_counter()
        resp = await call_next(request)
        elapsed = perf_counter() - start

        # Plantilla (/public/purchases/{purchase_id}/status) para acotar cardinalidad
        route = request.scope.get("route")
        path = getattr(route, "path", None) or "unmatched"

        status = str(resp.status_code)
        REQUEST_LATENCY.labels(request.method, path, status).observe(elapsed)
        REQUEST_COUNT.labels(request.method, path, status).inc()
        return resp


def _build_registry() -> Optional[CollectorRegistry]:
    """CollectorRegistry multiproceso si aplica; None usa el REGISTRY global."""
    if os.environ.get("PROMETHEUS_MULTIPROC_DIR"):
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        return registry
    return None


def mount_metrics(app: FastAPI, path: str = "/metrics") -> None:
    registry = _build_registry()

    @app.get(path, include_in_schema=False)
    def metrics():
        data = generate_latest(registry) if registry else generate_latest()
        return Response(content=data, media_type=CONTENT_TYPE_LATEST)


def setup_observability(app: FastAPI, *, http_metrics: bool = True) -> None:
    """Agrega el middleware HTTP (opcional) y monta /metrics."""
    if http_metrics:
        app.add_middleware(PrometheusMiddleware)
    mount_metrics(app)


__all__ = [
    "WEBHOOKS_TOTAL",
    "PURCHASE_TRANSITIONS_TOTAL",
    "RECONCILIATION_ALERTS_TOTAL",
    "PrometheusMiddleware",
    "mount_metrics",
    "setup_observability",
]

# Fin del archivo paywall/observability/prom.py
