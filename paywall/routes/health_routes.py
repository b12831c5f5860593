# -*- coding: utf-8 -*-
"""
paywall/routes/health_routes.py

Endpoint básico de health check del paywall.

Autor: Equipo Paywall
Fecha: 2026-02-16
"""

from fastapi import APIRouter, Request

from paywall.core.db import check_database_health
from paywall.shared.utils.datetime_helpers import utcnow

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    summary="Health check del paywall",
    description=(
        "Devuelve el estado básico del servicio, incluyendo "
        "verificación simple de conectividad a la base de datos."
    ),
)
async def health_check(request: Request) -> dict:
    """
    Health check básico.

    Returns:
        dict: información mínima de estado de la aplicación.
    """
    settings = request.app.state.settings
    db_ok = await check_database_health(request.app.state.db_engine, timeout_s=2.0)

    return {
        "status": "ok" if db_ok else "degraded",
        "timestamp": utcnow().isoformat(),
        "environment": settings.python_env,
        "database": {
            "reachable": db_ok,
        },
        "service": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
    }

# Fin del archivo paywall/routes/health_routes.py
