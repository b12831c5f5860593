# -*- coding: utf-8 -*-
"""
paywall/main.py

Punto de entrada principal del paywall.

Ajustes clave:
- Uso de paywall.core.settings como fachada de configuración.
- Engine de DB, session factory y contenedor del motor en app.state
  (sin singletons de módulo); las rutas los obtienen vía Depends.
- Idempotencia en Redis si REDIS_URL está configurado; memoria si no.
- Montaje de observabilidad Prometheus (/metrics) vía paywall.observability.prom
- Health principal /health delegado al paquete paywall.routes

Autor: Equipo Paywall
Fecha: 2026-02-16
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

# ---------------------------------------------------------------------------
# Cargar .env ANTES de construir settings
# Fuera de producción: override=True para que .env mande sobre el entorno
# ---------------------------------------------------------------------------
from dotenv import load_dotenv

_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_PYTHON_ENV = os.getenv("PYTHON_ENV", "development").strip().strip('"').strip("'").lower()
_override_env = _PYTHON_ENV not in ("production", "test")
load_dotenv(dotenv_path=_ENV_PATH, override=_override_env)

import anyio
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from paywall.core.container import (
    PaywallEngine,
    build_engine_container,
    build_idempotency_store,
)
from paywall.core.db import build_engine, build_session_factory, create_schema
from paywall.core.logging import setup_logging
from paywall.core.settings import BaseAppSettings, get_payments_settings, get_settings
from paywall.observability.prom import setup_observability
from paywall.shared.middleware import (
    JSONExceptionMiddleware,
    RequestLoggingMiddleware,
    register_exception_handlers,
)
from paywall.shared.redis import RedisClientManager

logger = logging.getLogger(__name__)


def _build_lifespan(
    settings: BaseAppSettings,
    engine_container: Optional[PaywallEngine],
    db_engine: Optional[AsyncEngine],
):
    """Lifespan: recursos inyectados no se cierran aquí (los posee quien los creó)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ────────── STARTUP ──────────
        owns_db = db_engine is None
        engine = db_engine or build_engine(settings.database_url, echo=settings.db_echo_sql)
        if owns_db and (settings.is_dev or settings.is_test):
            await create_schema(engine)

        app.state.db_engine = engine
        app.state.session_factory = build_session_factory(engine)

        owns_container = engine_container is None
        if owns_container:
            redis = RedisClientManager(settings.redis_url)
            store = await build_idempotency_store(redis)
            container = build_engine_container(
                settings,
                get_payments_settings(),
                idempotency_store=store,
                redis=redis,
            )
        else:
            container = engine_container
        app.state.engine = container

        logger.info("paywall_started env=%s", settings.python_env)
        try:
            yield
        finally:
            # ────────── SHUTDOWN ──────────
            with anyio.CancelScope(shield=True):
                if owns_container:
                    await container.aclose()
                if owns_db:
                    await engine.dispose()
            logger.info("paywall_stopped")

    return lifespan


def _configure_cors(app_instance: FastAPI, settings: BaseAppSettings) -> None:
    origins = settings.get_cors_origins()
    is_wildcard_only = origins == ["*"]
    if is_wildcard_only and settings.is_prod:
        # settings ya lo rechaza; no se añade middleware (fail-closed)
        logger.error("cors_disabled reason=wildcard_in_production")
        return

    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # "*" con credenciales es inválido en navegadores
        allow_credentials=not is_wildcard_only,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
        max_age=600,
    )
    logger.info("cors_configured origins=%s", origins)


def _include_routers(app_instance: FastAPI) -> None:
    from paywall.modules.coupons.routes import admin_router as coupon_admin_router
    from paywall.modules.coupons.routes import public_router as coupon_public_router
    from paywall.modules.entitlements.routes import admin_router as entitlement_admin_router
    from paywall.modules.entitlements.routes import watch_router
    from paywall.modules.ledger.routes import router as ledger_router
    from paywall.modules.purchases.routes import checkout_router, webhook_router
    from paywall.routes import health_router

    api_prefix = "/api"
    app_instance.include_router(checkout_router, prefix=api_prefix)
    app_instance.include_router(webhook_router, prefix=api_prefix)
    app_instance.include_router(coupon_public_router, prefix=api_prefix)
    app_instance.include_router(coupon_admin_router, prefix=api_prefix)
    app_instance.include_router(watch_router, prefix=api_prefix)
    app_instance.include_router(entitlement_admin_router, prefix=api_prefix)
    app_instance.include_router(ledger_router, prefix=api_prefix)
    app_instance.include_router(health_router)


openapi_tags = [
    {"name": "checkout", "description": "Checkout, confirmación de pago y estado de compras"},
    {"name": "webhooks", "description": "Notificaciones firmadas del proveedor de pagos"},
    {"name": "coupons", "description": "Validación y administración de cupones"},
    {"name": "watch", "description": "Sesiones de reproducción y telemetría"},
    {"name": "ledger", "description": "Balances y transparencia de montos"},
    {"name": "health", "description": "Estado del servicio"},
]


def create_app(
    settings: Optional[BaseAppSettings] = None,
    *,
    engine_container: Optional[PaywallEngine] = None,
    db_engine: Optional[AsyncEngine] = None,
) -> FastAPI:
    """
    Construye la aplicación FastAPI.

    Args:
        settings: Configuración; por defecto la de PYTHON_ENV.
        engine_container: Contenedor ya construido (tests con gateway falso).
        db_engine: AsyncEngine compartido (tests con SQLite en memoria).
    """
    settings = settings or get_settings()
    setup_logging(level=settings.log_level, fmt=settings.log_format)

    app_instance = FastAPI(
        title=settings.app_name,
        description="API de compras, ledger y entitlements del paywall",
        version=settings.app_version,
        lifespan=_build_lifespan(settings, engine_container, db_engine),
        openapi_tags=openapi_tags,
    )
    app_instance.state.settings = settings

    # Orden: el último middleware agregado es el más externo
    setup_observability(app_instance, http_metrics=settings.http_metrics_enabled)
    app_instance.add_middleware(RequestLoggingMiddleware)
    app_instance.add_middleware(JSONExceptionMiddleware)
    _configure_cors(app_instance, settings)

    register_exception_handlers(app_instance)
    _include_routers(app_instance)
    return app_instance


app = create_app()


if __name__ == "__main__":
    _settings = get_settings()
    uvicorn.run(
        "paywall.main:app",
        host=_settings.app_host,
        port=_settings.app_port,
        reload=_settings.is_dev,
    )

# Fin del archivo paywall/main.py
