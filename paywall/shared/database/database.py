# -*- coding: utf-8 -*-
"""
paywall/shared/database/database.py

Construcción del engine async y de la fábrica de sesiones.

Provee:
- build_engine(url, echo): create_async_engine con ajustes por dialecto
- build_session_factory(engine): async_sessionmaker
- Dependencia FastAPI: get_db (lee la fábrica desde app.state)
- context manager: session_scope(factory)
- check_database_health(engine)

Notas:
- No hay engine global: se crea en el lifespan y se guarda en app.state.
- SQLite (tests/dev) usa StaticPool y BEGIN explícito para que los
  SAVEPOINT (begin_nested) funcionen con aiosqlite.

Autor: Equipo Paywall
Fecha: 2026-02-03
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Desactiva el BEGIN implícito de aiosqlite y emite el nuestro."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # pragma: no cover - hook
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):  # pragma: no cover - hook
        conn.exec_driver_sql("BEGIN")


def build_engine(url: str, echo: bool = False, **engine_kwargs) -> AsyncEngine:
    """
    Crea el AsyncEngine según el dialecto de la URL.

    Args:
        url: URL SQLAlchemy async (postgresql+asyncpg://... o sqlite+aiosqlite://...)
        echo: Log de SQL emitido
    """
    if url.startswith("sqlite"):
        engine = create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        _enable_sqlite_savepoints(engine)
        logger.info("[DB] engine sqlite (StaticPool, echo=%s)", echo)
        return engine

    engine = create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=engine_kwargs.pop("pool_pre_ping", True),
        **engine_kwargs,
    )
    logger.info("[DB] engine %s (echo=%s)", engine.url.render_as_string(hide_password=True), echo)
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        class_=AsyncSession,
        autoflush=False,
    )


# ── Dependencia FastAPI
async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Sesión por request. El commit lo hace la fachada/ruta que muta;
    aquí solo se garantiza rollback de cualquier transacción abierta.
    """
    factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with factory() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


# ── Context manager reutilizable en scripts/tests
@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with factory() as session:
        try:
            yield session
            # commit/rollback a cargo de quien use el scope
        finally:
            if session.in_transaction():
                await session.rollback()


# ── Health check
async def check_database_health(
    engine: AsyncEngine,
    timeout_s: float = 3.0,
    sql: str = "SELECT 1",
) -> bool:
    """
    Verifica conectividad a la base de datos.

    Returns:
        True si la conexión es exitosa, False en caso contrario
    """
    try:
        async with asyncio.timeout(timeout_s):
            async with engine.connect() as conn:
                await conn.execute(text(sql))
        return True
    except Exception as exc:
        logger.warning("[DB] health check failed: %r", exc)
        return False


__all__ = [
    "build_engine",
    "build_session_factory",
    "get_db",
    "session_scope",
    "check_database_health",
]
# Fin del archivo paywall/shared/database/database.py
