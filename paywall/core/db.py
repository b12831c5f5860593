# -*- coding: utf-8 -*-
"""
paywall/core/db.py

Fachada de la capa de datos (SQLAlchemy async).

Expone las primitivas de `paywall.shared.database` y register_models(),
que importa todos los modelos para que Base.metadata conozca cada tabla
antes de create_all() o de resolver ForeignKeys entre módulos.

Autor: Equipo Paywall
Fecha: 2026-02-03
"""

from paywall.shared.database import (
    Base,
    build_engine,
    build_session_factory,
    check_database_health,
    get_db,
    session_scope,
)


def register_models() -> None:
    """Importa los modelos de todos los módulos (idempotente)."""
    import paywall.modules.catalog.models  # noqa: F401
    import paywall.modules.coupons.models  # noqa: F401
    import paywall.modules.entitlements.models  # noqa: F401
    import paywall.modules.ledger.models  # noqa: F401
    import paywall.modules.purchases.models  # noqa: F401


async def create_schema(engine) -> None:
    """Crea las tablas (solo dev/test; producción usa migraciones)."""
    register_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = [
    "Base",
    "build_engine",
    "build_session_factory",
    "check_database_health",
    "create_schema",
    "get_db",
    "register_models",
    "session_scope",
]

# Fin del archivo paywall/core/db.py
