# -*- coding: utf-8 -*-
"""
paywall/__init__.py

Paquete principal del backend del paywall (compras, ledger y entitlements).

Funciones:
- Asegura compatibilidad del event loop de asyncio en Windows
  (necesario para asyncpg con SQLAlchemy Async).

Autor: Equipo Paywall
Fecha: 2026-02-03
"""
import sys
import asyncio

if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

__version__ = "1.0.0"

# Fin del archivo paywall/__init__.py
