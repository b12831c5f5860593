# -*- coding: utf-8 -*-
"""
paywall/routes/__init__.py

Rutas transversales de la aplicación (fuera de los módulos de negocio).

Autor: Equipo Paywall
Fecha: 2026-02-16
"""

from .health_routes import router as health_router

__all__ = ["health_router"]

# Fin del archivo paywall/routes/__init__.py
