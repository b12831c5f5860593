# -*- coding: utf-8 -*-
"""
paywall/core/__init__.py

Fachadas de arranque: settings, logging, base de datos y contenedor
del motor. Los submódulos se importan explícitamente
(`from paywall.core.container import get_engine`) para no arrastrar
todos los módulos de negocio al importar la configuración.

Autor: Equipo Paywall
Fecha: 2026-02-03
"""

# Fin del archivo paywall/core/__init__.py
