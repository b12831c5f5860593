# -*- coding: utf-8 -*-
"""
paywall/modules/catalog/__init__.py

Colaboradores de catálogo del motor de compras:
- OwnerAccount: cuenta del dueño del evento (recibe el neto)
- Game: transmisión con precio y horario
- ViewerIdentity: espectador identificado por email

Autor: Equipo Paywall
Fecha: 2026-02-06
"""

# Fin del archivo paywall/modules/catalog/__init__.py
