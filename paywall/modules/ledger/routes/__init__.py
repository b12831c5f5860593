# -*- coding: utf-8 -*-
"""
paywall/modules/ledger/routes/__init__.py
"""

from .owner_ledger_routes import router

__all__ = ["router"]

# Fin del archivo paywall/modules/ledger/routes/__init__.py
