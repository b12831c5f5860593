# -*- coding: utf-8 -*-
"""
paywall/modules/ledger/repositories/__init__.py
"""

from .ledger_entry_repository import LedgerEntryRepository

__all__ = ["LedgerEntryRepository"]

# Fin del archivo paywall/modules/ledger/repositories/__init__.py
