# -*- coding: utf-8 -*-
"""
paywall/modules/ledger/models/__init__.py
"""

from .ledger_entry_models import LedgerEntry

__all__ = ["LedgerEntry"]
