# -*- coding: utf-8 -*-
"""
paywall/modules/ledger/services/__init__.py
"""

from .fee_calculator import MarketplaceSplit, calculate_marketplace_split, estimate_processor_fee
from .ledger_service import LedgerService, LedgerPosting, LedgerBreakdown

__all__ = [
    "MarketplaceSplit",
    "calculate_marketplace_split",
    "estimate_processor_fee",
    "LedgerService",
    "LedgerPosting",
    "LedgerBreakdown",
]

# Fin del archivo paywall/modules/ledger/services/__init__.py
