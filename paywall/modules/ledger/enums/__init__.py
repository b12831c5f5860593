# -*- coding: utf-8 -*-
"""
paywall/modules/ledger/enums/__init__.py
"""

from enum import StrEnum


class LedgerEntryType(StrEnum):
    CHARGE = "charge"
    PLATFORM_FEE = "platform_fee"
    PROCESSOR_FEE = "processor_fee"
    REFUND = "refund"
    PAYOUT = "payout"

    __db_enum_name__ = "ledger_entry_type"


class LedgerReferenceType(StrEnum):
    PURCHASE = "purchase"
    REFUND = "refund"
    PAYOUT = "payout"

    __db_enum_name__ = "ledger_reference_type"


__all__ = ["LedgerEntryType", "LedgerReferenceType"]

# Fin del archivo paywall/modules/ledger/enums/__init__.py
