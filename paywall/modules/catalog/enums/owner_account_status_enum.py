# -*- coding: utf-8 -*-
"""
paywall/modules/catalog/enums/owner_account_status_enum.py

Autor: Equipo Paywall
Fecha: 2026-02-06
"""

from enum import StrEnum


class OwnerAccountStatus(StrEnum):
    PENDING_VERIFICATION = "pending_verification"
    ACTIVE = "active"
    SUSPENDED = "suspended"

    __db_enum_name__ = "owner_account_status"


__all__ = ["OwnerAccountStatus"]

# Fin del archivo paywall/modules/catalog/enums/owner_account_status_enum.py
