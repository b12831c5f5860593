# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/enums/purchase_status_enum.py

Estados de una compra.

Autor: Equipo Paywall
Fecha: 2026-02-11
"""

from enum import StrEnum


class PurchaseStatus(StrEnum):
    CREATED = "created"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"

    __db_enum_name__ = "purchase_status"


__all__ = ["PurchaseStatus"]

# Fin del archivo paywall/modules/purchases/enums/purchase_status_enum.py
