# -*- coding: utf-8 -*-
"""
paywall/modules/ledger/schemas/__init__.py

Esquemas Pydantic de lectura del ledger (transparencia del dueño).

Autor: Equipo Paywall
Fecha: 2026-02-07
"""

from __future__ import annotations

from datetime import datetime
from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from paywall.modules.ledger.enums import LedgerEntryType, LedgerReferenceType


class LedgerEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: LedgerEntryType
    amount_cents: int
    currency: str
    reference_type: LedgerReferenceType
    reference_id: str
    description: str
    created_at: datetime


class LedgerBalanceResponse(BaseModel):
    """Saldo del dueño más el desglose por tipo de movimiento."""

    owner_account_id: UUID
    gross_charges_cents: int = Field(description="Suma de cargos brutos (+)")
    platform_fees_cents: int = Field(description="Comisiones de plataforma netas de reversas (−)")
    processor_fees_cents: int = Field(description="Comisiones del procesador (−)")
    refunds_cents: int = Field(description="Reembolsos (−)")
    payouts_cents: int = Field(description="Pagos al dueño (−)")
    balance_cents: int = Field(description="Suma exacta de todos los movimientos")
    recent_entries: List[LedgerEntryOut] = Field(default_factory=list)


__all__ = ["LedgerEntryOut", "LedgerBalanceResponse"]

# Fin del archivo paywall/modules/ledger/schemas/__init__.py
