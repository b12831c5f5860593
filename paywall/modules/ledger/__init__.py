# -*- coding: utf-8 -*-
"""
paywall/modules/ledger/__init__.py

Ledger financiero del marketplace: una fila inmutable por movimiento,
atribuida a la cuenta del dueño. Saldo = suma de amount_cents.

Estructura:
- enums: LedgerEntryType, LedgerReferenceType
- models: LedgerEntry
- repositories: LedgerEntryRepository
- services: fee_calculator (reparto marketplace), ledger_service (LedgerEngine)
- routes: transparencia del dueño (saldo y desglose)

Autor: Equipo Paywall
Fecha: 2026-02-07
"""

# Fin del archivo paywall/modules/ledger/__init__.py
