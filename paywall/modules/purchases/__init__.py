# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/__init__.py

Compras: ciclo de vida (created → paid | failed, paid → refunded),
integración con el gateway (Square) y procesamiento de webhooks.

Estructura:
- enums: PurchaseStatus + mapa de transiciones
- models: Purchase
- repositories: PurchaseRepository
- services: purchase_state_machine (PurchaseStateMachine),
  webhooks/signature_verification
- adapters: square_gateway (cliente httpx del gateway)
- facades: checkout (start/confirm), webhooks (normalize/handler), status
- routes: checkout, purchases, webhooks

Autor: Equipo Paywall
Fecha: 2026-02-11
"""

# Fin del archivo paywall/modules/purchases/__init__.py
