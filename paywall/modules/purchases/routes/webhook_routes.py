# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/routes/webhook_routes.py

Receptor de webhooks de Square:
- POST /webhooks/square

La firma se verifica sobre el body crudo antes de parsear nada. Sin firma
válida -> 401. El bypass (ALLOW_INSECURE_WEBHOOKS) nunca aplica en producción.
Un evento ignorado o duplicado responde 200 para que Square no reintente.

Autor: Equipo Paywall
Fecha: 2026-02-14
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.core.container import PaywallEngine, get_engine
from paywall.shared.database import get_db
from paywall.shared.errors import UnauthorizedError
from paywall.modules.purchases.schemas import WebhookAck
from paywall.modules.purchases.services.webhooks import (
    SQUARE_SIGNATURE_HEADER,
    verify_square_signature,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def _allow_insecure(request: Request, engine: PaywallEngine) -> bool:
    if not engine.payments_settings.allow_insecure_webhooks:
        return False
    if request.app.state.settings.is_prod:
        logger.error("insecure_webhooks_ignored: bypass is never honored in production")
        return False
    return True


@router.post("/square", response_model=WebhookAck)
async def square_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
    engine: PaywallEngine = Depends(get_engine),
) -> WebhookAck:
    body = await request.body()

    if _allow_insecure(request, engine):
        logger.warning("square_webhook_signature_skipped (insecure mode)")
    else:
        ps = engine.payments_settings
        ok = verify_square_signature(
            body,
            request.headers.get(SQUARE_SIGNATURE_HEADER),
            ps.square_webhook_signature_key,
            ps.square_webhook_notification_url,
        )
        if not ok:
            raise UnauthorizedError("Invalid webhook signature")

    outcome = await engine.webhooks.process(db, body)
    return WebhookAck(**outcome.to_dict())


# Fin del archivo paywall/modules/purchases/routes/webhook_routes.py
