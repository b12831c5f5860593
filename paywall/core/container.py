# -*- coding: utf-8 -*-
"""
paywall/core/container.py

Contenedor explícito del motor (sin singletons de módulo).

PaywallEngine agrupa repositorios, servicios, cliente del gateway y
guardia de idempotencia. Se construye una vez en el lifespan de FastAPI,
se guarda en app.state.engine y las rutas lo obtienen con
Depends(get_engine). Los tests construyen el suyo con un gateway falso
y un almacén de idempotencia en memoria.

Autor: Equipo Paywall
Fecha: 2026-02-15
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from fastapi import Request

from paywall.shared.config.settings_base import BaseAppSettings
from paywall.shared.config.settings_payments import PaymentsSettings
from paywall.shared.idempotency import (
    IdempotencyGuard,
    IdempotencyKeyStore,
    InMemoryIdempotencyStore,
    RedisIdempotencyStore,
)
from paywall.shared.redis import RedisClientManager
from paywall.shared.utils.datetime_helpers import utcnow
from paywall.modules.catalog.repositories import (
    GameRepository,
    OwnerAccountRepository,
    ViewerRepository,
)
from paywall.modules.coupons.repositories import CouponRedemptionRepository, CouponRepository
from paywall.modules.coupons.services import CouponService
from paywall.modules.entitlements.repositories import (
    EntitlementRepository,
    PlaybackSessionRepository,
)
from paywall.modules.entitlements.services import EntitlementService, PlaybackSessionService
from paywall.modules.ledger.repositories import LedgerEntryRepository
from paywall.modules.ledger.services import LedgerService
from paywall.modules.purchases.adapters import PaymentGatewayClient, SquareGatewayClient
from paywall.modules.purchases.facades.webhooks import WebhookProcessor
from paywall.modules.purchases.repositories import PurchaseRepository
from paywall.modules.purchases.services import PurchaseStateMachine

logger = logging.getLogger(__name__)


@dataclass
class PaywallEngine:
    settings: BaseAppSettings
    payments_settings: PaymentsSettings

    # ===== Repositorios =====
    owner_repo: OwnerAccountRepository
    game_repo: GameRepository
    viewer_repo: ViewerRepository
    purchase_repo: PurchaseRepository
    ledger_repo: LedgerEntryRepository
    coupon_repo: CouponRepository
    redemption_repo: CouponRedemptionRepository
    entitlement_repo: EntitlementRepository
    playback_repo: PlaybackSessionRepository

    # ===== Servicios =====
    ledger: LedgerService
    coupons: CouponService
    entitlements: EntitlementService
    playback: PlaybackSessionService
    state_machine: PurchaseStateMachine
    idempotency: IdempotencyGuard
    webhooks: WebhookProcessor

    # ===== Colaboradores externos =====
    gateway: PaymentGatewayClient
    redis: Optional[RedisClientManager] = None

    async def aclose(self) -> None:
        await self.gateway.aclose()
        if self.redis is not None:
            await self.redis.close()
        logger.info("paywall_engine_closed")


def build_square_gateway(payments_settings: PaymentsSettings) -> SquareGatewayClient:
    ps = payments_settings
    return SquareGatewayClient(
        access_token=ps.square_access_token,
        location_id=ps.square_location_id,
        base_url=ps.square_base_url,
        timeout_seconds=ps.gateway_timeout_seconds,
        max_retries=ps.gateway_max_retries,
    )


async def build_idempotency_store(
    redis: Optional[RedisClientManager],
) -> IdempotencyKeyStore:
    """Redis si está configurado y responde; si no, memoria del proceso."""
    if redis is not None and redis.is_configured:
        client = await redis.get_client()
        if client is not None:
            logger.info("idempotency_store backend=redis")
            return RedisIdempotencyStore(client)
        logger.warning("idempotency_store backend=memory reason=redis_unavailable")
    else:
        logger.info("idempotency_store backend=memory")
    return InMemoryIdempotencyStore()


def build_engine_container(
    settings: BaseAppSettings,
    payments_settings: PaymentsSettings,
    *,
    idempotency_store: IdempotencyKeyStore,
    gateway: Optional[PaymentGatewayClient] = None,
    redis: Optional[RedisClientManager] = None,
    clock: Callable[[], datetime] = utcnow,
) -> PaywallEngine:
    """Cablea repositorios y servicios. No abre conexiones por sí mismo."""
    owner_repo = OwnerAccountRepository()
    game_repo = GameRepository()
    viewer_repo = ViewerRepository()
    purchase_repo = PurchaseRepository()
    ledger_repo = LedgerEntryRepository()
    coupon_repo = CouponRepository()
    redemption_repo = CouponRedemptionRepository()
    entitlement_repo = EntitlementRepository()
    playback_repo = PlaybackSessionRepository()

    ledger = LedgerService(ledger_repo)
    coupons = CouponService(coupon_repo, redemption_repo, clock=clock)
    entitlements = EntitlementService(
        entitlement_repo,
        game_repo,
        default_hours=payments_settings.entitlement_default_hours,
        clock=clock,
    )
    playback = PlaybackSessionService(
        playback_repo, entitlements, purchase_repo, game_repo, clock=clock
    )
    state_machine = PurchaseStateMachine(
        purchase_repo, ledger, coupons, entitlements, payments_settings, clock=clock
    )
    guard = IdempotencyGuard(idempotency_store, ttl_seconds=payments_settings.idempotency_ttl_seconds)
    webhooks = WebhookProcessor(purchase_repo, state_machine, guard)

    return PaywallEngine(
        settings=settings,
        payments_settings=payments_settings,
        owner_repo=owner_repo,
        game_repo=game_repo,
        viewer_repo=viewer_repo,
        purchase_repo=purchase_repo,
        ledger_repo=ledger_repo,
        coupon_repo=coupon_repo,
        redemption_repo=redemption_repo,
        entitlement_repo=entitlement_repo,
        playback_repo=playback_repo,
        ledger=ledger,
        coupons=coupons,
        entitlements=entitlements,
        playback=playback,
        state_machine=state_machine,
        idempotency=guard,
        webhooks=webhooks,
        gateway=gateway or build_square_gateway(payments_settings),
        redis=redis,
    )


def get_engine(request: Request) -> PaywallEngine:
    """Dependencia FastAPI: contenedor construido en el lifespan."""
    return request.app.state.engine


__all__ = [
    "PaywallEngine",
    "build_engine_container",
    "build_idempotency_store",
    "build_square_gateway",
    "get_engine",
]

# Fin del archivo paywall/core/container.py
