# -*- coding: utf-8 -*-
"""
tests/conftest.py

Config global de tests del paywall.

- PYTHON_ENV=test antes de importar la app (settings de test, sin Redis).
- SQLite en memoria por test (StaticPool: una sola conexión compartida
  entre la sesión del test y las sesiones de la app).
- Reloj congelado inyectado en servicios para ventanas deterministas.
- Gateway falso: nunca se llama a Square en la suite.
- Fábricas de filas (owner, game, viewer, purchase, coupon) que hacen
  commit, para que los datos sean visibles desde cualquier sesión.
- Cliente httpx con ASGITransport y ciclo de vida vía asgi-lifespan.

Autor: Equipo Paywall
Fecha: 2026-02-17
"""

import os

os.environ["PYTHON_ENV"] = "test"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections.abc import AsyncIterator
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from paywall.core.container import build_engine_container
from paywall.core.db import build_engine, build_session_factory, create_schema
from paywall.shared.config.settings_payments import PaymentsSettings
from paywall.shared.config.settings_testing import EnvTestingSettings
from paywall.shared.errors import GatewayError
from paywall.shared.idempotency import InMemoryIdempotencyStore
from paywall.modules.catalog.enums import GameState, OwnerAccountStatus
from paywall.modules.catalog.models import Game, OwnerAccount, ViewerIdentity
from paywall.modules.coupons.enums import CouponStatus, DiscountType
from paywall.modules.coupons.models import CouponCode
from paywall.modules.purchases.adapters import GatewayConfirmation, GatewayPaymentStatus
from paywall.modules.purchases.enums import PurchaseStatus
from paywall.modules.purchases.models import Purchase

TEST_APP_URL = "https://app.paywall-demo.com"
TEST_SERVICE_TOKEN = "svc-test-token"
TEST_SIGNATURE_KEY = "test-signature-key"
TEST_NOTIFICATION_URL = "https://api.paywall-demo.com/api/webhooks/square"

T0 = datetime(2026, 3, 1, 18, 0, tzinfo=timezone.utc)


# -----------------------------------------------------------------------------
# Reloj congelado
# -----------------------------------------------------------------------------
class FrozenClock:
    """Reloj inyectable: clock() devuelve `now`; advance() lo mueve."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


# -----------------------------------------------------------------------------
# Gateway falso
# -----------------------------------------------------------------------------
class FakeGateway:
    """Gateway de pagos en memoria con el contrato de PaymentGatewayClient."""

    def __init__(self):
        self.next_status: str = GatewayPaymentStatus.COMPLETED
        self.processing_fee_cents: Optional[int] = None
        self.error: Optional[GatewayError] = None
        self.calls: List[dict] = []
        self.closed = False

    async def confirm_payment(
        self,
        purchase_id: UUID,
        source_id: str,
        amount_cents: int,
        currency: str,
    ) -> GatewayConfirmation:
        self.calls.append(
            {
                "purchase_id": purchase_id,
                "source_id": source_id,
                "amount_cents": amount_cents,
                "currency": currency,
            }
        )
        if self.error is not None:
            raise self.error
        return GatewayConfirmation(
            provider_payment_id=f"sq_pay_{len(self.calls)}",
            status=self.next_status,
            customer_id="sq_cust_1",
            processing_fee_cents=self.processing_fee_cents,
        )

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


# -----------------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------------
@pytest.fixture
def app_settings() -> EnvTestingSettings:
    return EnvTestingSettings(APP_URL=TEST_APP_URL, APP_SERVICE_TOKEN=TEST_SERVICE_TOKEN)


@pytest.fixture
def payments_settings() -> PaymentsSettings:
    return PaymentsSettings(
        platform_fee_percent=Decimal("10"),
        processor_fee_percent=Decimal("2.9"),
        processor_fee_fixed_cents=30,
        square_webhook_signature_key=TEST_SIGNATURE_KEY,
        square_webhook_notification_url=TEST_NOTIFICATION_URL,
        allow_insecure_webhooks=False,
    )


# -----------------------------------------------------------------------------
# Base de datos
# -----------------------------------------------------------------------------
@pytest.fixture
async def db_engine():
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


# -----------------------------------------------------------------------------
# Contenedor del motor
# -----------------------------------------------------------------------------
@pytest.fixture
def idempotency_store() -> InMemoryIdempotencyStore:
    return InMemoryIdempotencyStore()


@pytest.fixture
def paywall(app_settings, payments_settings, idempotency_store, fake_gateway, clock):
    return build_engine_container(
        app_settings,
        payments_settings,
        idempotency_store=idempotency_store,
        gateway=fake_gateway,
        clock=clock,
    )


# -----------------------------------------------------------------------------
# App FastAPI y cliente httpx
# -----------------------------------------------------------------------------
@pytest.fixture
async def async_client(app_settings, paywall, db_engine) -> AsyncIterator[AsyncClient]:
    """
    Cliente HTTP asíncrono contra una app construida con el contenedor y el
    engine de la suite; startup/shutdown mediante asgi-lifespan.
    """
    from paywall.main import create_app

    app = create_app(app_settings, engine_container=paywall, db_engine=db_engine)
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client


# -----------------------------------------------------------------------------
# Fábricas
# -----------------------------------------------------------------------------
@pytest.fixture
def make_owner(db):
    async def _make(**overrides) -> OwnerAccount:
        owner = OwnerAccount(
            display_name=overrides.pop("display_name", "Tigers Baseball Club"),
            status=overrides.pop("status", OwnerAccountStatus.ACTIVE),
            **overrides,
        )
        db.add(owner)
        await db.commit()
        return owner

    return _make


@pytest.fixture
def make_game(db, make_owner, clock):
    async def _make(owner: Optional[OwnerAccount] = None, **overrides) -> Game:
        owner = owner or await make_owner()
        game = Game(
            owner_account_id=owner.id,
            title=overrides.pop("title", "Tigers vs Lions"),
            state=overrides.pop("state", GameState.LIVE),
            price_cents=overrides.pop("price_cents", 499),
            currency=overrides.pop("currency", "USD"),
            starts_at=overrides.pop("starts_at", clock.now - timedelta(minutes=30)),
            ends_at=overrides.pop("ends_at", clock.now + timedelta(hours=3)),
            **overrides,
        )
        db.add(game)
        await db.commit()
        return game

    return _make


@pytest.fixture
def make_viewer(db):
    counter = {"n": 0}

    async def _make(email: Optional[str] = None, **overrides) -> ViewerIdentity:
        counter["n"] += 1
        viewer = ViewerIdentity(email=email or f"fan{counter['n']}@example.com", **overrides)
        db.add(viewer)
        await db.commit()
        return viewer

    return _make


@pytest.fixture
def make_purchase(db, make_game, make_viewer, paywall):
    """Compra en `created` con el reparto estimado, como la deja el checkout."""

    async def _make(
        game: Optional[Game] = None,
        viewer: Optional[ViewerIdentity] = None,
        amount_cents: Optional[int] = None,
        **overrides,
    ) -> Purchase:
        game = game or await make_game()
        viewer = viewer or await make_viewer()
        amount = game.price_cents if amount_cents is None else amount_cents
        split = paywall.state_machine.compute_split(amount)
        purchase = Purchase(
            game_id=game.id,
            viewer_id=viewer.id,
            recipient_owner_account_id=game.owner_account_id,
            amount_cents=amount,
            original_amount_cents=overrides.pop("original_amount_cents", amount),
            discount_cents=overrides.pop("discount_cents", 0),
            currency=game.currency,
            platform_fee_cents=split.platform_fee_cents,
            processor_fee_cents=split.processor_fee_cents,
            owner_net_cents=split.owner_net_cents,
            status=overrides.pop("status", PurchaseStatus.CREATED),
            **overrides,
        )
        db.add(purchase)
        await db.commit()
        return purchase

    return _make


@pytest.fixture
def make_coupon(db, clock):
    async def _make(code: str = "FAN10", **overrides) -> CouponCode:
        coupon = CouponCode(
            code=code.upper(),
            discount_type=overrides.pop("discount_type", DiscountType.PERCENTAGE),
            discount_value=overrides.pop("discount_value", 10),
            max_uses_per_viewer=overrides.pop("max_uses_per_viewer", 1),
            valid_from=overrides.pop("valid_from", clock.now - timedelta(days=1)),
            status=overrides.pop("status", CouponStatus.ACTIVE),
            used_count=overrides.pop("used_count", 0),
            **overrides,
        )
        db.add(coupon)
        await db.commit()
        return coupon

    return _make

# Fin del archivo tests/conftest.py
