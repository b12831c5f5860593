# -*- coding: utf-8 -*-
"""
paywall/modules/coupons/services/coupon_service.py

CouponEngine: valida códigos contra el contexto de una compra, calcula
el descuento y registra la redención cuando la compra queda pagada.

Reglas:
- validate() nunca lanza por una regla de negocio: devuelve
  CouponValidationResult con un reason_code y un mensaje legible.
- Orden de chequeos (corta en el primero que falla):
  existe → activo → ventana de vigencia → tope global → tope por
  espectador (historial persistido) → juego → dueño → monto mínimo.
- apply() es a lo sumo una vez por compra (purchase_id UNIQUE) y el
  incremento de used_count es un UPDATE condicional atómico.

Autor: Equipo Paywall
Fecha: 2026-02-08
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.shared.errors import (
    ConflictError,
    InvariantViolationError,
    NotFoundError,
    ValidationFailedError,
)
from paywall.shared.utils.datetime_helpers import utcnow
from paywall.shared.utils.money import floor_percent_of
from paywall.modules.coupons.enums import CouponRejectionReason, CouponStatus, DiscountType
from paywall.modules.coupons.models import CouponCode, CouponRedemption
from paywall.modules.coupons.repositories import (
    CouponRedemptionRepository,
    CouponRepository,
    normalize_code,
)
from paywall.modules.coupons.schemas import CouponCreate

logger = logging.getLogger(__name__)

Reason = CouponRejectionReason


# =============================================================================
# TIPOS DE RESULTADO
# =============================================================================

@dataclass(frozen=True)
class CouponContext:
    """Contexto de compra contra el que se valida un cupón."""

    game_id: UUID
    owner_account_id: UUID
    amount_cents: int
    viewer_id: Optional[UUID] = None


@dataclass(frozen=True)
class CouponValidationResult:
    valid: bool
    coupon: Optional[CouponCode] = None
    discount_cents: Optional[int] = None
    error: Optional[str] = None
    reason_code: Optional[CouponRejectionReason] = None

    @classmethod
    def reject(cls, reason: CouponRejectionReason, message: str) -> "CouponValidationResult":
        return cls(valid=False, error=message, reason_code=reason)


@dataclass(frozen=True)
class CouponApplyResult:
    applied: bool
    redemption: Optional[CouponRedemption] = None
    reason_code: Optional[CouponRejectionReason] = None


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass(frozen=True)
class CouponUpdate:
    """
    Comando de actualización: solo los campos mutables de un cupón.
    UNSET deja el campo intacto; None en max_uses/valid_to quita el límite.
    """

    status: Any = UNSET
    max_uses: Any = UNSET
    valid_to: Any = UNSET

    @classmethod
    def from_fields(cls, fields: dict) -> "CouponUpdate":
        allowed = {"status", "max_uses", "valid_to"}
        unknown = set(fields) - allowed
        if unknown:
            raise ValidationFailedError(
                f"Fields not updatable: {', '.join(sorted(unknown))}",
                reason_code="immutable_field",
            )
        return cls(**fields)


def _coerce_status(value: Any) -> CouponStatus:
    if value is None:
        raise ValidationFailedError("status cannot be null", reason_code="invalid_status")
    try:
        return CouponStatus(value)
    except ValueError:
        raise ValidationFailedError(
            f"Unknown coupon status {value!r}", reason_code="invalid_status"
        ) from None


def _format_minimum(amount_cents: int) -> str:
    major, minor = divmod(amount_cents, 100)
    return f"${major}.{minor:02d}"


# =============================================================================
# SERVICIO
# =============================================================================

class CouponService:
    """CouponEngine."""

    def __init__(
        self,
        coupon_repo: CouponRepository,
        redemption_repo: CouponRedemptionRepository,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.coupon_repo = coupon_repo
        self.redemption_repo = redemption_repo
        self._clock = clock

    # ---------------------------------------------------------
    # Descuento
    # ---------------------------------------------------------
    @staticmethod
    def calculate_discount(coupon: CouponCode, amount_cents: int) -> int:
        """
        percentage → floor(monto × valor / 100); fixed_cents → min(valor, monto).
        El resultado siempre queda en [0, amount_cents].
        """
        if amount_cents <= 0:
            return 0
        value = max(int(coupon.discount_value), 0)
        if coupon.discount_type == DiscountType.PERCENTAGE:
            discount = floor_percent_of(amount_cents, value)
        else:
            discount = value
        return max(0, min(discount, amount_cents))

    # ---------------------------------------------------------
    # Validación
    # ---------------------------------------------------------
    async def validate(
        self,
        session: AsyncSession,
        code: str,
        context: CouponContext,
    ) -> CouponValidationResult:
        coupon = await self.coupon_repo.get_by_code(session, code)
        if coupon is None:
            return CouponValidationResult.reject(Reason.NOT_FOUND, "Coupon code not found")

        if coupon.status != CouponStatus.ACTIVE:
            return CouponValidationResult.reject(
                Reason.INACTIVE, "This coupon code is no longer active"
            )

        now = self._clock()
        if now < coupon.valid_from:
            return CouponValidationResult.reject(
                Reason.NOT_YET_VALID, "This coupon is not yet valid"
            )
        if coupon.valid_to is not None and now > coupon.valid_to:
            return CouponValidationResult.reject(Reason.EXPIRED, "This coupon has expired")

        if coupon.max_uses is not None and coupon.used_count >= coupon.max_uses:
            return CouponValidationResult.reject(
                Reason.USAGE_LIMIT_REACHED, "This coupon has reached its usage limit"
            )

        if context.viewer_id is not None:
            prior = await self.redemption_repo.count_for_viewer(
                session, coupon.id, context.viewer_id
            )
            if prior >= coupon.max_uses_per_viewer:
                return CouponValidationResult.reject(
                    Reason.ALREADY_USED, "You have already used this coupon"
                )

        if coupon.game_id is not None and coupon.game_id != context.game_id:
            return CouponValidationResult.reject(
                Reason.WRONG_GAME, "This coupon is not valid for this game"
            )

        if coupon.owner_account_id is not None and coupon.owner_account_id != context.owner_account_id:
            return CouponValidationResult.reject(
                Reason.WRONG_OWNER, "This coupon is not valid for this seller"
            )

        if coupon.min_purchase_cents is not None and context.amount_cents < coupon.min_purchase_cents:
            return CouponValidationResult.reject(
                Reason.BELOW_MINIMUM,
                f"This coupon requires a minimum purchase of {_format_minimum(coupon.min_purchase_cents)}",
            )

        return CouponValidationResult(
            valid=True,
            coupon=coupon,
            discount_cents=self.calculate_discount(coupon, context.amount_cents),
        )

    # ---------------------------------------------------------
    # Redención
    # ---------------------------------------------------------
    async def apply(
        self,
        session: AsyncSession,
        coupon_id: UUID,
        purchase_id: UUID,
        viewer_id: UUID,
        discount_cents: int,
    ) -> CouponApplyResult:
        existing = await self.redemption_repo.get_by_purchase_id(session, purchase_id)
        if existing is not None:
            return CouponApplyResult(
                applied=False, redemption=existing, reason_code=Reason.ALREADY_REDEEMED
            )

        if discount_cents < 0:
            raise InvariantViolationError(
                "Negative coupon discount",
                coupon_id=coupon_id,
                purchase_id=purchase_id,
                discount_cents=discount_cents,
            )

        coupon = await self.coupon_repo.get(session, coupon_id)
        if coupon is None:
            raise NotFoundError("Coupon", coupon_id)

        try:
            async with session.begin_nested():
                incremented = await self.coupon_repo.try_increment_usage(
                    session, coupon_id, viewer_id=viewer_id
                )
                redemption = None
                if incremented:
                    redemption = await self.redemption_repo.create(
                        session,
                        coupon_id=coupon_id,
                        purchase_id=purchase_id,
                        viewer_id=viewer_id,
                        discount_cents=discount_cents,
                    )
        except IntegrityError:
            existing = await self.redemption_repo.get_by_purchase_id(session, purchase_id)
            if existing is None:
                raise
            logger.info(
                "coupon_apply_race purchase_id=%s coupon_id=%s: redemption already recorded",
                purchase_id, coupon_id,
            )
            return CouponApplyResult(
                applied=False, redemption=existing, reason_code=Reason.ALREADY_REDEEMED
            )

        await session.refresh(coupon)

        if redemption is None:
            reason = await self._rejection_after_failed_increment(session, coupon, viewer_id)
            logger.warning(
                "coupon_apply_rejected coupon_id=%s purchase_id=%s reason=%s",
                coupon_id, purchase_id, reason,
            )
            return CouponApplyResult(applied=False, reason_code=reason)

        logger.info(
            "coupon_applied coupon_id=%s purchase_id=%s discount_cents=%d used_count=%d",
            coupon_id, purchase_id, discount_cents, coupon.used_count,
        )
        return CouponApplyResult(applied=True, redemption=redemption)

    async def _rejection_after_failed_increment(
        self, session: AsyncSession, coupon: CouponCode, viewer_id: UUID
    ) -> CouponRejectionReason:
        if coupon.status != CouponStatus.ACTIVE:
            return Reason.INACTIVE
        if coupon.max_uses is not None and coupon.used_count >= coupon.max_uses:
            return Reason.USAGE_LIMIT_REACHED
        return Reason.ALREADY_USED

    # ---------------------------------------------------------
    # Administración
    # ---------------------------------------------------------
    async def create_coupon(self, session: AsyncSession, data: CouponCreate) -> CouponCode:
        code = normalize_code(data.code)
        if await self.coupon_repo.get_by_code(session, code) is not None:
            raise ConflictError("Coupon code already exists", details={"code": code})

        valid_from = data.valid_from or self._clock()
        if data.valid_to is not None and data.valid_to < valid_from:
            raise ValidationFailedError(
                "valid_to must be after valid_from", reason_code="invalid_window"
            )

        try:
            async with session.begin_nested():
                coupon = await self.coupon_repo.create(
                    session,
                    code=code,
                    discount_type=data.discount_type,
                    discount_value=data.discount_value,
                    owner_account_id=data.owner_account_id,
                    game_id=data.game_id,
                    max_uses=data.max_uses,
                    max_uses_per_viewer=data.max_uses_per_viewer,
                    min_purchase_cents=data.min_purchase_cents,
                    valid_from=valid_from,
                    valid_to=data.valid_to,
                    status=CouponStatus.ACTIVE,
                    used_count=0,
                )
        except IntegrityError as exc:
            raise ConflictError("Coupon code already exists", details={"code": code}) from exc

        logger.info("coupon_created coupon_id=%s code=%s", coupon.id, code)
        return coupon

    async def update_coupon(
        self,
        session: AsyncSession,
        coupon_id: UUID,
        update: CouponUpdate,
    ) -> CouponCode:
        coupon = await self.coupon_repo.get(session, coupon_id)
        if coupon is None:
            raise NotFoundError("Coupon", coupon_id)

        if update.max_uses is not UNSET and update.max_uses is not None:
            if update.max_uses < coupon.used_count:
                raise ValidationFailedError(
                    "max_uses cannot be lower than the current usage count",
                    reason_code="max_uses_below_used",
                )
        if update.valid_to is not UNSET and update.valid_to is not None:
            if update.valid_to < coupon.valid_from:
                raise ValidationFailedError(
                    "valid_to must be after valid_from", reason_code="invalid_window"
                )

        if update.status is not UNSET:
            coupon.status = _coerce_status(update.status)
        if update.max_uses is not UNSET:
            coupon.max_uses = update.max_uses
        if update.valid_to is not UNSET:
            coupon.valid_to = update.valid_to

        await session.flush()
        logger.info("coupon_updated coupon_id=%s update=%s", coupon_id, update)
        return coupon

    async def list_coupons(
        self,
        session: AsyncSession,
        status: Optional[CouponStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[CouponCode]:
        return await self.coupon_repo.list_filtered(session, status=status, limit=limit, offset=offset)

    async def get_coupon_detail(
        self, session: AsyncSession, coupon_id: UUID
    ) -> Tuple[CouponCode, Sequence[CouponRedemption]]:
        coupon = await self.coupon_repo.get(session, coupon_id)
        if coupon is None:
            raise NotFoundError("Coupon", coupon_id)
        redemptions = await self.redemption_repo.list_by_coupon(session, coupon_id)
        return coupon, redemptions


__all__ = [
    "CouponService",
    "CouponContext",
    "CouponValidationResult",
    "CouponApplyResult",
    "CouponUpdate",
    "UNSET",
]

# Fin del archivo paywall/modules/coupons/services/coupon_service.py
