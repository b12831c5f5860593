# -*- coding: utf-8 -*-
"""
Tests de CouponService (validación, descuento y redención).

Valida que:
1. El descuento nunca supera el monto (percentage → floor, fixed → min)
2. Cada regla rechaza con su reason_code y un mensaje legible
3. apply() es a lo sumo una vez por compra
4. Los topes global y por espectador se aplican en el UPDATE condicional

Autor: Equipo Paywall
Fecha: 2026-02-17
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from paywall.modules.coupons.enums import CouponRejectionReason, CouponStatus, DiscountType
from paywall.modules.coupons.services import CouponContext, CouponService

Reason = CouponRejectionReason


def _ctx(game, viewer=None, amount=None):
    return CouponContext(
        game_id=game.id,
        owner_account_id=game.owner_account_id,
        amount_cents=game.price_cents if amount is None else amount,
        viewer_id=viewer.id if viewer is not None else None,
    )


class TestCalculateDiscount:
    @pytest.mark.parametrize(
        "discount_type, value, amount, expected",
        [
            (DiscountType.PERCENTAGE, 10, 499, 49),
            (DiscountType.PERCENTAGE, 100, 499, 499),
            (DiscountType.FIXED_CENTS, 100, 499, 100),
            (DiscountType.FIXED_CENTS, 1000, 499, 499),
            (DiscountType.FIXED_CENTS, 100, 0, 0),
        ],
    )
    def test_discount_is_bounded_by_amount(self, discount_type, value, amount, expected):
        class _Coupon:
            pass

        coupon = _Coupon()
        coupon.discount_type = discount_type
        coupon.discount_value = value
        assert CouponService.calculate_discount(coupon, amount) == expected


class TestValidate:
    async def test_valid_percentage_coupon(self, db, paywall, make_game, make_coupon):
        game = await make_game(price_cents=499)
        await make_coupon("fan10", discount_value=10)

        result = await paywall.coupons.validate(db, " fan10 ", _ctx(game))

        assert result.valid is True
        assert result.discount_cents == 49
        assert result.coupon.code == "FAN10"

    async def test_unknown_code(self, db, paywall, make_game):
        game = await make_game()
        result = await paywall.coupons.validate(db, "NOPE", _ctx(game))
        assert result.valid is False
        assert result.reason_code == Reason.NOT_FOUND
        assert result.error == "Coupon code not found"

    async def test_inactive_coupon(self, db, paywall, make_game, make_coupon):
        game = await make_game()
        await make_coupon("OFF", status=CouponStatus.DISABLED)
        result = await paywall.coupons.validate(db, "OFF", _ctx(game))
        assert result.reason_code == Reason.INACTIVE

    async def test_expired_and_not_yet_valid(self, db, paywall, make_game, make_coupon, clock):
        game = await make_game()
        await make_coupon("OLD", valid_from=clock.now - timedelta(days=10), valid_to=clock.now - timedelta(days=1))
        await make_coupon("SOON", valid_from=clock.now + timedelta(days=1))

        expired = await paywall.coupons.validate(db, "OLD", _ctx(game))
        early = await paywall.coupons.validate(db, "SOON", _ctx(game))

        assert expired.reason_code == Reason.EXPIRED
        assert expired.error == "This coupon has expired"
        assert early.reason_code == Reason.NOT_YET_VALID

    async def test_usage_limit_reached(self, db, paywall, make_game, make_coupon):
        game = await make_game()
        await make_coupon("MAXED", max_uses=5, used_count=5)
        result = await paywall.coupons.validate(db, "MAXED", _ctx(game))
        assert result.reason_code == Reason.USAGE_LIMIT_REACHED

    async def test_scoped_to_other_game_or_owner(self, db, paywall, make_game, make_coupon):
        game = await make_game()
        await make_coupon("GAMEONLY", game_id=uuid4())
        await make_coupon("OWNERONLY", owner_account_id=uuid4())

        wrong_game = await paywall.coupons.validate(db, "GAMEONLY", _ctx(game))
        wrong_owner = await paywall.coupons.validate(db, "OWNERONLY", _ctx(game))

        assert wrong_game.reason_code == Reason.WRONG_GAME
        assert wrong_owner.reason_code == Reason.WRONG_OWNER

    async def test_below_minimum_mentions_amount(self, db, paywall, make_game, make_coupon):
        game = await make_game(price_cents=499)
        await make_coupon("BIG", min_purchase_cents=1000)
        result = await paywall.coupons.validate(db, "BIG", _ctx(game))
        assert result.reason_code == Reason.BELOW_MINIMUM
        assert "$10.00" in result.error

    async def test_viewer_who_already_redeemed_is_rejected(
        self, db, paywall, make_game, make_viewer, make_purchase, make_coupon
    ):
        game = await make_game()
        viewer = await make_viewer()
        coupon = await make_coupon("ONCE", max_uses_per_viewer=1)
        purchase = await make_purchase(game=game, viewer=viewer)
        await paywall.coupons.apply(db, coupon.id, purchase.id, viewer.id, 49)
        await db.commit()

        result = await paywall.coupons.validate(db, "ONCE", _ctx(game, viewer))

        assert result.reason_code == Reason.ALREADY_USED


class TestApply:
    async def test_apply_records_redemption_and_increments_usage(
        self, db, paywall, make_purchase, make_coupon
    ):
        coupon = await make_coupon("FAN10")
        purchase = await make_purchase()

        result = await paywall.coupons.apply(db, coupon.id, purchase.id, purchase.viewer_id, 49)
        await db.commit()

        assert result.applied is True
        assert result.redemption.discount_cents == 49
        assert coupon.used_count == 1

    async def test_apply_twice_for_same_purchase_is_noop(self, db, paywall, make_purchase, make_coupon):
        coupon = await make_coupon("FAN10", max_uses_per_viewer=5)
        purchase = await make_purchase()

        await paywall.coupons.apply(db, coupon.id, purchase.id, purchase.viewer_id, 49)
        again = await paywall.coupons.apply(db, coupon.id, purchase.id, purchase.viewer_id, 49)
        await db.commit()

        assert again.applied is False
        assert again.reason_code == Reason.ALREADY_REDEEMED
        assert coupon.used_count == 1

    async def test_per_viewer_limit_is_enforced_at_apply(
        self, db, paywall, make_game, make_viewer, make_purchase, make_coupon
    ):
        game = await make_game()
        viewer = await make_viewer()
        coupon = await make_coupon("ONCE", max_uses_per_viewer=1)
        # Dos checkouts validados antes de que cualquiera se pagara
        first = await make_purchase(game=game, viewer=viewer)
        second = await make_purchase(game=game, viewer=viewer)

        ok = await paywall.coupons.apply(db, coupon.id, first.id, viewer.id, 49)
        rejected = await paywall.coupons.apply(db, coupon.id, second.id, viewer.id, 49)
        await db.commit()

        assert ok.applied is True
        assert rejected.applied is False
        assert rejected.reason_code == Reason.ALREADY_USED
        assert coupon.used_count == 1

    async def test_global_max_uses_is_enforced_at_apply(
        self, db, paywall, make_game, make_purchase, make_coupon
    ):
        game = await make_game()
        coupon = await make_coupon("ONLYONE", max_uses=1)
        first = await make_purchase(game=game)
        second = await make_purchase(game=game)

        await paywall.coupons.apply(db, coupon.id, first.id, first.viewer_id, 49)
        rejected = await paywall.coupons.apply(db, coupon.id, second.id, second.viewer_id, 49)
        await db.commit()

        assert rejected.applied is False
        assert rejected.reason_code == Reason.USAGE_LIMIT_REACHED
        assert coupon.used_count == 1

# Fin del archivo tests/modules/coupons/test_coupon_service.py
