# -*- coding: utf-8 -*-
"""
Tests de la administración de cupones en CouponService.

Valida que:
1. create_coupon normaliza el código y rechaza duplicados (ConflictError)
2. update_coupon solo toca los campos presentes; None quita el límite
3. CouponUpdate.from_fields rechaza campos inmutables
4. list_coupons filtra por estado y pagina
5. get_coupon_detail devuelve el cupón con sus redenciones

Autor: Equipo Paywall
Fecha: 2026-02-18
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from paywall.shared.errors import ConflictError, NotFoundError, ValidationFailedError
from paywall.modules.coupons.enums import CouponStatus, DiscountType
from paywall.modules.coupons.schemas import CouponCreate
from paywall.modules.coupons.services import UNSET, CouponUpdate


def _create(code="FAN20", **overrides):
    data = {"code": code, "discount_type": DiscountType.PERCENTAGE, "discount_value": 20}
    data.update(overrides)
    return CouponCreate(**data)


class TestCreateCoupon:
    async def test_creates_active_coupon_with_normalized_code(self, db, paywall, clock):
        coupon = await paywall.coupons.create_coupon(db, _create(" fan20 ", max_uses=50))
        await db.commit()

        assert coupon.code == "FAN20"
        assert coupon.status == CouponStatus.ACTIVE
        assert coupon.used_count == 0
        assert coupon.max_uses == 50
        assert coupon.valid_from == clock.now

    async def test_duplicate_code_is_a_conflict(self, db, paywall, make_coupon):
        await make_coupon("FAN20")

        with pytest.raises(ConflictError) as exc:
            await paywall.coupons.create_coupon(db, _create("fan20"))

        assert exc.value.details["code"] == "FAN20"

    async def test_window_ending_before_default_start_is_rejected(self, db, paywall, clock):
        with pytest.raises(ValidationFailedError) as exc:
            await paywall.coupons.create_coupon(db, _create(valid_to=clock.now - timedelta(hours=1)))

        assert exc.value.details["reason_code"] == "invalid_window"


class TestCouponUpdateFromFields:
    def test_missing_fields_stay_unset(self):
        update = CouponUpdate.from_fields({"max_uses": None})

        assert update.max_uses is None
        assert update.status is UNSET
        assert update.valid_to is UNSET

    @pytest.mark.parametrize("field", ["code", "discount_value", "used_count"])
    def test_immutable_fields_are_rejected(self, field):
        with pytest.raises(ValidationFailedError) as exc:
            CouponUpdate.from_fields({field: 1, "status": "disabled"})

        assert exc.value.details["reason_code"] == "immutable_field"
        assert field in exc.value.message


class TestUpdateCoupon:
    async def test_partial_update_keeps_other_fields(self, db, paywall, make_coupon, clock):
        ends = clock.now + timedelta(days=7)
        coupon = await make_coupon("FAN10", max_uses=100, valid_to=ends)

        updated = await paywall.coupons.update_coupon(
            db, coupon.id, CouponUpdate(status=CouponStatus.DISABLED)
        )

        assert updated.status == CouponStatus.DISABLED
        assert updated.max_uses == 100
        assert updated.valid_to == ends

    async def test_none_removes_limits(self, db, paywall, make_coupon, clock):
        coupon = await make_coupon("FAN10", max_uses=100, valid_to=clock.now + timedelta(days=7))

        updated = await paywall.coupons.update_coupon(
            db, coupon.id, CouponUpdate(max_uses=None, valid_to=None)
        )

        assert updated.max_uses is None
        assert updated.valid_to is None
        assert updated.status == CouponStatus.ACTIVE

    async def test_max_uses_below_usage_is_rejected(self, db, paywall, make_coupon):
        coupon = await make_coupon("FAN10", max_uses=10, used_count=5)

        with pytest.raises(ValidationFailedError) as exc:
            await paywall.coupons.update_coupon(db, coupon.id, CouponUpdate(max_uses=4))

        assert exc.value.details["reason_code"] == "max_uses_below_used"
        assert coupon.max_uses == 10

    async def test_valid_to_before_valid_from_is_rejected(self, db, paywall, make_coupon, clock):
        coupon = await make_coupon("FAN10")

        with pytest.raises(ValidationFailedError) as exc:
            await paywall.coupons.update_coupon(
                db, coupon.id, CouponUpdate(valid_to=clock.now - timedelta(days=2))
            )

        assert exc.value.details["reason_code"] == "invalid_window"

    @pytest.mark.parametrize("status", [None, "archived"])
    async def test_invalid_status_is_rejected(self, db, paywall, make_coupon, status):
        coupon = await make_coupon("FAN10")

        with pytest.raises(ValidationFailedError) as exc:
            await paywall.coupons.update_coupon(db, coupon.id, CouponUpdate(status=status))

        assert exc.value.details["reason_code"] == "invalid_status"
        assert coupon.status == CouponStatus.ACTIVE

    async def test_unknown_coupon(self, db, paywall):
        with pytest.raises(NotFoundError):
            await paywall.coupons.update_coupon(db, uuid4(), CouponUpdate(status="disabled"))


class TestListAndDetail:
    async def test_list_filters_by_status_and_paginates(self, db, paywall, make_coupon):
        await make_coupon("FAN10")
        await make_coupon("FAN20")
        disabled = await make_coupon("OLD5", status=CouponStatus.DISABLED)

        everything = await paywall.coupons.list_coupons(db)
        only_disabled = await paywall.coupons.list_coupons(db, status=CouponStatus.DISABLED)
        first_page = await paywall.coupons.list_coupons(db, limit=2)
        second_page = await paywall.coupons.list_coupons(db, limit=2, offset=2)

        assert {c.code for c in everything} == {"FAN10", "FAN20", "OLD5"}
        assert [c.id for c in only_disabled] == [disabled.id]
        assert len(first_page) == 2
        assert len(second_page) == 1
        assert {c.id for c in first_page} | {c.id for c in second_page} == {c.id for c in everything}

    async def test_detail_includes_redemptions(self, db, paywall, make_coupon, make_purchase):
        coupon = await make_coupon("FAN10")
        purchase = await make_purchase()
        await paywall.coupons.apply(db, coupon.id, purchase.id, purchase.viewer_id, 49)
        await db.commit()

        found, redemptions = await paywall.coupons.get_coupon_detail(db, coupon.id)

        assert found.id == coupon.id
        assert found.used_count == 1
        assert [(r.purchase_id, r.discount_cents) for r in redemptions] == [(purchase.id, 49)]

    async def test_detail_of_unknown_coupon(self, db, paywall):
        with pytest.raises(NotFoundError):
            await paywall.coupons.get_coupon_detail(db, uuid4())

# Fin del archivo tests/modules/coupons/test_coupon_admin.py
