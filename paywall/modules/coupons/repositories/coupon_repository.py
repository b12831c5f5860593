# -*- coding: utf-8 -*-
"""
paywall/modules/coupons/repositories/coupon_repository.py

Repositorios de cupones y redenciones.

Responsabilidades:
- Búsqueda por código normalizado
- Conteo de redenciones por espectador (historial persistido)
- Incremento atómico condicional de used_count

Autor: Equipo Paywall
Fecha: 2026-02-08
"""

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.shared.database.repository import BaseRepository
from paywall.shared.utils.datetime_helpers import utcnow
from paywall.modules.coupons.enums import CouponStatus
from paywall.modules.coupons.models import CouponCode, CouponRedemption


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


class CouponRepository(BaseRepository[CouponCode]):
    def __init__(self) -> None:
        super().__init__(CouponCode)

    async def get_by_code(self, session: AsyncSession, code: str) -> Optional[CouponCode]:
        stmt = select(CouponCode).where(CouponCode.code == normalize_code(code))
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_filtered(
        self,
        session: AsyncSession,
        status: Optional[CouponStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[CouponCode]:
        stmt = select(CouponCode)
        if status is not None:
            stmt = stmt.where(CouponCode.status == status)
        stmt = stmt.order_by(CouponCode.created_at.desc()).limit(limit).offset(offset)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def try_increment_usage(
        self,
        session: AsyncSession,
        coupon_id: UUID,
        viewer_id: Optional[UUID] = None,
    ) -> bool:
        """
        UPDATE condicional de un solo paso:

            used_count = used_count + 1
            WHERE id = :id AND status = 'active'
              AND (max_uses IS NULL OR used_count < max_uses)
              AND (SELECT count(*) FROM coupon_redemptions
                   WHERE coupon_id = :id AND viewer_id = :viewer) < max_uses_per_viewer

        El tope por espectador va en la misma sentencia que el incremento
        para que ambos se evalúen contra la misma fila bloqueada.

        Returns:
            True si la fila se actualizó. False si entre la validación y la
            aplicación el cupón se agotó o desactivó, o si el espectador ya
            llegó a su tope.
        """
        conditions = [
            CouponCode.id == coupon_id,
            CouponCode.status == CouponStatus.ACTIVE,
            or_(CouponCode.max_uses.is_(None), CouponCode.used_count < CouponCode.max_uses),
        ]
        if viewer_id is not None:
            viewer_redemptions = (
                select(func.count(CouponRedemption.id))
                .where(
                    CouponRedemption.coupon_id == coupon_id,
                    CouponRedemption.viewer_id == viewer_id,
                )
                .scalar_subquery()
            )
            conditions.append(viewer_redemptions < CouponCode.max_uses_per_viewer)

        stmt = (
            update(CouponCode)
            .where(*conditions)
            .values(used_count=CouponCode.used_count + 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount == 1


class CouponRedemptionRepository(BaseRepository[CouponRedemption]):
    def __init__(self) -> None:
        super().__init__(CouponRedemption)

    async def get_by_purchase_id(
        self, session: AsyncSession, purchase_id: UUID
    ) -> Optional[CouponRedemption]:
        stmt = select(CouponRedemption).where(CouponRedemption.purchase_id == purchase_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_for_viewer(
        self, session: AsyncSession, coupon_id: UUID, viewer_id: UUID
    ) -> int:
        stmt = select(func.count(CouponRedemption.id)).where(
            CouponRedemption.coupon_id == coupon_id,
            CouponRedemption.viewer_id == viewer_id,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def list_by_coupon(
        self, session: AsyncSession, coupon_id: UUID
    ) -> Sequence[CouponRedemption]:
        stmt = (
            select(CouponRedemption)
            .where(CouponRedemption.coupon_id == coupon_id)
            .order_by(CouponRedemption.created_at.desc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

# Fin del archivo paywall/modules/coupons/repositories/coupon_repository.py
