# -*- coding: utf-8 -*-
"""
paywall/modules/catalog/repositories/viewer_repository.py

Repositorio para la tabla viewer_identities.

Responsabilidades:
- Búsqueda por email normalizado
- Alta idempotente (find-or-create) resistente a carreras

Autor: Equipo Paywall
Fecha: 2026-02-06
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.shared.database.repository import BaseRepository
from paywall.modules.catalog.models import ViewerIdentity

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class ViewerRepository(BaseRepository[ViewerIdentity]):
    def __init__(self) -> None:
        super().__init__(ViewerIdentity)

    async def get_by_email(self, session: AsyncSession, email: str) -> Optional[ViewerIdentity]:
        stmt = select(ViewerIdentity).where(ViewerIdentity.email == normalize_email(email))
        result = await session.execute(stmt)
        return result.scalars().first()

    async def find_or_create(
        self,
        session: AsyncSession,
        email: str,
        phone_e164: Optional[str] = None,
    ) -> ViewerIdentity:
        """
        Devuelve el espectador por email o lo crea.

        Si ya existía sin teléfono y ahora llega uno, se completa.
        """
        viewer = await self.get_by_email(session, email)
        if viewer is None:
            try:
                async with session.begin_nested():
                    viewer = ViewerIdentity(email=normalize_email(email), phone_e164=phone_e164)
                    session.add(viewer)
                    await session.flush()
                return viewer
            except IntegrityError:
                # Alta concurrente con el mismo email: releer al ganador
                logger.info("viewer_create_race: re-reading existing viewer")
                viewer = await self.get_by_email(session, email)
                if viewer is None:
                    raise

        if phone_e164 and not viewer.phone_e164:
            viewer.phone_e164 = phone_e164
            await session.flush()
        return viewer

# Fin del archivo paywall/modules/catalog/repositories/viewer_repository.py
