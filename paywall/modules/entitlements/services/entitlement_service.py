# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/services/entitlement_service.py

EntitlementIssuer: emite el token de acceso cuando una compra queda
pagada y valida los tokens que presentan los espectadores.

Reglas:
- issue() es idempotente por purchase_id: si ya existe, se devuelve tal cual.
- token_id = secrets.token_hex(32) (256 bits).
- valid_to = game.ends_at si se conoce y es futuro; si no, now + N horas.
- validate_token() devuelve un resultado con razón; require_valid_token()
  es el helper de frontera que lanza UnauthorizedError con mensaje
  uniforme (la razón específica solo va al log).

Autor: Equipo Paywall
Fecha: 2026-02-10
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable, Optional, Union
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.shared.errors import NotFoundError, UnauthorizedError
from paywall.shared.utils.datetime_helpers import utcnow
from paywall.modules.catalog.repositories import GameRepository
from paywall.modules.entitlements.enums import EntitlementStatus, TokenRejectionReason
from paywall.modules.entitlements.models import Entitlement
from paywall.modules.entitlements.repositories import EntitlementRepository

if TYPE_CHECKING:
    from paywall.modules.purchases.models import Purchase

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32

_REASON_MESSAGES = {
    TokenRejectionReason.NOT_FOUND: "Invalid token",
    TokenRejectionReason.NOT_ACTIVE: "Entitlement is not active",
    TokenRejectionReason.NOT_YET_VALID: "Token is not yet valid",
    TokenRejectionReason.EXPIRED: "Token has expired",
}


def generate_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


@dataclass(frozen=True)
class TokenValidationResult:
    valid: bool
    entitlement: Optional[Entitlement] = None
    reason: Optional[str] = None
    reason_code: Optional[TokenRejectionReason] = None

    @classmethod
    def reject(cls, code: TokenRejectionReason) -> "TokenValidationResult":
        return cls(valid=False, reason=_REASON_MESSAGES[code], reason_code=code)


class EntitlementService:
    """EntitlementIssuer."""

    def __init__(
        self,
        entitlement_repo: EntitlementRepository,
        game_repo: GameRepository,
        default_hours: int = 24,
        clock: Callable[[], datetime] = utcnow,
        token_factory: Callable[[], str] = generate_token,
    ) -> None:
        self.entitlement_repo = entitlement_repo
        self.game_repo = game_repo
        self.default_hours = default_hours
        self._clock = clock
        self._token_factory = token_factory

    # ---------------------------------------------------------
    # Emisión
    # ---------------------------------------------------------
    async def issue(self, session: AsyncSession, purchase: "Purchase") -> Entitlement:
        existing = await self.entitlement_repo.get_by_purchase_id(session, purchase.id)
        if existing is not None:
            logger.debug("entitlement_exists purchase_id=%s entitlement_id=%s", purchase.id, existing.id)
            return existing

        now = self._clock()
        valid_to = await self._resolve_valid_to(session, purchase.game_id, now)

        try:
            async with session.begin_nested():
                entitlement = await self.entitlement_repo.create(
                    session,
                    purchase_id=purchase.id,
                    token_id=self._token_factory(),
                    valid_from=now,
                    valid_to=valid_to,
                    status=EntitlementStatus.ACTIVE,
                )
        except IntegrityError:
            # Emisión concurrente para la misma compra: gana la primera fila
            winner = await self.entitlement_repo.get_by_purchase_id(session, purchase.id)
            if winner is None:
                raise
            logger.info("entitlement_issue_race purchase_id=%s: returning existing row", purchase.id)
            return winner

        logger.info(
            "entitlement_issued purchase_id=%s entitlement_id=%s valid_to=%s",
            purchase.id, entitlement.id, valid_to.isoformat(),
        )
        return entitlement

    async def _resolve_valid_to(self, session: AsyncSession, game_id: UUID, now: datetime) -> datetime:
        game = await self.game_repo.get(session, game_id)
        if game is not None and game.ends_at is not None and game.ends_at > now:
            return game.ends_at
        return now + timedelta(hours=self.default_hours)

    async def get_for_purchase(self, session: AsyncSession, purchase_id: Union[UUID, str]) -> Optional[Entitlement]:
        if isinstance(purchase_id, str):
            purchase_id = UUID(purchase_id)
        return await self.entitlement_repo.get_by_purchase_id(session, purchase_id)

    # ---------------------------------------------------------
    # Validación
    # ---------------------------------------------------------
    def check(self, entitlement: Optional[Entitlement]) -> TokenValidationResult:
        """Chequeos de estado y ventana sobre una fila ya cargada."""
        if entitlement is None:
            return TokenValidationResult.reject(TokenRejectionReason.NOT_FOUND)
        if entitlement.status != EntitlementStatus.ACTIVE:
            return TokenValidationResult.reject(TokenRejectionReason.NOT_ACTIVE)
        now = self._clock()
        if now < entitlement.valid_from:
            return TokenValidationResult.reject(TokenRejectionReason.NOT_YET_VALID)
        if now > entitlement.valid_to:
            return TokenValidationResult.reject(TokenRejectionReason.EXPIRED)
        return TokenValidationResult(valid=True, entitlement=entitlement)

    async def validate_token(self, session: AsyncSession, token_id: str) -> TokenValidationResult:
        if not token_id or len(token_id) > 128:
            return TokenValidationResult.reject(TokenRejectionReason.NOT_FOUND)
        entitlement = await self.entitlement_repo.get_by_token_id(session, token_id)
        return self.check(entitlement)

    async def require_valid_token(self, session: AsyncSession, token_id: str) -> Entitlement:
        result = await self.validate_token(session, token_id)
        if not result.valid or result.entitlement is None:
            logger.info("entitlement_access_denied reason=%s", result.reason_code)
            raise UnauthorizedError()
        return result.entitlement

    async def require_valid_entitlement(self, session: AsyncSession, entitlement_id: UUID) -> Entitlement:
        result = self.check(await self.entitlement_repo.get(session, entitlement_id))
        if not result.valid or result.entitlement is None:
            logger.info("entitlement_access_denied entitlement_id=%s reason=%s", entitlement_id, result.reason_code)
            raise UnauthorizedError()
        return result.entitlement

    # ---------------------------------------------------------
    # Revocación
    # ---------------------------------------------------------
    async def revoke(self, session: AsyncSession, entitlement_id: UUID) -> Entitlement:
        entitlement = await self.entitlement_repo.get(session, entitlement_id)
        if entitlement is None:
            raise NotFoundError("Entitlement", entitlement_id)
        if entitlement.status == EntitlementStatus.REVOKED:
            return entitlement

        entitlement.status = EntitlementStatus.REVOKED
        entitlement.revoked_at = self._clock()
        await session.flush()
        logger.info("entitlement_revoked entitlement_id=%s purchase_id=%s", entitlement.id, entitlement.purchase_id)
        return entitlement


__all__ = ["EntitlementService", "TokenValidationResult", "generate_token", "TOKEN_BYTES"]

# Fin del archivo paywall/modules/entitlements/services/entitlement_service.py
