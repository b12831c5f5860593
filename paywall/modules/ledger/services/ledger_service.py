# -*- coding: utf-8 -*-
"""
paywall/modules/ledger/services/ledger_service.py

LedgerEngine: agrega movimientos inmutables para compras y reembolsos y
reconstruye el saldo/desglose de un dueño a partir de ellos.

Reglas:
- post_purchase: charge (+bruto), platform_fee (−), processor_fee (−),
  todos con referencia (purchase, purchase.id). Exactamente 3 filas.
- post_refund: refund (−monto) con referencia (refund, refund_id) y,
  si corresponde, reversa prorrateada de la comisión de plataforma (+).
  La comisión del procesador nunca se revierte.
- Idempotencia: antes de insertar se consulta la terna
  (reference_type, reference_id, type); la constraint única + SAVEPOINT
  cubre la carrera entre dos escritores concurrentes.

Autor: Equipo Paywall
Fecha: 2026-02-07
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Sequence, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.shared.errors import InvariantViolationError
from paywall.shared.utils.money import format_money, prorate
from paywall.modules.ledger.enums import LedgerEntryType, LedgerReferenceType
from paywall.modules.ledger.models import LedgerEntry
from paywall.modules.ledger.repositories import LedgerEntryRepository
from .fee_calculator import MarketplaceSplit

if TYPE_CHECKING:
    from paywall.modules.purchases.models import Purchase

logger = logging.getLogger(__name__)

# (tipo, monto con signo, descripción)
PlannedEntry = Tuple[LedgerEntryType, int, str]


@dataclass
class LedgerPosting:
    """Resultado de un posteo: filas nuevas y tipos que ya existían."""

    created: List[LedgerEntry] = field(default_factory=list)
    skipped: List[LedgerEntryType] = field(default_factory=list)

    @property
    def was_noop(self) -> bool:
        return not self.created


@dataclass(frozen=True)
class LedgerBreakdown:
    """Desglose de transparencia para el dueño (centavos con signo)."""

    owner_account_id: UUID
    gross_charges_cents: int
    platform_fees_cents: int
    processor_fees_cents: int
    refunds_cents: int
    payouts_cents: int
    balance_cents: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "owner_account_id": str(self.owner_account_id),
            "gross_charges_cents": self.gross_charges_cents,
            "platform_fees_cents": self.platform_fees_cents,
            "processor_fees_cents": self.processor_fees_cents,
            "refunds_cents": self.refunds_cents,
            "payouts_cents": self.payouts_cents,
            "balance_cents": self.balance_cents,
        }


class LedgerService:
    """LedgerEngine: único escritor de ledger_entries."""

    def __init__(self, ledger_repo: LedgerEntryRepository) -> None:
        self.ledger_repo = ledger_repo

    # ---------------------------------------------------------
    # Compras
    # ---------------------------------------------------------
    async def post_purchase(
        self,
        session: AsyncSession,
        purchase: "Purchase",
        split: MarketplaceSplit,
    ) -> LedgerPosting:
        if split.gross_amount_cents != purchase.amount_cents:
            raise InvariantViolationError(
                "Split gross does not match purchase amount",
                purchase_id=purchase.id,
                split_gross=split.gross_amount_cents,
                amount_cents=purchase.amount_cents,
            )
        split.check()

        currency = purchase.currency
        planned: List[PlannedEntry] = [
            (
                LedgerEntryType.CHARGE,
                split.gross_amount_cents,
                f"Purchase: {format_money(split.gross_amount_cents, currency)}",
            ),
            (
                LedgerEntryType.PLATFORM_FEE,
                -split.platform_fee_cents,
                f"Platform fee: {format_money(split.platform_fee_cents, currency)}",
            ),
            (
                LedgerEntryType.PROCESSOR_FEE,
                -split.processor_fee_cents,
                f"Payment processing fee: {format_money(split.processor_fee_cents, currency)}",
            ),
        ]
        posting = await self._post(
            session,
            owner_account_id=purchase.recipient_owner_account_id,
            reference_type=LedgerReferenceType.PURCHASE,
            reference_id=str(purchase.id),
            currency=currency,
            planned=planned,
        )
        logger.info(
            "ledger_purchase_posted purchase_id=%s created=%d skipped=%d",
            purchase.id, len(posting.created), len(posting.skipped),
        )
        return posting

    # ---------------------------------------------------------
    # Reembolsos
    # ---------------------------------------------------------
    @staticmethod
    def platform_fee_reversal(
        platform_fee_cents: int,
        amount_cents: int,
        refund_amount_cents: int,
        previously_refunded_cents: int = 0,
    ) -> int:
        """
        Parte de la comisión de plataforma a devolver al dueño.

        Se calcula sobre el acumulado para que la suma de reversas de varios
        reembolsos parciales nunca supere la comisión original:

            reversa = f(antes + este) − f(antes)
            f(x) = comisión completa si x ≥ monto, si no round(comisión × x / monto)
        """
        def reversed_up_to(refunded: int) -> int:
            if refunded >= amount_cents:
                return platform_fee_cents
            return prorate(platform_fee_cents, refunded, amount_cents)

        after = previously_refunded_cents + refund_amount_cents
        return reversed_up_to(after) - reversed_up_to(previously_refunded_cents)

    async def post_refund(
        self,
        session: AsyncSession,
        purchase: "Purchase",
        refund_amount_cents: int,
        refund_id: str,
        previously_refunded_cents: int = 0,
    ) -> LedgerPosting:
        if refund_amount_cents <= 0:
            raise InvariantViolationError(
                "Refund amount must be positive",
                purchase_id=purchase.id,
                refund_id=refund_id,
                refund_amount_cents=refund_amount_cents,
            )
        if not refund_id:
            raise InvariantViolationError("Refund id is required", purchase_id=purchase.id)

        currency = purchase.currency
        reversal = self.platform_fee_reversal(
            purchase.platform_fee_cents,
            purchase.amount_cents,
            refund_amount_cents,
            previously_refunded_cents,
        )

        planned: List[PlannedEntry] = [
            (
                LedgerEntryType.REFUND,
                -refund_amount_cents,
                f"Refund: {format_money(refund_amount_cents, currency)} (purchase {purchase.id})",
            ),
        ]
        if reversal > 0:
            planned.append(
                (
                    LedgerEntryType.PLATFORM_FEE,
                    reversal,
                    f"Platform fee reversal: {format_money(reversal, currency)} (purchase {purchase.id})",
                )
            )

        posting = await self._post(
            session,
            owner_account_id=purchase.recipient_owner_account_id,
            reference_type=LedgerReferenceType.REFUND,
            reference_id=refund_id,
            currency=currency,
            planned=planned,
        )
        logger.info(
            "ledger_refund_posted purchase_id=%s refund_id=%s amount=%d fee_reversal=%d created=%d",
            purchase.id, refund_id, refund_amount_cents, reversal, len(posting.created),
        )
        return posting

    # ---------------------------------------------------------
    # Lecturas
    # ---------------------------------------------------------
    async def get_balance(self, session: AsyncSession, owner_account_id: UUID) -> int:
        return await self.ledger_repo.compute_balance(session, owner_account_id)

    async def get_transparency(
        self, session: AsyncSession, owner_account_id: UUID
    ) -> LedgerBreakdown:
        totals = await self.ledger_repo.totals_by_type(session, owner_account_id)
        balance = await self.ledger_repo.compute_balance(session, owner_account_id)
        if sum(totals.values()) != balance:
            raise InvariantViolationError(
                "Ledger totals do not add up to balance",
                owner_account_id=owner_account_id,
                balance=balance,
            )
        return LedgerBreakdown(
            owner_account_id=owner_account_id,
            gross_charges_cents=totals.get(LedgerEntryType.CHARGE, 0),
            platform_fees_cents=totals.get(LedgerEntryType.PLATFORM_FEE, 0),
            processor_fees_cents=totals.get(LedgerEntryType.PROCESSOR_FEE, 0),
            refunds_cents=totals.get(LedgerEntryType.REFUND, 0),
            payouts_cents=totals.get(LedgerEntryType.PAYOUT, 0),
            balance_cents=balance,
        )

    async def list_entries_by_reference(
        self,
        session: AsyncSession,
        reference_type: LedgerReferenceType,
        reference_id: str,
    ) -> Sequence[LedgerEntry]:
        return await self.ledger_repo.list_by_reference(session, reference_type, reference_id)

    async def is_refund_posted(self, session: AsyncSession, refund_id: str) -> bool:
        return await self.ledger_repo.exists_for(
            session, LedgerReferenceType.REFUND, refund_id, LedgerEntryType.REFUND
        )

    # ---------------------------------------------------------
    # Interno
    # ---------------------------------------------------------
    async def _post(
        self,
        session: AsyncSession,
        *,
        owner_account_id: UUID,
        reference_type: LedgerReferenceType,
        reference_id: str,
        currency: str,
        planned: List[PlannedEntry],
    ) -> LedgerPosting:
        posting = LedgerPosting()
        existing = await self.ledger_repo.existing_types_for(session, reference_type, reference_id)

        for entry_type, amount_cents, description in planned:
            if entry_type in existing:
                posting.skipped.append(entry_type)
                continue
            try:
                async with session.begin_nested():
                    entry = await self.ledger_repo.create(
                        session,
                        owner_account_id=owner_account_id,
                        type=entry_type,
                        amount_cents=amount_cents,
                        currency=currency,
                        reference_type=reference_type,
                        reference_id=reference_id,
                        description=description,
                    )
                posting.created.append(entry)
            except IntegrityError:
                # Otro escritor insertó la misma terna primero
                logger.info(
                    "ledger_entry_already_posted reference=%s:%s type=%s",
                    reference_type, reference_id, entry_type,
                )
                posting.skipped.append(entry_type)
        return posting


__all__ = ["LedgerService", "LedgerPosting", "LedgerBreakdown"]

# Fin del archivo paywall/modules/ledger/services/ledger_service.py
