# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/enums/purchase_state_transitions.py

Mapa de transiciones válidas para PurchaseStatus.

Reglas de transición:
- created  → paid | failed  (confirmación del gateway)
- paid     → refunded       (reembolso del gateway)
- failed   → (terminal)
- refunded → (terminal)

Autor: Equipo Paywall
Fecha: 2026-02-11
"""

from typing import Dict, Set

from paywall.shared.errors import InvalidStateError
from .purchase_status_enum import PurchaseStatus


VALID_PURCHASE_TRANSITIONS: Dict[PurchaseStatus, Set[PurchaseStatus]] = {
    PurchaseStatus.CREATED: {
        PurchaseStatus.PAID,
        PurchaseStatus.FAILED,
    },
    PurchaseStatus.PAID: {
        PurchaseStatus.REFUNDED,
    },
    PurchaseStatus.FAILED: set(),
    PurchaseStatus.REFUNDED: set(),
}


def is_valid_purchase_transition(from_status: PurchaseStatus, to_status: PurchaseStatus) -> bool:
    if from_status not in VALID_PURCHASE_TRANSITIONS:
        return False
    return to_status in VALID_PURCHASE_TRANSITIONS[from_status]


def get_allowed_purchase_transitions(from_status: PurchaseStatus) -> Set[PurchaseStatus]:
    return VALID_PURCHASE_TRANSITIONS.get(from_status, set())


def validate_purchase_transition(from_status: PurchaseStatus, to_status: PurchaseStatus) -> None:
    """
    Valida una transición, lanzando InvalidStateError si no es válida.

    Raises:
        InvalidStateError: con los estados permitidos en el mensaje.
    """
    if not is_valid_purchase_transition(from_status, to_status):
        allowed = get_allowed_purchase_transitions(from_status)
        allowed_str = ", ".join(sorted(s.value for s in allowed)) if allowed else "none"
        raise InvalidStateError(
            from_status,
            to_status,
            f"Invalid purchase transition: '{from_status.value}' -> '{to_status.value}'. "
            f"Allowed from '{from_status.value}': {allowed_str}",
        )


__all__ = [
    "VALID_PURCHASE_TRANSITIONS",
    "is_valid_purchase_transition",
    "get_allowed_purchase_transitions",
    "validate_purchase_transition",
]

# Fin del archivo paywall/modules/purchases/enums/purchase_state_transitions.py
