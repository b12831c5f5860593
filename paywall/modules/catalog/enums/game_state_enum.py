# -*- coding: utf-8 -*-
"""
paywall/modules/catalog/enums/game_state_enum.py

Estados de un juego/transmisión.

Autor: Equipo Paywall
Fecha: 2026-02-06
"""

from enum import StrEnum
from typing import FrozenSet


class GameState(StrEnum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    LIVE = "live"
    ENDED = "ended"
    CANCELLED = "cancelled"

    __db_enum_name__ = "game_state"


# Solo se vende acceso a juegos publicados o en vivo
PURCHASABLE_GAME_STATES: FrozenSet[GameState] = frozenset({GameState.ACTIVE, GameState.LIVE})

__all__ = ["GameState", "PURCHASABLE_GAME_STATES"]

# Fin del archivo paywall/modules/catalog/enums/game_state_enum.py
