# -*- coding: utf-8 -*-
"""
paywall/modules/catalog/enums/__init__.py
"""

from .game_state_enum import GameState, PURCHASABLE_GAME_STATES
from .owner_account_status_enum import OwnerAccountStatus

__all__ = ["GameState", "PURCHASABLE_GAME_STATES", "OwnerAccountStatus"]

# Fin del archivo paywall/modules/catalog/enums/__init__.py
