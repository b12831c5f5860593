# -*- coding: utf-8 -*-
"""
paywall/modules/catalog/models/__init__.py
"""

from .owner_account_models import OwnerAccount
from .game_models import Game
from .viewer_models import ViewerIdentity

__all__ = ["OwnerAccount", "Game", "ViewerIdentity"]

# Fin del archivo paywall/modules/catalog/models/__init__.py
