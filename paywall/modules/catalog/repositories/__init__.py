# -*- coding: utf-8 -*-
"""
paywall/modules/catalog/repositories/__init__.py
"""

from .game_repository import GameRepository
from .owner_account_repository import OwnerAccountRepository
from .viewer_repository import ViewerRepository

__all__ = ["GameRepository", "OwnerAccountRepository", "ViewerRepository"]
