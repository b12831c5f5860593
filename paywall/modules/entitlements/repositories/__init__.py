# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/repositories/__init__.py
"""

from .entitlement_repository import EntitlementRepository
from .playback_session_repository import PlaybackSessionRepository

__all__ = ["EntitlementRepository", "PlaybackSessionRepository"]

# Fin del archivo paywall/modules/entitlements/repositories/__init__.py
