# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/models/__init__.py
"""

from .entitlement_models import Entitlement
from .playback_session_models import PlaybackSession

__all__ = ["Entitlement", "PlaybackSession"]

# Fin del archivo paywall/modules/entitlements/models/__init__.py
