# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/enums/__init__.py

Autor: Equipo Paywall
Fecha: 2026-02-10
"""

from enum import StrEnum


class EntitlementStatus(StrEnum):
    ACTIVE = "active"
    REVOKED = "revoked"

    __db_enum_name__ = "entitlement_status"


class PlaybackSessionState(StrEnum):
    ACTIVE = "active"
    ENDED = "ended"

    __db_enum_name__ = "playback_session_state"


class TelemetryEventType(StrEnum):
    BUFFER = "buffer"
    ERROR = "error"
    PLAY = "play"
    PAUSE = "pause"
    SEEK = "seek"
    QUALITY_CHANGE = "quality_change"
    STREAM_DOWN = "stream_down"


class TokenRejectionReason(StrEnum):
    NOT_FOUND = "not_found"
    NOT_ACTIVE = "not_active"
    NOT_YET_VALID = "not_yet_valid"
    EXPIRED = "expired"


__all__ = [
    "EntitlementStatus",
    "PlaybackSessionState",
    "TelemetryEventType",
    "TokenRejectionReason",
]

# Fin del archivo paywall/modules/entitlements/enums/__init__.py
