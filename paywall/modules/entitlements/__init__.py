# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/__init__.py

Acceso a transmisiones: tokens opacos con vigencia (Entitlement) y
sesiones de reproducción con telemetría agregada (PlaybackSession).

Estructura:
- enums: EntitlementStatus, PlaybackSessionState, TelemetryEventType
- models: Entitlement, PlaybackSession
- repositories: EntitlementRepository, PlaybackSessionRepository
- services: entitlement_service (EntitlementIssuer),
  playback_session_service (PlaybackSessionTracker),
  refund_calculator (reembolso sugerido por calidad)
- routes: /public/watch y /admin/entitlements

Autor: Equipo Paywall
Fecha: 2026-02-10
"""

# Fin del archivo paywall/modules/entitlements/__init__.py
