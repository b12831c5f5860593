# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/services/telemetry.py

Tipos de telemetría de reproducción y su agregación.

- TelemetryEvent: evento crudo del reproductor (timestamp en ms epoch).
- TelemetrySummary: comando explícito con los agregados que cierran
  una sesión; validate() rechaza negativos y buffer > watch.
- aggregate_telemetry(): pliega una lista de eventos en un resumen.

Autor: Equipo Paywall
Fecha: 2026-02-10
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from paywall.shared.errors import ValidationFailedError
from paywall.modules.entitlements.enums import TelemetryEventType

_STREAM_DOWN_CODES = {"stream_unavailable", "stream_down"}


@dataclass(frozen=True)
class TelemetryEvent:
    type: TelemetryEventType
    timestamp: int
    duration: Optional[int] = None
    error_code: Optional[str] = None

    @property
    def is_fatal(self) -> bool:
        code = self.error_code or ""
        return code == "fatal" or code.startswith("fatal_")


@dataclass(frozen=True)
class TelemetrySummary:
    total_watch_ms: int
    total_buffer_ms: int
    buffer_events: int = 0
    fatal_errors: int = 0
    startup_latency_ms: Optional[int] = None
    stream_down_ms: int = 0

    def validate(self) -> None:
        values = {
            "total_watch_ms": self.total_watch_ms,
            "total_buffer_ms": self.total_buffer_ms,
            "buffer_events": self.buffer_events,
            "fatal_errors": self.fatal_errors,
            "stream_down_ms": self.stream_down_ms,
        }
        if self.startup_latency_ms is not None:
            values["startup_latency_ms"] = self.startup_latency_ms

        negatives = sorted(name for name, value in values.items() if value < 0)
        if negatives:
            raise ValidationFailedError(
                f"Invalid telemetry summary: negative values ({', '.join(negatives)})",
                reason_code="negative_telemetry",
            )
        if self.total_buffer_ms > self.total_watch_ms:
            raise ValidationFailedError(
                "Invalid telemetry summary: buffer time exceeds watch time",
                reason_code="buffer_exceeds_watch",
            )

    def merged_with(self, other: "TelemetrySummary") -> "TelemetrySummary":
        """Suma dos tramos; la latencia de arranque es la del primero que la tenga."""
        return TelemetrySummary(
            total_watch_ms=self.total_watch_ms + other.total_watch_ms,
            total_buffer_ms=self.total_buffer_ms + other.total_buffer_ms,
            buffer_events=self.buffer_events + other.buffer_events,
            fatal_errors=self.fatal_errors + other.fatal_errors,
            startup_latency_ms=(
                self.startup_latency_ms
                if self.startup_latency_ms is not None
                else other.startup_latency_ms
            ),
            stream_down_ms=self.stream_down_ms + other.stream_down_ms,
        )


def aggregate_telemetry(events: Iterable[TelemetryEvent], started_at: datetime) -> TelemetrySummary:
    """
    Reconstruye tiempos de reproducción y buffering a partir de eventos.

    - play: el primero fija la latencia de arranque; los siguientes cierran
      un buffer abierto.
    - buffer: cierra el tramo reproducido y abre uno de buffering (o lo
      suma directo si trae duration).
    - pause: cierra el tramo de reproducción en curso.
    - error: cuenta fatales; stream_unavailable/stream_down con duration
      suma caída.
    - stream_down: suma su duration a la caída.
    Un buffer o reproducción abiertos al final se cierran con el último evento.
    """
    ordered = sorted(events, key=lambda e: e.timestamp)
    session_start_ms = int(started_at.timestamp() * 1000)

    watch_ms = 0
    buffer_ms = 0
    buffer_events = 0
    fatal_errors = 0
    stream_down_ms = 0
    startup_latency_ms: Optional[int] = None

    last_play: Optional[int] = None
    buffer_start: Optional[int] = None
    seen_play = False

    for event in ordered:
        ts = event.timestamp

        if event.type == TelemetryEventType.PLAY:
            if not seen_play:
                seen_play = True
                startup_latency_ms = max(ts - session_start_ms, 0)
            elif buffer_start is not None:
                buffer_ms += ts - buffer_start
                buffer_events += 1
                buffer_start = None
            last_play = ts

        elif event.type == TelemetryEventType.BUFFER:
            if event.duration:
                buffer_ms += event.duration
                buffer_events += 1
                buffer_start = None
            elif buffer_start is None and last_play is not None:
                # El tramo reproducido hasta aquí cuenta como visto
                watch_ms += ts - last_play
                last_play = None
                buffer_start = ts

        elif event.type == TelemetryEventType.PAUSE:
            if last_play is not None:
                watch_ms += ts - last_play
                last_play = None

        elif event.type == TelemetryEventType.ERROR:
            if event.is_fatal:
                fatal_errors += 1
            if event.error_code in _STREAM_DOWN_CODES and event.duration:
                stream_down_ms += event.duration

        elif event.type == TelemetryEventType.STREAM_DOWN:
            if event.duration:
                stream_down_ms += event.duration

    if ordered:
        last_ts = ordered[-1].timestamp
        if buffer_start is not None:
            buffer_ms += last_ts - buffer_start
            buffer_events += 1
        if last_play is not None:
            watch_ms += last_ts - last_play

    return TelemetrySummary(
        total_watch_ms=watch_ms,
        total_buffer_ms=buffer_ms,
        buffer_events=buffer_events,
        fatal_errors=fatal_errors,
        startup_latency_ms=startup_latency_ms,
        stream_down_ms=stream_down_ms,
    )


__all__ = ["TelemetryEvent", "TelemetrySummary", "aggregate_telemetry"]

# Fin del archivo paywall/modules/entitlements/services/telemetry.py
