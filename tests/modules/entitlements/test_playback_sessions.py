# -*- coding: utf-8 -*-
"""
Tests de PlaybackSessionService y de la agregación de telemetría.

Valida que:
1. Solo se abre sesión con un token válido (re-validado en cada apertura)
2. end_session rechaza buffer > watch y deja la sesión activa
3. Cerrar dos veces devuelve el mismo registro sin cambios
4. No se acepta telemetría después del cierre
5. Al cerrar se guarda el reembolso sugerido por calidad
6. El reembolso suma todas las sesiones del entitlement; sin horario se asumen 90 min

Autor: Equipo Paywall
Fecha: 2026-02-17
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from paywall.shared.errors import InvalidStateError, NotFoundError, UnauthorizedError, ValidationFailedError
from paywall.modules.entitlements.enums import PlaybackSessionState, TelemetryEventType
from paywall.modules.entitlements.services import TelemetryEvent, TelemetrySummary, aggregate_telemetry

E = TelemetryEventType


@pytest.fixture
def issue_entitlement(db, paywall, make_purchase):
    async def _issue(**purchase_overrides):
        purchase = await make_purchase(**purchase_overrides)
        entitlement = await paywall.entitlements.issue(db, purchase)
        await db.commit()
        return entitlement

    return _issue


def _ms(dt):
    return int(dt.timestamp() * 1000)


class TestCreateSession:
    async def test_valid_token_opens_active_session(self, db, paywall, issue_entitlement, clock):
        entitlement = await issue_entitlement()

        started = await paywall.playback.create_session(db, entitlement.token_id, {"device": "tv"})
        await db.commit()

        assert started.entitlement_id == entitlement.id
        assert started.started_at == clock.now
        playback = await paywall.playback.session_repo.get(db, started.session_id)
        assert playback.state == PlaybackSessionState.ACTIVE
        assert playback.session_metadata == {"device": "tv"}

    async def test_unknown_token_is_unauthorized(self, db, paywall):
        with pytest.raises(UnauthorizedError):
            await paywall.playback.create_session(db, "not-a-token")

    async def test_expired_token_cannot_open_session(self, db, paywall, issue_entitlement, clock):
        entitlement = await issue_entitlement()
        clock.advance(hours=5)

        with pytest.raises(UnauthorizedError):
            await paywall.playback.create_session(db, entitlement.token_id)

    async def test_revoked_entitlement_cannot_open_session(self, db, paywall, issue_entitlement):
        entitlement = await issue_entitlement()
        await paywall.entitlements.revoke(db, entitlement.id)

        with pytest.raises(UnauthorizedError):
            await paywall.playback.create_session_for_entitlement(db, entitlement.id)


class TestEndSession:
    async def _open(self, db, paywall, issue_entitlement):
        entitlement = await issue_entitlement()
        started = await paywall.playback.create_session(db, entitlement.token_id)
        await db.commit()
        return started.session_id

    async def test_end_stores_aggregates(self, db, paywall, issue_entitlement, clock):
        session_id = await self._open(db, paywall, issue_entitlement)
        clock.advance(minutes=20)

        playback = await paywall.playback.end_session(
            db, session_id, TelemetrySummary(total_watch_ms=1_200_000, total_buffer_ms=6_000, buffer_events=2)
        )

        assert playback.state == PlaybackSessionState.ENDED
        assert playback.ended_at == clock.now
        assert playback.total_watch_ms == 1_200_000
        assert playback.quality_refund_cents is None

    async def test_buffer_exceeding_watch_is_rejected(self, db, paywall, issue_entitlement):
        session_id = await self._open(db, paywall, issue_entitlement)

        with pytest.raises(ValidationFailedError) as exc:
            await paywall.playback.end_session(
                db, session_id, TelemetrySummary(total_watch_ms=1_000, total_buffer_ms=5_000)
            )

        assert exc.value.details["reason_code"] == "buffer_exceeds_watch"
        playback = await paywall.playback.session_repo.get(db, session_id)
        assert playback.state == PlaybackSessionState.ACTIVE

    async def test_negative_values_are_rejected(self, db, paywall, issue_entitlement):
        session_id = await self._open(db, paywall, issue_entitlement)

        with pytest.raises(ValidationFailedError) as exc:
            await paywall.playback.end_session(
                db, session_id, TelemetrySummary(total_watch_ms=-1, total_buffer_ms=0)
            )

        assert exc.value.details["reason_code"] == "negative_telemetry"

    async def test_second_end_returns_stored_record(self, db, paywall, issue_entitlement, clock):
        session_id = await self._open(db, paywall, issue_entitlement)
        first = await paywall.playback.end_session(
            db, session_id, TelemetrySummary(total_watch_ms=60_000, total_buffer_ms=1_000)
        )
        ended_at = first.ended_at
        clock.advance(minutes=1)

        second = await paywall.playback.end_session(
            db, session_id, TelemetrySummary(total_watch_ms=999_000, total_buffer_ms=0)
        )

        assert second.ended_at == ended_at
        assert second.total_watch_ms == 60_000

    async def test_unknown_session(self, db, paywall):
        with pytest.raises(NotFoundError):
            await paywall.playback.end_session(db, uuid4(), TelemetrySummary(0, 0))

    async def test_heavy_buffering_suggests_full_refund(self, db, paywall, issue_entitlement):
        session_id = await self._open(db, paywall, issue_entitlement)

        playback = await paywall.playback.end_session(
            db, session_id, TelemetrySummary(total_watch_ms=600_000, total_buffer_ms=150_000, buffer_events=4)
        )

        assert playback.quality_refund_cents == 499
        assert playback.quality_refund_rule == "full_refund_buffer_ratio_high"
        assert playback.quality_refund_rule_version == "v1.0"

    async def test_downtime_without_schedule_uses_default_game_length(
        self, db, paywall, make_game, issue_entitlement
    ):
        game = await make_game(ends_at=None)
        entitlement = await issue_entitlement(game=game)
        started = await paywall.playback.create_session(db, entitlement.token_id)
        await db.commit()

        # 20 min caído sobre 90 min esperados: 22%
        playback = await paywall.playback.end_session(
            db,
            started.session_id,
            TelemetrySummary(total_watch_ms=600_000, total_buffer_ms=0, stream_down_ms=1_200_000),
        )

        assert playback.quality_refund_cents == 499
        assert playback.quality_refund_rule == "full_refund_downtime_ratio_high"

    async def test_refund_considers_every_session_of_the_entitlement(
        self, db, paywall, issue_entitlement, clock
    ):
        entitlement = await issue_entitlement()
        per_session = dict(total_watch_ms=600_000, total_buffer_ms=6_000, buffer_events=6)

        first = await paywall.playback.create_session(db, entitlement.token_id)
        await db.commit()
        first_ended = await paywall.playback.end_session(db, first.session_id, TelemetrySummary(**per_session))
        await db.commit()
        clock.advance(minutes=15)
        second = await paywall.playback.create_session(db, entitlement.token_id)
        await db.commit()
        second_ended = await paywall.playback.end_session(db, second.session_id, TelemetrySummary(**per_session))

        assert first_ended.quality_refund_cents is None
        # 12 eventos de buffering en total: floor(499 × 25%)
        assert second_ended.quality_refund_cents == 124
        assert second_ended.quality_refund_rule == "partial_refund_excessive_buffering"
        assert second_ended.total_watch_ms == 600_000


class TestTelemetry:
    async def test_events_accumulate_until_end(self, db, paywall, issue_entitlement, clock):
        entitlement = await issue_entitlement()
        started = await paywall.playback.create_session(db, entitlement.token_id)
        base = _ms(clock.now)

        await paywall.playback.submit_telemetry(
            db,
            started.session_id,
            [
                TelemetryEvent(E.PLAY, base + 1_500),
                TelemetryEvent(E.PAUSE, base + 61_500),
            ],
        )
        playback = await paywall.playback.submit_telemetry(
            db,
            started.session_id,
            [
                TelemetryEvent(E.PLAY, base + 70_000),
                TelemetryEvent(E.PAUSE, base + 100_000),
            ],
        )

        assert playback.total_watch_ms == 90_000
        assert playback.startup_latency_ms == 1_500

    async def test_empty_batch_is_a_noop(self, db, paywall, issue_entitlement):
        entitlement = await issue_entitlement()
        started = await paywall.playback.create_session(db, entitlement.token_id)

        playback = await paywall.playback.submit_telemetry(db, started.session_id, [])

        assert playback.total_watch_ms == 0

    async def test_telemetry_after_end_is_rejected(self, db, paywall, issue_entitlement, clock):
        entitlement = await issue_entitlement()
        started = await paywall.playback.create_session(db, entitlement.token_id)
        await paywall.playback.end_session(db, started.session_id, TelemetrySummary(0, 0))

        with pytest.raises(InvalidStateError):
            await paywall.playback.submit_telemetry(
                db, started.session_id, [TelemetryEvent(E.PLAY, _ms(clock.now))]
            )

    async def test_close_for_entitlement_ends_active_sessions(self, db, paywall, issue_entitlement):
        entitlement = await issue_entitlement()
        await paywall.playback.create_session(db, entitlement.token_id)
        await paywall.playback.create_session(db, entitlement.token_id)

        closed = await paywall.playback.close_for_entitlement(db, entitlement.id)
        again = await paywall.playback.close_for_entitlement(db, entitlement.id)

        assert (closed, again) == (2, 0)


class TestAggregateTelemetry:
    def test_play_buffer_play_pause(self, clock):
        base = _ms(clock.now)
        events = [
            TelemetryEvent(E.PLAY, base + 2_000),
            TelemetryEvent(E.BUFFER, base + 62_000),
            TelemetryEvent(E.PLAY, base + 65_000),
            TelemetryEvent(E.ERROR, base + 70_000, error_code="fatal_decoder"),
            TelemetryEvent(E.PAUSE, base + 125_000),
        ]

        summary = aggregate_telemetry(events, clock.now)

        assert summary.startup_latency_ms == 2_000
        # 60 s antes del buffer + 60 s después
        assert summary.total_watch_ms == 120_000
        assert summary.total_buffer_ms == 3_000
        assert summary.buffer_events == 1
        assert summary.fatal_errors == 1

    def test_events_are_ordered_by_timestamp(self, clock):
        base = _ms(clock.now)
        shuffled = [
            TelemetryEvent(E.PAUSE, base + 11_000),
            TelemetryEvent(E.PLAY, base + 1_000),
        ]
        assert aggregate_telemetry(shuffled, clock.now).total_watch_ms == 10_000

    def test_buffer_with_duration_and_stream_down(self, clock):
        base = _ms(clock.now)
        events = [
            TelemetryEvent(E.PLAY, base),
            TelemetryEvent(E.BUFFER, base + 5_000, duration=1_200),
            TelemetryEvent(E.ERROR, base + 6_000, duration=4_000, error_code="stream_unavailable"),
            TelemetryEvent(E.STREAM_DOWN, base + 7_000, duration=2_000),
            TelemetryEvent(E.PAUSE, base + 20_000),
        ]

        summary = aggregate_telemetry(events, clock.now)

        assert summary.total_buffer_ms == 1_200
        assert summary.buffer_events == 1
        assert summary.stream_down_ms == 6_000
        assert summary.total_watch_ms == 20_000
        assert summary.fatal_errors == 0

    def test_open_segments_close_at_last_event(self, clock):
        base = _ms(clock.now)
        events = [
            TelemetryEvent(E.PLAY, base),
            TelemetryEvent(E.BUFFER, base + 10_000),
            TelemetryEvent(E.SEEK, base + 14_000),
        ]

        summary = aggregate_telemetry(events, clock.now)

        assert summary.total_watch_ms == 10_000
        assert summary.total_buffer_ms == 4_000
        assert summary.buffer_events == 1

    def test_startup_latency_is_never_negative(self, clock):
        early = _ms(clock.now - timedelta(seconds=3))
        summary = aggregate_telemetry([TelemetryEvent(E.PLAY, early)], clock.now)
        assert summary.startup_latency_ms == 0

    def test_no_events(self, clock):
        assert aggregate_telemetry([], clock.now) == TelemetrySummary(0, 0)
