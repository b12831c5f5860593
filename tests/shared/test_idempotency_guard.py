# -*- coding: utf-8 -*-
"""
Tests de IdempotencyGuard y sus almacenes.

Valida que:
1. Una clave completada devuelve la respuesta cacheada sin re-ejecutar
2. Una clave en curso rechaza la segunda ejecución (DUPLICATE_IN_FLIGHT)
3. Un fallo libera la reserva para permitir el reintento
4. El TTL expira las claves
5. RedisIdempotencyStore usa SET NX EX para reservar

Autor: Equipo Paywall
Fecha: 2026-02-17
"""

import asyncio
import json

import pytest

from paywall.shared.errors import ConflictError
from paywall.shared.idempotency import (
    IdempotencyGuard,
    InMemoryIdempotencyStore,
    RedisIdempotencyStore,
    derive_key,
)


class _ManualClock:
    def __init__(self):
        self.value = 1000.0

    def __call__(self) -> float:
        return self.value


class TestIdempotencyGuard:
    """Ejecución a lo sumo una vez por clave."""

    async def test_second_call_replays_cached_response(self):
        guard = IdempotencyGuard(InMemoryIdempotencyStore())
        calls = []

        async def op():
            calls.append(1)
            return {"status": "paid", "n": len(calls)}

        first = await guard.run("confirm:p1:src", op)
        second = await guard.run("confirm:p1:src", op)

        assert first.replayed is False
        assert second.replayed is True
        assert second.response == {"status": "paid", "n": 1}
        assert len(calls) == 1

    async def test_concurrent_identical_request_is_rejected_while_in_flight(self):
        guard = IdempotencyGuard(InMemoryIdempotencyStore())
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_op():
            started.set()
            await release.wait()
            return {"ok": True}

        task = asyncio.create_task(guard.run("webhook:payment.updated:evt_1", slow_op))
        await started.wait()

        with pytest.raises(ConflictError) as exc_info:
            await guard.run("webhook:payment.updated:evt_1", slow_op)
        assert exc_info.value.details["reason_code"] == "DUPLICATE_IN_FLIGHT"

        release.set()
        result = await task
        assert result.replayed is False

    async def test_failed_operation_releases_key_for_retry(self):
        guard = IdempotencyGuard(InMemoryIdempotencyStore())

        async def failing():
            raise RuntimeError("db down")

        async def ok():
            return {"ok": True}

        with pytest.raises(RuntimeError):
            await guard.run("k", failing)

        result = await guard.run("k", ok)
        assert result.replayed is False
        assert result.response == {"ok": True}

    async def test_ttl_expiry_allows_re_execution(self):
        clock = _ManualClock()
        guard = IdempotencyGuard(InMemoryIdempotencyStore(clock=clock), ttl_seconds=60)
        calls = []

        async def op():
            calls.append(1)
            return {"n": len(calls)}

        await guard.run("k", op)
        clock.value += 61
        result = await guard.run("k", op)

        assert result.replayed is False
        assert result.response == {"n": 2}

    def test_rejects_non_positive_ttl(self):
        with pytest.raises(ValueError):
            IdempotencyGuard(InMemoryIdempotencyStore(), ttl_seconds=0)


class TestInMemoryIdempotencyStore:
    async def test_reserve_sweeps_expired_keys_never_read_again(self):
        clock = _ManualClock()
        store = InMemoryIdempotencyStore(clock=clock)
        for i in range(5):
            assert await store.reserve(f"old-{i}", ttl_seconds=60) is True
        await store.set("done", {"ok": True}, ttl_seconds=60)
        assert len(store) == 6

        clock.value += 61
        assert await store.reserve("fresh", ttl_seconds=60) is True

        assert len(store) == 1

    async def test_sweep_keeps_live_keys(self):
        clock = _ManualClock()
        store = InMemoryIdempotencyStore(clock=clock)
        await store.set("short", {"n": 1}, ttl_seconds=10)
        await store.set("long", {"n": 2}, ttl_seconds=600)

        clock.value += 11
        await store.reserve("other", ttl_seconds=60)

        assert len(store) == 2
        assert await store.get("long") == {"n": 2}
        assert await store.get("short") is None


class TestDeriveKey:
    def test_joins_parts_with_namespace(self):
        assert derive_key("webhook", "payment.updated", "evt_1") == "webhook:payment.updated:evt_1"

    def test_long_keys_are_hashed(self):
        key = derive_key("confirm", "x" * 300)
        assert key.startswith("confirm:")
        assert len(key) == len("confirm:") + 64


class _FakeRedis:
    """Subconjunto de redis.asyncio usado por el almacén."""

    def __init__(self):
        self.data = {}
        self.set_calls = []

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None, nx=False):
        self.set_calls.append({"key": key, "ex": ex, "nx": nx})
        if nx and key in self.data:
            return None
        self.data[key] = value
        return True

    async def delete(self, key):
        self.data.pop(key, None)


class TestRedisIdempotencyStore:
    async def test_reserve_is_set_nx_with_ttl(self):
        redis = _FakeRedis()
        store = RedisIdempotencyStore(redis, namespace="t")

        assert await store.reserve("k", 300) is True
        assert await store.reserve("k", 300) is False
        assert redis.set_calls[0] == {"key": "t:k", "ex": 300, "nx": True}

    async def test_pending_reservation_is_not_a_cached_response(self):
        store = RedisIdempotencyStore(_FakeRedis())
        await store.reserve("k", 300)
        assert await store.get("k") is None

    async def test_set_then_get_returns_response(self):
        redis = _FakeRedis()
        store = RedisIdempotencyStore(redis, namespace="t")
        await store.reserve("k", 300)
        await store.set("k", {"status": "processed"}, 86_400)

        assert await store.get("k") == {"status": "processed"}
        assert json.loads(redis.data["t:k"])["state"] == "completed"

    async def test_release_only_drops_pending_records(self):
        redis = _FakeRedis()
        store = RedisIdempotencyStore(redis, namespace="t")
        await store.set("done", {"ok": True}, 60)
        await store.reserve("pending", 60)

        await store.release("done")
        await store.release("pending")

        assert "t:done" in redis.data
        assert "t:pending" not in redis.data

# Fin del archivo tests/shared/test_idempotency_guard.py
