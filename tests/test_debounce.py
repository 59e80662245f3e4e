"""Tests for per-key debouncing of type-ahead lookups."""

import asyncio

import pytest

from autometer.domain.errors import RequestSuperseded
from autometer.infrastructure.debounce import Debouncer


def lookup(calls, value):
    async def _factory():
        calls.append(value)
        return value

    return _factory


@pytest.mark.asyncio
async def test_single_call_returns_result():
    calls = []
    debouncer = Debouncer(0.01)
    assert await debouncer.run("c1", lookup(calls, "koc")) == "koc"
    assert calls == ["koc"]


@pytest.mark.asyncio
async def test_rapid_retyping_only_issues_latest_lookup():
    calls = []
    debouncer = Debouncer(0.05)
    results = await asyncio.gather(
        debouncer.run("c1", lookup(calls, "k")),
        debouncer.run("c1", lookup(calls, "ko")),
        debouncer.run("c1", lookup(calls, "koc")),
        return_exceptions=True,
    )
    assert isinstance(results[0], RequestSuperseded)
    assert isinstance(results[1], RequestSuperseded)
    assert results[2] == "koc"
    assert calls == ["koc"]


@pytest.mark.asyncio
async def test_keys_are_independent():
    calls = []
    debouncer = Debouncer(0.01)
    a, b = await asyncio.gather(
        debouncer.run("c1", lookup(calls, "kochi")),
        debouncer.run("c2", lookup(calls, "aluva")),
    )
    assert (a, b) == ("kochi", "aluva")


@pytest.mark.asyncio
async def test_result_discarded_if_superseded_in_flight():
    debouncer = Debouncer(0.0)
    release = asyncio.Event()

    async def slow():
        await release.wait()
        return "stale"

    async def fast():
        return "fresh"

    first = asyncio.create_task(debouncer.run("c1", slow))
    await asyncio.sleep(0.01)  # first lookup is now in flight
    second = await debouncer.run("c1", fast)
    release.set()

    assert second == "fresh"
    with pytest.raises(RequestSuperseded):
        await first


@pytest.mark.asyncio
async def test_finished_keys_are_forgotten():
    debouncer = Debouncer(0.0)
    for i in range(1000):
        await debouncer.run(f"client-{i}", lookup([], i))
    assert len(debouncer) == 0


@pytest.mark.asyncio
async def test_failed_lookup_releases_key():
    debouncer = Debouncer(0.0)

    async def broken():
        raise RuntimeError("maps down")

    with pytest.raises(RuntimeError):
        await debouncer.run("c1", broken)
    assert len(debouncer) == 0


@pytest.mark.asyncio
async def test_key_kept_while_newer_call_pending():
    debouncer = Debouncer(0.0)
    release = asyncio.Event()

    async def slow():
        await release.wait()
        return "fresh"

    pending = asyncio.create_task(debouncer.run("c1", slow))
    await asyncio.sleep(0.01)
    assert len(debouncer) == 1
    release.set()
    assert await pending == "fresh"
    assert len(debouncer) == 0
