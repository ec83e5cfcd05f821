import pytest

from pgdocstore.core.events import ConnectionEvent, EventRegistry


@pytest.mark.asyncio
async def test_emit_calls_sync_and_async_observers_in_order():
    events = EventRegistry()
    calls = []

    def on_sync(event, payload):
        calls.append(("sync", event, payload))

    async def on_async(event, payload):
        calls.append(("async", event, payload))

    events.subscribe(ConnectionEvent.CONNECTED, on_sync)
    events.subscribe("DB_CONNECTED", on_async)

    errors = await events.emit(ConnectionEvent.CONNECTED, "conn")

    assert errors == []
    assert calls == [("sync", "DB_CONNECTED", "conn"), ("async", "DB_CONNECTED", "conn")]


@pytest.mark.asyncio
async def test_emit_only_reaches_matching_event():
    events = EventRegistry()
    calls = []
    events.subscribe(ConnectionEvent.ERROR, lambda event, payload: calls.append(event))

    await events.emit(ConnectionEvent.CONNECTED)

    assert calls == []


@pytest.mark.asyncio
async def test_failing_observer_does_not_stop_others():
    events = EventRegistry()
    calls = []

    def broken(event, payload):
        raise RuntimeError("observer broke")

    events.subscribe(ConnectionEvent.CONNECTED, broken)
    events.subscribe(ConnectionEvent.CONNECTED, lambda event, payload: calls.append(event))

    errors = await events.emit(ConnectionEvent.CONNECTED)

    assert len(errors) == 1
    assert "observer broke" in errors[0]
    assert calls == ["DB_CONNECTED"]


@pytest.mark.asyncio
async def test_unsubscribe():
    events = EventRegistry()
    calls = []
    sub_id = events.subscribe(ConnectionEvent.CONNECTED, lambda event, payload: calls.append(event))

    assert events.unsubscribe(sub_id) is True
    assert events.unsubscribe(sub_id) is False

    await events.emit(ConnectionEvent.CONNECTED)
    assert calls == []
    assert events.subscribers(ConnectionEvent.CONNECTED) == []


def test_unknown_event_rejected():
    with pytest.raises(ValueError):
        EventRegistry().subscribe("DB_EXPLODED", lambda event, payload: None)
