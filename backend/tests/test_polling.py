import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from landval.clients.valuation_api import ValuationApiClient
from landval.constants.statuses import PipelineStageId, StageStatus, ValuationStatus
from landval.pipeline.tracker import TrackerTimings, ValuationProgressTracker
from landval.services.polling import ValuationPoller

NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
CREATED = "2025-03-01T11:59:00Z"


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr("landval.clients.valuation_api._backoff_seconds", lambda attempt: 0)


def _sequence_handler(records):
    """Serve the given upstream records in order, repeating the last one."""
    calls = {"n": 0}

    def handler(request):
        idx = min(calls["n"], len(records) - 1)
        calls["n"] += 1
        record = records[idx]
        if isinstance(record, httpx.Response):
            return record
        return httpx.Response(200, json={"success": True, "valuation": record})

    return handler, calls


def _poller(handler, scheduler, **kwargs):
    client = ValuationApiClient("http://upstream.test", transport=httpx.MockTransport(handler), max_retries=0)
    tracker = ValuationProgressTracker("9", scheduler=scheduler, timings=TrackerTimings())
    return ValuationPoller(client, tracker, "9", interval_seconds=0, now=lambda: NOW, **kwargs)


def test_poll_once_feeds_inferred_step_into_tracker(scheduler):
    handler, _ = _sequence_handler([{"id": 9, "status": "processing", "createdAt": CREATED, "baseValue": 10100.0}])
    poller = _poller(handler, scheduler)

    asyncio.run(poller.poll_once())

    view = poller.tracker.snapshot()
    assert view.status is ValuationStatus.PROCESSING
    assert view.current_step is PipelineStageId.ANALYSIS
    assert view.stage(PipelineStageId.ANALYSIS).status is StageStatus.PROCESSING
    assert poller.latest.base_value == 10100.0
    poller.tracker.dispose()


def test_poller_runs_until_terminal(scheduler):
    handler, calls = _sequence_handler(
        [
            {"id": 9, "status": "processing", "createdAt": CREATED},
            {"id": 9, "status": "processing", "createdAt": CREATED, "baseValue": 10100.0},
            {"id": 9, "status": "processing", "createdAt": CREATED, "baseValue": 10100.0, "aiReasoning": "ok"},
            {"id": 9, "status": "completed", "createdAt": CREATED, "baseValue": 10100.0, "aiReasoning": "ok", "marketInsight": "ok"},
        ]
    )
    poller = _poller(handler, scheduler)

    async def scenario():
        await asyncio.wait_for(poller.start(), timeout=5)

    asyncio.run(scenario())

    assert calls["n"] == 4
    assert poller.polls == 4
    assert poller.finished
    assert not poller.running
    assert not poller.tracker.timers_running
    assert set(poller.tracker.snapshot().stage_statuses().values()) == {StageStatus.COMPLETED}


def test_poller_survives_transient_upstream_errors(scheduler):
    handler, calls = _sequence_handler(
        [
            httpx.Response(503, json={"success": False, "message": "busy"}),
            {"id": 9, "status": "failed", "createdAt": CREATED, "baseValue": 10100.0},
        ]
    )
    poller = _poller(handler, scheduler)

    async def scenario():
        await asyncio.wait_for(poller.start(), timeout=5)

    asyncio.run(scenario())

    assert calls["n"] == 2
    view = poller.tracker.snapshot()
    assert view.status is ValuationStatus.FAILED
    assert view.stage(PipelineStageId.ANALYSIS).status is StageStatus.FAILED


def test_poller_stops_when_valuation_disappears(scheduler):
    handler, calls = _sequence_handler([httpx.Response(404, json={"success": False, "message": "Valuation not found"})])
    poller = _poller(handler, scheduler)

    async def scenario():
        await asyncio.wait_for(poller.start(), timeout=5)

    asyncio.run(scenario())

    assert calls["n"] == 1
    assert not poller.running
    assert poller.tracker.status is ValuationStatus.PENDING


def test_valuation_vanishing_mid_run_disposes_tracker(scheduler):
    handler, calls = _sequence_handler(
        [
            {"id": 9, "status": "processing", "createdAt": CREATED},
            httpx.Response(404, json={"success": False, "message": "Valuation not found"}),
        ]
    )
    abandoned = []
    poller = _poller(handler, scheduler, on_abandoned=abandoned.append)

    async def scenario():
        await asyncio.wait_for(poller.start(), timeout=5)

    asyncio.run(scenario())

    assert calls["n"] == 2
    assert abandoned == ["not_found"]
    assert poller.tracker.disposed
    assert not poller.tracker.timers_running
    assert scheduler.pending == 0


def test_stop_cancels_background_polling(scheduler):
    handler, calls = _sequence_handler([{"id": 9, "status": "processing", "createdAt": CREATED}])
    client = ValuationApiClient("http://upstream.test", transport=httpx.MockTransport(handler), max_retries=0)
    tracker = ValuationProgressTracker("9", scheduler=scheduler, timings=TrackerTimings())
    poller = ValuationPoller(client, tracker, "9", interval_seconds=0.01, now=lambda: NOW)

    async def scenario():
        poller.start()
        await asyncio.sleep(0.05)
        assert poller.running
        await poller.stop()

    asyncio.run(scenario())

    assert not poller.running
    assert not poller.finished
    tracker.dispose()
