import asyncio

import httpx
import pytest

from landval.clients.valuation_api import ValuationApiClient
from landval.core import AppError, ErrorCode
from landval.pipeline.tracker import TrackerTimings
from landval.services.valuation_service import ValuationService

CREATED = "2020-01-01T00:00:00Z"


def _service(records, scheduler, calls=None, **kwargs):
    def handler(request):
        if calls is not None:
            calls.append(request.url.path)
        vid = request.url.path.rsplit("/", 1)[-1]
        record = records.get(vid)
        if record is None:
            return httpx.Response(404, json={"success": False, "message": "Valuation not found"})
        return httpx.Response(200, json={"success": True, "valuation": record})

    client = ValuationApiClient("http://upstream.test", transport=httpx.MockTransport(handler), max_retries=0)
    options = {"poll_interval_seconds": 60, "timings": TrackerTimings(), "scheduler_factory": lambda: scheduler}
    options.update(kwargs)
    return ValuationService(client, **options)


def test_track_is_idempotent_and_polls_once_inline(scheduler):
    calls = []
    svc = _service({"1": {"id": 1, "status": "processing", "createdAt": CREATED}}, scheduler, calls)

    async def scenario():
        first = await svc.track("1")
        second = await svc.track(1)
        assert first is second
        assert first.poller.running
        await svc.shutdown()
        return first

    session = asyncio.run(scenario())

    assert calls == ["/api/valuations/1"]
    assert session.tracker.disposed
    assert not session.poller.running
    assert scheduler.pending == 0
    assert svc.tracked_count == 0


def test_terminal_valuation_skips_background_polling(scheduler):
    svc = _service({"2": {"id": 2, "status": "completed", "createdAt": CREATED}}, scheduler)

    async def scenario():
        view = await svc.get_pipeline("2")
        session = await svc.track("2")
        return view, session

    view, session = asyncio.run(scenario())

    assert view.is_terminal
    assert not session.poller.running


def test_each_valuation_gets_its_own_tracker(scheduler):
    records = {
        "3": {"id": 3, "status": "processing", "createdAt": CREATED},
        "4": {"id": 4, "status": "processing", "createdAt": CREATED, "baseValue": 1.0},
    }
    svc = _service(records, scheduler)

    async def scenario():
        a = await svc.track("3")
        b = await svc.track("4")
        await svc.stop_tracking("3")
        assert a.tracker.disposed
        assert not b.tracker.disposed
        assert b.tracker.timers_running
        await svc.shutdown()

    asyncio.run(scenario())


def test_unknown_valuation_maps_to_app_error(scheduler):
    svc = _service({}, scheduler)

    with pytest.raises(AppError) as exc:
        asyncio.run(svc.get_pipeline("nope"))

    assert exc.value.status_code == 404
    assert exc.value.code == ErrorCode.VALUATION_NOT_FOUND
    assert svc.tracked_count == 0
    assert scheduler.pending == 0


def test_vanished_valuation_releases_tracker_and_session(scheduler):
    records = {"6": {"id": 6, "status": "processing", "createdAt": CREATED}}
    svc = _service(records, scheduler, poll_interval_seconds=0.01)

    async def scenario():
        session = await svc.track("6")
        assert session.tracker.timers_running

        del records["6"]
        for _ in range(200):
            if not session.poller.running:
                break
            await asyncio.sleep(0.01)

        with pytest.raises(AppError) as exc:
            await svc.get_pipeline("6")
        return session, exc.value

    session, err = asyncio.run(scenario())

    assert not session.poller.running
    assert session.tracker.disposed
    assert not session.tracker.timers_running
    assert scheduler.pending == 0
    assert svc.tracked_count == 0
    assert err.status_code == 404


def test_finished_sessions_expire_after_retention_window(scheduler):
    clock = {"now": 0.0}
    records = {
        "2": {"id": 2, "status": "completed", "createdAt": CREATED},
        "3": {"id": 3, "status": "processing", "createdAt": CREATED},
    }
    svc = _service(records, scheduler, terminal_retention_seconds=10, clock=lambda: clock["now"])

    async def scenario():
        done = await svc.track("2")
        running = await svc.track("3")

        clock["now"] = 9.0
        assert await svc.track("2") is done

        clock["now"] = 10.0
        assert await svc.track("3") is running
        assert svc.tracked_count == 1
        assert done.tracker.disposed

        clock["now"] = 1000.0
        assert await svc.track("3") is running
        fresh = await svc.track("2")
        assert fresh is not done
        assert fresh.tracker.snapshot().is_terminal

        await svc.shutdown()

    asyncio.run(scenario())
