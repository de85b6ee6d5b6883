import asyncio
import threading
import time

import pytest

from lightbucket_relay.errors import WorkerError
from lightbucket_relay.worker import DeliveryWorker


def test_submit_runs_on_worker_thread() -> None:
    worker = DeliveryWorker(name="test-worker")
    worker.start()

    async def whoami() -> str:
        return threading.current_thread().name

    try:
        assert worker.submit(whoami()).result(timeout=5) == "test-worker"
    finally:
        worker.stop(timeout=5)

    assert worker.running is False


def test_stop_lets_in_flight_work_finish() -> None:
    worker = DeliveryWorker()
    worker.start()
    finished = threading.Event()

    async def slow() -> None:
        await asyncio.sleep(0.2)
        finished.set()

    future = worker.submit(slow())
    worker.stop(timeout=5)

    assert finished.is_set()
    assert future.done() and not future.cancelled()


def test_submissions_run_concurrently() -> None:
    worker = DeliveryWorker()
    worker.start()
    both_started = asyncio.Event()
    started = []

    async def job(index: int) -> int:
        started.append(index)
        if len(started) == 2:
            both_started.set()
        await asyncio.wait_for(both_started.wait(), timeout=5)
        return index

    try:
        futures = [worker.submit(job(index)) for index in range(2)]
        assert sorted(f.result(timeout=5) for f in futures) == [0, 1]
    finally:
        worker.stop(timeout=5)


def test_drain_reports_timeout() -> None:
    worker = DeliveryWorker()
    worker.start()
    release = threading.Event()

    async def blocked() -> None:
        while not release.is_set():
            await asyncio.sleep(0.01)

    worker.submit(blocked())
    try:
        assert worker.drain(timeout=0.05) is False
        assert worker.in_flight == 1
    finally:
        release.set()
        worker.stop(timeout=5)

    assert worker.in_flight == 0


def test_shutdown_hooks_run_on_stop() -> None:
    worker = DeliveryWorker()
    worker.start()
    calls = []

    async def hook() -> None:
        calls.append(threading.current_thread().name)

    worker.add_shutdown_hook(hook)
    worker.stop(timeout=5)

    assert calls == ["lightbucket-delivery"]


def test_submit_requires_running_worker() -> None:
    worker = DeliveryWorker()

    async def noop() -> None:
        return None

    with pytest.raises(WorkerError):
        worker.submit(noop())


def test_stop_is_safe_when_never_started() -> None:
    DeliveryWorker().stop(timeout=1)


def test_stop_timeout_leaves_in_flight_work_running() -> None:
    worker = DeliveryWorker()
    worker.start()
    order = []
    finished = threading.Event()

    async def slow() -> None:
        await asyncio.sleep(0.5)
        order.append("job")
        finished.set()

    async def hook() -> None:
        order.append("hook")

    worker.add_shutdown_hook(hook)
    future = worker.submit(slow())

    started = time.monotonic()
    worker.stop(timeout=0.05)
    assert time.monotonic() - started < 0.4

    assert finished.wait(timeout=5)
    assert future.result(timeout=5) is None
    deadline = time.monotonic() + 5
    while worker.running and time.monotonic() < deadline:
        time.sleep(0.01)

    assert worker.running is False
    assert order == ["job", "hook"]


def test_submit_after_stop_is_refused() -> None:
    worker = DeliveryWorker()
    worker.start()
    release = threading.Event()

    async def blocked() -> None:
        while not release.is_set():
            await asyncio.sleep(0.01)

    async def noop() -> None:
        return None

    worker.submit(blocked())
    worker.stop(timeout=0.01)
    try:
        with pytest.raises(WorkerError):
            worker.submit(noop())
    finally:
        release.set()
