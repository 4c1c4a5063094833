r"""Unit tests for the schedulers."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import Mock, call

import pytest

from adeferred import SchedulerError
from adeferred.scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    get_scheduler,
    set_scheduler,
)

#####################################
#     Tests for ManualScheduler     #
#####################################


def test_manual_scheduler_spawn_is_deferred() -> None:
    scheduler = ManualScheduler()
    callback = Mock()
    scheduler.spawn(callback, 1, 2)
    callback.assert_not_called()
    assert scheduler.pending == 1


def test_manual_scheduler_run_once() -> None:
    scheduler = ManualScheduler()
    callback = Mock()
    scheduler.spawn(callback, "a")
    assert scheduler.run_once()
    callback.assert_called_once_with("a")
    assert not scheduler.run_once()


def test_manual_scheduler_runs_callbacks_in_fifo_order() -> None:
    scheduler = ManualScheduler()
    manager = Mock()
    scheduler.spawn(manager.first)
    scheduler.spawn(manager.second)
    scheduler.spawn(manager.third)
    assert scheduler.run_until_idle() == 3
    assert manager.mock_calls == [call.first(), call.second(), call.third()]


def test_manual_scheduler_run_until_idle_runs_nested_callbacks() -> None:
    scheduler = ManualScheduler()
    callback = Mock()
    scheduler.spawn(scheduler.spawn, callback, "nested")
    assert scheduler.run_until_idle() == 2
    callback.assert_called_once_with("nested")
    assert scheduler.pending == 0


def test_manual_scheduler_repr() -> None:
    assert repr(ManualScheduler()) == "ManualScheduler(pending=0)"


def test_manual_scheduler_start_returns_result() -> None:
    scheduler = ManualScheduler()

    async def main() -> str:
        return "result"

    task = scheduler.start(main())
    assert not task.done
    scheduler.run_until_idle()
    assert task.done
    assert task.result() == "result"
    assert task.exception() is None


def test_manual_scheduler_start_records_exception() -> None:
    scheduler = ManualScheduler()

    async def main() -> None:
        msg = "failed"
        raise KeyError(msg)

    task = scheduler.start(main())
    scheduler.run_until_idle()
    assert isinstance(task.exception(), KeyError)
    with pytest.raises(KeyError, match=r"failed"):
        task.result()


def test_manual_task_result_before_done_raises() -> None:
    scheduler = ManualScheduler()

    async def main() -> None:
        return None

    task = scheduler.start(main())
    with pytest.raises(RuntimeError, match=r"task is not finished"):
        task.result()
    with pytest.raises(RuntimeError, match=r"task is not finished"):
        task.exception()
    scheduler.run_until_idle()


def test_manual_scheduler_suspend_and_resume() -> None:
    scheduler = ManualScheduler()
    resumers = []

    async def main() -> Any:
        return await scheduler.suspend(resumers.append)

    task = scheduler.start(main())
    scheduler.run_until_idle()
    assert not task.done
    assert len(resumers) == 1

    resumers[0]("value")
    resumers[0]("ignored")
    assert scheduler.run_until_idle() == 1
    assert task.result() == "value"


def test_manual_scheduler_suspend_outside_task_raises() -> None:
    scheduler = ManualScheduler()
    coroutine = scheduler.suspend(Mock())
    with pytest.raises(SchedulerError, match=r"cannot suspend"):
        coroutine.send(None)


def test_manual_scheduler_rejects_foreign_awaitables() -> None:
    scheduler = ManualScheduler()

    async def main() -> None:
        await asyncio.sleep(0)

    task = scheduler.start(main())
    scheduler.run_until_idle()
    assert isinstance(task.exception(), SchedulerError)


#####################################
#     Tests for AsyncioScheduler    #
#####################################


def test_asyncio_scheduler_spawn_without_loop_raises() -> None:
    with pytest.raises(SchedulerError, match=r"requires a running event loop"):
        AsyncioScheduler().spawn(Mock())


def test_asyncio_scheduler_repr() -> None:
    assert repr(AsyncioScheduler()) == "AsyncioScheduler(loop=None)"


@pytest.mark.asyncio
async def test_asyncio_scheduler_spawn_runs_on_next_turn() -> None:
    callback = Mock()
    AsyncioScheduler().spawn(callback, 1)
    callback.assert_not_called()
    await asyncio.sleep(0)
    callback.assert_called_once_with(1)


@pytest.mark.asyncio
async def test_asyncio_scheduler_spawn_with_explicit_loop() -> None:
    callback = Mock()
    AsyncioScheduler(loop=asyncio.get_running_loop()).spawn(callback)
    await asyncio.sleep(0)
    callback.assert_called_once_with()


@pytest.mark.asyncio
async def test_asyncio_scheduler_start() -> None:
    async def main() -> int:
        return 7

    task = AsyncioScheduler().start(main())
    assert isinstance(task, asyncio.Task)
    assert await task == 7


@pytest.mark.asyncio
async def test_asyncio_scheduler_suspend_and_resume() -> None:
    loop = asyncio.get_running_loop()

    def register(resume: Any) -> None:
        loop.call_soon(resume, "first")
        loop.call_soon(resume, "second")

    assert await AsyncioScheduler().suspend(register) == "first"


###################################################
#     Tests for get_scheduler and set_scheduler     #
###################################################


def test_get_scheduler_default_is_asyncio() -> None:
    assert isinstance(get_scheduler(), AsyncioScheduler)


def test_set_scheduler_returns_previous(default_scheduler: None) -> None:
    scheduler = ManualScheduler()
    previous = set_scheduler(scheduler)
    assert isinstance(previous, AsyncioScheduler)
    assert get_scheduler() is scheduler
