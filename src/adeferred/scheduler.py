r"""Scheduling capabilities used by the deferred engine.

A deferred never talks to an event loop directly. It is bound to a
``Scheduler`` that can run a callback on a new scheduling turn, run a
coroutine as a cooperative task, and suspend the current task until
something resumes it with a value.

Two implementations are provided:

- ``AsyncioScheduler``: the default, backed by the running asyncio loop.
- ``ManualScheduler``: a deterministic scheduler driven by hand, mostly
  useful in tests.

Example:
    ```pycon
    >>> from adeferred import Deferred
    >>> from adeferred.scheduler import ManualScheduler
    >>> scheduler = ManualScheduler()
    >>> deferred = Deferred(lambda resolve, reject: resolve(42), scheduler=scheduler)
    >>> deferred.is_pending
    True
    >>> scheduler.run_until_idle()
    1
    >>> deferred.values
    (42,)

    ```
"""

from __future__ import annotations

__all__ = [
    "AsyncioScheduler",
    "ManualScheduler",
    "ManualTask",
    "Scheduler",
    "get_scheduler",
    "set_scheduler",
]

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import deque
from functools import partial
from typing import TYPE_CHECKING, Any

from adeferred.exceptions import SchedulerError

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Generator

logger: logging.Logger = logging.getLogger(__name__)


class Scheduler(ABC):
    r"""Define the interface of a cooperative scheduler.

    All the methods are expected to be called from the thread that runs
    the scheduler.
    """

    @abstractmethod
    def spawn(self, callback: Callable[..., Any], *args: Any) -> None:
        r"""Run ``callback(*args)`` on a new scheduling turn.

        Args:
            callback: The function to run.
            *args: The positional arguments of the function.
        """

    @abstractmethod
    def start(self, coroutine: Coroutine[Any, Any, Any]) -> Any:
        r"""Run a coroutine as a new cooperative task.

        Args:
            coroutine: The coroutine to run.

        Returns:
            A handle on the task. Its type depends on the scheduler.
        """

    @abstractmethod
    async def suspend(self, register: Callable[[Callable[[Any], None]], None]) -> Any:
        r"""Suspend the current task until it is resumed.

        Args:
            register: A function called with a ``resume(value)``
                callable. The suspended task resumes with ``value`` the
                first time ``resume`` is called. Later calls are ignored.

        Returns:
            The value passed to ``resume``.

        Raises:
            SchedulerError: If the caller does not run inside a task
                this scheduler can suspend.
        """


class AsyncioScheduler(Scheduler):
    r"""Implement a scheduler on top of an asyncio event loop.

    Args:
        loop: The event loop to use. If ``None``, the running loop is
            looked up at each call.

    Example:
        ```pycon
        >>> import asyncio
        >>> from adeferred import Deferred
        >>> from adeferred.scheduler import AsyncioScheduler
        >>> async def main():
        ...     deferred = Deferred(
        ...         lambda resolve, reject: resolve("done"), scheduler=AsyncioScheduler()
        ...     )
        ...     return await deferred
        ...
        >>> asyncio.run(main())
        'done'

        ```
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        # Strong references to running tasks, the loop only keeps weak ones.
        self._tasks: set[asyncio.Task[Any]] = set()

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(loop={self._loop!r})"

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError as exc:
            msg = "AsyncioScheduler requires a running event loop"
            raise SchedulerError(msg) from exc

    def spawn(self, callback: Callable[..., Any], *args: Any) -> None:
        self._get_loop().call_soon(callback, *args)

    def start(self, coroutine: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = self._get_loop().create_task(coroutine)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def suspend(self, register: Callable[[Callable[[Any], None]], None]) -> Any:
        loop = self._get_loop()
        if asyncio.current_task(loop) is None:
            msg = "cannot suspend: the caller is not running inside an asyncio task"
            raise SchedulerError(msg)
        future = loop.create_future()

        def resume(value: Any) -> None:
            if not future.done():
                future.set_result(value)

        register(resume)
        return await future


class _Suspension:
    r"""Awaitable yielded to ``ManualScheduler`` by a suspended task."""

    def __init__(self, register: Callable[[Callable[[Any], None]], None]) -> None:
        self.register = register

    def __await__(self) -> Generator[Any, Any, Any]:
        value = yield self
        return value


class ManualTask:
    r"""Handle on a coroutine driven by a ``ManualScheduler``.

    Args:
        coroutine: The coroutine driven by the task.
    """

    def __init__(self, coroutine: Coroutine[Any, Any, Any]) -> None:
        self._coroutine = coroutine
        self._done = False
        self._waiting = False
        self._result: Any = None
        self._exception: Exception | None = None

    def __repr__(self) -> str:
        state = "done" if self._done else ("suspended" if self._waiting else "pending")
        return f"{self.__class__.__qualname__}({state})"

    @property
    def done(self) -> bool:
        return self._done

    def result(self) -> Any:
        r"""Return the value returned by the coroutine.

        Raises:
            RuntimeError: If the task is not finished.
            Exception: The exception raised by the coroutine, if any.
        """
        if not self._done:
            msg = "task is not finished"
            raise RuntimeError(msg)
        if self._exception is not None:
            raise self._exception
        return self._result

    def exception(self) -> Exception | None:
        if not self._done:
            msg = "task is not finished"
            raise RuntimeError(msg)
        return self._exception

    def _finish(self, result: Any = None, exception: Exception | None = None) -> None:
        self._done = True
        self._result = result
        self._exception = exception


class ManualScheduler(Scheduler):
    r"""Implement a deterministic scheduler driven by hand.

    Callbacks are queued in FIFO order and only run when
    ``run_once`` or ``run_until_idle`` is called. Coroutines started
    with ``start`` are stepped through the same queue, so the whole
    interleaving is reproducible.

    Example:
        ```pycon
        >>> from adeferred import Deferred
        >>> from adeferred.scheduler import ManualScheduler
        >>> scheduler = ManualScheduler()
        >>> async def main():
        ...     return await Deferred.resolved(1, 2, scheduler=scheduler)
        ...
        >>> task = scheduler.start(main())
        >>> scheduler.run_until_idle()
        3
        >>> task.result()
        (1, 2)

        ```
    """

    def __init__(self) -> None:
        self._queue: deque[tuple[Callable[..., Any], tuple[Any, ...]]] = deque()
        self._current: ManualTask | None = None

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(pending={len(self._queue)})"

    @property
    def pending(self) -> int:
        r"""The number of callbacks waiting for a scheduling turn."""
        return len(self._queue)

    def spawn(self, callback: Callable[..., Any], *args: Any) -> None:
        self._queue.append((callback, args))

    def start(self, coroutine: Coroutine[Any, Any, Any]) -> ManualTask:
        task = ManualTask(coroutine)
        self.spawn(self._step, task, None)
        return task

    async def suspend(self, register: Callable[[Callable[[Any], None]], None]) -> Any:
        if self._current is None:
            msg = "cannot suspend: the caller is not a task started by this ManualScheduler"
            raise SchedulerError(msg)
        return await _Suspension(register)

    def run_once(self) -> bool:
        r"""Run the next queued callback.

        Returns:
            ``True`` if a callback was run, ``False`` if the queue was
                empty.
        """
        if not self._queue:
            return False
        callback, args = self._queue.popleft()
        callback(*args)
        return True

    def run_until_idle(self) -> int:
        r"""Run queued callbacks until the queue is empty.

        Callbacks queued while draining are run too.

        Returns:
            The number of callbacks run.
        """
        count = 0
        while self.run_once():
            count += 1
        return count

    def _step(self, task: ManualTask, value: Any, error: Exception | None = None) -> None:
        self._current = task
        try:
            if error is None:
                yielded = task._coroutine.send(value)
            else:
                yielded = task._coroutine.throw(error)
        except StopIteration as exc:
            task._finish(result=exc.value)
            return
        except Exception as exc:  # noqa: BLE001
            logger.debug(f"task {task!r} failed: {exc!r}")
            task._finish(exception=exc)
            return
        finally:
            self._current = None

        if not isinstance(yielded, _Suspension):
            error = SchedulerError(f"ManualScheduler cannot wait for {yielded!r}")
            self.spawn(self._step, task, None, error)
            return
        task._waiting = True
        yielded.register(partial(self._resume, task))

    def _resume(self, task: ManualTask, value: Any) -> None:
        if not task._waiting:
            return
        task._waiting = False
        self.spawn(self._step, task, value)


_default_scheduler: Scheduler = AsyncioScheduler()


def get_scheduler() -> Scheduler:
    r"""Return the scheduler used by deferreds created without an
    explicit scheduler.

    Returns:
        The default scheduler.

    Example:
        ```pycon
        >>> from adeferred.scheduler import get_scheduler
        >>> get_scheduler()
        AsyncioScheduler(loop=None)

        ```
    """
    return _default_scheduler


def set_scheduler(scheduler: Scheduler) -> Scheduler:
    r"""Set the scheduler used by deferreds created without an explicit
    scheduler.

    Args:
        scheduler: The new default scheduler.

    Returns:
        The previous default scheduler.
    """
    global _default_scheduler  # noqa: PLW0603
    previous = _default_scheduler
    _default_scheduler = scheduler
    return previous
