r"""Implement the deferred value, a single-settlement container for a
future outcome with chainable continuations.

A ``Deferred`` starts pending and settles exactly once, either resolved
with a tuple of values or rejected with an error. Continuations
registered with ``then``, ``catch`` and ``finally_`` each return a new
child deferred, so they compose into chains:

```python
deferred = (
    Deferred(executor)
    .then(lambda value: value * 2)
    .catch(lambda error: 0)
    .finally_(cleanup)
)
```

Inside a cooperative task, ``await deferred`` suspends only that task
until the deferred settles.
"""

from __future__ import annotations

__all__ = ["Deferred", "DeferredState"]

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from adeferred.exceptions import RejectedError
from adeferred.scheduler import get_scheduler

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Generator

    from adeferred.scheduler import Scheduler

    Executor = Callable[[Callable[..., None], Callable[[Any], None]], Any]

logger: logging.Logger = logging.getLogger(__name__)


class DeferredState(Enum):
    r"""Settlement states of a deferred.

    Attributes:
        PENDING: Not settled yet.
        RESOLVED: Settled with a tuple of values.
        REJECTED: Settled with an error.
    """

    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


@dataclass
class _Subscription:
    on_resolve: Callable[..., Any] | None
    on_reject: Callable[[Any], Any] | None
    resolve: Callable[..., None]
    reject: Callable[[Any], None]


class Deferred:
    r"""Implement a deferred value.

    If an executor is given, it is called on a new scheduling turn with
    two callables, ``resolve(*values)`` and ``reject(error)``. Any
    exception raised by the executor rejects the deferred. If the
    executor returns an awaitable (for example an ``async def``
    executor), it is run as a cooperative task and any exception it
    raises rejects the deferred.

    Without an executor, the creator settles the deferred through its
    ``resolve`` and ``reject`` methods.

    Only the first settlement counts. Later calls to ``resolve`` or
    ``reject`` are ignored.

    Args:
        executor: The function that computes the outcome.
        scheduler: The scheduler used to run the executor and the
            continuations. If ``None``, the default scheduler is used.

    Example:
        ```pycon
        >>> from adeferred import Deferred
        >>> from adeferred.scheduler import ManualScheduler
        >>> scheduler = ManualScheduler()
        >>> deferred = Deferred(lambda resolve, reject: resolve(21), scheduler=scheduler)
        >>> doubled = deferred.then(lambda value: value * 2)
        >>> scheduler.run_until_idle()
        1
        >>> doubled.values
        (42,)

        ```
    """

    def __init__(
        self, executor: Executor | None = None, *, scheduler: Scheduler | None = None
    ) -> None:
        self._scheduler = scheduler if scheduler is not None else get_scheduler()
        self._state = DeferredState.PENDING
        self._values: tuple[Any, ...] = ()
        self._error: Any = None
        self._subscriptions: list[_Subscription] = []
        if executor is not None:
            self._scheduler.spawn(self._run_executor, executor)

    def __repr__(self) -> str:
        if self._state is DeferredState.RESOLVED:
            return f"{self.__class__.__qualname__}(resolved, values={self._values!r})"
        if self._state is DeferredState.REJECTED:
            return f"{self.__class__.__qualname__}(rejected, error={self._error!r})"
        return f"{self.__class__.__qualname__}(pending)"

    def __await__(self) -> Generator[Any, None, Any]:
        return self.wait().__await__()

    @classmethod
    def resolved(cls, *values: Any, scheduler: Scheduler | None = None) -> Deferred:
        r"""Create a deferred already resolved with ``values``.

        Args:
            *values: The resolution values.
            scheduler: The scheduler of the new deferred.

        Returns:
            The resolved deferred.
        """
        deferred = cls(scheduler=scheduler)
        deferred.resolve(*values)
        return deferred

    @classmethod
    def rejected(cls, error: Any, scheduler: Scheduler | None = None) -> Deferred:
        r"""Create a deferred already rejected with ``error``.

        Args:
            error: The rejection value.
            scheduler: The scheduler of the new deferred.

        Returns:
            The rejected deferred.
        """
        deferred = cls(scheduler=scheduler)
        deferred.reject(error)
        return deferred

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def state(self) -> DeferredState:
        return self._state

    @property
    def values(self) -> tuple[Any, ...]:
        r"""The resolution values. Empty unless the deferred is
        resolved."""
        return self._values

    @property
    def error(self) -> Any:
        r"""The rejection value. ``None`` unless the deferred is
        rejected."""
        return self._error

    @property
    def is_pending(self) -> bool:
        return self._state is DeferredState.PENDING

    @property
    def is_resolved(self) -> bool:
        return self._state is DeferredState.RESOLVED

    @property
    def is_rejected(self) -> bool:
        return self._state is DeferredState.REJECTED

    def resolve(self, *values: Any) -> None:
        r"""Resolve the deferred with ``values``.

        Args:
            *values: The resolution values.
        """
        self._settle(DeferredState.RESOLVED, values, None)

    def reject(self, error: Any) -> None:
        r"""Reject the deferred with ``error``.

        Args:
            error: The rejection value, usually an exception.
        """
        self._settle(DeferredState.REJECTED, (), error)

    def then(
        self,
        on_resolve: Callable[..., Any] | None = None,
        on_reject: Callable[[Any], Any] | None = None,
    ) -> Deferred:
        r"""Register continuations and return the deferred of their
        result.

        When this deferred resolves, ``on_resolve(*values)`` runs; when
        it rejects, ``on_reject(error)`` runs. The return value of the
        handler resolves the child deferred, and an exception raised by
        the handler rejects it. A missing handler passes the outcome to
        the child unchanged.

        Args:
            on_resolve: The function called with the resolution values.
            on_reject: The function called with the rejection value.

        Returns:
            The child deferred.

        Example:
            ```pycon
            >>> from adeferred import Deferred
            >>> from adeferred.scheduler import ManualScheduler
            >>> scheduler = ManualScheduler()
            >>> child = Deferred.rejected(ValueError("bad"), scheduler=scheduler).then(
            ...     lambda value: value, lambda error: f"recovered from {error}"
            ... )
            >>> scheduler.run_until_idle()
            1
            >>> child.values
            ('recovered from bad',)

            ```
        """
        child = Deferred(scheduler=self._scheduler)
        subscription = _Subscription(
            on_resolve=on_resolve,
            on_reject=on_reject,
            resolve=child.resolve,
            reject=child.reject,
        )
        if self._state is DeferredState.PENDING:
            self._subscriptions.append(subscription)
        else:
            self._scheduler.spawn(self._dispatch, subscription)
        return child

    def catch(self, on_reject: Callable[[Any], Any]) -> Deferred:
        r"""Register a rejection handler.

        Equivalent to ``then(None, on_reject)``.

        Args:
            on_reject: The function called with the rejection value.

        Returns:
            The child deferred.
        """
        return self.then(None, on_reject)

    def finally_(self, on_finally: Callable[[], Any]) -> Deferred:
        r"""Register a function that runs whatever the outcome.

        ``on_finally`` is called without arguments and its return value
        is ignored: the child settles exactly like this deferred did. If
        ``on_finally`` raises, the child rejects with that exception.

        Args:
            on_finally: The function to run once this deferred settles.

        Returns:
            The child deferred.

        Example:
            ```pycon
            >>> from adeferred import Deferred
            >>> from adeferred.scheduler import ManualScheduler
            >>> scheduler = ManualScheduler()
            >>> calls = []
            >>> child = Deferred.rejected("boom", scheduler=scheduler).finally_(
            ...     lambda: calls.append("cleanup")
            ... )
            >>> scheduler.run_until_idle()
            1
            >>> calls, child.state, child.error
            (['cleanup'], <DeferredState.REJECTED: 'rejected'>, 'boom')

            ```
        """
        child = Deferred(scheduler=self._scheduler)

        def run_then_resolve(*values: Any) -> None:
            on_finally()
            child.resolve(*values)

        def run_then_reject(error: Any) -> None:
            on_finally()
            child.reject(error)

        # The intermediate deferred only settles when on_finally raised.
        self.then(run_then_resolve, run_then_reject).catch(child.reject)
        return child

    async def wait(self) -> Any:
        r"""Suspend the current task until the deferred settles.

        Returns:
            ``None`` if the deferred resolved without values, the value
                if it resolved with one value, otherwise the tuple of
                values.

        Raises:
            Exception: The rejection value, if it is an exception.
            RejectedError: If the deferred was rejected with a value
                that is not an exception.
            SchedulerError: If the caller does not run inside a task
                the scheduler can suspend.
        """

        def register(resume: Callable[[Any], None]) -> None:
            self.then(
                lambda *values: resume((True, values)),
                lambda error: resume((False, error)),
            )

        ok, payload = await self._scheduler.suspend(register)
        if not ok:
            if isinstance(payload, BaseException):
                raise payload
            raise RejectedError(payload)
        if not payload:
            return None
        if len(payload) == 1:
            return payload[0]
        return payload

    def _settle(self, state: DeferredState, values: tuple[Any, ...], error: Any) -> None:
        if self._state is not DeferredState.PENDING:
            logger.debug(f"{self!r} is already settled, ignoring {state.value} settlement")
            return
        self._state = state
        self._values = values
        self._error = error
        subscriptions, self._subscriptions = self._subscriptions, []
        if state is DeferredState.REJECTED and not subscriptions:
            logger.debug(f"{self!r} has no continuation registered yet")
        for subscription in subscriptions:
            self._dispatch(subscription)

    def _dispatch(self, subscription: _Subscription) -> None:
        if self._state is DeferredState.RESOLVED:
            if subscription.on_resolve is None:
                subscription.resolve(*self._values)
                return
            handler, args = subscription.on_resolve, self._values
        else:
            if subscription.on_reject is None:
                subscription.reject(self._error)
                return
            handler, args = subscription.on_reject, (self._error,)

        try:
            result = handler(*args)
        except Exception as exc:  # noqa: BLE001
            logger.debug(f"continuation {handler!r} of {self!r} raised {exc!r}")
            subscription.reject(exc)
            return
        subscription.resolve(result)

    def _run_executor(self, executor: Executor) -> None:
        try:
            result = executor(self.resolve, self.reject)
        except Exception as exc:  # noqa: BLE001
            logger.debug(f"executor {executor!r} raised {exc!r}")
            self.reject(exc)
            return
        if inspect.isawaitable(result):
            self._scheduler.start(self._drive(result))

    async def _drive(self, awaitable: Awaitable[Any]) -> None:
        try:
            await awaitable
        except Exception as exc:  # noqa: BLE001
            logger.debug(f"executor task of {self!r} raised {exc!r}")
            self.reject(exc)
