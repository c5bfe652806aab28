"""Per-scenario timeout.

Scenarios are coroutine test functions. ``guard_scenario`` wraps one so that
every attempt is bounded on its own: a hung scenario fails without eating
into the time of the scenarios queued after it.

Retries are not handled here. A phase's retries are pytest reruns
(``--reruns``, pytest-rerunfailures), so every attempt runs its fixtures
again and starts from a fresh browser context.
"""
from __future__ import annotations

import functools
import inspect
from typing import Any, Awaitable, Callable

import anyio


class ScenarioTimeout(TimeoutError):
    """A scenario did not finish within its timeout."""


def guard_scenario(
    func: Callable[..., Awaitable[Any]],
    timeout: float,
    name: str = "",
) -> Callable[..., Awaitable[Any]]:
    if not inspect.iscoroutinefunction(func):
        raise TypeError(f"{func!r} is not a coroutine function")
    if timeout <= 0:
        raise ValueError("timeout must be > 0")
    label = name or getattr(func, "__qualname__", repr(func))

    @functools.wraps(func)
    async def guarded(*args: Any, **kwargs: Any) -> Any:
        scope = None
        try:
            with anyio.fail_after(timeout) as scope:
                return await func(*args, **kwargs)
        except TimeoutError as exc:
            if scope is None or not scope.cancel_called:
                raise
            raise ScenarioTimeout(f"Scenario {label} exceeded {timeout}s") from exc

    guarded.__wrapped_scenario__ = func  # type: ignore[attr-defined]
    return guarded
