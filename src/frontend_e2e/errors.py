"""
Failure taxonomy for the end-to-end harness.

Browser-level failures carry the operation name and a payload describing the
locator involved, so a failing scenario reports which element and which
step broke. Phase-level failures describe the graph, not the DOM.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable


@dataclass
class BrowserOperationError(Exception):
    """Raised when a browser operation fails."""

    name: str
    payload: Dict[str, Any]
    message: str

    def __str__(self) -> str:  # pragma: no cover - human readable helper
        return f"{self.name} failed ({self.message}) with payload={self.payload}"


class ElementNotFound(BrowserOperationError):
    """No element matched the locator within the wait window."""


class AmbiguousElement(BrowserOperationError):
    """More than one element matched a locator that must be unique."""


class ActionTimeout(BrowserOperationError):
    """The element resolved but the interaction did not complete in time."""


class AssertionTimeout(BrowserOperationError, AssertionError):
    """An expected visibility or content state was never observed."""


class PhaseDependencyFailed(Exception):
    """An upstream phase did not reach the succeeded state."""

    def __init__(self, phase: str, upstream: Iterable[str]) -> None:
        self.phase = phase
        self.upstream = tuple(sorted(upstream))
        super().__init__(
            f"Phase '{phase}' not started: upstream phase(s) "
            f"{', '.join(self.upstream)} did not succeed"
        )


class SessionStateUnavailable(Exception):
    """Persisted authentication state is missing or malformed."""

    def __init__(self, name: str, path: Any, reason: str) -> None:
        self.name = name
        self.path = path
        self.reason = reason
        super().__init__(f"Session state '{name}' unavailable at {path}: {reason}")


class SessionStateReadOnly(Exception):
    """A phase tried to write session state it does not own."""


class GraphError(ValueError):
    """The phase graph is malformed (cycle, duplicate or unknown phase)."""


class MissingTranslation(KeyError):
    """A (namespace, key) pair is absent from the active locale table."""

    def __init__(self, locale: str, namespace: str, key: str) -> None:
        self.locale = locale
        self.namespace = namespace
        self.key = key
        super().__init__(f"{namespace}.{key} (locale={locale})")
