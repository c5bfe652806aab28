"""
Semantic locators and their resolution against a live page.

A ``SemanticLocator`` is an immutable description of *how* to find an
element: by accessible role and localized label (preferred), by a structural
selector, or by text inside an already scoped region. ``LocatorResolver``
binds a description to a scope (a page or a parent region) and produces a
``BoundLocator`` that only touches the DOM when it is acted on.

Resolution preference:

1. ``Strategy.ROLE`` survives DOM restructuring as long as semantics hold.
2. ``Strategy.SELECTOR`` is for elements without a usable role, e.g. toast
   containers identified only by CSS class.
3. ``Strategy.TEXT`` matches text inside a non-semantic container.

Nothing in this module retries. A failed resolution raises
``ElementNotFound``; retries happen per scenario, as pytest reruns.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import anyio
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, TimeoutError as PlaywrightTimeout

from frontend_e2e.config import Timeouts
from frontend_e2e.errors import (
    ActionTimeout,
    AmbiguousElement,
    AssertionTimeout,
    ElementNotFound,
)
from frontend_e2e.localization import LocalizationProvider

logger = logging.getLogger(__name__)

# Prefix of the engine error raised when a strict locator matches several nodes
STRICT_MODE_VIOLATION = "strict mode violation"


class Strategy(str, enum.Enum):
    ROLE = "role"
    SELECTOR = "selector"
    TEXT = "text"


@dataclass(frozen=True)
class SemanticLocator:
    """Immutable element description; only its scope varies per page object."""

    strategy: Strategy
    role: Optional[str] = None
    selector: Optional[str] = None
    text: Optional[str] = None
    key: Optional[Tuple[str, str]] = None  # (namespace, key) in the locale table
    exact: bool = False
    note: str = ""

    def __post_init__(self) -> None:
        if self.strategy is Strategy.ROLE and not self.role:
            raise ValueError("role locators need a role")
        if self.strategy is Strategy.ROLE and self.key is None and self.text is None:
            raise ValueError("role locators need a localized key or a literal name")
        if self.strategy is Strategy.SELECTOR and not self.selector:
            raise ValueError("selector locators need a selector")
        if self.strategy is Strategy.TEXT and self.key is None and self.text is None:
            raise ValueError("text locators need a localized key or literal text")

    def describe(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {"strategy": self.strategy.value}
        for attr in ("role", "selector", "text"):
            if getattr(self, attr) is not None:
                info[attr] = getattr(self, attr)
        if self.key is not None:
            info["key"] = ".".join(self.key)
        return info


def by_role(role: str, namespace: str, key: str, exact: bool = False) -> SemanticLocator:
    return SemanticLocator(Strategy.ROLE, role=role, key=(namespace, key), exact=exact)


def by_role_name(role: str, name: str, exact: bool = False) -> SemanticLocator:
    return SemanticLocator(Strategy.ROLE, role=role, text=name, exact=exact)


def by_selector(selector: str, note: str = "") -> SemanticLocator:
    return SemanticLocator(Strategy.SELECTOR, selector=selector, note=note)


def by_text(namespace: str, key: str, exact: bool = False) -> SemanticLocator:
    return SemanticLocator(Strategy.TEXT, key=(namespace, key), exact=exact)


def by_literal_text(text: str, exact: bool = False) -> SemanticLocator:
    return SemanticLocator(Strategy.TEXT, text=text, exact=exact)


class LocatorResolver:
    """Binds semantic locators to scopes using the active locale table."""

    def __init__(self, localization: LocalizationProvider, timeouts: Optional[Timeouts] = None) -> None:
        self.localization = localization
        self.timeouts = timeouts or Timeouts()

    def label(self, descriptor: SemanticLocator) -> Optional[str]:
        """Display text for a descriptor, looked up in the active locale."""
        if descriptor.key is not None:
            return self.localization.get(*descriptor.key)
        return descriptor.text

    def bind(self, descriptor: SemanticLocator, scope: Any) -> "BoundLocator":
        """Build the lazy engine locator for ``descriptor`` inside ``scope``.

        ``scope`` is anything exposing the Playwright query methods (a Page or
        a Locator for a parent region). No DOM access happens here.
        """
        if descriptor.strategy is Strategy.ROLE:
            label = self.label(descriptor)
            locator = scope.get_by_role(descriptor.role, name=label, exact=descriptor.exact)
        elif descriptor.strategy is Strategy.SELECTOR:
            label = None
            locator = scope.locator(descriptor.selector)
        else:
            label = self.label(descriptor)
            locator = scope.get_by_text(label, exact=descriptor.exact)
        return BoundLocator(descriptor, locator, self, label)

    async def resolve(self, bound: "BoundLocator") -> Locator:
        """Wait for exactly one match within the action timeout."""
        timeout = self.timeouts.action
        try:
            await bound.locator.first.wait_for(state="attached", timeout=Timeouts.ms(timeout))
        except PlaywrightTimeout as exc:
            raise ElementNotFound(
                name="resolve",
                payload=bound.describe(),
                message=f"no element matched within {timeout}s",
            ) from exc

        count = await bound.locator.count()
        if count == 0:
            # Attached and gone again before we counted.
            raise ElementNotFound(
                name="resolve", payload=bound.describe(), message="element detached during resolution"
            )
        if count > 1:
            raise AmbiguousElement(
                name="resolve", payload=bound.describe(), message=f"{count} elements matched"
            )
        return bound.locator


class BoundLocator:
    """A semantic locator bound to a scope; resolves lazily on every use."""

    def __init__(
        self,
        descriptor: SemanticLocator,
        locator: Any,
        resolver: LocatorResolver,
        label: Optional[str] = None,
    ) -> None:
        self.descriptor = descriptor
        self.locator = locator
        self.label = label
        self._resolver = resolver

    def __repr__(self) -> str:
        return f"BoundLocator({self.describe()})"

    def describe(self) -> Dict[str, Any]:
        info = self.descriptor.describe()
        if self.label is not None:
            info["label"] = self.label
        return info

    @property
    def timeouts(self) -> Timeouts:
        return self._resolver.timeouts

    # ---- actions ----------------------------------------------------------------
    async def _act(self, name: str, payload: Dict[str, Any], action) -> None:
        locator = await self._resolver.resolve(self)
        try:
            await action(locator, Timeouts.ms(self.timeouts.action))
        except PlaywrightTimeout as exc:
            raise ActionTimeout(
                name=name,
                payload={**self.describe(), **payload},
                message=f"did not complete within {self.timeouts.action}s",
            ) from exc

    async def click(self) -> None:
        await self._act("click", {}, lambda loc, ms: loc.click(timeout=ms))

    async def fill(self, value: str) -> None:
        await self._act("fill", {"value": value}, lambda loc, ms: loc.fill(value, timeout=ms))

    async def select_option(self, value: str) -> None:
        await self._act("select_option", {"value": value}, lambda loc, ms: loc.select_option(value, timeout=ms))

    async def text(self) -> str:
        locator = await self._resolver.resolve(self)
        try:
            return await locator.inner_text(timeout=Timeouts.ms(self.timeouts.action))
        except PlaywrightTimeout as exc:
            raise ActionTimeout(name="text", payload=self.describe(), message=str(exc)) from exc

    async def count(self) -> int:
        return await self.locator.count()

    # ---- assertions -------------------------------------------------------------
    async def expect_visible(self, timeout: Optional[float] = None) -> None:
        await self._expect_state("visible", timeout)

    async def expect_hidden(self, timeout: Optional[float] = None) -> None:
        await self._expect_state("hidden", timeout)

    async def _expect_state(self, state: str, timeout: Optional[float]) -> None:
        timeout = self.timeouts.expect if timeout is None else timeout
        try:
            await self.locator.wait_for(state=state, timeout=Timeouts.ms(timeout))
        except PlaywrightTimeout as exc:
            raise AssertionTimeout(
                name=f"expect_{state}",
                payload=self.describe(),
                message=f"element not {state} within {timeout}s",
            ) from exc
        except PlaywrightError as exc:
            if STRICT_MODE_VIOLATION not in str(exc):
                raise
            raise AmbiguousElement(
                name=f"expect_{state}", payload=self.describe(), message=str(exc).splitlines()[0]
            ) from exc

    async def expect_text(
        self,
        expected: str,
        exact: bool = False,
        timeout: Optional[float] = None,
        interval: float = 0.2,
    ) -> str:
        """Poll the element text until it equals (``exact``) or contains ``expected``."""
        timeout = self.timeouts.expect if timeout is None else timeout
        deadline = anyio.current_time() + timeout
        content = ""
        last_error: Optional[PlaywrightError] = None

        while True:
            try:
                content = await self.locator.inner_text(timeout=Timeouts.ms(interval))
            except PlaywrightError as exc:
                content = ""
                last_error = exc
            normalized = content.strip()
            if (normalized == expected) if exact else (expected in normalized):
                return content
            if anyio.current_time() >= deadline:
                break
            await anyio.sleep(interval)

        message = f"expected {'exact' if exact else 'substring'} {expected!r}, last text {content.strip()!r}"
        if last_error is not None and not content:
            message += f" (last error: {last_error})"
        raise AssertionTimeout(name="expect_text", payload=self.describe(), message=message)
