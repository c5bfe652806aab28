"""Page object base class.

Locators are declared as class attributes holding ``SemanticLocator``
descriptions and are bound to the object's root scope when the object is
constructed. Nested regions (a popup inside a dropdown, say) are declared
with ``Nested`` and receive their parent's root scope, never the whole
document::

    class AccountMenu(PageObject):
        root = by_selector("li.dropdown")
        logout = by_text("message", "logout")

    class NavigationBar(PageObject):
        dashboard_tab = by_role("link", "message", "dashboard")
        account_menu = Nested(AccountMenu)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple, Type

from frontend_e2e.locators import BoundLocator, LocatorResolver, SemanticLocator


@dataclass(frozen=True)
class Nested:
    """Declares a child page object scoped under the owning object's root."""

    page_object: Type["PageObject"]


class PageObject:
    root: Optional[SemanticLocator] = None

    def __init__(self, scope: Any, resolver: LocatorResolver, parent: Optional["PageObject"] = None) -> None:
        self.parent = parent
        self.resolver = resolver
        self.page = scope if parent is None else parent.page

        if self.root is not None:
            self.region: Optional[BoundLocator] = resolver.bind(self.root, scope)
            self.scope = self.region.locator
        else:
            self.region = None
            self.scope = scope

        self.locators: Dict[str, BoundLocator] = {}
        for name, declared in self._declarations():
            if isinstance(declared, SemanticLocator):
                bound = resolver.bind(declared, self.scope)
                self.locators[name] = bound
                setattr(self, name, bound)
            else:
                setattr(self, name, declared.page_object(self.scope, resolver, parent=self))

    @classmethod
    def _declarations(cls) -> Iterator[Tuple[str, Any]]:
        seen = set()
        for klass in cls.__mro__:
            for name, value in vars(klass).items():
                if name == "root" or name in seen:
                    continue
                if isinstance(value, (SemanticLocator, Nested)):
                    seen.add(name)
                    yield name, value

    def __repr__(self) -> str:
        return f"{type(self).__name__}(locators={sorted(self.locators)})"

    async def expect_visible(self) -> None:
        """Assert the object's region is visible (only for scoped objects)."""
        if self.region is None:
            raise TypeError(f"{type(self).__name__} has no root region")
        await self.region.expect_visible()

    async def expect_hidden(self) -> None:
        if self.region is None:
            raise TypeError(f"{type(self).__name__} has no root region")
        await self.region.expect_hidden()
