"""
Phase model and dependency graph.

A run is a directed acyclic graph of phases. Setup phases bootstrap the
application, authenticate and provision fixtures; test phases (one per
browser family) run the verification suites once every upstream phase has
succeeded.
"""
from __future__ import annotations

import enum
from collections import deque
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

from frontend_e2e.errors import GraphError


class PhaseRole(str, enum.Enum):
    SETUP = "setup"
    TEST = "test"


class PhaseStatus(str, enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def terminal(self) -> bool:
        return self in (PhaseStatus.SUCCEEDED, PhaseStatus.FAILED, PhaseStatus.SKIPPED)


@dataclass(frozen=True)
class BrowserProfile:
    """Browser engine + device emulation used for every context of a phase."""

    name: str
    engine: str = "chromium"  # chromium, firefox, webkit
    device: Optional[str] = None  # Playwright device descriptor name
    viewport: Tuple[int, int] = (1600, 1080)

    def __post_init__(self) -> None:
        if self.engine not in ("chromium", "firefox", "webkit"):
            raise ValueError(f"Unknown browser engine: {self.engine}")

    @property
    def viewport_size(self) -> Dict[str, int]:
        return {"width": self.viewport[0], "height": self.viewport[1]}


DESKTOP_CHROME = BrowserProfile("Desktop Chrome", "chromium", "Desktop Chrome")
DESKTOP_FIREFOX = BrowserProfile("Desktop Firefox", "firefox", "Desktop Firefox")
DESKTOP_SAFARI = BrowserProfile("Desktop Safari", "webkit", "Desktop Safari")


@dataclass(frozen=True)
class Phase:
    """One dependency-gated stage of a run."""

    name: str
    role: PhaseRole
    profile: BrowserProfile
    test_dir: str
    test_match: str = "test_*.py"
    dependencies: FrozenSet[str] = frozenset()
    retries: int = 0
    storage_state: Optional[str] = None  # session state consumed at context start
    captures_state: Optional[str] = None  # session state this phase is allowed to write
    markers: Optional[str] = None  # pytest -m expression
    on_demand: bool = False  # only runs when selected explicitly

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependencies", frozenset(self.dependencies))
        if self.name in self.dependencies:
            raise GraphError(f"Phase '{self.name}' depends on itself")
        if self.retries < 0:
            raise ValueError(f"Phase '{self.name}': retries must be >= 0")

    @property
    def is_setup(self) -> bool:
        return self.role is PhaseRole.SETUP


class PhaseGraph:
    """Validated, immutable view over a set of phases."""

    def __init__(self, phases: Iterable[Phase]) -> None:
        self._phases: Dict[str, Phase] = {}
        for phase in phases:
            if phase.name in self._phases:
                raise GraphError(f"Duplicate phase name: {phase.name}")
            self._phases[phase.name] = phase

        for phase in self._phases.values():
            unknown = phase.dependencies - self._phases.keys()
            if unknown:
                raise GraphError(
                    f"Phase '{phase.name}' depends on unknown phase(s): {', '.join(sorted(unknown))}"
                )

        self._order = self._sort()

    def _sort(self) -> Tuple[str, ...]:
        # Kahn's algorithm; ties broken by declaration order for stable output.
        indegree = {name: len(phase.dependencies) for name, phase in self._phases.items()}
        queue = deque(name for name, degree in indegree.items() if degree == 0)
        order: List[str] = []
        while queue:
            name = queue.popleft()
            order.append(name)
            for dependent in self.dependents(name):
                indegree[dependent] -= 1
                if indegree[dependent] == 0:
                    queue.append(dependent)

        if len(order) != len(self._phases):
            cyclic = sorted(set(self._phases) - set(order))
            raise GraphError(f"Phase graph contains a cycle through: {', '.join(cyclic)}")
        return tuple(order)

    def __contains__(self, name: object) -> bool:
        return name in self._phases

    def __iter__(self):
        return (self._phases[name] for name in self._order)

    def __len__(self) -> int:
        return len(self._phases)

    def __getitem__(self, name: str) -> Phase:
        try:
            return self._phases[name]
        except KeyError:
            raise GraphError(f"Unknown phase: {name}") from None

    @property
    def names(self) -> Tuple[str, ...]:
        return self._order

    def topological_order(self) -> List[Phase]:
        return [self._phases[name] for name in self._order]

    def dependents(self, name: str) -> List[str]:
        """Phases that list ``name`` as a direct upstream, in declaration order."""
        return [p.name for p in self._phases.values() if name in p.dependencies]

    def upstream_closure(self, names: Iterable[str]) -> Set[str]:
        """Every phase in ``names`` plus all of their transitive upstreams."""
        seen: Set[str] = set()
        stack = list(names)
        while stack:
            name = stack.pop()
            if name in seen:
                continue
            seen.add(self[name].name)
            stack.extend(self._phases[name].dependencies)
        return seen

    def select(self, names: Optional[Sequence[str]] = None) -> "PhaseGraph":
        """Sub-graph for a run.

        With no names, every phase that is not on-demand. Otherwise the named
        phases and everything they depend on.
        """
        if not names:
            wanted = {p.name for p in self._phases.values() if not p.on_demand}
            wanted = self.upstream_closure(wanted)
        else:
            wanted = self.upstream_closure(names)
        return PhaseGraph(self._phases[name] for name in self._order if name in wanted)


def default_phases(ci: bool = False, retries: int = 0) -> List[Phase]:
    """Phase layout of the frontend suite.

    On CI the authentication phase waits for the initial bootstrap (fresh
    instance, forced password change); locally the instance is assumed to
    be bootstrapped already and ``setup_initial`` only runs when selected.
    """
    workflow_phases = [
        Phase(
            name=f"{engine}_test_workflow",
            role=PhaseRole.TEST,
            profile=profile,
            test_dir="workflows",
            dependencies=frozenset({"setup_provisioning"}),
            retries=retries,
            storage_state="admin",
            markers="not todo",
        )
        for engine, profile in (
            ("chromium", DESKTOP_CHROME),
            ("firefox", DESKTOP_FIREFOX),
            ("webkit", DESKTOP_SAFARI),
        )
    ]
    return [
        Phase(
            name="setup_initial",
            role=PhaseRole.SETUP,
            profile=DESKTOP_CHROME,
            test_dir="setup",
            test_match="test_initial_setup.py",
            on_demand=not ci,
        ),
        Phase(
            name="setup_admin_authentication",
            role=PhaseRole.SETUP,
            profile=DESKTOP_CHROME,
            test_dir="setup",
            test_match="test_auth_setup.py",
            dependencies=frozenset({"setup_initial"}) if ci else frozenset(),
            captures_state="admin",
        ),
        Phase(
            name="setup_provisioning",
            role=PhaseRole.SETUP,
            profile=DESKTOP_CHROME,
            test_dir="provisioning",
            dependencies=frozenset({"setup_admin_authentication"}),
            storage_state="admin",
            markers="not todo",
        ),
        *workflow_phases,
        Phase(
            name="chromium_test_only_workflow",
            role=PhaseRole.TEST,
            profile=DESKTOP_CHROME,
            test_dir="workflows",
            retries=retries,
            markers="not todo",
            on_demand=True,
        ),
    ]
