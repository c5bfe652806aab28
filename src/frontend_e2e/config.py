"""Run configuration for the end-to-end harness.

Configuration is read once, at startup, from environment variables with
fallbacks from ``.env.defaults``:

- ``CI`` switches retries and reporters to their CI values
- ``E2E_BASE_URL`` selects the frontend under test
- ``RANDOM_PASSWORD`` is the admin password set during bootstrap

The result is an immutable ``RunConfiguration`` that is passed explicitly
to the graph evaluator, the phase executor and the pytest fixtures. Nothing
reads the environment after that.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple
from urllib.parse import urljoin

from frontend_e2e.env_defaults import load_env_defaults
from frontend_e2e.graph import Phase, PhaseGraph, default_phases

TRUE_VALUES = {"1", "true", "yes", "on"}
KNOWN_REPORTERS = ("list", "github", "json")


@dataclass(frozen=True)
class Timeouts:
    """Timeouts in seconds."""

    action: float = 5.0  # e.g. locator.click()
    navigation: float = 5.0  # e.g. page.goto()
    expect: float = 5.0  # each assertion
    scenario: float = 5 * 60.0  # one test
    run: float = 15 * 60.0  # the whole graph

    @staticmethod
    def ms(seconds: float) -> float:
        return seconds * 1000


@dataclass(frozen=True)
class RunConfiguration:
    project_root: Path
    base_url: str = "http://localhost:8081"
    ci: bool = False
    headless: bool = True
    locale: str = "en"
    locales_dir: Path = Path("e2e/resources/locales")
    suites_dir: Path = Path("e2e")
    output_dir: Path = Path("playwright-test-results")
    auth_dir: Path = Path("e2e/resources/.auth")
    admin_username: str = "admin"
    admin_password: Optional[str] = None
    default_admin_password: str = "admin"
    timeouts: Timeouts = field(default_factory=Timeouts)
    retries: int = 0
    workers: int = 1
    max_parallel_phases: int = 0
    reporters: Tuple[str, ...] = ("list", "json")
    strict_session_state: bool = False
    log_level: str = "INFO"
    phases: Tuple[Phase, ...] = ()

    def __post_init__(self) -> None:
        if self.workers != 1:
            raise ValueError(
                f"workers={self.workers}: scenarios within a phase share provisioned "
                f"fixtures and must run sequentially (workers=1)"
            )
        unknown = set(self.reporters) - set(KNOWN_REPORTERS)
        if unknown:
            raise ValueError(f"Unknown reporter(s): {', '.join(sorted(unknown))}")
        if not self.phases:
            object.__setattr__(self, "phases", tuple(default_phases(self.ci, self.retries)))

    # ---- construction -----------------------------------------------------------
    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        project_root: Optional[Path] = None,
    ) -> "RunConfiguration":
        env = dict(os.environ if environ is None else environ)
        root = Path(project_root or env.get("E2E_PROJECT_ROOT") or Path.cwd()).resolve()
        defaults = load_env_defaults(root / env.get("E2E_ENV_DEFAULTS", ".env.defaults"))

        def get(key: str, default: Optional[str] = None) -> Optional[str]:
            value = env.get(key)
            if value is None or value == "":
                value = defaults.get(key, default)
            return value

        def flag(key: str, default: str = "0") -> bool:
            return str(get(key, default)).strip().lower() in TRUE_VALUES

        def seconds(key: str, default: float) -> float:
            return float(get(key, str(default)))

        def path(key: str, default: str) -> Path:
            value = Path(get(key, default))
            return value if value.is_absolute() else root / value

        ci = bool(env.get("CI"))
        retries = int(get("E2E_RETRIES", "1" if ci else "0"))
        reporters_default = "list,github,json" if ci else "list,json"
        reporters = tuple(
            r.strip() for r in get("E2E_REPORTERS", reporters_default).split(",") if r.strip()
        )

        return cls(
            project_root=root,
            base_url=get("E2E_BASE_URL", "http://localhost:8081"),
            ci=ci,
            headless=flag("PLAYWRIGHT_HEADLESS", "true"),
            locale=get("E2E_LOCALE", "en"),
            locales_dir=path("E2E_LOCALES_DIR", "e2e/resources/locales"),
            suites_dir=path("E2E_SUITES_DIR", "e2e"),
            output_dir=path("E2E_OUTPUT_DIR", "playwright-test-results"),
            auth_dir=path("E2E_AUTH_DIR", "e2e/resources/.auth"),
            admin_username=get("E2E_ADMIN_USERNAME", "admin"),
            admin_password=get("RANDOM_PASSWORD") or None,
            default_admin_password=get("E2E_DEFAULT_ADMIN_PASSWORD", "admin"),
            timeouts=Timeouts(
                action=seconds("E2E_ACTION_TIMEOUT", 5.0),
                navigation=seconds("E2E_NAVIGATION_TIMEOUT", 5.0),
                expect=seconds("E2E_EXPECT_TIMEOUT", 5.0),
                scenario=seconds("E2E_SCENARIO_TIMEOUT", 5 * 60.0),
                run=seconds("E2E_RUN_TIMEOUT", 15 * 60.0),
            ),
            retries=retries,
            workers=int(get("E2E_WORKERS", "1")),
            max_parallel_phases=int(get("E2E_MAX_PARALLEL_PHASES", "0")),
            reporters=reporters,
            strict_session_state=flag("E2E_STRICT_SESSION_STATE"),
            log_level=get("E2E_LOG_LEVEL", "INFO").upper(),
        )

    # ---- graph helpers ----------------------------------------------------------
    def graph(self) -> PhaseGraph:
        return PhaseGraph(self.phases)

    def phase(self, name: str) -> Phase:
        return self.graph()[name]

    def phase_output_dir(self, name: str) -> Path:
        return self.output_dir / name

    # ---- utility helpers --------------------------------------------------------
    def url(self, path: str) -> str:
        """Return an absolute URL for the provided path."""
        return urljoin(self.base_url.rstrip("/") + "/", path.lstrip("/"))

    def require_admin_password(self) -> str:
        if not self.admin_password:
            raise RuntimeError(
                "RANDOM_PASSWORD is not set.\n"
                "The admin password chosen during bootstrap is required to authenticate."
            )
        return self.admin_password
