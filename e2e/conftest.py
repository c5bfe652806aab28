"""Fixtures shared by every phase suite.

The phase being run arrives through ``E2E_PHASE`` (set by the phase
executor). Running ``pytest e2e/workflows`` by hand falls back to the
standalone chromium phase, which needs no upstream state.
"""
import inspect
import logging
import os
import re
from typing import Optional

import pytest
import pytest_asyncio

from frontend_e2e.auth import ensure_authenticated
from frontend_e2e.config import RunConfiguration
from frontend_e2e.graph import Phase
from frontend_e2e.localization import JsonLocalization
from frontend_e2e.locators import LocatorResolver
from frontend_e2e.pages import LoginPage, ManagedUsersPage, NavigationBar, NotificationToast
from frontend_e2e.playwright_client import PlaywrightClient
from frontend_e2e.scenario import guard_scenario
from frontend_e2e.session_state import SessionState, SessionStateStore

logger = logging.getLogger("frontend_e2e.suites")

PHASE_ENV = "E2E_PHASE"
STANDALONE_PHASE = "chromium_test_only_workflow"

RUN_CONFIG = pytest.StashKey[RunConfiguration]()
PHASE = pytest.StashKey[Phase]()


def pytest_configure(config):
    config.addinivalue_line("markers", "todo: scenario not written yet; deselected by every phase")
    run_config = RunConfiguration.from_env()
    config.stash[RUN_CONFIG] = run_config
    config.stash[PHASE] = run_config.phase(os.environ.get(PHASE_ENV, STANDALONE_PHASE))


def pytest_collection_modifyitems(config, items):
    """Bound every scenario attempt by the per-scenario timeout."""
    run_config = config.stash[RUN_CONFIG]
    for item in items:
        func = getattr(item, "obj", None)
        if func is None or not inspect.iscoroutinefunction(func):
            continue
        item.obj = guard_scenario(
            func,
            timeout=run_config.timeouts.scenario,
            name=item.nodeid,
        )


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Expose each report phase on the item so fixtures can see failures."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


# ============================================================================
# Run configuration
# ============================================================================

@pytest.fixture(scope="session")
def run_config(request) -> RunConfiguration:
    return request.config.stash[RUN_CONFIG]


@pytest.fixture(scope="session")
def phase(request) -> Phase:
    return request.config.stash[PHASE]


@pytest.fixture(scope="session")
def localization(run_config):
    return JsonLocalization(run_config.locales_dir, run_config.locale)


@pytest.fixture(scope="session")
def resolver(run_config, localization):
    return LocatorResolver(localization, run_config.timeouts)


@pytest.fixture(scope="session")
def session_store(run_config, phase):
    """Store writable only for the state name this phase captures."""
    writable = [phase.captures_state] if phase.captures_state else []
    return SessionStateStore(run_config.auth_dir, writable=writable)


@pytest.fixture(scope="session")
def seeded_state(run_config, phase, session_store) -> Optional[SessionState]:
    """Session state this phase starts from, if it declares one.

    A missing or unreadable file is tolerated (the workflow fixtures log in
    again) unless strict session state is configured.
    """
    if not phase.storage_state:
        return None
    return session_store.load_optional(phase.storage_state, strict=run_config.strict_session_state)


# ============================================================================
# Browser
# ============================================================================

@pytest_asyncio.fixture()
async def playwright_client(run_config, phase, seeded_state):
    """Playwright client for the phase's browser profile, one per scenario."""
    options = SessionStateStore.context_options(seeded_state) if seeded_state else None
    async with PlaywrightClient(
        phase.profile,
        headless=run_config.headless,
        timeouts=run_config.timeouts,
        base_url=run_config.base_url,
        locale=run_config.locale,
        context_options=options,
    ) as client:
        if seeded_state is not None:
            await SessionStateStore.restore_session_storage(client.context, seeded_state)
        yield client


def _artifact_name(nodeid: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]+", "_", nodeid).strip("_")


@pytest_asyncio.fixture()
async def page(request, playwright_client, run_config, phase):
    """The scenario's page; screenshotted when the scenario fails."""
    page = playwright_client.page
    yield page

    report = getattr(request.node, "rep_call", None)
    if report is not None and report.failed:
        path = run_config.phase_output_dir(phase.name) / "screenshots" / f"{_artifact_name(request.node.nodeid)}.png"
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            await page.screenshot(path=str(path), full_page=True)
            logger.info("Failure screenshot: %s", path)
        except Exception as exc:  # the page may already be gone
            logger.warning("Could not capture failure screenshot: %s", exc)


@pytest_asyncio.fixture()
async def authenticated_page(page, run_config, resolver):
    """Page showing the dashboard as admin."""
    await ensure_authenticated(page, run_config, resolver)
    return page


# ============================================================================
# Page objects
# ============================================================================

@pytest.fixture()
def navigation_bar(page, resolver):
    return NavigationBar(page, resolver)


@pytest.fixture()
def notification_toast(page, resolver):
    return NotificationToast(page, resolver)


@pytest.fixture()
def login_page(page, resolver):
    return LoginPage(page, resolver)


@pytest.fixture()
def managed_users_page(page, resolver):
    return ManagedUsersPage(page, resolver)
