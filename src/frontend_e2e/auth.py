"""Admin login flows shared by the setup phases and the workflow fixtures."""
from __future__ import annotations

import logging

from playwright.async_api import Page

from frontend_e2e.config import RunConfiguration
from frontend_e2e.locators import LocatorResolver
from frontend_e2e.pages import ChangePasswordPage, LoginPage
from frontend_e2e.playwright_client import navigate, wait_for_route, wait_for_settled_route

logger = logging.getLogger(__name__)

DASHBOARD_ROUTE = "**/dashboard"
CHANGE_PASSWORD_ROUTE = "**/change-password*"
LOGIN_ROUTE = "**/login*"


async def login_admin(page: Page, config: RunConfiguration, resolver: LocatorResolver) -> None:
    """Interactive admin login ending on the dashboard."""
    password = config.require_admin_password()
    await navigate(page, config.url("/login"), config.timeouts)
    await LoginPage(page, resolver).login(config.admin_username, password)
    await wait_for_route(page, DASHBOARD_ROUTE, config.timeouts)
    logger.info("Logged in as %s", config.admin_username)


async def ensure_authenticated(page: Page, config: RunConfiguration, resolver: LocatorResolver) -> bool:
    """Make sure ``page`` shows the dashboard as admin.

    Returns True when the context was already authenticated (seeded session
    state), False when an interactive login was needed.
    """
    await navigate(page, config.url("/dashboard"), config.timeouts)
    landed = await wait_for_settled_route(page, (DASHBOARD_ROUTE, LOGIN_ROUTE), config.timeouts)
    if "/login" not in landed:
        logger.debug("Using seeded authentication state")
        return True

    logger.info("Seeded session state not accepted, performing fresh login")
    await login_admin(page, config, resolver)
    return False


async def bootstrap_admin(page: Page, config: RunConfiguration, resolver: LocatorResolver) -> None:
    """First login on a fresh instance: default password, forced change."""
    new_password = config.require_admin_password()
    await navigate(page, config.url("/login"), config.timeouts)
    await LoginPage(page, resolver).login(config.admin_username, config.default_admin_password)
    await wait_for_route(page, CHANGE_PASSWORD_ROUTE, config.timeouts)

    await ChangePasswordPage(page, resolver).change_password(
        config.admin_username, config.default_admin_password, new_password
    )
    await wait_for_route(page, LOGIN_ROUTE, config.timeouts)
    logger.info("Changed initial password of %s", config.admin_username)
