"""Navigation bar, sidebar controls and the account menu in the header."""
from __future__ import annotations

import logging

from frontend_e2e.locators import by_role, by_selector, by_text
from frontend_e2e.pages.base import Nested, PageObject

logger = logging.getLogger(__name__)

# Tab attribute name -> route the tab navigates to
TAB_ROUTES = {
    "dashboard_tab": "/dashboard",
    "projects_tab": "/projects",
    "components_tab": "/components",
    "vulnerabilities_tab": "/vulnerabilities",
    "licenses_tab": "/licenses",
    "tags_tab": "/tags",
    "vulnerability_audit_tab": "/vulnerabilityAudit",
    "policy_management_tab": "/policy",
    "administration_tab": "/admin",
}


class SnapshotPopup(PageObject):
    """Modal shown after login when a new release is available."""

    root = by_selector(".modal-content", note="modal has no accessible name")
    close_button = by_selector("button")


class UpdateProfilePopup(PageObject):
    root = by_selector(".modal-content", note="modal has no accessible name")
    username_input = by_selector("#fullname-input-input")
    email_input = by_selector("#email-input-input")
    close_button = by_text("message", "close", exact=True)
    update_button = by_text("message", "update", exact=True)


class AccountMenu(PageObject):
    """Dropdown in the top right corner."""

    root = by_selector("li.dropdown", note="dropdown toggle carries the username, not a role label")
    profile_update = by_text("message", "profile_update")
    change_password = by_selector('a[href="/change-password"]')
    language_picker = by_selector("#locale-picker-form .custom-select")
    logout_item = by_text("message", "logout")


class NavigationBar(PageObject):
    dashboard_tab = by_role("link", "message", "dashboard")
    projects_tab = by_role("link", "message", "projects")
    components_tab = by_role("link", "message", "components")
    vulnerabilities_tab = by_role("link", "message", "vulnerabilities")
    licenses_tab = by_role("link", "message", "licenses")
    tags_tab = by_role("link", "message", "tags")
    vulnerability_audit_tab = by_role("link", "message", "vulnerability_audit")
    policy_management_tab = by_role("link", "message", "policy_management")
    administration_tab = by_role("link", "message", "administration")

    nav_bar_toggle = by_selector("button.d-md-down-none.navbar-toggler", note="icon-only button")
    sidebar_minimizer = by_selector("button.sidebar-minimizer", note="icon-only button")

    snapshot_popup = Nested(SnapshotPopup)
    account_menu = Nested(AccountMenu)
    update_profile_popup = Nested(UpdateProfilePopup)

    # ---- navigation -------------------------------------------------------------
    async def click_tab(self, tab: str) -> None:
        if tab not in TAB_ROUTES:
            raise ValueError(f"Unknown navigation tab: {tab}")
        await getattr(self, tab).click()

    async def click_dashboard_tab(self) -> None:
        await self.dashboard_tab.click()

    async def click_projects_tab(self) -> None:
        await self.projects_tab.click()

    async def click_components_tab(self) -> None:
        await self.components_tab.click()

    async def click_vulnerabilities_tab(self) -> None:
        await self.vulnerabilities_tab.click()

    async def click_licenses_tab(self) -> None:
        await self.licenses_tab.click()

    async def click_tags_tab(self) -> None:
        await self.tags_tab.click()

    async def click_vulnerability_audit_tab(self) -> None:
        await self.vulnerability_audit_tab.click()

    async def click_policy_management_tab(self) -> None:
        await self.policy_management_tab.click()

    async def click_administration_tab(self) -> None:
        await self.administration_tab.click()

    async def toggle_nav_bar(self) -> None:
        await self.nav_bar_toggle.click()

    async def minimize_sidebar(self) -> None:
        await self.sidebar_minimizer.click()

    async def close_snapshot_popup(self) -> None:
        await self.snapshot_popup.close_button.click()
        await self.snapshot_popup.expect_hidden()

    # ---- account menu -----------------------------------------------------------
    async def open_account_menu(self) -> None:
        await self.account_menu.region.click()

    async def click_profile_update(self) -> None:
        await self.account_menu.profile_update.click()

    async def click_change_password(self) -> None:
        await self.account_menu.change_password.click()

    async def click_language_picker(self) -> None:
        await self.account_menu.language_picker.click()

    async def click_logout(self) -> None:
        await self.account_menu.logout_item.click()

    async def logout(self) -> None:
        await self.open_account_menu()
        await self.click_logout()

    async def change_language(self, locale: str) -> None:
        await self.open_account_menu()
        await self.account_menu.language_picker.select_option(locale)
        logger.debug("Switched UI language to %s", locale)

    # ---- update profile popup ---------------------------------------------------
    async def open_profile_update(self) -> None:
        await self.open_account_menu()
        await self.click_profile_update()
        await self.expect_update_profile_popup_visible()

    async def fill_profile_username(self, username: str) -> None:
        await self.update_profile_popup.username_input.fill(username)

    async def fill_profile_email(self, email: str) -> None:
        await self.update_profile_popup.email_input.fill(email)

    async def click_profile_close(self) -> None:
        await self.update_profile_popup.close_button.click()

    async def click_profile_update_button(self) -> None:
        await self.update_profile_popup.update_button.click()

    async def expect_update_profile_popup_visible(self) -> None:
        await self.update_profile_popup.expect_visible()

    async def submit_profile_update(self, fullname: str, email: str) -> None:
        await self.open_profile_update()
        await self.fill_profile_username(fullname)
        await self.fill_profile_email(email)
        await self.click_profile_update_button()
