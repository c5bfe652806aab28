"""
Tests for the page objects.

1. Locator binding and nested scopes
2. Navigation bar compound operations
3. Notification toast contract: visible, then content, then dismissed
4. Managed users page
"""
import logging

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeout

from frontend_e2e.errors import ActionTimeout, AssertionTimeout, ElementNotFound, MissingTranslation
from frontend_e2e.localization import StaticLocalization
from frontend_e2e.locators import LocatorResolver, by_selector, by_text
from frontend_e2e.pages import (
    ChangePasswordPage,
    LoginPage,
    ManagedUsersPage,
    NavigationBar,
    Nested,
    NotificationToast,
    PageObject,
    ToastVariant,
)
from frontend_e2e.pages.navigation_bar import TAB_ROUTES

ACCOUNT_MENU = ("selector", "li.dropdown")
LOGOUT_ITEM = ("text", "Logout")
SUCCESS_TOAST = ("selector", "div.toast-success")


class TestPageObjectBinding:
    def test_locators_are_bound_at_construction(self, dom, resolver):
        nav = NavigationBar(dom.page, resolver)
        assert nav.dashboard_tab.locator.query == ("role", "link", "Dashboard")
        assert set(TAB_ROUTES) <= set(nav.locators)

    def test_nested_objects_are_scoped_to_their_root(self, dom, resolver):
        nav = NavigationBar(dom.page, resolver)
        menu = nav.account_menu
        assert menu.parent is nav
        assert menu.page is dom.page
        assert menu.scope.query == ACCOUNT_MENU
        assert menu.logout_item.locator.parent is menu.scope

    def test_unscoped_object_uses_page(self, dom, resolver):
        nav = NavigationBar(dom.page, resolver)
        assert nav.region is None
        assert nav.dashboard_tab.locator.parent is dom.page

    def test_declarations_are_inherited(self, dom, resolver):
        class Base(PageObject):
            title = by_selector("h1")

        class Child(Base):
            root = by_selector("main")
            body = by_selector("p")

        child = Child(dom.page, resolver)
        assert set(child.locators) == {"title", "body"}
        assert child.title.locator.parent.query == ("selector", "main")

    def test_nested_declaration_in_custom_object(self, dom, resolver):
        class Dialog(PageObject):
            root = by_selector("dialog")
            ok = by_text("message", "close")

        class Screen(PageObject):
            dialog = Nested(Dialog)

        screen = Screen(dom.page, resolver)
        assert screen.dialog.ok.locator.query == ("text", "Close")

    def test_missing_label_fails_on_construction(self, dom):
        partial = LocatorResolver(StaticLocalization({"message": {"dashboard": "Dashboard"}}))
        with pytest.raises(MissingTranslation):
            NavigationBar(dom.page, partial)

    @pytest.mark.asyncio
    async def test_expect_visible_needs_root(self, dom, resolver):
        with pytest.raises(TypeError):
            await NavigationBar(dom.page, resolver).expect_visible()


class TestNavigationBar:
    @pytest.fixture
    def nav(self, dom, resolver):
        return NavigationBar(dom.page, resolver)

    @pytest.mark.asyncio
    async def test_click_tab(self, dom, nav):
        dom.add(("role", "link", "Vulnerability Audit"))
        await nav.click_vulnerability_audit_tab()
        assert dom.clicks() == [("role", "link", "Vulnerability Audit")]

    @pytest.mark.asyncio
    async def test_click_tab_by_name(self, dom, nav):
        dom.add(("role", "link", "Administration"))
        await nav.click_tab("administration_tab")
        assert dom.clicks() == [("role", "link", "Administration")]

    @pytest.mark.asyncio
    async def test_unknown_tab(self, nav):
        with pytest.raises(ValueError):
            await nav.click_tab("reports_tab")

    @pytest.mark.asyncio
    async def test_logout_opens_menu_first(self, dom, nav):
        dom.add(ACCOUNT_MENU)
        dom.add(LOGOUT_ITEM)
        await nav.logout()
        assert dom.clicks() == [ACCOUNT_MENU, LOGOUT_ITEM]

    @pytest.mark.asyncio
    async def test_logout_aborts_when_menu_missing(self, dom, nav):
        dom.add(LOGOUT_ITEM)
        with pytest.raises(ElementNotFound):
            await nav.logout()
        assert dom.clicks() == []

    @pytest.mark.asyncio
    async def test_logout_item_not_clicked_when_menu_click_times_out(self, dom, nav):
        dom.add(ACCOUNT_MENU, click_error=PlaywrightTimeout("Timeout 50ms exceeded"))
        dom.add(LOGOUT_ITEM)
        with pytest.raises(ActionTimeout):
            await nav.logout()
        assert LOGOUT_ITEM not in dom.clicks()

    @pytest.mark.asyncio
    async def test_close_snapshot_popup_checks_popup_is_gone(self, dom, nav):
        dom.add(("selector", ".modal-content"))
        dom.add(("selector", "button"))
        with pytest.raises(AssertionTimeout):
            await nav.close_snapshot_popup()
        assert dom.clicks() == [("selector", "button")]

    @pytest.mark.asyncio
    async def test_submit_profile_update(self, dom, nav):
        dom.add(ACCOUNT_MENU)
        dom.add(("text", "Update Profile"))
        dom.add(("selector", ".modal-content"))
        dom.add(("selector", "#fullname-input-input"))
        dom.add(("selector", "#email-input-input"))
        dom.add(("text", "Update"))

        await nav.submit_profile_update("Administrator", "admin@example.test")

        assert dom.clicks() == [ACCOUNT_MENU, ("text", "Update Profile"), ("text", "Update")]
        fills = [entry[1:] for entry in dom.log if entry[0] == "fill"]
        assert fills == [
            (("selector", "#fullname-input-input"), "Administrator"),
            (("selector", "#email-input-input"), "admin@example.test"),
        ]

    @pytest.mark.asyncio
    async def test_change_language(self, dom, nav):
        dom.add(ACCOUNT_MENU)
        dom.add(("selector", "#locale-picker-form .custom-select"))
        await nav.change_language("de")
        assert ("select_option", ("selector", "#locale-picker-form .custom-select"), "de") in dom.log

    def test_account_menu_items_are_not_swapped(self, nav):
        assert nav.account_menu.logout_item.label == "Logout"
        assert nav.account_menu.profile_update.label == "Update Profile"
        assert nav.account_menu.change_password.descriptor.selector == 'a[href="/change-password"]'


class TestNotificationToast:
    @pytest.fixture
    def toast(self, dom, resolver):
        return NotificationToast(dom.page, resolver)

    @pytest.mark.asyncio
    async def test_updated_toast_is_verified_and_dismissed(self, dom, toast):
        dom.add(SUCCESS_TOAST, text="Object was updated")
        await toast.verify_successful_updated_toast()
        assert dom.clicks() == [SUCCESS_TOAST]

    @pytest.mark.asyncio
    async def test_steps_run_in_order(self, dom, toast):
        dom.add(SUCCESS_TOAST, text="User created")
        await toast.verify_successful_user_created_toast()
        kinds = [entry[0] for entry in dom.log if entry[1] == SUCCESS_TOAST]
        assert kinds.index("wait_for") < kinds.index("click")
        assert kinds[-1] == "click"

    @pytest.mark.asyncio
    async def test_content_mismatch_leaves_toast_on_screen(self, dom, toast):
        dom.add(SUCCESS_TOAST, text="User created")
        with pytest.raises(AssertionTimeout):
            await toast.verify_successful_user_deleted_toast()
        assert dom.clicks() == []

    @pytest.mark.asyncio
    async def test_missing_toast(self, dom, toast):
        with pytest.raises(AssertionTimeout) as excinfo:
            await toast.verify_successful_password_change_toast()
        assert excinfo.value.name == "expect_visible"
        assert dom.clicks() == []

    @pytest.mark.asyncio
    async def test_wrong_variant_is_not_accepted(self, dom, toast):
        dom.add(("selector", "div.toast-error"), text="User created")
        with pytest.raises(AssertionTimeout):
            await toast.verify_successful_user_created_toast()

    @pytest.mark.asyncio
    async def test_unverified_variant_logs_warning(self, dom, toast, caplog):
        dom.add(("selector", "div.toast-warn"), text="Object was updated")
        with caplog.at_level(logging.WARNING, logger="frontend_e2e.pages.notification_toast"):
            await toast.verify_warning_toast("message", "updated")
        assert "unverified" in caplog.text
        assert dom.clicks() == [("selector", "div.toast-warn")]

    @pytest.mark.asyncio
    async def test_error_variant(self, dom, toast):
        dom.add(("selector", "div.toast-error"), text="User deleted")
        await toast.verify(ToastVariant.ERROR, "admin", "user_deleted")
        assert dom.clicks() == [("selector", "div.toast-error")]

    def test_only_success_is_verified(self):
        assert ToastVariant.SUCCESS.verified
        assert not ToastVariant.WARN.verified
        assert not ToastVariant.ERROR.verified


class TestLoginPages:
    @pytest.mark.asyncio
    async def test_login(self, dom, resolver):
        dom.add(("selector", 'input[name="username"]'))
        dom.add(("selector", 'input[name="password"]'))
        dom.add(("role", "button", "Login"))
        await LoginPage(dom.page, resolver).login("admin", "s3cret")
        assert dom.clicks() == [("role", "button", "Login")]
        assert ("fill", ("selector", 'input[name="password"]'), "s3cret") in dom.log

    @pytest.mark.asyncio
    async def test_change_password_confirms_new_password(self, dom, resolver):
        for name in ("username", "existingPassword", "newPassword", "confirmPassword"):
            dom.add(("selector", f'input[name="{name}"]'))
        dom.add(("role", "button", "Change password"))
        await ChangePasswordPage(dom.page, resolver).change_password("admin", "admin", "n3w")
        fills = {entry[1][1]: entry[2] for entry in dom.log if entry[0] == "fill"}
        assert fills['input[name="newPassword"]'] == "n3w"
        assert fills['input[name="confirmPassword"]'] == "n3w"
        assert fills['input[name="existingPassword"]'] == "admin"


class TestManagedUsersPage:
    @pytest.mark.asyncio
    async def test_has_user(self, dom, resolver):
        dom.add(("selector", ".bootstrap-table .search input"))
        dom.add(("role", "row", "e2e-user"))
        users = ManagedUsersPage(dom.page, resolver)
        assert await users.has_user("e2e-user")
        assert not await users.has_user("e2e-auditor")

    @pytest.mark.asyncio
    async def test_create_user(self, dom, resolver):
        dom.add(("role", "button", "Create User"))
        dom.add(("selector", ".modal-content"))
        for field in ("username", "fullname", "email", "password", "confirmPassword"):
            dom.add(("selector", f"#{field}-input-input"))
        dom.add(("text", "Create"))

        await ManagedUsersPage(dom.page, resolver).create_user("e2e-user", "E2E User", "e2e@example.test", "pw")

        assert dom.clicks() == [("role", "button", "Create User"), ("text", "Create")]
        fills = {entry[1][1]: entry[2] for entry in dom.log if entry[0] == "fill"}
        assert fills["#confirmPassword-input-input"] == "pw"
