"""Administration > Access Management > Managed Users."""
from __future__ import annotations

import logging

from frontend_e2e.errors import AssertionTimeout
from frontend_e2e.locators import by_role, by_role_name, by_selector, by_text
from frontend_e2e.pages.base import Nested, PageObject

logger = logging.getLogger(__name__)


class CreateUserModal(PageObject):
    root = by_selector(".modal-content", note="modal has no accessible name")
    username_input = by_selector("#username-input-input")
    fullname_input = by_selector("#fullname-input-input")
    email_input = by_selector("#email-input-input")
    password_input = by_selector("#password-input-input")
    confirm_password_input = by_selector("#confirmPassword-input-input")
    create_button = by_text("message", "create", exact=True)


class ManagedUsersPage(PageObject):
    access_management_menu = by_role("link", "admin", "access_management")
    managed_users_menu = by_role("link", "admin", "managed_users")
    create_user_button = by_role("button", "admin", "create_user")
    search_input = by_selector('.bootstrap-table .search input', note="table search has no label")
    delete_user_button = by_role("button", "admin", "delete_user")

    create_user_modal = Nested(CreateUserModal)

    async def open(self) -> None:
        await self.access_management_menu.click()
        await self.managed_users_menu.click()

    async def search(self, username: str) -> None:
        await self.search_input.fill(username)

    def row(self, username: str):
        """Row of the users table holding ``username``, bound lazily."""
        return self.resolver.bind(by_role_name("row", username), self.scope)

    async def has_user(self, username: str) -> bool:
        await self.search(username)
        try:
            await self.row(username).expect_visible()
        except AssertionTimeout:
            return False
        return True

    async def create_user(self, username: str, fullname: str, email: str, password: str) -> None:
        await self.create_user_button.click()
        await self.create_user_modal.expect_visible()
        await self.create_user_modal.username_input.fill(username)
        await self.create_user_modal.fullname_input.fill(fullname)
        await self.create_user_modal.email_input.fill(email)
        await self.create_user_modal.password_input.fill(password)
        await self.create_user_modal.confirm_password_input.fill(password)
        await self.create_user_modal.create_button.click()

    async def delete_user(self, username: str) -> None:
        await self.search(username)
        await self.row(username).click()
        await self.delete_user_button.click()
        logger.debug("Deleted managed user %s", username)
