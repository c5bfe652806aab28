"""Login and forced password change pages."""
from __future__ import annotations

from frontend_e2e.locators import by_role, by_selector
from frontend_e2e.pages.base import PageObject


class LoginPage(PageObject):
    username_input = by_selector('input[name="username"]', note="inputs carry no label text")
    password_input = by_selector('input[name="password"]', note="inputs carry no label text")
    login_button = by_role("button", "message", "login")

    async def login(self, username: str, password: str) -> None:
        await self.username_input.fill(username)
        await self.password_input.fill(password)
        await self.login_button.click()


class ChangePasswordPage(PageObject):
    """Shown instead of the dashboard when an account must change its password."""

    username_input = by_selector('input[name="username"]')
    current_password_input = by_selector('input[name="existingPassword"]')
    new_password_input = by_selector('input[name="newPassword"]')
    confirm_password_input = by_selector('input[name="confirmPassword"]')
    submit_button = by_role("button", "message", "change_password")

    async def change_password(self, username: str, current: str, new: str) -> None:
        await self.username_input.fill(username)
        await self.current_password_input.fill(current)
        await self.new_password_input.fill(new)
        await self.confirm_password_input.fill(new)
        await self.submit_button.click()
