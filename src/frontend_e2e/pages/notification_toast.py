"""
Notification toasts.

Every verification follows the same three steps, in order:

1. the toast of the requested variant becomes visible
2. its text contains the localized message
3. the toast is dismissed by clicking it

A failure in step 1 or 2 raises before step 3, so a toast that does not
match is left on screen for the failure screenshot.

Only the success variant has been observed against the live UI. The warn
and error markup (``div.toast-warn``, ``div.toast-title``) is assumed from
the toastr conventions; their content checks log a warning until a suite
covers them.
"""
from __future__ import annotations

import enum
import logging

from frontend_e2e.locators import by_selector
from frontend_e2e.pages.base import PageObject

logger = logging.getLogger(__name__)


class ToastVariant(str, enum.Enum):
    SUCCESS = "success"
    WARN = "warn"
    ERROR = "error"

    @property
    def verified(self) -> bool:
        return self is ToastVariant.SUCCESS


class NotificationToast(PageObject):
    success_toast = by_selector("div.toast-success", note="toasts are identified only by class")
    warn_toast = by_selector("div.toast-warn", note="markup not yet observed")
    error_toast = by_selector("div.toast-error", note="toasts are identified only by class")
    toast_title = by_selector("div.toast-title")
    toast_message = by_selector("div.toast-message")

    def toast(self, variant: ToastVariant):
        return getattr(self, f"{ToastVariant(variant).value}_toast")

    async def verify(self, variant: ToastVariant, namespace: str, key: str, exact: bool = False) -> None:
        variant = ToastVariant(variant)
        toast = self.toast(variant)
        message = self.resolver.localization.get(namespace, key)
        if not variant.verified:
            logger.warning(
                "Content assertion for %s toasts is unverified against the live UI (%s.%s)",
                variant.value, namespace, key,
            )

        await toast.expect_visible()
        await toast.expect_text(message, exact=exact)
        await toast.click()

    async def verify_successful_password_change_toast(self) -> None:
        await self.verify(ToastVariant.SUCCESS, "message", "password_change_success")

    async def verify_successful_user_created_toast(self) -> None:
        await self.verify(ToastVariant.SUCCESS, "admin", "user_created")

    async def verify_successful_user_deleted_toast(self) -> None:
        await self.verify(ToastVariant.SUCCESS, "admin", "user_deleted")

    async def verify_successful_updated_toast(self) -> None:
        await self.verify(ToastVariant.SUCCESS, "message", "updated")

    async def verify_warning_toast(self, namespace: str, key: str) -> None:
        await self.verify(ToastVariant.WARN, namespace, key)

    async def verify_error_toast(self, namespace: str, key: str) -> None:
        await self.verify(ToastVariant.ERROR, namespace, key)
