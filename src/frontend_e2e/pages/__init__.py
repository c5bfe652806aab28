"""Page objects for the frontend under test."""
from frontend_e2e.pages.base import Nested, PageObject
from frontend_e2e.pages.login import ChangePasswordPage, LoginPage
from frontend_e2e.pages.managed_users import ManagedUsersPage
from frontend_e2e.pages.navigation_bar import NavigationBar
from frontend_e2e.pages.notification_toast import NotificationToast, ToastVariant

__all__ = [
    "ChangePasswordPage",
    "LoginPage",
    "ManagedUsersPage",
    "NavigationBar",
    "Nested",
    "NotificationToast",
    "PageObject",
    "ToastVariant",
]
