"""
Provisioning of the managed users the workflow suites rely on.

Each fixture user is deleted if a previous run left it behind and created
fresh. The success toast confirms every write.
"""
import pytest

from frontend_e2e.provisioning import provisioning_plan


@pytest.fixture(scope="module")
def plan():
    """Users to create for this run."""
    return provisioning_plan()


class TestProvisionManagedUsers:
    @pytest.mark.asyncio
    async def test_recreate_managed_users(
        self, authenticated_page, navigation_bar, managed_users_page, notification_toast, plan
    ):
        await navigation_bar.click_administration_tab()
        await managed_users_page.open()

        for user in plan:
            if await managed_users_page.has_user(user.username):
                await managed_users_page.delete_user(user.username)
                await notification_toast.verify_successful_user_deleted_toast()

            await managed_users_page.create_user(user.username, user.fullname, user.email, user.password)
            await notification_toast.verify_successful_user_created_toast()

    @pytest.mark.asyncio
    async def test_provisioned_users_are_listed(self, authenticated_page, navigation_bar, managed_users_page, plan):
        await navigation_bar.click_administration_tab()
        await managed_users_page.open()

        missing = [user.username for user in plan if not await managed_users_page.has_user(user.username)]
        assert not missing, f"Provisioned users not listed: {missing}"
