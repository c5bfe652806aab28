"""Tests for the provisioning plan."""
from frontend_e2e.provisioning import PROVISIONED_USERNAMES, provisioning_plan


class TestProvisioningPlan:
    def test_usernames_are_stable(self):
        assert [u.username for u in provisioning_plan("a")] == list(PROVISIONED_USERNAMES)
        assert [u.username for u in provisioning_plan("b")] == list(PROVISIONED_USERNAMES)

    def test_passwords_are_fresh_per_run(self):
        first = {u.username: u.password for u in provisioning_plan("run")}
        second = {u.username: u.password for u in provisioning_plan("run")}
        assert first != second

    def test_run_id_in_fullname(self):
        assert all(u.fullname.endswith(" 1a2b") for u in provisioning_plan("1a2b"))
        assert all(u.email.endswith("@example.test") for u in provisioning_plan())
