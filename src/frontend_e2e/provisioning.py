"""Fixtures created inside the application before the test phases run.

Provisioned objects are shared mutable state for the whole run. They are
deleted and recreated on every run; nothing from a previous run is reused.
"""
from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import List

# Usernames the workflow suites rely on; kept stable across runs so stale
# copies from an aborted run can be found and removed.
PROVISIONED_USERNAMES = ("e2e-user", "e2e-auditor")


@dataclass(frozen=True)
class ProvisionedUser:
    username: str
    fullname: str
    email: str
    password: str


def provisioning_plan(run_id: str | None = None) -> List[ProvisionedUser]:
    """Managed users to create for one run.

    Passwords are generated per run; names are stable.
    """
    run_id = run_id or secrets.token_hex(4)
    return [
        ProvisionedUser(
            username=username,
            fullname=f"{username.replace('-', ' ').title()} {run_id}",
            email=f"{username}@example.test",
            password=f"E2e-{secrets.token_urlsafe(12)}",
        )
        for username in PROVISIONED_USERNAMES
    ]
