"""
Authentication state shared between phases.

The authentication phase logs in once and captures the browser context's
storage state (cookies and per-origin localStorage) to
``<auth_dir>/<name>.json``. Later phases seed their browser contexts from
that file instead of logging in again.

Only the phase that owns a state name may write it; every other phase reads
it. Files are replaced wholesale by the next capture, never patched.

sessionStorage is a known gap: it is not part of Playwright's storage state
and replaying it through an init script has proven unreliable against the
frontend. It is captured and restored on request, and every use is logged
as a warning so a phase relying on it fails loud rather than silently
running with partial state.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Optional

from playwright.async_api import BrowserContext, Page

from frontend_e2e.errors import SessionStateReadOnly, SessionStateUnavailable

logger = logging.getLogger(__name__)

SESSION_STORAGE_GAP = (
    "sessionStorage capture/restore is best-effort and known to be unreliable "
    "across browser contexts"
)


@dataclass(frozen=True)
class SessionState:
    name: str
    origin_phase: str
    storage_state: Dict[str, Any]
    captured_at: str
    session_storage: Optional[Dict[str, str]] = None
    session_storage_origin: Optional[str] = None

    @property
    def cookies(self) -> list:
        return list(self.storage_state.get("cookies", []))

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "origin_phase": self.origin_phase,
            "captured_at": self.captured_at,
            "storage_state": self.storage_state,
            "session_storage": self.session_storage,
            "session_storage_origin": self.session_storage_origin,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionState":
        storage_state = data["storage_state"]
        if not isinstance(storage_state, dict) or not isinstance(storage_state.get("cookies", []), list):
            raise ValueError("storage_state must be an object with a cookie list")
        return cls(
            name=data["name"],
            origin_phase=data["origin_phase"],
            storage_state=storage_state,
            captured_at=data["captured_at"],
            session_storage=data.get("session_storage"),
            session_storage_origin=data.get("session_storage_origin"),
        )


class SessionStateStore:
    """Single-writer, multi-reader store of captured session states."""

    def __init__(self, directory: Path, writable: Iterable[str] = ()) -> None:
        self.directory = Path(directory)
        self.writable: FrozenSet[str] = frozenset(writable)

    def path_for(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    async def capture(
        self,
        name: str,
        phase: str,
        context: BrowserContext,
        page: Optional[Page] = None,
        include_session_storage: bool = False,
    ) -> SessionState:
        """Serialize the context's authentication artifacts under ``name``."""
        if name not in self.writable:
            raise SessionStateReadOnly(
                f"Phase '{phase}' may not write session state '{name}' "
                f"(writable: {', '.join(sorted(self.writable)) or 'none'})"
            )

        storage_state = await context.storage_state()

        session_storage = None
        session_origin = None
        if include_session_storage:
            if page is None:
                raise ValueError("capturing sessionStorage needs the page that holds it")
            logger.warning("%s (capturing '%s')", SESSION_STORAGE_GAP, name)
            raw = await page.evaluate("() => JSON.stringify(sessionStorage)")
            session_storage = json.loads(raw or "{}")
            session_origin = await page.evaluate("() => window.location.origin")

        state = SessionState(
            name=name,
            origin_phase=phase,
            storage_state=storage_state,
            captured_at=datetime.now(timezone.utc).isoformat(),
            session_storage=session_storage,
            session_storage_origin=session_origin,
        )
        self._write(state)
        logger.info(
            "Captured session state '%s' from phase %s (%d cookies)",
            name, phase, len(state.cookies),
        )
        return state

    def _write(self, state: SessionState) -> None:
        path = self.path_for(state.name)
        path.parent.mkdir(parents=True, exist_ok=True)
        # Write atomically (write to temp, then rename)
        temp_file = path.with_suffix(".tmp")
        with open(temp_file, "w", encoding="utf-8") as f:
            json.dump(state.to_dict(), f, indent=2)
        temp_file.replace(path)

    def load(self, name: str) -> SessionState:
        path = self.path_for(name)
        if not path.exists():
            raise SessionStateUnavailable(name, path, "file not found")
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            state = SessionState.from_dict(data)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            raise SessionStateUnavailable(name, path, f"malformed: {exc}") from exc
        if state.name != name:
            raise SessionStateUnavailable(name, path, f"file holds state '{state.name}'")
        return state

    def load_optional(self, name: str, strict: bool = False) -> Optional[SessionState]:
        """``load`` for phases that can fall back to an interactive login.

        A missing or unreadable state is logged and returns None; with
        ``strict`` it raises ``SessionStateUnavailable`` instead.
        """
        try:
            return self.load(name)
        except SessionStateUnavailable as exc:
            if strict:
                raise
            logger.warning("%s; continuing without seeded authentication", exc)
            return None

    def exists(self, name: str) -> bool:
        return self.path_for(name).exists()

    def clear(self, name: str) -> None:
        path = self.path_for(name)
        if path.exists():
            path.unlink()
            logger.info("Cleared session state: %s", path)

    @staticmethod
    def context_options(state: SessionState) -> Dict[str, Any]:
        """Keyword arguments seeding ``browser.new_context`` with ``state``."""
        return {"storage_state": state.storage_state}

    @staticmethod
    async def restore_session_storage(context: BrowserContext, state: SessionState) -> bool:
        """Replay captured sessionStorage into every page of ``context``.

        Returns False when the state carries no sessionStorage.
        """
        if not state.session_storage:
            return False
        logger.warning("%s (restoring '%s')", SESSION_STORAGE_GAP, state.name)
        script = (
            "(([origin, entries]) => {"
            " if (window.location.origin !== origin) return;"
            " for (const [key, value] of Object.entries(entries)) {"
            "  window.sessionStorage.setItem(key, value); } })"
            f"({json.dumps([state.session_storage_origin, state.session_storage])})"
        )
        await context.add_init_script(script=script)
        return True
