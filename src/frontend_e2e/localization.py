"""Read-only access to the application's localized string tables.

The frontend ships one JSON bundle per locale, grouped by namespace::

    {"message": {"dashboard": "Dashboard", ...}, "admin": {...}}

Locators look labels up once, when a page object is constructed; assertions
look messages up when they run. Nothing here writes.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol

from frontend_e2e.errors import MissingTranslation

logger = logging.getLogger(__name__)


class LocalizationProvider(Protocol):
    locale: str

    def get(self, namespace: str, key: str) -> str:
        ...


class JsonLocalization:
    """Provider backed by ``<directory>/<locale>.json``."""

    def __init__(self, directory: Path, locale: str = "en") -> None:
        self.directory = Path(directory)
        self.locale = locale
        self._table: Optional[Dict[str, Dict[str, str]]] = None

    @property
    def path(self) -> Path:
        return self.directory / f"{self.locale}.json"

    def _load(self) -> Dict[str, Dict[str, str]]:
        if self._table is None:
            if not self.path.exists():
                raise FileNotFoundError(
                    f"Locale table not found: {self.path} (locale={self.locale})"
                )
            with open(self.path, encoding="utf-8") as f:
                self._table = json.load(f)
            logger.debug("Loaded locale table %s (%d namespaces)", self.path, len(self._table))
        return self._table

    def get(self, namespace: str, key: str) -> str:
        value = self._load().get(namespace, {}).get(key)
        if value is None:
            raise MissingTranslation(self.locale, namespace, key)
        return value


class StaticLocalization:
    """In-memory provider, mostly for tests and ad-hoc scripts."""

    def __init__(self, table: Mapping[str, Mapping[str, str]], locale: str = "en") -> None:
        self._table = {ns: dict(keys) for ns, keys in table.items()}
        self.locale = locale

    def get(self, namespace: str, key: str) -> str:
        try:
            return self._table[namespace][key]
        except KeyError:
            raise MissingTranslation(self.locale, namespace, key) from None
