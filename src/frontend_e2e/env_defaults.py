"""Defaults for run configuration, read from a ``.env.defaults`` file.

Environment variables always win; the file only fills in what the shell
does not set. Kept separate so CI and local shells share one list of
defaults checked into the repository.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict


@lru_cache(maxsize=8)
def load_env_defaults(path: Path) -> Dict[str, str]:
    if not path.exists():
        return {}

    defaults: Dict[str, str] = {}
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        value = value.strip()
        if len(value) >= 2 and value[0] in ('"', "'") and value[-1] == value[0]:
            value = value[1:-1]
        defaults[key.strip()] = value
    return defaults
