"""Run results and the reporters that publish them."""
from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, TextIO

from frontend_e2e.graph import PhaseStatus

logger = logging.getLogger(__name__)

SCENARIO_OUTCOMES = ("passed", "failed", "skipped")


@dataclass
class ScenarioResult:
    name: str
    outcome: str  # passed, failed, skipped
    duration: float = 0.0
    message: str = ""

    def __post_init__(self) -> None:
        if self.outcome not in SCENARIO_OUTCOMES:
            raise ValueError(f"Unknown scenario outcome: {self.outcome}")


@dataclass
class PhaseOutcome:
    """What an executor reports back for one phase."""

    status: PhaseStatus
    scenarios: List[ScenarioResult] = field(default_factory=list)
    detail: str = ""


@dataclass
class PhaseResult:
    name: str
    status: PhaseStatus = PhaseStatus.PENDING
    scenarios: List[ScenarioResult] = field(default_factory=list)
    detail: str = ""
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    transitions: List[PhaseStatus] = field(default_factory=lambda: [PhaseStatus.PENDING])

    def transition(self, status: PhaseStatus) -> None:
        now = datetime.now(timezone.utc)
        if status is PhaseStatus.RUNNING:
            self.started_at = now
        elif status.terminal:
            self.finished_at = now
        self.status = status
        self.transitions.append(status)

    @property
    def duration(self) -> Optional[float]:
        if self.started_at and self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "status": self.status.value,
            "detail": self.detail,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "scenarios": [
                {"name": s.name, "outcome": s.outcome, "duration": s.duration, "message": s.message}
                for s in self.scenarios
            ],
        }


@dataclass
class RunReport:
    phases: Dict[str, PhaseResult] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return all(p.status is PhaseStatus.SUCCEEDED for p in self.phases.values())

    def by_status(self, status: PhaseStatus) -> List[str]:
        return [name for name, p in self.phases.items() if p.status is status]

    def to_dict(self) -> dict:
        return {
            "succeeded": self.succeeded,
            "phases": [p.to_dict() for p in self.phases.values()],
        }


def list_reporter(report: RunReport, stream: TextIO = sys.stdout) -> None:
    for phase in report.phases.values():
        duration = f" ({phase.duration:.1f}s)" if phase.duration is not None else ""
        line = f"[{phase.status.value.upper():9}] {phase.name}{duration}"
        if phase.detail:
            line += f" - {phase.detail}"
        print(line, file=stream)
        for scenario in phase.scenarios:
            mark = {"passed": "✓", "failed": "✗", "skipped": "-"}[scenario.outcome]
            print(f"    {mark} {scenario.name}", file=stream)


def github_reporter(report: RunReport, stream: TextIO = sys.stdout) -> None:
    """GitHub workflow commands for failed phases and scenarios."""
    for phase in report.phases.values():
        if phase.status is PhaseStatus.FAILED:
            print(f"::error title=Phase {phase.name} failed::{phase.detail or 'see phase log'}", file=stream)
        elif phase.status is PhaseStatus.SKIPPED:
            print(f"::warning title=Phase {phase.name} skipped::{phase.detail}", file=stream)
        for scenario in phase.scenarios:
            if scenario.outcome == "failed":
                message = scenario.message.replace("\n", "%0A")
                print(f"::error title={phase.name}: {scenario.name}::{message}", file=stream)


def json_reporter(report: RunReport, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / "report.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report.to_dict(), f, indent=2)
    logger.info("Wrote run report: %s", path)
    return path


def publish(report: RunReport, reporters, output_dir: Path, stream: TextIO = sys.stdout) -> None:
    for name in reporters:
        if name == "list":
            list_reporter(report, stream)
        elif name == "github":
            github_reporter(report, stream)
        elif name == "json":
            json_reporter(report, output_dir)
        else:
            raise ValueError(f"Unknown reporter: {name}")
