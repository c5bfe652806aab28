"""Runs a phase's suites in a pytest subprocess.

One subprocess per phase keeps browser processes, event loops and fixture
state of concurrently running phases apart. The child reads the same
environment, rebuilds the same ``RunConfiguration`` and looks its phase up
by ``E2E_PHASE``. Scenario results come back through the JUnit XML file
pytest writes into the phase's output directory.
"""
from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Dict, List, Optional
from xml.etree import ElementTree

import anyio

from frontend_e2e.config import RunConfiguration
from frontend_e2e.graph import Phase, PhaseStatus
from frontend_e2e.report import PhaseOutcome, ScenarioResult

logger = logging.getLogger(__name__)

# pytest exit codes
EXIT_OK = 0
EXIT_TESTS_FAILED = 1
EXIT_NO_TESTS_COLLECTED = 5


def parse_junit(path: Path) -> List[ScenarioResult]:
    """Scenario results from a JUnit XML report written by pytest.

    A rerun scenario is written once per attempt; its last attempt counts.
    """
    results: Dict[str, ScenarioResult] = {}
    tree = ElementTree.parse(path)
    for case in tree.iter("testcase"):
        classname = case.get("classname", "")
        name = f"{classname}::{case.get('name', '')}" if classname else case.get("name", "")
        outcome = "passed"
        message = ""
        for child in case:
            if child.tag in ("failure", "error"):
                outcome = "failed"
                message = child.get("message") or (child.text or "").strip()
                break
            if child.tag == "skipped":
                outcome = "skipped"
                message = child.get("message", "")
        results[name] = ScenarioResult(
            name=name, outcome=outcome, duration=float(case.get("time", 0) or 0), message=message
        )
    return list(results.values())


class PytestPhaseExecutor:
    def __init__(self, config: RunConfiguration, python: Optional[str] = None) -> None:
        self.config = config
        self.python = python or sys.executable

    def test_files(self, phase: Phase) -> List[Path]:
        directory = self.config.suites_dir / phase.test_dir
        return sorted(p for p in directory.glob(phase.test_match) if p.is_file())

    def environment(self, phase: Phase) -> Dict[str, str]:
        env = dict(os.environ)
        env["E2E_PHASE"] = phase.name
        env["E2E_PROJECT_ROOT"] = str(self.config.project_root)
        return env

    def command(self, phase: Phase, files: List[Path], junit_path: Optional[Path] = None,
                collect_only: bool = False) -> List[str]:
        cmd = [self.python, "-m", "pytest", *(str(f) for f in files), "-p", "no:cacheprovider"]
        if phase.markers:
            cmd += ["-m", phase.markers]
        if collect_only:
            cmd += ["--collect-only", "-q"]
        else:
            cmd += ["-v", "-rfE"]
            if phase.retries:
                # pytest-rerunfailures: each rerun sets its fixtures up again
                cmd += ["--reruns", str(phase.retries)]
        if junit_path is not None:
            cmd.append(f"--junitxml={junit_path}")
        return cmd

    async def execute(self, phase: Phase) -> PhaseOutcome:
        files = self.test_files(phase)
        if not files:
            logger.warning("Phase %s matched no files (%s/%s)", phase.name, phase.test_dir, phase.test_match)
            return PhaseOutcome(PhaseStatus.SUCCEEDED, detail="no test files matched")

        output_dir = self.config.phase_output_dir(phase.name)
        output_dir.mkdir(parents=True, exist_ok=True)
        junit_path = output_dir / "junit.xml"
        if junit_path.exists():
            junit_path.unlink()
        log_path = output_dir / "pytest.log"

        cmd = self.command(phase, files, junit_path)
        logger.info("Phase %s: running %d file(s), log at %s", phase.name, len(files), log_path)
        logger.debug("Phase %s command: %s", phase.name, " ".join(cmd))

        with open(log_path, "wb") as log:
            completed = await anyio.run_process(
                cmd,
                stdout=log,
                stderr=subprocess.STDOUT,
                check=False,
                cwd=self.config.project_root,
                env=self.environment(phase),
            )

        scenarios = parse_junit(junit_path) if junit_path.exists() else []
        code = completed.returncode
        if code == EXIT_OK:
            return PhaseOutcome(PhaseStatus.SUCCEEDED, scenarios)
        if code == EXIT_NO_TESTS_COLLECTED:
            logger.warning("Phase %s collected no scenarios", phase.name)
            return PhaseOutcome(PhaseStatus.SUCCEEDED, scenarios, "no scenarios collected")
        if code == EXIT_TESTS_FAILED:
            failed = sum(1 for s in scenarios if s.outcome == "failed")
            return PhaseOutcome(PhaseStatus.FAILED, scenarios, f"{failed} scenario(s) failed, see {log_path}")
        return PhaseOutcome(PhaseStatus.FAILED, scenarios, f"pytest exited with code {code}, see {log_path}")

    async def collect(self, phase: Phase) -> List[str]:
        files = self.test_files(phase)
        if not files:
            return []
        completed = await anyio.run_process(
            self.command(phase, files, collect_only=True),
            check=False,
            cwd=self.config.project_root,
            env=self.environment(phase),
        )
        lines = completed.stdout.decode("utf-8", errors="replace").splitlines()
        return [line.strip() for line in lines if "::" in line]
