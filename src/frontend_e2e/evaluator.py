"""
Evaluation of the phase graph.

Every phase gets its own task. A task waits until all of its upstream
phases have finished, then either runs the phase (every upstream
succeeded) or marks it skipped (any upstream failed or was skipped). Setup
phases therefore run one after another while the test phases, which share
the provisioning phase as their only upstream, start together.

A run-wide wall-clock budget bounds the whole evaluation: phases still
waiting or running when it runs out are failed and their dependents
skipped.
"""
from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Protocol

import anyio

from frontend_e2e.config import RunConfiguration
from frontend_e2e.errors import PhaseDependencyFailed
from frontend_e2e.graph import Phase, PhaseGraph, PhaseStatus
from frontend_e2e.report import PhaseOutcome, PhaseResult, RunReport, ScenarioResult

logger = logging.getLogger(__name__)

COLLECT_TIMEOUT = 30.0  # seconds per skipped phase


class PhaseExecutor(Protocol):
    async def execute(self, phase: Phase) -> PhaseOutcome:
        """Run every scenario of ``phase`` sequentially."""
        ...

    async def collect(self, phase: Phase) -> List[str]:
        """Scenario names of ``phase`` without running them."""
        ...


class GraphEvaluator:
    def __init__(self, graph: PhaseGraph, config: RunConfiguration, executor: PhaseExecutor) -> None:
        self.graph = graph
        self.config = config
        self.executor = executor
        self.report = RunReport({phase.name: PhaseResult(phase.name) for phase in graph})
        self._done: Dict[str, anyio.Event] = {}

    async def run(self) -> RunReport:
        self._done = {phase.name: anyio.Event() for phase in self.graph}
        limit = self.config.max_parallel_phases or math.inf
        limiter = anyio.CapacityLimiter(limit)
        deadline = anyio.current_time() + self.config.timeouts.run

        logger.info(
            "Evaluating %d phase(s): %s (budget %.0fs)",
            len(self.graph), " -> ".join(self.graph.names), self.config.timeouts.run,
        )
        async with anyio.create_task_group() as tg:
            for phase in self.graph:
                tg.start_soon(self._run_phase, phase, limiter, deadline, name=phase.name)
        return self.report

    async def _run_phase(self, phase: Phase, limiter: anyio.CapacityLimiter, deadline: float) -> None:
        result = self.report.phases[phase.name]
        try:
            for upstream in sorted(phase.dependencies):
                await self._done[upstream].wait()

            failed = [
                upstream for upstream in phase.dependencies
                if self.report.phases[upstream].status is not PhaseStatus.SUCCEEDED
            ]
            if failed:
                await self._skip(phase, result, PhaseDependencyFailed(phase.name, failed), deadline)
                return

            outcome: Optional[PhaseOutcome] = None
            with anyio.move_on_after(max(deadline - anyio.current_time(), 0)):
                async with limiter:
                    self._transition(result, PhaseStatus.RUNNING)
                    outcome = await self.executor.execute(phase)

            if outcome is None:
                result.detail = f"run budget of {self.config.timeouts.run:.0f}s exhausted"
                self._transition(result, PhaseStatus.FAILED)
                return

            if outcome.status not in (PhaseStatus.SUCCEEDED, PhaseStatus.FAILED):
                raise ValueError(f"executor reported non-terminal status {outcome.status.value}")
            result.scenarios = list(outcome.scenarios)
            result.detail = outcome.detail
            self._transition(result, outcome.status)
        except Exception as exc:
            logger.exception("Phase %s crashed", phase.name)
            result.detail = f"{type(exc).__name__}: {exc}"
            self._transition(result, PhaseStatus.FAILED)
        finally:
            self._done[phase.name].set()

    async def _skip(
        self, phase: Phase, result: PhaseResult, reason: PhaseDependencyFailed, deadline: float
    ) -> None:
        names: List[str] = []
        # Collection is for reporting only; it never outlives the run budget.
        window = min(max(deadline - anyio.current_time(), 0), COLLECT_TIMEOUT)
        try:
            with anyio.move_on_after(window) as scope:
                names = await self.executor.collect(phase)
            if scope.cancelled_caught:
                logger.warning("Collecting scenarios of skipped phase %s timed out", phase.name)
        except Exception as exc:
            logger.warning("Could not collect scenarios of skipped phase %s: %s", phase.name, exc)
        result.scenarios = [ScenarioResult(name, "skipped", message=str(reason)) for name in names]
        result.detail = str(reason)
        self._transition(result, PhaseStatus.SKIPPED)

    @staticmethod
    def _transition(result: PhaseResult, status: PhaseStatus) -> None:
        previous = result.status
        result.transition(status)
        log = logger.warning if status in (PhaseStatus.FAILED, PhaseStatus.SKIPPED) else logger.info
        log("Phase %s: %s -> %s%s", result.name, previous.value, status.value,
            f" ({result.detail})" if result.detail and status.terminal else "")
