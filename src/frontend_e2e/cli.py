"""Command line entry point: ``frontend-e2e``."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import anyio

from frontend_e2e.config import RunConfiguration
from frontend_e2e.errors import GraphError
from frontend_e2e.evaluator import GraphEvaluator
from frontend_e2e.executor import PytestPhaseExecutor
from frontend_e2e.report import publish

logger = logging.getLogger("frontend_e2e")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="frontend-e2e",
        description="Run the staged end-to-end suites of the frontend",
    )
    sub = parser.add_subparsers(dest="command")

    run = sub.add_parser("run", help="Evaluate the phase graph")
    run.add_argument(
        "--phase",
        action="append",
        default=[],
        metavar="NAME",
        help="Run only this phase and its upstream phases (repeatable)",
    )

    sub.add_parser("phases", help="List phases in execution order")
    return parser


def list_phases(config: RunConfiguration) -> None:
    for phase in config.graph():
        deps = ", ".join(sorted(phase.dependencies)) or "-"
        flags = " (on demand)" if phase.on_demand else ""
        print(
            f"{phase.name:32} {phase.role.value:5} {phase.profile.engine:8} "
            f"{phase.test_dir}/{phase.test_match:24} after: {deps}{flags}"
        )


def run(config: RunConfiguration, phases: List[str]) -> int:
    graph = config.graph().select(phases)
    evaluator = GraphEvaluator(graph, config, PytestPhaseExecutor(config))
    report = anyio.run(evaluator.run)
    publish(report, config.reporters, config.output_dir)
    return 0 if report.succeeded else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = RunConfiguration.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    try:
        if args.command == "phases":
            list_phases(config)
            return 0
        return run(config, getattr(args, "phase", []))
    except GraphError as exc:
        logger.error("Invalid phase graph: %s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
