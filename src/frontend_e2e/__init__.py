"""Staged end-to-end verification of the frontend.

Phases (bootstrap, authentication, provisioning, browser-family workflows)
form a dependency graph evaluated by ``frontend_e2e.evaluator``; suites
drive the UI through page objects in ``frontend_e2e.pages``.
"""

__version__ = "1.0.0"
