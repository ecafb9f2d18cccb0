"""
run_resolver.py – Decide which TestRail run receives a batch of results.

Two modes, selected by ``TESTRAIL_RUN_CREATE_NEW``:
  ├─ create new run   (needs a suite id; optionally nested in a plan)
  └─ use existing run (needs a run id; suite is read from the run)
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from config import Settings
from errors import ConfigurationError
from models import RunContext
from testrail_client import TestRailAPI

logger = logging.getLogger("testrail-sync")


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")


class RunResolver:
    """Resolves the `RunContext` for one synchronization pass."""

    def __init__(
        self,
        api: TestRailAPI,
        settings: Settings,
        clock: Callable[[], str] = _timestamp,
    ) -> None:
        self._api = api
        self._settings = settings
        self._clock = clock

    def resolve(self) -> RunContext:
        if self._settings.run_create_new:
            ctx = self._create_run()
        else:
            ctx = self._existing_run()
        logger.info("Test Run ID: %s", ctx.run_id)
        logger.info("Test Suite ID: %s", ctx.suite_id)
        return ctx

    # ── Mode A: create a new run ────────────────────────────────────────

    def _create_run(self) -> RunContext:
        suite_id = self._settings.suite_id
        if not suite_id:
            raise ConfigurationError("Test Suite ID not configured")

        plan_id = self._settings.plan_id
        if self._settings.plan_create_new:
            plan_id = self._create_plan()

        logger.info("Creating new Test Run")
        body = {
            "name": f"{self._settings.run_name} {self._clock()}",
            "suite_id": suite_id,
        }
        if plan_id:
            response = self._api.add_plan_entry(plan_id, body)
        else:
            response = self._api.add_run(self._settings.project_id, body)

        return RunContext(
            run_id=extract_run_id(response, plan_id),
            suite_id=suite_id,
            plan_id=plan_id,
        )

    def _create_plan(self) -> int:
        logger.info("Creating new Test Plan")
        plan = self._api.add_plan(
            self._settings.project_id,
            {"name": f"{self._settings.plan_name} {self._clock()}"},
        )
        return int(plan["id"])

    # ── Mode B: reuse an existing run ───────────────────────────────────

    def _existing_run(self) -> RunContext:
        run_id = self._settings.run_id
        if not run_id:
            raise ConfigurationError("Test Run ID not configured")
        run = self._api.get_run(run_id)
        return RunContext(
            run_id=run_id,
            suite_id=int(run["suite_id"]),
            plan_id=self._settings.plan_id,
        )


def extract_run_id(response: dict[str, Any], plan_id: int) -> int:
    """Read the run id from an ``add_run`` or ``add_plan_entry`` response."""
    if plan_id:
        return int(response["runs"][0]["id"])
    return int(response["id"])
