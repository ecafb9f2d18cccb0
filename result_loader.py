"""
result_loader.py – Read Cucumber JSON reports into `ScenarioResult` objects.

Accepts a single report file or a directory searched recursively for
``*.json``.  Background steps are prepended to the scenario that follows.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from models import ScenarioResult, StepOutcome, StepStatus

logger = logging.getLogger("testrail-sync")

_SKIPPED = {"skipped", "pending", "undefined"}


def _step_status(raw: str | None) -> StepStatus:
    raw = (raw or "").lower()
    if raw == "passed":
        return StepStatus.PASSED
    if raw in _SKIPPED:
        return StepStatus.SKIPPED
    return StepStatus.FAILED


def _parse_steps(raw_steps: list[dict[str, Any]]) -> tuple[list[StepOutcome], int]:
    """Return the step outcomes and their summed duration in nanoseconds."""
    steps: list[StepOutcome] = []
    total_ns = 0
    for s in raw_steps:
        result = s.get("result") or {}
        total_ns += int(result.get("duration") or 0)
        text = f"{s.get('keyword', '').strip()} {s.get('name', '')}".strip()
        steps.append(
            StepOutcome(
                step_text=text,
                status=_step_status(result.get("status")),
                error_message=result.get("error_message"),
            )
        )
    return steps, total_ns


def parse_cucumber_report(features: list[dict[str, Any]]) -> list[ScenarioResult]:
    """Convert one decoded Cucumber JSON document."""
    results: list[ScenarioResult] = []
    for feature in features:
        background: list[StepOutcome] = []
        background_ns = 0
        for element in feature.get("elements") or []:
            steps, duration_ns = _parse_steps(element.get("steps") or [])
            if element.get("type") == "background":
                background, background_ns = steps, duration_ns
                continue
            results.append(
                ScenarioResult(
                    scenario_title=element.get("name", ""),
                    steps=background + steps,
                    duration_millis=(background_ns + duration_ns) // 1_000_000,
                )
            )
            background, background_ns = [], 0
    return results


def load_cucumber_results(path: str | Path) -> list[ScenarioResult]:
    """Load every scenario from *path* (a report file or a directory)."""
    path = Path(path)
    files = sorted(path.rglob("*.json")) if path.is_dir() else [path]

    results: list[ScenarioResult] = []
    for file in files:
        try:
            data = json.loads(file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            logger.warning("Skipping %s: not valid JSON (%s)", file, exc)
            continue
        if not isinstance(data, list):
            logger.debug("Skipping %s: not a Cucumber report", file)
            continue
        results.extend(parse_cucumber_report(data))

    logger.info("Loaded %d scenario results from %d files", len(results), len(files))
    return results
