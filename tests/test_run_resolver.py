"""Tests for run resolution (create-new vs. existing run)."""

from dataclasses import replace

import pytest

from errors import ConfigurationError
from models import RunContext
from run_resolver import RunResolver, extract_run_id


def _resolver(api, settings):
    return RunResolver(api, settings, clock=lambda: "2026-10-19 12:00:00.000000")


# ── Create new run ──────────────────────────────────────────────────────

def test_create_run_without_plan_reads_top_level_id(api, settings):
    settings = replace(settings, run_create_new=True)
    api.add_run.return_value = {"id": 55, "suite_id": 3}

    ctx = _resolver(api, settings).resolve()

    assert ctx == RunContext(run_id=55, suite_id=3, plan_id=0)
    api.add_run.assert_called_once_with(
        7, {"name": "Nightly 2026-10-19 12:00:00.000000", "suite_id": 3}
    )
    api.add_plan_entry.assert_not_called()


def test_create_run_under_plan_reads_nested_run_id(api, settings):
    settings = replace(settings, run_create_new=True, plan_id=90)
    api.add_plan_entry.return_value = {"id": "entry-uuid", "runs": [{"id": 77}, {"id": 78}]}

    ctx = _resolver(api, settings).resolve()

    assert ctx == RunContext(run_id=77, suite_id=3, plan_id=90)
    api.add_plan_entry.assert_called_once()
    assert api.add_plan_entry.call_args.args[0] == 90
    api.add_run.assert_not_called()


def test_create_run_with_new_plan(api, settings):
    settings = replace(settings, run_create_new=True, plan_create_new=True, plan_name="Release")
    api.add_plan.return_value = {"id": 400}
    api.add_plan_entry.return_value = {"runs": [{"id": 12}]}

    ctx = _resolver(api, settings).resolve()

    api.add_plan.assert_called_once_with(7, {"name": "Release 2026-10-19 12:00:00.000000"})
    assert ctx == RunContext(run_id=12, suite_id=3, plan_id=400)


def test_create_run_requires_suite_id(api, settings):
    settings = replace(settings, run_create_new=True, suite_id=0)
    with pytest.raises(ConfigurationError, match="Suite ID not configured"):
        _resolver(api, settings).resolve()
    api.add_run.assert_not_called()


# ── Existing run ────────────────────────────────────────────────────────

def test_existing_run_reads_suite_from_remote(api, settings):
    settings = replace(settings, run_id=31, suite_id=0)
    api.get_run.return_value = {"id": 31, "suite_id": 8, "plan_id": None}

    ctx = _resolver(api, settings).resolve()

    assert ctx == RunContext(run_id=31, suite_id=8, plan_id=0)
    api.get_run.assert_called_once_with(31)


def test_existing_run_ignores_remote_plan(api, settings):
    settings = replace(settings, run_id=31)
    api.get_run.return_value = {"id": 31, "suite_id": 8, "plan_id": 888}
    assert _resolver(api, settings).resolve().plan_id == 0


def test_existing_run_uses_configured_plan(api, settings):
    settings = replace(settings, run_id=31, plan_id=5)
    api.get_run.return_value = {"id": 31, "suite_id": 8, "plan_id": 888}
    assert _resolver(api, settings).resolve().plan_id == 5


def test_existing_run_requires_run_id(api, settings):
    with pytest.raises(ConfigurationError, match="Run ID not configured"):
        _resolver(api, settings).resolve()
    api.get_run.assert_not_called()


def test_extract_run_id():
    assert extract_run_id({"id": 1}, 0) == 1
    assert extract_run_id({"id": 1, "runs": [{"id": 2}]}, 9) == 2
