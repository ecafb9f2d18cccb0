"""Tests for the command-line entry point."""

import json
from dataclasses import replace
from unittest.mock import MagicMock

import pytest

import run
from config import Settings
from models import RemoteTestCase, Section


@pytest.fixture
def report_file(tmp_path):
    path = tmp_path / "report.json"
    path.write_text(
        json.dumps(
            [
                {
                    "name": "Auth",
                    "elements": [
                        {
                            "type": "scenario",
                            "name": "Login works",
                            "steps": [
                                {"keyword": "Given ", "name": "x", "result": {"status": "passed"}}
                            ],
                        }
                    ],
                }
            ]
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def fake_api(monkeypatch) -> MagicMock:
    api = MagicMock()
    api.get_cases.return_value = [RemoteTestCase(id=1, title="Login works", section_id=10)]
    monkeypatch.setattr(run, "_build_api", lambda settings: api)
    return api


def test_report_disabled_submits_nothing(settings, report_file, fake_api):
    assert run.report(settings, str(report_file)) is True
    fake_api.get_cases.assert_not_called()


def test_report_submits_batch(settings, report_file, fake_api):
    settings = replace(settings, add_results=True, run_id=100)
    fake_api.get_run.return_value = {"id": 100, "suite_id": 3}

    assert run.report(settings, str(report_file)) is True

    run_id, records = fake_api.add_results_for_cases.call_args.args
    assert run_id == 100
    assert [r.case_id for r in records] == [1]


def test_report_failure_does_not_raise(settings, report_file, fake_api):
    settings = replace(settings, add_results=True)  # no run id configured
    assert run.report(settings, str(report_file)) is False
    fake_api.add_results_for_cases.assert_not_called()


def test_dry_run_never_creates_a_run(settings, report_file, fake_api):
    settings = replace(settings, run_create_new=True)

    assert run.report(settings, str(report_file), dry_run=True) is True

    fake_api.add_run.assert_not_called()
    fake_api.add_plan_entry.assert_not_called()
    fake_api.add_results_for_cases.assert_not_called()
    fake_api.get_cases.assert_called_once_with(7, 3)


def test_features_command_writes_files(settings, tmp_path, fake_api):
    fake_api.get_sections.return_value = [Section(name="Auth", id=10)]

    run.features(settings, None, str(tmp_path / "out"))

    assert (tmp_path / "out" / "auth.feature").read_text(encoding="utf-8").startswith(
        "Feature: Auth\nScenario: Login works"
    )


def test_main_exits_on_configuration_error(monkeypatch, tmp_path):
    monkeypatch.setattr(run.Settings, "from_env", classmethod(lambda cls: Settings(add_results=True)))
    report = tmp_path / "r.json"
    report.write_text("[]", encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        run.main(["report", str(report)])

    assert exc_info.value.code == 2


def test_feature_mode_prints_generation_summary(settings, report_file, fake_api, tmp_path, capsys):
    settings = replace(
        settings,
        add_results=True,
        run_id=100,
        create_feature_files=True,
        features_dir=str(tmp_path / "features"),
    )
    fake_api.get_run.return_value = {"id": 100, "suite_id": 3}
    fake_api.get_sections.return_value = [Section(name="Auth", id=10)]

    assert run.report(settings, str(report_file)) is True

    out = capsys.readouterr().out
    assert "Feature Generation Summary" in out
    assert "Submitted" not in out
    fake_api.add_results_for_cases.assert_not_called()
    assert (tmp_path / "features" / "auth.feature").exists()
