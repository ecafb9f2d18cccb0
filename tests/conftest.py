"""Shared test fixtures for testrail-sync tests."""

from unittest.mock import MagicMock

import pytest

from config import Settings
from models import CaseStep, RemoteTestCase, Section
from testrail_client import TestRailAPI


@pytest.fixture
def settings() -> Settings:
    return Settings(
        base_url="https://example.testrail.io/",
        username="qa@example.com",
        password="secret",
        project_id=7,
        suite_id=3,
        run_name="Nightly",
    )


@pytest.fixture
def api() -> MagicMock:
    return MagicMock(spec=TestRailAPI)


@pytest.fixture
def remote_cases() -> list[RemoteTestCase]:
    return [
        RemoteTestCase(id=1, title="Login works", section_id=10),
        RemoteTestCase(
            id=2,
            title="Logout works",
            section_id=10,
            structured_steps=[
                CaseStep(content="user is logged in"),
                CaseStep(content="user clicks logout", expected="user sees login page"),
            ],
        ),
        RemoteTestCase(id=3, title="Profile loads", section_id=20),
    ]


@pytest.fixture
def sections() -> list[Section]:
    return [Section(name="Authentication", id=10), Section(name="User Profile", id=20)]
