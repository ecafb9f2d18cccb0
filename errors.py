"""
errors.py – Exception and warning types raised by testrail-sync.
"""

from __future__ import annotations


class TestRailSyncError(Exception):
    """Base class for every error raised by this project."""


class ConfigurationError(TestRailSyncError):
    """A required setting is missing or malformed."""


class MatchError(TestRailSyncError):
    """An executed scenario has no counterpart in the TestRail suite."""

    def __init__(self, scenario_title: str, suite_id: int) -> None:
        super().__init__(
            f"The scenario '{scenario_title}' is not part of the test suite "
            f"{suite_id}. Please check your configuration."
        )
        self.scenario_title = scenario_title
        self.suite_id = suite_id


class TransportError(TestRailSyncError):
    """The TestRail API answered with an error, or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SectionLookupWarning(UserWarning):
    """A case references a section that is not part of the fetched suite."""
