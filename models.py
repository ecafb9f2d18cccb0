"""
models.py – Plain data-classes shared across every module.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum


class StepStatus(str, Enum):
    """Outcome of a single executed step."""

    PASSED = "passed"
    SKIPPED = "skipped"
    FAILED = "failed"


class ResultStatus(IntEnum):
    """TestRail status ids used when submitting results."""

    PASSED = 1
    SKIPPED = 2
    FAILED = 5


@dataclass(frozen=True)
class StepOutcome:
    """One step of an executed scenario, as reported by the test engine."""

    step_text: str
    status: StepStatus
    error_message: str | None = None


@dataclass(frozen=True)
class ScenarioResult:
    """An executed scenario with its ordered step outcomes."""

    scenario_title: str
    steps: list[StepOutcome] = field(default_factory=list)
    duration_millis: int = 0


@dataclass(frozen=True)
class CaseStep:
    """A content + expected-result pair from a TestRail separated-steps case."""

    content: str
    expected: str = ""


@dataclass(frozen=True)
class RemoteTestCase:
    """A test case fetched from TestRail."""

    id: int
    title: str
    section_id: int
    structured_steps: list[CaseStep] = field(default_factory=list)


@dataclass(frozen=True)
class Section:
    """A named TestRail section."""

    name: str
    id: int


@dataclass(frozen=True)
class ResultRecord:
    """A single result ready for `add_results_for_cases`."""

    case_id: int
    status_id: ResultStatus
    comment: str
    elapsed: str

    def to_payload(self) -> dict[str, object]:
        return {
            "case_id": self.case_id,
            "status_id": int(self.status_id),
            "comment": self.comment,
            "elapsed": self.elapsed,
        }


@dataclass(frozen=True)
class RunContext:
    """The run (and its suite) that receives a batch of results."""

    run_id: int
    suite_id: int
    plan_id: int = 0
