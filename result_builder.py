"""
result_builder.py – Turn executed scenarios into TestRail result records.

A scenario's overall status is the worst outcome among its steps
(failed > skipped > passed); the comment is a transcript of every step.
"""

from __future__ import annotations

from models import ResultRecord, ResultStatus, StepOutcome, StepStatus

_STEP_TO_RESULT = {
    StepStatus.PASSED: ResultStatus.PASSED,
    StepStatus.SKIPPED: ResultStatus.SKIPPED,
    StepStatus.FAILED: ResultStatus.FAILED,
}

# Higher rank wins.
_SEVERITY = {
    ResultStatus.PASSED: 0,
    ResultStatus.SKIPPED: 1,
    ResultStatus.FAILED: 2,
}


def _transcript_lines(step: StepOutcome) -> list[str]:
    if step.status is StepStatus.SKIPPED:
        return ["Skipped test at", step.step_text]
    if step.status is StepStatus.FAILED:
        return ["Failed test at", step.step_text, step.error_message or ""]
    return [step.step_text]


def aggregate_steps(steps: list[StepOutcome]) -> tuple[ResultStatus, str]:
    """Reduce ordered step outcomes to ``(status, comment)``.

    An empty step list yields ``FAILED`` with an empty comment.
    """
    if not steps:
        return ResultStatus.FAILED, ""

    status = ResultStatus.PASSED
    lines: list[str] = []
    for step in steps:
        step_status = _STEP_TO_RESULT[step.status]
        if _SEVERITY[step_status] > _SEVERITY[status]:
            status = step_status
        lines.extend(_transcript_lines(step))

    return status, "".join(f"{line}\n" for line in lines)


def format_elapsed(duration_millis: int) -> str:
    # TestRail rejects "0s" as an elapsed value.
    if duration_millis == 0:
        return "1s"
    return f"{duration_millis}s"


def build_result_record(
    case_id: int,
    status_id: ResultStatus,
    comment: str,
    duration_millis: int,
) -> ResultRecord:
    return ResultRecord(
        case_id=case_id,
        status_id=status_id,
        comment=comment,
        elapsed=format_elapsed(duration_millis),
    )
