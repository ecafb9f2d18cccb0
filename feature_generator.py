"""
feature_generator.py – Derive Gherkin feature files from TestRail cases.

One feature document per section:
  Feature: <section name>
  Scenario: <case title>
  Given <first step>
  And <next step>
  Then <expected result>
"""

from __future__ import annotations

import logging
import re
import warnings
from pathlib import Path

from errors import SectionLookupWarning
from models import RemoteTestCase, Section

logger = logging.getLogger("testrail-sync")

FEATURE_SUFFIX = ".feature"


def _one_line(text: str) -> str:
    return text.replace("\n", " ").strip()


def format_scenario(case: RemoteTestCase) -> str:
    """Render a case's separated steps as a scenario block."""
    lines = [f"Scenario: {case.title}"]

    if not case.structured_steps:
        lines.append("Given No steps defined.")

    for i, step in enumerate(case.structured_steps):
        keyword = "Given" if i == 0 else "And"
        lines.append(f"{keyword} {_one_line(step.content)}")
        expected = _one_line(step.expected)
        if expected:
            lines.append(f"Then {expected}")

    return "\n".join(lines).strip()


def feature_file_name(section_name: str) -> str:
    """``"User Profile & Settings!!"`` → ``"user_profile_settings.feature"``."""
    name = re.sub(r"\s+", "_", section_name.strip())
    name = re.sub(r"[^a-zA-Z0-9_]", "", name).lower()
    name = re.sub(r"_+", "_", name)
    return name + FEATURE_SUFFIX


class FeatureFileGenerator:
    """Groups cases by section and renders one feature document each."""

    def generate(
        self,
        cases: list[RemoteTestCase],
        sections: list[Section],
    ) -> dict[str, str]:
        names_by_id = {s.id: s.name for s in sections}

        scenarios: dict[str, list[str]] = {}
        for case in cases:
            section_name = names_by_id.get(case.section_id)
            if section_name is None:
                msg = f"Section ID {case.section_id} not found in sections map."
                logger.warning("%s Skipping case #%s.", msg, case.id)
                warnings.warn(msg, SectionLookupWarning, stacklevel=2)
                continue
            scenarios.setdefault(section_name, []).append(format_scenario(case))

        # Sections that sanitize to the same file name share one document,
        # headed by the first section seen.
        by_file: dict[str, tuple[str, list[str]]] = {}
        for section_name, blocks in scenarios.items():
            file_name = feature_file_name(section_name)
            if file_name in by_file:
                first_name, merged = by_file[file_name]
                logger.warning(
                    "Sections '%s' and '%s' both map to %s; merging their scenarios.",
                    first_name,
                    section_name,
                    file_name,
                )
                merged.extend(blocks)
            else:
                by_file[file_name] = (section_name, list(blocks))

        documents: dict[str, str] = {}
        for file_name, (section_name, blocks) in by_file.items():
            lines = [f"Feature: {section_name}"]
            lines.extend(f"{block}\n" for block in blocks)
            documents[file_name] = "\n".join(lines) + "\n"

        logger.info(
            "Rendered %d feature documents from %d cases", len(documents), len(cases)
        )
        return documents


class FeatureFileWriter:
    """Writes generated feature documents into a directory."""

    def __init__(self, output_dir: str | Path) -> None:
        self._output_dir = Path(output_dir)

    def write(self, documents: dict[str, str]) -> list[Path]:
        self._output_dir.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        for name, content in documents.items():
            path = self._output_dir / name
            path.write_text(content, encoding="utf-8")
            logger.info("Feature file created: %s", path)
            written.append(path)
        return written
