"""
synchronizer.py – Push executed scenarios to TestRail as one result batch.

Resolve run → fetch suite cases → match by title → aggregate → submit.
Failures are logged and never propagate to the caller, so a reporting
problem cannot turn a green test execution red.
"""

from __future__ import annotations

import logging

from config import Settings
from errors import MatchError
from feature_generator import FeatureFileGenerator, FeatureFileWriter
from models import RemoteTestCase, ResultRecord, RunContext, ScenarioResult
from result_builder import aggregate_steps, build_result_record
from run_resolver import RunResolver
from testrail_client import TestRailAPI

logger = logging.getLogger("testrail-sync")


def index_cases_by_title(cases: list[RemoteTestCase]) -> dict[str, RemoteTestCase]:
    """Build the title → case lookup for one pass; first case wins on clashes."""
    index: dict[str, RemoteTestCase] = {}
    for case in cases:
        key = case.title.strip()
        if key in index:
            logger.debug("Duplicate case title '%s' (#%s ignored)", key, case.id)
            continue
        index[key] = case
    return index


class ResultSynchronizer:
    """Orchestrates one synchronization (or feature generation) pass."""

    def __init__(
        self,
        api: TestRailAPI,
        settings: Settings,
        resolver: RunResolver | None = None,
        generator: FeatureFileGenerator | None = None,
        writer: FeatureFileWriter | None = None,
    ) -> None:
        self._api = api
        self._settings = settings
        self._resolver = resolver or RunResolver(api, settings)
        self._generator = generator or FeatureFileGenerator()
        self._writer = writer or FeatureFileWriter(settings.features_dir)
        self.run_context: RunContext | None = None

    def synchronize(self, results: list[ScenarioResult]) -> bool:
        """Submit *results*, then close the plan if configured.

        Returns ``True`` when the batch was accepted (or feature files were
        generated instead).
        """
        try:
            ctx = self._resolver.resolve()
            self.run_context = ctx
            cases = self._api.get_cases(self._settings.project_id, ctx.suite_id)

            if self._settings.create_feature_files:
                self.generate_feature_files(ctx.suite_id, cases)
                return True

            records = self.build_results(results, cases, ctx.suite_id)
            logger.info("Adding results to Test Run: %s", ctx.run_id)
            self._api.add_results_for_cases(ctx.run_id, records)
            ok = True
        except Exception:
            logger.exception("Failed to add results to TestRail")
            ok = False

        self.close_plan_if_required()
        return ok

    def build_results(
        self,
        results: list[ScenarioResult],
        cases: list[RemoteTestCase],
        suite_id: int,
    ) -> list[ResultRecord]:
        """Match every scenario to a case; raise `MatchError` on the first miss."""
        index = index_cases_by_title(cases)
        records: list[ResultRecord] = []
        for result in results:
            case = index.get(result.scenario_title.strip())
            if case is None:
                raise MatchError(result.scenario_title, suite_id)
            status, comment = aggregate_steps(result.steps)
            records.append(
                build_result_record(case.id, status, comment, result.duration_millis)
            )
            logger.debug("'%s' → case #%s (%s)", result.scenario_title, case.id, status.name)
        return records

    def generate_feature_files(
        self, suite_id: int, cases: list[RemoteTestCase] | None = None
    ) -> dict[str, str]:
        """Render and write one feature file per section of *suite_id*."""
        project_id = self._settings.project_id
        if cases is None:
            cases = self._api.get_cases(project_id, suite_id)
        logger.info("Retrieving current suite sections")
        sections = self._api.get_sections(project_id, suite_id)
        documents = self._generator.generate(cases, sections)
        self._writer.write(documents)
        return documents

    def close_plan_if_required(self) -> None:
        if not self._settings.plan_close:
            return
        plan_id = self.run_context.plan_id if self.run_context else self._settings.plan_id
        if not plan_id:
            logger.warning("Plan close requested but no Test Plan ID is known")
            return
        logger.info("Closing Test Plan: %s", plan_id)
        try:
            self._api.close_plan(plan_id)
        except Exception:
            logger.exception("Failed to close test plan")
