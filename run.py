#!/usr/bin/env python3
"""
run.py – CLI entry-point for testrail-sync.

Usage:
    python run.py report target/karate-reports
    python run.py report target/karate-reports --dry-run
    python run.py features --suite-id 12 --out features/
"""

from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from config import Settings
from errors import ConfigurationError
from feature_generator import FeatureFileWriter
from models import ResultRecord, ResultStatus
from result_loader import load_cucumber_results
from run_resolver import RunResolver
from synchronizer import ResultSynchronizer
from testrail_client import TestRailAPI, TestRailClient

console = Console()

_STATUS_STYLE = {
    ResultStatus.PASSED: "green",
    ResultStatus.SKIPPED: "yellow",
    ResultStatus.FAILED: "red",
}

# ── Logging ─────────────────────────────────────────────────────────────

def _configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, markup=True)],
    )


# ── Pretty output helpers ──────────────────────────────────────────────

def _show_batch(records: list[ResultRecord], titles: list[str]) -> None:
    table = Table(title="TestRail Result Batch", show_lines=True)
    table.add_column("#", style="dim", width=4)
    table.add_column("Scenario", style="bold")
    table.add_column("Case", width=8)
    table.add_column("Status", width=9)
    table.add_column("Elapsed", width=9, justify="right")

    for i, (record, title) in enumerate(zip(records, titles), 1):
        style = _STATUS_STYLE[record.status_id]
        table.add_row(
            str(i),
            title,
            f"C{record.case_id}",
            f"[{style}]{record.status_id.name.title()}[/]",
            record.elapsed,
        )
    console.print(table)


# ── Commands ───────────────────────────────────────────────────────────

def _build_api(settings: Settings) -> TestRailAPI:
    settings.validate()
    return TestRailAPI(TestRailClient.from_settings(settings))


def report(settings: Settings, results_path: str, dry_run: bool = False) -> bool:
    """Load results → synchronize → close plan."""
    if not settings.add_results and not dry_run:
        console.print("[dim]TESTRAIL_ADD_RESULTS is off – nothing submitted.[/]")
        return True

    console.rule("[bold blue]Phase 1 · Load Results")
    results = load_cucumber_results(results_path)
    console.print(f"  Found [cyan]{len(results)}[/] executed scenarios.\n")

    api = _build_api(settings)
    sync = ResultSynchronizer(api, settings)

    if dry_run:
        console.rule("[bold blue]Phase 2 · Build Batch")
        # Creating a run is a write; only read the suite in dry-run mode.
        if settings.run_create_new:
            suite_id = int(settings.require("suite_id"))
        else:
            suite_id = RunResolver(api, settings).resolve().suite_id
        cases = api.get_cases(settings.project_id, suite_id)
        records = sync.build_results(results, cases, suite_id)
        _show_batch(records, [r.scenario_title for r in results])
        console.print("\n[yellow bold]DRY RUN[/] – no results written to TestRail.")
        return True

    console.rule("[bold blue]Phase 2 · Push to TestRail")
    ok = sync.synchronize(results)

    if ok and settings.create_feature_files:
        console.print(
            Panel(
                f"[green bold]Feature files:[/]  written to {settings.features_dir}\n"
                f"[blue bold]Suite:[/]  #{sync.run_context.suite_id}  |  "
                "[dim]No results submitted.[/]",
                title="Feature Generation Summary",
                border_style="green",
            )
        )
    elif ok:
        console.print(
            Panel(
                f"[green bold]Submitted:[/]  {len(results)} results\n"
                f"[blue bold]Run:[/]  #{sync.run_context.run_id}  |  "
                f"[blue bold]Suite:[/]  #{sync.run_context.suite_id}",
                title="Sync Summary",
                border_style="green",
            )
        )
    else:
        console.print("[red]Result synchronization failed – see log above.[/]")
    return ok


def features(settings: Settings, suite_id: int | None, out_dir: str | None) -> None:
    """Fetch suite cases → render feature files."""
    api = _build_api(settings)
    suite = suite_id or int(settings.require("suite_id"))
    writer = FeatureFileWriter(out_dir or settings.features_dir)
    sync = ResultSynchronizer(api, settings, writer=writer)

    console.rule(f"[bold blue]Generate Feature Files · Suite #{suite}")
    documents = sync.generate_feature_files(suite)
    console.print(f"\n  Wrote [cyan]{len(documents)}[/] feature files.")


# ── CLI ─────────────────────────────────────────────────────────────────

def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="testrail-sync",
        description="Synchronize acceptance-test results with TestRail.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug-level logging.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    rep = sub.add_parser("report", help="Submit Cucumber JSON results to TestRail.")
    rep.add_argument("results", help="Cucumber JSON report file or directory.")
    rep.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Build the result batch but do NOT submit it.",
    )

    feat = sub.add_parser("features", help="Generate .feature files from a suite.")
    feat.add_argument("--suite-id", type=int, default=None, help="TestRail suite ID.")
    feat.add_argument("--out", default=None, help="Output directory.")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = _parser().parse_args(argv)

    _configure_logging(args.verbose)

    console.print(
        Panel(
            "[bold white]testrail-sync[/]  –  TestRail result reporter",
            border_style="bright_magenta",
        )
    )

    try:
        settings = Settings.from_env()
        if args.command == "report":
            report(settings, args.results, dry_run=args.dry_run)
        else:
            features(settings, args.suite_id, args.out)
    except ConfigurationError as exc:
        console.print(f"\n[red bold]Configuration error:[/] {exc}")
        sys.exit(2)
    except KeyboardInterrupt:
        console.print("\n[red]Aborted by user.[/]")
        sys.exit(130)
    except Exception as exc:
        console.print(f"\n[red bold]Error:[/] {exc}")
        logging.getLogger("testrail-sync").debug("Traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
