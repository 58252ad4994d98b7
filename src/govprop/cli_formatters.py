# src/govprop/cli_formatters.py
"""Console and JSON rendering of run results for the govprop CLI.

Console output is for humans: one line per test, then the failing
sub-checks and the reproduction string of each counterexample. JSON
output is the to_dict() form of the result; values that are not JSON
types (arbitrary generated inputs) are rendered with repr().
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import typer

from govprop.contracts.results import (
    PropertyCounterExample,
    PropertyResult,
    PropertyTestResult,
    PropertyTestSummary,
)


def to_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, default=repr)


def _echo_counter_example(counter_example: PropertyCounterExample) -> None:
    shrink_info = f"shrunk in {counter_example.shrinking_steps} step(s)" if counter_example.shrunk else "not shrunk"
    typer.echo(f"    counterexample ({shrink_info}): {counter_example.input!r}")
    for check in counter_example.failed_checks:
        message = f": {check.message}" if check.message else ""
        typer.echo(f"      ✗ {check.name} [{check.severity.value}]{message}")
    if counter_example.seed is not None:
        typer.echo(f"    seed: {counter_example.seed}")
    if counter_example.replayable:
        typer.echo(f"    reproduce: govprop reproduce '{counter_example.reproduction}'")
    else:
        typer.echo(f"    reproduction (not replayable): {counter_example.reproduction}")


def echo_test_result(result: PropertyTestResult) -> None:
    """Print one test's outcome."""
    if result.success:
        symbol, colour = "✓", typer.colors.GREEN
    else:
        symbol, colour = "✗", typer.colors.RED
    notes = []
    if result.timed_out:
        notes.append("timed out")
    if result.coverage_info.skipped_inputs:
        notes.append(f"{result.coverage_info.skipped_inputs} skipped")
    suffix = f" ({', '.join(notes)})" if notes else ""
    typer.secho(
        f"{symbol} {result.test_id} [{result.category}] "
        f"{result.iterations} iteration(s), {result.coverage_info.invariant_checks} check(s), "
        f"{result.execution_time_ms:.1f}ms{suffix}",
        fg=colour,
    )
    for counter_example in result.counter_examples:
        _echo_counter_example(counter_example)


def echo_results(results: Sequence[PropertyTestResult]) -> None:
    for result in results:
        echo_test_result(result)
    passed = sum(1 for r in results if r.success)
    typer.echo(f"\n{passed}/{len(results)} passed")


def echo_summary(summary: PropertyTestSummary) -> None:
    """Print every test grouped by category, then totals and coverage."""
    for category, results in summary.categories.items():
        if not results:
            continue
        typer.secho(f"{category}:", bold=True)
        for result in results:
            echo_test_result(result)

    coverage = summary.coverage
    typer.echo(
        f"\n{summary.passed_tests} passed | {summary.failed_tests} failed | "
        f"{summary.total_tests} registered | {summary.total_iterations:,} iterations | "
        f"{summary.total_execution_time_ms:.1f}ms"
    )
    typer.echo(
        f"test coverage {coverage.test_coverage:.1f}% | passing rate {coverage.passing_rate:.1f}% | "
        f"invariant coverage {coverage.invariant_coverage:.1f}%"
    )


def echo_property_result(result: PropertyResult) -> None:
    """Print a single replayed evaluation."""
    if result.skipped:
        typer.secho(f"- skipped by precondition: {result.input!r}", fg=typer.colors.YELLOW)
        return
    if result.success:
        typer.secho(f"✓ invariant holds for {result.input!r}", fg=typer.colors.GREEN)
    else:
        typer.secho(f"✗ invariant fails for {result.input!r}", fg=typer.colors.RED)
    for check in result.invariant_checks:
        mark = "✓" if check.passed else "✗"
        message = f": {check.message}" if check.message else ""
        typer.echo(f"  {mark} {check.name} [{check.severity.value}]{message}")


def echo_error(error: BaseException) -> None:
    typer.secho(f"Error: {error}", fg=typer.colors.RED, err=True)
