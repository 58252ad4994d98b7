# src/govprop/cli.py
"""CLI for running property test suites.

Usage:
    govprop --suite=myorg.suite list                     # Registered tests
    govprop --suite=myorg.suite run quorum_holds         # One test
    govprop --suite=myorg.suite category business_rules  # One category
    govprop --suite=myorg.suite --preset=thorough all    # Everything
    govprop --suite=myorg.suite reproduce 'quorum_holds {"members":3}'
    govprop --suite=myorg.suite replay quorum_holds 1234567
    govprop presets                                      # List presets

Exit codes: 0 when every executed test passed, 1 when any failed,
2 on a configuration error, an unrecovered fault or an unknown id.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Any

import pydantic
import typer
import yaml

from govprop.cli_formatters import (
    echo_error,
    echo_property_result,
    echo_results,
    echo_summary,
    echo_test_result,
    to_json,
)
from govprop.contracts.errors import AggregateExecutionError
from govprop.contracts.results import PropertyResult, Result
from govprop.core.config import GovpropSettings, list_presets, load_settings
from govprop.core.logging import configure_logging
from govprop.engine.framework import PropertyTestingFramework
from govprop.plugins.loader import SuiteLoader

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_ERROR = 2

app = typer.Typer(
    name="govprop",
    help="govprop: Property-based invariant testing for governance systems.",
    no_args_is_help=True,
)


@dataclass
class CliState:
    """Global options shared by every command."""

    suites: list[str] = field(default_factory=list)
    config_file: Path | None = None
    preset: str | None = None
    seed: int | None = None
    json_output: bool = False
    log_level: str | None = None


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from govprop import __version__

        typer.echo(f"govprop {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    suite: Annotated[
        list[str] | None,
        typer.Option(
            "--suite",
            "-s",
            help="Importable module implementing the suite hooks. Repeatable.",
        ),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to YAML settings file.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
    preset: Annotated[
        str | None,
        typer.Option("--preset", "-p", help="Settings preset. Use 'govprop presets' to list available."),
    ] = None,
    seed: Annotated[
        int | None,
        typer.Option("--seed", help="Run seed for tests without their own execution config.", min=0),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print results as JSON."),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", "-l", help="Log level: DEBUG, INFO, WARNING, ERROR."),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=_version_callback,
            is_eager=True,
            help="Show version.",
        ),
    ] = False,
) -> None:
    """Run property-based invariant tests supplied by suite modules.

    Settings precedence (highest to lowest):
    1. Command-line flags
    2. Config file (--config)
    3. Preset (--preset)
    4. Built-in defaults
    """
    ctx.obj = CliState(
        suites=list(suite or []),
        config_file=config_file,
        preset=preset,
        seed=seed,
        json_output=json_output,
        log_level=log_level.upper() if log_level else None,
    )


def _load_settings(state: CliState) -> GovpropSettings:
    """Layer the global options over preset and config file.

    Exits with EXIT_ERROR on configuration errors.
    """
    cli_overrides: dict[str, Any] = {}
    if state.seed is not None:
        cli_overrides["execution"] = {"seed": state.seed}
    if state.log_level is not None:
        cli_overrides["logging"] = {"level": state.log_level}

    try:
        settings = load_settings(preset=state.preset, config_file=state.config_file, cli_overrides=cli_overrides)
    except FileNotFoundError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(EXIT_ERROR) from e
    except (pydantic.ValidationError, yaml.YAMLError, ValueError) as e:
        typer.secho(f"Configuration error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(EXIT_ERROR) from e
    return settings


def _build_framework(state: CliState) -> PropertyTestingFramework:
    """Load settings, configure logging and install every suite.

    Exits with EXIT_ERROR on configuration or import errors.
    """
    settings = _load_settings(state)
    configure_logging(json_output=settings.logging.json_output, level=settings.logging.level)

    framework = PropertyTestingFramework(settings)
    loader = SuiteLoader()
    try:
        for module_path in state.suites:
            loader.register_module(module_path)
        loader.install(framework)
    except (ImportError, TypeError) as e:
        typer.secho(f"Suite error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(EXIT_ERROR) from e
    return framework


def _unwrap[T](result: Result[T], state: CliState) -> T:
    """Return the payload or report the error and exit with EXIT_ERROR."""
    if result.ok:
        return result.data  # type: ignore[return-value]
    assert result.error is not None
    if state.json_output:
        payload: dict[str, Any] = {"error": {"type": type(result.error).__name__, "message": str(result.error)}}
        if isinstance(result.error, AggregateExecutionError):
            payload["partial_results"] = [r.to_dict() for r in result.error.partial_results]
        typer.echo(to_json(payload))
    else:
        echo_error(result.error)
        if isinstance(result.error, AggregateExecutionError):
            typer.echo(f"Completed before the fault ({len(result.error.partial_results)}):", err=True)
            echo_results(result.error.partial_results)
    raise typer.Exit(EXIT_ERROR)


def _finish_property_result(result: PropertyResult, state: CliState) -> None:
    if state.json_output:
        typer.echo(to_json(result.to_dict()))
    else:
        echo_property_result(result)
    if result.is_failure:
        raise typer.Exit(EXIT_FAILED)


@app.command("list")
def list_tests(ctx: typer.Context) -> None:
    """List registered tests and generators."""
    state: CliState = ctx.obj
    framework = _build_framework(state)
    tests = framework.tests.all()
    if state.json_output:
        typer.echo(
            to_json(
                {
                    "tests": [{"id": t.id, "name": t.name, "category": str(t.category)} for t in tests],
                    "generators": framework.generators.ids(),
                }
            )
        )
        return
    if not tests:
        typer.echo("No tests registered. Pass suite modules with --suite.")
        return
    typer.secho("Registered tests:", fg=typer.colors.GREEN)
    for test in tests:
        typer.echo(f"  - {test.id} [{test.category}] {test.name}")
    typer.echo(f"\n{len(framework.generators)} generator(s) registered")


@app.command("run")
def run_test(
    ctx: typer.Context,
    test_id: Annotated[str, typer.Argument(help="Id of the test to run.")],
) -> None:
    """Run one test."""
    state: CliState = ctx.obj
    framework = _build_framework(state)
    result = _unwrap(asyncio.run(framework.execute_test(test_id)), state)
    if state.json_output:
        typer.echo(to_json(result.to_dict()))
    else:
        echo_test_result(result)
    if not result.success:
        raise typer.Exit(EXIT_FAILED)


@app.command("category")
def run_category(
    ctx: typer.Context,
    category: Annotated[str, typer.Argument(help="Category whose tests to run.")],
) -> None:
    """Run every test in a category."""
    state: CliState = ctx.obj
    framework = _build_framework(state)
    results = _unwrap(asyncio.run(framework.execute_category(category)), state)
    if state.json_output:
        typer.echo(to_json([r.to_dict() for r in results]))
    else:
        echo_results(results)
    if not all(r.success for r in results):
        raise typer.Exit(EXIT_FAILED)


@app.command("all")
def run_all(ctx: typer.Context) -> None:
    """Run every registered test and print the summary."""
    state: CliState = ctx.obj
    framework = _build_framework(state)
    summary = _unwrap(asyncio.run(framework.execute_all()), state)
    if state.json_output:
        typer.echo(to_json(summary.to_dict()))
    else:
        echo_summary(summary)
    if summary.failed_tests:
        raise typer.Exit(EXIT_FAILED)


@app.command("reproduce")
def reproduce(
    ctx: typer.Context,
    reproduction: Annotated[str, typer.Argument(help="Reproduction string printed with a counterexample.")],
) -> None:
    """Re-evaluate a recorded counterexample."""
    state: CliState = ctx.obj
    framework = _build_framework(state)
    _finish_property_result(_unwrap(asyncio.run(framework.reproduce(reproduction)), state), state)


@app.command("replay")
def replay(
    ctx: typer.Context,
    test_id: Annotated[str, typer.Argument(help="Id of the test.")],
    seed: Annotated[int, typer.Argument(help="Iteration seed printed with a counterexample.", min=0)],
) -> None:
    """Re-draw and re-evaluate the original input for an iteration seed."""
    state: CliState = ctx.obj
    framework = _build_framework(state)
    _finish_property_result(_unwrap(asyncio.run(framework.replay_seed(test_id, seed)), state), state)


@app.command()
def presets() -> None:
    """List available settings presets."""
    available = list_presets()
    if not available:
        typer.echo("No presets found.")
        return

    typer.secho("Available presets:", fg=typer.colors.GREEN)
    for name in available:
        typer.echo(f"  - {name}")

    typer.echo()
    typer.echo("Use with: govprop --preset=<name> all")


@app.command("show-config")
def show_config(ctx: typer.Context) -> None:
    """Show the effective settings."""
    state: CliState = ctx.obj
    settings_dict = _load_settings(state).model_dump(mode="json")
    if state.json_output:
        typer.echo(to_json(settings_dict))
    else:
        typer.echo(yaml.safe_dump(settings_dict, default_flow_style=False, sort_keys=False))


def main() -> None:
    """Entry point for govprop CLI."""
    app()


if __name__ == "__main__":
    main()
