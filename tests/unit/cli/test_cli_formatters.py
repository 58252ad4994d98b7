# tests/unit/cli/test_cli_formatters.py
"""Unit tests for CLI result rendering."""

from __future__ import annotations

import asyncio
import json
import math
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock, patch

from govprop.cli_formatters import echo_property_result, echo_test_result, to_json
from govprop.contracts import ExecutionConfig, PropertyGenerator, PropertyTestResult
from govprop.engine import GeneratorRegistry, InvariantEvaluator, PropertyTestExecution
from govprop.generators import fixed_sequence, integers
from tests.helpers.builders import make_test


def _rendered(mock_echo: MagicMock) -> str:
    return "\n".join(str(call.args[0]) for call in mock_echo.call_args_list)


def _failing_result(generator: PropertyGenerator[Any], check: Callable[[Any], Any]) -> PropertyTestResult:
    config = ExecutionConfig(iterations=5, seed=1)
    test = make_test("below_fifty", check, [generator], config=config)
    return asyncio.run(PropertyTestExecution(test, config, generators=GeneratorRegistry()).run())


class TestEchoTestResult:
    """Console rendering of one test's outcome."""

    def test_counterexample_block(self) -> None:
        generator = fixed_sequence("draws", [73], shrink=integers("ints", 0, 99).shrink, decode=int)
        result = _failing_result(generator, lambda v: v < 50)
        with (
            patch("govprop.cli_formatters.typer.echo") as mock_echo,
            patch("govprop.cli_formatters.typer.secho") as mock_secho,
        ):
            echo_test_result(result)
        assert mock_secho.call_args.args[0].startswith("✗ below_fifty")
        rendered = _rendered(mock_echo)
        assert "counterexample (shrunk in" in rendered
        assert "✗ invariant [medium]" in rendered
        assert "govprop reproduce 'below_fifty 50'" in rendered

    def test_non_replayable_counterexample(self) -> None:
        result = _failing_result(fixed_sequence("draws", [math.nan]), lambda v: not math.isnan(v))
        with patch("govprop.cli_formatters.typer.echo") as mock_echo, patch("govprop.cli_formatters.typer.secho"):
            echo_test_result(result)
        assert "reproduction (not replayable): below_fifty repr:nan" in _rendered(mock_echo)


class TestEchoPropertyResult:
    def test_skipped(self) -> None:
        test = make_test("t", lambda v: True, [integers("ints", 0, 9)], preconditions=[lambda v: False])
        result = asyncio.run(InvariantEvaluator().check(test.invariant, 3))
        with patch("govprop.cli_formatters.typer.secho") as mock_secho:
            echo_property_result(result)
        assert "skipped by precondition" in mock_secho.call_args.args[0]


class TestToJson:
    def test_non_json_values_use_repr(self) -> None:
        payload = json.loads(to_json({"value": object()}))
        assert payload["value"].startswith("<object object")
