# tests/unit/engine/test_framework.py
"""Tests for PropertyTestingFramework: the Result-returning public API."""

from __future__ import annotations

import asyncio
import random

import pytest

from govprop.contracts import (
    AggregateExecutionError,
    ExecutionConfig,
    GeneratorFault,
    GeneratorNotFoundError,
    PropertyCategory,
    PropertyGenerator,
    ReproductionError,
    TestNotFoundError,
)
from govprop.core.config import GovpropSettings
from govprop.engine import MockClock, PropertyTestingFramework
from govprop.generators import integers
from tests.helpers.builders import broken_generator, make_test

# =============================================================================
# Registration and lookup
# =============================================================================


class TestLookup:
    """Not-found lookups are Result failures, never exceptions."""

    def test_unknown_test(self, framework: PropertyTestingFramework) -> None:
        result = framework.run_test("missing")
        assert result.ok is False
        assert isinstance(result.error, TestNotFoundError)
        assert result.data is None

    def test_get_test_and_generator(self, framework: PropertyTestingFramework) -> None:
        generator = integers("ints", 0, 9)
        framework.register_generator(generator)
        framework.register_test(make_test("t", lambda v: True, ["ints"]))
        assert framework.get_generator("ints").unwrap() is generator
        assert framework.get_test("t").unwrap().id == "t"
        assert isinstance(framework.get_generator("nope").error, GeneratorNotFoundError)
        assert isinstance(framework.get_test("nope").error, TestNotFoundError)

    def test_generate(self, framework: PropertyTestingFramework) -> None:
        framework.register_generator(integers("ints", 0, 9))
        framework.register_generator(broken_generator())
        assert 0 <= framework.generate("ints", random.Random(1)).unwrap() <= 9
        assert isinstance(framework.generate("missing").error, GeneratorNotFoundError)
        fault = framework.generate("broken").error
        assert isinstance(fault, GeneratorFault)
        assert fault.test_id is None

    def test_test_referencing_unknown_generator(self, framework: PropertyTestingFramework) -> None:
        framework.register_test(make_test("orphan", lambda v: True, ["missing"]))
        result = framework.run_test("orphan")
        assert isinstance(result.error, GeneratorNotFoundError)


# =============================================================================
# Single test execution
# =============================================================================


class TestExecuteTest:
    def test_invariant_failure_is_successful_result(self, framework: PropertyTestingFramework) -> None:
        framework.register_test(make_test("below_fifty", lambda v: v < 50, [integers("ints", 0, 99)]))
        result = framework.run_test("below_fifty")
        assert result.ok is True
        assert result.data is not None
        assert result.data.success is False
        assert result.data.final_counter_example == 50

    def test_generator_fault_is_failure(self, framework: PropertyTestingFramework) -> None:
        framework.register_test(make_test("fragile", lambda v: True, [broken_generator()]))
        result = framework.run_test("fragile")
        assert result.ok is False
        assert isinstance(result.error, GeneratorFault)
        assert result.error.test_id == "fragile"

    def test_framework_default_config_applies(self, mock_clock: MockClock) -> None:
        settings = GovpropSettings(execution=ExecutionConfig(iterations=12, seed=5))
        framework = PropertyTestingFramework(settings, clock=mock_clock)
        framework.register_test(make_test("t", lambda v: True, [integers("ints", 0, 9)], use_framework_config=True))
        result = framework.run_test("t").unwrap()
        assert result.iterations == 12
        assert result.seed == 5

    def test_own_config_wins_over_settings(self, mock_clock: MockClock) -> None:
        settings = GovpropSettings(execution=ExecutionConfig(iterations=12))
        framework = PropertyTestingFramework(settings, clock=mock_clock)
        framework.register_test(make_test("t", lambda v: True, [integers("ints", 0, 9)], iterations=4))
        assert framework.run_test("t").unwrap().iterations == 4

    def test_async_api(self, framework: PropertyTestingFramework) -> None:
        framework.register_test(make_test("t", lambda v: True, [integers("ints", 0, 9)], iterations=3))
        result = asyncio.run(framework.execute_test("t"))
        assert result.unwrap().success is True


# =============================================================================
# Aggregate execution
# =============================================================================


class TestExecuteCategory:
    def test_runs_only_matching_tests_in_order(self, framework: PropertyTestingFramework) -> None:
        ints = integers("ints", 0, 9)
        framework.register_test(make_test("a", lambda v: True, [ints], category=PropertyCategory.DATA_INTEGRITY))
        framework.register_test(make_test("b", lambda v: True, [ints], category=PropertyCategory.BUSINESS_RULES))
        framework.register_test(make_test("c", lambda v: True, [ints], category="data_integrity"))
        results = framework.run_category("data_integrity").unwrap()
        assert [r.test_id for r in results] == ["a", "c"]

    def test_unknown_category_is_empty(self, framework: PropertyTestingFramework) -> None:
        assert framework.run_category("nothing_here").unwrap() == []

    def test_fault_aborts_category(self, framework: PropertyTestingFramework) -> None:
        framework.register_test(make_test("good", lambda v: True, [integers("ints", 0, 9)], iterations=2))
        framework.register_test(make_test("bad", lambda v: True, [broken_generator()]))
        result = framework.run_category(PropertyCategory.GOVERNANCE_INVARIANTS)
        assert isinstance(result.error, AggregateExecutionError)
        assert [r.test_id for r in result.error.partial_results] == ["good"]
        assert result.error.partial_summary is None


class TestExecuteAll:
    def test_summary(self, framework: PropertyTestingFramework) -> None:
        ints = integers("ints", 0, 99)
        framework.register_test(make_test("always", lambda v: True, [ints], iterations=10))
        framework.register_test(make_test("below_fifty", lambda v: v < 50, [ints]))
        summary = framework.run_all().unwrap()
        assert summary.total_tests == 2
        assert summary.passed_tests == 1
        assert summary.failed_tests == 1
        assert summary.coverage.passing_rate == 50.0
        assert [c.test_id for c in summary.counter_examples] == ["below_fifty"]

    def test_fault_mid_run_reports_partial_progress(self, framework: PropertyTestingFramework) -> None:
        """Three tests, the second faults: the third never runs."""
        ran: list[int] = []
        framework.register_test(make_test("first", lambda v: True, [integers("ints", 0, 9)], iterations=5))
        framework.register_test(make_test("second", lambda v: True, [broken_generator()]))
        framework.register_test(make_test("third", lambda v: ran.append(v) or True, [integers("ints", 0, 9)]))

        result = framework.run_all()

        assert result.ok is False
        assert result.data is None
        error = result.error
        assert isinstance(error, AggregateExecutionError)
        assert error.test_id == "second"
        assert isinstance(error.cause, GeneratorFault)
        assert [r.test_id for r in error.partial_results] == ["first"]
        assert error.partial_summary is not None
        assert error.partial_summary.total_tests == 3
        assert error.partial_summary.passed_tests == 1
        assert ran == []

    def test_empty_registry(self, framework: PropertyTestingFramework) -> None:
        summary = framework.run_all().unwrap()
        assert summary.total_tests == 0
        assert summary.coverage.test_coverage == 0.0


class TestParallel:
    """Parallel mode keeps registration order in its results."""

    def _framework(self, mock_clock: MockClock, **execution: object) -> PropertyTestingFramework:
        settings = GovpropSettings(
            execution=ExecutionConfig(iterations=20, parallel_execution=True, **execution),  # type: ignore[arg-type]
            parallel_workers=2,
        )
        return PropertyTestingFramework(settings, clock=mock_clock)

    def test_results_in_registration_order(self, mock_clock: MockClock) -> None:
        framework = self._framework(mock_clock, seed=3)
        for name in ["a", "b", "c", "d"]:
            framework.register_test(make_test(name, lambda v: False, [integers("ints", 0, 99)], use_framework_config=True))
        summary = framework.run_all().unwrap()
        assert [r.test_id for r in summary.categories["governance_invariants"]] == ["a", "b", "c", "d"]
        assert summary.failed_tests == 4
        assert len(framework.history) == 4

    def test_sequential_tests_mixed_in(self, mock_clock: MockClock) -> None:
        framework = self._framework(mock_clock, seed=3)
        framework.register_test(make_test("par", lambda v: True, [integers("ints", 0, 9)], use_framework_config=True))
        framework.register_test(make_test("seq", lambda v: True, [integers("ints", 0, 9)], iterations=3))
        results = framework.run_category(PropertyCategory.GOVERNANCE_INVARIANTS).unwrap()
        assert [(r.test_id, r.iterations) for r in results] == [("par", 20), ("seq", 3)]

    def test_fault_in_worker(self, mock_clock: MockClock) -> None:
        framework = self._framework(mock_clock)
        framework.register_test(make_test("ok", lambda v: True, [integers("ints", 0, 9)], use_framework_config=True))
        framework.register_test(make_test("bad", lambda v: True, [broken_generator()], use_framework_config=True))
        result = framework.run_all()
        assert isinstance(result.error, AggregateExecutionError)
        assert result.error.test_id == "bad"
        assert [r.test_id for r in result.error.partial_results] == ["ok"]


# =============================================================================
# Replay
# =============================================================================


class TestReplay:
    def _failing_framework(self, framework: PropertyTestingFramework) -> PropertyTestingFramework:
        framework.register_generator(integers("ints", 0, 99))
        framework.register_test(make_test("below_fifty", lambda v: v < 50, ["ints"]))
        return framework

    def test_reproduce_round_trip(self, framework: PropertyTestingFramework) -> None:
        self._failing_framework(framework)
        example = framework.run_test("below_fifty").unwrap().counter_examples[0]
        replayed = asyncio.run(framework.reproduce(example.reproduction)).unwrap()
        assert replayed.is_failure is True
        assert replayed.input == example.input

    def test_tuple_counterexample_never_replays_as_list(self, framework: PropertyTestingFramework) -> None:
        pairs: PropertyGenerator[tuple[int, int]] = PropertyGenerator(id="pairs", name="Pairs", generate=lambda rng: (3, 3))
        framework.register_generator(pairs)
        framework.register_test(make_test("distinct", lambda p: p != (3, 3), ["pairs"]))
        example = framework.run_test("distinct").unwrap().counter_examples[0]
        assert example.replayable is False
        assert example.reproduction == "distinct repr:(3, 3)"
        result = asyncio.run(framework.reproduce(example.reproduction))
        assert isinstance(result.error, ReproductionError)

    def test_tuple_counterexample_replays_through_decode(self, framework: PropertyTestingFramework) -> None:
        pairs: PropertyGenerator[tuple[int, int]] = PropertyGenerator(
            id="pairs", name="Pairs", generate=lambda rng: (3, 3), decode=tuple
        )
        framework.register_generator(pairs)
        framework.register_test(make_test("distinct", lambda p: p != (3, 3), ["pairs"]))
        example = framework.run_test("distinct").unwrap().counter_examples[0]
        assert example.replayable is True
        replayed = asyncio.run(framework.reproduce(example.reproduction)).unwrap()
        assert replayed.is_failure is True
        assert replayed.input == (3, 3)

    def test_reproduce_handwritten_string(self, framework: PropertyTestingFramework) -> None:
        self._failing_framework(framework)
        assert asyncio.run(framework.reproduce("below_fifty 10")).unwrap().success is True

    def test_reproduce_unknown_test(self, framework: PropertyTestingFramework) -> None:
        result = asyncio.run(framework.reproduce("missing 1"))
        assert isinstance(result.error, TestNotFoundError)

    def test_reproduce_malformed(self, framework: PropertyTestingFramework) -> None:
        result = asyncio.run(framework.reproduce("no_payload"))
        assert isinstance(result.error, ReproductionError)

    def test_reproduce_undecodable_payload(self, framework: PropertyTestingFramework) -> None:
        self._failing_framework(framework)
        result = asyncio.run(framework.reproduce('below_fifty "not a number"'))
        assert isinstance(result.error, ReproductionError)
        assert "could not decode" in str(result.error)

    def test_replay_seed_redraws_original(self, framework: PropertyTestingFramework) -> None:
        self._failing_framework(framework)
        example = framework.run_test("below_fifty").unwrap().counter_examples[0]
        assert example.seed is not None
        replayed = asyncio.run(framework.replay_seed("below_fifty", example.seed)).unwrap()
        assert replayed.input == example.original_input
        assert replayed.is_failure is True
        assert replayed.metadata.generator_seed == example.seed

    def test_replay_seed_broken_generator(self, framework: PropertyTestingFramework) -> None:
        framework.register_test(make_test("fragile", lambda v: True, [broken_generator()]))
        result = asyncio.run(framework.replay_seed("fragile", 1))
        assert isinstance(result.error, GeneratorFault)
        assert isinstance(result.error.__cause__, RuntimeError)


# =============================================================================
# History
# =============================================================================


class TestHistory:
    def test_bounded_oldest_first(self, mock_clock: MockClock) -> None:
        framework = PropertyTestingFramework(GovpropSettings(history_limit=2), clock=mock_clock)
        for name in ["a", "b", "c"]:
            framework.register_test(make_test(name, lambda v: True, [integers("ints", 0, 9)], iterations=1))
            framework.run_test(name)
        assert [execution.test.id for execution in framework.history] == ["b", "c"]

    def test_faulted_runs_recorded(self, framework: PropertyTestingFramework) -> None:
        framework.register_test(make_test("fragile", lambda v: True, [broken_generator()]))
        framework.run_test("fragile")
        assert len(framework.history) == 1

    @pytest.mark.parametrize("limit", [0])
    def test_zero_limit_keeps_nothing(self, mock_clock: MockClock, limit: int) -> None:
        framework = PropertyTestingFramework(GovpropSettings(history_limit=limit), clock=mock_clock)
        framework.register_test(make_test("t", lambda v: True, [integers("ints", 0, 9)], iterations=1))
        framework.run_test("t")
        assert framework.history == ()
