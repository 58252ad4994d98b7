# tests/property/engine/test_shrinking_properties.py
"""Property-based tests for the shrinker and the execution loop.

Verifies the guarantees callers rely on:
- A shrunk counterexample still fails
- Shrinking terminates within its step budget
- Threshold properties shrink to exactly the boundary
- A run never draws more inputs than configured
"""

from __future__ import annotations

import asyncio
from typing import Any

from hypothesis import given
from hypothesis import strategies as st

from govprop.contracts import ExecutionConfig, PropertyGenerator, ShrinkingStrategy, ShrinkStrategyKind
from govprop.engine import GeneratorRegistry, InvariantEvaluator, PropertyTestExecution, Shrinker
from govprop.generators import integers
from tests.helpers.builders import make_test
from tests.property.settings import SLOW_SETTINGS, STANDARD_SETTINGS

kinds = st.sampled_from([ShrinkStrategyKind.MINIMAL, ShrinkStrategyKind.LINEAR, ShrinkStrategyKind.BINARY])


def _shrink(test: Any, value: Any, generator: PropertyGenerator[Any], strategy: ShrinkingStrategy) -> Any:
    failing = asyncio.run(InvariantEvaluator().check(test.invariant, value))
    return asyncio.run(Shrinker().shrink(test, failing, strategy, generator=generator))


class TestShrinkOutcome:
    @given(
        low=st.integers(-100, 0),
        high=st.integers(1, 200),
        data=st.data(),
        kind=kinds,
    )
    @STANDARD_SETTINGS
    def test_threshold_shrinks_to_boundary(self, low: int, high: int, data: st.DataObject, kind: ShrinkStrategyKind) -> None:
        """Property: for 'x < t' the minimal failing value is max(t, 0)."""
        threshold = data.draw(st.integers(low + 1, high), label="threshold")
        value = data.draw(st.integers(threshold, high), label="value")
        generator = integers("ints", low, high)
        test = make_test("below", lambda x: x < threshold, [generator])

        outcome = _shrink(test, value, generator, ShrinkingStrategy(kind=kind, max_steps=1000))

        assert outcome.minimized_input == max(threshold, 0)
        assert outcome.final_result.is_failure

    @given(value=st.integers(-10**4, 10**4), modulus=st.integers(2, 7), kind=kinds)
    @STANDARD_SETTINGS
    def test_shrunk_input_still_fails_and_is_no_larger(self, value: int, modulus: int, kind: ShrinkStrategyKind) -> None:
        generator = integers("ints", -(10**4), 10**4)
        residue = value % modulus
        test = make_test("residue", lambda x: x % modulus != residue, [generator])

        outcome = _shrink(test, value, generator, ShrinkingStrategy(kind=kind))

        assert outcome.final_result.is_failure
        assert outcome.minimized_input % modulus == residue
        assert abs(outcome.minimized_input) <= abs(value)

    @given(max_steps=st.integers(0, 60))
    @STANDARD_SETTINGS
    def test_terminates_within_budget(self, max_steps: int) -> None:
        """Property: an endless candidate stream stops after max_steps."""
        generator: PropertyGenerator[int] = PropertyGenerator(
            id="endless", name="Endless", generate=lambda rng: 0, shrink=lambda value, kind: [value - 1]
        )
        test = make_test("never", lambda x: False, [generator])

        outcome = _shrink(test, 0, generator, ShrinkingStrategy(max_steps=max_steps))

        assert outcome.steps_taken == max_steps


class TestExecutionBounds:
    @given(iterations=st.integers(1, 30), seed=st.integers(0, 2**32 - 1))
    @SLOW_SETTINGS
    def test_passing_run_uses_every_iteration(self, iterations: int, seed: int) -> None:
        config = ExecutionConfig(iterations=iterations, seed=seed)
        test = make_test("holds", lambda x: True, [integers("ints", 0, 9)], config=config)
        result = asyncio.run(PropertyTestExecution(test, config, generators=GeneratorRegistry()).run())
        assert result.iterations == iterations
        assert result.coverage_info.invariant_checks == iterations

    @given(iterations=st.integers(1, 30), threshold=st.integers(0, 9), seed=st.integers(0, 2**32 - 1))
    @SLOW_SETTINGS
    def test_failing_run_is_deterministic_and_bounded(self, iterations: int, threshold: int, seed: int) -> None:
        """Property: same seed, same counterexample; never more than N draws."""
        config = ExecutionConfig(iterations=iterations, seed=seed)

        def run() -> Any:
            test = make_test("below", lambda x: x < threshold, [integers("ints", 0, 9)], config=config)
            return asyncio.run(PropertyTestExecution(test, config, generators=GeneratorRegistry()).run())

        first, second = run(), run()
        assert first.iterations <= iterations
        assert len(first.counter_examples) <= 1
        assert first.success == second.success
        assert [c.to_dict()["input"] for c in first.counter_examples] == [c.to_dict()["input"] for c in second.counter_examples]
        assert [c.seed for c in first.counter_examples] == [c.seed for c in second.counter_examples]
