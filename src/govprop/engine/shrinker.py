# src/govprop/engine/shrinker.py
"""Greedy counterexample minimization.

Algorithm (greedy local descent, not exhaustive search):

    current := failing input
    repeat up to max_steps times:
        for candidate in candidates(current), in the order proposed:
            if candidate still fails:
                current := candidate; steps += 1; restart the scan
        if no candidate failed: stop, current is a local minimum

The shrinker never accepts a candidate that passes or is skipped by a
precondition. Termination is guaranteed by the step bound regardless of
what the candidate function proposes.

The shrinker itself is policy-agnostic: ShrinkStrategyKind is forwarded to
the generator's shrink(), except for CUSTOM where the strategy's own
candidate function replaces the generator entirely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from govprop.contracts.enums import ShrinkStrategyKind
from govprop.contracts.errors import GeneratorFault
from govprop.contracts.property import PropertyGenerator, PropertyTest, ShrinkingStrategy
from govprop.contracts.results import PropertyResult
from govprop.engine.clock import DEFAULT_CLOCK, Clock
from govprop.engine.evaluator import InvariantEvaluator

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ShrinkOutcome:
    """Result of one shrink pass.

    Attributes:
        minimized_input: Smallest failing input reached
        steps_taken: Accepted replacements (0 means nothing smaller failed)
        final_result: Failing evaluation of minimized_input
        candidates_evaluated: Candidates checked, accepted or not
        budget_exhausted: True if the optional shrink timeout cut the pass short
    """

    minimized_input: Any
    steps_taken: int
    final_result: PropertyResult
    candidates_evaluated: int = 0
    budget_exhausted: bool = False


class Shrinker:
    """Minimizes failing inputs under a step budget."""

    def __init__(
        self,
        evaluator: InvariantEvaluator | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._evaluator = evaluator if evaluator is not None else InvariantEvaluator()
        self._clock = clock if clock is not None else DEFAULT_CLOCK

    def candidates(
        self,
        generator: PropertyGenerator[Any],
        strategy: ShrinkingStrategy,
        value: Any,
    ) -> list[Any]:
        """Shrink candidates for value under strategy.

        Raises:
            GeneratorFault: If the candidate function raises
        """
        try:
            if strategy.kind == ShrinkStrategyKind.CUSTOM and strategy.custom_shrink is not None:
                return list(strategy.custom_shrink(value))
            return generator.shrink_candidates(value, strategy.kind)
        except Exception as exc:
            raise GeneratorFault(generator.id, exc) from exc

    async def shrink(
        self,
        test: PropertyTest[Any],
        failing_result: PropertyResult,
        strategy: ShrinkingStrategy,
        *,
        generator: PropertyGenerator[Any],
        max_steps: int | None = None,
        timeout_seconds: float | None = None,
    ) -> ShrinkOutcome:
        """Shrink the input of failing_result to a local minimum.

        Args:
            test: Test whose invariant decides "still failing"
            failing_result: Failing evaluation to start from
            strategy: Shrink policy and step budget
            generator: Primary generator (source of candidates)
            max_steps: Extra step cap; the effective bound is min(strategy.max_steps, max_steps)
            timeout_seconds: Optional wall-clock budget, polled before each candidate

        Returns:
            ShrinkOutcome whose final_result is always a failure

        Raises:
            ValueError: If failing_result is not a failure
            GeneratorFault: If the candidate function raises
        """
        if not failing_result.is_failure:
            raise ValueError(f"Shrinking '{test.id}' requires a failing PropertyResult")

        limit = strategy.max_steps if max_steps is None else min(strategy.max_steps, max_steps)
        deadline = None if timeout_seconds is None else self._clock.monotonic() + timeout_seconds

        current = failing_result
        steps = 0
        evaluated = 0
        exhausted = False

        while steps < limit and not exhausted:
            accepted = False
            for candidate in self.candidates(generator, strategy, current.input):
                if deadline is not None and self._clock.monotonic() >= deadline:
                    exhausted = True
                    logger.info("shrink_budget_exhausted", test_id=test.id, steps=steps, evaluated=evaluated)
                    break
                result = await self._evaluator.check(test.invariant, candidate)
                evaluated += 1
                if result.is_failure:
                    current = result
                    steps += 1
                    accepted = True
                    logger.debug("shrink_step_accepted", test_id=test.id, step=steps)
                    break
            if not accepted:
                break

        return ShrinkOutcome(
            minimized_input=current.input,
            steps_taken=steps,
            final_result=current,
            candidates_evaluated=evaluated,
            budget_exhausted=exhausted,
        )
