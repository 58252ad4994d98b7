# src/govprop/engine/execution.py
"""Execution engine: the generate -> check -> shrink loop for one test.

State machine per run:

    IDLE -> RUNNING -> ALL_PASSED -> COMPLETED
                    -> TIMED_OUT -> COMPLETED
                    -> FOUND_FAILURE -> SHRINKING -> COMPLETED
                    -> FAULTED

IMPORTANT:
- The run stops at the FIRST failing input. A run therefore reports zero
  or one counterexample.
- The timeout is polled before each iteration, never mid-check. A slow
  check can overrun it; a timed-out run is still a success.
- Skipped inputs consume an iteration but are not counted as checks.
- Generator faults are NOT recovered. They leave the run FAULTED and
  propagate as GeneratorFault.
"""

from __future__ import annotations

import time
from typing import Any

import structlog

from govprop.contracts.enums import ExecutionState
from govprop.contracts.errors import GeneratorFault
from govprop.contracts.property import ExecutionConfig, PropertyGenerator, PropertyTest
from govprop.contracts.results import (
    CoverageInfo,
    PropertyCounterExample,
    PropertyResult,
    PropertyTestResult,
)
from govprop.engine.clock import DEFAULT_CLOCK, Clock
from govprop.engine.evaluator import InvariantEvaluator
from govprop.engine.registry import GeneratorRegistry
from govprop.engine.reproduction import encode_reproduction
from govprop.engine.seeding import SeedSequence, fresh_seed
from govprop.engine.shrinker import Shrinker

logger = structlog.get_logger(__name__)


class PropertyTestExecution:
    """One run of one property test.

    Created per execute_test call and discarded (or kept in the
    framework's history) once run() returns. Owns the only mutable
    state of the run, so it needs no locking.

    Example:
        execution = PropertyTestExecution(test, ExecutionConfig(iterations=50), generators=registry)
        result = await execution.run()
    """

    def __init__(
        self,
        test: PropertyTest[Any],
        config: ExecutionConfig,
        *,
        generators: GeneratorRegistry,
        evaluator: InvariantEvaluator | None = None,
        clock: Clock | None = None,
        seed: int | None = None,
    ) -> None:
        """Prepare a run.

        Args:
            test: Test to execute
            config: Effective bounds for this run
            generators: Registry used to resolve generator ids
            evaluator: Invariant evaluator (a fresh one by default)
            clock: Time source for the run and shrink timeouts
            seed: Base seed used when config.seed is unset (parallel workers
                pass a derived one); a fresh seed is drawn when both are None
        """
        self.test = test
        self.config = config
        self._generators = generators
        self._evaluator = evaluator if evaluator is not None else InvariantEvaluator()
        self._clock = clock if clock is not None else DEFAULT_CLOCK
        self._shrinker = Shrinker(self._evaluator, clock=self._clock)

        if config.seed is not None:
            self.seed = config.seed
        elif seed is not None:
            self.seed = seed
        else:
            self.seed = fresh_seed()

        self.states: list[ExecutionState] = [ExecutionState.IDLE]
        self.counter_examples: list[PropertyCounterExample] = []
        self.iterations_run = 0
        self.checks_performed = 0
        self.skipped_inputs = 0
        self.shrinking_steps = 0
        self.timed_out = False
        self.result: PropertyTestResult | None = None

    @property
    def state(self) -> ExecutionState:
        return self.states[-1]

    def _enter(self, state: ExecutionState) -> None:
        self.states.append(state)

    async def run(self) -> PropertyTestResult:
        """Execute the test once.

        Raises:
            RuntimeError: If this execution has already run
            GeneratorNotFoundError: If the primary generator id is not registered
            GeneratorFault: If the generator raises while drawing or shrinking
        """
        if self.state != ExecutionState.IDLE:
            raise RuntimeError(f"Execution of '{self.test.id}' already ran (state={self.state})")

        test = self.test
        config = self.config
        generator = self._generators.resolve(test.primary_generator)
        seeds = SeedSequence(self.seed, per_iteration=config.seed_generation)

        self._enter(ExecutionState.RUNNING)
        logger.debug(
            "property_test_started",
            test_id=test.id,
            iterations=config.iterations,
            seed=self.seed,
        )

        started = time.perf_counter()
        deadline = self._clock.monotonic() + config.timeout_seconds

        for iteration in range(config.iterations):
            if self._clock.monotonic() >= deadline:
                self.timed_out = True
                self._enter(ExecutionState.TIMED_OUT)
                logger.info(
                    "property_test_timed_out",
                    test_id=test.id,
                    iterations_run=self.iterations_run,
                    timeout_seconds=config.timeout_seconds,
                )
                break

            rng, iteration_seed = seeds.next()
            try:
                value = generator.generate(rng)
            except Exception as exc:
                self._enter(ExecutionState.FAULTED)
                logger.error(
                    "generator_fault",
                    test_id=test.id,
                    generator_id=generator.id,
                    iteration=iteration,
                    error=f"{type(exc).__name__}: {exc}",
                )
                raise GeneratorFault(generator.id, exc, test_id=test.id, iteration=iteration) from exc

            self.iterations_run += 1
            result = await self._evaluator.check(test.invariant, value, iteration=iteration, seed=iteration_seed)

            if result.skipped:
                self.skipped_inputs += 1
                continue
            self.checks_performed += 1

            if result.is_failure:
                self._enter(ExecutionState.FOUND_FAILURE)
                await self._record_failure(generator, result, iteration, iteration_seed)
                break
        else:
            self._enter(ExecutionState.ALL_PASSED)

        self._enter(ExecutionState.COMPLETED)
        self.result = PropertyTestResult(
            test_id=test.id,
            test_name=test.name,
            category=str(test.category),
            success=not self.counter_examples,
            iterations=self.iterations_run,
            execution_time_ms=(time.perf_counter() - started) * 1000,
            counter_examples=tuple(self.counter_examples),
            shrinking_steps=self.shrinking_steps,
            coverage_info=CoverageInfo(
                branches_tested=self.iterations_run,
                edge_cases_found=len(self.counter_examples),
                invariant_checks=self.checks_performed,
                skipped_inputs=self.skipped_inputs,
            ),
            timed_out=self.timed_out,
            seed=self.seed,
        )
        logger.info(
            "property_test_completed",
            test_id=test.id,
            success=self.result.success,
            iterations=self.iterations_run,
            checks=self.checks_performed,
            skipped=self.skipped_inputs,
            timed_out=self.timed_out,
        )
        return self.result

    async def _record_failure(
        self,
        generator: PropertyGenerator[Any],
        result: PropertyResult,
        iteration: int,
        iteration_seed: int | None,
    ) -> None:
        test = self.test
        config = self.config
        strategy = test.shrinking_strategy
        final = result

        if config.shrinking_enabled and strategy.enabled:
            self._enter(ExecutionState.SHRINKING)
            try:
                outcome = await self._shrinker.shrink(
                    test,
                    result,
                    strategy,
                    generator=generator,
                    max_steps=config.max_shrinking_steps,
                    timeout_seconds=config.shrink_timeout_seconds,
                )
            except GeneratorFault as fault:
                self._enter(ExecutionState.FAULTED)
                logger.error("generator_fault", test_id=test.id, generator_id=fault.generator_id, phase="shrink")
                raise GeneratorFault(fault.generator_id, fault.cause, test_id=test.id, iteration=iteration) from fault.cause
            final = outcome.final_result
            self.shrinking_steps = outcome.steps_taken

        reproduction, replayable = encode_reproduction(test.id, final.input, generator)
        counter_example = PropertyCounterExample.from_result(
            test.id,
            final,
            original_input=result.input,
            shrinking_steps=self.shrinking_steps,
            reproduction=reproduction,
            iteration=iteration,
            seed=iteration_seed,
            replayable=replayable,
        )
        self.counter_examples.append(counter_example)
        logger.warning(
            "counterexample_found",
            test_id=test.id,
            iteration=iteration,
            seed=iteration_seed,
            shrinking_steps=self.shrinking_steps,
            failed_checks=[c.name for c in counter_example.failed_checks],
            reproduction=reproduction,
        )
