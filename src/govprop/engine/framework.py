# src/govprop/engine/framework.py
"""Public entry point: PropertyTestingFramework.

Every public call returns a Result. Internals raise; this module is the
boundary where exceptions are converted:

- Not-found lookups -> Result.failure(TestNotFoundError | GeneratorNotFoundError)
- Generator faults -> Result.failure(GeneratorFault) for a single test,
  Result.failure(AggregateExecutionError) for category/all calls
- Invariant failures are NOT errors: they are successful Results whose
  PropertyTestResult has success=False

The framework is caller-owned. There is no module-level instance; create
one per suite (or per category) as needed.
"""

from __future__ import annotations

import asyncio
import random
import threading
from collections import deque
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

import structlog

from govprop.contracts.errors import (
    AggregateExecutionError,
    GeneratorFault,
    GeneratorNotFoundError,
    ReproductionError,
    TestNotFoundError,
)
from govprop.contracts.property import ExecutionConfig, PropertyGenerator, PropertyTest
from govprop.contracts.results import PropertyResult, PropertyTestResult, PropertyTestSummary, Result
from govprop.core.config import GovpropSettings
from govprop.engine.aggregator import ResultAggregator
from govprop.engine.clock import DEFAULT_CLOCK, Clock
from govprop.engine.evaluator import InvariantEvaluator
from govprop.engine.execution import PropertyTestExecution
from govprop.engine.registry import GeneratorRegistry, TestRegistry
from govprop.engine.reproduction import decode_reproduction
from govprop.engine.seeding import derive_seed, fresh_seed

logger = structlog.get_logger(__name__)

# Faults that abort a run; anything else escaping a run is a bug and propagates
_RUN_FAULTS = (GeneratorFault, GeneratorNotFoundError)


class PropertyTestingFramework:
    """Registers generators and tests and executes them.

    Example:
        framework = PropertyTestingFramework()
        framework.register_generator(integers("small_ints", 0, 100))
        framework.register_test(PropertyTest(..., generators=("small_ints",)))

        result = await framework.execute_test("below_fifty")
        if result.ok and not result.data.success:
            print(result.data.counter_examples[0].reproduction)
    """

    def __init__(
        self,
        settings: GovpropSettings | None = None,
        *,
        clock: Clock | None = None,
        generators: GeneratorRegistry | None = None,
        tests: TestRegistry | None = None,
    ) -> None:
        self.settings = settings if settings is not None else GovpropSettings()
        self.generators = generators if generators is not None else GeneratorRegistry()
        self.tests = tests if tests is not None else TestRegistry()
        self._clock = clock if clock is not None else DEFAULT_CLOCK
        self._evaluator = InvariantEvaluator()
        self._aggregator = ResultAggregator()
        self._history: deque[PropertyTestExecution] = deque(maxlen=self.settings.history_limit)
        self._history_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Registration and lookup
    # -------------------------------------------------------------------------

    def register_generator(self, generator: PropertyGenerator[Any]) -> None:
        self.generators.register(generator)

    def register_test(self, test: PropertyTest[Any]) -> None:
        self.tests.register(test)

    def get_generator(self, generator_id: str) -> Result[PropertyGenerator[Any]]:
        generator = self.generators.get(generator_id)
        if generator is None:
            return Result.failure(GeneratorNotFoundError(generator_id))
        return Result.success(generator)

    def get_test(self, test_id: str) -> Result[PropertyTest[Any]]:
        test = self.tests.get(test_id)
        if test is None:
            return Result.failure(TestNotFoundError(test_id))
        return Result.success(test)

    def generate(self, generator_id: str, rng: random.Random | None = None) -> Result[Any]:
        """Draw one value from a registered generator."""
        try:
            return Result.success(self.generators.generate(generator_id, rng))
        except _RUN_FAULTS as exc:
            return Result.failure(exc)

    def effective_config(self, test: PropertyTest[Any]) -> ExecutionConfig:
        """The test's own config, or the framework default when it has none."""
        if test.execution_config is not None:
            return test.execution_config
        return self.settings.execution

    @property
    def history(self) -> tuple[PropertyTestExecution, ...]:
        """Most recent executions, oldest first, bounded by settings.history_limit."""
        with self._history_lock:
            return tuple(self._history)

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def execute_test(self, test_id: str) -> Result[PropertyTestResult]:
        """Run one registered test."""
        test = self.tests.get(test_id)
        if test is None:
            return Result.failure(TestNotFoundError(test_id))
        try:
            return Result.success(await self._run(test))
        except _RUN_FAULTS as exc:
            return Result.failure(exc)

    async def execute_category(self, category: str) -> Result[list[PropertyTestResult]]:
        """Run every test in category, in registration order.

        An unknown or empty category yields an empty successful list.
        """
        try:
            return Result.success(await self._run_many(self.tests.by_category(category)))
        except AggregateExecutionError as exc:
            return Result.failure(exc)

    async def execute_all(self) -> Result[PropertyTestSummary]:
        """Run every registered test and summarize.

        On a fault the Result carries an AggregateExecutionError whose
        partial_summary covers only the tests that completed before it.
        """
        registered = len(self.tests)
        try:
            results = await self._run_many(self.tests.all())
        except AggregateExecutionError as exc:
            exc.partial_summary = self._aggregator.summarize(exc.partial_results, registered)
            return Result.failure(exc)
        return Result.success(self._aggregator.summarize(results, registered))

    # -------------------------------------------------------------------------
    # Replay
    # -------------------------------------------------------------------------

    async def reproduce(self, reproduction: str) -> Result[PropertyResult]:
        """Re-evaluate the minimized input recorded in a reproduction string."""
        try:
            test_id, payload = decode_reproduction(reproduction)
        except ReproductionError as exc:
            return Result.failure(exc)

        test = self.tests.get(test_id)
        if test is None:
            return Result.failure(TestNotFoundError(test_id))
        try:
            generator = self.generators.resolve(test.primary_generator)
            value = self._decode(generator, reproduction, payload)
        except (GeneratorNotFoundError, ReproductionError) as exc:
            return Result.failure(exc)

        return Result.success(await self._evaluator.check(test.invariant, value))

    async def replay_seed(self, test_id: str, seed: int) -> Result[PropertyResult]:
        """Re-draw and re-evaluate the original (pre-shrink) input for seed."""
        test = self.tests.get(test_id)
        if test is None:
            return Result.failure(TestNotFoundError(test_id))
        try:
            generator = self.generators.resolve(test.primary_generator)
        except GeneratorNotFoundError as exc:
            return Result.failure(exc)

        try:
            value = self._draw(generator, test_id, seed)
        except GeneratorFault as exc:
            return Result.failure(exc)

        return Result.success(await self._evaluator.check(test.invariant, value, seed=seed))

    # -------------------------------------------------------------------------
    # Synchronous conveniences
    # -------------------------------------------------------------------------

    def run_test(self, test_id: str) -> Result[PropertyTestResult]:
        return asyncio.run(self.execute_test(test_id))

    def run_category(self, category: str) -> Result[list[PropertyTestResult]]:
        return asyncio.run(self.execute_category(category))

    def run_all(self) -> Result[PropertyTestSummary]:
        return asyncio.run(self.execute_all())

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @staticmethod
    def _draw(generator: PropertyGenerator[Any], test_id: str, seed: int) -> Any:
        try:
            return generator.generate(random.Random(seed))
        except Exception as exc:
            raise GeneratorFault(generator.id, exc, test_id=test_id) from exc

    @staticmethod
    def _decode(generator: PropertyGenerator[Any], reproduction: str, payload: Any) -> Any:
        if generator.decode is None:
            return payload
        try:
            return generator.decode(payload)
        except Exception as exc:
            raise ReproductionError(reproduction, f"generator '{generator.id}' could not decode input: {exc}") from exc

    def _remember(self, execution: PropertyTestExecution) -> None:
        with self._history_lock:
            self._history.append(execution)

    async def _run(self, test: PropertyTest[Any], seed: int | None = None) -> PropertyTestResult:
        execution = PropertyTestExecution(
            test,
            self.effective_config(test),
            generators=self.generators,
            evaluator=self._evaluator,
            clock=self._clock,
            seed=seed,
        )
        try:
            return await execution.run()
        finally:
            self._remember(execution)

    def _run_in_worker(self, test: PropertyTest[Any], seed: int) -> PropertyTestResult:
        # Each worker thread gets its own event loop
        return asyncio.run(self._run(test, seed))

    def _runs_in_parallel(self, test: PropertyTest[Any]) -> bool:
        return self.settings.parallel_workers > 1 and self.effective_config(test).parallel_execution

    async def _run_many(self, tests: Sequence[PropertyTest[Any]]) -> list[PropertyTestResult]:
        """Run tests and return their results in registration order.

        Raises:
            AggregateExecutionError: On the first fault in registration order
        """
        parallel = [test for test in tests if self._runs_in_parallel(test)]
        if not parallel:
            return await self._run_sequential(tests)

        base_seed = self.settings.execution.seed
        if base_seed is None:
            base_seed = fresh_seed()
        workers = self.settings.parallel_workers
        logger.debug("parallel_dispatch", tests=len(parallel), workers=workers, base_seed=base_seed)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="govprop") as pool:
            futures: dict[str, Future[PropertyTestResult]] = {
                test.id: pool.submit(
                    self._run_in_worker,
                    test,
                    derive_seed(base_seed, test.id, index % workers),
                )
                for index, test in enumerate(parallel)
            }
            results: list[PropertyTestResult] = []
            for test in tests:
                try:
                    if test.id in futures:
                        results.append(await asyncio.wrap_future(futures[test.id]))
                    else:
                        results.append(await self._run(test))
                except _RUN_FAULTS as exc:
                    for future in futures.values():
                        future.cancel()
                    raise self._abort(test, exc, results) from exc
            return results

    async def _run_sequential(self, tests: Sequence[PropertyTest[Any]]) -> list[PropertyTestResult]:
        results: list[PropertyTestResult] = []
        for test in tests:
            try:
                results.append(await self._run(test))
            except _RUN_FAULTS as exc:
                raise self._abort(test, exc, results) from exc
        return results

    @staticmethod
    def _abort(
        test: PropertyTest[Any],
        exc: BaseException,
        results: list[PropertyTestResult],
    ) -> AggregateExecutionError:
        logger.error(
            "aggregate_aborted",
            test_id=test.id,
            completed=len(results),
            error=f"{type(exc).__name__}: {exc}",
        )
        return AggregateExecutionError(test.id, exc, partial_results=list(results))
