"""Evaluation outcomes and run results.

These types answer: "What did a check, a run, or a whole suite produce?"

IMPORTANT:
- PropertyResult.success is DERIVED from its sub-checks, never stored
- PropertyCounterExample can only be built from a failing PropertyResult
- Result[T] is the tagged wrapper returned at the public API boundary;
  callers branch on .ok instead of catching exceptions
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from govprop.contracts.enums import Severity
from govprop.contracts.errors import CheckFailureReason, PropertyViolation, error_payload


@dataclass(frozen=True)
class Result[T]:
    """Tagged success/failure wrapper.

    Use the factory methods to create instances.

    Invariant: ok=True implies error is None; ok=False implies error is set.
    """

    ok: bool
    data: T | None = None
    error: BaseException | None = None

    def __post_init__(self) -> None:
        if self.ok and self.error is not None:
            raise ValueError("Successful Result must not carry an error")
        if not self.ok and self.error is None:
            raise ValueError("Failed Result MUST carry an error")

    @classmethod
    def success(cls, data: T) -> Result[T]:
        """Wrap a payload."""
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: BaseException) -> Result[T]:
        """Wrap an error."""
        return cls(ok=False, error=error)

    def unwrap(self) -> T:
        """Return the payload, raising the carried error on failure."""
        if not self.ok:
            assert self.error is not None
            raise self.error
        return self.data  # type: ignore[return-value]


@dataclass(frozen=True, slots=True)
class InvariantCheckResult:
    """Outcome of one named sub-check of an invariant.

    Attributes:
        name: Sub-check name (e.g., "quorum_requirement")
        passed: Whether the sub-check held
        severity: Reporting weight
        message: Human-readable explanation
        actual_value: Observed value, if the check compared one
        expected_constraint: The constraint actual_value was compared against
        failure_reason: Structured payload when the sub-check represents a fault
    """

    name: str
    passed: bool
    severity: Severity = Severity.MEDIUM
    message: str | None = None
    actual_value: Any = None
    expected_constraint: Any = None
    failure_reason: CheckFailureReason | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "passed": self.passed,
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.actual_value is not None:
            data["actual_value"] = self.actual_value
        if self.expected_constraint is not None:
            data["expected_constraint"] = self.expected_constraint
        if self.failure_reason is not None:
            data["failure_reason"] = dict(self.failure_reason)
        return data


@dataclass(frozen=True, slots=True)
class PropertyResultMetadata:
    """Per-evaluation metadata.

    Attributes:
        execution_time_ms: Wall-clock time spent in the evaluation
        iteration: Iteration index that produced the input (-1 for shrink/replay)
        memory_peak_kb: Process peak resident set size at evaluation end
        generator_seed: Seed handed to the generator for this input, if captured
    """

    execution_time_ms: float
    iteration: int
    memory_peak_kb: int | None = None
    generator_seed: int | None = None


@dataclass(frozen=True, slots=True)
class PropertyResult:
    """Outcome of evaluating one invariant against one input.

    A skipped result means a precondition rejected the input: it has no
    sub-checks and counts toward neither pass nor fail.
    """

    input: Any
    invariant_checks: tuple[InvariantCheckResult, ...]
    metadata: PropertyResultMetadata
    output: Any = None
    error: BaseException | None = None
    skipped: bool = False

    @property
    def success(self) -> bool:
        """True iff every sub-check passed."""
        return all(check.passed for check in self.invariant_checks)

    @property
    def failed_checks(self) -> tuple[InvariantCheckResult, ...]:
        return tuple(check for check in self.invariant_checks if not check.passed)

    @property
    def is_failure(self) -> bool:
        """True when this evaluation exercised the invariant and it did not hold."""
        return not self.skipped and not self.success

    def violation(self, test_id: str) -> PropertyViolation:
        """Build the counterexample error from the failed sub-checks.

        Raises:
            ValueError: If this result is not a failure
        """
        if not self.is_failure:
            raise ValueError("Cannot derive a violation from a passing or skipped PropertyResult")
        failed = self.failed_checks
        parts = [f"{c.name} [{c.severity.value}]" + (f": {c.message}" if c.message else "") for c in failed]
        return PropertyViolation(
            test_id,
            [c.name for c in failed],
            f"Property '{test_id}' violated - " + "; ".join(parts),
            cause=self.error,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "skipped": self.skipped,
            "input": self.input,
            "output": self.output,
            "error": error_payload(self.error),
            "invariant_checks": [c.to_dict() for c in self.invariant_checks],
            "metadata": {
                "execution_time_ms": self.metadata.execution_time_ms,
                "iteration": self.metadata.iteration,
                "memory_peak_kb": self.metadata.memory_peak_kb,
                "generator_seed": self.metadata.generator_seed,
            },
        }


@dataclass(frozen=True, slots=True)
class PropertyCounterExample:
    """A (possibly shrunk) input for which an invariant failed.

    Use from_result() to create instances; it refuses passing results.

    Attributes:
        test_id: Test the counterexample belongs to
        input: Minimized failing input
        error: PropertyViolation derived from the failed sub-checks
        shrunk: Whether shrinking replaced the original input
        shrinking_steps: Number of accepted shrink steps
        found_at: Discovery timestamp (UTC)
        reproduction: "<test_id> <canonical json>" replay string
        failed_checks: Failed sub-checks of the minimized input
        original_input: Input as first drawn, before shrinking
        iteration: Iteration index at which the failure was drawn
        seed: Generator seed of the original draw, if captured
        replayable: False when the input could not be canonically serialised
    """

    test_id: str
    input: Any
    error: PropertyViolation
    shrunk: bool
    shrinking_steps: int
    found_at: datetime
    reproduction: str
    failed_checks: tuple[InvariantCheckResult, ...]
    original_input: Any = None
    iteration: int = 0
    seed: int | None = None
    replayable: bool = True

    @classmethod
    def from_result(
        cls,
        test_id: str,
        result: PropertyResult,
        *,
        original_input: Any,
        shrinking_steps: int,
        reproduction: str,
        iteration: int,
        seed: int | None,
        replayable: bool = True,
    ) -> PropertyCounterExample:
        """Create a counterexample from the final failing evaluation.

        Raises:
            ValueError: If result is not a failure
        """
        if not result.is_failure:
            raise ValueError(f"Counterexample for '{test_id}' requires a failing PropertyResult")
        return cls(
            test_id=test_id,
            input=result.input,
            error=result.violation(test_id),
            shrunk=shrinking_steps > 0,
            shrinking_steps=shrinking_steps,
            found_at=datetime.now(UTC),
            reproduction=reproduction,
            failed_checks=result.failed_checks,
            original_input=original_input,
            iteration=iteration,
            seed=seed,
            replayable=replayable,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "test_id": self.test_id,
            "input": self.input,
            "original_input": self.original_input,
            "error": error_payload(self.error),
            "shrunk": self.shrunk,
            "shrinking_steps": self.shrinking_steps,
            "found_at": self.found_at.isoformat(),
            "reproduction": self.reproduction,
            "replayable": self.replayable,
            "iteration": self.iteration,
            "seed": self.seed,
            "failed_checks": [c.to_dict() for c in self.failed_checks],
        }


@dataclass(frozen=True, slots=True)
class CoverageInfo:
    """Per-test execution counters.

    Attributes:
        branches_tested: Inputs drawn (iterations run)
        edge_cases_found: Counterexamples found
        invariant_checks: Evaluations that were not skipped by a precondition
        skipped_inputs: Evaluations rejected by a precondition
    """

    branches_tested: int = 0
    edge_cases_found: int = 0
    invariant_checks: int = 0
    skipped_inputs: int = 0


@dataclass(frozen=True, slots=True)
class PropertyTestResult:
    """Per-test rollup of one execution."""

    test_id: str
    test_name: str
    category: str
    success: bool
    iterations: int
    execution_time_ms: float
    counter_examples: tuple[PropertyCounterExample, ...] = ()
    shrinking_steps: int = 0
    coverage_info: CoverageInfo = field(default_factory=CoverageInfo)
    timed_out: bool = False
    seed: int | None = None

    @property
    def final_counter_example(self) -> Any:
        """Minimized input of the last counterexample, or None."""
        if not self.counter_examples:
            return None
        return self.counter_examples[-1].input

    def to_dict(self) -> dict[str, Any]:
        return {
            "test_id": self.test_id,
            "test_name": self.test_name,
            "category": self.category,
            "success": self.success,
            "iterations": self.iterations,
            "execution_time_ms": self.execution_time_ms,
            "timed_out": self.timed_out,
            "seed": self.seed,
            "shrinking_steps": self.shrinking_steps,
            "coverage_info": {
                "branches_tested": self.coverage_info.branches_tested,
                "edge_cases_found": self.coverage_info.edge_cases_found,
                "invariant_checks": self.coverage_info.invariant_checks,
                "skipped_inputs": self.coverage_info.skipped_inputs,
            },
            "counter_examples": [c.to_dict() for c in self.counter_examples],
        }


@dataclass(frozen=True, slots=True)
class PropertyCoverage:
    """Coverage percentages over one aggregate call (0-100 scale)."""

    test_coverage: float
    passing_rate: float
    category_distribution: Mapping[str, int]
    invariant_coverage: float


@dataclass(frozen=True, slots=True)
class PropertyTestSummary:
    """Cross-test rollup. Recomputed on every aggregate call."""

    total_tests: int
    passed_tests: int
    failed_tests: int
    total_iterations: int
    total_execution_time_ms: float
    categories: Mapping[str, tuple[PropertyTestResult, ...]]
    counter_examples: tuple[PropertyCounterExample, ...]
    coverage: PropertyCoverage

    @property
    def executed_tests(self) -> int:
        return self.passed_tests + self.failed_tests

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_tests": self.total_tests,
            "passed_tests": self.passed_tests,
            "failed_tests": self.failed_tests,
            "total_iterations": self.total_iterations,
            "total_execution_time_ms": self.total_execution_time_ms,
            "categories": {name: [r.test_id for r in results] for name, results in self.categories.items()},
            "counter_examples": [c.to_dict() for c in self.counter_examples],
            "coverage": {
                "test_coverage": self.coverage.test_coverage,
                "passing_rate": self.coverage.passing_rate,
                "category_distribution": dict(self.coverage.category_distribution),
                "invariant_coverage": self.coverage.invariant_coverage,
            },
        }
