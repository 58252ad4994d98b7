"""Error taxonomy and structured failure payloads.

Invariant failures are NOT exceptions - they are PropertyResults with a
failed sub-check. The exceptions here cover the remaining cases:

- Not-found lookups (surfaced to callers as Result failures)
- Generator faults (a broken generate(), aborts the run)
- Aggregate aborts (first fault during execute_category / execute_all)
- Reproduction failures (malformed or non-replayable reproduction strings)
- Construction-time validation of PropertyTest definitions
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NotRequired, TypedDict

if TYPE_CHECKING:
    from govprop.contracts.results import PropertyTestResult, PropertyTestSummary


class CheckFailureReason(TypedDict):
    """Schema for the error payload attached to a faulting sub-check.

    Used by the evaluator when a check function, precondition or
    postcondition raises instead of returning.
    """

    exception: str  # String representation of the exception
    type: str  # Exception class name (e.g., "KeyError")
    phase: str  # "check", "precondition" or "postcondition"
    traceback: NotRequired[str]


class PropertyTestingError(Exception):
    """Base class for all engine errors."""


class InvalidPropertyTestError(PropertyTestingError, ValueError):
    """Raised when a PropertyTest or its configuration is malformed.

    Raised at construction time, never during a run.
    """


class TestNotFoundError(PropertyTestingError, LookupError):
    """Requested test id is not registered."""

    __test__ = False  # not a pytest test class

    def __init__(self, test_id: str) -> None:
        self.test_id = test_id
        super().__init__(f"Property test not found: {test_id}")


class GeneratorNotFoundError(PropertyTestingError, LookupError):
    """Requested generator id is not registered."""

    def __init__(self, generator_id: str) -> None:
        self.generator_id = generator_id
        super().__init__(f"Property generator not found: {generator_id}")


class GeneratorFault(PropertyTestingError):
    """A generator's generate() raised.

    This is a configuration error (a broken generator), not a discovered
    property violation. The execution engine does not recover from it:
    the run is aborted and, in aggregate calls, so is every remaining test.

    Attributes:
        generator_id: Id of the faulting generator
        test_id: Test being executed, or None when raised from a direct generate()
        iteration: Iteration index at which the fault occurred
        cause: The original exception (also chained as __cause__)
    """

    def __init__(
        self,
        generator_id: str,
        cause: BaseException,
        *,
        test_id: str | None = None,
        iteration: int | None = None,
    ) -> None:
        self.generator_id = generator_id
        self.cause = cause
        self.test_id = test_id
        self.iteration = iteration
        where = f" in test '{test_id}' at iteration {iteration}" if test_id is not None else ""
        super().__init__(f"Generator '{generator_id}' raised {type(cause).__name__}{where}: {cause}")


class AggregateExecutionError(PropertyTestingError):
    """An aggregate call was aborted by an unrecovered fault.

    Carries everything obtained before the fault so callers can inspect
    partial progress without it ever being reported as a success payload.

    Attributes:
        test_id: Id of the test whose run faulted
        cause: The underlying fault (usually a GeneratorFault)
        partial_results: Results of the tests that completed before the fault
        partial_summary: Summary computed over partial_results only
            (set by execute_all, None for execute_category)
    """

    def __init__(
        self,
        test_id: str,
        cause: BaseException,
        *,
        partial_results: list[PropertyTestResult],
        partial_summary: PropertyTestSummary | None = None,
    ) -> None:
        self.test_id = test_id
        self.cause = cause
        self.partial_results = partial_results
        self.partial_summary = partial_summary
        super().__init__(
            f"Aggregate execution aborted at test '{test_id}' after {len(partial_results)} completed test(s): {cause}"
        )


class ReproductionError(PropertyTestingError, ValueError):
    """A reproduction string could not be parsed or replayed."""

    def __init__(self, reproduction: str, reason: str) -> None:
        self.reproduction = reproduction
        self.reason = reason
        super().__init__(f"Cannot reproduce {reproduction[:80]!r}: {reason}")


class PropertyViolation(PropertyTestingError):
    """The error attached to a counterexample.

    Built from the failed sub-checks of the failing evaluation. When the
    failure came from a faulting check function, the original exception is
    kept as ``cause`` and chained as __cause__.

    Attributes:
        test_id: Id of the violated test
        failed_checks: Names of the sub-checks that did not pass
        cause: Exception raised by the check function, if any
    """

    def __init__(
        self,
        test_id: str,
        failed_checks: list[str],
        message: str,
        *,
        cause: BaseException | None = None,
    ) -> None:
        self.test_id = test_id
        self.failed_checks = failed_checks
        self.cause = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


def describe_exception(exc: BaseException, phase: str, *, traceback: str | None = None) -> CheckFailureReason:
    """Build a CheckFailureReason payload for a faulting predicate."""
    reason: CheckFailureReason = {
        "exception": str(exc),
        "type": type(exc).__name__,
        "phase": phase,
    }
    if traceback is not None:
        reason["traceback"] = traceback
    return reason


def error_payload(error: BaseException | None) -> dict[str, Any] | None:
    """Serialise an exception for JSON reporting."""
    if error is None:
        return None
    return {"type": type(error).__name__, "message": str(error)}
