# src/govprop/engine/evaluator.py
"""Invariant evaluation for a single input.

The evaluator is the only place user code runs during a check. It turns
every outcome into a PropertyResult:

- A false precondition -> skipped result (no sub-checks, neither pass nor fail)
- Check function outcome -> ordered sub-checks, then postcondition sub-checks
- Any exception from the check, a precondition or a postcondition -> a
  failed result with one sub-check named for the fault and the exception
  attached. Exceptions never escape to the execution engine.

Check functions may be coroutine functions. The evaluator awaits them
before returning; no other work is scheduled in between.
"""

from __future__ import annotations

import inspect
import sys
import time
import traceback
from collections.abc import Sequence
from typing import Any

import numpy as np

from govprop.contracts.errors import describe_exception
from govprop.contracts.property import CheckReport, PropertyInvariant
from govprop.contracts.results import InvariantCheckResult, PropertyResult, PropertyResultMetadata

CHECK_RAISED = "check_raised"
PRECONDITION_RAISED = "precondition_raised"
POSTCONDITION_RAISED = "postcondition_raised"


def _memory_peak_kb() -> int | None:
    # resource is POSIX-only; metadata carries None elsewhere
    if sys.platform == "win32":
        return None
    import resource

    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # Linux reports kilobytes, macOS bytes
    return peak // 1024 if sys.platform == "darwin" else peak


def _predicate_name(predicate: Any, fallback: str) -> str:
    name = getattr(predicate, "__name__", None)
    if not name or name == "<lambda>":
        return fallback
    return str(name)


class InvariantEvaluator:
    """Evaluates a PropertyInvariant against one input."""

    async def check(
        self,
        invariant: PropertyInvariant[Any],
        value: Any,
        *,
        iteration: int = -1,
        seed: int | None = None,
    ) -> PropertyResult:
        """Evaluate invariant against value.

        Args:
            invariant: The invariant to evaluate
            value: Generated input
            iteration: Iteration index recorded in metadata (-1 outside the main loop)
            seed: Generator seed recorded in metadata

        Returns:
            PropertyResult; skipped=True when a precondition rejected the input
        """
        started = time.perf_counter()

        def metadata() -> PropertyResultMetadata:
            return PropertyResultMetadata(
                execution_time_ms=(time.perf_counter() - started) * 1000,
                iteration=iteration,
                memory_peak_kb=_memory_peak_kb(),
                generator_seed=seed,
            )

        for index, precondition in enumerate(invariant.preconditions):
            try:
                accepted = bool(precondition(value))
            except Exception as exc:
                return self._fault(invariant, value, exc, PRECONDITION_RAISED, "precondition", metadata())
            if not accepted:
                name = _predicate_name(precondition, f"precondition_{index}")
                return PropertyResult(
                    input=value,
                    invariant_checks=(),
                    metadata=metadata(),
                    skipped=True,
                    output={"rejected_by": name},
                )

        try:
            outcome = invariant.check(value)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            checks, output = self._normalize(invariant, outcome)
        except Exception as exc:
            return self._fault(invariant, value, exc, CHECK_RAISED, "check", metadata())

        for index, postcondition in enumerate(invariant.postconditions):
            name = _predicate_name(postcondition, f"postcondition_{index}")
            try:
                held = bool(postcondition(value, output))
            except Exception as exc:
                return self._fault(
                    invariant,
                    value,
                    exc,
                    POSTCONDITION_RAISED,
                    "postcondition",
                    metadata(),
                    prior_checks=checks,
                    output=output,
                )
            checks.append(
                InvariantCheckResult(
                    name=name,
                    passed=held,
                    severity=invariant.severity,
                    message=None if held else f"Postcondition {name} does not hold",
                    actual_value=output,
                )
            )

        return PropertyResult(
            input=value,
            invariant_checks=tuple(checks),
            metadata=metadata(),
            output=output,
        )

    def _normalize(
        self,
        invariant: PropertyInvariant[Any],
        outcome: Any,
    ) -> tuple[list[InvariantCheckResult], Any]:
        """Convert a check function's return value into sub-checks.

        Raises:
            TypeError: If the outcome is not a bool, CheckReport or sequence of InvariantCheckResult
        """
        # numpy comparisons return np.bool_, which is not a bool subclass
        if isinstance(outcome, bool | np.bool_):
            passed = bool(outcome)
            return [
                InvariantCheckResult(
                    name=invariant.name,
                    passed=passed,
                    severity=invariant.severity,
                    message=None if passed else invariant.description,
                )
            ], None

        output = None
        if isinstance(outcome, CheckReport):
            output = outcome.output
            outcome = outcome.checks

        if not isinstance(outcome, Sequence) or isinstance(outcome, str | bytes):
            raise TypeError(
                f"Check function returned {type(outcome).__name__}; expected bool, CheckReport "
                f"or a sequence of InvariantCheckResult"
            )
        checks = list(outcome)
        for item in checks:
            if not isinstance(item, InvariantCheckResult):
                raise TypeError(f"Check function returned a {type(item).__name__} sub-check; expected InvariantCheckResult")
        return checks, output

    def _fault(
        self,
        invariant: PropertyInvariant[Any],
        value: Any,
        exc: Exception,
        check_name: str,
        phase: str,
        metadata: PropertyResultMetadata,
        *,
        prior_checks: list[InvariantCheckResult] | None = None,
        output: Any = None,
    ) -> PropertyResult:
        fault = InvariantCheckResult(
            name=check_name,
            passed=False,
            severity=invariant.severity,
            message=f"{type(exc).__name__}: {exc}",
            failure_reason=describe_exception(exc, phase, traceback=traceback.format_exc()),
        )
        return PropertyResult(
            input=value,
            invariant_checks=(*(prior_checks or ()), fault),
            metadata=metadata,
            output=output,
            error=exc,
        )
