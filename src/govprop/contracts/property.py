"""Definitions supplied by callers: generators, invariants, tests.

All definition types are immutable once constructed. A PropertyGenerator's
only moving part is the random.Random handed to generate() on each draw,
which is owned by the execution engine, not the generator.

Generic parameter T ties a test's invariant to the value type its
generators produce:

    meetings: PropertyGenerator[Meeting] = PropertyGenerator(
        id="meeting_scenario", name="Board Meeting", generate=make_meeting
    )
    test: PropertyTest[Meeting] = PropertyTest(
        id="quorum", ..., invariant=PropertyInvariant(check=quorum_holds, ...),
        generators=(meetings,),
    )
"""

from __future__ import annotations

import random
import re
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, Field

from govprop.contracts.enums import GeneratorType, PropertyCategory, Severity, ShrinkStrategyKind
from govprop.contracts.errors import InvalidPropertyTestError
from govprop.contracts.results import InvariantCheckResult

# =============================================================================
# Execution Configuration
# =============================================================================


class ExecutionConfig(BaseModel):
    """Per-test execution bounds."""

    model_config = {"frozen": True, "extra": "forbid"}

    iterations: int = Field(
        default=100,
        gt=0,
        description="Maximum number of inputs drawn per run",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Wall-clock budget, polled between iterations (not preemptive)",
    )
    shrinking_enabled: bool = Field(
        default=True,
        description="Whether failing inputs are shrunk before being reported",
    )
    max_shrinking_steps: int = Field(
        default=100,
        ge=0,
        description="Upper bound on accepted shrink steps (combined with the strategy's max_steps)",
    )
    shrink_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Optional wall-clock budget for shrinking; None means bounded by steps only",
    )
    parallel_execution: bool = Field(
        default=False,
        description="Allow this test to run on a worker thread during aggregate calls",
    )
    seed_generation: bool = Field(
        default=True,
        description="Derive and record a fresh seed for every iteration",
    )
    seed: int | None = Field(
        default=None,
        ge=0,
        description="Run-level seed; None draws a fresh one (still recorded on the result)",
    )


# =============================================================================
# Generators
# =============================================================================


@dataclass(frozen=True, slots=True)
class GeneratorConstraints:
    """Advisory constraints describing a generator's output.

    Documentation and validation only: neither the registry nor the engine
    enforces these. A generator that must respect them does so inside its
    own generate() (e.g., rejection sampling).
    """

    min_value: Any = None
    max_value: Any = None
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    custom: Callable[[Any], bool] | None = None

    def validate(self, value: Any) -> list[str]:
        """Check a value against every declared constraint.

        Returns:
            List of violation messages; empty when the value conforms.
        """
        errors: list[str] = []
        if self.min_value is not None and value < self.min_value:
            errors.append(f"value {value!r} is below min_value {self.min_value!r}")
        if self.max_value is not None and value > self.max_value:
            errors.append(f"value {value!r} is above max_value {self.max_value!r}")
        if self.min_length is not None or self.max_length is not None:
            length = len(value)
            if self.min_length is not None and length < self.min_length:
                errors.append(f"length {length} is below min_length {self.min_length}")
            if self.max_length is not None and length > self.max_length:
                errors.append(f"length {length} is above max_length {self.max_length}")
        if self.pattern is not None and re.fullmatch(self.pattern, str(value)) is None:
            errors.append(f"value {value!r} does not match pattern {self.pattern!r}")
        if self.custom is not None and not self.custom(value):
            errors.append(f"value {value!r} rejected by custom constraint")
        return errors


@dataclass(frozen=True, slots=True)
class GeneratorDistribution:
    """Declared sampling distribution (documentation only)."""

    kind: Literal["uniform", "normal", "exponential", "weighted"] = "uniform"
    parameters: Mapping[str, float] = field(default_factory=dict)
    weights: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class PropertyGenerator[T]:
    """A named producer of random values of type T.

    Attributes:
        id: Registry key
        name: Human-readable name
        generate: Produces a fresh value from the given random source
        type: Documentation tag
        shrink: Optional candidate proposer. Receives the value and the shrink
            policy requested by the test. Candidates must be no larger than
            the value under the generator's own notion of size, ordered most
            aggressive first. An empty list means the value is minimal.
        decode: Optional inverse of canonical JSON serialisation, used to
            rebuild typed values from reproduction strings
        constraints: Advisory constraints
        distribution: Advisory distribution description
    """

    id: str
    name: str
    generate: Callable[[random.Random], T]
    type: GeneratorType = GeneratorType.CUSTOM
    shrink: Callable[[T, ShrinkStrategyKind], Sequence[T]] | None = None
    decode: Callable[[Any], T] | None = None
    constraints: GeneratorConstraints | None = None
    distribution: GeneratorDistribution | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise InvalidPropertyTestError("PropertyGenerator.id must be a non-empty string")

    @property
    def can_shrink(self) -> bool:
        return self.shrink is not None

    def shrink_candidates(self, value: T, kind: ShrinkStrategyKind) -> list[T]:
        """Candidates for value, or [] when the generator declares no shrink."""
        if self.shrink is None:
            return []
        return list(self.shrink(value, kind))


# =============================================================================
# Invariants
# =============================================================================


@dataclass(frozen=True, slots=True)
class CheckReport:
    """Structured return value of a check function.

    Return this instead of a bare list when the check computes an output
    that postconditions need to see.
    """

    checks: Sequence[InvariantCheckResult]
    output: Any = None


type CheckOutcome = bool | Sequence[InvariantCheckResult] | CheckReport
type CheckFunction[T] = Callable[[T], CheckOutcome | Awaitable[CheckOutcome]]


@dataclass(frozen=True)
class PropertyInvariant[T]:
    """A property every generated input must satisfy.

    The check function decomposes the property into named sub-checks. It may
    be a coroutine function; the engine awaits it before moving on.

    Attributes:
        check: Returns a bool, a sequence of InvariantCheckResult, or a CheckReport
        description: Human description
        severity: Reporting weight; also the severity given to bool outcomes,
            postconditions and faults
        preconditions: Input filters; any False skips the input
        postconditions: Predicates over (input, output), appended as sub-checks
        name: Sub-check name used when check returns a bare bool
    """

    check: CheckFunction[T]
    description: str
    severity: Severity = Severity.MEDIUM
    preconditions: tuple[Callable[[T], bool], ...] = ()
    postconditions: tuple[Callable[[T, Any], bool], ...] = ()
    name: str = "invariant"

    def __post_init__(self) -> None:
        object.__setattr__(self, "preconditions", tuple(self.preconditions))
        object.__setattr__(self, "postconditions", tuple(self.postconditions))


# =============================================================================
# Tests
# =============================================================================


@dataclass(frozen=True, slots=True)
class ShrinkingStrategy:
    """How failing inputs are minimized.

    Attributes:
        enabled: Strategy-level switch (ANDed with ExecutionConfig.shrinking_enabled)
        max_steps: Step budget (the effective bound is the smaller of this
            and ExecutionConfig.max_shrinking_steps)
        kind: Policy handed to the generator's shrink()
        custom_shrink: Candidate function used instead of the generator's
            shrink when kind is CUSTOM
    """

    enabled: bool = True
    max_steps: int = 100
    kind: ShrinkStrategyKind = ShrinkStrategyKind.MINIMAL
    custom_shrink: Callable[[Any], Sequence[Any]] | None = None

    def __post_init__(self) -> None:
        if self.max_steps < 0:
            raise InvalidPropertyTestError(f"ShrinkingStrategy.max_steps must be >= 0, got {self.max_steps}")
        if self.kind == ShrinkStrategyKind.CUSTOM and self.custom_shrink is None:
            raise InvalidPropertyTestError("ShrinkingStrategy with kind='custom' requires custom_shrink")


@dataclass(frozen=True, slots=True)
class PropertyExample:
    """Illustrative input with its expected outcome. Never executed."""

    input: Any
    expected_result: bool
    description: str = ""


@dataclass(frozen=True)
class PropertyTest[T]:
    """A registered property test.

    Attributes:
        id: Registry key, also the prefix of reproduction strings
        name: Human-readable name
        description: What the property asserts
        category: A PropertyCategory or a deployment-specific category string
        invariant: Exactly one invariant
        generators: At least one generator (or generator id resolved against
            the registry at run time). The first is the primary input source.
        shrinking_strategy: How failing inputs are minimized
        examples: Documentation only
        counter_examples: Known-bad inputs, documentation only
        execution_config: Bounds; None means "use the framework defaults"
    """

    id: str
    name: str
    description: str
    category: PropertyCategory | str
    invariant: PropertyInvariant[T]
    generators: tuple[PropertyGenerator[T] | str, ...]
    shrinking_strategy: ShrinkingStrategy = field(default_factory=ShrinkingStrategy)
    examples: tuple[PropertyExample, ...] = ()
    counter_examples: tuple[PropertyExample, ...] = ()
    execution_config: ExecutionConfig | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise InvalidPropertyTestError("PropertyTest.id must be a non-empty string")
        if " " in self.id:
            raise InvalidPropertyTestError(f"PropertyTest.id must not contain spaces: {self.id!r}")
        generators = tuple(self.generators)
        if not generators:
            raise InvalidPropertyTestError(f"PropertyTest '{self.id}' requires at least one generator")
        object.__setattr__(self, "generators", generators)
        object.__setattr__(self, "examples", tuple(self.examples))
        object.__setattr__(self, "counter_examples", tuple(self.counter_examples))

    @property
    def primary_generator(self) -> PropertyGenerator[T] | str:
        return self.generators[0]
