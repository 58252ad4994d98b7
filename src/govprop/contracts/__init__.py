"""Shared contracts: definitions supplied by callers and results produced by the engine.

Usage:
    from govprop.contracts import PropertyTest, PropertyGenerator, PropertyInvariant
    from govprop.contracts import Result, PropertyTestResult, PropertyTestSummary
"""

from govprop.contracts.enums import (
    ExecutionState,
    GeneratorType,
    PropertyCategory,
    Severity,
    ShrinkStrategyKind,
)
from govprop.contracts.errors import (
    AggregateExecutionError,
    CheckFailureReason,
    GeneratorFault,
    GeneratorNotFoundError,
    InvalidPropertyTestError,
    PropertyTestingError,
    PropertyViolation,
    ReproductionError,
    TestNotFoundError,
)
from govprop.contracts.property import (
    CheckOutcome,
    CheckReport,
    ExecutionConfig,
    GeneratorConstraints,
    GeneratorDistribution,
    PropertyExample,
    PropertyGenerator,
    PropertyInvariant,
    PropertyTest,
    ShrinkingStrategy,
)
from govprop.contracts.results import (
    CoverageInfo,
    InvariantCheckResult,
    PropertyCounterExample,
    PropertyCoverage,
    PropertyResult,
    PropertyResultMetadata,
    PropertyTestResult,
    PropertyTestSummary,
    Result,
)

__all__ = [
    "AggregateExecutionError",
    "CheckFailureReason",
    "CheckOutcome",
    "CheckReport",
    "CoverageInfo",
    "ExecutionConfig",
    "ExecutionState",
    "GeneratorConstraints",
    "GeneratorDistribution",
    "GeneratorFault",
    "GeneratorNotFoundError",
    "GeneratorType",
    "InvalidPropertyTestError",
    "InvariantCheckResult",
    "PropertyCategory",
    "PropertyCounterExample",
    "PropertyCoverage",
    "PropertyExample",
    "PropertyGenerator",
    "PropertyInvariant",
    "PropertyResult",
    "PropertyResultMetadata",
    "PropertyTest",
    "PropertyTestResult",
    "PropertyTestSummary",
    "PropertyTestingError",
    "PropertyViolation",
    "ReproductionError",
    "Result",
    "Severity",
    "ShrinkStrategyKind",
    "ShrinkingStrategy",
    "TestNotFoundError",
]
