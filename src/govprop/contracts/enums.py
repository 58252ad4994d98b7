"""Status codes, categories and kinds shared across the engine.

Categories are an open set: the six values here are the built-in
deployment defaults, but a PropertyTest may carry any category string.
"""

from enum import StrEnum


class PropertyCategory(StrEnum):
    """Built-in property test categories.

    Used for grouping in summaries. Deployments may register tests under
    categories not listed here; aggregation treats those as extra groups.
    """

    GOVERNANCE_INVARIANTS = "governance_invariants"
    BUSINESS_RULES = "business_rules"
    SECURITY_CONSTRAINTS = "security_constraints"
    DATA_INTEGRITY = "data_integrity"
    PERFORMANCE_BOUNDS = "performance_bounds"
    COMPLIANCE_RULES = "compliance_rules"


class Severity(StrEnum):
    """Reporting weight of an invariant or sub-check.

    Severity never affects control flow - a LOW failure fails a test
    exactly as hard as a CRITICAL one.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ShrinkStrategyKind(StrEnum):
    """Shrink-candidate policy requested from a generator.

    Values:
        MINIMAL: Propose the target value first, then progressively closer halves
        LINEAR: Propose a single one-step reduction toward the target
        BINARY: Propose the bisection point toward the target
        CUSTOM: The test's ShrinkingStrategy supplies its own candidate function
    """

    MINIMAL = "minimal"
    LINEAR = "linear"
    BINARY = "binary"
    CUSTOM = "custom"


class GeneratorType(StrEnum):
    """Type tag carried by a PropertyGenerator (documentation only)."""

    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    TEXT = "text"
    CHOICE = "choice"
    LIST = "list"
    RECORD = "record"
    UNION = "union"
    CONSTANT = "constant"
    SEQUENCE = "sequence"
    GOVERNANCE_ORGANIZATION = "governance_organization"
    BOARD_MEMBER = "board_member"
    MEETING_SCENARIO = "meeting_scenario"
    ASSET_PERMISSION = "asset_permission"
    VOTING_SCENARIO = "voting_scenario"
    COMPLIANCE_EVENT = "compliance_event"
    AUDIT_TRAIL = "audit_trail"
    CUSTOM = "custom"


class ExecutionState(StrEnum):
    """States of a single PropertyTestExecution.

    IDLE -> RUNNING -> {ALL_PASSED | TIMED_OUT | FOUND_FAILURE}
    FOUND_FAILURE -> SHRINKING -> COMPLETED
    ALL_PASSED / TIMED_OUT -> COMPLETED
    RUNNING -> FAULTED when the generator raises.
    """

    IDLE = "idle"
    RUNNING = "running"
    ALL_PASSED = "all_passed"
    TIMED_OUT = "timed_out"
    FOUND_FAILURE = "found_failure"
    SHRINKING = "shrinking"
    COMPLETED = "completed"
    FAULTED = "faulted"
