"""Property test engine: registries, evaluation, shrinking, execution, aggregation."""

from govprop.engine.aggregator import ResultAggregator
from govprop.engine.clock import DEFAULT_CLOCK, Clock, MockClock, SystemClock
from govprop.engine.evaluator import (
    CHECK_RAISED,
    POSTCONDITION_RAISED,
    PRECONDITION_RAISED,
    InvariantEvaluator,
)
from govprop.engine.execution import PropertyTestExecution
from govprop.engine.framework import PropertyTestingFramework
from govprop.engine.registry import GeneratorRegistry, TestRegistry
from govprop.engine.reproduction import decode_reproduction, encode_reproduction
from govprop.engine.seeding import SeedSequence, derive_seed, fresh_seed
from govprop.engine.shrinker import ShrinkOutcome, Shrinker

__all__ = [
    "CHECK_RAISED",
    "DEFAULT_CLOCK",
    "POSTCONDITION_RAISED",
    "PRECONDITION_RAISED",
    "Clock",
    "GeneratorRegistry",
    "InvariantEvaluator",
    "MockClock",
    "PropertyTestExecution",
    "PropertyTestingFramework",
    "ResultAggregator",
    "SeedSequence",
    "ShrinkOutcome",
    "Shrinker",
    "SystemClock",
    "TestRegistry",
    "decode_reproduction",
    "derive_seed",
    "encode_reproduction",
    "fresh_seed",
]
