# src/govprop/engine/aggregator.py
"""Result aggregation across tests.

Folds per-test results into a PropertyTestSummary. Summaries are
recomputed from scratch on every call; nothing is cached between calls.

Coverage definitions (percentages, 0-100):

    test_coverage      = executed / registered
    passing_rate       = passed / executed
    invariant_coverage = tests that performed at least one check / registered

Any ratio whose denominator is zero is reported as 0.0.
"""

from __future__ import annotations

from collections.abc import Sequence

from govprop.contracts.enums import PropertyCategory
from govprop.contracts.results import PropertyCoverage, PropertyTestResult, PropertyTestSummary


def _percent(numerator: int, denominator: int) -> float:
    if denominator == 0:
        return 0.0
    return numerator / denominator * 100


class ResultAggregator:
    """Builds summaries and coverage statistics."""

    def group_by_category(
        self,
        results: Sequence[PropertyTestResult],
    ) -> dict[str, tuple[PropertyTestResult, ...]]:
        """Group results by category.

        Every built-in category is present (possibly empty); deployment
        specific categories are appended in first-seen order.
        """
        groups: dict[str, list[PropertyTestResult]] = {category.value: [] for category in PropertyCategory}
        for result in results:
            groups.setdefault(result.category, []).append(result)
        return {name: tuple(members) for name, members in groups.items()}

    def coverage(
        self,
        results: Sequence[PropertyTestResult],
        registered_tests: int,
    ) -> PropertyCoverage:
        executed = len(results)
        passed = sum(1 for r in results if r.success)
        exercised = sum(1 for r in results if r.coverage_info.invariant_checks > 0)
        distribution = {name: len(members) for name, members in self.group_by_category(results).items()}
        return PropertyCoverage(
            test_coverage=_percent(executed, registered_tests),
            passing_rate=_percent(passed, executed),
            category_distribution=distribution,
            invariant_coverage=_percent(exercised, registered_tests),
        )

    def summarize(
        self,
        results: Sequence[PropertyTestResult],
        registered_tests: int,
    ) -> PropertyTestSummary:
        """Summarize results against the number of registered tests.

        Args:
            results: Results obtained (possibly only those before a fault)
            registered_tests: Size of the registry the run was drawn from
        """
        passed = sum(1 for r in results if r.success)
        return PropertyTestSummary(
            total_tests=registered_tests,
            passed_tests=passed,
            failed_tests=len(results) - passed,
            total_iterations=sum(r.iterations for r in results),
            total_execution_time_ms=sum(r.execution_time_ms for r in results),
            categories=self.group_by_category(results),
            counter_examples=tuple(c for r in results for c in r.counter_examples),
            coverage=self.coverage(results, registered_tests),
        )
