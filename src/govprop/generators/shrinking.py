# src/govprop/generators/shrinking.py
"""Shrink candidate policies shared by the built-in generators.

Every function returns candidates ordered most aggressive first, never
includes the value itself, and returns [] when the value is already
minimal. Policies:

- MINIMAL: jump straight to the target, then successively halve the jump
- LINEAR: a single step toward the target
- BINARY: the midpoint toward the target, falling back to a single step
- CUSTOM: [] (the test's ShrinkingStrategy supplies candidates instead)
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from typing import Any

from govprop.contracts.enums import ShrinkStrategyKind

# Halvings proposed under MINIMAL for floats (ints halve down to a distance of 1)
FLOAT_HALVINGS = 8


def dedupe(candidates: Sequence[Any], original: Any) -> list[Any]:
    """Drop repeats and the original value, keeping first-seen order.

    Works on unhashable values (lists, dicts) by equality.
    """
    unique: list[Any] = []
    for candidate in candidates:
        if candidate == original or candidate in unique:
            continue
        unique.append(candidate)
    return unique


def shrink_integer(value: int, target: int, kind: ShrinkStrategyKind) -> list[int]:
    """Integer candidates moving value toward target."""
    if value == target or kind == ShrinkStrategyKind.CUSTOM:
        return []
    distance = abs(value - target)
    sign = 1 if value > target else -1

    if kind == ShrinkStrategyKind.LINEAR:
        return [value - sign]
    if kind == ShrinkStrategyKind.BINARY:
        return dedupe([target + sign * (distance // 2), value - sign], value)

    candidates: list[int] = []
    step = distance
    while step > 0:
        candidates.append(value - sign * step)
        step //= 2
    return dedupe(candidates, value)


def shrink_float(value: float, target: float, kind: ShrinkStrategyKind) -> list[float]:
    """Float candidates moving value toward target.

    Non-finite values shrink straight to the target under every policy
    except CUSTOM.
    """
    if value == target or kind == ShrinkStrategyKind.CUSTOM:
        return []
    if not math.isfinite(value):
        return [target]
    delta = value - target

    if kind == ShrinkStrategyKind.LINEAR:
        step = min(1.0, abs(delta))
        return [value - math.copysign(step, delta)]
    if kind == ShrinkStrategyKind.BINARY:
        return dedupe([target + delta / 2], value)

    candidates = [target]
    truncated = float(math.trunc(value))
    if min(target, value) <= truncated <= max(target, value):
        candidates.append(truncated)
    candidates.extend(value - delta / 2**k for k in range(1, FLOAT_HALVINGS + 1))
    return dedupe(candidates, value)


def shrink_sequence[T](
    items: Sequence[T],
    kind: ShrinkStrategyKind,
    *,
    min_length: int = 0,
    element: Callable[[T, ShrinkStrategyKind], Sequence[T]] | None = None,
) -> list[list[T]]:
    """Sequence candidates: shorter sequences first, then element-wise shrinks.

    Args:
        items: Sequence to shrink
        kind: Policy
        min_length: Candidates never go below this length
        element: Optional shrink for individual elements
    """
    if kind == ShrinkStrategyKind.CUSTOM:
        return []
    current = list(items)
    length = len(current)
    half = max(min_length, length // 2)
    candidates: list[list[T]] = []

    if length > min_length:
        if kind == ShrinkStrategyKind.MINIMAL:
            candidates.append(current[:min_length])
            candidates.append(current[:half])
            candidates.extend(current[:i] + current[i + 1 :] for i in range(length))
        elif kind == ShrinkStrategyKind.BINARY:
            candidates.append(current[:half])
            if length - half >= min_length:
                candidates.append(current[half:])
            candidates.append(current[:-1])
        else:
            candidates.append(current[:-1])

    if element is not None:
        for index, item in enumerate(current):
            replacements = list(element(item, kind))
            if kind == ShrinkStrategyKind.LINEAR:
                replacements = replacements[:1]
            candidates.extend(current[:index] + [replacement] + current[index + 1 :] for replacement in replacements)

    return dedupe(candidates, current)
