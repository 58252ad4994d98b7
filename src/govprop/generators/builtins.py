# src/govprop/generators/builtins.py
"""Built-in generic generators.

Each factory returns an immutable PropertyGenerator whose generate()
draws only from the random.Random handed in by the engine, so the same
seed always yields the same value. The one exception is fixed_sequence,
which replays canned values in order and ignores the random source.

Domain generators (organizations, meetings, permission matrices) are
composed from these by calling code and supplied through the plugin
hooks; none live here.
"""

from __future__ import annotations

import itertools
import random
import string
import threading
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from govprop.contracts.enums import GeneratorType, ShrinkStrategyKind
from govprop.contracts.errors import InvalidPropertyTestError
from govprop.contracts.property import GeneratorConstraints, GeneratorDistribution, PropertyGenerator
from govprop.core.canonical import canonical_json
from govprop.generators.shrinking import shrink_float, shrink_integer, shrink_sequence

DEFAULT_ALPHABET = string.ascii_letters + string.digits


def _clamp_target(target: Any, min_value: Any, max_value: Any) -> Any:
    return min(max(target, min_value), max_value)


def _check_bounds(generator_id: str, low: Any, high: Any, what: str) -> None:
    if low > high:
        raise InvalidPropertyTestError(f"Generator '{generator_id}': min {what} {low!r} exceeds max {what} {high!r}")


# =============================================================================
# Scalars
# =============================================================================


def integers(
    generator_id: str,
    min_value: int,
    max_value: int,
    *,
    name: str | None = None,
    target: int = 0,
) -> PropertyGenerator[int]:
    """Uniform integers in [min_value, max_value] (inclusive).

    Shrinks toward target, clamped into the range.

    Raises:
        InvalidPropertyTestError: If min_value > max_value
    """
    _check_bounds(generator_id, min_value, max_value, "value")
    goal = _clamp_target(target, min_value, max_value)

    def shrink(value: int, kind: ShrinkStrategyKind) -> list[int]:
        return shrink_integer(value, goal, kind)

    return PropertyGenerator(
        id=generator_id,
        name=name or f"integers[{min_value}, {max_value}]",
        generate=lambda rng: rng.randint(min_value, max_value),
        type=GeneratorType.INTEGER,
        shrink=shrink,
        decode=int,
        constraints=GeneratorConstraints(min_value=min_value, max_value=max_value),
        distribution=GeneratorDistribution(kind="uniform", parameters={"low": min_value, "high": max_value}),
    )


def floats(
    generator_id: str,
    min_value: float,
    max_value: float,
    *,
    name: str | None = None,
    target: float = 0.0,
) -> PropertyGenerator[float]:
    """Uniform finite floats in [min_value, max_value].

    Raises:
        InvalidPropertyTestError: If min_value > max_value
    """
    _check_bounds(generator_id, min_value, max_value, "value")
    goal = _clamp_target(target, min_value, max_value)

    def shrink(value: float, kind: ShrinkStrategyKind) -> list[float]:
        return shrink_float(value, goal, kind)

    return PropertyGenerator(
        id=generator_id,
        name=name or f"floats[{min_value}, {max_value}]",
        generate=lambda rng: rng.uniform(min_value, max_value),
        type=GeneratorType.FLOAT,
        shrink=shrink,
        decode=float,
        constraints=GeneratorConstraints(min_value=min_value, max_value=max_value),
        distribution=GeneratorDistribution(kind="uniform", parameters={"low": min_value, "high": max_value}),
    )


def booleans(generator_id: str, *, name: str | None = None, p_true: float = 0.5) -> PropertyGenerator[bool]:
    """True with probability p_true. True shrinks to False."""

    def shrink(value: bool, kind: ShrinkStrategyKind) -> list[bool]:
        return [False] if value and kind != ShrinkStrategyKind.CUSTOM else []

    return PropertyGenerator(
        id=generator_id,
        name=name or "booleans",
        generate=lambda rng: rng.random() < p_true,
        type=GeneratorType.BOOLEAN,
        shrink=shrink,
        decode=bool,
        distribution=GeneratorDistribution(kind="weighted", weights={"true": p_true, "false": 1 - p_true}),
    )


def text(
    generator_id: str,
    *,
    min_size: int = 0,
    max_size: int = 20,
    alphabet: str = DEFAULT_ALPHABET,
    name: str | None = None,
) -> PropertyGenerator[str]:
    """Strings of alphabet characters with length in [min_size, max_size].

    Shrinks by shortening, then by replacing characters with alphabet[0].

    Raises:
        InvalidPropertyTestError: If the size bounds are inverted or alphabet is empty
    """
    _check_bounds(generator_id, min_size, max_size, "size")
    if not alphabet:
        raise InvalidPropertyTestError(f"Generator '{generator_id}': alphabet must not be empty")
    simplest = alphabet[0]

    def generate(rng: random.Random) -> str:
        length = rng.randint(min_size, max_size)
        return "".join(rng.choice(alphabet) for _ in range(length))

    def shrink_char(char: str, kind: ShrinkStrategyKind) -> list[str]:
        return [] if char == simplest else [simplest]

    def shrink(value: str, kind: ShrinkStrategyKind) -> list[str]:
        return ["".join(chars) for chars in shrink_sequence(value, kind, min_length=min_size, element=shrink_char)]

    return PropertyGenerator(
        id=generator_id,
        name=name or "text",
        generate=generate,
        type=GeneratorType.TEXT,
        shrink=shrink,
        decode=str,
        constraints=GeneratorConstraints(min_length=min_size, max_length=max_size),
    )


def sampled_from[T](
    generator_id: str,
    options: Sequence[T],
    *,
    name: str | None = None,
) -> PropertyGenerator[T]:
    """Uniform choice from options. Shrinks toward earlier options.

    Raises:
        InvalidPropertyTestError: If options is empty
    """
    choices = tuple(options)
    if not choices:
        raise InvalidPropertyTestError(f"Generator '{generator_id}': sampled_from requires at least one option")

    # Canonical JSON -> first option with that form; options JSON cannot carry are left out
    by_json: dict[str, T] = {}
    for option in choices:
        try:
            by_json.setdefault(canonical_json(option), option)
        except (ValueError, TypeError):
            continue

    def shrink(value: T, kind: ShrinkStrategyKind) -> list[T]:
        if value not in choices:
            return []
        index = choices.index(value)
        return [choices[i] for i in shrink_integer(index, 0, kind)]

    def decode(raw: Any) -> T:
        key = canonical_json(raw)
        if key not in by_json:
            raise ValueError(f"{key} is not one of the options")
        return by_json[key]

    return PropertyGenerator(
        id=generator_id,
        name=name or f"sampled_from({len(choices)} options)",
        generate=lambda rng: rng.choice(choices),
        type=GeneratorType.CHOICE,
        shrink=shrink,
        decode=decode,
        constraints=GeneratorConstraints(custom=lambda value: value in choices),
    )


def just[T](generator_id: str, value: T, *, name: str | None = None) -> PropertyGenerator[T]:
    """Always value. Already minimal."""
    return PropertyGenerator(
        id=generator_id,
        name=name or f"just({value!r})",
        generate=lambda rng: value,
        type=GeneratorType.CONSTANT,
    )


def fixed_sequence[T](
    generator_id: str,
    values: Sequence[T],
    *,
    name: str | None = None,
    cycle: bool = True,
    shrink: Callable[[T, ShrinkStrategyKind], Sequence[T]] | None = None,
    decode: Callable[[Any], T] | None = None,
) -> PropertyGenerator[T]:
    """Replay values in order, ignoring the random source.

    For regression suites and deterministic scenario tests. The cursor is
    shared by every run that uses this generator instance.

    Args:
        values: Values to yield
        cycle: Restart from the beginning when exhausted; otherwise generate()
            raises IndexError (a generator fault) once the values run out
        shrink: Optional candidate proposer for the replayed values
        decode: Optional decoder for reproduction strings

    Raises:
        InvalidPropertyTestError: If values is empty
    """
    canned = tuple(values)
    if not canned:
        raise InvalidPropertyTestError(f"Generator '{generator_id}': fixed_sequence requires at least one value")
    cursor = itertools.cycle(canned) if cycle else iter(canned)
    lock = threading.Lock()

    def generate(rng: random.Random) -> T:
        with lock:
            try:
                return next(cursor)
            except StopIteration:
                raise IndexError(f"fixed_sequence '{generator_id}' exhausted after {len(canned)} values") from None

    return PropertyGenerator(
        id=generator_id,
        name=name or f"fixed_sequence({len(canned)} values)",
        generate=generate,
        type=GeneratorType.SEQUENCE,
        shrink=shrink,
        decode=decode,
    )


# =============================================================================
# Composites
# =============================================================================


def lists[T](
    generator_id: str,
    element: PropertyGenerator[T],
    *,
    min_size: int = 0,
    max_size: int = 10,
    name: str | None = None,
) -> PropertyGenerator[list[T]]:
    """Lists of element values with length in [min_size, max_size].

    Shrinks by shortening, then element-wise through element.shrink.

    Raises:
        InvalidPropertyTestError: If the size bounds are inverted
    """
    _check_bounds(generator_id, min_size, max_size, "size")

    def generate(rng: random.Random) -> list[T]:
        return [element.generate(rng) for _ in range(rng.randint(min_size, max_size))]

    def shrink(value: list[T], kind: ShrinkStrategyKind) -> list[list[T]]:
        return shrink_sequence(value, kind, min_length=min_size, element=element.shrink)

    def decode(raw: Any) -> list[T]:
        if element.decode is None:
            return list(raw)
        return [element.decode(item) for item in raw]

    return PropertyGenerator(
        id=generator_id,
        name=name or f"lists({element.name})",
        generate=generate,
        type=GeneratorType.LIST,
        shrink=shrink,
        decode=decode,
        constraints=GeneratorConstraints(min_length=min_size, max_length=max_size),
    )


def fixed_dicts(
    generator_id: str,
    fields: Mapping[str, PropertyGenerator[Any]],
    *,
    name: str | None = None,
) -> PropertyGenerator[dict[str, Any]]:
    """Records with one value per field, drawn in field order.

    Shrinks one field at a time, in field order.
    """
    schema = dict(fields)

    def generate(rng: random.Random) -> dict[str, Any]:
        return {key: generator.generate(rng) for key, generator in schema.items()}

    def shrink(value: dict[str, Any], kind: ShrinkStrategyKind) -> list[dict[str, Any]]:
        candidates: list[dict[str, Any]] = []
        for key, generator in schema.items():
            if key not in value:
                continue
            for replacement in generator.shrink_candidates(value[key], kind):
                candidates.append({**value, key: replacement})
        return candidates

    def decode(raw: Any) -> dict[str, Any]:
        record = dict(raw)
        for key, generator in schema.items():
            if key in record and generator.decode is not None:
                record[key] = generator.decode(record[key])
        return record

    return PropertyGenerator(
        id=generator_id,
        name=name or f"fixed_dicts({', '.join(schema)})",
        generate=generate,
        type=GeneratorType.RECORD,
        shrink=shrink,
        decode=decode,
    )


def one_of(
    generator_id: str,
    *options: PropertyGenerator[Any],
    name: str | None = None,
) -> PropertyGenerator[Any]:
    """Draw from one of options, chosen uniformly.

    A union cannot tell which option produced a value, so it does not
    shrink; use a CUSTOM ShrinkingStrategy when shrinking matters.

    Raises:
        InvalidPropertyTestError: If no options are given
    """
    if not options:
        raise InvalidPropertyTestError(f"Generator '{generator_id}': one_of requires at least one option")
    choices = tuple(options)

    def generate(rng: random.Random) -> Any:
        return rng.choice(choices).generate(rng)

    return PropertyGenerator(
        id=generator_id,
        name=name or f"one_of({', '.join(option.name for option in choices)})",
        generate=generate,
        type=GeneratorType.UNION,
    )
