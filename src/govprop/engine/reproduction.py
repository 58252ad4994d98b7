# src/govprop/engine/reproduction.py
"""Reproduction strings for counterexamples.

Format: ``"<test_id> <canonical json of the minimized input>"``.

Test ids never contain spaces (PropertyTest rejects them), so the first
space always separates id from payload. An input is only written as JSON
when decoding that JSON (through the generator's decode(), if it has one)
gives back the identical value. Everything else (NaN, tuples, dataclasses
without a decoder, arbitrary objects) is written as
``"<test_id> repr:<repr(value)>"`` so a human can still read it, but it
cannot be replayed.
"""

from __future__ import annotations

from typing import Any

import orjson

from govprop.contracts.errors import ReproductionError
from govprop.contracts.property import PropertyGenerator
from govprop.core.canonical import canonical_json

REPR_PREFIX = "repr:"


def _identical(decoded: Any, value: Any) -> bool:
    """Equality that also requires matching types, container by container.

    Plain == is too loose here: [3, 3] == (3, 3) is False but
    StrEnum("red") == "red" and True == 1 are True.
    """
    if type(decoded) is not type(value):
        return False
    if isinstance(value, dict):
        return decoded.keys() == value.keys() and all(_identical(decoded[k], value[k]) for k in value)
    if isinstance(value, list | tuple):
        return len(decoded) == len(value) and all(_identical(d, v) for d, v in zip(decoded, value, strict=True))
    try:
        return bool(decoded == value)
    except Exception:
        return False


def _replays_identically(payload: str, value: Any, generator: PropertyGenerator[Any] | None) -> bool:
    decoded = orjson.loads(payload)
    if generator is not None and generator.decode is not None:
        try:
            decoded = generator.decode(decoded)
        except Exception:
            return False
    return _identical(decoded, value)


def encode_reproduction(
    test_id: str,
    value: Any,
    generator: PropertyGenerator[Any] | None = None,
) -> tuple[str, bool]:
    """Build the reproduction string for value.

    Args:
        test_id: Test the value failed
        value: Minimized failing input
        generator: Primary generator; its decode() is part of the round trip

    Returns:
        (reproduction, replayable) - replayable is False for the repr fallback
    """
    try:
        payload = canonical_json(value)
    except (ValueError, TypeError):
        return f"{test_id} {REPR_PREFIX}{value!r}", False
    if not _replays_identically(payload, value, generator):
        return f"{test_id} {REPR_PREFIX}{value!r}", False
    return f"{test_id} {payload}", True


def decode_reproduction(reproduction: str) -> tuple[str, Any]:
    """Split a reproduction string into (test_id, decoded JSON payload).

    The payload is plain JSON data; rebuilding typed values is the
    generator's decode() job.

    Raises:
        ReproductionError: If the string is malformed or non-replayable
    """
    test_id, sep, payload = reproduction.strip().partition(" ")
    if not sep or not test_id or not payload:
        raise ReproductionError(reproduction, "expected '<test_id> <json>'")
    if payload.startswith(REPR_PREFIX):
        raise ReproductionError(reproduction, "input was not JSON-serialisable when recorded (non-replayable)")
    try:
        return test_id, orjson.loads(payload)
    except orjson.JSONDecodeError as exc:
        raise ReproductionError(reproduction, f"payload is not valid JSON: {exc}") from exc
