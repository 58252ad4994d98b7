# src/govprop/core/canonical.py
"""
Canonical JSON serialization for reproduction strings.

Two-phase approach:
1. Normalize: Convert numpy, datetime, dataclass and enum values to JSON-safe primitives (our code)
2. Serialize: Produce compact JSON with sorted keys (orjson, OPT_SORT_KEYS)

IMPORTANT: NaN and Infinity are strictly REJECTED, not silently converted.
A counterexample containing them cannot be replayed from its JSON form and
is reported as non-replayable instead.
"""

from __future__ import annotations

import base64
import dataclasses
import math
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

import numpy as np
import orjson


def _normalize_value(obj: Any) -> Any:
    """Convert a single value to a JSON-safe primitive.

    NaN Policy: STRICT REJECTION
    - NaN and Infinity are invalid for float AND Decimal
    - Use None for intentional missing values

    Raises:
        ValueError: If value contains NaN or Infinity
    """
    # Check for NaN/Infinity FIRST (before type coercion)
    if isinstance(obj, float | np.floating):
        if math.isnan(obj) or math.isinf(obj):
            raise ValueError(f"Cannot canonicalize non-finite float: {obj}. Use None for missing values, not NaN.")
        if isinstance(obj, np.floating):
            return float(obj)
        return obj

    # Enums before primitives: StrEnum/IntEnum members are also str/int
    if isinstance(obj, Enum):
        return _normalize_value(obj.value)

    if obj is None or isinstance(obj, str | int | bool):
        return obj

    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.ndarray):
        return [_normalize_for_canonical(x) for x in obj.tolist()]

    if isinstance(obj, datetime):
        if obj.tzinfo is None:
            obj = obj.replace(tzinfo=UTC)
        return obj.astimezone(UTC).isoformat()
    if isinstance(obj, date):
        return obj.isoformat()

    if isinstance(obj, bytes):
        return {"__bytes__": base64.b64encode(obj).decode("ascii")}

    if isinstance(obj, Decimal):
        if not obj.is_finite():
            raise ValueError(f"Cannot canonicalize non-finite Decimal: {obj}. Use None for missing values, not NaN/Infinity.")
        return str(obj)

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return _normalize_for_canonical({f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)})

    return obj


def _normalize_for_canonical(data: Any) -> Any:
    """Recursively normalize a data structure for canonical JSON.

    Raises:
        ValueError: If data contains NaN, Infinity, or other non-finite values
    """
    if isinstance(data, dict):
        return {str(k): _normalize_for_canonical(v) for k, v in data.items()}
    if isinstance(data, list | tuple):
        return [_normalize_for_canonical(v) for v in data]
    if isinstance(data, set | frozenset):
        return sorted((_normalize_for_canonical(v) for v in data), key=lambda v: orjson.dumps(v, option=orjson.OPT_SORT_KEYS))
    return _normalize_value(data)


def canonical_json(obj: Any) -> str:
    """Produce canonical JSON (no whitespace, sorted keys).

    Raises:
        ValueError: If data contains NaN, Infinity, or other non-finite values
        TypeError: If data contains types that cannot be serialized (orjson.JSONEncodeError)
    """
    normalized = _normalize_for_canonical(obj)
    result: bytes = orjson.dumps(normalized, option=orjson.OPT_SORT_KEYS)
    return result.decode("utf-8")
