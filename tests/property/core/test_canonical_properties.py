# tests/property/core/test_canonical_properties.py
"""Property-based tests for canonical JSON and reproduction strings.

A reproduction string is only useful if the same input always encodes
to the same text and decodes back to an equal value.
"""

from __future__ import annotations

from typing import Any

from hypothesis import given
from hypothesis import strategies as st

from govprop.core.canonical import canonical_json
from govprop.engine import decode_reproduction, encode_reproduction
from tests.property.settings import DETERMINISM_SETTINGS, STANDARD_SETTINGS

_MAX_SAFE_INT = 2**53 - 1

json_primitives = (
    st.none()
    | st.booleans()
    | st.integers(min_value=-_MAX_SAFE_INT, max_value=_MAX_SAFE_INT)
    | st.floats(allow_nan=False, allow_infinity=False)
    | st.text(max_size=50)
)

json_values = st.recursive(
    json_primitives,
    lambda children: st.lists(children, max_size=8) | st.dictionaries(st.text(max_size=20), children, max_size=8),
    max_leaves=40,
)

test_ids = st.from_regex(r"[a-z][a-z0-9_]{0,30}", fullmatch=True)


class TestCanonicalDeterminism:
    @given(data=st.dictionaries(st.text(max_size=20), json_primitives, max_size=20))
    @DETERMINISM_SETTINGS
    def test_key_order_irrelevant(self, data: dict[str, Any]) -> None:
        """Property: reversed insertion order yields identical JSON."""
        reordered = dict(reversed(list(data.items())))
        assert canonical_json(data) == canonical_json(reordered)

    @given(data=json_values)
    @STANDARD_SETTINGS
    def test_no_whitespace_outside_strings(self, data: Any) -> None:
        """Property: compact output never starts or ends with whitespace."""
        encoded = canonical_json(data)
        assert encoded == encoded.strip()


class TestReproductionStrings:
    @given(test_id=test_ids, value=json_values)
    @DETERMINISM_SETTINGS
    def test_decode_recovers_input(self, test_id: str, value: Any) -> None:
        """Property: every JSON-representable input replays to an equal value."""
        reproduction, replayable = encode_reproduction(test_id, value)
        assert replayable is True
        assert decode_reproduction(reproduction) == (test_id, value)
