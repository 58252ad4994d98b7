"""Built-in generators and shrink policies.

Usage:
    from govprop.generators import integers, lists, fixed_dicts

    members = lists("members", integers("member_age", 18, 90), min_size=1)
"""

from govprop.generators.builtins import (
    DEFAULT_ALPHABET,
    booleans,
    fixed_dicts,
    fixed_sequence,
    floats,
    integers,
    just,
    lists,
    one_of,
    sampled_from,
    text,
)
from govprop.generators.shrinking import dedupe, shrink_float, shrink_integer, shrink_sequence

__all__ = [
    "DEFAULT_ALPHABET",
    "booleans",
    "dedupe",
    "fixed_dicts",
    "fixed_sequence",
    "floats",
    "integers",
    "just",
    "lists",
    "one_of",
    "sampled_from",
    "shrink_float",
    "shrink_integer",
    "shrink_sequence",
    "text",
]
