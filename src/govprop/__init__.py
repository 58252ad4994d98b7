"""
govprop: Property-based invariant testing for board-governance systems.

Generates randomized domain inputs, checks invariants against them, and
shrinks any failing input to a minimal reproducible counterexample.
"""

__version__ = "0.3.0"
