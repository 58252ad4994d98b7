# src/govprop/engine/registry.py
"""Registries for generators and property tests.

Both registries are plain caller-owned objects; create as many as you need
(one per category, one per suite). Registration is last-write-wins: a
second registration under an existing id replaces the first, keeps the
original ordering slot and logs a warning. Overwriting is a deliberate
simplification, not an error.

Constraints declared on a generator are NOT validated here. They are
advisory metadata; a generator that must respect them does so inside
its own generate().
"""

from __future__ import annotations

import random
import threading
from typing import Any

import structlog

from govprop.contracts.errors import GeneratorFault, GeneratorNotFoundError, TestNotFoundError
from govprop.contracts.property import PropertyGenerator, PropertyTest

logger = structlog.get_logger(__name__)


class GeneratorRegistry:
    """Named input generators, keyed by id.

    Thread-safe for concurrent lookups from parallel test workers.

    Example:
        registry = GeneratorRegistry()
        registry.register(integers("small_ints", 0, 100))

        generator = registry.get("small_ints")
        value = registry.generate("small_ints", random.Random(7))
    """

    def __init__(self) -> None:
        self._generators: dict[str, PropertyGenerator[Any]] = {}
        self._lock = threading.Lock()

    def register(self, generator: PropertyGenerator[Any]) -> None:
        """Store generator under its id, replacing any previous one."""
        with self._lock:
            if generator.id in self._generators:
                logger.warning("generator_overwritten", generator_id=generator.id)
            self._generators[generator.id] = generator

    def get(self, generator_id: str) -> PropertyGenerator[Any] | None:
        """Return the generator, or None when it is not registered."""
        with self._lock:
            return self._generators.get(generator_id)

    def require(self, generator_id: str) -> PropertyGenerator[Any]:
        """Return the generator.

        Raises:
            GeneratorNotFoundError: If generator_id is not registered
        """
        generator = self.get(generator_id)
        if generator is None:
            raise GeneratorNotFoundError(generator_id)
        return generator

    def resolve(self, ref: PropertyGenerator[Any] | str) -> PropertyGenerator[Any]:
        """Turn a test's generator reference into a generator.

        Tests may hold generator objects directly or refer to registered
        generators by id.

        Raises:
            GeneratorNotFoundError: If ref is an unregistered id
        """
        if isinstance(ref, str):
            return self.require(ref)
        return ref

    def generate(self, generator_id: str, rng: random.Random | None = None) -> Any:
        """Draw one value from a registered generator.

        Raises:
            GeneratorNotFoundError: If generator_id is not registered
            GeneratorFault: If the generator's generate() raises
        """
        generator = self.require(generator_id)
        try:
            return generator.generate(rng if rng is not None else random.Random())
        except Exception as exc:
            raise GeneratorFault(generator_id, exc) from exc

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._generators)

    def __contains__(self, generator_id: object) -> bool:
        with self._lock:
            return generator_id in self._generators

    def __len__(self) -> int:
        with self._lock:
            return len(self._generators)


class TestRegistry:
    """Registered property tests, in first-registration order."""

    __test__ = False  # not a pytest test class

    def __init__(self) -> None:
        self._tests: dict[str, PropertyTest[Any]] = {}
        self._lock = threading.Lock()

    def register(self, test: PropertyTest[Any]) -> None:
        """Store test under its id, replacing any previous one."""
        with self._lock:
            if test.id in self._tests:
                logger.warning("property_test_overwritten", test_id=test.id)
            self._tests[test.id] = test

    def get(self, test_id: str) -> PropertyTest[Any] | None:
        with self._lock:
            return self._tests.get(test_id)

    def require(self, test_id: str) -> PropertyTest[Any]:
        """Return the test.

        Raises:
            TestNotFoundError: If test_id is not registered
        """
        test = self.get(test_id)
        if test is None:
            raise TestNotFoundError(test_id)
        return test

    def all(self) -> list[PropertyTest[Any]]:
        with self._lock:
            return list(self._tests.values())

    def by_category(self, category: str) -> list[PropertyTest[Any]]:
        """Tests whose category equals category (StrEnum members compare by value)."""
        return [test for test in self.all() if test.category == category]

    def __contains__(self, test_id: object) -> bool:
        with self._lock:
            return test_id in self._tests

    def __len__(self) -> int:
        with self._lock:
            return len(self._tests)
