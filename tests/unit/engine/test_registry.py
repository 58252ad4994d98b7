# tests/unit/engine/test_registry.py
"""Tests for the generator and test registries."""

from __future__ import annotations

import random

import pytest
from structlog.testing import capture_logs

from govprop.contracts import GeneratorFault, GeneratorNotFoundError, PropertyCategory, TestNotFoundError
from govprop.engine import GeneratorRegistry, TestRegistry
from govprop.generators import integers, just
from tests.helpers.builders import broken_generator, make_test


class TestGeneratorRegistry:
    """Last-write-wins storage keyed by id."""

    def test_register_and_get(self) -> None:
        registry = GeneratorRegistry()
        generator = integers("ints", 0, 9)
        registry.register(generator)
        assert registry.get("ints") is generator
        assert "ints" in registry
        assert len(registry) == 1

    def test_get_unknown_returns_none(self) -> None:
        assert GeneratorRegistry().get("missing") is None

    def test_require_unknown_raises(self) -> None:
        with pytest.raises(GeneratorNotFoundError) as exc_info:
            GeneratorRegistry().require("missing")
        assert exc_info.value.generator_id == "missing"

    def test_overwrite_keeps_slot_and_warns(self) -> None:
        registry = GeneratorRegistry()
        registry.register(just("a", 1))
        registry.register(just("b", 2))
        replacement = just("a", 3)
        with capture_logs() as logs:
            registry.register(replacement)
        assert registry.get("a") is replacement
        assert registry.ids() == ["a", "b"]
        assert logs == [{"event": "generator_overwritten", "generator_id": "a", "log_level": "warning"}]

    def test_generate_uses_given_random(self) -> None:
        registry = GeneratorRegistry()
        registry.register(integers("ints", 0, 1000))
        assert registry.generate("ints", random.Random(5)) == registry.generate("ints", random.Random(5))

    def test_generate_wraps_generator_exception(self) -> None:
        registry = GeneratorRegistry()
        registry.register(broken_generator())
        with pytest.raises(GeneratorFault) as exc_info:
            registry.generate("broken")
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert exc_info.value.__cause__ is exc_info.value.cause

    def test_resolve_by_object_and_id(self) -> None:
        registry = GeneratorRegistry()
        generator = integers("ints", 0, 9)
        registry.register(generator)
        assert registry.resolve("ints") is generator
        other = just("unregistered", 1)
        assert registry.resolve(other) is other
        with pytest.raises(GeneratorNotFoundError):
            registry.resolve("missing")


class TestTestRegistry:
    def test_registration_order_and_category_filter(self) -> None:
        registry = TestRegistry()
        gen = just("one", 1)
        registry.register(make_test("a", lambda v: True, [gen], category=PropertyCategory.BUSINESS_RULES))
        registry.register(make_test("b", lambda v: True, [gen], category=PropertyCategory.SECURITY_CONSTRAINTS))
        registry.register(make_test("c", lambda v: True, [gen], category="business_rules"))

        assert [t.id for t in registry.all()] == ["a", "b", "c"]
        assert [t.id for t in registry.by_category(PropertyCategory.BUSINESS_RULES)] == ["a", "c"]
        assert registry.by_category("compliance_rules") == []

    def test_overwrite_warns(self) -> None:
        registry = TestRegistry()
        gen = just("one", 1)
        registry.register(make_test("a", lambda v: True, [gen]))
        with capture_logs() as logs:
            registry.register(make_test("a", lambda v: False, [gen]))
        assert len(registry) == 1
        assert logs[0]["event"] == "property_test_overwritten"

    def test_require_unknown_raises(self) -> None:
        with pytest.raises(TestNotFoundError, match="missing"):
            TestRegistry().require("missing")
