# src/govprop/plugins/loader.py
"""Suite discovery and installation.

Uses pluggy for hook-based registration. Suites are registered as plugin
objects or importable module paths, then installed into a framework:
generators first, so tests that refer to generators by id resolve.

pluggy calls implementations in LIFO order; results are reversed so that
suites contribute in the order they were registered.
"""

from __future__ import annotations

import importlib
from types import ModuleType
from typing import TYPE_CHECKING, Any

import pluggy
import structlog

from govprop.contracts.property import PropertyGenerator, PropertyTest
from govprop.plugins.hookspecs import PROJECT_NAME, GovpropSuiteSpec

if TYPE_CHECKING:
    from govprop.engine.framework import PropertyTestingFramework

logger = structlog.get_logger(__name__)


class SuiteLoader:
    """Collects generators and tests from registered suites.

    Usage:
        loader = SuiteLoader()
        loader.register_module("myorg.governance_suite")
        loader.install(framework)
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(GovpropSuiteSpec)

    def register(self, suite: Any, name: str | None = None) -> None:
        """Register a suite object or module implementing the hooks."""
        self._pm.register(suite, name=name)

    def register_module(self, module_path: str) -> ModuleType:
        """Import module_path and register it as a suite.

        Raises:
            ImportError: If the module cannot be imported
        """
        module = importlib.import_module(module_path)
        self.register(module, name=module_path)
        logger.debug("suite_registered", suite=module_path)
        return module

    def generators(self) -> list[PropertyGenerator[Any]]:
        """Generators from every suite, in suite registration order.

        Raises:
            TypeError: If a suite returns something other than a PropertyGenerator
        """
        collected: list[PropertyGenerator[Any]] = []
        for batch in reversed(self._pm.hook.govprop_generators()):
            for generator in batch:
                if not isinstance(generator, PropertyGenerator):
                    raise TypeError(f"govprop_generators returned {type(generator).__name__}, expected PropertyGenerator")
                collected.append(generator)
        return collected

    def tests(self) -> list[PropertyTest[Any]]:
        """Property tests from every suite, in suite registration order.

        Raises:
            TypeError: If a suite returns something other than a PropertyTest
        """
        collected: list[PropertyTest[Any]] = []
        for batch in reversed(self._pm.hook.govprop_property_tests()):
            for test in batch:
                if not isinstance(test, PropertyTest):
                    raise TypeError(f"govprop_property_tests returned {type(test).__name__}, expected PropertyTest")
                collected.append(test)
        return collected

    def install(self, framework: PropertyTestingFramework) -> tuple[int, int]:
        """Register every suite generator, then every suite test, into framework.

        Returns:
            (generators installed, tests installed)
        """
        generators = self.generators()
        tests = self.tests()
        for generator in generators:
            framework.register_generator(generator)
        for test in tests:
            framework.register_test(test)
        logger.info("suites_installed", generators=len(generators), tests=len(tests))
        return len(generators), len(tests)
