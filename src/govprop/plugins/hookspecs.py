# src/govprop/plugins/hookspecs.py
"""pluggy hook specifications for property test suites.

Suites supply domain generators and property tests to the engine through
these hooks. A suite is any object or module with @hookimpl functions.

Usage (implementing a suite module):
    from govprop.plugins.hookspecs import hookimpl

    @hookimpl
    def govprop_generators():
        return [meeting_scenarios()]

    @hookimpl
    def govprop_property_tests():
        return [quorum_test()]

Note: @hookspec defines the hook interface (done here).
      @hookimpl marks suite implementations of those hooks.
"""

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from govprop.contracts.property import PropertyGenerator, PropertyTest

# Project name for pluggy
PROJECT_NAME = "govprop"

# Hook specification marker
hookspec = pluggy.HookspecMarker(PROJECT_NAME)

# Hook implementation marker (for suites to use)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class GovpropSuiteSpec:
    """Hook specifications for property test suites."""

    @hookspec
    def govprop_generators(self) -> list["PropertyGenerator[Any]"]:  # type: ignore[empty-body]
        """Return generators to register.

        Returns:
            List of PropertyGenerator instances
        """

    @hookspec
    def govprop_property_tests(self) -> list["PropertyTest[Any]"]:  # type: ignore[empty-body]
        """Return property tests to register.

        Tests may refer to generators returned by any suite by id.

        Returns:
            List of PropertyTest instances
        """
