"""Suite plugins: pluggy hooks through which external code supplies generators and tests."""

from govprop.plugins.hookspecs import PROJECT_NAME, GovpropSuiteSpec, hookimpl, hookspec
from govprop.plugins.loader import SuiteLoader

__all__ = [
    "PROJECT_NAME",
    "GovpropSuiteSpec",
    "SuiteLoader",
    "hookimpl",
    "hookspec",
]
