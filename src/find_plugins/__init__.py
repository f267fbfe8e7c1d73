"""
find-plugins: discover plugin packages in a project's dependency tree.

Plugins are installed packages whose manifest marks them as plugins (by
default, by listing the host project's name among their keywords). They can
optionally be ordered using before/after constraints from their manifests.
"""

from find_plugins.collector import Candidate, Plugin
from find_plugins.config import DiscoveryOptions, Settings
from find_plugins.discovery import discover_plugins
from find_plugins.exceptions import (
    ConfigurationError,
    CycleError,
    FindPluginsError,
    ManifestError,
    ResolutionError,
)
from find_plugins.filters import CustomPredicate, KeywordPredicate, PluginFilter
from find_plugins.manifest import PackageManifest
from find_plugins.ordering import DependencyGraph, OrderingConstraint, sort_plugins

__all__ = [
    "Candidate",
    "ConfigurationError",
    "CustomPredicate",
    "CycleError",
    "DependencyGraph",
    "DiscoveryOptions",
    "FindPluginsError",
    "KeywordPredicate",
    "ManifestError",
    "OrderingConstraint",
    "PackageManifest",
    "Plugin",
    "PluginFilter",
    "ResolutionError",
    "Settings",
    "discover_plugins",
    "sort_plugins",
]
