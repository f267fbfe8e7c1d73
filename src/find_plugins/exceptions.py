"""Custom exceptions for find-plugins."""

from pathlib import Path
from typing import Sequence


class FindPluginsError(Exception):
    """Base exception for all plugin discovery errors."""

    pass


class ConfigurationError(FindPluginsError):
    """Raised when discovery options cannot be resolved into a usable configuration."""

    pass


class ManifestError(FindPluginsError):
    """Raised when a package manifest is missing or cannot be parsed."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid manifest {self.path}: {reason}")


class ResolutionError(FindPluginsError):
    """Raised when a dependency name cannot be resolved to an installed package."""

    def __init__(self, name: str, basedir: Path | str):
        self.name = name
        self.basedir = Path(basedir)
        super().__init__(f"Cannot find package '{name}' from '{self.basedir}'")


class CycleError(FindPluginsError):
    """
    Raised when plugin ordering constraints are contradictory.

    Attributes:
        nodes: Names of every plugin that could not be placed
        cycle: One concrete cycle among them, first name repeated at the end
    """

    def __init__(self, nodes: Sequence[str], cycle: Sequence[str] = ()):
        self.nodes = list(nodes)
        self.cycle = list(cycle)
        message = "Cannot order plugins, constraints contain a cycle"
        if self.cycle:
            message += ": " + " -> ".join(self.cycle)
        else:
            message += f" among: {', '.join(self.nodes)}"
        super().__init__(message)
