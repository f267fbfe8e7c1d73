"""
Plugin candidate collection.

Candidates come from one of two sources:

1. Directory scanning: every package directory under ``dir`` (scoped
   ``@scope/name`` directories expanded one level)
2. Dependency resolution: each dependency of the host manifest resolved to
   its installed directory

Explicit ``include`` locations are appended to either. Every location is then
paired with the nearest manifest at or above it.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from find_plugins.config import ResolvedOptions, Settings
from find_plugins.exceptions import ResolutionError
from find_plugins.manifest import PackageManifest, read_manifest_up

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """
    A package considered for plugin status.

    Attributes:
        location: Directory (or explicitly included path) of the package
        manifest: Parsed manifest of the package
    """

    location: Path
    manifest: PackageManifest

    @property
    def name(self) -> str | None:
        """Convenience accessor for the declared package name."""
        return self.manifest.name


# Accepted candidates are the same records, only filtered
Plugin = Candidate


def scan_directory(directory: Path, settings: Settings) -> List[Path]:
    """
    List every package directory directly under ``directory``.

    Scoped namespace directories are replaced by their members, the binary
    shim directory and plain files are skipped.

    Args:
        directory: Directory to scan (typically a modules directory)
        settings: Supplies the scope prefix and the shim directory name

    Returns:
        Package directories, unscoped entries first, each group sorted by name
    """
    names = sorted(entry.name for entry in directory.iterdir())

    prefix = settings.scope_prefix
    unscoped = [name for name in names if not name.startswith(prefix)]
    scoped_members: List[str] = []
    for scope in (name for name in names if name.startswith(prefix)):
        scope_dir = directory / scope
        if not scope_dir.is_dir():
            continue
        for member in sorted(entry.name for entry in scope_dir.iterdir()):
            scoped_members.append(f"{scope}/{member}")

    candidates = []
    for name in unscoped + scoped_members:
        if name == settings.bin_dir:
            continue
        path = directory / name
        if not path.is_dir():
            continue
        candidates.append(path)

    logger.debug(f"Found {len(candidates)} package directories in {directory}")
    return candidates


def dependency_names(manifest: PackageManifest, options: ResolvedOptions) -> List[str]:
    """
    Collect dependency names from the host manifest.

    Categories are concatenated in a fixed order: dependencies, dev, peer,
    bundled, optional. A name listed in several categories is kept once.
    """
    names: List[str] = []
    if not options.exclude_dependencies:
        names.extend(manifest.dependencies)
    if options.include_dev:
        names.extend(manifest.dev_dependencies)
    if options.include_peer:
        names.extend(manifest.peer_dependencies)
    if options.include_bundle:
        names.extend(manifest.bundled)
    if options.include_optional:
        names.extend(manifest.optional_dependencies)

    return list(dict.fromkeys(names))


def resolve_package(name: str, basedir: Path, settings: Settings) -> Path:
    """
    Resolve a package name to its installed directory.

    Looks for ``<modules_dir>/<name>/<manifest>`` in ``basedir`` and then in
    each of its parents, nearest first.

    Raises:
        ResolutionError: If no installed copy of the package is found
    """
    start = basedir.resolve()
    for directory in (start, *start.parents):
        if directory.name == settings.modules_dir:
            # Never look inside modules_dir/modules_dir
            continue
        package_dir = directory / settings.modules_dir / name
        if (package_dir / settings.manifest_filename).is_file():
            return package_dir

    raise ResolutionError(name, basedir)


def candidate_locations(options: ResolvedOptions) -> List[Path]:
    """Produce every candidate location for a discovery call, includes last."""
    settings = options.settings

    if options.scan_all_dirs:
        locations = scan_directory(options.dir, settings)
    else:
        assert options.host_manifest is not None
        locations = [
            resolve_package(name, options.dir, settings)
            for name in dependency_names(options.host_manifest, options)
        ]

    return locations + list(options.include)


def collect_candidates(options: ResolvedOptions) -> List[Candidate]:
    """
    Collect candidate packages for a discovery call.

    In dependency mode each package is collected once, even when the host
    manifest lists it under several dependency categories. Explicit
    ``include`` locations are appended as given.

    Raises:
        ResolutionError: If a dependency is not installed
        ManifestError: If a location has no readable manifest
    """
    candidates = [
        Candidate(
            location=location,
            manifest=read_manifest_up(location, options.settings.manifest_filename),
        )
        for location in candidate_locations(options)
    ]

    logger.debug(f"Collected {len(candidates)} candidate(s)")
    return candidates
