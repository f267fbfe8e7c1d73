"""
find-plugins configuration.

Two layers of configuration are involved in a discovery call:

- ``Settings``: process-wide defaults loaded from ``FIND_PLUGINS_*``
  environment variables (manifest file name, modules directory, logging).
- ``DiscoveryOptions``: the per-call options passed to ``discover_plugins``.
  They are resolved exactly once, by ``resolve_options``, into a
  ``ResolvedOptions`` with every implicit default made explicit.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from find_plugins.exceptions import ConfigurationError, ManifestError
from find_plugins.manifest import PackageManifest

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FIND_PLUGINS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Package layout
    manifest_filename: str = "package.json"  # Manifest file at each package root
    modules_dir: str = "node_modules"  # Directory installed packages live in
    bin_dir: str = ".bin"  # Executable shim directory, never a package
    scope_prefix: str = "@"  # Marks a scoped namespace directory

    # Logging
    log_level: str = "INFO"


class DiscoveryOptions(BaseModel):
    """
    Options accepted by ``discover_plugins``.

    Field names are snake_case; the camelCase spellings (``scanAllDirs``,
    ``configName``, ...) are accepted as aliases.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="forbid",
    )

    dir: Optional[Path] = Field(
        None, description="Directory to scan or resolve from (default: cwd)"
    )
    pkg: Optional[Path] = Field(
        None, description="Host manifest listing the dependencies to check"
    )
    include: List[Path] = Field(
        default_factory=list,
        description="Extra candidate locations, appended verbatim",
    )
    keyword: Optional[str] = Field(
        None, description="Keyword the default filter looks for (default: host name)"
    )
    filter: Optional[Callable[[Any], bool]] = Field(
        None, description="Custom predicate overriding the keyword check"
    )
    scan_all_dirs: bool = Field(
        False, description="Scan every directory instead of reading dependencies"
    )
    exclude_dependencies: bool = False
    include_dev: bool = False
    include_peer: bool = False
    include_bundle: bool = False
    include_optional: bool = False
    sort: bool = Field(False, description="Order plugins by their constraints")
    config_name: Optional[str] = Field(
        None,
        description="Manifest key holding ordering constraints (default: host name)",
    )


@dataclass(frozen=True)
class ResolvedOptions:
    """
    Fully resolved discovery configuration.

    Exactly one of ``filter`` and ``keyword`` is set. ``config_name`` is set
    whenever ``sort`` is true.
    """

    dir: Path
    host_manifest: Optional[PackageManifest]
    include: Tuple[Path, ...]
    keyword: Optional[str]
    filter: Optional[Callable[[Any], bool]]
    scan_all_dirs: bool
    exclude_dependencies: bool
    include_dev: bool
    include_peer: bool
    include_bundle: bool
    include_optional: bool
    sort: bool
    config_name: Optional[str]
    settings: Settings


def _host_manifest_path(options: DiscoveryOptions, manifest_filename: str) -> Path:
    if options.pkg is not None:
        return options.pkg
    if options.dir is not None:
        return options.dir / manifest_filename
    return Path(manifest_filename)


def load_host_manifest(path: Path) -> Optional[PackageManifest]:
    """
    Load the host manifest, tolerating its absence.

    A missing or unreadable host manifest is only an error when something
    actually needs it, which ``resolve_options`` decides.
    """
    try:
        return PackageManifest.from_file(path)
    except ManifestError as e:
        logger.debug(f"Host manifest not loaded: {e}")
        return None


def resolve_options(
    options: Optional[DiscoveryOptions] = None,
    settings: Optional[Settings] = None,
) -> ResolvedOptions:
    """
    Resolve per-call options into a ResolvedOptions.

    Args:
        options: Options supplied by the caller (all defaults when None)
        settings: Environment settings (read from the environment when None)

    Returns:
        ResolvedOptions with no remaining implicit defaults

    Raises:
        ConfigurationError: If sorting is requested without any usable
            configuration name, dependency resolution is requested without a
            host manifest, or the keyword filter has no keyword to look for
    """
    options = options or DiscoveryOptions()
    settings = settings or Settings()

    base_dir = options.dir if options.dir is not None else Path.cwd()
    host_manifest = load_host_manifest(
        _host_manifest_path(options, settings.manifest_filename)
    )
    host_name = host_manifest.name if host_manifest is not None else None

    config_name = options.config_name or host_name
    if options.sort and not config_name:
        raise ConfigurationError(
            "sort=True requires config_name or a valid host manifest with a name"
        )

    if not options.scan_all_dirs and host_manifest is None:
        raise ConfigurationError(
            "Reading dependencies requires a valid host manifest; "
            "pass pkg=... or use scan_all_dirs=True"
        )

    keyword = None
    if options.filter is None:
        keyword = options.keyword or host_name
        if not keyword:
            raise ConfigurationError(
                "No plugin filter: pass filter=..., keyword=... "
                "or a valid host manifest with a name"
            )

    resolved = ResolvedOptions(
        dir=base_dir,
        host_manifest=host_manifest,
        include=tuple(options.include),
        keyword=keyword,
        filter=options.filter,
        scan_all_dirs=options.scan_all_dirs,
        exclude_dependencies=options.exclude_dependencies,
        include_dev=options.include_dev,
        include_peer=options.include_peer,
        include_bundle=options.include_bundle,
        include_optional=options.include_optional,
        sort=options.sort,
        config_name=config_name if options.sort else None,
        settings=settings,
    )
    logger.debug(f"Resolved discovery options: {resolved}")
    return resolved
