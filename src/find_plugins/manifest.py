"""
Package manifest schema and loading.

A manifest is the JSON metadata file (``package.json`` by default) at the root
of every installed package. Only the fields discovery relies on are typed;
everything else is kept verbatim so plugins can carry their own configuration
sub-objects. Typed fields are normalized rather than rejected: a malformed
value in an unrelated package must not abort discovery.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from find_plugins.exceptions import ManifestError

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_FILENAME = "package.json"


class PackageManifest(BaseModel):
    """
    Parsed package manifest.

    Unknown fields are preserved and reachable through ``get()``, which is how
    per-plugin ordering configuration is read.
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    name: Optional[str] = Field(None, description="Declared package name")
    version: Optional[str] = Field(None, description="Declared package version")
    keywords: Optional[List[str]] = Field(
        None,
        description="Search keywords; the default plugin filter looks here",
    )

    dependencies: Dict[str, str] = Field(default_factory=dict)
    dev_dependencies: Dict[str, str] = Field(
        default_factory=dict, alias="devDependencies"
    )
    peer_dependencies: Dict[str, str] = Field(
        default_factory=dict, alias="peerDependencies"
    )
    optional_dependencies: Dict[str, str] = Field(
        default_factory=dict, alias="optionalDependencies"
    )
    bundle_dependencies: Optional[Union[List[str], Dict[str, str]]] = Field(
        None, alias="bundleDependencies"
    )
    bundled_dependencies: Optional[Union[List[str], Dict[str, str]]] = Field(
        None, alias="bundledDependencies"
    )

    @field_validator("name", "version", mode="before")
    @classmethod
    def non_string_as_missing(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None

    @field_validator("keywords", mode="before")
    @classmethod
    def normalize_keywords(cls, value: Any) -> Any:
        """
        Coerce keywords into a list of strings.

        A comma or whitespace separated string is split, non-string items are
        dropped, and any other value counts as no keywords.
        """
        if isinstance(value, str):
            return [kw for kw in re.split(r"[,\s]+", value) if kw]
        if isinstance(value, list):
            return [kw for kw in value if isinstance(kw, str)]
        return None

    @field_validator(
        "dependencies",
        "dev_dependencies",
        "peer_dependencies",
        "optional_dependencies",
        mode="before",
    )
    @classmethod
    def normalize_dependency_map(cls, value: Any) -> Any:
        """Anything but a JSON object counts as no dependencies."""
        if not isinstance(value, dict):
            return {}
        return {
            name: spec if isinstance(spec, str) else str(spec)
            for name, spec in value.items()
        }

    @field_validator("bundle_dependencies", "bundled_dependencies", mode="before")
    @classmethod
    def normalize_bundled(cls, value: Any) -> Any:
        """
        Keep a list of names or a dependency map.

        ``true``/``false`` (bundle everything / nothing) and any other value
        are treated as no explicit bundle list.
        """
        if isinstance(value, list):
            return [name for name in value if isinstance(name, str)]
        if isinstance(value, dict):
            return {name: str(spec) for name, spec in value.items()}
        return None

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a raw manifest field by its JSON key."""
        return self.as_dict().get(key, default)

    def as_dict(self) -> Dict[str, Any]:
        """Return the manifest as read from disk, keyed by JSON field names."""
        return self.model_dump(by_alias=True, exclude_unset=True)

    @property
    def bundled(self) -> List[str]:
        """Names of bundled dependencies, whichever spelling the manifest uses."""
        value = self.bundle_dependencies
        if value is None:
            value = self.bundled_dependencies
        if not value:
            return []
        return list(value)

    @classmethod
    def from_file(cls, manifest_path: Path) -> "PackageManifest":
        """
        Load a manifest from a JSON file.

        Args:
            manifest_path: Path to the manifest file

        Returns:
            PackageManifest instance

        Raises:
            ManifestError: If the file is missing, is not valid JSON, or does
                not hold a JSON object
        """
        try:
            with open(manifest_path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ManifestError(manifest_path, "file not found") from e
        except json.JSONDecodeError as e:
            raise ManifestError(manifest_path, f"invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ManifestError(manifest_path, "top-level value must be an object")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ManifestError(manifest_path, str(e)) from e


def find_manifest_up(
    start: Path, filename: str = DEFAULT_MANIFEST_FILENAME
) -> Optional[Path]:
    """
    Find the nearest manifest at or above ``start``.

    If ``start`` is a file, the search begins in its parent directory.
    """
    start = Path(start).resolve()
    directory = start if start.is_dir() else start.parent

    for candidate_dir in (directory, *directory.parents):
        manifest_path = candidate_dir / filename
        if manifest_path.is_file():
            return manifest_path

    return None


def read_manifest_up(
    start: Path, filename: str = DEFAULT_MANIFEST_FILENAME
) -> PackageManifest:
    """
    Read the nearest manifest at or above ``start``.

    Raises:
        ManifestError: If no manifest exists anywhere above ``start`` or it
            cannot be parsed
    """
    manifest_path = find_manifest_up(start, filename)
    if manifest_path is None:
        raise ManifestError(
            Path(start) / filename, "no manifest found in any parent directory"
        )

    logger.debug(f"Reading manifest {manifest_path} for {start}")
    return PackageManifest.from_file(manifest_path)
