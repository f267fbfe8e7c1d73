"""
Pytest configuration and fixtures for find-plugins tests.

Provides helpers that lay out fake projects on disk: a host manifest plus an
installed-packages directory holding plugin and non-plugin packages.
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pytest

from find_plugins.collector import Candidate
from find_plugins.config import Settings
from find_plugins.manifest import PackageManifest

HOST_NAME = "my-app"


def write_manifest(directory: Path, manifest: Dict[str, Any]) -> Path:
    """Write a package.json into ``directory``, creating it if needed."""
    directory.mkdir(parents=True, exist_ok=True)
    manifest_path = directory / "package.json"
    manifest_path.write_text(json.dumps(manifest))
    return manifest_path


def build_plugin(
    name: str,
    before: Optional[list] = None,
    after: Optional[list] = None,
    config_name: str = HOST_NAME,
) -> Candidate:
    """Build an in-memory plugin with optional ordering constraints."""
    data: Dict[str, Any] = {"name": name, "keywords": [HOST_NAME]}
    config: Dict[str, Any] = {}
    if before is not None:
        config["before"] = before
    if after is not None:
        config["after"] = after
    if config:
        data[config_name] = config
    return Candidate(
        location=Path("/node_modules") / name,
        manifest=PackageManifest.model_validate(data),
    )


@pytest.fixture
def make_plugin() -> Callable[..., Candidate]:
    """Return the in-memory plugin factory."""
    return build_plugin


@pytest.fixture
def settings():
    """Default settings, unaffected by the test environment."""
    return Settings(_env_file=None)


@pytest.fixture
def make_package(tmp_path) -> Callable[..., Path]:
    """
    Return a factory that installs a package under ``tmp_path/app/node_modules``.

    Usage:
        make_package("alpha", keywords=["my-app"])
        make_package("@scope/x", keywords=["my-app"])
    """

    def _make(name: str, **fields: Any) -> Path:
        package_dir = tmp_path / "app" / "node_modules" / name
        write_manifest(package_dir, {"name": name, "version": "1.0.0", **fields})
        return package_dir

    return _make


@pytest.fixture
def project(tmp_path, make_package) -> Path:
    """
    Create a host project with a mix of plugins and ordinary packages.

    Layout:
        app/package.json                 my-app, deps alpha/beta/lib, dev gamma
        app/node_modules/alpha           plugin
        app/node_modules/beta            plugin, must come before alpha
        app/node_modules/lib             not a plugin (no keywords)
        app/node_modules/gamma           plugin (dev dependency)
        app/node_modules/.bin/           executable shims
    """
    app_dir = tmp_path / "app"
    write_manifest(
        app_dir,
        {
            "name": HOST_NAME,
            "version": "0.1.0",
            "dependencies": {"alpha": "^1.0.0", "beta": "^1.0.0", "lib": "^2.0.0"},
            "devDependencies": {"gamma": "^1.0.0"},
        },
    )
    make_package("alpha", keywords=[HOST_NAME, "other"])
    make_package("beta", keywords=[HOST_NAME], **{HOST_NAME: {"before": ["alpha"]}})
    make_package("lib")
    make_package("gamma", keywords=[HOST_NAME])
    (app_dir / "node_modules" / ".bin").mkdir()
    return app_dir
