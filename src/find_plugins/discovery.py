"""
Plugin discovery pipeline.

Candidates are collected, filtered, and, when requested, ordered by their
declared constraints:

    collect_candidates -> filter_candidates -> sort_plugins
"""

import logging
from typing import Any, List, Optional

from find_plugins.collector import Candidate, collect_candidates
from find_plugins.config import DiscoveryOptions, Settings, resolve_options
from find_plugins.filters import build_filter, filter_candidates
from find_plugins.ordering import sort_plugins

logger = logging.getLogger(__name__)


def discover_plugins(
    options: Optional[DiscoveryOptions] = None,
    settings: Optional[Settings] = None,
    **overrides: Any,
) -> List[Candidate]:
    """
    Find the plugins installed for a host project.

    Args:
        options: Discovery options; keyword arguments are accepted instead
            (or on top of them), in snake_case or camelCase
        settings: Environment settings (read from the environment when None)
        **overrides: Individual DiscoveryOptions fields

    Returns:
        Accepted plugins, in discovery order or, with ``sort=True``, in an
        order satisfying their before/after constraints

    Raises:
        ConfigurationError: If the options cannot be resolved
        ResolutionError: If a dependency is not installed
        ManifestError: If a candidate has no readable manifest
        CycleError: If sorting is requested and the constraints contain a cycle

    Example:
        >>> plugins = discover_plugins(dir=Path("."), sort=True)
        >>> [plugin.name for plugin in plugins]
        ['base-plugin', 'my-plugin']
    """
    if overrides:
        base = options.model_dump(exclude_unset=True) if options else {}
        options = DiscoveryOptions.model_validate({**base, **overrides})

    resolved = resolve_options(options, settings)

    candidates = collect_candidates(resolved)
    plugins = filter_candidates(candidates, build_filter(resolved))
    logger.info(
        f"Discovered {len(plugins)} plugin(s) among {len(candidates)} candidate(s)"
    )

    if resolved.sort:
        assert resolved.config_name is not None
        plugins = sort_plugins(plugins, resolved.config_name)

    return plugins
