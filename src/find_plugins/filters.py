"""
Plugin filters.

A filter decides whether a candidate package is a plugin. There are two
variants, chosen once per discovery call by ``build_filter``:

- ``CustomPredicate`` wraps a caller-supplied callback
- ``KeywordPredicate`` looks for a keyword in the manifest's keyword list
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Protocol

from find_plugins.collector import Candidate
from find_plugins.config import ResolvedOptions

logger = logging.getLogger(__name__)


class PluginFilter(Protocol):
    """Protocol for plugin predicates."""

    def __call__(self, candidate: Candidate) -> bool:
        """Return True if the candidate is a plugin."""
        ...


@dataclass(frozen=True)
class CustomPredicate:
    """Delegates the decision to a caller-supplied function."""

    fn: Callable[[Candidate], bool]

    def __call__(self, candidate: Candidate) -> bool:
        return bool(self.fn(candidate))


@dataclass(frozen=True)
class KeywordPredicate:
    """Accepts candidates whose manifest keywords contain ``keyword``."""

    keyword: str

    def __call__(self, candidate: Candidate) -> bool:
        keywords = candidate.manifest.keywords
        if not keywords:
            return False
        return self.keyword in keywords


def build_filter(options: ResolvedOptions) -> PluginFilter:
    """Select the filter variant for a resolved configuration."""
    if options.filter is not None:
        return CustomPredicate(options.filter)

    assert options.keyword is not None
    return KeywordPredicate(options.keyword)


def filter_candidates(
    candidates: Iterable[Candidate], predicate: PluginFilter
) -> List[Candidate]:
    """Keep the candidates accepted by ``predicate``, preserving order."""
    plugins = []
    for candidate in candidates:
        if predicate(candidate):
            plugins.append(candidate)
        else:
            logger.debug(f"Skipping {candidate.location}: not a plugin")
    return plugins
