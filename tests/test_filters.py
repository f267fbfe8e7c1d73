"""Tests for plugin filters."""

from pathlib import Path

from find_plugins.collector import Candidate
from find_plugins.config import ResolvedOptions
from find_plugins.filters import (
    CustomPredicate,
    KeywordPredicate,
    build_filter,
    filter_candidates,
)
from find_plugins.manifest import PackageManifest


def candidate(name, **fields):
    return Candidate(
        location=Path("/node_modules") / name,
        manifest=PackageManifest.model_validate({"name": name, **fields}),
    )


def resolved(settings, **overrides):
    values = dict(
        dir=Path("."),
        host_manifest=None,
        include=(),
        keyword=None,
        filter=None,
        scan_all_dirs=True,
        exclude_dependencies=False,
        include_dev=False,
        include_peer=False,
        include_bundle=False,
        include_optional=False,
        sort=False,
        config_name=None,
        settings=settings,
    )
    values.update(overrides)
    return ResolvedOptions(**values)


class TestKeywordPredicate:
    """Test keyword-based plugin detection."""

    def test_matching_keyword(self):
        """Test a candidate listing the keyword is accepted."""
        predicate = KeywordPredicate("my-app")

        assert predicate(candidate("alpha", keywords=["tools", "my-app"])) is True

    def test_other_keywords(self):
        """Test a candidate without the keyword is rejected."""
        predicate = KeywordPredicate("my-app")

        assert predicate(candidate("alpha", keywords=["tools"])) is False

    def test_no_keywords(self):
        """Test a candidate with no keyword list is never accepted."""
        predicate = KeywordPredicate("my-app")

        assert predicate(candidate("alpha")) is False
        assert predicate(candidate("beta", keywords=[])) is False

    def test_keyword_is_not_substring_match(self):
        """Test keywords are compared whole."""
        predicate = KeywordPredicate("my-app")

        assert predicate(candidate("alpha", keywords=["my-app-extra"])) is False


class TestCustomPredicate:
    """Test caller-supplied predicates."""

    def test_delegates(self):
        """Test the callback decides."""
        predicate = CustomPredicate(lambda c: c.manifest.name.startswith("my-app-"))

        assert predicate(candidate("my-app-alpha")) is True
        assert predicate(candidate("alpha")) is False

    def test_result_is_bool(self):
        """Test truthy callback results are normalized."""
        predicate = CustomPredicate(lambda c: c.manifest.keywords)

        assert predicate(candidate("alpha", keywords=["x"])) is True
        assert predicate(candidate("beta")) is False


class TestBuildFilter:
    """Test choosing the filter variant."""

    def test_keyword_variant(self, settings):
        """Test a resolved keyword builds a KeywordPredicate."""
        predicate = build_filter(resolved(settings, keyword="my-app"))

        assert predicate == KeywordPredicate("my-app")

    def test_custom_variant(self, settings):
        """Test a custom callback takes precedence."""

        def is_plugin(c):
            return True

        predicate = build_filter(resolved(settings, filter=is_plugin))

        assert isinstance(predicate, CustomPredicate)
        assert predicate.fn is is_plugin


class TestFilterCandidates:
    """Test applying a filter to candidates."""

    def test_preserves_order(self):
        """Test accepted candidates keep their order."""
        candidates = [
            candidate("c", keywords=["my-app"]),
            candidate("a"),
            candidate("b", keywords=["my-app"]),
        ]

        plugins = filter_candidates(candidates, KeywordPredicate("my-app"))

        assert [p.manifest.name for p in plugins] == ["c", "b"]

    def test_empty(self):
        """Test filtering no candidates."""
        assert filter_candidates([], KeywordPredicate("my-app")) == []
