"""Tests for URL validation and artifact naming."""

from __future__ import annotations

from datetime import date

import pytest

from docs_harvester.utils.paths import artifact_stem, resolve_url, slugify_path, validate_url


TODAY = date(2024, 1, 1)


class TestValidateUrl:
    def test_keeps_scheme(self):
        assert validate_url("http://example.com/learn") == "http://example.com/learn"

    def test_adds_https(self):
        assert validate_url("  example.com/learn ") == "https://example.com/learn"

    def test_rejects_missing_host(self):
        with pytest.raises(ValueError):
            validate_url("https:///learn")


class TestResolveUrl:
    def test_relative_href(self):
        assert resolve_url("/learn/b", "https://example.com/learn/a") == "https://example.com/learn/b"

    def test_absolute_href(self):
        assert resolve_url(" https://other.com/x ", "https://example.com/") == "https://other.com/x"


class TestArtifactStem:
    def test_path_segments_joined(self):
        stem = artifact_stem("https://example.com/learn/system-design/intro", on=TODAY)

        assert stem == "learn-system-design-intro-2024-01-01"

    def test_index_prefix(self):
        stem = artifact_stem("https://example.com/learn/system-design/intro", index=12, on=TODAY)

        assert stem == "12-learn-system-design-intro-2024-01-01"

    def test_root_url(self):
        assert artifact_stem("https://example.com/", on=TODAY) == "page-2024-01-01"

    def test_query_is_ignored(self):
        assert artifact_stem("https://example.com/learn/a?tab=2#top", on=TODAY) == "learn-a-2024-01-01"

    def test_defaults_to_today(self):
        assert artifact_stem("https://example.com/learn/a").endswith(date.today().isoformat())


class TestSlugifyPath:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://example.com/learn/ml/k_means", "learn-ml-k-means"),
            ("https://example.com/learn/c++/tips.html", "learn-c---tips-html"),
            ("https://example.com/learn//double/", "learn-double"),
            ("https://example.com", "page"),
        ],
    )
    def test_filesystem_safe(self, url, expected):
        assert slugify_path(url) == expected
