"""Tests for ramlmock.discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from ramlmock.discovery import expand_sources, list_raml_files
from ramlmock.exceptions import SpecLoadError


class TestListRamlFiles:
    def test_only_raml_files_sorted(self, ping_dir: Path) -> None:
        (ping_dir / "nested.raml").mkdir()
        files = list_raml_files(str(ping_dir))
        assert files == [str(ping_dir / "ping-a.raml"), str(ping_dir / "ping-b.raml")]

    def test_not_recursive(self, tmp_path: Path) -> None:
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "deep.raml").write_text("#%RAML 1.0\n")
        assert list_raml_files(str(tmp_path)) == []

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(SpecLoadError, match="Cannot list RAML files") as exc_info:
            list_raml_files(str(tmp_path / "missing"))
        assert exc_info.value.source == str(tmp_path / "missing")


class TestExpandSources:
    def test_glob_expanded_and_sorted(self, ping_dir: Path) -> None:
        files = expand_sources([str(ping_dir / "ping-*.raml")])
        assert files == [str(ping_dir / "ping-a.raml"), str(ping_dir / "ping-b.raml")]

    def test_literal_paths_kept(self) -> None:
        assert expand_sources(["missing.raml"]) == ["missing.raml"]

    def test_urls_kept(self) -> None:
        url = "https://example.com/api.raml?v=[1]"
        assert expand_sources([url]) == [url]

    def test_unmatched_glob_dropped(self, tmp_path: Path) -> None:
        assert expand_sources([str(tmp_path / "*.raml")]) == []

    def test_duplicates_removed(self, ping_dir: Path) -> None:
        a = str(ping_dir / "ping-a.raml")
        files = expand_sources([a, str(ping_dir / "*.raml")])
        assert files == [a, str(ping_dir / "ping-b.raml")]

    def test_recursive_glob(self, tmp_path: Path) -> None:
        (tmp_path / "v1").mkdir()
        (tmp_path / "v1" / "api.raml").write_text("#%RAML 1.0\n")
        assert expand_sources([str(tmp_path / "**" / "*.raml")]) == [str(tmp_path / "v1" / "api.raml")]
