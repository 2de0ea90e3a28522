"""Tests for repository name and clone path resolution."""

from pathlib import Path

import pytest

from tempo.templatefuncs.loader.resolver import (
    extension_clone_path,
    extract_name_from_path,
    extract_name_from_url,
    is_usable_clone_name,
)


class TestExtractNameFromUrl:
    """Tests for extract_name_from_url."""

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://github.com/user/repo.git", "repo"),
            ("https://github.com/user/repo", "repo"),
            ("https://github.com/user/repo/", "repo"),
            ("git@github.com:user/repo.git", "repo"),
            ("file:///srv/git/tempo-funcs.git", "tempo-funcs"),
            ("  https://example.com/a/b  ", "b"),
        ],
    )
    def test_extracts_last_segment(self, url: str, expected: str) -> None:
        """Should strip .git and return the last path segment."""
        assert extract_name_from_url(url) == expected

    def test_empty_url(self) -> None:
        """Should return an empty name for an empty reference."""
        assert extract_name_from_url("") == ""

    @pytest.mark.parametrize("url, expected", [("file:///x/..", ".."), ("file:///x/.", ".")])
    def test_dot_segments_are_returned_as_is(self, url: str, expected: str) -> None:
        """Relative segments come back unchanged; callers must refuse them."""
        assert extract_name_from_url(url) == expected


class TestExtractNameFromPath:
    """Tests for extract_name_from_path."""

    def test_last_folder(self) -> None:
        assert extract_name_from_path("./funcs/strings") == "strings"

    def test_trailing_slash(self) -> None:
        assert extract_name_from_path("/opt/funcs/") == "funcs"

    def test_empty(self) -> None:
        assert extract_name_from_path("") == ""


class TestExtensionClonePath:
    """Tests for extension_clone_path."""

    def test_clone_path_under_extensions(self, tmp_path: Path) -> None:
        """Should place clones under <data_dir>/extensions/<name>."""
        path = extension_clone_path(tmp_path, "https://github.com/acme/strings.git")

        assert path == tmp_path / "extensions" / "strings"

    def test_same_name_maps_to_same_path(self, tmp_path: Path) -> None:
        """Two references with the same short name share a clone path."""
        a = extension_clone_path(tmp_path, "https://github.com/acme/strings.git")
        b = extension_clone_path(tmp_path, "git@gitlab.com:other/strings")

        assert a == b


class TestIsUsableCloneName:
    """Tests for is_usable_clone_name."""

    @pytest.mark.parametrize("name", ["", ".", "..", "a/b", "a\\b"])
    def test_rejected(self, name: str) -> None:
        assert not is_usable_clone_name(name)

    @pytest.mark.parametrize("name", ["strings", "tempo-funcs", "..hidden", "v1.2"])
    def test_accepted(self, name: str) -> None:
        assert is_usable_clone_name(name)
