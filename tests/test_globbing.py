"""
Tests for SQL-style pattern resolution.
"""

import os

import pytest

from fsguard.filesystem import globbing
from fsguard.filesystem.config import GlobLimits
from fsguard.filesystem.exceptions import (
    InvalidPathError,
    NotADirectoryPathError,
    PathNotFoundError,
)
from fsguard.filesystem.globbing import (
    MAX_RECURSIVE_GLOBS,
    expand_pattern,
    is_folder_match,
    list_directories_in_directory,
    list_files_in_directory,
    resolve_file_pattern,
    translate_pattern,
)
from fsguard.filesystem.platform import expand_braces

SEP = os.sep


@pytest.fixture
def tree(temp_dir):
    """
    Create a small directory tree:

        tree/a.txt
        tree/b.conf
        tree/sub/c.txt
        tree/sub/deep/d.txt
    """
    root = temp_dir / "tree"
    (root / "sub" / "deep").mkdir(parents=True)
    (root / "a.txt").write_text("a")
    (root / "b.conf").write_text("b")
    (root / "sub" / "c.txt").write_text("c")
    (root / "sub" / "deep" / "d.txt").write_text("d")
    return root


@pytest.fixture
def link(temp_dir, tree):
    """A symlink pointing at the tree root."""
    path = temp_dir / "link"
    path.symlink_to(tree, target_is_directory=True)
    return path


class TestTranslatePattern:
    """Test pattern translation."""

    def test_percent_is_star(self, tree):
        """Test that SQL wildcards translate exactly like glob wildcards."""
        translated = translate_pattern(f"{tree}/%.txt")
        assert translated == translate_pattern(f"{tree}/*.txt")
        assert "%" not in translated

    def test_every_percent_replaced(self, tree):
        """Test that all SQL wildcards are replaced, not just the first."""
        assert translate_pattern(f"{tree}/%/%%") == f"{tree}/*/**"

    def test_relative_pattern_anchored_at_cwd(self, tree, monkeypatch):
        """Test that relative patterns are prefixed with the working directory."""
        monkeypatch.chdir(tree)
        assert translate_pattern("*.txt") == f"{tree}{SEP}*.txt"

    def test_idempotent(self, tree):
        """Test that translating a canonical pattern again changes nothing."""
        once = translate_pattern(f"{tree}/sub/../sub/*")
        assert once == f"{tree}/sub/*"
        assert translate_pattern(once) == once

    def test_symlink_base_canonicalized(self, tree, link):
        """Test that a symlinked base resolves to its target directory."""
        assert translate_pattern(f"{link}/*") == f"{tree}/*"

    def test_canonical_directory_keeps_separator(self, tree, link):
        """Test that a canonicalized directory base keeps its separator."""
        assert translate_pattern(f"{link}/sub/%.txt") == f"{tree}/sub/*.txt"

    def test_missing_base_unchanged(self, tree):
        """Test that a base that does not exist is left as constructed."""
        pattern = f"{tree}/missing/../*"
        assert translate_pattern(pattern) == pattern

    def test_no_canon(self, link):
        """Test that NO_CANON skips canonicalization."""
        pattern = f"{link}/*"
        assert translate_pattern(pattern, GlobLimits.ALL | GlobLimits.NO_CANON) == pattern

    def test_home_shorthand_not_expanded(self):
        """Test that ~ patterns are left for the lower-level glob."""
        assert translate_pattern("~/.ssh/%") == "~/.ssh/*"

    def test_empty_pattern(self):
        """Test that an empty pattern passes through."""
        assert translate_pattern("") == ""


class TestExpandPattern:
    """Test pattern expansion."""

    def test_direct_children(self, tree):
        """Test that dir/* returns each child exactly once with its kind."""
        results = resolve_file_pattern(f"{tree}/*")

        assert len(results) == 3
        assert set(results) == {
            f"{tree}/a.txt",
            f"{tree}/b.conf",
            f"{tree}/sub{SEP}",
        }
        assert [r for r in results if is_folder_match(r)] == [f"{tree}/sub{SEP}"]

    def test_files_only(self, tree):
        """Test that FILES drops directories."""
        results = resolve_file_pattern(f"{tree}/*", GlobLimits.FILES)
        assert set(results) == {f"{tree}/a.txt", f"{tree}/b.conf"}

    def test_folders_only(self, tree):
        """Test that FOLDERS drops files."""
        results = resolve_file_pattern(f"{tree}/*", GlobLimits.FOLDERS)
        assert results == [f"{tree}/sub{SEP}"]

    def test_recursive(self, tree):
        """Test that dir/** returns every descendant at every depth."""
        results = resolve_file_pattern(f"{tree}/**")

        assert len(results) == len(set(results))
        assert set(results) == {
            f"{tree}/a.txt",
            f"{tree}/b.conf",
            f"{tree}/sub{SEP}",
            f"{tree}/sub/c.txt",
            f"{tree}/sub/deep{SEP}",
            f"{tree}/sub/deep/d.txt",
        }

    def test_recursive_sql_wildcard(self, tree):
        """Test that %% behaves like **."""
        assert resolve_file_pattern(f"{tree}/%%") == resolve_file_pattern(f"{tree}/**")

    def test_recursive_files_still_descends(self, tree):
        """Test that limiting to files does not stop directory traversal."""
        results = resolve_file_pattern(f"{tree}/**", GlobLimits.FILES)
        assert set(results) == {
            f"{tree}/a.txt",
            f"{tree}/b.conf",
            f"{tree}/sub/c.txt",
            f"{tree}/sub/deep/d.txt",
        }

    def test_recursive_trailing_separator(self, tree):
        """Test that a trailing separator after ** matches directories only."""
        results = resolve_file_pattern(f"{tree}/**/")
        assert set(results) == {f"{tree}/sub{SEP}", f"{tree}/sub/deep{SEP}"}

    def test_star_does_not_cross_directories(self, tree):
        """Test that a single * matches within one level only."""
        results = resolve_file_pattern(f"{tree}/*.txt")
        assert results == [f"{tree}/a.txt"]

    def test_no_matches_is_empty(self, tree):
        """Test that no matches is an empty result, not an error."""
        assert resolve_file_pattern(f"{tree}/nothing*") == []
        assert resolve_file_pattern(f"{tree}/missing/**") == []

    def test_malformed_pattern_is_empty(self, tree):
        """Test that malformed patterns degrade to no matches."""
        assert resolve_file_pattern(f"{tree}/[") == []

    def test_nul_byte_is_empty(self, tree):
        """Test that a pattern with a NUL byte resolves to nothing."""
        assert resolve_file_pattern(f"{tree}/a\x00%") == []

    def test_brace_alternation(self, tree):
        """Test that {a,b} alternatives are expanded."""
        results = resolve_file_pattern(f"{tree}/{{a.txt,b.conf}}")
        assert results == [f"{tree}/a.txt", f"{tree}/b.conf"]

    def test_symlink_cycle_terminates(self, tree):
        """Test that a recursive glob over a symlink cycle terminates."""
        (tree / "sub" / "loop").symlink_to(tree / "sub", target_is_directory=True)

        results = resolve_file_pattern(f"{tree}/**")

        assert f"{tree}/sub/loop{SEP}" in results
        deepest = max(r.count("loop") for r in results)
        assert deepest < MAX_RECURSIVE_GLOBS

    def test_iteration_bound(self, monkeypatch):
        """Test that expansion stops after the fixed number of passes."""
        calls = []

        def fake_glob(pattern):
            calls.append(pattern)
            return [pattern.replace("*", "x")]

        monkeypatch.setattr(globbing, "platform_glob", fake_glob)

        expand_pattern("/root/**")

        assert len(calls) == MAX_RECURSIVE_GLOBS
        assert calls[1] == "/root/**/**"

    def test_non_recursive_single_pass(self, monkeypatch):
        """Test that a pattern without a recursive ending is globbed once."""
        calls = []

        def fake_glob(pattern):
            calls.append(pattern)
            return ["/a"]

        monkeypatch.setattr(globbing, "platform_glob", fake_glob)

        expand_pattern("/root/**/x")
        assert len(calls) == 1


class TestExpandBraces:
    """Test brace alternation."""

    def test_simple(self):
        """Test a single brace group."""
        assert expand_braces("a{b,c}d") == ["abd", "acd"]

    def test_nested(self):
        """Test nested brace groups."""
        assert expand_braces("a{b,c{d,e}}f") == ["abf", "acdf", "acef"]

    def test_unbalanced_is_literal(self):
        """Test that unbalanced braces are kept literally."""
        assert expand_braces("a{b,c") == ["a{b,c"]


class TestListDirectory:
    """Test directory listing helpers."""

    def test_list_files(self, tree):
        """Test listing the files directly in a directory."""
        assert set(list_files_in_directory(tree)) == {
            f"{tree}/a.txt",
            f"{tree}/b.conf",
        }

    def test_list_files_recursive(self, tree):
        """Test listing files at every depth."""
        assert len(list_files_in_directory(tree, recursive=True)) == 4

    def test_list_directories_recursive(self, tree):
        """Test listing directories at every depth."""
        assert set(list_directories_in_directory(tree, recursive=True)) == {
            f"{tree}/sub{SEP}",
            f"{tree}/sub/deep{SEP}",
        }

    def test_missing_directory(self, tree):
        """Test that a missing directory raises PathNotFoundError."""
        with pytest.raises(PathNotFoundError):
            list_files_in_directory(tree / "missing")

    def test_not_a_directory(self, tree):
        """Test that a file raises NotADirectoryPathError."""
        with pytest.raises(NotADirectoryPathError):
            list_files_in_directory(tree / "a.txt")

    def test_nul_byte(self, tree):
        """Test that a directory path with a NUL byte raises InvalidPathError."""
        with pytest.raises(InvalidPathError):
            list_directories_in_directory(f"{tree}\x00")
