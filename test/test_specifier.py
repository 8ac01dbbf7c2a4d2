"""Tests for parsing dependency specifiers."""

import os
from unittest import TestCase

import pytest

from typedeps.errors import InvalidFileKind, UnsupportedDependency
from typedeps.specifier import DependencySpecifier, SpecifierType, parse_dependency


class TestParseFile(TestCase):
    """Tests for `file:` specifiers."""

    def test_dot_relative(self) -> None:
        """Test a `./` prefix is normalized away."""
        assert parse_dependency("file:./foo/bar.d.ts") == DependencySpecifier(
            raw="file:./foo/bar.d.ts",
            type=SpecifierType.file,
            location=os.path.normpath("foo/bar.d.ts"),
        )

    def test_relative(self) -> None:
        """Test a plain relative declaration file."""
        spec = parse_dependency("file:foo/bar.d.ts")
        assert spec.type == SpecifierType.file
        assert spec.location == os.path.normpath("foo/bar.d.ts")

    def test_tsconfig(self) -> None:
        """Test a `tsconfig.json` in a parent directory."""
        spec = parse_dependency("file:../other/tsconfig.json")
        assert spec.location == os.path.normpath("../other/tsconfig.json")

    def test_other_file_kinds_are_rejected(self) -> None:
        """Test files that are neither declarations nor `tsconfig.json` raise InvalidFileKind."""
        with pytest.raises(InvalidFileKind) as excinfo:
            parse_dependency("file:foo/bar.js")
        assert excinfo.value.raw == "file:foo/bar.js"
        # Also a ValueError, for callers that only care about bad input.
        assert isinstance(excinfo.value, ValueError)


class TestParseNpm(TestCase):
    """Tests for `npm:` specifiers."""

    def test_package(self) -> None:
        """Test a package defaults to its `package.json`."""
        assert parse_dependency("npm:foobar") == DependencySpecifier(
            raw="npm:foobar",
            type=SpecifierType.npm,
            location=os.path.normpath("foobar/package.json"),
        )

    def test_scoped_package(self) -> None:
        """Test a scoped package name spans two segments."""
        spec = parse_dependency("npm:@foo/bar")
        assert spec.location == os.path.normpath("@foo/bar/package.json")

    def test_scoped_package_path(self) -> None:
        """Test a path inside a scoped package."""
        spec = parse_dependency("npm:@foo/bar/typings/index.d.ts")
        assert spec.location == os.path.normpath("@foo/bar/typings/index.d.ts")

    def test_file_in_package(self) -> None:
        """Test a declaration file inside a package."""
        spec = parse_dependency("npm:typescript/bin/lib.es6.d.ts")
        assert spec.type == SpecifierType.npm
        assert spec.location == os.path.normpath("typescript/bin/lib.es6.d.ts")

    def test_scope_without_name(self) -> None:
        """Test a bare scope is unsupported."""
        with pytest.raises(UnsupportedDependency):
            parse_dependency("npm:@foo")


class TestParseBower(TestCase):
    """Tests for `bower:` specifiers."""

    def test_package(self) -> None:
        """Test a component defaults to its `bower.json`."""
        assert parse_dependency("bower:foobar") == DependencySpecifier(
            raw="bower:foobar",
            type=SpecifierType.bower,
            location=os.path.normpath("foobar/bower.json"),
        )

    def test_file_in_package(self) -> None:
        """Test a `tsconfig.json` inside a component."""
        spec = parse_dependency("bower:foobar/tsconfig.json")
        assert spec.type == SpecifierType.bower
        assert spec.location == os.path.normpath("foobar/tsconfig.json")


class TestParseHosted(TestCase):
    """Tests for git-hosted and URL specifiers."""

    def test_github(self) -> None:
        """Test a GitHub repository defaults to `master` and its `tsconfig.json`."""
        assert parse_dependency("github:foo/bar") == DependencySpecifier(
            raw="github:foo/bar",
            type=SpecifierType.hosted,
            location="https://raw.githubusercontent.com/foo/bar/master/tsconfig.json",
        )

    def test_github_revision(self) -> None:
        """Test the fragment selects the revision."""
        spec = parse_dependency("github:foo/bar#test")
        assert spec.location == "https://raw.githubusercontent.com/foo/bar/test/tsconfig.json"

    def test_github_declaration_path(self) -> None:
        """Test a declaration path is not suffixed with `tsconfig.json`."""
        spec = parse_dependency("github:foo/bar/typings/tsd.d.ts")
        assert spec.location == "https://raw.githubusercontent.com/foo/bar/master/typings/tsd.d.ts"

    def test_github_tsconfig_path(self) -> None:
        """Test an explicit `tsconfig.json` path is kept."""
        spec = parse_dependency("github:foo/bar/src/tsconfig.json")
        assert spec.location == "https://raw.githubusercontent.com/foo/bar/master/src/tsconfig.json"

    def test_bitbucket(self) -> None:
        """Test a Bitbucket repository."""
        spec = parse_dependency("bitbucket:foo/bar")
        assert spec.type == SpecifierType.hosted
        assert spec.location == "https://bitbucket.org/foo/bar/raw/master/tsconfig.json"

    def test_bitbucket_directory(self) -> None:
        """Test a directory path gets `tsconfig.json` appended."""
        spec = parse_dependency("bitbucket:foo/bar/dir")
        assert spec.location == "https://bitbucket.org/foo/bar/raw/master/dir/tsconfig.json"

    def test_bitbucket_revision(self) -> None:
        """Test a Bitbucket revision."""
        spec = parse_dependency("bitbucket:foo/bar#abc")
        assert spec.location == "https://bitbucket.org/foo/bar/raw/abc/tsconfig.json"

    def test_missing_repository(self) -> None:
        """Test an owner without a repository is unsupported."""
        with pytest.raises(UnsupportedDependency):
            parse_dependency("github:foo")

    def test_url(self) -> None:
        """Test a URL is kept verbatim."""
        assert parse_dependency("http://example.com/foo/tsconfig.json") == DependencySpecifier(
            raw="http://example.com/foo/tsconfig.json",
            type=SpecifierType.hosted,
            location="http://example.com/foo/tsconfig.json",
        )


class TestUnsupported(TestCase):
    """Tests for specifiers with unknown or missing schemes."""

    def test_unknown_scheme(self) -> None:
        """Test an unknown scheme raises UnsupportedDependency."""
        with pytest.raises(UnsupportedDependency, match="Unsupported dependency"):
            parse_dependency("random:fake/dep")

    def test_no_scheme(self) -> None:
        """Test a bare path raises UnsupportedDependency."""
        with pytest.raises(UnsupportedDependency):
            parse_dependency("foo/bar.d.ts")
