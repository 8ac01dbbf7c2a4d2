"""Parse the dependency specifiers found in `tsconfig.json` manifests.

A specifier is a scheme-prefixed reference such as `npm:@scope/name`, `github:owner/repo/path#sha`,
`bower:name`, `file:./typings/foo.d.ts`, or a plain `https://` URL.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlsplit

from .errors import InvalidFileKind, UnsupportedDependency
from .fs import BOWER_MANIFEST, NATIVE_MANIFEST, NPM_MANIFEST, basename, is_definition, is_native_manifest

DEFAULT_REVISION = "master"

GIT_HOSTS = {
    "github": "https://raw.githubusercontent.com/{owner}/{repo}/{revision}/{path}",
    "bitbucket": "https://bitbucket.org/{owner}/{repo}/raw/{revision}/{path}",
}


class SpecifierType(str, Enum):
    """How the location of a dependency specifier is resolved."""

    file = "file"
    npm = "npm"
    bower = "bower"
    hosted = "hosted"


@dataclass(frozen=True)
class DependencySpecifier:
    """A parsed dependency reference."""

    raw: str
    type: SpecifierType
    location: str


def _segments(netloc: str, path: str) -> list[str]:
    # `scheme:a/b` has no netloc while `scheme://a/b` does; both name the same thing.
    segments = [s for s in path.split("/") if s]
    if netloc:
        segments.insert(0, netloc)
    return segments


def _git_path(segments: list[str]) -> str:
    path = "/".join(segments)
    if not path:
        return NATIVE_MANIFEST
    if is_definition(path) or is_native_manifest(path):
        return path
    return f"{path}/{NATIVE_MANIFEST}"


def _parse_file(raw: str, netloc: str, path: str) -> DependencySpecifier:
    location = os.path.normpath(netloc + path)
    filename = basename(location)
    if not (is_definition(filename) or filename == NATIVE_MANIFEST):
        raise InvalidFileKind(raw)
    return DependencySpecifier(raw=raw, type=SpecifierType.file, location=location)


def _parse_git(raw: str, scheme: str, netloc: str, path: str, fragment: str) -> DependencySpecifier:
    segments = _segments(netloc, path)
    if len(segments) < 2:  # noqa: PLR2004
        raise UnsupportedDependency(raw)
    owner, repo, *sub_path = segments
    location = GIT_HOSTS[scheme].format(
        owner=owner,
        repo=repo,
        revision=fragment or DEFAULT_REVISION,
        path=_git_path(sub_path),
    )
    return DependencySpecifier(raw=raw, type=SpecifierType.hosted, location=location)


def _parse_npm(raw: str, netloc: str, path: str) -> DependencySpecifier:
    segments = _segments(netloc, path)
    if not segments:
        raise UnsupportedDependency(raw)
    name, *sub_path = segments
    # Scoped packages (`@scope/name`) take two segments.
    if name.startswith("@"):
        if not sub_path:
            raise UnsupportedDependency(raw)
        name = f"{name}/{sub_path.pop(0)}"
    location = os.path.normpath(f"{name}/{'/'.join(sub_path) or NPM_MANIFEST}")
    return DependencySpecifier(raw=raw, type=SpecifierType.npm, location=location)


def _parse_bower(raw: str, netloc: str, path: str) -> DependencySpecifier:
    segments = _segments(netloc, path)
    if not segments:
        raise UnsupportedDependency(raw)
    name, *sub_path = segments
    location = os.path.normpath(f"{name}/{'/'.join(sub_path) or BOWER_MANIFEST}")
    return DependencySpecifier(raw=raw, type=SpecifierType.bower, location=location)


def parse_dependency(raw: str) -> DependencySpecifier:
    """Parse a dependency specifier.

    Raises `UnsupportedDependency` for unknown schemes and `InvalidFileKind` for `file:` specifiers that name
    neither a declaration file nor `tsconfig.json`.

    """
    parsed = urlsplit(raw)
    scheme = parsed.scheme

    if scheme == "file":
        return _parse_file(raw, parsed.netloc, parsed.path)
    if scheme in GIT_HOSTS:
        return _parse_git(raw, scheme, parsed.netloc, parsed.path, parsed.fragment)
    if scheme == "npm":
        return _parse_npm(raw, parsed.netloc, parsed.path)
    if scheme == "bower":
        return _parse_bower(raw, parsed.netloc, parsed.path)
    if scheme in ("http", "https"):
        return DependencySpecifier(raw=raw, type=SpecifierType.hosted, location=parsed.geturl())

    raise UnsupportedDependency(raw)
