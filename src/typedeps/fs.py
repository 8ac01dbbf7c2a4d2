"""Filesystem, path, and URL helpers used by the resolvers."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any
from urllib.parse import urljoin

from .errors import MalformedManifest, ResolutionNotFound

DEFINITION_SUFFIX = ".d.ts"
NATIVE_MANIFEST = "tsconfig.json"
NPM_MANIFEST = "package.json"
BOWER_MANIFEST = "bower.json"

_HTTP_RE = re.compile(r"^https?:", re.IGNORECASE)


def is_http(location: str | None) -> bool:
    """Check if a location is an http(s) URL."""
    return location is not None and _HTTP_RE.match(location) is not None


def is_definition(filename: str) -> bool:
    """Check if a filename is a declaration file."""
    return filename.endswith(DEFINITION_SUFFIX)


def basename(location: str) -> str:
    """Return the last segment of a path or URL."""
    return location.replace(os.sep, "/").rstrip("/").rsplit("/", 1)[-1]


def is_native_manifest(location: str) -> bool:
    """Check if a path or URL names a `tsconfig.json` file."""
    return basename(location) == NATIVE_MANIFEST


def dirname(location: str) -> str:
    """Return the directory of a path or the base of a URL."""
    if is_http(location):
        return urljoin(location, ".")
    return os.path.dirname(location)


def resolve_from(base: str, location: str) -> str:
    """Resolve `location` relative to the directory (or URL) `base`."""
    if is_http(location):
        return location
    if is_http(base):
        return urljoin(base if base.endswith("/") else base + "/", location)
    return os.path.normpath(os.path.join(base, location))


def read_json(path: str | Path) -> Any:  # noqa: ANN401
    """Read a JSON file, ignoring a leading byte order mark.

    Raises `FileNotFoundError` when the file does not exist and `MalformedManifest` when it can not be read or
    parsed.

    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8-sig") as f:
            contents = f.read()
    except (IsADirectoryError, NotADirectoryError) as e:
        msg = f"{path!s} is not a file"
        raise FileNotFoundError(msg) from e
    except FileNotFoundError:
        raise
    except (UnicodeDecodeError, OSError) as e:
        raise MalformedManifest(str(path), str(e)) from e
    try:
        return json.loads(contents)
    except ValueError as e:
        raise MalformedManifest(str(path), str(e)) from e


def find_up(start_dir: str | Path, filename: str) -> Path:
    """Search `start_dir` and then each of its ancestors for `filename`."""
    directory = Path(start_dir).absolute()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / filename
        if candidate.is_file():
            return candidate
    raise ResolutionNotFound(filename, str(start_dir))
