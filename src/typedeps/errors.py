"""Errors raised while parsing and resolving declaration dependencies."""

from __future__ import annotations


class TypedepsError(Exception):
    """Base class for every error raised by typedeps."""


class UnsupportedDependency(TypedepsError, ValueError):  # noqa: N818
    """A dependency specifier uses a scheme that is not recognized."""

    def __init__(self, raw: str) -> None:
        """Initialize with the offending specifier."""
        super().__init__(f"Unsupported dependency: {raw}")
        self.raw: str = raw


class InvalidFileKind(TypedepsError, ValueError):  # noqa: N818
    """A `file:` specifier points at something other than a declaration file or `tsconfig.json`."""

    def __init__(self, raw: str) -> None:
        """Initialize with the offending specifier."""
        super().__init__(f"Only `.d.ts` files and `tsconfig.json` are supported: {raw}")
        self.raw: str = raw


class CircularDependency(TypedepsError):  # noqa: N818
    """A resolution revisited a source that is already being resolved further up the chain."""

    def __init__(self, src: str) -> None:
        """Initialize with the source that closed the cycle."""
        super().__init__(f"Circular dependency detected in {src}")
        self.src: str = src


class MalformedManifest(TypedepsError, ValueError):  # noqa: N818
    """A manifest exists but can not be parsed or lacks a required structure."""

    def __init__(self, src: str, reason: str) -> None:
        """Initialize with the manifest location and what is wrong with it."""
        super().__init__(f"Malformed manifest {src}: {reason}")
        self.src: str = src
        self.reason: str = reason


class ResolutionNotFound(TypedepsError, FileNotFoundError):  # noqa: N818
    """No ancestor directory contains the requested file."""

    def __init__(self, filename: str, start_dir: str) -> None:
        """Initialize with the searched filename and the directory the search started from."""
        super().__init__(f"Unable to resolve {filename} from {start_dir}")
        self.filename: str = filename
        self.start_dir: str = start_dir
