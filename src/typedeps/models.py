"""Core data models for declaration dependency resolution."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .errors import MalformedManifest
from .typedeps import APP_DIRS

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_CACHE_PATH = Path(APP_DIRS.user_cache_dir) / "remote-cache.sqlite"


class TreeType(str, Enum):
    """The ecosystem a dependency tree node was resolved from."""

    npm = "npm"
    bower = "bower"
    native = "native"


@dataclass(frozen=True)
class Options:
    """Options threaded through a resolution.

    Each nested resolution receives its own copy from `for_child()`, so development dependencies are only
    ever collected at the level that asked for them.

    """

    dev: bool = False
    cache_path: Path | str = DEFAULT_CACHE_PATH

    def for_child(self) -> Options:
        """Return the options used for the dependencies of the current node."""
        return replace(self, dev=False)


@dataclass
class Typings:
    """Declaration entry points of a package."""

    main: str | None = None
    browser: str | None = None

    @staticmethod
    def from_manifest(manifest: Mapping[str, Any]) -> Typings:
        """Extract the typings from a `package.json`-like object."""
        typings = manifest.get("typings")
        if isinstance(typings, str):
            return Typings(main=typings)
        if isinstance(typings, dict):
            return Typings(main=_as_str(typings.get("main")), browser=_as_str(typings.get("browser")))
        return Typings()

    def to_obj(self) -> dict[str, str]:
        """Convert typings to a dictionary, leaving out undefined entry points."""
        ret = {}
        if self.main is not None:
            ret["main"] = self.main
        if self.browser is not None:
            ret["browser"] = self.browser
        return ret


@dataclass
class DependencyTree:
    """A resolved package or declaration file and the trees of everything it depends on."""

    type: TreeType | None = None
    name: str | None = None
    version: str | None = None
    main: str | None = None
    browser: str | None = None
    typings: Typings = field(default_factory=Typings)
    ambient: bool = False
    missing: bool = False
    src: str | None = None
    # Only ever walked upwards by the circular dependency check.
    parent: DependencyTree | None = field(default=None, repr=False, compare=False)
    dependencies: dict[str, DependencyTree] = field(default_factory=dict)
    dev_dependencies: dict[str, DependencyTree] = field(default_factory=dict)
    ambient_dependencies: dict[str, DependencyTree] = field(default_factory=dict)

    @classmethod
    def missing_sentinel(
        cls,
        tree_type: TreeType | None = None,
        src: str | None = None,
        parent: DependencyTree | None = None,
    ) -> DependencyTree:
        """Create the node that stands in for a source that could not be found."""
        return cls(type=tree_type, missing=True, src=src, parent=parent)

    def ancestors(self) -> list[DependencyTree]:
        """Return this node followed by each of its parents, up to the resolution root."""
        chain = []
        node: DependencyTree | None = self
        while node is not None:
            chain.append(node)
            node = node.parent
        return chain

    def to_obj(self) -> dict[str, Any]:
        """Convert the tree to a JSON-serializable dictionary."""
        ret: dict[str, Any] = {
            "type": None if self.type is None else self.type.value,
            "missing": self.missing,
            "ambient": self.ambient,
        }
        for key in ("name", "version", "main", "browser", "src"):
            value = getattr(self, key)
            if value is not None:
                ret[key] = value
        ret["typings"] = self.typings.to_obj()
        ret["dependencies"] = {name: dep.to_obj() for name, dep in self.dependencies.items()}
        ret["devDependencies"] = {name: dep.to_obj() for name, dep in self.dev_dependencies.items()}
        ret["ambientDependencies"] = {name: dep.to_obj() for name, dep in self.ambient_dependencies.items()}
        return ret


def _as_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class Manifest:
    """The fields shared by every ecosystem manifest."""

    src: str
    name: str | None = None
    version: str | None = None
    main: str | None = None
    browser: str | None = None
    typings: Typings = field(default_factory=Typings)
    ambient: bool = False
    dependencies: dict[str, Any] = field(default_factory=dict)
    dev_dependencies: dict[str, Any] = field(default_factory=dict)
    ambient_dependencies: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def object_from(src: str, obj: object) -> dict[str, Any]:
        """Check that a parsed manifest is a JSON object."""
        if obj is None:
            return {}
        if not isinstance(obj, dict):
            raise MalformedManifest(src, "expected a JSON object")
        return obj

    @staticmethod
    def string_field(obj: Mapping[str, Any], key: str) -> str | None:
        """Return a string-valued field, ignoring values of any other type."""
        return _as_str(obj.get(key))

    @staticmethod
    def dependency_map(src: str, obj: Mapping[str, Any], key: str) -> dict[str, Any]:
        """Return a copy of the dependency map stored under `key`."""
        value = obj.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict):
            msg = f"`{key}` must be an object"
            raise MalformedManifest(src, msg)
        return dict(value)
