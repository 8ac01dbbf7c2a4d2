"""Resolve dependencies declared in the `"tsd"` section of `tsconfig.json`."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from .errors import MalformedManifest
from .fs import NATIVE_MANIFEST
from .models import DependencyTree, Manifest, Options, TreeType, Typings
from .resolver import EcosystemResolver

if TYPE_CHECKING:
    from .resolution import Resolution

log = getLogger(__name__)

TSD_SECTION = "tsd"


def _candidates(src: str, name: str, value: object) -> list[str]:
    """Return the ordered specifiers a dependency entry may be satisfied by."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    msg = f"dependency `{name}` must be a specifier or a list of specifiers"
    raise MalformedManifest(src, msg)


@dataclass(frozen=True)
class NativeManifest(Manifest):
    """The `"tsd"` section of a `tsconfig.json`; dependency values are lists of candidate specifiers."""

    @staticmethod
    def from_json(src: str, obj: object, *, required: bool = True) -> NativeManifest | None:
        """Build the manifest from the parsed `tsconfig.json` at `src`.

        A missing `"tsd"` section raises `MalformedManifest`, unless `required` is False, in which case None
        is returned.

        """
        tsd = obj.get(TSD_SECTION) if isinstance(obj, dict) else None
        if not isinstance(tsd, dict):
            if not required:
                log.debug("%s does not contain a %r section", src, TSD_SECTION)
                return None
            msg = f"File `{NATIVE_MANIFEST}` does not contain a {TSD_SECTION!r} section"
            raise MalformedManifest(src, msg)

        def dependency_map(key: str) -> dict[str, list[str]]:
            return {
                name: _candidates(src, name, value)
                for name, value in Manifest.dependency_map(src, tsd, key).items()
            }

        return NativeManifest(
            src=src,
            name=Manifest.string_field(tsd, "name"),
            typings=Typings.from_manifest(tsd),
            ambient=bool(tsd.get("ambient")),
            dependencies=dependency_map("dependencies"),
            dev_dependencies=dependency_map("devDependencies"),
            ambient_dependencies=dependency_map("ambientDependencies"),
        )


class NativeResolver(EcosystemResolver):
    """Resolver for `tsconfig.json` manifests, local or hosted."""

    name = TreeType.native
    description = "resolves the declaration dependencies listed in `tsconfig.json`"
    manifest_filename = NATIVE_MANIFEST
    reads_sibling_manifest = False

    def parse_manifest(self, src: str, obj: object, *, required: bool = True) -> NativeManifest | None:
        """Parse the `"tsd"` section of a `tsconfig.json`."""
        return NativeManifest.from_json(src, obj, required=required)

    async def resolve_entry(
        self,
        resolution: Resolution,
        name: str,  # noqa: ARG002
        value: Any,  # noqa: ANN401
        options: Options,
        parent: DependencyTree,
        base: str,
    ) -> DependencyTree:
        """Resolve the first candidate specifier of an entry that is not missing."""
        return await resolution.resolve_dependency(base, value, options, parent)
