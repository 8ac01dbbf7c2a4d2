"""Resolve declaration dependencies installed with Bower."""

from __future__ import annotations

import os
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from .errors import MalformedManifest
from .fs import BOWER_MANIFEST
from .models import DependencyTree, Manifest, Options, TreeType, Typings
from .resolver import EcosystemResolver

if TYPE_CHECKING:
    from .resolution import Resolution

log = getLogger(__name__)

BOWERRC = ".bowerrc"
DEFAULT_COMPONENT_DIR = "bower_components"


@dataclass(frozen=True)
class BowerManifest(Manifest):
    """The parts of a `bower.json` that matter for declaration resolution."""

    @staticmethod
    def from_json(src: str, obj: object) -> BowerManifest:
        """Build the manifest from the parsed `bower.json` at `src`."""
        bower = Manifest.object_from(src, obj)
        return BowerManifest(
            src=src,
            name=Manifest.string_field(bower, "name"),
            version=Manifest.string_field(bower, "version"),
            main=Manifest.string_field(bower, "main"),
            browser=Manifest.string_field(bower, "browser"),
            typings=Typings.from_manifest(bower),
            dependencies=Manifest.dependency_map(src, bower, "dependencies"),
            dev_dependencies=Manifest.dependency_map(src, bower, "devDependencies"),
        )


class BowerResolver(EcosystemResolver):
    """Resolver for `bower.json` manifests and their component directory."""

    name = TreeType.bower
    description = "resolves declarations of components installed by Bower"
    manifest_filename = BOWER_MANIFEST

    def parse_manifest(self, src: str, obj: object, *, required: bool = True) -> BowerManifest:  # noqa: ARG002
        """Parse a `bower.json`."""
        return BowerManifest.from_json(src, obj)

    async def component_path(self, resolution: Resolution, directory: str) -> str:
        """Return the component directory configured by the `.bowerrc` in `directory`."""
        component_dir = DEFAULT_COMPONENT_DIR
        try:
            bowerrc = await resolution.read_manifest(os.path.join(directory, BOWERRC))
        except (FileNotFoundError, MalformedManifest):
            bowerrc = None
        if isinstance(bowerrc, dict) and isinstance(bowerrc.get("directory"), str):
            component_dir = bowerrc["directory"]
        return os.path.normpath(os.path.join(os.path.abspath(directory), component_dir))

    async def dependency_base(self, resolution: Resolution, src: str) -> str:
        """Bower dependencies are installed flat, in the component directory of the project."""
        return await self.component_path(resolution, os.path.dirname(src))

    async def resolve_location(
        self,
        resolution: Resolution,
        base_dir: str,
        location: str,
        options: Options,
        parent: DependencyTree | None = None,
    ) -> DependencyTree:
        """Resolve a location inside the component directory of `base_dir`, such as `name/bower.json`."""
        component_dir = await self.component_path(resolution, base_dir)
        src = os.path.join(component_dir, location)
        return await resolution.resolve_located(self, src, options, parent, base=component_dir)

    async def resolve_entry(
        self,
        resolution: Resolution,
        name: str,
        value: Any,  # noqa: ANN401, ARG002
        options: Options,
        parent: DependencyTree,
        base: str,
    ) -> DependencyTree:
        """Resolve a `bower.json` dependency from the component directory `base`."""
        src = os.path.join(base, name, BOWER_MANIFEST)
        return await self.resolve_from(resolution, src, options, parent, base)
