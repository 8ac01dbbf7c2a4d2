"""Resolve declaration dependencies installed with npm."""

from __future__ import annotations

import os
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from semantic_version import NpmSpec, SimpleSpec, Version
from semantic_version.base import BaseSpec as SemanticVersion

from .errors import ResolutionNotFound
from .fs import NPM_MANIFEST
from .models import DependencyTree, Manifest, Options, TreeType, Typings
from .resolver import EcosystemResolver

if TYPE_CHECKING:
    from .resolution import Resolution

log = getLogger(__name__)

NODE_MODULES = "node_modules"


@dataclass(frozen=True)
class NpmManifest(Manifest):
    """The parts of a `package.json` that matter for declaration resolution."""

    @staticmethod
    def from_json(src: str, obj: object) -> NpmManifest:
        """Build the manifest from the parsed `package.json` at `src`."""
        package = Manifest.object_from(src, obj)
        # Later maps win when a name is listed more than once.
        dependencies = {
            **Manifest.dependency_map(src, package, "dependencies"),
            **Manifest.dependency_map(src, package, "peerDependencies"),
            **Manifest.dependency_map(src, package, "optionalDependencies"),
        }
        return NpmManifest(
            src=src,
            name=Manifest.string_field(package, "name"),
            version=Manifest.string_field(package, "version"),
            main=Manifest.string_field(package, "main"),
            browser=Manifest.string_field(package, "browser"),
            typings=Typings.from_manifest(package),
            dependencies=dependencies,
            dev_dependencies=Manifest.dependency_map(src, package, "devDependencies"),
        )


def parse_spec(spec: str) -> SemanticVersion:
    """Parse an npm version range, falling back to a wildcard when it is not a range at all."""
    try:
        return NpmSpec(spec)
    except ValueError:
        pass
    try:
        return SimpleSpec(spec)
    except ValueError:
        pass
    # Sometimes NPM specs have whitespace, which trips up the parser
    no_whitespace = "".join(c for c in spec if c != " ")
    if no_whitespace != spec:
        return parse_spec(no_whitespace)
    return SimpleSpec("*")


def satisfies(version: str, spec: str) -> bool:
    """Check if an installed version satisfies a declared range; unparsable versions always do."""
    try:
        parsed = Version.coerce(version)
    except ValueError:
        return True
    return bool(parse_spec(spec).match(parsed))


class NpmResolver(EcosystemResolver):
    """Resolver for `package.json` manifests and the `node_modules` they install."""

    name = TreeType.npm
    description = "resolves declarations of packages installed in `node_modules`"
    manifest_filename = NPM_MANIFEST

    def parse_manifest(self, src: str, obj: object, *, required: bool = True) -> NpmManifest:  # noqa: ARG002
        """Parse a `package.json`."""
        return NpmManifest.from_json(src, obj)

    async def locate(self, resolution: Resolution, base_dir: str, location: str) -> str:
        """Find `node_modules/<location>` the way Node does, searching upward from `base_dir`.

        When nothing is found the nearest candidate is returned, so the dependency resolves as missing.

        """
        relative = os.path.join(NODE_MODULES, location)
        try:
            return await resolution.find_up(base_dir, relative)
        except ResolutionNotFound:
            return os.path.normpath(os.path.join(os.path.abspath(base_dir), relative))

    async def resolve_location(
        self,
        resolution: Resolution,
        base_dir: str,
        location: str,
        options: Options,
        parent: DependencyTree | None = None,
    ) -> DependencyTree:
        """Resolve a location inside an installed npm package, such as `name/package.json`."""
        src = await self.locate(resolution, base_dir, location)
        return await resolution.resolve_located(self, src, options, parent)

    async def resolve_entry(
        self,
        resolution: Resolution,
        name: str,
        value: Any,  # noqa: ANN401
        options: Options,
        parent: DependencyTree,
        base: str,
    ) -> DependencyTree:
        """Resolve a `package.json` dependency by name."""
        tree = await self.resolve_location(resolution, base, f"{name}/{NPM_MANIFEST}", options, parent)
        if isinstance(value, str) and tree.version is not None and not satisfies(tree.version, value):
            log.warning("%s@%s does not satisfy %s required by %s", name, tree.version, value, parent.src)
        return tree
