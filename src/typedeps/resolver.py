"""The per-ecosystem resolver interface and the registry of resolver instances."""

from __future__ import annotations

import asyncio
import functools
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from .errors import ResolutionNotFound
from .fs import NATIVE_MANIFEST, dirname, resolve_from
from .models import DependencyTree, TreeType
from .tree import check_circular_dependency

if TYPE_CHECKING:
    from .models import Manifest, Options
    from .resolution import Resolution

logger = logging.getLogger(__name__)


class EcosystemResolver(ABC):
    """Resolve the manifests of one package ecosystem into dependency trees.

    Every ecosystem follows the same steps: check the manifest against the chain of resolutions that led to
    it, read it, build a node from it, then concurrently resolve each of its dependency maps together with a
    `tsconfig.json` that may sit beside it.

    """

    name: TreeType
    description: str
    manifest_filename: str
    # Whether a `tsconfig.json` beside the manifest contributes its dependencies to the node.
    reads_sibling_manifest: bool = True
    _instance: EcosystemResolver | None = None

    def __new__(cls, *args: object, **kwargs: object) -> EcosystemResolver:  # noqa: PYI034
        """Create a singleton instance."""
        if not isinstance(cls._instance, cls):
            cls._instance = super().__new__(cls, *args, **kwargs)
        return cls._instance

    def __init_subclass__(cls, **kwargs: object) -> None:
        """Validate subclass configuration."""
        for attr in ("name", "description", "manifest_filename"):
            if getattr(cls, attr, None) is None:
                error_msg = f"{cls.__name__} must define a `{attr}` class member"
                raise TypeError(error_msg)
        resolvers.cache_clear()
        resolver_by_name.cache_clear()

    @abstractmethod
    def parse_manifest(self, src: str, obj: object, *, required: bool = True) -> Manifest | None:
        """Convert the parsed JSON of a manifest into a `Manifest`.

        Returns None when the manifest holds nothing for this ecosystem and `required` is False.

        """
        raise NotImplementedError

    @abstractmethod
    async def resolve_entry(
        self,
        resolution: Resolution,
        name: str,
        value: Any,  # noqa: ANN401
        options: Options,
        parent: DependencyTree,
        base: str,
    ) -> DependencyTree:
        """Resolve one entry of a dependency map, relative to the dependency base `base`."""
        raise NotImplementedError

    async def dependency_base(self, resolution: Resolution, src: str) -> str:  # noqa: ARG002
        """Return the location that the dependencies listed in `src` are resolved from."""
        return dirname(src)

    async def resolve_location(
        self,
        resolution: Resolution,
        base_dir: str,
        location: str,
        options: Options,
        parent: DependencyTree | None = None,
    ) -> DependencyTree:
        """Resolve a location named by a dependency specifier, relative to `base_dir`."""
        src = resolve_from(base_dir, location)
        return await resolution.resolve_located(self, src, options, parent)

    async def resolve_root(self, resolution: Resolution, root_dir: str, options: Options) -> DependencyTree:
        """Resolve the project manifest found by searching upward from `root_dir`."""
        try:
            src = await resolution.find_up(root_dir, self.manifest_filename)
        except ResolutionNotFound:
            logger.debug("No %s found from %s", self.manifest_filename, root_dir)
            return DependencyTree.missing_sentinel(self.name)
        return await self.resolve_from(resolution, src, options)

    def build_tree(self, manifest: Manifest, parent: DependencyTree | None) -> DependencyTree:
        """Create the node for a manifest, without any dependencies."""
        return DependencyTree(
            type=self.name,
            name=manifest.name,
            version=manifest.version,
            main=manifest.main,
            browser=manifest.browser,
            typings=manifest.typings,
            ambient=manifest.ambient,
            src=manifest.src,
            parent=parent,
        )

    async def resolve_from(
        self,
        resolution: Resolution,
        src: str,
        options: Options,
        parent: DependencyTree | None = None,
        base: str | None = None,
        *,
        required: bool = True,
    ) -> DependencyTree:
        """Resolve the manifest at `src` and, recursively, everything it depends on."""
        check_circular_dependency(parent, src)

        try:
            obj = await resolution.read_manifest(src)
        except FileNotFoundError:
            logger.debug("Missing %s manifest %s", self.name.value, src)
            return DependencyTree.missing_sentinel(self.name, src=src, parent=parent)

        manifest = self.parse_manifest(src, obj, required=required)
        if manifest is None:
            return DependencyTree.missing_sentinel(self.name, src=src, parent=parent)
        logger.debug("Resolving %s manifest %s", self.name.value, src)

        tree = self.build_tree(manifest, parent)
        if base is None:
            base = await self.dependency_base(resolution, src)
        child_options = options.for_child()

        dependencies, dev_dependencies, ambient_dependencies, sibling = await asyncio.gather(
            self.resolve_map(resolution, manifest.dependencies, child_options, tree, base),
            self.resolve_map(resolution, manifest.dev_dependencies if options.dev else {}, child_options, tree, base),
            self.resolve_map(resolution, manifest.ambient_dependencies, child_options, tree, base),
            self.resolve_sibling(resolution, src, options, tree),
        )

        if sibling is not None:
            dependencies = {**dependencies, **sibling.dependencies}
            dev_dependencies = {**dev_dependencies, **sibling.dev_dependencies}
        tree.dependencies = dependencies
        tree.dev_dependencies = dev_dependencies
        tree.ambient_dependencies = ambient_dependencies
        return tree

    async def resolve_map(
        self,
        resolution: Resolution,
        entries: dict[str, Any],
        options: Options,
        parent: DependencyTree,
        base: str,
    ) -> dict[str, DependencyTree]:
        """Concurrently resolve every entry of a dependency map."""
        names = list(entries)
        trees = await asyncio.gather(
            *(self.resolve_entry(resolution, name, entries[name], options, parent, base) for name in names)
        )
        return dict(zip(names, trees))

    async def resolve_sibling(
        self,
        resolution: Resolution,
        src: str,
        options: Options,
        parent: DependencyTree,
    ) -> DependencyTree | None:
        """Resolve the optional `tsconfig.json` shipped beside the manifest at `src`."""
        if not self.reads_sibling_manifest:
            return None
        sibling_src = resolve_from(dirname(src), NATIVE_MANIFEST)
        native = resolver_by_name(TreeType.native)
        return await native.resolve_from(resolution, sibling_src, options, parent, required=False)

    def __hash__(self) -> int:
        """Return hash of the resolver."""
        return hash(self.name)

    def __eq__(self, other: object) -> bool:
        """Check if two resolvers are equal."""
        return isinstance(other, EcosystemResolver) and other.name == self.name


@functools.lru_cache
def resolvers() -> frozenset[EcosystemResolver]:
    """Get collection of all the default instances of EcosystemResolvers."""
    return frozenset(
        cls()  # type: ignore[abstract]
        for cls in EcosystemResolver.__subclasses__()
    )


@functools.lru_cache
def resolver_by_name(name: TreeType | str) -> EcosystemResolver:
    """Find a resolver instance by ecosystem name. The result is cached."""
    for instance in resolvers():
        if instance.name == name:
            return instance
    raise KeyError(name)
