"""Resolve the declaration dependencies of a project across every ecosystem."""

from __future__ import annotations

import asyncio
import functools
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from contextlib import ExitStack
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import requests

from .cache import RemoteFetchCache
from .errors import MalformedManifest
from .fs import dirname, find_up, is_definition, is_http, is_native_manifest, read_json, resolve_from
from .models import DependencyTree, Options, TreeType, Typings
from .remote import RawContentClient, is_not_found
from .resolver import EcosystemResolver, resolver_by_name
from .specifier import DependencySpecifier, SpecifierType, parse_dependency
from .tree import merge_trees

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")

# npm, then Bower, then native: later roots win when the merged fields collide.
ROOT_ORDER = (TreeType.npm, TreeType.bower, TreeType.native)


class Resolution:
    """The shared state of one resolution: where blocking work runs and how remote manifests are read.

    The tree itself is never shared: every branch builds and returns its own subtree.

    """

    def __init__(
        self,
        cache: RemoteFetchCache,
        client: RawContentClient | None = None,
        executor: Executor | None = None,
    ) -> None:
        """Initialize the resolution."""
        self.cache: RemoteFetchCache = cache
        self.client: RawContentClient = client if client is not None else RawContentClient(cache)
        self.executor: Executor | None = executor

    async def run(self, func: Callable[..., T], *args: Any) -> T:  # noqa: ANN401
        """Run blocking work on the executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, functools.partial(func, *args))

    async def find_up(self, start_dir: str, filename: str) -> str:
        """Search upward from `start_dir` for `filename`."""
        return str(await self.run(find_up, start_dir, filename))

    async def read_manifest(self, src: str) -> Any:  # noqa: ANN401
        """Read the JSON at a path or URL; raises `FileNotFoundError` if there is nothing there."""
        if not is_http(src):
            return await self.run(read_json, src)
        try:
            return await self.run(self.client.get_json, src)
        except requests.HTTPError as e:
            if is_not_found(e):
                msg = f"{src} was not found"
                raise FileNotFoundError(msg) from e
            raise
        except ValueError as e:
            # `requests.JSONDecodeError` is a ValueError
            raise MalformedManifest(src, str(e)) from e

    async def resolve_all(self, root_dir: str | Path, options: Options) -> DependencyTree:
        """Concurrently resolve the npm, Bower, and native roots of `root_dir` and merge them."""
        root_dir = str(root_dir)
        trees = await asyncio.gather(
            *(resolver_by_name(name).resolve_root(self, root_dir, options) for name in ROOT_ORDER)
        )
        return merge_trees(trees)

    async def resolve_located(
        self,
        resolver: EcosystemResolver,
        src: str,
        options: Options,
        parent: DependencyTree | None = None,
        base: str | None = None,
    ) -> DependencyTree:
        """Resolve a file located through an ecosystem: a declaration, a `tsconfig.json`, or its manifest."""
        if is_definition(src):
            return self.definition(resolver.name, src, parent)
        if is_native_manifest(src) and resolver.name != TreeType.native:
            return await resolver_by_name(TreeType.native).resolve_from(self, src, options, parent)
        return await resolver.resolve_from(self, src, options, parent, base)

    @staticmethod
    def definition(tree_type: TreeType, src: str, parent: DependencyTree | None) -> DependencyTree:
        """Create the leaf node of a declaration file."""
        return DependencyTree(type=tree_type, typings=Typings(main=src), src=src, parent=parent)

    async def resolve_one(
        self,
        base_dir: str,
        specifier: DependencySpecifier,
        options: Options,
        parent: DependencyTree | None = None,
    ) -> DependencyTree:
        """Resolve a parsed specifier relative to `base_dir` (a directory or a base URL)."""
        match specifier.type:
            case SpecifierType.npm | SpecifierType.bower:
                tree_type = TreeType(specifier.type.value)
                if is_http(base_dir):
                    logger.warning("Can not resolve %s from the remote location %s", specifier.raw, base_dir)
                    return DependencyTree.missing_sentinel(tree_type, parent=parent)
                resolver = resolver_by_name(tree_type)
                return await resolver.resolve_location(self, base_dir, specifier.location, options, parent)
            case SpecifierType.file | SpecifierType.hosted:
                location = specifier.location
                if parent is not None and parent.src is not None and is_http(parent.src) and not is_http(location):
                    src = resolve_from(dirname(parent.src), location)
                else:
                    src = resolve_from(base_dir, location)
                return await self.resolve_located(resolver_by_name(TreeType.native), src, options, parent)

    async def resolve_dependency(
        self,
        base_dir: str,
        raw: str | list[str],
        options: Options,
        parent: DependencyTree | None = None,
    ) -> DependencyTree:
        """Resolve the first of one or more candidate specifiers that is not missing."""
        candidates = [raw] if isinstance(raw, str) else raw
        # Every candidate must parse, even those never tried.
        specifiers = [parse_dependency(candidate) for candidate in candidates]
        tree = DependencyTree.missing_sentinel(parent=parent)
        for specifier in specifiers:
            tree = await self.resolve_one(base_dir, specifier, options, parent)
            if not tree.missing:
                break
        return tree


def _run(
    options: Options,
    cache: RemoteFetchCache | None,
    client: RawContentClient | None,
    max_workers: int | None,
    resolve: Callable[[Resolution], Any],
) -> DependencyTree:
    with ExitStack() as stack:
        if cache is None:
            cache = RemoteFetchCache(options.cache_path)
        stack.enter_context(cache)
        executor = stack.enter_context(
            ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="typedeps-resolver")
        )
        resolution = Resolution(cache, client=client, executor=executor)
        return asyncio.run(resolve(resolution))  # type: ignore[no-any-return]


def resolve_all(
    root_dir: str | Path,
    options: Options | None = None,
    *,
    cache: RemoteFetchCache | None = None,
    client: RawContentClient | None = None,
    max_workers: int | None = None,
) -> DependencyTree:
    """Resolve every declaration dependency of the project at `root_dir`.

    A missing manifest for an ecosystem is not an error; circular dependencies and malformed manifests are,
    and abort the whole resolution.

    """
    if options is None:
        options = Options()
    return _run(options, cache, client, max_workers, lambda r: r.resolve_all(root_dir, options))


def resolve_one(
    base_dir: str | Path,
    specifier: str | DependencySpecifier,
    options: Options | None = None,
    parent: DependencyTree | None = None,
    *,
    cache: RemoteFetchCache | None = None,
    client: RawContentClient | None = None,
    max_workers: int | None = None,
) -> DependencyTree:
    """Resolve a single specifier, such as `npm:foo` or `github:owner/repo`, relative to `base_dir`."""
    if options is None:
        options = Options()
    if isinstance(specifier, str):
        specifier = parse_dependency(specifier)
    base = str(base_dir)
    return _run(options, cache, client, max_workers, lambda r: r.resolve_one(base, specifier, options, parent))
