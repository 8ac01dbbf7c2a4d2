"""Operations over resolved dependency trees: cycle checks, merging, and rendering."""

from __future__ import annotations

from typing import TYPE_CHECKING

from graphviz import Digraph

from .errors import CircularDependency
from .models import DependencyTree, Typings

if TYPE_CHECKING:
    from collections.abc import Iterable

MERGED_FIELDS = ("name", "main", "browser")
MERGED_TYPINGS = ("main", "browser")


def check_circular_dependency(parent: DependencyTree | None, src: str) -> None:
    """Raise `CircularDependency` if `src` is already being resolved by `parent` or one of its ancestors.

    Only the direct ancestor chain is checked: the same package reached through two independent branches is
    a diamond, not a cycle.

    """
    if parent is None:
        return
    for ancestor in parent.ancestors():
        if ancestor.src == src:
            raise CircularDependency(src)


def merge_trees(trees: Iterable[DependencyTree]) -> DependencyTree:
    """Merge ecosystem root trees, in order, into a single parentless tree.

    Defined scalar fields of later trees override earlier ones, and on a dependency name collision the later
    tree's subtree wins. The input trees are left untouched.

    """
    merged = DependencyTree(typings=Typings())

    for tree in trees:
        for key in MERGED_FIELDS:
            value = getattr(tree, key)
            if value is not None:
                setattr(merged, key, value)
        for key in MERGED_TYPINGS:
            value = getattr(tree.typings, key)
            if value is not None:
                setattr(merged.typings, key, value)

        merged.dependencies = {**merged.dependencies, **tree.dependencies}
        merged.dev_dependencies = {**merged.dev_dependencies, **tree.dev_dependencies}
        merged.ambient_dependencies = {**merged.ambient_dependencies, **tree.ambient_dependencies}

    return merged


def _label(name: str, tree: DependencyTree) -> str:
    label = name
    if tree.version is not None:
        label = f"{label}@{tree.version}"
    if tree.missing:
        label = f"{label} (missing)"
    return label


def to_dot(tree: DependencyTree, name: str = "(root)") -> Digraph:
    """Render a Graphviz Dot graph of the dependency tree."""
    dot = Digraph(comment=f"Declaration dependencies for {tree.name or name}")
    node_ids: dict[int, str] = {}

    def add_node(node_name: str, node: DependencyTree) -> str:
        node_id = f"node{len(node_ids)}"
        node_ids[id(node)] = node_id
        shape = "ellipse" if node.missing else "rectangle"
        dot.node(node_id, label=_label(node_name, node), shape=shape)
        return node_id

    stack = [(tree, add_node(tree.name or name, tree))]
    while stack:
        node, node_id = stack.pop()
        for style, deps in (
            ("solid", node.dependencies),
            ("dashed", node.dev_dependencies),
            ("dotted", node.ambient_dependencies),
        ):
            for dep_name, dep in deps.items():
                if id(dep) in node_ids:
                    dot.edge(node_id, node_ids[id(dep)], style=style)
                    continue
                dep_id = add_node(dep_name, dep)
                dot.edge(node_id, dep_id, style=style)
                stack.append((dep, dep_id))
    return dot
