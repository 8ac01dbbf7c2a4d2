"""Tests for the circular dependency check, tree merging, and rendering."""

from unittest import TestCase

import pytest

from typedeps.errors import CircularDependency
from typedeps.models import DependencyTree, TreeType, Typings
from typedeps.tree import check_circular_dependency, merge_trees, to_dot


class TestCircularDependency(TestCase):
    """Tests for `check_circular_dependency`."""

    def setUp(self) -> None:
        """Set up a root with one child."""
        self.root = DependencyTree(type=TreeType.native, src="/p/tsconfig.json")
        self.child = DependencyTree(type=TreeType.native, src="/p/a/tsconfig.json", parent=self.root)

    def test_root_has_no_ancestors(self) -> None:
        """Test a root resolution is never circular."""
        check_circular_dependency(None, "/p/tsconfig.json")

    def test_cycle(self) -> None:
        """Test revisiting an ancestor raises CircularDependency naming it."""
        with pytest.raises(CircularDependency) as excinfo:
            check_circular_dependency(self.child, "/p/tsconfig.json")
        assert excinfo.value.src == "/p/tsconfig.json"
        assert "Circular dependency detected in /p/tsconfig.json" in str(excinfo.value)

    def test_self_reference(self) -> None:
        """Test a node depending on itself is circular."""
        with pytest.raises(CircularDependency):
            check_circular_dependency(self.child, "/p/a/tsconfig.json")

    def test_diamond_is_not_a_cycle(self) -> None:
        """Test the same source reached through a sibling branch is allowed."""
        sibling = DependencyTree(type=TreeType.native, src="/p/b/tsconfig.json", parent=self.root)
        shared = DependencyTree(type=TreeType.native, src="/p/c/tsconfig.json", parent=self.child)
        self.child.dependencies["c"] = shared
        check_circular_dependency(sibling, "/p/c/tsconfig.json")

    def test_ancestors(self) -> None:
        """Test the ancestor chain runs from the node up to the root."""
        assert self.child.ancestors() == [self.child, self.root]
        assert self.child.ancestors()[1] is self.root


class TestMergeTrees(TestCase):
    """Tests for `merge_trees`."""

    def test_later_trees_win(self) -> None:
        """Test defined scalars of later trees override earlier ones."""
        npm = DependencyTree(type=TreeType.npm, name="npm-name", main="index.js", typings=Typings(main="a.d.ts"))
        bower = DependencyTree(type=TreeType.bower, name="bower-name", main="bower.js")
        native = DependencyTree(type=TreeType.native, name="native-name", typings=Typings(browser="b.d.ts"))

        merged = merge_trees([npm, bower, native])

        assert merged.name == "native-name"
        assert merged.main == "bower.js"
        assert merged.typings == Typings(main="a.d.ts", browser="b.d.ts")
        assert merged.type is None
        assert merged.parent is None
        assert not merged.missing

    def test_dependency_collisions(self) -> None:
        """Test the later subtree wins a dependency name collision."""
        first = DependencyTree(missing=True, src="/x/node_modules/a/package.json")
        second = DependencyTree(type=TreeType.native, src="/x/a.d.ts")
        only = DependencyTree(type=TreeType.npm, src="/x/node_modules/b/package.json")
        npm = DependencyTree(type=TreeType.npm, dependencies={"a": first, "b": only})
        native = DependencyTree(type=TreeType.native, dependencies={"a": second})

        merged = merge_trees([npm, native])

        assert merged.dependencies == {"a": second, "b": only}
        assert merged.dependencies["a"] is second

    def test_inputs_are_not_mutated(self) -> None:
        """Test merging builds a new node and leaves the inputs untouched."""
        dep = DependencyTree(src="/x/a.d.ts")
        npm = DependencyTree(name="one", typings=Typings(main="one.d.ts"), dependencies={"a": dep})
        native = DependencyTree(name="two", dev_dependencies={"b": dep})

        merged = merge_trees([npm, native])
        merged.dependencies["c"] = dep

        assert npm.name == "one"
        assert npm.typings == Typings(main="one.d.ts")
        assert list(npm.dependencies) == ["a"]
        assert native.dependencies == {}
        assert merged.dev_dependencies == {"b": dep}

    def test_missing_roots(self) -> None:
        """Test missing roots contribute nothing."""
        merged = merge_trees(DependencyTree.missing_sentinel(t) for t in TreeType)
        assert merged.name is None
        assert merged.dependencies == {}


class TestRendering(TestCase):
    """Tests for JSON and Graphviz rendering."""

    def setUp(self) -> None:
        """Set up a root with one dependency of each kind."""
        self.root = DependencyTree(type=TreeType.npm, name="app", version="1.0.0")
        self.root.dependencies["a"] = DependencyTree(type=TreeType.npm, version="2.1.0", parent=self.root)
        self.root.dev_dependencies["b"] = DependencyTree.missing_sentinel(TreeType.npm, parent=self.root)
        self.root.ambient_dependencies["c"] = DependencyTree(
            type=TreeType.native, typings=Typings(main="/x/c.d.ts"), src="/x/c.d.ts", parent=self.root
        )

    def test_to_obj(self) -> None:
        """Test the JSON form uses manifest key names and omits the parent."""
        obj = self.root.to_obj()
        assert obj["type"] == "npm"
        assert obj["name"] == "app"
        assert "main" not in obj
        assert obj["dependencies"]["a"]["version"] == "2.1.0"
        assert obj["devDependencies"]["b"]["missing"] is True
        assert obj["ambientDependencies"]["c"]["typings"] == {"main": "/x/c.d.ts"}
        assert "parent" not in obj

    def test_to_dot(self) -> None:
        """Test the dot graph labels nodes and styles each dependency kind."""
        source = to_dot(self.root).source
        assert "app@1.0.0" in source
        assert "a@2.1.0" in source
        assert "b (missing)" in source
        assert "style=dashed" in source
        assert "style=dotted" in source
