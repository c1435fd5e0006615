"""Tests for the parent/child tree helpers."""
from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from canvas.tree import (
    flat_tree,
    get_all_branch_ids,
    get_branch_path,
    get_parent_ref_map,
    get_tree,
    get_tree_node_map,
    walk_tree_with_value,
)
from models import GroupShape, RectangleShape


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _rect(shape_id, parent_id=None):
    return RectangleShape(id=shape_id, parent_id=parent_id)


def _nested():
    return [
        GroupShape(id="g"),
        GroupShape(id="h", parent_id="g"),
        _rect("a", "h"),
        _rect("b", "g"),
        _rect("c"),
    ]


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestParentRefMap:
    def test_cycle_is_severed(self):
        shapes = [_rect("a", "b"), _rect("b", "a")]
        assert get_parent_ref_map(shapes) == {"a": "b"}

    def test_self_reference_is_dropped(self):
        assert get_parent_ref_map([_rect("a", "a")]) == {}

    def test_orphan_becomes_root(self):
        shapes = [_rect("a"), _rect("c", "missing")]
        ref_map = get_parent_ref_map(shapes)
        assert ref_map == {}
        assert [n.id for n in get_tree(shapes, ref_map)] == ["a", "c"]


class TestTree:
    def test_children_keep_order(self):
        shapes = _nested()
        roots = get_tree(shapes, get_parent_ref_map(shapes))
        assert [n.id for n in roots] == ["g", "c"]
        assert [n.id for n in roots[0].children] == ["h", "b"]
        assert flat_tree(roots) == ["g", "h", "a", "b", "c"]

    def test_branch_ids(self):
        shapes = _nested()
        node_map = get_tree_node_map(get_tree(shapes, get_parent_ref_map(shapes)))
        assert get_all_branch_ids(node_map, ["h", "a", "c"]) == ["h", "a", "c"]
        assert get_all_branch_ids(node_map, ["g"]) == ["g", "h", "a", "b"]

    def test_branch_path(self):
        ref_map = get_parent_ref_map(_nested())
        assert get_branch_path(ref_map, "a") == ["g", "h", "a"]
        assert get_branch_path(ref_map, "c") == ["c"]

    def test_walk_with_value_threads_depth(self):
        shapes = _nested()
        depth = {}

        def fn(node, inherited):
            depth[node.id] = inherited
            return inherited + 1

        walk_tree_with_value(get_tree(shapes, get_parent_ref_map(shapes)), fn, 0)
        assert depth == {"g": 0, "h": 1, "a": 2, "b": 1, "c": 0}
