"""Tests for ShapeComposite and its module level helpers."""
from __future__ import annotations

import math
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from canvas.composite import (
    ShapeComposite,
    can_group_shapes,
    get_all_shape_range,
    get_delete_target_ids,
    get_next_shape_composite,
    get_selection_bounds,
    replace_tmp_shape_map,
)
from errors import ShapeNotFoundError
from geometry.affine import get_translate_affine
from geometry.rects import Rect
from geometry.vectors import Vec2
from models import GroupShape, PatchInfo, RectangleShape


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def grouped():
    """Group g holding a at (0, 0) and b at (20, 20), both 10x10."""
    return ShapeComposite([
        GroupShape(id="g"),
        RectangleShape(id="a", parent_id="g", width=10, height=10),
        RectangleShape(id="b", parent_id="g", p=Vec2(20, 20), width=10, height=10),
    ])


# ---------------------------------------------------------------------------
# Lookup and tree
# ---------------------------------------------------------------------------

class TestLookup:
    def test_missing_shape_raises(self, grouped):
        with pytest.raises(ShapeNotFoundError):
            grouped.get_shape("nope")
        assert not grouped.has_shape("nope")

    def test_cycle_and_orphan_become_roots(self):
        composite = ShapeComposite([
            RectangleShape(id="x", parent_id="y"),
            RectangleShape(id="y", parent_id="x"),
            RectangleShape(id="z", parent_id="missing"),
        ])
        assert [n.id for n in composite.merged_shape_tree] == ["y", "z"]
        assert composite.get_shape("y").parent_id is None
        assert composite.get_shape("z").parent_id is None

    def test_branch_path(self, grouped):
        assert grouped.get_branch_path_to("a") == ["g"]
        assert grouped.get_branch_path_to("g") == []


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

class TestGeometry:
    def test_group_geometry_is_derived(self, grouped):
        assert grouped.get_wrapper_rect(grouped.get_shape("g")) == Rect(0, 0, 30, 30)

    def test_group_follows_tmp_children(self, grouped):
        moved = replace_tmp_shape_map(grouped, {"b": {"p": Vec2(40, 40)}})
        assert moved.get_wrapper_rect(moved.get_shape("g")) == Rect(0, 0, 50, 50)
        # committed state is untouched
        assert moved.shape_map["b"].p == Vec2(20, 20)

    def test_find_shape_at_respects_scope(self, grouped):
        assert grouped.find_shape_at(Vec2(5, 5)).id == "g"
        assert grouped.find_shape_at(Vec2(5, 5), parent_id="g").id == "a"
        assert grouped.find_shape_at(Vec2(15, 15)) is None
        assert grouped.find_shape_at(Vec2(5, 5), exclude_ids=["g"]) is None

    def test_topmost_wins(self):
        composite = ShapeComposite([RectangleShape(id="low"), RectangleShape(id="high")])
        assert composite.find_shape_at(Vec2(50, 50)).id == "high"

    def test_group_transform_only_patches_rotation(self, grouped):
        g = grouped.get_shape("g")
        assert grouped.transform_shape(g, get_translate_affine(Vec2(10, 0))) == {}

    def test_rotate_shape_tree(self):
        composite = ShapeComposite([RectangleShape(id="a", width=10, height=10)])
        patch = composite.rotate_shape_tree("a", math.pi / 2)
        assert set(patch["a"]) == {"rotation"}
        assert patch["a"]["rotation"] == pytest.approx(math.pi / 2)

    def test_selection_bounds(self, grouped):
        polygon, rotation = get_selection_bounds(grouped, ["a", "b"])
        assert rotation == 0.0
        assert polygon == [Vec2(0, 0), Vec2(30, 0), Vec2(30, 30), Vec2(0, 30)]

        polygon, rotation = get_selection_bounds(grouped, ["b"])
        assert polygon[0] == Vec2(20, 20)

    def test_all_shape_range(self, grouped):
        assert get_all_shape_range(grouped) == Rect(0, 0, 30, 30)

    def test_shapes_overlapping_rect(self, grouped):
        shapes = grouped.merged_shapes
        hit = grouped.get_shapes_overlapping_rect(shapes, Rect(15, 15, 10, 10))
        assert [s.id for s in hit] == ["g", "b"]
        assert grouped.get_shapes_overlapping_rect(shapes, Rect(100, 100, 10, 10)) == []


# ---------------------------------------------------------------------------
# Revisions
# ---------------------------------------------------------------------------

class TestRevisions:
    def test_next_composite(self, grouped):
        info = PatchInfo(
            add=[RectangleShape(id="c")],
            update={"a": {"width": 20.0}},
            delete=["b"],
        )
        nxt = get_next_shape_composite(grouped, info)
        assert [s.id for s in nxt.shapes] == ["g", "a", "c"]
        assert nxt.get_shape("a").width == 20.0
        assert grouped.get_shape("a").width == 10

    def test_next_composite_places_indexed_adds(self, grouped):
        info = PatchInfo(add=[RectangleShape(id="c")], insert_at={"c": 1})
        nxt = get_next_shape_composite(grouped, info)
        assert [s.id for s in nxt.shapes] == ["g", "c", "a", "b"]

    def test_sub_composite_commits_update(self, grouped):
        sub = grouped.get_sub_shape_composite(["g"], {"a": {"width": 5.0}})
        assert sorted(sub.shape_map) == ["a", "b", "g"]
        assert sub.shape_map["a"].width == 5.0


class TestDeleteAndGroup:
    def test_deleting_all_children_deletes_group(self, grouped):
        assert get_delete_target_ids(grouped, ["a", "b"]) == ["a", "b", "g"]

    def test_deleting_one_child_keeps_group(self, grouped):
        assert get_delete_target_ids(grouped, ["a"]) == ["a"]

    def test_only_groups_are_left_behind_empty(self):
        composite = ShapeComposite([
            RectangleShape(id="host"),
            RectangleShape(id="c", parent_id="host"),
        ])
        assert get_delete_target_ids(composite, ["c"]) == ["c"]

    def test_should_delete_empty_group(self, grouped):
        assert not grouped.should_delete(grouped.get_shape("g"))
        assert not grouped.should_delete(grouped.get_shape("a"))
        lonely = ShapeComposite([GroupShape(id="g")])
        assert lonely.should_delete(lonely.get_shape("g"))

    def test_can_group(self, grouped):
        assert can_group_shapes(grouped, ["a", "b"])
        assert not can_group_shapes(grouped, ["a"])
