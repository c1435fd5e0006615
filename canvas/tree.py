"""
canvas/tree.py

Parent/child tree built from the parent_id back references of a flat
shape list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from models import Shape

log = logging.getLogger(__name__)


@dataclass
class TreeNode:
    id: str
    parent_id: Optional[str] = None
    children: List["TreeNode"] = field(default_factory=list)


def get_parent_ref_map(shapes: Sequence[Shape]) -> Dict[str, str]:
    """Child id -> parent id, for parents present in shapes.

    Edges that would close a cycle are dropped (and logged), so every walk
    over the result terminates. Orphans simply become roots.
    """
    ids = {s.id for s in shapes}
    ref_map: Dict[str, str] = {}
    for s in shapes:
        parent_id = s.parent_id
        if not parent_id or parent_id not in ids:
            continue
        if _reaches(ref_map, parent_id, s.id):
            log.warning("Dropping cyclic parent reference %s -> %s", s.id, parent_id)
            continue
        ref_map[s.id] = parent_id
    return ref_map


def _reaches(ref_map: Dict[str, str], start: str, target: str) -> bool:
    current: Optional[str] = start
    while current is not None:
        if current == target:
            return True
        current = ref_map.get(current)
    return False


def get_tree(shapes: Sequence[Shape], parent_ref_map: Dict[str, str]) -> List[TreeNode]:
    """Root nodes of the forest, keeping the order of shapes among siblings."""
    node_map = {s.id: TreeNode(s.id, parent_ref_map.get(s.id)) for s in shapes}
    roots: List[TreeNode] = []
    for s in shapes:
        node = node_map[s.id]
        if node.parent_id is None:
            roots.append(node)
        else:
            node_map[node.parent_id].children.append(node)
    return roots


def get_tree_node_map(roots: Iterable[TreeNode]) -> Dict[str, TreeNode]:
    return {node.id: node for node in walk_nodes(roots)}


def walk_nodes(roots: Iterable[TreeNode]):
    """Pre-order iteration over every node of the forest."""
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def flat_tree(roots: Iterable[TreeNode]) -> List[str]:
    return [node.id for node in walk_nodes(roots)]


def get_all_branch_ids(tree_node_map: Dict[str, TreeNode], ids: Iterable[str]) -> List[str]:
    """ids plus every descendant, pre-order, without duplicates."""
    ret: List[str] = []
    seen = set()
    for shape_id in ids:
        node = tree_node_map.get(shape_id)
        if node is None:
            continue
        for n in walk_nodes([node]):
            if n.id not in seen:
                seen.add(n.id)
                ret.append(n.id)
    return ret


def get_branch_path(parent_ref_map: Dict[str, str], shape_id: str) -> List[str]:
    """Ids from the root down to shape_id."""
    path = [shape_id]
    current = parent_ref_map.get(shape_id)
    while current is not None:
        path.append(current)
        current = parent_ref_map.get(current)
    path.reverse()
    return path


def walk_tree_with_value(
    roots: Iterable[TreeNode],
    fn: Callable[[TreeNode, Any], Any],
    initial: Any = None,
) -> None:
    """Visit every node root to leaf, threading a value down each branch.

    fn(node, inherited) returns the value handed to node's children.
    """
    stack = [(node, initial) for node in reversed(list(roots))]
    while stack:
        node, inherited = stack.pop()
        value = fn(node, inherited)
        for child in reversed(node.children):
            stack.append((child, value))
