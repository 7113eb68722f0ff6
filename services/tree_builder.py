"""
Builds the hierarchical render forest from the flat member collection.
"""
import logging
from typing import Dict, Iterable, List, Set

from models import Member, TreeNode
from services.relationships import index_members, roots_of

logger = logging.getLogger(__name__)


def build(members: List[Member], collapsed_nodes: Iterable[str] = ()) -> List[TreeNode]:
    """
    Build one tree per root member by walking ``children`` downwards.

    Each root traversal tracks the ids it has visited, starting with every
    root id since each root already gets its own tree. A child already
    visited is emitted as a terminal leaf marked ``repeated``, so cyclic
    ``children`` links terminate. When members exist but none is a root, every
    member is returned as a stand-alone node without children.
    """
    if not members:
        return []

    collapsed = set(collapsed_nodes)
    by_id = index_members(members)
    roots = roots_of(members)

    if not roots:
        logger.info("No root members among %d, using flat layout", len(members))
        return [_leaf(member, 0, collapsed) for member in members]

    root_ids = {root.id for root in roots}
    forest = []
    for root in roots:
        visited: Set[str] = set(root_ids)
        forest.append(_build_node(root, 0, by_id, collapsed, visited))
    return forest


def _leaf(member: Member, level: int, collapsed: Set[str], repeated: bool = False) -> TreeNode:
    return TreeNode(
        member=member,
        level=level,
        collapsed=member.id in collapsed,
        has_children=bool(member.children),
        repeated=repeated,
    )


def _build_node(member: Member, level: int, by_id: Dict[str, Member],
                collapsed: Set[str], visited: Set[str]) -> TreeNode:
    visited.add(member.id)
    node = _leaf(member, level, collapsed)

    if not member.children or member.id in collapsed:
        return node

    children = []
    for child_id in member.children:
        child = by_id.get(child_id)
        if child is None:
            logger.debug("Skipping dangling child %s of %s", child_id, member.id)
            continue
        if child.id in visited:
            children.append(_leaf(child, level + 1, collapsed, repeated=True))
            continue
        children.append(_build_node(child, level + 1, by_id, collapsed, visited))

    node.children = children
    return node
