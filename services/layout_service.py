"""
Layout service for placing the render forest on a canvas.
"""
import logging
from typing import Any, Dict, List, Tuple

from models import LayoutOptions, TreeNode

logger = logging.getLogger(__name__)


def layout_forest(forest: List[TreeNode], options: LayoutOptions) -> Tuple[List[Dict[str, Any]], List[Tuple[int, int]]]:
    """
    Calculate a position for every node of the forest.

    Uses a simple hierarchical layout:
    1. Leaves take successive slots along the row axis
    2. Each parent is centred over its first and last child
    3. Depth in the tree decides the row

    A member may appear in several places (e.g. under both parents), so
    positions are returned per node, together with (parent, child) edges as
    indices into the placed list.
    """
    placed: List[Dict[str, Any]] = []
    edges: List[Tuple[int, int]] = []

    if not forest:
        return placed, edges

    spacing_x = options.spacing_x
    spacing_y = options.spacing_y
    is_horizontal = options.direction == "left-right"
    next_slot = [0]

    def place_node(node: TreeNode, level: int) -> int:
        """Place a node and its subtree, return the node's index."""
        index = len(placed)
        placed.append({"member": node.member, "x": 0.0, "y": 0.0, "repeated": node.repeated})

        child_indices = [place_node(child, level + 1) for child in node.children or []]

        if child_indices:
            first = placed[child_indices[0]]["_across"]
            last = placed[child_indices[-1]]["_across"]
            across = (first + last) / 2
        else:
            across = next_slot[0] * spacing_x
            next_slot[0] += 1

        placed[index]["_across"] = across
        if is_horizontal:
            placed[index]["x"], placed[index]["y"] = level * spacing_y, across
        else:
            placed[index]["x"], placed[index]["y"] = across, level * spacing_y

        edges.extend((index, child) for child in child_indices)
        return index

    for root in forest:
        place_node(root, 0)

    for item in placed:
        del item["_across"]

    logger.info("Calculated layout for %d nodes", len(placed))
    return placed, edges
