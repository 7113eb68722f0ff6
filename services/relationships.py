"""
Read-only derivations over the member collection.

Hierarchy is derived two ways that are not guaranteed to agree: downward by
walking each member's ``children`` list, and upward by walking ``father`` and
``mother``. Nothing here mutates a member.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from models import Member

logger = logging.getLogger(__name__)


def index_members(members: Iterable[Member]) -> Dict[str, Member]:
    """Map member id to member."""
    return {m.id: m for m in members}


def roots_of(members: Iterable[Member]) -> List[Member]:
    """Members with neither father nor mother recorded, in collection order."""
    return [m for m in members if not m.father and not m.mother]


def children_of(member: Member, members: Iterable[Member]) -> List[Member]:
    """Resolve ``member.children`` in order, skipping ids that no longer exist."""
    by_id = index_members(members)
    return [by_id[child_id] for child_id in member.children if child_id in by_id]


def parents_of(member: Member, members: Iterable[Member]) -> Tuple[Optional[Member], Optional[Member]]:
    """Return (father, mother), each None when unset or dangling."""
    by_id = index_members(members)
    father = by_id.get(member.father) if member.father else None
    mother = by_id.get(member.mother) if member.mother else None
    return father, mother


def ancestor_chain_length(member: Member, members: Iterable[Member]) -> int:
    """
    Count the generations above ``member``.

    Walks the father line, switching to the mother only at a member whose
    father is unset. This is the depth of a single lineage, not the maximum
    depth across both parents. The walk ends at a member with no parents, at a
    parent id that does not resolve, or at a member already seen on this walk.
    """
    by_id = index_members(members)
    steps = 0
    seen = {member.id}
    current = member
    while current.father or current.mother:
        parent_id = current.father or current.mother
        parent = by_id.get(parent_id)
        if parent is None:
            break
        if parent.id in seen:
            logger.warning("Ancestor loop detected at member %s", parent.id)
            break
        steps += 1
        seen.add(parent.id)
        current = parent
    return steps


def generation_count(members: List[Member]) -> int:
    """Number of generations shown in the footer statistics."""
    if not members:
        return 0
    return max(1 + ancestor_chain_length(m, members) for m in members)


def relation_candidates(members: Iterable[Member], relation: str,
                        exclude_id: Optional[str] = None) -> List[Member]:
    """
    Members that may be picked for ``relation`` of the member being edited.

    Fathers must be male and mothers female; the member being edited is never
    offered for any relation.
    """
    candidates = list(members)
    if relation == "father":
        candidates = [m for m in candidates if m.gender == "male"]
    elif relation == "mother":
        candidates = [m for m in candidates if m.gender == "female"]
    if exclude_id:
        candidates = [m for m in candidates if m.id != exclude_id]
    return candidates
