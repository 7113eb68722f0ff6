"""
Plain view models for the member list, info panel and statistics.
"""
import logging
from datetime import date
from typing import List, Optional

from models import Member, MemberCard, MemberDetails, TreeStatistics
from services.relationships import generation_count, index_members, parents_of

logger = logging.getLogger(__name__)

GENDER_COLORS = {
    "male": "#3b82f6",
    "female": "#ec4899",
}
DEFAULT_GENDER_COLOR = "#8b5cf6"

SORT_KEYS = {
    "name": lambda m: m.name.lower(),
    "dob": lambda m: m.dob or "",
    "gender": lambda m: m.gender,
}


def search_members(members: List[Member], query: Optional[str]) -> List[Member]:
    """Members whose name or occupation contains ``query`` (case-insensitive)."""
    query = (query or "").strip().lower()
    if not query:
        return list(members)
    return [
        m for m in members
        if query in m.name.lower() or query in (m.occupation or "").lower()
    ]


def sort_members(members: List[Member], sort_by: str = "name") -> List[Member]:
    key = SORT_KEYS.get(sort_by, SORT_KEYS["name"])
    return sorted(members, key=key)


def initials(name: str) -> str:
    return "".join(part[0] for part in name.split() if part).upper()[:2]


def gender_label(gender: str) -> str:
    return gender[:1].upper() + gender[1:]


def gender_color(gender: str) -> str:
    return GENDER_COLORS.get(gender, DEFAULT_GENDER_COLOR)


def parse_dob(dob: str) -> Optional[date]:
    if not dob:
        return None
    try:
        return date.fromisoformat(dob[:10])
    except ValueError:
        logger.debug("Unparseable date of birth: %s", dob)
        return None


def calculate_age(dob: str, today: Optional[date] = None) -> Optional[int]:
    """Age in full years, or None when ``dob`` is empty or invalid."""
    born = parse_dob(dob)
    if born is None:
        return None
    today = today or date.today()
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age


def member_card(member: Member) -> MemberCard:
    born = parse_dob(member.dob)
    return MemberCard(
        id=member.id,
        name=member.name,
        initials=initials(member.name),
        gender=member.gender,
        gender_label=gender_label(member.gender),
        gender_color=gender_color(member.gender),
        dob_label=born.isoformat() if born else "Date unknown",
        photo=member.photo,
        parents_count=len([p for p in (member.father, member.mother) if p]),
        has_spouse=bool(member.spouse),
        children_count=len(member.children),
    )


def member_details(member: Member, members: List[Member], today: Optional[date] = None) -> MemberDetails:
    """Build the info panel for ``member``, resolving relation names."""
    by_id = index_members(members)

    gender_age = gender_label(member.gender)
    age = calculate_age(member.dob, today)
    if age is not None:
        gender_age += f", {age} years old"

    father, mother = parents_of(member, members)
    parents = []
    if father:
        parents.append(f"Father: {father.name}")
    if mother:
        parents.append(f"Mother: {mother.name}")

    if member.spouse:
        spouse = by_id[member.spouse].name if member.spouse in by_id else "Unknown"
    else:
        spouse = "Not specified"

    children = ", ".join(
        by_id[child_id].name if child_id in by_id else "Unknown"
        for child_id in member.children
    )

    born = parse_dob(member.dob)
    return MemberDetails(
        id=member.id,
        name=member.name,
        photo=member.photo,
        gender_age=gender_age,
        dob=born.isoformat() if born else "Not specified",
        birth_place=member.birth_place or "Not specified",
        occupation=member.occupation or "Not specified",
        parents=", ".join(parents) or "Not specified",
        spouse=spouse,
        children=children or "No children",
        bio=member.bio,
    )


def statistics(members: List[Member]) -> TreeStatistics:
    return TreeStatistics(
        total=len(members),
        male=sum(1 for m in members if m.gender == "male"),
        female=sum(1 for m in members if m.gender == "female"),
        other=sum(1 for m in members if m.gender == "other"),
        generations=generation_count(members),
    )
