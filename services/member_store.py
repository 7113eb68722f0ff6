"""
In-memory member collection with view state and auto-save.

The store is the only place members are mutated. Every operation checks its
input before touching the collection, so a failed call leaves the data as it
was, and every successful mutation is followed by a save through the
persistence adapter (when one is attached).
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from config import ZOOM_MAX, ZOOM_MIN, ZOOM_STEP
from errors import FormatError, NotFoundError, ValidationError
from models import Member, MemberCreate, MemberUpdate, ViewState, generate_id, now_iso, RELATION_FIELDS

logger = logging.getLogger(__name__)

# Patch fields that cannot be cleared; an explicit null means "leave as is"
_NON_NULLABLE = ("name", "gender", "children")


class MemberStore:
    """Owns the members and the tree view state."""

    def __init__(self, persistence=None):
        self.persistence = persistence
        self._members: Dict[str, Member] = {}
        self.view = ViewState()

    @classmethod
    def from_persistence(cls, persistence) -> "MemberStore":
        """Construct the store from the last saved snapshot."""
        store = cls(persistence)
        snapshot = persistence.load()
        store._members = {m.id: m for m in snapshot.members}
        store.view.collapsed_nodes = set(snapshot.collapsed_nodes)
        store.view.theme = persistence.load_theme(default=snapshot.theme)
        return store

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def members(self) -> List[Member]:
        return list(self._members.values())

    @property
    def collapsed_nodes(self) -> frozenset:
        return frozenset(self.view.collapsed_nodes)

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, member_id) -> bool:
        return member_id in self._members

    def get(self, member_id: str) -> Member:
        if member_id not in self._members:
            raise NotFoundError("Member not found")
        return self._members[member_id]

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create(self, draft: Union[MemberCreate, Mapping[str, Any]]) -> Member:
        """Add a new member built from ``draft``."""
        if not isinstance(draft, MemberCreate):
            try:
                draft = MemberCreate.model_validate(draft)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid member: {e.error_count()} invalid field(s)") from e

        name = (draft.name or "").strip()
        if not name:
            raise ValidationError("Please enter a name")

        timestamp = now_iso()
        member = Member(
            name=name,
            gender=draft.gender or "other",
            dob=draft.dob or "",
            birth_place=draft.birth_place or "",
            occupation=draft.occupation or "",
            email=draft.email or "",
            bio=draft.bio or "",
            photo=draft.photo or "",
            father=draft.father,
            mother=draft.mother,
            spouse=draft.spouse,
            children=list(draft.children),
            created_at=timestamp,
            updated_at=timestamp,
        )
        while member.id in self._members:
            member.id = generate_id()
        member = self._repair_links(member)

        self._members[member.id] = member
        logger.info("Created member: %s", member.id)
        self._persist()
        return member

    def update(self, member_id: str, patch: Union[MemberUpdate, Mapping[str, Any]]) -> Member:
        """Override the fields set in ``patch`` on an existing member."""
        existing = self.get(member_id)
        if not isinstance(patch, MemberUpdate):
            try:
                patch = MemberUpdate.model_validate(patch)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid member: {e.error_count()} invalid field(s)") from e

        changes = patch.model_dump(exclude_unset=True)
        for field in _NON_NULLABLE:
            if field in changes and changes[field] is None:
                del changes[field]

        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if not changes["name"]:
                raise ValidationError("Please enter a name")

        data = existing.model_dump()
        data.update(changes)
        data["id"] = existing.id
        data["created_at"] = existing.created_at
        data["updated_at"] = now_iso()
        member = self._repair_links(Member.model_validate(data))

        self._members[member_id] = member
        logger.info("Updated member: %s (%s)", member_id, ", ".join(sorted(changes)) or "no fields")
        self._persist()
        return member

    def delete(self, member_id: str) -> Optional[Member]:
        """
        Remove a member and every reference to it.

        Deleting an unknown id does nothing. The repaired collection is built
        in full before it replaces the old one, so no member is ever left
        pointing at the removed id.
        """
        target = self._members.get(member_id)
        if target is None:
            logger.debug("Delete of unknown member ignored: %s", member_id)
            return None

        repaired = {}
        for other_id, other in self._members.items():
            if other_id == member_id:
                continue
            repaired[other_id] = _without_reference(other, member_id)

        self._members = repaired
        self.view.collapsed_nodes.discard(member_id)
        if self.view.selected_member_id == member_id:
            self.view.selected_member_id = None

        logger.info("Deleted member: %s", member_id)
        self._persist()
        return target

    def replace_all(self, members) -> int:
        """Replace the whole collection, as done by import."""
        if not isinstance(members, (list, tuple)):
            raise FormatError("Invalid file format: members must be a list")

        replacement = {}
        for member in members:
            if not isinstance(member, Member):
                try:
                    member = Member.model_validate(member)
                except PydanticValidationError as e:
                    raise FormatError(f"Invalid file format: {e.error_count()} invalid member field(s)") from e
            if member.id in replacement:
                logger.warning("Duplicate member id in import: %s", member.id)
            replacement[member.id] = member

        self._members = replacement
        self.view.collapsed_nodes.clear()
        self.view.selected_member_id = None
        logger.info("Replaced collection with %d members", len(replacement))
        self._persist()
        return len(replacement)

    def clear_all(self):
        self._members = {}
        self.view.collapsed_nodes.clear()
        self.view.selected_member_id = None
        logger.info("Cleared all members")
        self._persist()

    def add_sample_data(self) -> List[Member]:
        """Load a small two-generation sample family."""
        self._members = {m.id: m for m in _sample_members()}
        self.view.collapsed_nodes.clear()
        self.view.selected_member_id = None
        logger.info("Loaded sample family")
        self._persist()
        return self.members

    # ------------------------------------------------------------------
    # View state
    # ------------------------------------------------------------------

    def toggle_node(self, member_id: str) -> bool:
        """Collapse or expand one node; returns True when now collapsed."""
        collapsed = self.view.collapsed_nodes
        if member_id in collapsed:
            collapsed.discard(member_id)
        else:
            collapsed.add(member_id)
        self._persist()
        return member_id in collapsed

    def expand_all(self):
        self.view.collapsed_nodes.clear()
        self._persist()

    def collapse_all(self):
        self.view.collapsed_nodes = set(self._members)
        self._persist()

    def select(self, member_id: str) -> Member:
        member = self.get(member_id)
        self.view.selected_member_id = member_id
        return member

    def zoom_in(self) -> float:
        self.view.tree_zoom = round(min(ZOOM_MAX, self.view.tree_zoom + ZOOM_STEP), 2)
        return self.view.tree_zoom

    def zoom_out(self) -> float:
        self.view.tree_zoom = round(max(ZOOM_MIN, self.view.tree_zoom - ZOOM_STEP), 2)
        return self.view.tree_zoom

    def set_view(self, view: str):
        if view not in ("tree", "list"):
            raise ValidationError(f"Unknown view: {view}")
        self.view.current_view = view

    def toggle_theme(self) -> str:
        theme = "dark" if self.view.theme == "light" else "light"
        self.view.theme = theme
        if self.persistence is not None:
            self.persistence.save_theme(theme)
        self._persist()
        return theme

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _persist(self):
        if self.persistence is None:
            return
        self.persistence.save(self.members, self.view.collapsed_nodes, self.view.theme)

    def _repair_links(self, member: Member) -> Member:
        """Drop self references, unknown ids and duplicate children."""
        known = self._members
        updates = {}
        for field in RELATION_FIELDS:
            ref = getattr(member, field)
            if ref is None:
                continue
            if ref == member.id or ref not in known:
                logger.warning("Dropping %s link %s on member %s", field, ref, member.id)
                updates[field] = None

        children = []
        for child_id in member.children:
            if child_id == member.id or child_id not in known:
                logger.warning("Dropping child link %s on member %s", child_id, member.id)
                continue
            if child_id not in children:
                children.append(child_id)
        if children != member.children:
            updates["children"] = children

        return member.model_copy(update=updates) if updates else member


def _without_reference(member: Member, member_id: str) -> Member:
    updates = {}
    if member_id in member.children:
        updates["children"] = [c for c in member.children if c != member_id]
    for field in RELATION_FIELDS:
        if getattr(member, field) == member_id:
            updates[field] = None
    return member.model_copy(update=updates) if updates else member


def _sample_members() -> List[Member]:
    timestamp = now_iso()
    common = {"created_at": timestamp, "updated_at": timestamp}
    return [
        Member(
            id="sample_1", name="Rajesh Kumar", gender="male", dob="1968-05-12",
            birth_place="New Delhi, India", occupation="Engineer",
            email="rajesh.kumar@email.com",
            bio="Loves classical music and reading. Has been working as an engineer for 30 years.",
            spouse="sample_2", children=["sample_3", "sample_4"], **common,
        ),
        Member(
            id="sample_2", name="Sushma Kumar", gender="female", dob="1970-07-21",
            birth_place="Mumbai, India", occupation="Doctor",
            email="sushma.kumar@email.com",
            bio="Pediatrician with 25 years of experience. Enjoys gardening and painting.",
            spouse="sample_1", children=["sample_3", "sample_4"], **common,
        ),
        Member(
            id="sample_3", name="Amit Kumar", gender="male", dob="1995-12-01",
            birth_place="Bangalore, India", occupation="Software Developer",
            email="amit.kumar@email.com",
            bio="Full-stack developer passionate about AI and machine learning.",
            father="sample_1", mother="sample_2", **common,
        ),
        Member(
            id="sample_4", name="Priya Kumar", gender="female", dob="1998-09-18",
            birth_place="Chennai, India", occupation="Graphic Designer",
            email="priya.kumar@email.com",
            bio="Creative designer specializing in branding and UI/UX design.",
            father="sample_1", mother="sample_2", **common,
        ),
    ]
