"""
Pydantic models for the Family Tree application.

Members serialize with camelCase field names (``birthPlace``, ``createdAt``)
in snapshots and exports; Python code uses the snake_case attribute names.
"""
from typing import Optional, List, Literal, Set
from datetime import datetime, timezone
import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from config import APP_VERSION

Gender = Literal["male", "female", "other"]
Theme = Literal["light", "dark"]
View = Literal["tree", "list"]
Relation = Literal["father", "mother", "spouse", "children"]

TEXT_FIELDS = ("dob", "birth_place", "occupation", "email", "bio", "photo")
RELATION_FIELDS = ("father", "mother", "spouse")


def generate_id() -> str:
    """Generate a unique ID."""
    return str(uuid.uuid4())


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Member(CamelModel):
    """Model representing a person in the family tree."""
    id: str = Field(default_factory=generate_id)
    name: str
    gender: Gender = "other"
    dob: str = ""  # ISO date or empty
    birth_place: str = ""
    occupation: str = ""
    email: str = ""
    bio: str = ""
    photo: str = ""  # data URL or empty
    father: Optional[str] = None
    mother: Optional[str] = None
    spouse: Optional[str] = None
    children: List[str] = Field(default_factory=list)
    created_at: str = Field(default_factory=now_iso)
    updated_at: str = Field(default_factory=now_iso)

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return "" if value is None else value

    @field_validator(*RELATION_FIELDS, mode="before")
    @classmethod
    def _empty_as_none(cls, value):
        return value or None

    @field_validator("children", mode="before")
    @classmethod
    def _children_list(cls, value):
        return [] if value is None else value


class MemberCreate(CamelModel):
    """Model for creating a new member (the draft)."""
    name: str = ""
    gender: Optional[Gender] = None
    dob: Optional[str] = None
    birth_place: Optional[str] = None
    occupation: Optional[str] = None
    email: Optional[str] = None
    bio: Optional[str] = None
    photo: Optional[str] = None
    father: Optional[str] = None
    mother: Optional[str] = None
    spouse: Optional[str] = None
    children: List[str] = Field(default_factory=list)


class MemberUpdate(CamelModel):
    """
    Model for updating a member.

    Only fields that were explicitly provided override the stored record;
    an explicit ``null`` on a relation clears it.
    """
    name: Optional[str] = None
    gender: Optional[Gender] = None
    dob: Optional[str] = None
    birth_place: Optional[str] = None
    occupation: Optional[str] = None
    email: Optional[str] = None
    bio: Optional[str] = None
    photo: Optional[str] = None
    father: Optional[str] = None
    mother: Optional[str] = None
    spouse: Optional[str] = None
    children: Optional[List[str]] = None


class TreeNode(CamelModel):
    """One node of the render forest."""
    member: Member
    level: int = 0
    collapsed: bool = False
    has_children: bool = False
    repeated: bool = False  # shown elsewhere in the forest, rendered without descendants
    children: Optional[List["TreeNode"]] = None


TreeNode.model_rebuild()


class ViewState(CamelModel):
    """Tree view state kept alongside the members."""
    collapsed_nodes: Set[str] = Field(default_factory=set)
    selected_member_id: Optional[str] = None
    theme: Theme = "light"
    tree_zoom: float = 1.0
    current_view: View = "tree"


class Snapshot(CamelModel):
    """The persisted blob."""
    members: List[Member] = Field(default_factory=list)
    collapsed_nodes: List[str] = Field(default_factory=list)
    theme: Theme = "light"
    version: str = APP_VERSION
    saved_at: Optional[str] = None


class ExportMetadata(CamelModel):
    exported_at: str = Field(default_factory=now_iso)
    version: str = APP_VERSION
    member_count: int = 0


class ExportDocument(CamelModel):
    """Standalone document produced for download."""
    members: List[Member] = Field(default_factory=list)
    metadata: ExportMetadata = Field(default_factory=ExportMetadata)


class MemberCard(CamelModel):
    """Summary of a member for the list view."""
    id: str
    name: str
    initials: str
    gender: Gender
    gender_label: str
    gender_color: str
    dob_label: str
    photo: str = ""
    parents_count: int = 0
    has_spouse: bool = False
    children_count: int = 0


class MemberDetails(CamelModel):
    """Everything the info panel shows about one member."""
    id: str
    name: str
    photo: str = ""
    gender_age: str
    dob: str
    birth_place: str
    occupation: str
    parents: str
    spouse: str
    children: str
    bio: str = ""


class TreeStatistics(CamelModel):
    total: int = 0
    male: int = 0
    female: int = 0
    other: int = 0
    generations: int = 0


class Notification(CamelModel):
    """A user-visible message (toast)."""
    message: str
    type: Literal["success", "error", "warning", "info"] = "info"
    created_at: str = Field(default_factory=now_iso)


class ExportOptions(BaseModel):
    """Model for printable export configuration."""
    format: str = "png"  # png, jpg, pdf
    width: int = 1920
    height: int = 1080
    quality: int = 90  # For JPG
    page_size: str = "A4"  # For PDF: A4, Letter, Legal, A3
    orientation: str = "landscape"  # portrait, landscape


class LayoutOptions(BaseModel):
    """Model for layout configuration."""
    direction: str = "top-down"  # top-down, left-right
    spacing_x: float = 200.0
    spacing_y: float = 150.0
