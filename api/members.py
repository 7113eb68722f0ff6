"""
Member CRUD API endpoints.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from api import get_notifier, get_store
from models import Member, MemberCard, MemberCreate, MemberDetails, MemberUpdate, Relation
from services import member_views
from services.member_store import MemberStore
from services.notifications import Notifier
from services.photo_service import encode_photo
from services.relationships import relation_candidates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/members", tags=["members"])


@router.post("", response_model=Member)
async def create_member(draft: MemberCreate,
                        store: MemberStore = Depends(get_store),
                        notifier: Notifier = Depends(get_notifier)):
    """Create a new member."""
    member = store.create(draft)
    notifier.success(f"{member.name} added to family tree")
    return member


@router.get("", response_model=list[Member])
async def list_members(q: Optional[str] = None, sort_by: str = "name",
                       store: MemberStore = Depends(get_store)):
    """List members, optionally filtered by name/occupation and sorted."""
    members = member_views.search_members(store.members, q)
    return member_views.sort_members(members, sort_by)


@router.get("/cards", response_model=list[MemberCard])
async def list_cards(q: Optional[str] = None, sort_by: str = "name",
                     store: MemberStore = Depends(get_store)):
    """Member cards for the list view."""
    members = member_views.sort_members(member_views.search_members(store.members, q), sort_by)
    return [member_views.member_card(m) for m in members]


@router.get("/candidates/{relation}", response_model=list[Member])
async def list_candidates(relation: Relation, exclude: Optional[str] = None,
                          store: MemberStore = Depends(get_store)):
    """Members selectable for a relation of the member being edited."""
    return relation_candidates(store.members, relation, exclude)


@router.post("/photo")
async def upload_photo(file: UploadFile = File(...)):
    """Read an uploaded photo and return it as an embeddable payload."""
    content = await file.read()
    photo = encode_photo(content, file.filename or "")
    logger.info("Encoded photo %s (%d bytes)", file.filename, len(content))
    return {"photo": photo}


@router.get("/{member_id}", response_model=Member)
async def get_member(member_id: str, store: MemberStore = Depends(get_store)):
    """Get a member by ID."""
    return store.get(member_id)


@router.get("/{member_id}/details", response_model=MemberDetails)
async def get_member_details(member_id: str, store: MemberStore = Depends(get_store)):
    """Info panel contents; also marks the member as selected."""
    member = store.select(member_id)
    return member_views.member_details(member, store.members)


@router.put("/{member_id}", response_model=Member)
async def update_member(member_id: str, patch: MemberUpdate,
                        store: MemberStore = Depends(get_store),
                        notifier: Notifier = Depends(get_notifier)):
    """Update the provided fields of a member."""
    member = store.update(member_id, patch)
    notifier.success(f"{member.name} updated successfully")
    return member


@router.delete("/{member_id}")
async def delete_member(member_id: str,
                        store: MemberStore = Depends(get_store),
                        notifier: Notifier = Depends(get_notifier)):
    """Delete a member and every link to them. Unknown ids are ignored."""
    member = store.delete(member_id)
    if member is not None:
        notifier.warning(f"{member.name} removed from family tree")
    return {"status": "deleted", "id": member_id, "existed": member is not None}
