"""
Tree view API endpoints (render tree, collapse/expand, selection, zoom, print export).
"""
import logging
import os
from typing import Literal

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import FileResponse

from api import get_store
from models import ExportOptions, TreeStatistics
from services import tree_builder
from services.member_store import MemberStore
from services.member_views import statistics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tree", tags=["tree"])


def tree_payload(store: MemberStore) -> dict:
    forest = tree_builder.build(store.members, store.collapsed_nodes)
    return {
        "forest": [node.model_dump(mode="json", by_alias=True) for node in forest],
        "view": store.view.model_dump(mode="json", by_alias=True),
        "empty": len(store) == 0,
    }


@router.get("")
async def get_tree(store: MemberStore = Depends(get_store)):
    """Get the render forest and the current view state."""
    return tree_payload(store)


@router.post("/toggle/{member_id}")
async def toggle_node(member_id: str, store: MemberStore = Depends(get_store)):
    """Collapse or expand a node."""
    store.toggle_node(member_id)
    return tree_payload(store)


@router.post("/expand-all")
async def expand_all(store: MemberStore = Depends(get_store)):
    store.expand_all()
    return tree_payload(store)


@router.post("/collapse-all")
async def collapse_all(store: MemberStore = Depends(get_store)):
    store.collapse_all()
    return tree_payload(store)


@router.post("/select/{member_id}")
async def select_node(member_id: str, store: MemberStore = Depends(get_store)):
    store.select(member_id)
    return {"selectedMemberId": member_id}


@router.post("/zoom-in")
async def zoom_in(store: MemberStore = Depends(get_store)):
    return {"treeZoom": store.zoom_in()}


@router.post("/zoom-out")
async def zoom_out(store: MemberStore = Depends(get_store)):
    return {"treeZoom": store.zoom_out()}


@router.post("/view")
async def switch_view(view: Literal["tree", "list"] = Body(..., embed=True),
                      store: MemberStore = Depends(get_store)):
    store.set_view(view)
    return {"currentView": view}


@router.get("/stats", response_model=TreeStatistics)
async def get_statistics(store: MemberStore = Depends(get_store)):
    """Member counts and number of generations."""
    return statistics(store.members)


@router.post("/print")
async def print_tree(options: ExportOptions, store: MemberStore = Depends(get_store)):
    """Export the currently visible tree as an image or PDF."""
    from services.export_service import export_tree

    forest = tree_builder.build(store.members, store.collapsed_nodes)
    try:
        filepath = export_tree(forest, options)
    except Exception as e:
        logger.exception("Export failed")
        raise HTTPException(status_code=500, detail=str(e))

    return FileResponse(
        filepath,
        media_type="application/octet-stream",
        filename=os.path.basename(filepath)
    )
