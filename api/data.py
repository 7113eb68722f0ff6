"""
Data API endpoints (JSON export/import, clear, sample data, theme).
"""
import logging
from datetime import date

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from api import get_notifier, get_store
from services.member_store import MemberStore
from services.notifications import Notifier
from services.persistence import export_snapshot, parse_import

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/data", tags=["data"])


@router.get("/export")
async def export_json(store: MemberStore = Depends(get_store),
                      notifier: Notifier = Depends(get_notifier)):
    """Download the members as a standalone JSON document."""
    document = export_snapshot(store.members)
    filename = f"family-tree-{date.today().isoformat()}.json"
    notifier.success("Family tree exported successfully")
    return JSONResponse(
        content=document,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import")
async def import_json(file: UploadFile = File(...),
                      store: MemberStore = Depends(get_store),
                      notifier: Notifier = Depends(get_notifier)):
    """Replace all members with those of an exported file."""
    raw = await file.read()
    members = parse_import(raw)
    count = store.replace_all(members)
    logger.info("Imported %d members from %s", count, file.filename)
    notifier.success(f"Successfully imported {count} members")
    return {"status": "imported", "members": count}


@router.post("/clear")
async def clear_all(store: MemberStore = Depends(get_store),
                    notifier: Notifier = Depends(get_notifier)):
    store.clear_all()
    notifier.warning("All data cleared")
    return {"status": "cleared"}


@router.post("/sample")
async def load_sample(store: MemberStore = Depends(get_store),
                      notifier: Notifier = Depends(get_notifier)):
    members = store.add_sample_data()
    notifier.success("Sample family tree loaded!")
    return {"status": "loaded", "members": len(members)}


@router.get("/theme")
async def get_theme(store: MemberStore = Depends(get_store)):
    return {"theme": store.view.theme}


@router.post("/theme/toggle")
async def toggle_theme(store: MemberStore = Depends(get_store),
                       notifier: Notifier = Depends(get_notifier)):
    theme = store.toggle_theme()
    notifier.info(f"{theme.capitalize()} mode activated")
    return {"theme": theme}
