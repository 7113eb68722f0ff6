"""
Notification API endpoint.
"""
from fastapi import APIRouter, Depends

from api import get_notifier
from models import Notification
from services.notifications import Notifier

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=list[Notification])
async def drain_notifications(notifier: Notifier = Depends(get_notifier)):
    """Return pending notifications and clear them."""
    return notifier.drain()
