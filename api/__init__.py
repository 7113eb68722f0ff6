"""
HTTP API routers and their shared dependencies.
"""
from fastapi import Request

from services.member_store import MemberStore
from services.notifications import Notifier


def get_store(request: Request) -> MemberStore:
    """The application's member store."""
    return request.app.state.store


def get_notifier(request: Request) -> Notifier:
    """The application's notification queue."""
    return request.app.state.notifier
