"""
Family Tree Application - FastAPI Entry Point
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

import config
from errors import FamilyTreeError
from services.member_store import MemberStore
from services.notifications import Notifier
from services.persistence import JsonFileStore, PersistenceAdapter

# Configure logging
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def build_store(notifier: Notifier, kv_store=None, seed_sample: bool = config.SEED_SAMPLE_DATA) -> MemberStore:
    """Load the member store from the durable key-value store."""
    persistence = PersistenceAdapter(kv_store or JsonFileStore(config.DATA_DIR), notifier)
    store = MemberStore.from_persistence(persistence)
    if len(store) == 0 and seed_sample:
        store.add_sample_data()
        notifier.success("Sample family tree loaded!")
    logger.info("Store ready with %d members", len(store))
    return store


def create_app(store: Optional[MemberStore] = None, notifier: Optional[Notifier] = None) -> FastAPI:
    """Create the FastAPI application around one member store."""
    notifier = notifier or Notifier()
    if store is None:
        store = build_store(notifier)

    app = FastAPI(
        title="Family Tree Builder",
        description="Build and browse a family tree",
        version=config.APP_VERSION
    )
    app.state.store = store
    app.state.notifier = notifier

    @app.exception_handler(FamilyTreeError)
    async def family_tree_error_handler(request: Request, exc: FamilyTreeError):
        logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
        notifier.error(exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    from api import data, members, notifications, tree

    app.include_router(members.router)
    app.include_router(tree.router)
    app.include_router(data.router)
    app.include_router(notifications.router)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "members": len(app.state.store)
        }

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
