"""
Persistence of the member collection and view state.

Snapshots are JSON documents kept in a small key-value store. Saving never
raises: failures are logged and surfaced as notifications, and the in-memory
data stays as it is.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from pydantic import TypeAdapter

from config import APP_VERSION, STORE_KEY, THEME_KEY
from errors import FormatError, StorageError
from models import ExportDocument, ExportMetadata, Member, Snapshot, now_iso
from services.notifications import Notifier

logger = logging.getLogger(__name__)

_members_adapter = TypeAdapter(List[Member])


class MemoryStore:
    """Key-value store kept in a dict."""

    def __init__(self):
        self.data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str):
        self.data[key] = value


class JsonFileStore:
    """Key-value store with one file per key inside ``directory``."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def set(self, key: str, value: str):
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            # Readers only ever see a complete file
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e


class PersistenceAdapter:
    """Saves, loads, exports and imports member snapshots."""

    def __init__(self, store, notifier: Optional[Notifier] = None):
        self.store = store
        self.notifier = notifier or Notifier()

    def save(self, members: Iterable[Member], collapsed_nodes: Iterable[str], theme: str) -> bool:
        """Write the snapshot blob. Returns False (and reports) on failure."""
        try:
            snapshot = Snapshot(
                members=list(members),
                collapsed_nodes=sorted(collapsed_nodes),
                theme=theme,
                version=APP_VERSION,
                saved_at=now_iso(),
            )
            self.store.set(STORE_KEY, snapshot.model_dump_json(by_alias=True))
        except Exception:
            logger.exception("Failed to save data")
            self.notifier.error("Failed to save data")
            return False
        logger.debug("Saved %d members", len(snapshot.members))
        return True

    def load(self) -> Snapshot:
        """Read the snapshot blob; empty state when missing or unreadable."""
        try:
            raw = self.store.get(STORE_KEY)
        except StorageError as e:
            logger.error("Failed to load data: %s", e)
            self.notifier.error("Failed to load saved data")
            return Snapshot()

        if raw is None:
            return Snapshot()

        try:
            snapshot = Snapshot.model_validate_json(raw)
        except PydanticValidationError as e:
            logger.error("Saved data is malformed: %s", e)
            self.notifier.error("Failed to load saved data")
            return Snapshot()

        logger.info("Loaded %d members", len(snapshot.members))
        if snapshot.members:
            self.notifier.success("Data loaded successfully")
        return snapshot

    def load_theme(self, default: str = "light") -> str:
        try:
            theme = self.store.get(THEME_KEY)
        except StorageError as e:
            logger.warning("Failed to read theme preference: %s", e)
            return default
        if theme is None:
            return default
        theme = theme.strip().strip('"')
        return theme if theme in ("light", "dark") else default

    def save_theme(self, theme: str) -> bool:
        try:
            self.store.set(THEME_KEY, json.dumps(theme))
        except StorageError as e:
            logger.error("Failed to save theme preference: %s", e)
            self.notifier.error("Failed to save theme preference")
            return False
        return True


def export_snapshot(members: Iterable[Member]) -> Dict[str, Any]:
    """Build the standalone export document."""
    members = list(members)
    document = ExportDocument(
        members=members,
        metadata=ExportMetadata(exported_at=now_iso(), version=APP_VERSION, member_count=len(members)),
    )
    return document.model_dump(mode="json", by_alias=True)


def import_snapshot(doc: Any) -> List[Member]:
    """Validate an export document and return its members."""
    if not isinstance(doc, dict) or "members" not in doc:
        raise FormatError("Invalid file format: missing members")
    members = doc["members"]
    if not isinstance(members, list):
        raise FormatError("Invalid file format: members must be a list")
    try:
        return _members_adapter.validate_python(members)
    except PydanticValidationError as e:
        raise FormatError(f"Invalid file format: {e.error_count()} invalid member field(s)") from e


def parse_import(raw: Union[bytes, str]) -> List[Member]:
    """Decode an uploaded export file and return its members."""
    try:
        doc = json.loads(raw)
    except (UnicodeDecodeError, ValueError) as e:
        raise FormatError("Invalid file format: not JSON") from e
    return import_snapshot(doc)
