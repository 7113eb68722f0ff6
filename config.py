"""
Configuration for the Family Tree application.
"""
import os
from pathlib import Path


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


APP_VERSION = "2.1.0"

# Durable key-value store keys
STORE_KEY = "family-tree-builder-data"
THEME_KEY = "family-tree-theme"

DATA_DIR = Path(os.environ.get("FAMILY_TREE_DATA_DIR", "data"))
EXPORTS_DIR = Path(os.environ.get("FAMILY_TREE_EXPORTS_DIR", "exports"))

SEED_SAMPLE_DATA = _env_flag("FAMILY_TREE_SAMPLE_DATA", True)
LOG_LEVEL = os.environ.get("FAMILY_TREE_LOG_LEVEL", "INFO").upper()

# Tree view zoom
ZOOM_MIN = 0.5
ZOOM_MAX = 3.0
ZOOM_STEP = 0.2

# Uploaded photos are downscaled to fit this box before embedding
PHOTO_MAX_SIZE = (400, 400)
