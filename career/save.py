# career/save.py
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from .config import SAVE_DIR, STORAGE_KEY
from .migrate import CURRENT_SCHEMA_VERSION, migrate_save

logger = logging.getLogger(__name__)


def save_path(save_dir: str = SAVE_DIR, key: str = STORAGE_KEY) -> str:
    return os.path.join(save_dir, f"{key}.json")


def write_blob(path: str, data: Dict[str, Any]) -> None:
    """Write the whole blob or nothing: temp file in the same folder, then os.replace."""
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    blob = dict(data)
    blob["schema_version"] = CURRENT_SCHEMA_VERSION
    tmp = path + ".tmp"
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(blob, f, indent=2)
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.remove(tmp)


def read_blob(path: str) -> Optional[Dict[str, Any]]:
    """Migrated blob, or None when there is no save. Corrupt files raise ValueError."""
    if not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        blob = json.load(f)
    return migrate_save(blob)


class SaveStore:
    """The single career slot on disk."""

    def __init__(self, save_dir: str = SAVE_DIR, key: str = STORAGE_KEY) -> None:
        self.path = save_path(save_dir, key)

    def save(self, data: Dict[str, Any]) -> None:
        write_blob(self.path, data)
        logger.debug("Career saved to %s", self.path)

    def load(self) -> Optional[Dict[str, Any]]:
        """None for a missing or unreadable save; the caller starts a fresh career."""
        try:
            return read_blob(self.path)
        except (OSError, ValueError, TypeError, KeyError) as e:
            logger.warning("Ignoring unreadable save %s: %s", self.path, e)
            return None

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def delete(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
