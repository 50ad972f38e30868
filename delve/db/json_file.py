"""
JSON file implementation of the save repository.

Each slot is one `<slot>.json` file in the save directory. Files written
by older releases are upgraded on load.
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path

from pydantic import ValidationError

from delve.db.interfaces import SaveSlotInfo
from delve.models import SnapshotVersionError, StateSnapshot, upgrade_snapshot

logger = logging.getLogger(__name__)

SLOT_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class JsonFileSaveRepository:
    """
    Stores snapshots as JSON files on disk.

    Configuration via environment variable:
    - DELVE_SAVE_DIR: Directory for save files (default: saves)
    """

    def __init__(self, directory: str | Path | None = None):
        self.directory = Path(directory or os.getenv("DELVE_SAVE_DIR", "saves"))

    def _path(self, slot: str) -> Path:
        if not SLOT_PATTERN.match(slot):
            raise ValueError(
                f"Invalid save slot '{slot}': use letters, digits, '-' and '_' only"
            )
        return self.directory / f"{slot}.json"

    def save(self, slot: str, snapshot: StateSnapshot) -> None:
        """Write a snapshot to its slot file, replacing any previous save."""
        path = self._path(slot)
        self.directory.mkdir(parents=True, exist_ok=True)
        path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
        logger.info("Saved slot %s to %s", slot, path)

    def load(self, slot: str) -> StateSnapshot | None:
        """
        Read a slot file.

        Returns:
            The snapshot, or None if the slot does not exist

        Raises:
            SnapshotVersionError: If the file was written by an unknown version
            ValueError: If the file is not a valid snapshot
        """
        path = self._path(slot)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            snapshot = upgrade_snapshot(data)
        except SnapshotVersionError:
            raise
        except (json.JSONDecodeError, ValidationError) as e:
            raise ValueError(f"Save slot '{slot}' is corrupt: {e}") from e
        logger.info("Loaded slot %s from %s", slot, path)
        return snapshot

    def list_slots(self, world_id: str | None = None) -> list[SaveSlotInfo]:
        """List readable saves, newest first. Unreadable files are skipped."""
        if not self.directory.is_dir():
            return []

        infos = []
        for path in self.directory.glob("*.json"):
            slot = path.stem
            if not SLOT_PATTERN.match(slot):
                continue
            try:
                snapshot = self.load(slot)
            except ValueError as e:
                logger.warning("Skipping unreadable save %s: %s", path, e)
                continue
            if snapshot is None:
                continue
            if world_id is not None and snapshot.world_id != world_id:
                continue
            infos.append(
                SaveSlotInfo(slot=slot, world_id=snapshot.world_id, saved_at=snapshot.saved_at)
            )
        return sorted(infos, key=lambda i: i.saved_at, reverse=True)

    def delete(self, slot: str) -> bool:
        """Delete a slot file."""
        path = self._path(slot)
        if not path.exists():
            return False
        path.unlink()
        logger.info("Deleted slot %s", slot)
        return True
