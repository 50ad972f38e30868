"""
In-memory implementation of the save repository for testing.

Stores snapshots in a dictionary, making tests fast and isolated from
the filesystem.
"""

from __future__ import annotations

from copy import deepcopy

from delve.db.interfaces import SaveSlotInfo
from delve.models import StateSnapshot


class InMemorySaveRepository:
    """
    In-memory implementation of SaveRepository for testing.

    Stored snapshots are deep copies, so later changes to the live game
    never leak into a save.
    """

    def __init__(self) -> None:
        self._slots: dict[str, StateSnapshot] = {}

    def save(self, slot: str, snapshot: StateSnapshot) -> None:
        """Store a snapshot under a slot name."""
        self._slots[slot] = deepcopy(snapshot)

    def load(self, slot: str) -> StateSnapshot | None:
        """Get the snapshot in a slot."""
        snapshot = self._slots.get(slot)
        return deepcopy(snapshot) if snapshot is not None else None

    def list_slots(self, world_id: str | None = None) -> list[SaveSlotInfo]:
        """List stored saves, newest first."""
        infos = [
            SaveSlotInfo(slot=slot, world_id=s.world_id, saved_at=s.saved_at)
            for slot, s in self._slots.items()
            if world_id is None or s.world_id == world_id
        ]
        return sorted(infos, key=lambda i: i.saved_at, reverse=True)

    def delete(self, slot: str) -> bool:
        """Delete a slot."""
        return self._slots.pop(slot, None) is not None
