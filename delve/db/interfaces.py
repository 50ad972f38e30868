"""
Save storage interface definitions for Delve.

Uses Protocol classes to define the contract for save storage.
Implementations can write to disk or keep everything in memory for tests.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel

if TYPE_CHECKING:
    from delve.models import StateSnapshot


class SaveSlotInfo(BaseModel):
    """Summary of one stored save, for listings."""

    slot: str
    world_id: str
    saved_at: datetime


class SaveRepository(Protocol):
    """
    Interface for save storage.

    Slots are named by the player. Saving to an existing slot replaces it.
    """

    def save(self, slot: str, snapshot: StateSnapshot) -> None:
        """Store a snapshot under a slot name."""
        ...

    def load(self, slot: str) -> StateSnapshot | None:
        """Get the snapshot in a slot, upgraded to the current format."""
        ...

    def list_slots(self, world_id: str | None = None) -> list[SaveSlotInfo]:
        """List stored saves, newest first, optionally for one world."""
        ...

    def delete(self, slot: str) -> bool:
        """Delete a slot. Returns False if it did not exist."""
        ...
