"""
State snapshots for Delve.

A snapshot is the persisted form of a GameState. Saves written by the
single-player releases (version 1, camelCase keys, one implicit player,
bare `inventory` places) go through upgrade_snapshot() before they are
validated as the current version.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from delve.models.quest import QuestStatus
from delve.models.state import (
    ContainerState,
    ExitState,
    GameState,
    PlayerState,
    inventory_key,
)
from delve.models.world import INVENTORY_LOCATION, StackEntry, WorldDefinition

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 2
LEGACY_VERSION = 1

DEFAULT_PLAYER_ID = "player-1"
DEFAULT_PLAYER_NAME = "Player"


class SnapshotVersionError(ValueError):
    """The snapshot was written by an unknown format version."""


class StateSnapshot(BaseModel):
    """Serialized GameState (current format)."""

    version: int = SNAPSHOT_VERSION
    saved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    world_id: str

    players: dict[str, PlayerState] = Field(default_factory=dict)
    active_player_id: str | None = None

    item_locations: dict[str, str] = Field(default_factory=dict)
    stacks: dict[str, list[StackEntry]] = Field(default_factory=dict)
    containers: dict[str, ContainerState] = Field(default_factory=dict)
    exits: dict[str, ExitState] = Field(default_factory=dict)
    flags: dict[str, Any] = Field(default_factory=dict)
    quests: dict[str, QuestStatus] = Field(default_factory=dict)


class LegacyStack(BaseModel):
    model_config = {"populate_by_name": True}

    item_id: str = Field(alias="itemId")
    quantity: int = Field(ge=0)


class LegacySnapshot(BaseModel):
    """Single-player save record (version 1)."""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    game_id: str = Field(alias="gameId")
    current_location: str | None = Field(default=None, alias="currentLocation")
    unique_item_locations: dict[str, str] = Field(default_factory=dict, alias="uniqueItemLocations")
    generic_item_stacks: dict[str, list[LegacyStack]] = Field(
        default_factory=dict, alias="genericItemStacks"
    )
    flags: dict[str, Any] = Field(default_factory=dict)
    quest_states: dict[str, QuestStatus] = Field(default_factory=dict, alias="questStates")
    turn_count: int = Field(default=0, alias="turnCount")
    score: int = 0
    visited_locations: list[str] = Field(default_factory=list, alias="visitedLocations")
    timestamp: datetime | None = None


# =============================================================================
# Upgrade
# =============================================================================


def _remap_place(place: str, player_id: str) -> str:
    return inventory_key(player_id) if place == INVENTORY_LOCATION else place


def upgrade_legacy(
    legacy: LegacySnapshot,
    player_id: str = DEFAULT_PLAYER_ID,
    player_name: str = DEFAULT_PLAYER_NAME,
) -> StateSnapshot:
    """
    Convert a single-player record to the current format.

    A default player is synthesized from the top-level location, score,
    turn count and visited list, and every bare `inventory` place is
    rewritten to that player's inventory key.
    """
    player = PlayerState(
        id=player_id,
        name=player_name,
        location=legacy.current_location,
        score=legacy.score,
        turn_count=legacy.turn_count,
        visited=list(dict.fromkeys(legacy.visited_locations)),
    )

    stacks: dict[str, list[StackEntry]] = {}
    for place, entries in legacy.generic_item_stacks.items():
        kept = [
            StackEntry(item_id=entry.item_id, quantity=entry.quantity)
            for entry in entries
            if entry.quantity > 0
        ]
        if kept:
            stacks.setdefault(_remap_place(place, player_id), []).extend(kept)

    snapshot = StateSnapshot(
        world_id=legacy.game_id,
        players={player_id: player},
        active_player_id=player_id,
        item_locations={
            item_id: _remap_place(place, player_id)
            for item_id, place in legacy.unique_item_locations.items()
        },
        stacks=stacks,
        flags=dict(legacy.flags),
        quests=dict(legacy.quest_states),
    )
    if legacy.timestamp is not None:
        snapshot.saved_at = legacy.timestamp

    logger.info("Upgraded legacy snapshot for world %s", legacy.game_id)
    return snapshot


def upgrade_snapshot(
    data: dict[str, Any],
    player_id: str = DEFAULT_PLAYER_ID,
    player_name: str = DEFAULT_PLAYER_NAME,
) -> StateSnapshot:
    """
    Validate raw snapshot data of any supported version.

    Records without a version and without a player map are treated as
    version 1.

    Raises:
        SnapshotVersionError: If the version is not supported
        pydantic.ValidationError: If the record is malformed
    """
    version = data.get("version")
    if version is None:
        version = SNAPSHOT_VERSION if "players" in data else LEGACY_VERSION

    if version == SNAPSHOT_VERSION:
        return StateSnapshot.model_validate(data)
    if version == LEGACY_VERSION:
        legacy = LegacySnapshot.model_validate(data)
        return upgrade_legacy(legacy, player_id=player_id, player_name=player_name)

    raise SnapshotVersionError(f"Unsupported snapshot version: {version}")


# =============================================================================
# Snapshot / Restore
# =============================================================================


def take_snapshot(state: GameState) -> StateSnapshot:
    """Capture a deep, independent copy of a state."""
    data = state.model_dump()
    return StateSnapshot.model_validate(data)


def restore_state(
    snapshot: StateSnapshot | dict[str, Any],
    world: WorldDefinition,
) -> GameState:
    """
    Build a new GameState from a snapshot.

    The result is a fresh object; callers replace their live state with it.
    Container, exit and quest entries missing from the snapshot are filled
    from the world's initial state.

    Raises:
        ValueError: If the snapshot belongs to a different world
    """
    if not isinstance(snapshot, StateSnapshot):
        snapshot = upgrade_snapshot(snapshot)

    if snapshot.world_id != world.id:
        raise ValueError(
            f"Snapshot belongs to world '{snapshot.world_id}', not '{world.id}'"
        )

    data = snapshot.model_dump(exclude={"version", "saved_at"})
    defaults = GameState.from_world(world)
    for key in ("containers", "exits", "quests"):
        merged = defaults.model_dump()[key]
        merged.update(data[key])
        data[key] = merged

    state = GameState.model_validate(data)
    if state.active_player_id not in state.players:
        state.active_player_id = next(iter(state.players), None)
    return state
