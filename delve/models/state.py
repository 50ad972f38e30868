"""
Game state for Delve.

GameState is the only mutable entity in a session. It is split into
shared world facts (item places, stacks, container and exit lock state,
quest progress, global flags) and per-player facts (location, score,
turn count, visited locations, player flags), plus the active-player
pointer selecting whose commands are being interpreted.

Places are either a location id, a container item id (for container
contents), or a player-scoped inventory key `inventory-{player_id}`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from delve.models.quest import QuestStatus
from delve.models.world import INVENTORY_LOCATION, StackEntry

if TYPE_CHECKING:
    from delve.models.world import WorldDefinition


INVENTORY_PREFIX = "inventory-"


class StateInvariantError(RuntimeError):
    """The state is inconsistent for the current turn (e.g. no active player)."""


def inventory_key(player_id: str) -> str:
    """Place key for a player's inventory."""
    return f"{INVENTORY_PREFIX}{player_id}"


def exit_key(location_id: str, direction: str) -> str:
    """Key for an exit's lock state."""
    return f"{location_id}:{direction.lower()}"


# =============================================================================
# Sub-state Models
# =============================================================================


class ContainerState(BaseModel):
    """The 2x2 lock/open sub-state of a container."""

    locked: bool = False
    open: bool = False


class ExitState(BaseModel):
    locked: bool = False


class PlayerState(BaseModel):
    """Per-player facts."""

    id: str
    name: str
    location: str | None = None
    score: int = 0
    turn_count: int = 0
    visited: list[str] = Field(default_factory=list)
    """Visited location ids in first-visit order (no duplicates)."""

    flags: dict[str, Any] = Field(default_factory=dict)

    def has_visited(self, location_id: str) -> bool:
        return location_id in self.visited

    def visit(self, location_id: str) -> None:
        if location_id not in self.visited:
            self.visited.append(location_id)


# =============================================================================
# Game State
# =============================================================================


class GameState(BaseModel):
    """Mutable world and player state for one session."""

    world_id: str
    players: dict[str, PlayerState] = Field(default_factory=dict)
    active_player_id: str | None = None

    item_locations: dict[str, str] = Field(default_factory=dict)
    """Unique item id -> place. One place per item."""

    stacks: dict[str, list[StackEntry]] = Field(default_factory=dict)
    """Place -> generic item stacks. Empty stacks and places are pruned."""

    containers: dict[str, ContainerState] = Field(default_factory=dict)
    exits: dict[str, ExitState] = Field(default_factory=dict)
    flags: dict[str, Any] = Field(default_factory=dict)
    quests: dict[str, QuestStatus] = Field(default_factory=dict)

    @classmethod
    def from_world(
        cls,
        world: WorldDefinition,
        player_id: str = "player-1",
        player_name: str = "Player",
    ) -> GameState:
        """
        Build a fresh state with everything at its declared initial state.

        Args:
            world: The world definition
            player_id: Id of the first (and active) player
            player_name: Display name of the first player

        Returns:
            New GameState
        """
        state = cls(world_id=world.id)
        state.add_player(player_id, player_name, world.start_location)

        for location in world.locations:
            for entry in location.stacks:
                state.add_stack(location.id, entry.item_id, entry.quantity)
            for exit_ in location.exits:
                if exit_.is_lockable:
                    state.exits[exit_key(location.id, exit_.direction)] = ExitState(
                        locked=exit_.initially_locked
                    )

        for item in world.unique_items:
            if item.location == INVENTORY_LOCATION:
                state.item_locations[item.id] = inventory_key(player_id)
            elif item.location:
                state.item_locations[item.id] = item.location

            if item.is_container:
                state.containers[item.id] = ContainerState(
                    locked=item.is_locked,
                    open=not item.is_closed,
                )
                for entry in item.contents:
                    state.add_stack(item.id, entry.item_id, entry.quantity)

        for quest in world.quests:
            state.quests[quest.id] = quest.initial_status

        return state

    # =========================================================================
    # Players
    # =========================================================================

    def add_player(
        self,
        player_id: str,
        name: str,
        location: str,
        make_active: bool = False,
    ) -> PlayerState:
        """
        Add a player at a location.

        The first player added becomes active automatically.
        """
        if player_id in self.players:
            raise ValueError(f"Player '{player_id}' already exists")

        player = PlayerState(id=player_id, name=name, location=location)
        player.visit(location)
        self.players[player_id] = player

        if make_active or self.active_player_id is None:
            self.active_player_id = player_id
        return player

    def remove_player(self, player_id: str) -> bool:
        """
        Remove a player. Their unique items and stacks drop where they stand.

        Returns:
            True if removed, False if not found
        """
        player = self.players.get(player_id)
        if player is None:
            return False

        inventory = inventory_key(player_id)
        if player.location is not None:
            for item_id in self.items_at(inventory):
                self.item_locations[item_id] = player.location
            for entry in list(self.stacks_at(inventory)):
                self.transfer_stack(inventory, player.location, entry.item_id, entry.quantity)

        del self.players[player_id]
        if self.active_player_id == player_id:
            self.active_player_id = next(iter(self.players), None)
        return True

    @property
    def player_ids(self) -> list[str]:
        return list(self.players)

    def get_player(self, player_id: str | None = None) -> PlayerState | None:
        """Get a player; defaults to the active player."""
        if player_id is None:
            player_id = self.active_player_id
        if player_id is None:
            return None
        return self.players.get(player_id)

    def require_player(self, player_id: str | None = None) -> PlayerState:
        """Get a player that must exist and be somewhere."""
        player = self.get_player(player_id)
        if player is None:
            raise StateInvariantError("No active player.")
        if player.location is None:
            raise StateInvariantError(f"Player '{player.id}' has no current location.")
        return player

    def switch_player(self, player_id: str) -> bool:
        """Make a player active. Returns False if unknown."""
        if player_id not in self.players:
            return False
        self.active_player_id = player_id
        return True

    def rotate_player(self) -> str | None:
        """Advance the active pointer to the next player in join order."""
        ids = self.player_ids
        if not ids:
            self.active_player_id = None
            return None
        if self.active_player_id not in ids:
            self.active_player_id = ids[0]
        else:
            index = ids.index(self.active_player_id)
            self.active_player_id = ids[(index + 1) % len(ids)]
        return self.active_player_id

    def current_location(self, player_id: str | None = None) -> str | None:
        player = self.get_player(player_id)
        return player.location if player else None

    def move_player(self, location_id: str, player_id: str | None = None) -> None:
        """Move a player, record the visit and count the move."""
        player = self.require_player(player_id)
        player.location = location_id
        player.visit(location_id)
        player.turn_count += 1

    def players_at(self, location_id: str) -> list[PlayerState]:
        return [p for p in self.players.values() if p.location == location_id]

    def add_score(self, points: int, player_id: str | None = None) -> None:
        self.require_player(player_id).score += points

    # =========================================================================
    # Unique Items
    # =========================================================================

    def item_location(self, item_id: str) -> str | None:
        return self.item_locations.get(item_id)

    def move_item(self, item_id: str, place: str) -> None:
        """Move a unique item. Its previous place is replaced."""
        self.item_locations[item_id] = place

    def remove_item(self, item_id: str) -> None:
        """Take a unique item out of the world entirely."""
        self.item_locations.pop(item_id, None)

    def items_at(self, place: str) -> list[str]:
        return [item_id for item_id, where in self.item_locations.items() if where == place]

    def inventory_items(self, player_id: str | None = None) -> list[str]:
        player = self.require_player(player_id)
        return self.items_at(inventory_key(player.id))

    def has_item(self, item_id: str, player_id: str | None = None) -> bool:
        player = self.require_player(player_id)
        return self.item_locations.get(item_id) == inventory_key(player.id)

    # =========================================================================
    # Generic Item Stacks
    # =========================================================================

    def stacks_at(self, place: str) -> list[StackEntry]:
        return self.stacks.get(place, [])

    def get_stack(self, place: str, item_id: str) -> StackEntry | None:
        for entry in self.stacks.get(place, []):
            if entry.item_id == item_id:
                return entry
        return None

    def quantity_at(self, place: str, item_id: str) -> int:
        entry = self.get_stack(place, item_id)
        return entry.quantity if entry else 0

    def total_quantity(self, place: str) -> int:
        return sum(entry.quantity for entry in self.stacks.get(place, []))

    def add_stack(self, place: str, item_id: str, quantity: int) -> None:
        """Add to the stack of `item_id` at `place`, creating it if needed."""
        if quantity <= 0:
            raise ValueError(f"Cannot add a quantity of {quantity}")

        entry = self.get_stack(place, item_id)
        if entry is not None:
            entry.quantity += quantity
        else:
            self.stacks.setdefault(place, []).append(
                StackEntry(item_id=item_id, quantity=quantity)
            )

    def remove_stack(self, place: str, item_id: str, quantity: int) -> bool:
        """
        Remove from a stack. A stack reaching zero is pruned.

        Returns:
            False (and changes nothing) if there are fewer than `quantity`
        """
        entry = self.get_stack(place, item_id)
        if entry is None or quantity <= 0 or entry.quantity < quantity:
            return False

        entry.quantity -= quantity
        if entry.quantity == 0:
            remaining = [e for e in self.stacks[place] if e.item_id != item_id]
            if remaining:
                self.stacks[place] = remaining
            else:
                del self.stacks[place]
        return True

    def transfer_stack(self, source: str, destination: str, item_id: str, quantity: int) -> bool:
        """Move a quantity between places. Nothing is added if the removal fails."""
        if not self.remove_stack(source, item_id, quantity):
            return False
        self.add_stack(destination, item_id, quantity)
        return True

    # =========================================================================
    # Containers
    # =========================================================================

    def container_state(self, item_id: str) -> ContainerState | None:
        return self.containers.get(item_id)

    def is_container_locked(self, item_id: str) -> bool:
        container = self.containers.get(item_id)
        return container.locked if container else False

    def is_container_open(self, item_id: str) -> bool:
        container = self.containers.get(item_id)
        return container.open if container else False

    def _container(self, item_id: str) -> ContainerState:
        return self.containers.setdefault(item_id, ContainerState())

    def open_container(self, item_id: str) -> None:
        self._container(item_id).open = True

    def close_container(self, item_id: str) -> None:
        self._container(item_id).open = False

    def lock_container(self, item_id: str) -> None:
        self._container(item_id).locked = True

    def unlock_container(self, item_id: str) -> None:
        self._container(item_id).locked = False

    # =========================================================================
    # Exits
    # =========================================================================

    def is_exit_locked(self, location_id: str, direction: str) -> bool:
        state = self.exits.get(exit_key(location_id, direction))
        return state.locked if state else False

    def set_exit_locked(self, location_id: str, direction: str, locked: bool) -> None:
        self.exits.setdefault(exit_key(location_id, direction), ExitState()).locked = locked

    # =========================================================================
    # Flags
    # =========================================================================

    def set_flag(self, key: str, value: Any = True) -> None:
        self.flags[key] = value

    def get_flag(self, key: str, default: Any = None) -> Any:
        return self.flags.get(key, default)

    def has_flag(self, key: str) -> bool:
        return key in self.flags

    def clear_flag(self, key: str) -> None:
        self.flags.pop(key, None)

    # =========================================================================
    # Quests
    # =========================================================================

    def quest_status(self, quest_id: str) -> QuestStatus:
        return self.quests.get(quest_id, QuestStatus.INACTIVE)

    def set_quest_status(self, quest_id: str, status: QuestStatus) -> None:
        self.quests[quest_id] = status
