"""
Play context for Delve.

A PlayContext bundles what one command needs: the world, the live state
and the acting player. It is the explicit form of "the active player";
handlers never reach for a global.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from delve.models import (
    GameState,
    Location,
    PlayerState,
    StateInvariantError,
    StatePredicate,
    WorldDefinition,
    inventory_key,
)


@dataclass
class PlayContext:
    """World, state and acting player for one command."""

    world: WorldDefinition
    state: GameState
    player_id: str
    predicates: dict[str, StatePredicate] = field(default_factory=dict)

    @property
    def player(self) -> PlayerState:
        """The acting player. Raises if missing or nowhere."""
        return self.state.require_player(self.player_id)

    @property
    def location_id(self) -> str:
        location_id = self.player.location
        assert location_id is not None  # guaranteed by require_player
        return location_id

    @property
    def location(self) -> Location:
        location = self.world.get_location(self.location_id)
        if location is None:
            raise StateInvariantError(f"Location '{self.location_id}' not found.")
        return location

    @property
    def inventory(self) -> str:
        """Place key of the acting player's inventory."""
        return inventory_key(self.player_id)

    def for_player(self, player_id: str) -> PlayContext:
        """Same world and state, different acting player."""
        return replace(self, player_id=player_id)
