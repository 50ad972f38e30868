"""
Tests for GameState.
"""

from __future__ import annotations

import pytest

from delve.content import create_demo_world
from delve.models import (
    GameState,
    QuestStatus,
    StateInvariantError,
    exit_key,
    inventory_key,
)


@pytest.fixture
def world():
    """The bundled demo world."""
    return create_demo_world()


@pytest.fixture
def state(world):
    """A fresh state for the demo world."""
    return GameState.from_world(world)


class TestFromWorld:
    """Tests for building initial state from a world."""

    def test_first_player(self, state):
        """The default player starts active at the start location."""
        assert state.active_player_id == "player-1"
        player = state.get_player()
        assert player.location == "cave-entrance"
        assert player.visited == ["cave-entrance"]
        assert player.score == 0

    def test_unique_items_placed(self, state):
        """Unique items start at their declared locations."""
        assert state.item_location("rusty-key") == "main-chamber"
        assert state.item_location("treasure-chest") == "treasure-room"

    def test_container_state(self, state):
        """Containers start with their declared lock state and contents."""
        assert state.is_container_locked("treasure-chest")
        assert not state.is_container_open("treasure-chest")
        assert state.quantity_at("treasure-chest", "gold-coin") == 100
        assert state.quantity_at("treasure-chest", "gem") == 25

    def test_location_stacks(self, state):
        """Generic items lying in locations become stacks."""
        assert state.quantity_at("dead-end", "gem") == 3

    def test_locked_exits(self, state):
        """Only lockable exits are tracked, starting locked."""
        assert exit_key("forest-clearing", "West") == "forest-clearing:west"
        assert state.is_exit_locked("forest-clearing", "west")
        assert not state.is_exit_locked("cave-entrance", "north")
        assert "cave-entrance:north" not in state.exits

    def test_quest_statuses(self, state):
        """Quests start at their initial status."""
        assert state.quest_status("find-treasure") == QuestStatus.ACTIVE
        assert state.quest_status("explore-shed") == QuestStatus.INACTIVE
        assert state.quest_status("unknown") == QuestStatus.INACTIVE


class TestStacks:
    """Tests for generic item stacks."""

    def test_add_merges(self, state):
        """Adding to an existing stack merges quantities."""
        state.add_stack("hall", "gem", 2)
        state.add_stack("hall", "gem", 3)
        assert state.quantity_at("hall", "gem") == 5
        assert len(state.stacks_at("hall")) == 1

    def test_add_rejects_non_positive(self, state):
        """Zero or negative additions are errors."""
        with pytest.raises(ValueError):
            state.add_stack("hall", "gem", 0)

    def test_stack_at_zero_is_pruned(self, state):
        """Removing a whole stack prunes it and the empty place."""
        state.add_stack("hall", "gem", 2)
        assert state.remove_stack("hall", "gem", 2)
        assert state.get_stack("hall", "gem") is None
        assert "hall" not in state.stacks

    def test_prune_keeps_other_stacks(self, state):
        """Pruning one stack leaves the others at the place."""
        state.add_stack("hall", "gem", 1)
        state.add_stack("hall", "gold-coin", 4)
        state.remove_stack("hall", "gem", 1)
        assert [e.item_id for e in state.stacks_at("hall")] == ["gold-coin"]

    def test_remove_too_many_changes_nothing(self, state):
        """Removing more than is there fails without side effects."""
        state.add_stack("hall", "gem", 2)
        assert state.remove_stack("hall", "gem", 3) is False
        assert state.quantity_at("hall", "gem") == 2

    def test_transfer_atomic(self, state):
        """A failed transfer leaves both places untouched."""
        assert state.transfer_stack("dead-end", "hall", "gem", 10) is False
        assert state.quantity_at("dead-end", "gem") == 3
        assert state.quantity_at("hall", "gem") == 0

        assert state.transfer_stack("dead-end", "hall", "gem", 3)
        assert state.quantity_at("hall", "gem") == 3
        assert "dead-end" not in state.stacks

    def test_total_quantity(self, state):
        """total_quantity sums every stack at a place."""
        assert state.total_quantity("treasure-chest") == 125


class TestUniqueItems:
    """Tests for unique item placement."""

    def test_single_place(self, state):
        """Moving a unique item replaces its place; it is never in two places."""
        state.move_item("rusty-key", inventory_key("player-1"))
        assert state.item_location("rusty-key") == "inventory-player-1"
        assert "rusty-key" not in state.items_at("main-chamber")
        assert state.has_item("rusty-key")

        state.move_item("rusty-key", "cave-entrance")
        places = [place for item, place in state.item_locations.items() if item == "rusty-key"]
        assert places == ["cave-entrance"]

    def test_remove_item(self, state):
        """Removed items are nowhere."""
        state.remove_item("rusty-lantern")
        assert state.item_location("rusty-lantern") is None
        assert "rusty-lantern" not in state.items_at("cave-entrance")


class TestPlayers:
    """Tests for players and rotation."""

    def test_add_player(self, state):
        """New players start where they are placed and are not active by default."""
        state.add_player("player-2", "Bob", "cave-entrance")
        assert state.player_ids == ["player-1", "player-2"]
        assert state.active_player_id == "player-1"

    def test_duplicate_player_rejected(self, state):
        """Player ids are unique."""
        with pytest.raises(ValueError):
            state.add_player("player-1", "Again", "cave-entrance")

    def test_rotate(self, state):
        """Rotation follows join order and wraps."""
        state.add_player("player-2", "Bob", "cave-entrance")
        state.add_player("player-3", "Cy", "cave-entrance")
        assert state.rotate_player() == "player-2"
        assert state.rotate_player() == "player-3"
        assert state.rotate_player() == "player-1"

    def test_switch(self, state):
        """switch_player only accepts known players."""
        state.add_player("player-2", "Bob", "cave-entrance")
        assert state.switch_player("player-2")
        assert state.active_player_id == "player-2"
        assert state.switch_player("ghost") is False

    def test_remove_player_drops_items(self, state):
        """A leaving player's inventory drops where they stood."""
        state.add_player("player-2", "Bob", "main-chamber")
        state.move_item("rusty-key", inventory_key("player-2"))
        state.add_stack(inventory_key("player-2"), "gem", 2)

        assert state.remove_player("player-2")
        assert state.item_location("rusty-key") == "main-chamber"
        assert state.quantity_at("main-chamber", "gem") == 2
        assert state.remove_player("player-2") is False

    def test_remove_active_player(self, state):
        """Removing the active player passes activity on."""
        state.add_player("player-2", "Bob", "cave-entrance")
        state.remove_player("player-1")
        assert state.active_player_id == "player-2"

    def test_move_player(self, state):
        """Moving records the visit and counts the move."""
        state.move_player("main-chamber")
        player = state.get_player()
        assert player.location == "main-chamber"
        assert player.has_visited("main-chamber")
        assert player.turn_count == 1

    def test_require_player_without_location(self, state):
        """A player with no location violates an invariant."""
        state.get_player().location = None
        with pytest.raises(StateInvariantError, match="no current location"):
            state.require_player()

    def test_require_player_none_active(self, state):
        """No active player violates an invariant."""
        state.active_player_id = None
        with pytest.raises(StateInvariantError, match="No active player"):
            state.require_player()


class TestFlagsAndLocks:
    """Tests for flags, containers and exits."""

    def test_flags(self, state):
        """Flags can be set, read and cleared."""
        state.set_flag("lit")
        assert state.get_flag("lit") is True
        assert state.has_flag("lit")
        state.clear_flag("lit")
        assert state.get_flag("lit") is None

    def test_container_transitions(self, state):
        """Container lock and open state change independently."""
        state.unlock_container("treasure-chest")
        state.open_container("treasure-chest")
        assert state.is_container_open("treasure-chest")
        state.close_container("treasure-chest")
        state.lock_container("treasure-chest")
        assert state.is_container_locked("treasure-chest")

    def test_exit_lock(self, state):
        """Exit lock state is keyed by location and direction."""
        state.set_exit_locked("forest-clearing", "WEST", False)
        assert not state.is_exit_locked("forest-clearing", "west")
