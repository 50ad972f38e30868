"""
Tests for the quest service.
"""

from __future__ import annotations

import pytest

from delve.engine.conditions import ConditionEvaluator
from delve.engine.context import PlayContext
from delve.models import (
    AtLocationCondition,
    GameState,
    GenericItem,
    ItemReward,
    Location,
    QuestStatus,
    UniqueItem,
    VisitedCondition,
    WorldDefinition,
    create_objective,
    create_quest,
    flag_set,
    has_item,
    inventory_key,
)
from delve.services.quest import QuestService


@pytest.fixture
def world():
    """A world with a main quest, a side quest and a failable quest."""
    return WorldDefinition(
        id="quest-world",
        title="Quests",
        start_location="town",
        locations=[
            Location(id="town", name="Town", description="A town."),
            Location(id="forest", name="Forest", description="Trees."),
            Location(id="tower", name="Tower", description="Tall."),
        ],
        generic_items=[GenericItem(id="coin", name="Coin")],
        unique_items=[
            UniqueItem(id="map", name="Map"),
            UniqueItem(id="crown", name="Crown", location="tower"),
        ],
        quests=[
            create_quest(
                "two-flags",
                "Two Flags",
                "Set both flags.",
                objectives=[create_objective("a", "First"), create_objective("b", "Second")],
                initial_status=QuestStatus.ACTIVE,
                score_reward=10,
            ),
            create_quest(
                "either",
                "Either",
                "Set either flag.",
                objectives=[create_objective("x", "X"), create_objective("y", "Y")],
                initial_status=QuestStatus.ACTIVE,
                require_all_objectives=False,
            ),
            create_quest(
                "explore",
                "Explore",
                "Go to the forest.",
                objectives=[
                    create_objective("reach", "Reach the forest", completion=AtLocationCondition(location_id="forest")),
                    create_objective("bonus", "Find a coin", required=False, completion=has_item("coin")),
                ],
                start_trigger=VisitedCondition(location_id="town"),
                score_reward=5,
                item_rewards=[ItemReward(item_id="map"), ItemReward(item_id="coin", quantity=3)],
                start_message="Go explore!",
            ),
            create_quest(
                "crown",
                "The Crown",
                "Take the crown.",
                objectives=[],
                is_main_quest=True,
                initial_status=QuestStatus.ACTIVE,
                completion_condition=has_item("crown"),
                failure_condition=flag_set("crown-destroyed"),
                score_reward=100,
            ),
        ],
    )


@pytest.fixture
def state(world):
    return GameState.from_world(world)


@pytest.fixture
def ctx(world, state):
    return PlayContext(world=world, state=state, player_id="player-1")


@pytest.fixture
def quests():
    return QuestService(evaluator=ConditionEvaluator())


class TestTriggers:
    """Tests for quest activation."""

    def test_trigger_activates(self, quests, ctx, state):
        """An inactive quest whose trigger holds becomes active."""
        results = quests.check_triggers(ctx)
        assert [r.quest_id for r in results] == ["explore"]
        assert results[0].message == "Go explore!"
        assert results[0].previous_status == QuestStatus.INACTIVE
        assert state.quest_status("explore") == QuestStatus.ACTIVE

    def test_trigger_idempotent(self, quests, ctx):
        """Once active, the trigger never fires again."""
        quests.check_triggers(ctx)
        assert quests.check_triggers(ctx) == []

    def test_activate_only_inactive(self, quests, ctx):
        """activate_quest ignores quests that are already active."""
        assert quests.activate_quest(ctx, "two-flags") is None


class TestCompletion:
    """Tests for objective policies and completion."""

    def test_require_all_needs_both(self, quests, ctx, state):
        """A require-all quest with two objectives completes only when both flags are set."""
        quest = ctx.world.get_quest("two-flags")

        assert not quests.is_quest_complete(ctx, quest)
        quests.complete_objective(ctx, "two-flags", "a")
        assert not quests.is_quest_complete(ctx, quest)
        assert quests.check_completion(ctx) == []

        state.set_flag("quest-two-flags-objective-b", True)
        assert quests.is_quest_complete(ctx, quest)

        results = [r for r in quests.check_completion(ctx) if r.quest_id == "two-flags"]
        assert len(results) == 1
        assert state.quest_status("two-flags") == QuestStatus.COMPLETED
        assert state.get_player().score == 10

    def test_any_policy(self, quests, ctx, state):
        """An any-policy quest completes on the first objective."""
        quests.complete_objective(ctx, "either", "y")
        quests.check_completion(ctx)
        assert state.quest_status("either") == QuestStatus.COMPLETED

    def test_optional_objectives_ignored(self, quests, ctx, state):
        """Optional objectives don't block require-all completion."""
        quests.check_triggers(ctx)
        state.move_player("forest")

        report = quests.evaluate(ctx)

        assert "quest-explore-objective-reach" in report.objectives_completed
        assert state.quest_status("explore") == QuestStatus.COMPLETED

    def test_item_rewards_to_acting_player(self, quests, ctx, state):
        """Completion rewards go to the acting player."""
        state.add_player("player-2", "Bob", "town")
        quests.check_triggers(ctx)
        state.move_player("forest", "player-2")

        quests.evaluate(ctx.for_player("player-2"))

        assert state.has_item("map", "player-2")
        assert state.quantity_at(inventory_key("player-2"), "coin") == 3
        assert state.get_player("player-2").score == 5
        assert state.get_player("player-1").score == 0

    def test_completion_condition(self, quests, ctx, state):
        """A completion condition decides on its own and a main quest ends the game."""
        state.move_item("crown", inventory_key("player-1"))
        report = quests.evaluate(ctx)

        crown = [t for t in report.transitions if t.quest_id == "crown"]
        assert crown[0].status == QuestStatus.COMPLETED
        assert crown[0].ends_game
        assert report.game_complete
        assert report.narrative is not None

    def test_no_objectives_never_complete(self, quests, ctx, world, state):
        """Quests without objectives or completion condition don't complete."""
        quest = create_quest("empty", "Empty", "Nothing.", objectives=[])
        state.set_quest_status("empty", QuestStatus.ACTIVE)
        assert not quests.is_quest_complete(ctx, quest)

    def test_complete_unknown_objective(self, quests, ctx):
        """Unknown objectives can't be completed."""
        assert quests.complete_objective(ctx, "two-flags", "zzz") is False


class TestFailure:
    """Tests for quest failure."""

    def test_failure_condition(self, quests, ctx, state):
        """A failure condition moves an active quest to failed."""
        state.set_flag("crown-destroyed")
        report = quests.evaluate(ctx)

        failed = [t for t in report.transitions if t.status == QuestStatus.FAILED]
        assert [t.quest_id for t in failed] == ["crown"]
        assert failed[0].message == "Quest failed: The Crown"
        assert not report.game_complete

    def test_terminal_is_final(self, quests, ctx, state):
        """Completed or failed quests don't change again."""
        quests.fail_quest(ctx, "crown")
        assert quests.fail_quest(ctx, "crown") is None

        state.move_item("crown", inventory_key("player-1"))
        quests.evaluate(ctx)
        assert state.quest_status("crown") == QuestStatus.FAILED


class TestJournal:
    """Tests for the QUEST journal text."""

    def test_journal_lists_active(self, quests, ctx):
        """Active quests are listed with objective marks."""
        quests.complete_objective(ctx, "two-flags", "a")
        text = quests.journal(ctx)
        assert text.startswith("Active quests:")
        assert "    [x] First" in text
        assert "    [ ] Second" in text
        assert "The Crown (main quest)" in text

    def test_journal_sections(self, quests, ctx, state):
        """Completed and failed quests get their own sections."""
        state.set_quest_status("two-flags", QuestStatus.COMPLETED)
        state.set_quest_status("crown", QuestStatus.FAILED)
        text = quests.journal(ctx)
        assert "Completed quests:\n  Two Flags" in text
        assert "Failed quests:\n  The Crown" in text

    def test_journal_empty(self, quests, ctx, state):
        """No discovered quests gives a fixed message."""
        for quest_id in ("two-flags", "either", "crown"):
            state.set_quest_status(quest_id, QuestStatus.INACTIVE)
        assert quests.journal(ctx) == "You have no quests yet."
