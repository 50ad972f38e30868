"""
Tests for world, quest and condition models.
"""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from delve.models import (
    AllCondition,
    Condition,
    Exit,
    FlagCondition,
    GenericItem,
    HasItemCondition,
    ItemReward,
    Location,
    NotCondition,
    QuestDefinition,
    QuestStatus,
    StackEntry,
    UniqueItem,
    WorldDefinition,
    all_of,
    create_objective,
    create_quest,
    custom,
    flag_set,
    objective_flag,
)

# =============================================================================
# World Model Tests
# =============================================================================


class TestExit:
    """Tests for Exit lock defaults."""

    def test_plain_exit_not_lockable(self):
        """An exit without a key or lock flag is never locked."""
        exit_ = Exit(direction="north", leads_to="hall")
        assert exit_.is_lockable is False
        assert exit_.initially_locked is False

    def test_required_item_implies_locked(self):
        """An exit with a required item starts locked unless told otherwise."""
        exit_ = Exit(direction="west", leads_to="shed", required_item="key")
        assert exit_.is_lockable
        assert exit_.initially_locked

    def test_explicit_lock_state(self):
        """An explicit lock flag overrides the default."""
        exit_ = Exit(direction="west", leads_to="shed", required_item="key", locked=False)
        assert exit_.is_lockable
        assert exit_.initially_locked is False


class TestLocation:
    """Tests for Location."""

    def test_get_exit_case_insensitive(self):
        """Exits are found regardless of case."""
        loc = Location(
            id="hall",
            name="Hall",
            description="A hall.",
            exits=[Exit(direction="North", leads_to="attic")],
        )
        assert loc.get_exit("north") is not None
        assert loc.get_exit("south") is None


class TestItems:
    """Tests for unique and generic items."""

    def test_generic_plural_default(self):
        """A generic item without a plural gets name + 's'."""
        item = GenericItem(id="gem", name="Gem")
        assert item.name_plural == "Gems"

    def test_generic_describe(self):
        """describe names a single item bare and counts anything more."""
        item = GenericItem(id="gold-coin", name="Gold Coin", name_plural="Gold Coins")
        assert item.describe(1) == "Gold Coin"
        assert item.counted(1) == "1 Gold Coin"
        assert item.describe(3) == "3 Gold Coins"

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_stack_needs_positive_quantity(self, quantity):
        """Stacks always hold at least one item."""
        with pytest.raises(ValidationError):
            StackEntry(item_id="gem", quantity=quantity)

    def test_unique_default_messages(self):
        """Unique items fall back to generated messages."""
        item = UniqueItem(id="key", name="Brass Key")
        assert item.take_message() == "You take the Brass Key."
        assert item.drop_message() == "You drop the Brass Key."
        assert item.cant_take_message() == "You can't take the Brass Key."
        assert item.locked_text() == "The Brass Key is locked."
        assert item.examine() == "You see nothing special about the Brass Key."

    def test_unique_custom_messages(self):
        """Message templates override the defaults."""
        item = UniqueItem(id="key", name="Key", take_text="Got it.", examine_text="Shiny.")
        assert item.take_message() == "Got it."
        assert item.examine() == "Shiny."

    def test_can_take_requires_visible(self):
        """Invisible or fixed items cannot be taken."""
        assert UniqueItem(id="a", name="A").can_take
        assert not UniqueItem(id="b", name="B", takeable=False).can_take
        assert not UniqueItem(id="c", name="C", visible=False).can_take


class TestWorldDefinition:
    """Tests for WorldDefinition lookups."""

    @pytest.fixture
    def world(self):
        return WorldDefinition(
            id="tiny",
            title="Tiny",
            start_location="hall",
            locations=[Location(id="hall", name="Hall", description="A hall.")],
            generic_items=[GenericItem(id="coin", name="Coin")],
            unique_items=[
                UniqueItem(id="box", name="Box", location="hall", is_container=True),
            ],
            quests=[
                create_quest("q1", "Side", "A side quest.", objectives=[]),
                create_quest("q2", "Main", "The main quest.", objectives=[], is_main_quest=True),
            ],
        )

    def test_lookups(self, world):
        """Lookup maps find every kind of definition."""
        assert world.get_location("hall").name == "Hall"
        assert world.get_generic_item("coin").name == "Coin"
        assert world.get_unique_item("box").name == "Box"
        assert world.get_quest("q1").name == "Side"
        assert world.get_location("missing") is None

    def test_item_kinds(self, world):
        """is_unique_item and is_generic_item separate the two taxonomies."""
        assert world.is_unique_item("box") and not world.is_generic_item("box")
        assert world.is_generic_item("coin") and not world.is_unique_item("coin")

    def test_main_quest_and_containers(self, world):
        """The main quest and containers are exposed as properties."""
        assert world.main_quest.id == "q2"
        assert [c.id for c in world.containers] == ["box"]

    def test_frozen(self, world):
        """World definitions cannot be mutated."""
        with pytest.raises(ValidationError):
            world.title = "Changed"

    def test_requires_a_location(self):
        """A world needs at least one location."""
        with pytest.raises(ValidationError):
            WorldDefinition(id="empty", title="Empty", start_location="x", locations=[])


# =============================================================================
# Quest Model Tests
# =============================================================================


class TestQuestDefinition:
    """Tests for QuestDefinition."""

    def test_objective_flag_name(self):
        """Objective flags follow the quest-{q}-objective-{o} pattern."""
        assert objective_flag("find", "key") == "quest-find-objective-key"
        quest = create_quest("find", "Find", "Find it.", objectives=[create_objective("key", "Get key")])
        assert quest.objective_flag("key") == "quest-find-objective-key"
        assert quest.get_objective("key").description == "Get key"
        assert quest.get_objective("nope") is None

    def test_default_messages(self):
        """Messages fall back to templates using the quest name."""
        quest = create_quest("q", "The Hunt", "Hunt.", objectives=[])
        assert quest.get_start_message() == "Quest started: The Hunt"
        assert quest.get_completion_message() == "You have completed the quest: The Hunt!"
        assert quest.get_fail_message() == "Quest failed: The Hunt"

    def test_terminal_initial_status_rejected(self):
        """Quests cannot start completed or failed."""
        with pytest.raises(ValidationError):
            create_quest("q", "Q", "Q.", objectives=[], initial_status=QuestStatus.COMPLETED)

    def test_item_reward_bare_id(self):
        """Rewards may be written as plain ids."""
        quest = QuestDefinition.model_validate(
            {"id": "q", "name": "Q", "description": "Q.", "item_rewards": ["gem", {"item_id": "coin", "quantity": 5}]}
        )
        assert quest.item_rewards == [ItemReward(item_id="gem"), ItemReward(item_id="coin", quantity=5)]

    def test_status_terminal(self):
        """Only completed and failed are terminal."""
        assert QuestStatus.COMPLETED.is_terminal
        assert QuestStatus.FAILED.is_terminal
        assert not QuestStatus.ACTIVE.is_terminal
        assert not QuestStatus.INACTIVE.is_terminal


# =============================================================================
# Condition Model Tests
# =============================================================================


class TestConditionModels:
    """Tests for the condition union."""

    def test_discriminated_parse(self):
        """Nested condition dicts parse into the right classes."""
        adapter = TypeAdapter(Condition)
        cond = adapter.validate_python(
            {
                "type": "all",
                "conditions": [
                    {"type": "flag", "flag": "door-open"},
                    {"type": "not", "condition": {"type": "has_item", "item_id": "key"}},
                ],
            }
        )
        assert isinstance(cond, AllCondition)
        assert isinstance(cond.conditions[0], FlagCondition)
        assert isinstance(cond.conditions[1], NotCondition)
        assert isinstance(cond.conditions[1].condition, HasItemCondition)

    def test_unknown_type_rejected(self):
        """Condition kinds outside the closed set are rejected."""
        with pytest.raises(ValidationError):
            TypeAdapter(Condition).validate_python({"type": "weather", "value": "rain"})

    def test_factories(self):
        """Factory helpers build the expected models."""
        cond = all_of(flag_set("a"), flag_set("b", value=2))
        assert isinstance(cond, AllCondition)
        assert cond.conditions[1].value == 2

    def test_custom_predicate_not_serialized(self):
        """Attached predicates are excluded from dumps."""
        cond = custom("always", lambda state, player_id: True)
        assert cond.predicate is not None
        assert "predicate" not in cond.model_dump()
