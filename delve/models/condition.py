"""
Condition models for Delve.

Conditions are declarative predicates over game state. They gate hidden
exits, item visibility, quest triggers and objective completion. The set
of condition kinds is closed; the `custom` kind is the single escape hatch
that wraps an externally supplied predicate.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

# Signature: predicate(state, player_id) -> bool
StatePredicate = Callable[..., bool]


class ConditionType(str, Enum):
    """Kinds of condition understood by the evaluator."""

    FLAG = "flag"
    HAS_ITEM = "has_item"
    HAS_TAG = "has_tag"
    AT_LOCATION = "at_location"
    VISITED = "visited"
    QUEST_STATUS = "quest_status"
    ALL = "all"
    ANY = "any"
    NOT = "not"
    CUSTOM = "custom"


class Subject(str, Enum):
    """Whose inventory a tag/item condition is checked against."""

    CURRENT = "current"  # The acting player
    ANY_HERE = "any_here"  # Any player at the location being evaluated


# =============================================================================
# Leaf Conditions
# =============================================================================


class FlagCondition(BaseModel):
    """Holds when a flag is set (truthy), or equals `value` when given."""

    type: Literal["flag"] = "flag"
    flag: str
    value: Any = None
    scope: Literal["global", "player"] = "global"
    """Global flags are shared; player flags belong to the acting player."""


class HasItemCondition(BaseModel):
    """Holds when a player carries a unique item, or enough of a generic one."""

    type: Literal["has_item"] = "has_item"
    item_id: str
    quantity: int = Field(default=1, ge=1)
    who: Subject = Subject.CURRENT


class HasTagCondition(BaseModel):
    """Holds when a player carries a unique item carrying `tag`."""

    type: Literal["has_tag"] = "has_tag"
    tag: str
    who: Subject = Subject.CURRENT


class AtLocationCondition(BaseModel):
    type: Literal["at_location"] = "at_location"
    location_id: str


class VisitedCondition(BaseModel):
    type: Literal["visited"] = "visited"
    location_id: str


class QuestStatusCondition(BaseModel):
    type: Literal["quest_status"] = "quest_status"
    quest_id: str
    status: str


class CustomCondition(BaseModel):
    """
    Wraps an externally supplied pure predicate.

    The predicate is either attached directly or looked up by `name` in the
    registry handed to the engine. Attached predicates never serialize.
    """

    type: Literal["custom"] = "custom"
    name: str
    predicate: StatePredicate | None = Field(default=None, exclude=True)


# =============================================================================
# Composite Conditions
# =============================================================================


class AllCondition(BaseModel):
    type: Literal["all"] = "all"
    conditions: list[Condition] = Field(default_factory=list)


class AnyCondition(BaseModel):
    type: Literal["any"] = "any"
    conditions: list[Condition] = Field(default_factory=list)


class NotCondition(BaseModel):
    type: Literal["not"] = "not"
    condition: Condition


Condition = Annotated[
    Union[
        FlagCondition,
        HasItemCondition,
        HasTagCondition,
        AtLocationCondition,
        VisitedCondition,
        QuestStatusCondition,
        AllCondition,
        AnyCondition,
        NotCondition,
        CustomCondition,
    ],
    Field(discriminator="type"),
]

AllCondition.model_rebuild()
AnyCondition.model_rebuild()
NotCondition.model_rebuild()


# =============================================================================
# Factory Functions
# =============================================================================


def flag_set(flag: str, value: Any = None) -> FlagCondition:
    """Shorthand for a global flag condition."""
    return FlagCondition(flag=flag, value=value)


def has_item(item_id: str, quantity: int = 1, who: Subject = Subject.CURRENT) -> HasItemCondition:
    """Shorthand for an inventory condition."""
    return HasItemCondition(item_id=item_id, quantity=quantity, who=who)


def all_of(*conditions: Condition) -> AllCondition:
    return AllCondition(conditions=list(conditions))


def any_of(*conditions: Condition) -> AnyCondition:
    return AnyCondition(conditions=list(conditions))


def custom(name: str, predicate: StatePredicate | None = None) -> CustomCondition:
    """Wrap a predicate (or a registry name) as a condition."""
    return CustomCondition(name=name, predicate=predicate)
