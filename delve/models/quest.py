"""
Quest models for Delve.

Quest definitions are immutable parts of a world. Progress lives in
GameState: the quest status map plus objective flags named
`quest-{quest_id}-objective-{objective_id}`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from delve.models.condition import Condition


class QuestStatus(str, Enum):
    """Status of a quest in the journal."""

    INACTIVE = "inactive"  # Not yet discovered
    ACTIVE = "active"  # Discovered and in progress
    COMPLETED = "completed"  # Successfully finished (terminal)
    FAILED = "failed"  # Can no longer be completed (terminal)

    @property
    def is_terminal(self) -> bool:
        return self in (QuestStatus.COMPLETED, QuestStatus.FAILED)


def objective_flag(quest_id: str, objective_id: str) -> str:
    """Name of the global flag that marks an objective as done."""
    return f"quest-{quest_id}-objective-{objective_id}"


class QuestObjective(BaseModel):
    """A single objective within a quest."""

    id: str
    description: str
    required: bool = True
    """Optional objectives don't block completion under the all-required policy."""

    completion: Condition | None = None
    """When set, the quest service marks the objective flag once this holds."""


class ItemReward(BaseModel):
    """An item granted on quest completion."""

    item_id: str
    quantity: int = Field(default=1, ge=1)
    """Only meaningful for generic items."""

    @model_validator(mode="before")
    @classmethod
    def accept_bare_id(cls, data: Any) -> Any:
        """Allow rewards written as a plain item id."""
        if isinstance(data, str):
            return {"item_id": data}
        return data


class QuestDefinition(BaseModel):
    """
    A quest that can be discovered, progressed and completed.

    Completion is decided by `completion_condition` when present, otherwise
    by the objective flags under the all-required or any policy.
    """

    id: str
    name: str
    description: str

    is_main_quest: bool = False
    """Completing the main quest ends the game."""

    initial_status: QuestStatus = QuestStatus.INACTIVE

    objectives: list[QuestObjective] = Field(default_factory=list)
    require_all_objectives: bool = True

    # Rewards
    score_reward: int = Field(default=0, ge=0)
    item_rewards: list[ItemReward] = Field(default_factory=list)

    # Triggers
    start_trigger: Condition | None = None
    completion_condition: Condition | None = None
    failure_condition: Condition | None = None

    # Messages
    start_message: str | None = None
    completion_message: str | None = None
    fail_message: str | None = None

    @model_validator(mode="after")
    def validate_initial_status(self) -> QuestDefinition:
        """Quests can only start out inactive or active."""
        if self.initial_status.is_terminal:
            raise ValueError(
                f"Quest '{self.id}' cannot start as {self.initial_status.value}"
            )
        return self

    def objective_flag(self, objective_id: str) -> str:
        return objective_flag(self.id, objective_id)

    def get_objective(self, objective_id: str) -> QuestObjective | None:
        for objective in self.objectives:
            if objective.id == objective_id:
                return objective
        return None

    def get_start_message(self) -> str:
        return self.start_message or f"Quest started: {self.name}"

    def get_completion_message(self) -> str:
        return self.completion_message or f"You have completed the quest: {self.name}!"

    def get_fail_message(self) -> str:
        return self.fail_message or f"Quest failed: {self.name}"


# =============================================================================
# Factory Functions
# =============================================================================


def create_objective(
    objective_id: str,
    description: str,
    required: bool = True,
    completion: Condition | None = None,
) -> QuestObjective:
    """Create a quest objective."""
    return QuestObjective(
        id=objective_id,
        description=description,
        required=required,
        completion=completion,
    )


def create_quest(
    quest_id: str,
    name: str,
    description: str,
    objectives: list[QuestObjective],
    is_main_quest: bool = False,
    initial_status: QuestStatus = QuestStatus.INACTIVE,
    require_all_objectives: bool = True,
    score_reward: int = 0,
    item_rewards: list[ItemReward] | None = None,
    **kwargs: Any,
) -> QuestDefinition:
    """
    Create a quest definition.

    Extra keyword arguments (triggers, message templates) are passed
    straight through to QuestDefinition.
    """
    return QuestDefinition(
        id=quest_id,
        name=name,
        description=description,
        objectives=objectives,
        is_main_quest=is_main_quest,
        initial_status=initial_status,
        require_all_objectives=require_all_objectives,
        score_reward=score_reward,
        item_rewards=item_rewards or [],
        **kwargs,
    )
