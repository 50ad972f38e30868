"""
Quest Service for Delve.

Drives the per-quest state machine:

    inactive -> active -> completed | failed

Evaluation runs once per executed command, in this order: start triggers,
objective completion conditions, failure conditions, completion checks.
Completion rewards always go to the acting player.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from delve.models import (
    ItemReward,
    QuestDefinition,
    QuestStatus,
    StateInvariantError,
    inventory_key,
)

if TYPE_CHECKING:
    from delve.engine.conditions import ConditionEvaluator
    from delve.engine.context import PlayContext

logger = logging.getLogger(__name__)


# =============================================================================
# Result Models
# =============================================================================


class QuestProgressResult(BaseModel):
    """A single quest status transition."""

    quest_id: str
    previous_status: QuestStatus
    status: QuestStatus
    message: str = ""
    score_awarded: int = 0
    items_awarded: list[ItemReward] = Field(default_factory=list)
    ends_game: bool = False


class QuestTurnReport(BaseModel):
    """Everything that changed in the quest journal during one turn."""

    transitions: list[QuestProgressResult] = Field(default_factory=list)
    objectives_completed: list[str] = Field(default_factory=list)
    """Objective flags newly set this turn."""

    @property
    def game_complete(self) -> bool:
        return any(t.ends_game for t in self.transitions)

    @property
    def narrative(self) -> str | None:
        messages = [t.message for t in self.transitions if t.message]
        return "\n\n".join(messages) if messages else None


# =============================================================================
# Quest Service
# =============================================================================


@dataclass
class QuestService:
    """
    Evaluates quest triggers, objectives and completion against game state.

    Stateless: all progress lives in GameState (quest status map and
    objective flags), so it survives snapshot and restore.
    """

    evaluator: ConditionEvaluator

    def evaluate(self, ctx: PlayContext) -> QuestTurnReport:
        """Run one full quest pass for the acting player's turn."""
        report = QuestTurnReport()
        report.transitions.extend(self.check_triggers(ctx))
        report.objectives_completed.extend(self.update_objectives(ctx))
        report.transitions.extend(self.check_failures(ctx))
        report.transitions.extend(self.check_completion(ctx))
        return report

    # =========================================================================
    # Activation
    # =========================================================================

    def check_triggers(self, ctx: PlayContext) -> list[QuestProgressResult]:
        """
        Promote inactive quests whose start trigger holds.

        Idempotent: only inactive quests are considered, so meeting the
        trigger again later never restarts a quest.
        """
        results = []
        for quest in ctx.world.quests:
            if quest.start_trigger is None:
                continue
            if ctx.state.quest_status(quest.id) != QuestStatus.INACTIVE:
                continue
            if self.evaluator.evaluate(quest.start_trigger, ctx):
                result = self.activate_quest(ctx, quest.id)
                if result is not None:
                    results.append(result)
        return results

    def activate_quest(self, ctx: PlayContext, quest_id: str) -> QuestProgressResult | None:
        """
        Activate an inactive quest.

        Returns:
            The transition, or None if the quest was not inactive
        """
        quest = self._get_quest(ctx, quest_id)
        previous = ctx.state.quest_status(quest.id)
        if previous != QuestStatus.INACTIVE:
            return None

        ctx.state.set_quest_status(quest.id, QuestStatus.ACTIVE)
        logger.info("Quest %s activated by %s", quest.id, ctx.player_id)
        return QuestProgressResult(
            quest_id=quest.id,
            previous_status=previous,
            status=QuestStatus.ACTIVE,
            message=quest.get_start_message(),
        )

    # =========================================================================
    # Objectives
    # =========================================================================

    def update_objectives(self, ctx: PlayContext) -> list[str]:
        """Set objective flags for active quests whose objective conditions hold."""
        newly_set = []
        for quest in self._quests_with_status(ctx, QuestStatus.ACTIVE):
            for objective in quest.objectives:
                if objective.completion is None:
                    continue
                flag = quest.objective_flag(objective.id)
                if ctx.state.get_flag(flag):
                    continue
                if self.evaluator.evaluate(objective.completion, ctx):
                    ctx.state.set_flag(flag, True)
                    newly_set.append(flag)
                    logger.debug("Objective %s completed", flag)
        return newly_set

    def complete_objective(self, ctx: PlayContext, quest_id: str, objective_id: str) -> bool:
        """
        Mark an objective done by setting its flag.

        Returns:
            False if the quest has no such objective
        """
        quest = self._get_quest(ctx, quest_id)
        if quest.get_objective(objective_id) is None:
            return False
        ctx.state.set_flag(quest.objective_flag(objective_id), True)
        return True

    def is_objective_complete(self, ctx: PlayContext, quest: QuestDefinition, objective_id: str) -> bool:
        return bool(ctx.state.get_flag(quest.objective_flag(objective_id)))

    # =========================================================================
    # Completion and Failure
    # =========================================================================

    def is_quest_complete(self, ctx: PlayContext, quest: QuestDefinition) -> bool:
        """
        Check completion of an active quest.

        A custom completion condition takes precedence. Otherwise the
        objective flags decide: every required objective under the
        all-required policy, at least one objective under the any policy.
        A quest without objectives never completes through flags.
        """
        if ctx.state.quest_status(quest.id) != QuestStatus.ACTIVE:
            return False

        if quest.completion_condition is not None:
            return self.evaluator.evaluate(quest.completion_condition, ctx)

        if not quest.objectives:
            return False

        if quest.require_all_objectives:
            return all(
                self.is_objective_complete(ctx, quest, o.id)
                for o in quest.objectives
                if o.required
            )
        return any(self.is_objective_complete(ctx, quest, o.id) for o in quest.objectives)

    def check_completion(self, ctx: PlayContext) -> list[QuestProgressResult]:
        """Complete every active quest that now satisfies its policy."""
        results = []
        for quest in self._quests_with_status(ctx, QuestStatus.ACTIVE):
            if self.is_quest_complete(ctx, quest):
                results.append(self._complete(ctx, quest))
        return results

    def check_failures(self, ctx: PlayContext) -> list[QuestProgressResult]:
        results = []
        for quest in self._quests_with_status(ctx, QuestStatus.ACTIVE):
            if quest.failure_condition is None:
                continue
            if self.evaluator.evaluate(quest.failure_condition, ctx):
                result = self.fail_quest(ctx, quest.id)
                if result is not None:
                    results.append(result)
        return results

    def fail_quest(self, ctx: PlayContext, quest_id: str) -> QuestProgressResult | None:
        """
        Fail a quest that has not yet reached a terminal status.

        Returns:
            The transition, or None if the quest was already terminal
        """
        quest = self._get_quest(ctx, quest_id)
        previous = ctx.state.quest_status(quest.id)
        if previous.is_terminal:
            return None

        ctx.state.set_quest_status(quest.id, QuestStatus.FAILED)
        logger.info("Quest %s failed", quest.id)
        return QuestProgressResult(
            quest_id=quest.id,
            previous_status=previous,
            status=QuestStatus.FAILED,
            message=quest.get_fail_message(),
        )

    def _complete(self, ctx: PlayContext, quest: QuestDefinition) -> QuestProgressResult:
        score, items = self.grant_rewards(ctx, quest, player_id=ctx.player_id)
        ctx.state.set_quest_status(quest.id, QuestStatus.COMPLETED)
        logger.info("Quest %s completed by %s", quest.id, ctx.player_id)

        return QuestProgressResult(
            quest_id=quest.id,
            previous_status=QuestStatus.ACTIVE,
            status=QuestStatus.COMPLETED,
            message=quest.get_completion_message(),
            score_awarded=score,
            items_awarded=items,
            ends_game=quest.is_main_quest,
        )

    def grant_rewards(
        self,
        ctx: PlayContext,
        quest: QuestDefinition,
        player_id: str | None = None,
    ) -> tuple[int, list[ItemReward]]:
        """
        Give a quest's score and item rewards to a player.

        Args:
            ctx: Play context
            quest: The quest being rewarded
            player_id: Recipient (default: the acting player)

        Returns:
            (score awarded, items awarded)
        """
        recipient = player_id or ctx.player_id
        ctx.state.add_score(quest.score_reward, recipient)

        inventory = inventory_key(recipient)
        granted = []
        for reward in quest.item_rewards:
            if ctx.world.is_unique_item(reward.item_id):
                ctx.state.move_item(reward.item_id, inventory)
            elif ctx.world.is_generic_item(reward.item_id):
                ctx.state.add_stack(inventory, reward.item_id, reward.quantity)
            else:
                logger.warning("Quest %s rewards unknown item %s", quest.id, reward.item_id)
                continue
            granted.append(reward)

        return quest.score_reward, granted

    # =========================================================================
    # Journal
    # =========================================================================

    def journal(self, ctx: PlayContext) -> str:
        """Text for the QUEST command."""
        active = self._quests_with_status(ctx, QuestStatus.ACTIVE)
        completed = self._quests_with_status(ctx, QuestStatus.COMPLETED)
        failed = self._quests_with_status(ctx, QuestStatus.FAILED)

        if not (active or completed or failed):
            return "You have no quests yet."

        lines: list[str] = []
        if active:
            lines.append("Active quests:")
            for quest in active:
                lines.append(f"  {quest.name}{' (main quest)' if quest.is_main_quest else ''}")
                lines.append(f"    {quest.description}")
                for objective in quest.objectives:
                    mark = "x" if self.is_objective_complete(ctx, quest, objective.id) else " "
                    optional = "" if objective.required else " (optional)"
                    lines.append(f"    [{mark}] {objective.description}{optional}")

        if completed:
            if lines:
                lines.append("")
            lines.append("Completed quests:")
            lines.extend(f"  {quest.name}" for quest in completed)

        if failed:
            if lines:
                lines.append("")
            lines.append("Failed quests:")
            lines.extend(f"  {quest.name}" for quest in failed)

        return "\n".join(lines)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _get_quest(self, ctx: PlayContext, quest_id: str) -> QuestDefinition:
        quest = ctx.world.get_quest(quest_id)
        if quest is None:
            raise StateInvariantError(f"Quest '{quest_id}' not found.")
        return quest

    def _quests_with_status(self, ctx: PlayContext, status: QuestStatus) -> list[QuestDefinition]:
        return [q for q in ctx.world.quests if ctx.state.quest_status(q.id) == status]
