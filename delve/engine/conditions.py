"""
Condition evaluation for Delve.

A small fixed evaluator over the closed Condition union. Conditions are
evaluated relative to a location: the acting player's by default, or the
place an item sits at when checking item visibility.
"""

from __future__ import annotations

import logging

from delve.engine.context import PlayContext
from delve.models import (
    AllCondition,
    AnyCondition,
    AtLocationCondition,
    Condition,
    CustomCondition,
    Exit,
    FlagCondition,
    HasItemCondition,
    HasTagCondition,
    NotCondition,
    PlayerState,
    QuestStatusCondition,
    StateInvariantError,
    Subject,
    UniqueItem,
    VisitedCondition,
    inventory_key,
)

logger = logging.getLogger(__name__)


class ConditionEvaluator:
    """Evaluates conditions and the light/visibility rules built on them."""

    def __init__(self, light_tag: str = "light-source") -> None:
        self.light_tag = light_tag

    def evaluate(
        self,
        condition: Condition | None,
        ctx: PlayContext,
        location_id: str | None = None,
    ) -> bool:
        """
        Evaluate a condition. A missing condition always holds.

        Args:
            condition: The condition (or None)
            ctx: Play context (world, state, acting player)
            location_id: Location that `any_here` subjects are drawn from
                (default: the acting player's location)
        """
        if condition is None:
            return True

        if location_id is None:
            location_id = ctx.location_id

        if isinstance(condition, FlagCondition):
            return self._check_flag(condition, ctx)
        elif isinstance(condition, HasItemCondition):
            return any(
                self.player_has_item(ctx, player.id, condition.item_id, condition.quantity)
                for player in self._subjects(condition.who, ctx, location_id)
            )
        elif isinstance(condition, HasTagCondition):
            return any(
                self.player_has_tag(ctx, player.id, condition.tag)
                for player in self._subjects(condition.who, ctx, location_id)
            )
        elif isinstance(condition, AtLocationCondition):
            return ctx.location_id == condition.location_id
        elif isinstance(condition, VisitedCondition):
            return ctx.player.has_visited(condition.location_id)
        elif isinstance(condition, QuestStatusCondition):
            return ctx.state.quest_status(condition.quest_id).value == condition.status
        elif isinstance(condition, AllCondition):
            return all(self.evaluate(c, ctx, location_id) for c in condition.conditions)
        elif isinstance(condition, AnyCondition):
            return any(self.evaluate(c, ctx, location_id) for c in condition.conditions)
        elif isinstance(condition, NotCondition):
            return not self.evaluate(condition.condition, ctx, location_id)
        elif isinstance(condition, CustomCondition):
            return self._check_custom(condition, ctx)

        raise StateInvariantError(f"Unsupported condition: {condition!r}")

    def _check_flag(self, condition: FlagCondition, ctx: PlayContext) -> bool:
        flags = ctx.player.flags if condition.scope == "player" else ctx.state.flags
        if condition.flag not in flags:
            return False
        if condition.value is None:
            return bool(flags[condition.flag])
        return flags[condition.flag] == condition.value

    def _check_custom(self, condition: CustomCondition, ctx: PlayContext) -> bool:
        predicate = condition.predicate or ctx.predicates.get(condition.name)
        if predicate is None:
            raise StateInvariantError(f"No predicate registered for '{condition.name}'.")
        return bool(predicate(ctx.state, ctx.player_id))

    def _subjects(self, who: Subject, ctx: PlayContext, location_id: str) -> list[PlayerState]:
        if who == Subject.ANY_HERE:
            return ctx.state.players_at(location_id)
        return [ctx.player]

    # =========================================================================
    # Inventory Checks
    # =========================================================================

    def player_has_item(
        self,
        ctx: PlayContext,
        player_id: str,
        item_id: str,
        quantity: int = 1,
    ) -> bool:
        """Unique items must be carried; generic items need `quantity` carried."""
        inventory = inventory_key(player_id)
        if ctx.world.is_unique_item(item_id):
            return ctx.state.item_location(item_id) == inventory
        return ctx.state.quantity_at(inventory, item_id) >= quantity

    def player_has_tag(self, ctx: PlayContext, player_id: str, tag: str) -> bool:
        for item_id in ctx.state.items_at(inventory_key(player_id)):
            item = ctx.world.get_unique_item(item_id)
            if item is not None and item.has_tag(tag):
                return True
        return False

    # =========================================================================
    # Light and Visibility
    # =========================================================================

    def has_light(self, ctx: PlayContext, location_id: str | None = None) -> bool:
        """A dark location is lit only if someone there carries a light source."""
        if location_id is None:
            location_id = ctx.location_id
        location = ctx.world.get_location(location_id)
        if location is None or not location.requires_light:
            return True
        return any(
            self.player_has_tag(ctx, player.id, self.light_tag)
            for player in ctx.state.players_at(location_id)
        )

    def is_item_visible(self, ctx: PlayContext, item: UniqueItem, location_id: str | None = None) -> bool:
        """Both the static flag and the visibility condition must hold."""
        if not item.visible:
            return False
        return self.evaluate(item.visibility_condition, ctx, location_id)

    def is_exit_revealed(self, ctx: PlayContext, exit_: Exit) -> bool:
        if not exit_.hidden:
            return True
        if exit_.reveal_condition is None:
            return False
        return self.evaluate(exit_.reveal_condition, ctx)

    def visible_exits(self, ctx: PlayContext) -> list[Exit]:
        return [e for e in ctx.location.exits if self.is_exit_revealed(ctx, e)]
