"""
Narration for Delve.

Template-based plain-text rendering of locations, inventories and
container contents. No markup is produced.
"""

from __future__ import annotations

from delve.engine.conditions import ConditionEvaluator
from delve.engine.context import PlayContext
from delve.engine.resolver import ObjectResolver
from delve.models import StackEntry, UniqueItem

DARKNESS_TEXT = "It is pitch dark. You can't see a thing."

HELP_TEXT = "\n".join(
    [
        "Things you can do:",
        "  LOOK (L)                      - describe your surroundings",
        "  GO <direction> / N S E W U D  - move",
        "  TAKE <item> [FROM <container>]",
        "  DROP <item>",
        "  PUT <item> IN <container>",
        "  OPEN / CLOSE <container>",
        "  LOCK / UNLOCK <thing> [WITH <key>]",
        "  USE <item> [WITH <target>]",
        "  EXAMINE (X) <thing>",
        "  INVENTORY (I), QUEST, SCORE, HELP",
        "",
        "Quantities work too: 'take 5 coins', 'drop all gems'.",
    ]
)


class Narrator:
    """Renders game state as text for the acting player."""

    def __init__(self, evaluator: ConditionEvaluator, resolver: ObjectResolver) -> None:
        self.evaluator = evaluator
        self.resolver = resolver

    def describe_location(self, ctx: PlayContext) -> str:
        """Full description of the acting player's location."""
        location = ctx.location

        # Darkness suppresses the whole description
        if not self.evaluator.has_light(ctx):
            return DARKNESS_TEXT

        lines = [location.name, location.description]

        items = self.resolver.visible_items_at(ctx)
        if items:
            lines.append("")
            lines.append("You see: " + ", ".join(item.name for item in items))

        stacks = self.describe_stacks(ctx, ctx.state.stacks_at(location.id))
        if stacks:
            if not items:
                lines.append("")
            lines.append("There are: " + ", ".join(stacks))

        others = [p.name for p in ctx.state.players_at(location.id) if p.id != ctx.player_id]
        if others:
            lines.append("Also here: " + ", ".join(others))

        exits = self.evaluator.visible_exits(ctx)
        if exits:
            lines.append("")
            lines.append("Obvious exits: " + ", ".join(e.direction for e in exits))

        return "\n".join(lines)

    def describe_stacks(self, ctx: PlayContext, entries: list[StackEntry]) -> list[str]:
        descriptions = []
        for entry in entries:
            item = ctx.world.get_generic_item(entry.item_id)
            if item is not None:
                descriptions.append(item.describe(entry.quantity))
        return descriptions

    def describe_contents(self, ctx: PlayContext, container: UniqueItem) -> list[str]:
        """Indented content lines of an open container."""
        return [f"  {text}" for text in self.describe_stacks(ctx, ctx.state.stacks_at(container.id))]

    def describe_inventory(self, ctx: PlayContext) -> str:
        items = self.resolver.inventory_items(ctx)
        stacks = self.describe_stacks(ctx, ctx.state.stacks_at(ctx.inventory))

        if not items and not stacks:
            return "You aren't carrying anything."

        lines = ["You are carrying:"]
        lines.extend(f"  {item.name}" for item in items)
        lines.extend(f"  {text}" for text in stacks)
        return "\n".join(lines)

    def describe_score(self, ctx: PlayContext) -> str:
        player = ctx.player
        moves = "move" if player.turn_count == 1 else "moves"
        return f"Your score is {player.score}, in {player.turn_count} {moves}."

    def help_text(self) -> str:
        return HELP_TEXT
