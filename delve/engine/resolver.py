"""
Object resolution for Delve.

Every handler that accepts an object name resolves it the same layered way:
1. A visible unique item at the player's location, then one in inventory
2. A generic item stack at the location (or container), then in inventory
"""

from __future__ import annotations

from dataclasses import dataclass

from delve.engine.conditions import ConditionEvaluator
from delve.engine.context import PlayContext
from delve.models import GenericItem, StackEntry, UniqueItem


def matches_name(name: str, search: str, name_plural: str | None = None) -> bool:
    """
    Zork-style tolerant name matching.

    Accepts, case-insensitively:
    - an exact match on the name
    - for items with a plural form: an exact plural match, or either of the
      plural and the search containing the other
    - the name containing the search
    - every search word being a prefix of some word in the name
    """
    item_name = name.lower()
    search = search.lower()

    if item_name == search:
        return True

    if name_plural:
        plural = name_plural.lower()
        if plural == search:
            return True
        if search in plural or plural in search:
            return True

    if search in item_name:
        return True

    item_words = item_name.split()
    return all(any(word.startswith(sw) for word in item_words) for sw in search.split())


@dataclass
class StackMatch:
    """A generic item stack found at a place."""

    item: GenericItem
    entry: StackEntry
    place: str

    @property
    def quantity(self) -> int:
        return self.entry.quantity


class ObjectResolver:
    """Finds unique items and generic stacks by name for the acting player."""

    def __init__(self, evaluator: ConditionEvaluator) -> None:
        self.evaluator = evaluator

    # =========================================================================
    # Unique Items
    # =========================================================================

    def visible_items_at(self, ctx: PlayContext, location_id: str | None = None) -> list[UniqueItem]:
        """Unique items at a location that pass both visibility checks."""
        if location_id is None:
            location_id = ctx.location_id
        items = []
        for item_id in ctx.state.items_at(location_id):
            item = ctx.world.get_unique_item(item_id)
            if item is not None and self.evaluator.is_item_visible(ctx, item, location_id):
                items.append(item)
        return items

    def inventory_items(self, ctx: PlayContext) -> list[UniqueItem]:
        items = []
        for item_id in ctx.state.items_at(ctx.inventory):
            item = ctx.world.get_unique_item(item_id)
            if item is not None:
                items.append(item)
        return items

    def unique_at_location(self, ctx: PlayContext, name: str) -> UniqueItem | None:
        for item in self.visible_items_at(ctx):
            if matches_name(item.name, name):
                return item
        return None

    def unique_in_inventory(self, ctx: PlayContext, name: str) -> UniqueItem | None:
        matches = self.uniques_in_inventory(ctx, name)
        return matches[0] if matches else None

    def uniques_in_inventory(self, ctx: PlayContext, name: str) -> list[UniqueItem]:
        """Every carried unique item matching `name`."""
        return [item for item in self.inventory_items(ctx) if matches_name(item.name, name)]

    def find_unique(self, ctx: PlayContext, name: str) -> UniqueItem | None:
        """Location first, then inventory."""
        return self.unique_at_location(ctx, name) or self.unique_in_inventory(ctx, name)

    # =========================================================================
    # Generic Stacks
    # =========================================================================

    def stacks_matching(self, ctx: PlayContext, place: str, name: str) -> list[StackMatch]:
        matches = []
        for entry in ctx.state.stacks_at(place):
            item = ctx.world.get_generic_item(entry.item_id)
            if item is not None and matches_name(item.name, name, item.name_plural):
                matches.append(StackMatch(item=item, entry=entry, place=place))
        return matches

    def stack_at(self, ctx: PlayContext, place: str, name: str) -> StackMatch | None:
        matches = self.stacks_matching(ctx, place, name)
        return matches[0] if matches else None

    def stack_at_location(self, ctx: PlayContext, name: str) -> StackMatch | None:
        return self.stack_at(ctx, ctx.location_id, name)

    def stack_in_inventory(self, ctx: PlayContext, name: str) -> StackMatch | None:
        return self.stack_at(ctx, ctx.inventory, name)

    def find_stack(self, ctx: PlayContext, name: str) -> StackMatch | None:
        """Location first, then inventory."""
        return self.stack_at_location(ctx, name) or self.stack_in_inventory(ctx, name)
