"""
World loading and validation for Delve.

Worlds are plain data: a JSON file or dict in the WorldDefinition shape.
Pydantic checks the shape; validate_world checks that every reference
(exit targets, item placements, keys, quest conditions) points at
something that exists.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from delve.models import (
    INVENTORY_LOCATION,
    AllCondition,
    AnyCondition,
    AtLocationCondition,
    Condition,
    HasItemCondition,
    NotCondition,
    QuestStatusCondition,
    VisitedCondition,
    WorldDefinition,
)

logger = logging.getLogger(__name__)


class WorldValidationError(ValueError):
    """A world definition failed shape or reference checks."""

    def __init__(self, issues: list[str]):
        self.issues = issues
        summary = "; ".join(issues[:5])
        if len(issues) > 5:
            summary += f" (and {len(issues) - 5} more)"
        super().__init__(f"Invalid world: {summary}")


# =============================================================================
# Validation
# =============================================================================


def _duplicates(ids: list[str]) -> list[str]:
    return sorted(i for i, n in Counter(ids).items() if n > 1)


def _walk_conditions(condition: Condition | None):
    """Yield a condition and every condition nested under it."""
    if condition is None:
        return
    yield condition
    if isinstance(condition, (AllCondition, AnyCondition)):
        for child in condition.conditions:
            yield from _walk_conditions(child)
    elif isinstance(condition, NotCondition):
        yield from _walk_conditions(condition.condition)


def _check_condition(world: WorldDefinition, condition: Condition | None, where: str) -> list[str]:
    issues = []
    for node in _walk_conditions(condition):
        if isinstance(node, HasItemCondition):
            if not (world.is_unique_item(node.item_id) or world.is_generic_item(node.item_id)):
                issues.append(f"{where}: condition references unknown item '{node.item_id}'")
        elif isinstance(node, (AtLocationCondition, VisitedCondition)):
            if world.get_location(node.location_id) is None:
                issues.append(f"{where}: condition references unknown location '{node.location_id}'")
        elif isinstance(node, QuestStatusCondition):
            if world.get_quest(node.quest_id) is None:
                issues.append(f"{where}: condition references unknown quest '{node.quest_id}'")
    return issues


def validate_world(world: WorldDefinition) -> list[str]:
    """
    Check referential integrity of a world definition.

    Args:
        world: The world to check

    Returns:
        A list of human-readable issues (empty when the world is sound)
    """
    issues: list[str] = []

    for label, ids in (
        ("location", [loc.id for loc in world.locations]),
        ("generic item", [item.id for item in world.generic_items]),
        ("unique item", [item.id for item in world.unique_items]),
        ("quest", [quest.id for quest in world.quests]),
    ):
        for dup in _duplicates(ids):
            issues.append(f"Duplicate {label} id '{dup}'")

    both = {i.id for i in world.generic_items} & {i.id for i in world.unique_items}
    for item_id in sorted(both):
        issues.append(f"Item id '{item_id}' is both unique and generic")

    if world.get_location(world.start_location) is None:
        issues.append(f"Start location '{world.start_location}' does not exist")

    for location in world.locations:
        where = f"Location '{location.id}'"
        directions = [e.direction.lower() for e in location.exits]
        for dup in _duplicates(directions):
            issues.append(f"{where}: duplicate exit '{dup}'")
        for exit_ in location.exits:
            if world.get_location(exit_.leads_to) is None:
                issues.append(f"{where}: exit '{exit_.direction}' leads to unknown location '{exit_.leads_to}'")
            if exit_.required_item and not world.is_unique_item(exit_.required_item):
                issues.append(f"{where}: exit '{exit_.direction}' requires unknown item '{exit_.required_item}'")
            issues.extend(_check_condition(world, exit_.reveal_condition, f"{where} exit '{exit_.direction}'"))
        for entry in location.stacks:
            if not world.is_generic_item(entry.item_id):
                issues.append(f"{where}: stack of unknown generic item '{entry.item_id}'")

    for item in world.unique_items:
        where = f"Item '{item.id}'"
        if item.location and item.location != INVENTORY_LOCATION:
            if world.get_location(item.location) is None:
                issues.append(f"{where}: unknown initial location '{item.location}'")
        if item.required_key and not (
            world.is_unique_item(item.required_key) or world.is_generic_item(item.required_key)
        ):
            issues.append(f"{where}: requires unknown key '{item.required_key}'")
        if not item.is_container and (item.contents or item.required_key or item.capacity):
            issues.append(f"{where}: has container fields but is not a container")
        for entry in item.contents:
            if not world.is_generic_item(entry.item_id):
                issues.append(f"{where}: contains unknown generic item '{entry.item_id}'")
        if item.capacity is not None and sum(e.quantity for e in item.contents) > item.capacity:
            issues.append(f"{where}: contents exceed capacity {item.capacity}")
        for target in item.uses_with:
            if not (world.is_unique_item(target) or world.is_generic_item(target)):
                issues.append(f"{where}: usable with unknown item '{target}'")
        issues.extend(_check_condition(world, item.visibility_condition, where))

    main_quests = [q.id for q in world.quests if q.is_main_quest]
    if len(main_quests) > 1:
        issues.append(f"More than one main quest: {', '.join(main_quests)}")

    for quest in world.quests:
        where = f"Quest '{quest.id}'"
        for dup in _duplicates([o.id for o in quest.objectives]):
            issues.append(f"{where}: duplicate objective '{dup}'")
        for reward in quest.item_rewards:
            if not (world.is_unique_item(reward.item_id) or world.is_generic_item(reward.item_id)):
                issues.append(f"{where}: rewards unknown item '{reward.item_id}'")
        issues.extend(_check_condition(world, quest.start_trigger, f"{where} start trigger"))
        issues.extend(_check_condition(world, quest.completion_condition, f"{where} completion"))
        issues.extend(_check_condition(world, quest.failure_condition, f"{where} failure"))
        for objective in quest.objectives:
            issues.extend(_check_condition(world, objective.completion, f"{where} objective '{objective.id}'"))

    return issues


# =============================================================================
# Loading
# =============================================================================


def load_world(source: str | Path | dict[str, Any]) -> WorldDefinition:
    """
    Load and validate a world definition.

    Args:
        source: Path to a JSON file, or an already-parsed dict

    Returns:
        The validated WorldDefinition

    Raises:
        WorldValidationError: If the shape or references are invalid
        FileNotFoundError: If the path does not exist
    """
    if isinstance(source, dict):
        data = source
    else:
        path = Path(source)
        logger.info("Loading world from %s", path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise WorldValidationError([f"{path}: not valid JSON ({e})"]) from e

    try:
        world = WorldDefinition.model_validate(data)
    except ValidationError as e:
        issues = [
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        raise WorldValidationError(issues) from e

    issues = validate_world(world)
    if issues:
        raise WorldValidationError(issues)

    logger.info("Loaded world %s (%d locations)", world.id, len(world.locations))
    return world
