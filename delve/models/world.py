"""
World definition models for Delve.

A WorldDefinition is built once per session and never mutated. It holds
locations, the two item taxonomies (unique items tracked individually,
generic items tracked as quantity stacks) and quest definitions.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, PrivateAttr, model_validator

from delve.models.condition import Condition
from delve.models.quest import QuestDefinition

# Initial location value meaning "in the first player's inventory"
INVENTORY_LOCATION = "inventory"


class StackEntry(BaseModel):
    """A quantity of one generic item kind at a place."""

    item_id: str
    quantity: int = Field(ge=1)


# =============================================================================
# Locations
# =============================================================================


class Exit(BaseModel):
    """A one-way connection from a location."""

    direction: str
    leads_to: str

    hidden: bool = False
    reveal_condition: Condition | None = None
    """Hidden exits become usable once this holds."""

    required_item: str | None = None
    """Item that auto-unlocks this exit when carried."""

    locked: bool | None = None
    """Initial lock state. Unset means locked exactly when required_item is set."""

    locked_message: str | None = None

    @property
    def initially_locked(self) -> bool:
        if self.locked is not None:
            return self.locked
        return self.required_item is not None

    @property
    def is_lockable(self) -> bool:
        return self.required_item is not None or self.locked is not None


class Location(BaseModel):
    """A place in the world."""

    id: str
    name: str
    description: str
    exits: list[Exit] = Field(default_factory=list)

    examine_text: str | None = None
    requires_light: bool = False
    """Dark rooms show nothing unless someone here carries a light source."""

    stacks: list[StackEntry] = Field(default_factory=list)
    """Generic items lying here at world start."""

    def get_exit(self, direction: str) -> Exit | None:
        """Get an exit by exact (case-insensitive) direction."""
        direction = direction.lower()
        for exit_ in self.exits:
            if exit_.direction.lower() == direction:
                return exit_
        return None


# =============================================================================
# Items
# =============================================================================


class UniqueItem(BaseModel):
    """
    An individually tracked object.

    Identity matters: a unique item is at exactly one place at a time and is
    never merged with another item.
    """

    id: str
    name: str
    description: str = ""
    location: str | None = None
    """Initial location id, INVENTORY_LOCATION, or None (not yet in the world)."""

    takeable: bool = True
    visible: bool = True
    usable: bool = False
    consumable: bool = False
    tags: list[str] = Field(default_factory=list)
    visibility_condition: Condition | None = None

    # Container
    is_container: bool = False
    capacity: int | None = Field(default=None, ge=1)
    required_key: str | None = None
    is_locked: bool = False
    is_closed: bool = True
    contents: list[StackEntry] = Field(default_factory=list)

    # Usage
    uses_with: list[str] = Field(default_factory=list)
    """Ids this item can be used with. Empty means it can be used anywhere."""

    use_flags: dict[str, Any] = Field(default_factory=dict)
    """Global flags set when the item is used successfully."""

    # Message templates
    examine_text: str | None = None
    take_text: str | None = None
    drop_text: str | None = None
    use_text: str | None = None
    open_text: str | None = None
    cant_take_text: str | None = None
    locked_message: str | None = None
    closed_message: str | None = None

    @property
    def can_take(self) -> bool:
        return self.takeable and self.visible

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def examine(self) -> str:
        return self.examine_text or self.description or f"You see nothing special about the {self.name}."

    def take_message(self) -> str:
        return self.take_text or f"You take the {self.name}."

    def drop_message(self) -> str:
        return self.drop_text or f"You drop the {self.name}."

    def use_message(self) -> str:
        return self.use_text or f"You use the {self.name}."

    def cant_take_message(self) -> str:
        return self.cant_take_text or f"You can't take the {self.name}."

    def open_message(self) -> str:
        return self.open_text or f"You open the {self.name}."

    def locked_text(self) -> str:
        return self.locked_message or f"The {self.name} is locked."

    def closed_text(self) -> str:
        return self.closed_message or f"The {self.name} is closed."


class GenericItem(BaseModel):
    """A fungible item kind. Quantities of it are tracked as stacks."""

    id: str
    name: str
    name_plural: str = ""
    description: str = ""
    examine_text: str | None = None

    @model_validator(mode="after")
    def default_plural(self) -> GenericItem:
        if not self.name_plural:
            self.name_plural = f"{self.name}s"
        return self

    def display_name(self, quantity: int = 1) -> str:
        return self.name if quantity == 1 else self.name_plural

    def counted(self, quantity: int) -> str:
        """Quantity plus the matching name form, always: "1 Gold Coin"."""
        return f"{quantity} {self.display_name(quantity)}"

    def describe(self, quantity: int = 1) -> str:
        """Name alone for one ("Gold Coin"), counted for more ("3 Gold Coins")."""
        return self.counted(quantity) if quantity > 1 else self.display_name(quantity)

    def examine(self) -> str:
        return self.examine_text or self.description or f"You see nothing special about the {self.name}."


# =============================================================================
# World
# =============================================================================


class WorldDefinition(BaseModel):
    """
    The immutable definition of a playable world.

    Referential integrity is checked by the loader (see
    delve.content.loader.validate_world); lookups here assume it holds.
    """

    model_config = {"frozen": True}

    id: str
    title: str
    author: str = "Unknown"
    version: str = "1.0"
    description: str = ""
    objective: str = ""
    start_location: str

    locations: list[Location] = Field(min_length=1)
    generic_items: list[GenericItem] = Field(default_factory=list)
    unique_items: list[UniqueItem] = Field(default_factory=list)
    quests: list[QuestDefinition] = Field(default_factory=list)

    _locations: dict[str, Location] = PrivateAttr(default_factory=dict)
    _generic_items: dict[str, GenericItem] = PrivateAttr(default_factory=dict)
    _unique_items: dict[str, UniqueItem] = PrivateAttr(default_factory=dict)
    _quests: dict[str, QuestDefinition] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        """Build lookup maps."""
        self._locations = {loc.id: loc for loc in self.locations}
        self._generic_items = {item.id: item for item in self.generic_items}
        self._unique_items = {item.id: item for item in self.unique_items}
        self._quests = {quest.id: quest for quest in self.quests}

    def get_location(self, location_id: str) -> Location | None:
        return self._locations.get(location_id)

    def get_unique_item(self, item_id: str) -> UniqueItem | None:
        return self._unique_items.get(item_id)

    def get_generic_item(self, item_id: str) -> GenericItem | None:
        return self._generic_items.get(item_id)

    def get_quest(self, quest_id: str) -> QuestDefinition | None:
        return self._quests.get(quest_id)

    def is_unique_item(self, item_id: str) -> bool:
        return item_id in self._unique_items

    def is_generic_item(self, item_id: str) -> bool:
        return item_id in self._generic_items

    @property
    def main_quest(self) -> QuestDefinition | None:
        for quest in self.quests:
            if quest.is_main_quest:
                return quest
        return None

    @property
    def containers(self) -> list[UniqueItem]:
        return [item for item in self.unique_items if item.is_container]
