"""
Engine Data Models for Delve.

Defines the core data structures for the game loop:
- Verb: Canonical action identifiers
- ParsedCommand: Structured player command
- ActionResult: Outcome of executing one command
- TurnResult: Response to the player
- EngineConfig: Engine settings
"""

from __future__ import annotations

import os
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

# Quantity sentinel for "all" / "everything"
ALL = "all"


class Verb(str, Enum):
    """Canonical verbs that raw verb phrases resolve to."""

    # Movement
    GO = "go"
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"
    UP = "up"
    DOWN = "down"

    # Items
    TAKE = "take"
    DROP = "drop"
    PUT = "put"
    USE = "use"

    # Containers and locks
    OPEN = "open"
    CLOSE = "close"
    LOCK = "lock"
    UNLOCK = "unlock"

    # Informational
    LOOK = "look"
    EXAMINE = "examine"
    INVENTORY = "inventory"
    QUEST = "quest"
    SCORE = "score"
    HELP = "help"


DIRECTION_VERBS = frozenset(
    {Verb.NORTH, Verb.SOUTH, Verb.EAST, Verb.WEST, Verb.UP, Verb.DOWN}
)

# Verbs that never consume a turn. Every other verb does, even on failure.
INFORMATIONAL_VERBS = frozenset(
    {Verb.LOOK, Verb.EXAMINE, Verb.INVENTORY, Verb.QUEST, Verb.SCORE, Verb.HELP}
)


def consumes_turn(verb: Verb) -> bool:
    return verb not in INFORMATIONAL_VERBS


class ParsedCommand(BaseModel):
    """A player command after tokenizing and verb resolution."""

    verb: Verb
    quantity: int | Literal["all"] | None = None
    direct_object: str | None = None
    preposition: str | None = None
    indirect_object: str | None = None

    original_input: str = Field(default="", description="The player's raw input")

    @property
    def wants_all(self) -> bool:
        return self.quantity == ALL


class ActionResult(BaseModel):
    """Result of executing a single command."""

    text: str = Field(description="Narrative response")
    consumes_turn: bool


class TurnResult(BaseModel):
    """Result returned to the player."""

    response: str = Field(description="Plain-text response")
    consumes_turn: bool = False

    player_id: str | None = Field(default=None, description="The acting player")
    command: ParsedCommand | None = None

    quest_narrative: str | None = Field(
        default=None, description="Quest progress messages for this turn"
    )
    game_complete: bool = False

    # Error info (if any)
    error: str | None = None


class EngineConfig(BaseModel):
    """Engine configuration."""

    # Parsing
    max_input_length: int = Field(default=200, ge=1)

    # World rules
    light_tag: str = "light-source"

    # Players
    default_player_id: str = "player-1"
    default_player_name: str = "Player"
    hot_seat: bool = True
    """Rotate the active player after each turn-consuming command."""

    @classmethod
    def from_env(cls, **overrides: Any) -> EngineConfig:
        """
        Build a config with environment overrides.

        Environment variables:
            DELVE_MAX_INPUT_LENGTH: Input length limit (default: 200)
            DELVE_LIGHT_TAG: Item tag that counts as a light source
            DELVE_PLAYER_NAME: Name of the first player
            DELVE_HOT_SEAT: "0"/"false" to disable player rotation
        """
        values: dict[str, Any] = {}

        if os.getenv("DELVE_MAX_INPUT_LENGTH"):
            values["max_input_length"] = int(os.getenv("DELVE_MAX_INPUT_LENGTH", "200"))

        if os.getenv("DELVE_LIGHT_TAG"):
            values["light_tag"] = os.getenv("DELVE_LIGHT_TAG")

        if os.getenv("DELVE_PLAYER_NAME"):
            values["default_player_name"] = os.getenv("DELVE_PLAYER_NAME")

        if os.getenv("DELVE_HOT_SEAT"):
            values["hot_seat"] = os.getenv("DELVE_HOT_SEAT", "1").lower() not in ("0", "false", "no")

        values.update(overrides)
        return cls(**values)
