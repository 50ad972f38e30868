"""
Core Engine for Delve.

The engine orchestrates:
- Command parsing (verb synonyms, quantities, prepositions)
- Object resolution (unique items, then generic stacks)
- Command execution (one handler per canonical verb)
- Condition evaluation (visibility, light, quest triggers)
"""

from __future__ import annotations

from delve.engine.conditions import ConditionEvaluator
from delve.engine.context import PlayContext
from delve.engine.executor import CommandExecutor
from delve.engine.game import GameEngine
from delve.engine.models import (
    ALL,
    DIRECTION_VERBS,
    INFORMATIONAL_VERBS,
    ActionResult,
    EngineConfig,
    ParsedCommand,
    TurnResult,
    Verb,
    consumes_turn,
)
from delve.engine.narration import Narrator
from delve.engine.parser import (
    ARTICLES,
    NUMBER_WORDS,
    PREPOSITIONS,
    VERB_SYNONYMS,
    CommandParseError,
    CommandParser,
    tokenize,
)
from delve.engine.resolver import ObjectResolver, StackMatch, matches_name

__all__ = [
    # Main engine
    "GameEngine",
    "PlayContext",
    # Models
    "ALL",
    "ActionResult",
    "DIRECTION_VERBS",
    "EngineConfig",
    "INFORMATIONAL_VERBS",
    "ParsedCommand",
    "TurnResult",
    "Verb",
    "consumes_turn",
    # Parsing
    "ARTICLES",
    "CommandParseError",
    "CommandParser",
    "NUMBER_WORDS",
    "PREPOSITIONS",
    "VERB_SYNONYMS",
    "tokenize",
    # Execution
    "CommandExecutor",
    "ConditionEvaluator",
    "Narrator",
    "ObjectResolver",
    "StackMatch",
    "matches_name",
]
