"""
Command Parser for Delve.

Turns a raw line of input into a ParsedCommand using fixed tables:
verb synonyms (including multi-word phrases), articles, number words and
prepositions. There is no fallback beyond these tables.
"""

from __future__ import annotations

import logging

from delve.engine.models import ALL, DIRECTION_VERBS, ParsedCommand, Verb

logger = logging.getLogger(__name__)


class CommandParseError(ValueError):
    """Input could not be turned into a command. The message is user-facing."""


# Canonical verb -> accepted phrases
VERB_SYNONYMS: dict[Verb, list[str]] = {
    Verb.LOOK: ["look", "l", "examine room", "describe", "look around"],
    Verb.GO: ["go", "walk", "run", "move", "head", "travel"],
    Verb.NORTH: ["north", "n"],
    Verb.SOUTH: ["south", "s"],
    Verb.EAST: ["east", "e"],
    Verb.WEST: ["west", "w"],
    Verb.UP: ["up", "u", "climb up"],
    Verb.DOWN: ["down", "d", "climb down"],
    Verb.TAKE: ["take", "get", "grab", "pick up", "pick", "acquire"],
    Verb.DROP: ["drop", "discard", "put down", "leave"],
    Verb.INVENTORY: ["inventory", "i", "inv", "check inventory"],
    Verb.EXAMINE: ["examine", "ex", "x", "inspect", "look at", "check", "take look at"],
    Verb.OPEN: ["open", "look inside", "look in"],
    Verb.CLOSE: ["close", "shut"],
    Verb.LOCK: ["lock"],
    Verb.UNLOCK: ["unlock"],
    Verb.USE: ["use", "employ", "activate"],
    Verb.PUT: ["put", "place", "insert"],
    Verb.QUEST: ["quest", "quests", "journal"],
    Verb.SCORE: ["score"],
    Verb.HELP: ["help"],
}

PREPOSITIONS = ("in", "into", "inside", "on", "onto", "at", "to", "from", "with", "using")

ARTICLES = frozenset({"a", "an", "the", "some", "my"})

NUMBER_WORDS: dict[str, int | str] = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "all": ALL,
    "everything": ALL,
}

# Longest verb phrase in the synonym table, in words
MAX_VERB_WORDS = 3


def tokenize(text: str) -> list[str]:
    """Lowercase, split on whitespace, drop articles."""
    return [word for word in text.lower().split() if word not in ARTICLES]


class CommandParser:
    """
    Table-driven command parser.

    Verb resolution tries the longest phrase first (three words, then two,
    then one) so multi-word verbs like "pick up" win over a bare first word.
    """

    def __init__(
        self,
        max_input_length: int = 200,
        synonyms: dict[Verb, list[str]] | None = None,
    ) -> None:
        self.max_input_length = max_input_length
        self._verb_lookup: dict[str, Verb] = {}
        for verb, phrases in (synonyms or VERB_SYNONYMS).items():
            for phrase in phrases:
                self._verb_lookup.setdefault(phrase, verb)

    def normalize_verb(self, phrase: str) -> Verb | None:
        """Map a verb phrase to its canonical verb."""
        return self._verb_lookup.get(phrase)

    def parse(self, text: str) -> ParsedCommand:
        """
        Parse a line of player input.

        Args:
            text: Raw input

        Returns:
            ParsedCommand

        Raises:
            CommandParseError: Empty, too long, or unknown verb
        """
        command = text.strip()
        if not command:
            raise CommandParseError("Please enter a command.")
        if len(command) > self.max_input_length:
            raise CommandParseError(
                f"That command is too long. Please keep it under {self.max_input_length} characters."
            )

        tokens = tokenize(command)
        if not tokens:
            raise CommandParseError("I don't understand that.")

        verb, remaining = self._match_verb(tokens)
        if verb is None:
            logger.debug("Unknown verb in input: %r", command)
            raise CommandParseError(f'I don\'t know the word "{tokens[0]}".')

        # Direction shortcuts are implicit GO commands
        if verb in DIRECTION_VERBS:
            return ParsedCommand(
                verb=Verb.GO,
                direct_object=verb.value,
                original_input=command,
            )

        return self._parse_objects(verb, remaining, command)

    def _match_verb(self, tokens: list[str]) -> tuple[Verb | None, list[str]]:
        for length in range(min(MAX_VERB_WORDS, len(tokens)), 0, -1):
            verb = self.normalize_verb(" ".join(tokens[:length]))
            if verb is not None:
                return verb, tokens[length:]
        return None, tokens

    def _parse_objects(self, verb: Verb, tokens: list[str], original: str) -> ParsedCommand:
        """Split the tokens after the verb into quantity, objects and preposition."""
        quantity: int | str | None = None
        if tokens:
            first = tokens[0]
            # ASCII only; str.isdigit also accepts superscripts like "²"
            if first.isascii() and first.isdigit():
                quantity = int(first)
                tokens = tokens[1:]
            elif first in NUMBER_WORDS:
                quantity = NUMBER_WORDS[first]
                tokens = tokens[1:]

        prep_index = next(
            (i for i, token in enumerate(tokens) if token in PREPOSITIONS),
            None,
        )

        if prep_index is None:
            direct_object = " ".join(tokens)
            preposition = None
            indirect_object = ""
        else:
            direct_object = " ".join(tokens[:prep_index])
            preposition = tokens[prep_index]
            indirect_object = " ".join(tokens[prep_index + 1 :])

        return ParsedCommand(
            verb=verb,
            quantity=quantity,
            direct_object=direct_object or None,
            preposition=preposition,
            indirect_object=indirect_object or None,
            original_input=original,
        )
