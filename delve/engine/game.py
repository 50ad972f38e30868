"""
Game Engine for Delve.

The main orchestration layer that processes player turns.
Coordinates parsing, command execution and quest evaluation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from delve.engine.conditions import ConditionEvaluator
from delve.engine.context import PlayContext
from delve.engine.executor import CommandExecutor
from delve.engine.models import EngineConfig, TurnResult
from delve.engine.narration import Narrator
from delve.engine.parser import CommandParseError, CommandParser
from delve.engine.resolver import ObjectResolver
from delve.models import (
    GameState,
    PlayerState,
    QuestStatus,
    StateInvariantError,
    StatePredicate,
    StateSnapshot,
    WorldDefinition,
    restore_state,
    take_snapshot,
)
from delve.services.quest import QuestService

logger = logging.getLogger(__name__)


@dataclass
class GameEngine:
    """
    Main game engine running one session over one world.

    Coordinates:
    - Command parsing (raw text to ParsedCommand)
    - Command execution (state mutation and narrative)
    - Quest evaluation (triggers, objectives, completion)
    - Player management (join, leave, active-player rotation)
    - Snapshot and restore of the live state
    """

    world: WorldDefinition
    config: EngineConfig = field(default_factory=EngineConfig)
    predicates: dict[str, StatePredicate] = field(default_factory=dict)
    """Named predicates for `custom` conditions."""

    # Components (initialized in __post_init__)
    parser: CommandParser = field(init=False)
    evaluator: ConditionEvaluator = field(init=False)
    resolver: ObjectResolver = field(init=False)
    narrator: Narrator = field(init=False)
    quests: QuestService = field(init=False)
    executor: CommandExecutor = field(init=False)

    state: GameState = field(init=False)

    def __post_init__(self) -> None:
        """Initialize engine components and a fresh state."""
        self.parser = CommandParser(max_input_length=self.config.max_input_length)
        self.evaluator = ConditionEvaluator(light_tag=self.config.light_tag)
        self.resolver = ObjectResolver(self.evaluator)
        self.narrator = Narrator(self.evaluator, self.resolver)
        self.quests = QuestService(evaluator=self.evaluator)
        self.executor = CommandExecutor(
            evaluator=self.evaluator,
            resolver=self.resolver,
            narrator=self.narrator,
            quests=self.quests,
        )
        self.new_game()

    def new_game(self) -> None:
        """Replace the live state with the world's initial state."""
        self.state = GameState.from_world(
            self.world,
            player_id=self.config.default_player_id,
            player_name=self.config.default_player_name,
        )

    # =========================================================================
    # Context
    # =========================================================================

    def context(self, player_id: str | None = None) -> PlayContext:
        """
        Build the play context for a player (default: the active player).

        Raises:
            StateInvariantError: If there is no active player
        """
        if player_id is None:
            player_id = self.state.active_player_id
        if player_id is None:
            raise StateInvariantError("No active player.")
        return PlayContext(
            world=self.world,
            state=self.state,
            player_id=player_id,
            predicates=self.predicates,
        )

    @property
    def active_player_id(self) -> str | None:
        return self.state.active_player_id

    @property
    def game_complete(self) -> bool:
        """True once the main quest is completed."""
        main = self.world.main_quest
        return main is not None and self.state.quest_status(main.id) == QuestStatus.COMPLETED

    # =========================================================================
    # Turns
    # =========================================================================

    def start_text(self, player_id: str | None = None) -> str:
        """Title, introduction, starting location and initially active quests."""
        parts = []
        if self.world.title:
            parts.append(f"=== {self.world.title} ===")
        if self.world.description:
            parts.append(self.world.description)
        if self.world.objective:
            parts.append(self.world.objective)

        ctx = self.context(player_id)
        parts.append(self.narrator.describe_location(ctx))

        for quest in self.world.quests:
            if quest.initial_status == QuestStatus.ACTIVE and quest.start_message:
                parts.append(quest.start_message)

        return "\n\n".join(parts)

    def process_turn(self, player_input: str, player_id: str | None = None) -> TurnResult:
        """
        Process a single player command.

        This is the main game loop entry point. Parse errors never touch
        state. Invariant violations are reported in the result rather than
        raised, and the state is rolled back to where it was before the
        command, so the caller can continue the session.

        Args:
            player_input: Raw text from the player
            player_id: Acting player (default: the active player)

        Returns:
            TurnResult with the response and turn metadata
        """
        acting_id = player_id or self.state.active_player_id

        try:
            command = self.parser.parse(player_input)
        except CommandParseError as e:
            logger.debug("Rejected input %r: %s", player_input, e)
            return TurnResult(response=str(e), consumes_turn=False, player_id=acting_id)

        # A violation anywhere in the turn rolls back the executor's mutations too
        before = self.state.model_copy(deep=True)
        try:
            ctx = self.context(acting_id)
            action = self.executor.execute(command, ctx)
            report = self.quests.evaluate(ctx)
        except StateInvariantError as e:
            logger.warning("Invariant violation on %r: %s", player_input, e)
            self.state = before
            return TurnResult(
                response=f"ERROR: {e}",
                consumes_turn=False,
                player_id=acting_id,
                command=command,
                error=str(e),
            )

        if report.game_complete:
            logger.info("Main quest completed by %s", ctx.player_id)

        return TurnResult(
            response=action.text,
            consumes_turn=action.consumes_turn,
            player_id=ctx.player_id,
            command=command,
            quest_narrative=report.narrative,
            game_complete=report.game_complete,
        )

    # =========================================================================
    # Players
    # =========================================================================

    def add_player(self, player_id: str, name: str, make_active: bool = False) -> PlayerState:
        """Add a player at the world's start location."""
        player = self.state.add_player(
            player_id,
            name,
            self.world.start_location,
            make_active=make_active,
        )
        logger.info("Player %s (%s) joined", player_id, name)
        return player

    def remove_player(self, player_id: str) -> bool:
        return self.state.remove_player(player_id)

    def switch_player(self, player_id: str) -> bool:
        """Make a player active between commands."""
        return self.state.switch_player(player_id)

    def rotate_player(self) -> str | None:
        """Pass the turn to the next player."""
        return self.state.rotate_player()

    # =========================================================================
    # Persistence
    # =========================================================================

    def snapshot(self) -> StateSnapshot:
        return take_snapshot(self.state)

    def restore(self, snapshot: StateSnapshot | dict[str, Any]) -> None:
        """Replace the live state wholesale. Nothing is merged."""
        self.state = restore_state(snapshot, self.world)
        logger.info("Restored state for world %s", self.world.id)
