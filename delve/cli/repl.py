"""
Interactive REPL for Delve.

Provides a text-based interface for playing a world, with hot-seat
rotation when several players share the terminal.
"""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field

from delve.content import create_demo_world, load_world
from delve.db import JsonFileSaveRepository, SaveRepository
from delve.engine import EngineConfig, GameEngine, TurnResult
from delve.models import WorldDefinition


@dataclass
class ReplSession:
    """Current state of the REPL session."""

    engine: GameEngine
    saves: SaveRepository
    player_names: list[str] = field(default_factory=list)
    """Names of players beyond the first, re-added on /new."""
    running: bool = True


@dataclass
class Command:
    """A special REPL command."""

    name: str
    aliases: list[str]
    description: str
    handler: Callable[[ReplSession, list[str]], str | None]


class GameREPL:
    """
    Interactive REPL for playing Delve.

    Handles user input, special commands, and game output.
    """

    def __init__(self) -> None:
        self.commands: dict[str, Command] = {}
        self._register_commands()

    def _register_commands(self) -> None:
        """Register all special commands."""
        commands = [
            Command(
                name="quit",
                aliases=["exit", "q"],
                description="Exit the game",
                handler=self._cmd_quit,
            ),
            Command(
                name="help",
                aliases=["?", "h"],
                description="Show available commands",
                handler=self._cmd_help,
            ),
            Command(
                name="save",
                aliases=[],
                description="Save the game to a slot (/save <slot>)",
                handler=self._cmd_save,
            ),
            Command(
                name="load",
                aliases=["restore"],
                description="Load a saved game (/load <slot>)",
                handler=self._cmd_load,
            ),
            Command(
                name="saves",
                aliases=["slots"],
                description="List saved games for this world",
                handler=self._cmd_saves,
            ),
            Command(
                name="players",
                aliases=["who"],
                description="List players and whose turn it is",
                handler=self._cmd_players,
            ),
            Command(
                name="switch",
                aliases=[],
                description="Hand the turn to a player (/switch <name>)",
                handler=self._cmd_switch,
            ),
            Command(
                name="new",
                aliases=["restart"],
                description="Start the world over",
                handler=self._cmd_new,
            ),
        ]

        for cmd in commands:
            self.commands[cmd.name] = cmd
            for alias in cmd.aliases:
                self.commands[alias] = cmd

    def _cmd_quit(self, session: ReplSession, args: list[str]) -> str | None:
        """Handle quit command."""
        session.running = False
        return "Farewell, adventurer!"

    def _cmd_help(self, session: ReplSession, args: list[str]) -> str | None:
        """Handle help command."""
        lines = [
            "Available Commands:",
            "-" * 40,
        ]

        # Get unique commands (no aliases)
        seen = set()
        for cmd in self.commands.values():
            if cmd.name not in seen:
                aliases = f" ({', '.join(cmd.aliases)})" if cmd.aliases else ""
                lines.append(f"  /{cmd.name}{aliases} - {cmd.description}")
                seen.add(cmd.name)

        lines.extend(
            [
                "",
                "Tips:",
                "  - Type commands in plain English",
                "  - Examples: 'go north', 'take 3 gold coins', 'unlock chest with iron key'",
                "  - Type 'help' for the full list of game verbs",
            ]
        )

        return "\n".join(lines)

    def _cmd_save(self, session: ReplSession, args: list[str]) -> str | None:
        """Handle save command."""
        if not args:
            return "Usage: /save <slot>"
        slot = args[0]
        try:
            session.saves.save(slot, session.engine.snapshot())
        except (OSError, ValueError) as e:
            return f"Could not save: {e}"
        return f"Game saved to slot '{slot}'."

    def _cmd_load(self, session: ReplSession, args: list[str]) -> str | None:
        """Handle load command."""
        if not args:
            return "Usage: /load <slot>"
        slot = args[0]
        try:
            snapshot = session.saves.load(slot)
            if snapshot is None:
                return f"No saved game in slot '{slot}'."
            session.engine.restore(snapshot)
        except (OSError, ValueError) as e:
            return f"Could not load: {e}"

        engine = session.engine
        return f"Game loaded from slot '{slot}'.\n\n" + engine.narrator.describe_location(engine.context())

    def _cmd_saves(self, session: ReplSession, args: list[str]) -> str | None:
        """Handle saves command."""
        slots = session.saves.list_slots(world_id=session.engine.world.id)
        if not slots:
            return "No saved games."

        lines = ["Saved games:", "-" * 40]
        for info in slots:
            lines.append(f"  {info.slot} ({info.saved_at:%Y-%m-%d %H:%M})")
        return "\n".join(lines)

    def _cmd_players(self, session: ReplSession, args: list[str]) -> str | None:
        """Handle players command."""
        state = session.engine.state
        lines = ["Players:", "-" * 40]
        for player in state.players.values():
            marker = "*" if player.id == state.active_player_id else " "
            location = session.engine.world.get_location(player.location or "")
            where = location.name if location else "nowhere"
            lines.append(f" {marker} {player.name} - {where} (score {player.score})")
        return "\n".join(lines)

    def _cmd_switch(self, session: ReplSession, args: list[str]) -> str | None:
        """Handle switch command."""
        if not args:
            return "Usage: /switch <name>"
        wanted = " ".join(args).lower()
        state = session.engine.state
        for player in state.players.values():
            if player.name.lower() == wanted or player.id == wanted:
                session.engine.switch_player(player.id)
                return f"--- {player.name}'s turn ---"
        return f"No player named '{' '.join(args)}'."

    def _cmd_new(self, session: ReplSession, args: list[str]) -> str | None:
        """Handle new command."""
        session.engine.new_game()
        self._add_extra_players(session)
        return session.engine.start_text()

    # =========================================================================
    # Input Processing
    # =========================================================================

    def _add_extra_players(self, session: ReplSession) -> None:
        for index, name in enumerate(session.player_names, start=2):
            session.engine.add_player(f"player-{index}", name)

    def _is_command(self, text: str) -> bool:
        """Check if input is a special command."""
        return text.startswith("/")

    def _parse_command(self, text: str) -> tuple[str, list[str]]:
        """Parse a command into name and arguments."""
        parts = text[1:].split()  # Remove leading /
        if not parts:
            return "", []
        return parts[0].lower(), parts[1:]

    def _process_input(self, text: str, session: ReplSession) -> str:
        """Process user input and return response."""
        text = text.strip()

        if not text:
            return ""

        # Handle special commands
        if self._is_command(text):
            cmd_name, args = self._parse_command(text)
            if cmd_name in self.commands:
                return self.commands[cmd_name].handler(session, args) or ""
            return f"Unknown command '/{cmd_name}'. Type /help for commands."

        engine = session.engine
        result = engine.process_turn(text)
        output = self._format_turn_result(result)

        if result.game_complete:
            session.running = False
            return output

        if result.consumes_turn and engine.config.hot_seat and len(engine.state.players) > 1:
            engine.rotate_player()
            player = engine.state.get_player()
            if player is not None:
                output += f"\n\n--- {player.name}'s turn ---"

        return output

    def _format_turn_result(self, result: TurnResult) -> str:
        """Format a turn result for display."""
        parts = [result.response]

        if result.quest_narrative:
            parts.append(result.quest_narrative)

        return "\n\n".join(parts)

    def _print_banner(self, world: WorldDefinition) -> None:
        """Print the game banner."""
        banner = r"""
  ____       _
 |  _ \  ___| |_   _____
 | | | |/ _ \ \ \ / / _ \
 | |_| |  __/ |\ V /  __/
 |____/ \___|_| \_/ \___|

    A Text Adventure Engine
"""
        print(banner)
        print(f"{world.title} by {world.author} (v{world.version})")
        print("Type /help for commands, or 'help' for game verbs.\n")

    def run(
        self,
        world: WorldDefinition,
        config: EngineConfig,
        saves: SaveRepository,
        player_names: list[str] | None = None,
    ) -> None:
        """Run the interactive REPL."""
        engine = GameEngine(world=world, config=config)
        session = ReplSession(
            engine=engine,
            saves=saves,
            player_names=list(player_names or []),
        )
        self._add_extra_players(session)

        # Print banner
        self._print_banner(world)

        print(engine.start_text())
        print()

        # Main loop
        while session.running:
            try:
                player = engine.state.get_player()
                prompt = f"[{player.name}] > " if len(engine.state.players) > 1 and player else "> "

                user_input = input(prompt).strip()

                if not user_input:
                    continue

                response = self._process_input(user_input, session)

                if response:
                    print()
                    print(response)
                    print()

            except KeyboardInterrupt:
                print("\n")
                session.running = False
            except EOFError:
                print("\n")
                session.running = False

        print("Thanks for playing!")


def run_game(
    world_path: str | None = None,
    players: list[str] | None = None,
    save_dir: str | None = None,
    hot_seat: bool = True,
) -> None:
    """
    Run a Delve game.

    Args:
        world_path: JSON world file (default: the bundled demo world)
        players: Player names; the first is the starting player
        save_dir: Directory for save files (default: DELVE_SAVE_DIR or ./saves)
        hot_seat: Rotate players after each turn-consuming command
    """
    world = load_world(world_path) if world_path else create_demo_world()

    overrides: dict = {}
    if players:
        overrides["default_player_name"] = players[0]
    if not hot_seat:
        overrides["hot_seat"] = False
    config = EngineConfig.from_env(**overrides)

    repl = GameREPL()
    repl.run(
        world=world,
        config=config,
        saves=JsonFileSaveRepository(save_dir),
        player_names=(players or [])[1:],
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Delve Text Adventure")
    parser.add_argument("--world", default=None, help="Path to a JSON world file")
    parser.add_argument(
        "--players",
        default=None,
        help="Comma-separated player names for hot-seat play",
    )
    parser.add_argument("--save-dir", default=None, help="Directory for save files")
    parser.add_argument(
        "--no-hot-seat",
        action="store_true",
        help="Do not rotate players after each turn",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=os.getenv("DELVE_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    players = [p.strip() for p in args.players.split(",") if p.strip()] if args.players else None
    run_game(
        world_path=args.world,
        players=players,
        save_dir=args.save_dir,
        hot_seat=not args.no_hot_seat,
    )


if __name__ == "__main__":
    main()
