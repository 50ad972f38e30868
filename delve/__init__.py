"""
Delve - a turn-based text adventure interpreter.

Packages:
- models: World definitions, mutable game state, snapshots
- engine: Command parsing and execution
- services: Quest progression
- db: Save slot repositories
- content: Bundled worlds and the world loader
- cli: Interactive terminal REPL
"""

__version__ = "0.1.0"
