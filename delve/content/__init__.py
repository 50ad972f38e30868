"""
Content for Delve.

Bundled worlds and the loader for world definition files.
"""

from delve.content.demo_world import DEMO_WORLD_ID, create_demo_world
from delve.content.loader import WorldValidationError, load_world, validate_world

__all__ = [
    "DEMO_WORLD_ID",
    "WorldValidationError",
    "create_demo_world",
    "load_world",
    "validate_world",
]
