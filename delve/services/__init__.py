"""
Services for Delve.

Services implement game rules that run alongside command execution.
"""

from delve.services.quest import QuestProgressResult, QuestService, QuestTurnReport

__all__ = [
    "QuestProgressResult",
    "QuestService",
    "QuestTurnReport",
]
