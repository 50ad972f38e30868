"""
Save storage for Delve.

- SaveRepository: the storage contract
- JsonFileSaveRepository: one JSON file per slot on disk
- InMemorySaveRepository: dictionary-backed, for tests
"""

from delve.db.interfaces import SaveRepository, SaveSlotInfo
from delve.db.json_file import JsonFileSaveRepository
from delve.db.memory import InMemorySaveRepository

__all__ = [
    "InMemorySaveRepository",
    "JsonFileSaveRepository",
    "SaveRepository",
    "SaveSlotInfo",
]
