"""
Core Data Models for Delve.

These models define the world ontology (locations, items, quests,
conditions) and the mutable state of a game in progress.

- World definitions are immutable and loaded once per session
- GameState is the single mutable store, mutated one command at a time
- Snapshots are the persisted form of GameState
"""

from delve.models.condition import (
    AllCondition,
    AnyCondition,
    AtLocationCondition,
    Condition,
    ConditionType,
    CustomCondition,
    FlagCondition,
    HasItemCondition,
    HasTagCondition,
    NotCondition,
    QuestStatusCondition,
    StatePredicate,
    Subject,
    VisitedCondition,
    all_of,
    any_of,
    custom,
    flag_set,
    has_item,
)
from delve.models.quest import (
    ItemReward,
    QuestDefinition,
    QuestObjective,
    QuestStatus,
    create_objective,
    create_quest,
    objective_flag,
)
from delve.models.snapshot import (
    SNAPSHOT_VERSION,
    LegacySnapshot,
    SnapshotVersionError,
    StateSnapshot,
    restore_state,
    take_snapshot,
    upgrade_snapshot,
)
from delve.models.state import (
    ContainerState,
    ExitState,
    GameState,
    PlayerState,
    StateInvariantError,
    exit_key,
    inventory_key,
)
from delve.models.world import (
    INVENTORY_LOCATION,
    Exit,
    GenericItem,
    Location,
    StackEntry,
    UniqueItem,
    WorldDefinition,
)

__all__ = [
    # Conditions
    "AllCondition",
    "AnyCondition",
    "AtLocationCondition",
    "Condition",
    "ConditionType",
    "CustomCondition",
    "FlagCondition",
    "HasItemCondition",
    "HasTagCondition",
    "NotCondition",
    "QuestStatusCondition",
    "StatePredicate",
    "Subject",
    "VisitedCondition",
    "all_of",
    "any_of",
    "custom",
    "flag_set",
    "has_item",
    # Quests
    "ItemReward",
    "QuestDefinition",
    "QuestObjective",
    "QuestStatus",
    "create_objective",
    "create_quest",
    "objective_flag",
    # World
    "INVENTORY_LOCATION",
    "Exit",
    "GenericItem",
    "Location",
    "StackEntry",
    "UniqueItem",
    "WorldDefinition",
    # State
    "ContainerState",
    "ExitState",
    "GameState",
    "PlayerState",
    "StateInvariantError",
    "exit_key",
    "inventory_key",
    # Snapshots
    "SNAPSHOT_VERSION",
    "LegacySnapshot",
    "SnapshotVersionError",
    "StateSnapshot",
    "restore_state",
    "take_snapshot",
    "upgrade_snapshot",
]
