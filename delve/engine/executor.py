"""
Command Execution for Delve.

One handler per canonical verb. Each handler reads the world definition,
reads and mutates the game state through a PlayContext, and returns the
narrative text. Whether the command consumes a turn depends only on the
verb: informational verbs never do, every other verb does even when the
attempt fails.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from delve.engine.conditions import ConditionEvaluator
from delve.engine.context import PlayContext
from delve.engine.models import ALL, ActionResult, ParsedCommand, Verb, consumes_turn
from delve.engine.narration import DARKNESS_TEXT, Narrator
from delve.engine.resolver import ObjectResolver, matches_name
from delve.models import Exit, GenericItem, StateInvariantError, UniqueItem

if TYPE_CHECKING:
    from delve.services.quest import QuestService

logger = logging.getLogger(__name__)

Handler = Callable[[ParsedCommand, PlayContext], str]

# Words that refer to the current location when examined
LOCATION_WORDS = frozenset({"room", "here", "around", "surroundings"})


def _there_are_only(item: GenericItem, quantity: int, where: str) -> str:
    verb = "is" if quantity == 1 else "are"
    return f"There {verb} only {item.counted(quantity)} {where}."


class CommandExecutor:
    """
    Executes parsed commands against the state of one session.

    Handlers return a specific sentence for every precondition failure
    and leave the state untouched in that case.
    """

    def __init__(
        self,
        evaluator: ConditionEvaluator,
        resolver: ObjectResolver,
        narrator: Narrator,
        quests: QuestService | None = None,
    ) -> None:
        self.evaluator = evaluator
        self.resolver = resolver
        self.narrator = narrator
        self.quests = quests

        self._handlers: dict[Verb, Handler] = {
            Verb.LOOK: self._look,
            Verb.GO: self._go,
            Verb.TAKE: self._take,
            Verb.DROP: self._drop,
            Verb.PUT: self._put,
            Verb.INVENTORY: self._inventory,
            Verb.EXAMINE: self._examine,
            Verb.OPEN: self._open,
            Verb.CLOSE: self._close,
            Verb.LOCK: self._lock,
            Verb.UNLOCK: self._unlock,
            Verb.USE: self._use,
            Verb.QUEST: self._quest,
            Verb.SCORE: self._score,
            Verb.HELP: self._help,
        }

    def execute(self, command: ParsedCommand, ctx: PlayContext) -> ActionResult:
        """
        Execute a command for the acting player.

        Raises:
            StateInvariantError: The acting player or their location is missing
        """
        location = ctx.location
        logger.debug("%s at %s: %s", ctx.player_id, location.id, command.verb.value)

        handler = self._handlers.get(command.verb)
        if handler is None:
            text = f"I don't know how to {command.verb.value}."
        else:
            text = handler(command, ctx)

        return ActionResult(text=text, consumes_turn=consumes_turn(command.verb))

    # =========================================================================
    # Informational
    # =========================================================================

    def _look(self, cmd: ParsedCommand, ctx: PlayContext) -> str:
        if cmd.direct_object:
            return self._examine(cmd, ctx)
        return self.narrator.describe_location(ctx)

    def _inventory(self, cmd: ParsedCommand, ctx: PlayContext) -> str:
        return self.narrator.describe_inventory(ctx)

    def _examine(self, cmd: ParsedCommand, ctx: PlayContext) -> str:
        name = cmd.direct_object
        if not name:
            return "Examine what?"

        item = self.resolver.find_unique(ctx, name)
        if item is not None:
            if item.is_container:
                return "\n".join([item.examine(), *self._container_status(ctx, item)])
            return item.examine()

        match = self.resolver.find_stack(ctx, name)
        if match is not None:
            return match.item.examine()

        location = ctx.location
        if name in LOCATION_WORDS or matches_name(location.name, name):
            if not self.evaluator.has_light(ctx):
                return DARKNESS_TEXT
            return location.examine_text or location.description

        return "I don't see that here."

    def _container_status(self, ctx: PlayContext, container: UniqueItem) -> list[str]:
        if ctx.state.is_container_locked(container.id):
            return ["It is locked."]
        if not ctx.state.is_container_open(container.id):
            return ["It is closed."]
        contents = self.narrator.describe_contents(ctx, container)
        if not contents:
            return ["It is open and empty."]
        return ["It is open. Inside you see:", *contents]

    def _quest(self, cmd: ParsedCommand, ctx: PlayContext) -> str:
        if self.quests is None:
            return "You have no quests."
        return self.quests.journal(ctx)

    def _score(self, cmd: ParsedCommand, ctx: PlayContext) -> str:
        return self.narrator.describe_score(ctx)

    def _help(self, cmd: ParsedCommand, ctx: PlayContext) -> str:
        return self.narrator.help_text()

    # =========================================================================
    # Movement
    # =========================================================================

    def _go(self, cmd: ParsedCommand, ctx: PlayContext) -> str:
        if not cmd.direct_object:
            return "Go where?"

        direction = cmd.direct_object.lower()
        location = ctx.location
        exits = self.evaluator.visible_exits(ctx)

        exit_ = next((e for e in exits if e.direction.lower() == direction), None)
        if exit_ is None:
            exit_ = next((e for e in exits if e.direction.lower().startswith(direction)), None)
        if exit_ is None:
            return f"You can't go {cmd.direct_object} from here."

        preface = ""
        if ctx.state.is_exit_locked(location.id, exit_.direction):
            key_id = exit_.required_item
            if key_id is None or not self.evaluator.player_has_item(ctx, ctx.player_id, key_id):
                return exit_.locked_message or "That way is locked."
            ctx.state.set_exit_locked(location.id, exit_.direction, False)
            preface = f"You unlock the way {exit_.direction} with the {self._item_name(ctx, key_id)}.\n\n"

        if ctx.world.get_location(exit_.leads_to) is None:
            raise StateInvariantError(
                f"Exit {exit_.direction} from '{location.id}' leads to unknown location '{exit_.leads_to}'."
            )

        ctx.state.move_player(exit_.leads_to, ctx.player_id)
        return preface + self.narrator.describe_location(ctx)

    # =========================================================================
    # Taking and Dropping
    # =========================================================================

    def _requested_quantity(
        self,
        requested: int | str | None,
        available: int,
        shortage: str,
    ) -> tuple[int, str | None]:
        """
        Resolve a requested quantity against what is available.

        Unspecified means ALL. Asking for more than is available is an
        error (the `shortage` text) rather than a silent cap.
        """
        if requested is None or requested == ALL:
            return available, None
        assert isinstance(requested, int)
        if requested <= 0:
            return 0, "You need to name a quantity of at least one."
        if requested > available:
            return 0, shortage
        return requested, None

    def _take(self, cmd: ParsedCommand, ctx: PlayContext) -> str:
        if cmd.indirect_object and cmd.preposition:
            return self._take_from_container(cmd, ctx)

        name = cmd.direct_object
        if not name:
            if cmd.wants_all:
                return self._take_all(ctx)
            return "Take what?"

        item = self.resolver.unique_at_location(ctx, name)
        if item is not None:
            if not item.can_take:
                return item.cant_take_message()
            ctx.state.move_item(item.id, ctx.inventory)
            return item.take_message()

        match = self.resolver.stack_at_location(ctx, name)
        if match is not None:
            quantity, error = self._requested_quantity(
                cmd.quantity,
                match.quantity,
                _there_are_only(match.item, match.quantity, "here"),
            )
            if error:
                return error
            ctx.state.transfer_stack(match.place, ctx.inventory, match.item.id, quantity)
            return f"You take {match.item.describe(quantity)}."

        if self.resolver.unique_in_inventory(ctx, name) is not None:
            return "You already have that."
        return "I don't see that here."

    def _take_all(self, ctx: PlayContext) -> str:
        lines = []
        for item in self.resolver.visible_items_at(ctx):
            if item.can_take:
                ctx.state.move_item(item.id, ctx.inventory)
                lines.append(item.take_message())

        for entry in list(ctx.state.stacks_at(ctx.location_id)):
            generic = ctx.world.get_generic_item(entry.item_id)
            if generic is None:
                continue
            quantity = entry.quantity
            ctx.state.transfer_stack(ctx.location_id, ctx.inventory, generic.id, quantity)
            lines.append(f"You take {generic.describe(quantity)}.")

        if not lines:
            return "There is nothing here to take."
        return "\n".join(lines)

    def _take_from_container(self, cmd: ParsedCommand, ctx: PlayContext) -> str:
        container_name = cmd.indirect_object or ""
        container = self.resolver.find_unique(ctx, container_name)
        if container is None:
            return f"I don't see {container_name} here."
        if not container.is_container:
            return f"The {container.name} is not a container."
        if not ctx.state.is_container_open(container.id):
            return container.closed_text()

        name = cmd.direct_object
        if not name:
            if not cmd.wants_all:
                return "Take what?"
            lines = []
            for entry in list(ctx.state.stacks_at(container.id)):
                generic = ctx.world.get_generic_item(entry.item_id)
                if generic is None:
                    continue
                quantity = entry.quantity
                ctx.state.transfer_stack(container.id, ctx.inventory, generic.id, quantity)
                lines.append(f"You take {generic.describe(quantity)} from the {container.name}.")
            if not lines:
                return f"The {container.name} is empty."
            return "\n".join(lines)

        match = self.resolver.stack_at(ctx, container.id, name)
        if match is None:
            return f"There's no {name} in the {container.name}."

        quantity, error = self._requested_quantity(
            cmd.quantity,
            match.quantity,
            _there_are_only(match.item, match.quantity, f"in the {container.name}"),
        )
        if error:
            return error

        ctx.state.transfer_stack(container.id, ctx.inventory, match.item.id, quantity)
        return f"You take {match.item.describe(quantity)} from the {container.name}."

    def _drop(self, cmd: ParsedCommand, ctx: PlayContext) -> str:
        name = cmd.direct_object
        if not name:
            if cmd.wants_all:
                return self._drop_all(ctx)
            return "Drop what?"

        item = self.resolver.unique_in_inventory(ctx, name)
        if item is not None:
            ctx.state.move_item(item.id, ctx.location_id)
            return item.drop_message()

        match = self.resolver.stack_in_inventory(ctx, name)
        if match is not None:
            quantity, error = self._requested_quantity(
                cmd.quantity,
                match.quantity,
                f"You only have {match.item.counted(match.quantity)}.",
            )
            if error:
                return error
            ctx.state.transfer_stack(ctx.inventory, ctx.location_id, match.item.id, quantity)
            return f"You drop {match.item.describe(quantity)}."

        return "You don't have that."

    def _drop_all(self, ctx: PlayContext) -> str:
        lines = []
        for item in self.resolver.inventory_items(ctx):
            ctx.state.move_item(item.id, ctx.location_id)
            lines.append(item.drop_message())

        for entry in list(ctx.state.stacks_at(ctx.inventory)):
            generic = ctx.world.get_generic_item(entry.item_id)
            if generic is None:
                continue
            quantity = entry.quantity
            ctx.state.transfer_stack(ctx.inventory, ctx.location_id, generic.id, quantity)
            lines.append(f"You drop {generic.describe(quantity)}.")

        if not lines:
            return "You aren't carrying anything."
        return "\n".join(lines)

    def _put(self, cmd: ParsedCommand, ctx: PlayContext) -> str:
        if not cmd.direct_object or not cmd.indirect_object:
            return "Put what where?"

        container = self.resolver.find_unique(ctx, cmd.indirect_object)
        if container is None:
            return f"I don't see {cmd.indirect_object} here."
        if not container.is_container:
            return f"You can't put things in the {container.name}."
        if not ctx.state.is_container_open(container.id):
            if ctx.state.is_container_locked(container.id):
                return container.locked_text()
            return container.closed_text()

        item = self.resolver.unique_in_inventory(ctx, cmd.direct_object)
        if item is not None:
            if item.id == container.id:
                return f"You can't put the {item.name} inside itself."
            return f"The {item.name} won't fit in the {container.name}."

        match = self.resolver.stack_in_inventory(ctx, cmd.direct_object)
        if match is None:
            return "You don't have that."

        quantity, error = self._requested_quantity(
            cmd.quantity,
            match.quantity,
            f"You only have {match.item.counted(match.quantity)}.",
        )
        if error:
            return error

        if container.capacity is not None:
            room = container.capacity - ctx.state.total_quantity(container.id)
            if room <= 0:
                return f"The {container.name} is full."
            if quantity > room:
                return f"The {container.name} only has room for {room} more."

        ctx.state.transfer_stack(ctx.inventory, container.id, match.item.id, quantity)
        return f"You put {match.item.describe(quantity)} in the {container.name}."

    # =========================================================================
    # Containers
    # =========================================================================

    def _open(self, cmd: ParsedCommand, ctx: PlayContext) -> str:
        if not cmd.direct_object:
            return "Open what?"

        item = self.resolver.find_unique(ctx, cmd.direct_object)
        if item is None:
            return "I don't see that here."
        if not item.is_container:
            return f"You can't open the {item.name}."
        if ctx.state.is_container_locked(item.id):
            return item.locked_text()

        if ctx.state.is_container_open(item.id):
            contents = self.narrator.describe_contents(ctx, item)
            if not contents:
                return f"The {item.name} is already open and empty."
            return "\n".join([f"The {item.name} is already open.", "Inside you see:", *contents])

        ctx.state.open_container(item.id)
        contents = self.narrator.describe_contents(ctx, item)
        if not contents:
            return f"You open the {item.name}. It's empty."
        return "\n".join([item.open_message(), "", "Inside you see:", *contents])

    def _close(self, cmd: ParsedCommand, ctx: PlayContext) -> str:
        if not cmd.direct_object:
            return "Close what?"

        item = self.resolver.find_unique(ctx, cmd.direct_object)
        if item is None:
            return "I don't see that here."
        if not item.is_container:
            return f"You can't close the {item.name}."
        if not ctx.state.is_container_open(item.id):
            return f"The {item.name} is already closed."

        ctx.state.close_container(item.id)
        return f"You close the {item.name}."

    # =========================================================================
    # Locks
    # =========================================================================

    def _lock(self, cmd: ParsedCommand, ctx: PlayContext) -> str:
        return self._set_lock(cmd, ctx, locking=True)

    def _unlock(self, cmd: ParsedCommand, ctx: PlayContext) -> str:
        return self._set_lock(cmd, ctx, locking=False)

    def _set_lock(self, cmd: ParsedCommand, ctx: PlayContext, locking: bool) -> str:
        """Shared LOCK/UNLOCK logic for containers and lockable exits."""
        action = "lock" if locking else "unlock"
        if not cmd.direct_object:
            return f"{action.capitalize()} what?"

        exit_ = self._find_lockable_exit(ctx, cmd.direct_object)
        if exit_ is not None:
            return self._set_exit_lock(cmd, ctx, exit_, locking)

        item = self.resolver.find_unique(ctx, cmd.direct_object)
        if item is None:
            return "I don't see that here."
        if not item.is_container:
            return f"You can't {action} the {item.name}."
        if ctx.state.is_container_locked(item.id) == locking:
            return f"The {item.name} is already {action}ed."
        if locking and ctx.state.is_container_open(item.id):
            return f"You need to close the {item.name} first."

        target = f"the {item.name}"
        key_name, error = self._resolve_key(ctx, item.required_key, cmd.indirect_object, target, action)
        if error:
            return error

        if locking:
            ctx.state.lock_container(item.id)
        else:
            ctx.state.unlock_container(item.id)
        return self._lock_message(action, target, key_name)

    def _find_lockable_exit(self, ctx: PlayContext, name: str) -> Exit | None:
        name = name.lower()
        for exit_ in self.evaluator.visible_exits(ctx):
            if not exit_.is_lockable:
                continue
            direction = exit_.direction.lower()
            if direction == name or (len(name) == 1 and direction.startswith(name)):
                return exit_
        return None

    def _set_exit_lock(self, cmd: ParsedCommand, ctx: PlayContext, exit_: Exit, locking: bool) -> str:
        action = "lock" if locking else "unlock"
        target = f"the way {exit_.direction}"
        location_id = ctx.location_id

        if ctx.state.is_exit_locked(location_id, exit_.direction) == locking:
            return f"The way {exit_.direction} is already {action}ed."

        key_name, error = self._resolve_key(ctx, exit_.required_item, cmd.indirect_object, target, action)
        if error:
            return error

        ctx.state.set_exit_locked(location_id, exit_.direction, locking)
        return self._lock_message(action, target, key_name)

    def _resolve_key(
        self,
        ctx: PlayContext,
        required_key: str | None,
        key_name: str | None,
        target: str,
        action: str,
    ) -> tuple[str | None, str | None]:
        """
        Pick the key for a lock.

        With an explicit "with <key>" clause, every matching inventory item
        (unique and generic) is a candidate, filtered by the required key
        when one is declared. Without a clause, the inventory is searched
        for the required key.

        Returns:
            (key display name or None, error text or None)
        """
        if key_name:
            candidates = [(item.id, item.name) for item in self.resolver.uniques_in_inventory(ctx, key_name)]
            candidates.extend(
                (match.item.id, match.item.name)
                for match in self.resolver.stacks_matching(ctx, ctx.inventory, key_name)
            )
            if not candidates:
                return None, f"You don't have {key_name}."
            if required_key is not None:
                candidates = [c for c in candidates if c[0] == required_key]
            if not candidates:
                return None, f"None of your keys fit {target}."
            return candidates[0][1], None

        if required_key is None:
            return None, None
        if self.evaluator.player_has_item(ctx, ctx.player_id, required_key):
            return self._item_name(ctx, required_key), None
        return None, f"You need a key to {action} {target}."

    def _lock_message(self, action: str, target: str, key_name: str | None) -> str:
        if key_name:
            return f"You {action} {target} with the {key_name}."
        return f"You {action} {target}."

    def _item_name(self, ctx: PlayContext, item_id: str) -> str:
        item: UniqueItem | GenericItem | None = ctx.world.get_unique_item(item_id)
        if item is None:
            item = ctx.world.get_generic_item(item_id)
        return item.name if item is not None else item_id

    # =========================================================================
    # Using Items
    # =========================================================================

    def _use(self, cmd: ParsedCommand, ctx: PlayContext) -> str:
        if not cmd.direct_object:
            return "Use what?"

        item = self.resolver.unique_in_inventory(ctx, cmd.direct_object)
        if item is None:
            return "You don't have that."
        if not item.usable:
            return f"You can't use the {item.name}."

        if cmd.indirect_object:
            target_ids = self._target_ids(ctx, cmd.indirect_object)
            if not target_ids:
                return f"I don't see {cmd.indirect_object} here."
            if item.uses_with and not target_ids.intersection(item.uses_with):
                return f"You can't use the {item.name} with that."

        for flag, value in item.use_flags.items():
            ctx.state.set_flag(flag, value)

        message = item.use_message()
        if item.consumable:
            ctx.state.remove_item(item.id)
        return message

    def _target_ids(self, ctx: PlayContext, name: str) -> set[str]:
        """Ids of everything `name` can refer to here."""
        ids: set[str] = set()
        item = self.resolver.find_unique(ctx, name)
        if item is not None:
            ids.add(item.id)
        match = self.resolver.find_stack(ctx, name)
        if match is not None:
            ids.add(match.item.id)
        location = ctx.location
        if matches_name(location.name, name):
            ids.add(location.id)
        return ids
