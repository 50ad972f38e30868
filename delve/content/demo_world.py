"""
Demo World for Delve.

"The Mysterious Cave": a small cave system and forest with a locked shed,
a dark tunnel that needs a light, and a locked treasure chest. Gives
players something to explore immediately and doubles as an end-to-end
fixture for tests.
"""

from __future__ import annotations

from delve.models import (
    AtLocationCondition,
    Exit,
    GenericItem,
    HasItemCondition,
    Location,
    QuestStatus,
    StackEntry,
    UniqueItem,
    VisitedCondition,
    WorldDefinition,
    all_of,
    create_objective,
    create_quest,
)

DEMO_WORLD_ID = "demo-game"
MAIN_QUEST_ID = "find-treasure"
SHED_QUEST_ID = "explore-shed"


def _locations() -> list[Location]:
    return [
        Location(
            id="cave-entrance",
            name="Cave Entrance",
            description=(
                "You are standing at the entrance of a dark, foreboding cave. The cave mouth "
                "is wide and tall, disappearing into darkness. To the north, you can see a "
                "faint light coming from deeper within. To the south is the forest you came from."
            ),
            exits=[
                Exit(direction="north", leads_to="main-chamber"),
                Exit(direction="south", leads_to="forest-path"),
            ],
        ),
        Location(
            id="main-chamber",
            name="Main Chamber",
            description=(
                "You are in a large chamber with high ceilings. Stalactites hang from above, "
                "and the sound of dripping water echoes throughout. There are passages to the "
                "north and east, and the entrance is to the south. Something glints on the "
                "ground near the center of the chamber."
            ),
            exits=[
                Exit(direction="north", leads_to="treasure-room"),
                Exit(direction="east", leads_to="dark-tunnel"),
                Exit(direction="south", leads_to="cave-entrance"),
            ],
        ),
        Location(
            id="treasure-room",
            name="Treasure Room",
            description="You've found it! A small chamber with an ornate treasure chest in the center.",
            exits=[Exit(direction="south", leads_to="main-chamber")],
        ),
        Location(
            id="dark-tunnel",
            name="Dark Tunnel",
            description=(
                "You are in a narrow, winding tunnel. The walls are damp and cold. The tunnel "
                "continues to the east, or you can go back west to the main chamber."
            ),
            requires_light=True,
            exits=[
                Exit(direction="west", leads_to="main-chamber"),
                Exit(direction="east", leads_to="dead-end"),
            ],
        ),
        Location(
            id="dead-end",
            name="Dead End",
            description=(
                "The tunnel comes to an abrupt end. The walls are solid rock with no way "
                "forward. You'll need to go back west."
            ),
            requires_light=True,
            stacks=[StackEntry(item_id="gem", quantity=3)],
            exits=[Exit(direction="west", leads_to="dark-tunnel")],
        ),
        Location(
            id="forest-path",
            name="Forest Path",
            description=(
                "You are on a winding forest path. Tall trees surround you on all sides. The "
                "path leads north back to the cave entrance, or you could head south deeper "
                "into the forest."
            ),
            exits=[
                Exit(direction="north", leads_to="cave-entrance"),
                Exit(direction="south", leads_to="forest-clearing"),
            ],
        ),
        Location(
            id="forest-clearing",
            name="Forest Clearing",
            description=(
                "You've reached a peaceful forest clearing. Sunlight streams through the "
                "canopy above, and birds chirp in the trees. A path leads north back through "
                "the forest. To the west, you notice an old wooden shed."
            ),
            exits=[
                Exit(direction="north", leads_to="forest-path"),
                Exit(
                    direction="west",
                    leads_to="old-shed",
                    required_item="rusty-key",
                    locked_message="The shed door is locked. There's a small, rusty keyhole.",
                ),
            ],
        ),
        Location(
            id="old-shed",
            name="Old Shed",
            description=(
                "You are inside a weathered wooden shed. Dust covers everything, and cobwebs "
                "hang in the corners. A small amount of light filters through gaps in the "
                "wooden walls. The door leads back east to the clearing."
            ),
            exits=[Exit(direction="east", leads_to="forest-clearing")],
        ),
    ]


def _generic_items() -> list[GenericItem]:
    return [
        GenericItem(
            id="gold-coin",
            name="Gold Coin",
            name_plural="Gold Coins",
            description="A shiny gold coin with ancient markings.",
            examine_text="The coin is old but still gleams. It has strange symbols etched on both sides.",
        ),
        GenericItem(
            id="gem",
            name="Gem",
            name_plural="Gems",
            description="A precious gemstone that sparkles in the light.",
            examine_text="The gem is perfectly cut and reflects rainbow colors.",
        ),
    ]


def _unique_items() -> list[UniqueItem]:
    return [
        UniqueItem(
            id="rusty-key",
            name="Rusty Key",
            description="A small rusty key.",
            location="main-chamber",
            examine_text="The key is heavily rusted but still functional. It looks like it might fit a simple lock.",
            take_text="You pick up the rusty key.",
        ),
        UniqueItem(
            id="iron-key",
            name="Iron Key",
            description="A heavy iron key with rust spots.",
            location="old-shed",
            examine_text="The key is old but sturdy. It looks like it might fit a large lock.",
            take_text="You pick up the iron key. It feels cold and heavy in your hand.",
        ),
        UniqueItem(
            id="treasure-chest",
            name="Treasure Chest",
            description="An ornate wooden chest bound with iron.",
            location="treasure-room",
            takeable=False,
            is_container=True,
            is_locked=True,
            is_closed=True,
            required_key="iron-key",
            contents=[
                StackEntry(item_id="gold-coin", quantity=100),
                StackEntry(item_id="gem", quantity=25),
            ],
            examine_text="The chest is beautifully carved with intricate patterns. It has a heavy iron padlock.",
            open_text="You open the chest.",
            locked_message="The chest is locked with a heavy iron padlock.",
            closed_message="The chest is closed.",
            cant_take_text="The chest is far too heavy to carry.",
        ),
        UniqueItem(
            id="rusty-lantern",
            name="Rusty Lantern",
            description="An old lantern covered in rust.",
            location="cave-entrance",
            usable=True,
            tags=["light-source"],
            use_flags={"lantern-lit": True},
            examine_text="The lantern is rusty but might still work. It has a small amount of oil left.",
            take_text="You pick up the rusty lantern.",
            use_text="You light the lantern. It flickers to life, casting a warm glow.",
        ),
    ]


def create_demo_world() -> WorldDefinition:
    """
    Create the bundled demo world.

    Returns:
        A validated-by-construction WorldDefinition
    """
    shed_quest = create_quest(
        SHED_QUEST_ID,
        name="Explore the Old Shed",
        description=(
            "There appears to be an old shed in the forest clearing. Find a way to unlock "
            "it and see what's inside."
        ),
        objectives=[
            create_objective(
                "enter-shed",
                "Enter the old shed",
                completion=AtLocationCondition(location_id="old-shed"),
            ),
        ],
        score_reward=25,
        start_trigger=VisitedCondition(location_id="forest-clearing"),
        start_message="New quest: Explore the Old Shed!\nUse QUEST to check your progress.",
        completion_message="Quest complete! You've explored the old shed and discovered what was hidden inside.",
    )

    main_quest = create_quest(
        MAIN_QUEST_ID,
        name="Find the Lost Treasure",
        description=(
            "Legend speaks of a great treasure hidden deep within these caves. Find the "
            "treasure chest and claim your reward!"
        ),
        objectives=[
            create_objective(
                "collect-treasure",
                "Take the gold and gems from the treasure chest",
                completion=all_of(
                    HasItemCondition(item_id="gold-coin", quantity=100),
                    HasItemCondition(item_id="gem", quantity=25),
                ),
            ),
        ],
        is_main_quest=True,
        initial_status=QuestStatus.ACTIVE,
        score_reward=100,
        start_message="Your quest begins: Find the Lost Treasure!\nUse QUEST to check your progress.",
        completion_message=(
            "=== QUEST COMPLETE ===\n"
            "Congratulations! You have found the lost treasure and completed your quest!\n\n"
            "Thank you for playing!"
        ),
    )

    return WorldDefinition(
        id=DEMO_WORLD_ID,
        title="The Mysterious Cave",
        author="Ignyos",
        version="1.2",
        description="Explore a mysterious cave system and find the hidden treasure",
        objective=(
            "You find yourself at the entrance of a mysterious cave. Your objective is to "
            "explore and find the hidden treasure."
        ),
        start_location="cave-entrance",
        locations=_locations(),
        generic_items=_generic_items(),
        unique_items=_unique_items(),
        quests=[shed_quest, main_quest],
    )
