#!/usr/bin/env python3
# ABOUTME: Seeds a demo world, its locations, starting equipment and a three-member party into Redis.
# ABOUTME: Run once before starting a session; use --reset to clear the store prefix first.

"""
World Seeding Script

Creates "Ashes of Valdren", a short fantasy world with one act and three
connected locations, plus a party of three adventurers carrying starting
equipment. Records are written through GameRepository into the Redis store
configured by REDIS_URL and STORE_KEY_PREFIX.

Usage:
    uv run python scripts/seed_world.py
    uv run python scripts/seed_world.py --reset
"""

import argparse
import asyncio

from loguru import logger

from src.config.settings import get_settings
from src.models.character import ActionAttributes, BattleAttributes, Character, InventoryItem
from src.models.equipment import Equipment, EquipmentType, Rarity, UsageContext
from src.models.world import (
    Act,
    Enemy,
    Location,
    LocationContent,
    LocationItem,
    Npc,
    Quest,
    World,
)
from src.storage.repository import GameRepository
from src.storage.store import RedisStore, connect_redis
from src.utils.logging import setup_logging

WORLD_ID = "world-valdren"


def create_world() -> World:
    return World(
        id=WORLD_ID,
        name="Ashes of Valdren",
        description=(
            "The border town of Valdren rebuilt itself on the ruins of a burned abbey. "
            "Lately the bells ring at night with no one pulling the ropes."
        ),
        genre="fantasia",
        tone="Dark fairy tale with moments of warmth",
        intro_narrative=(
            "Rain falls on the slate roofs of Valdren as the party arrives, "
            "summoned by a letter sealed with black wax."
        ),
        acts=[
            Act(
                id="act-bells",
                title="The Silent Bells",
                description="Discover who rings the abbey bells",
                objective="Find the source of the night bells",
                location_ids=["loc-valdren-square", "loc-abbey-ruins", "loc-old-crypt"],
            ),
        ],
        current_act_id="act-bells",
    )


def create_locations() -> list[tuple[Location, LocationContent]]:
    square = Location(
        id="loc-valdren-square",
        world_id=WORLD_ID,
        name="Valdren Square",
        kind="town",
        description="A muddy market square ringed by timber houses and a leaning well.",
        connected_location_ids=["loc-abbey-ruins"],
    )
    abbey = Location(
        id="loc-abbey-ruins",
        world_id=WORLD_ID,
        name="Abbey Ruins",
        kind="ruins",
        description="Blackened walls and a bell tower that somehow survived the fire.",
        connected_location_ids=["loc-valdren-square", "loc-old-crypt"],
    )
    crypt = Location(
        id="loc-old-crypt",
        world_id=WORLD_ID,
        name="Old Crypt",
        kind="dungeon",
        description="Narrow stairs lead below the abbey into cold, dripping dark.",
        connected_location_ids=["loc-abbey-ruins"],
    )

    return [
        (
            square,
            LocationContent(
                id=square.id,
                location_id=square.id,
                npcs=[
                    Npc(name="Mayor Hedda", role="mayor", description="Tired, stubborn, afraid"),
                    Npc(name="Brother Aldo", role="hermit", description="Last monk of the abbey"),
                ],
                quests=[
                    Quest(
                        id="quest-letter",
                        title="The Black Seal",
                        description="Learn who sent the letter",
                    ),
                ],
                items=[
                    LocationItem(name="Lantern Oil", type=EquipmentType.MATERIAL),
                    LocationItem(name="Healing Draught", type=EquipmentType.POCAO),
                ],
            ),
        ),
        (
            abbey,
            LocationContent(
                id=abbey.id,
                location_id=abbey.id,
                enemies=[Enemy(name="Ash Wraith", level=2, description="Smoke given hunger")],
                dangers=["Collapsing floor", "Falling bell"],
                items=[
                    LocationItem(
                        name="Scorched Reliquary",
                        type=EquipmentType.TESOURO,
                        rarity=Rarity.INCOMUM,
                    ),
                    LocationItem(name="Bell Rope Fiber", type=EquipmentType.MATERIAL),
                ],
            ),
        ),
        (
            crypt,
            LocationContent(
                id=crypt.id,
                location_id=crypt.id,
                enemies=[Enemy(name="Crypt Warden", level=3, description="Armor with no body")],
                dangers=["Flooded passages"],
                items=[LocationItem(name="Abbot's Signet", type=EquipmentType.ANEL)],
            ),
        ),
    ]


def create_equipment() -> list[Equipment]:
    return [
        Equipment(
            id="eq-longsword",
            name="Longsword",
            type=EquipmentType.ARMA,
            rarity=Rarity.COMUM,
            bonus={"forca": 1},
            sell_price=15,
            equippable=True,
        ),
        Equipment(
            id="eq-leather-armor",
            name="Leather Armor",
            type=EquipmentType.ARMADURA,
            rarity=Rarity.COMUM,
            sell_price=10,
            equippable=True,
        ),
        Equipment(
            id="eq-focus-tonic",
            name="Focus Tonic",
            description="Bitter herbs that sharpen the senses",
            type=EquipmentType.POCAO,
            rarity=Rarity.COMUM,
            bonus={"percepcao": 2},
            difficulty_reduction=2,
            sell_price=8,
            consumable=True,
            stackable=True,
            usage_context=UsageContext.PRE_ACAO,
        ),
        Equipment(
            id="eq-silver-charm",
            name="Silver Charm",
            type=EquipmentType.AMULETO,
            rarity=Rarity.INCOMUM,
            bonus={"vontade": 1},
            sell_price=25,
            equippable=True,
        ),
    ]


def create_party() -> list[Character]:
    return [
        Character(
            id="char-mira",
            world_id=WORLD_ID,
            name="Mira",
            archetype="Ranger",
            action_attributes=ActionAttributes(agilidade=3, percepcao=3, forca=2),
            battle_attributes=BattleAttributes(ataque=3, defesa=2, velocidade=3),
            gold=12,
            inventory=[
                InventoryItem(id="inv-mira-tonic", equipment_id="eq-focus-tonic", quantity=2),
                InventoryItem(id="inv-mira-armor", equipment_id="eq-leather-armor", quantity=1),
            ],
        ),
        Character(
            id="char-tobias",
            world_id=WORLD_ID,
            name="Tobias",
            archetype="Knight",
            action_attributes=ActionAttributes(forca=3, vontade=3),
            battle_attributes=BattleAttributes(ataque=3, defesa=3, velocidade=1),
            hp=28,
            max_hp=28,
            gold=20,
            inventory=[
                InventoryItem(id="inv-tobias-sword", equipment_id="eq-longsword", quantity=1),
            ],
        ),
        Character(
            id="char-selene",
            world_id=WORLD_ID,
            name="Selene",
            archetype="Scholar",
            action_attributes=ActionAttributes(intelecto=3, carisma=2, vontade=2),
            battle_attributes=BattleAttributes(magia=3),
            gold=5,
            inventory=[
                InventoryItem(id="inv-selene-charm", equipment_id="eq-silver-charm", quantity=1),
            ],
        ),
    ]


async def seed(reset: bool) -> None:
    settings = get_settings()
    setup_logging(log_level=settings.log_level, log_dir=settings.log_dir)

    redis_client = await connect_redis(settings.redis_url)
    store = RedisStore(redis_client, settings.store_key_prefix)
    try:
        if reset:
            await store.clear()

        repository = GameRepository(store)
        await repository.save_world(create_world())
        for location, content in create_locations():
            await repository.save_location(location)
            await repository.save_location_content(content)
        for equipment in create_equipment():
            await repository.save_equipment(equipment)
        for character in create_party():
            await repository.save_character(character)
    finally:
        await redis_client.aclose()

    logger.info(f"Seeded world {WORLD_ID} under prefix '{settings.store_key_prefix}'")


def main() -> None:
    """Main entry point"""
    parser = argparse.ArgumentParser(description="Seed the demo world into Redis")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete every key under the store prefix before seeding",
    )
    args = parser.parse_args()

    asyncio.run(seed(args.reset))

    print("\n" + "=" * 60)
    print("World seeding complete")
    print("=" * 60)
    print(f"\nWorld: {WORLD_ID}")
    print("Start location: loc-valdren-square")
    print("Party: char-mira, char-tobias, char-selene")
    print()


if __name__ == "__main__":
    main()
