# ABOUTME: Shared pytest fixtures for unit and integration tests.
# ABOUTME: Provides world, location, party and equipment test data plus mock AI and store clients.

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from src.models.actions import ActionSubmission
from src.models.character import Character, InventoryItem
from src.models.equipment import Equipment, EquipmentType, Rarity, UsageContext
from src.models.narrative import NarrativeContext
from src.models.world import Act, Location, LocationContent, LocationItem, Npc, World
from src.orchestration.context import build_context
from src.storage.memory_store import MemoryStore
from src.storage.repository import GameRepository
from tests.factories import completion, make_character


# --- World Fixtures ---

@pytest.fixture
def world() -> World:
    return World(
        id="world-1",
        name="Ashes of Valdren",
        description="A border town haunted by night bells",
        tone="Dark fairy tale",
        acts=[
            Act(
                id="act-1",
                title="The Silent Bells",
                objective="Find who rings the bells",
                location_ids=["loc-square", "loc-abbey"],
            )
        ],
        current_act_id="act-1",
    )


@pytest.fixture
def location() -> Location:
    return Location(
        id="loc-square",
        world_id="world-1",
        name="Valdren Square",
        kind="town",
        description="A muddy market square",
        connected_location_ids=["loc-abbey"],
    )


@pytest.fixture
def other_location() -> Location:
    return Location(
        id="loc-abbey",
        world_id="world-1",
        name="Abbey Ruins",
        kind="ruins",
        connected_location_ids=["loc-square"],
    )


@pytest.fixture
def content() -> LocationContent:
    return LocationContent(
        id="loc-square",
        location_id="loc-square",
        npcs=[Npc(name="Mayor Hedda", role="mayor", description="Tired and stubborn")],
        items=[LocationItem(name="Lantern Oil", type=EquipmentType.MATERIAL)],
        dangers=["Slippery cobbles"],
    )


# --- Equipment Fixtures ---

@pytest.fixture
def focus_tonic() -> Equipment:
    """Consumable pre-action potion"""
    return Equipment(
        id="eq-tonic",
        name="Focus Tonic",
        type=EquipmentType.POCAO,
        rarity=Rarity.COMUM,
        bonus={"percepcao": 2},
        difficulty_reduction=3,
        consumable=True,
        stackable=True,
        usage_context=UsageContext.PRE_ACAO,
    )


@pytest.fixture
def longsword() -> Equipment:
    """Equippable weapon"""
    return Equipment(
        id="eq-sword",
        name="Longsword",
        type=EquipmentType.ARMA,
        rarity=Rarity.COMUM,
        bonus={"forca": 1},
        equippable=True,
    )


# --- Party Fixtures ---

@pytest.fixture
def mira() -> Character:
    return make_character(
        "char-mira",
        "Mira",
        percepcao=3,
        agilidade=3,
        inventory=[InventoryItem(id="inv-1", equipment_id="eq-tonic", quantity=2)],
    )


@pytest.fixture
def tobias() -> Character:
    return make_character(
        "char-tobias",
        "Tobias",
        forca=3,
        inventory=[InventoryItem(id="inv-2", equipment_id="eq-sword", quantity=1)],
    )


@pytest.fixture
def party(mira, tobias) -> list[Character]:
    return [mira, tobias]


@pytest.fixture
def narrative_context(world, location, content, party, focus_tonic, longsword) -> NarrativeContext:
    return build_context(world, location, content, party, equipment=[focus_tonic, longsword])


@pytest.fixture
def submissions() -> list[ActionSubmission]:
    return [
        ActionSubmission(character_id="char-mira", text="I search the well for tracks"),
        ActionSubmission(character_id="char-tobias", text="I question the mayor"),
    ]


# --- Mock Clients ---

@pytest.fixture
def mock_llm_client() -> AsyncMock:
    """Mock LLMClient; set complete.return_value or side_effect per test"""
    client = AsyncMock()
    client.complete = AsyncMock(return_value=completion({}))
    return client


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def repository(memory_store) -> GameRepository:
    return GameRepository(memory_store)


@pytest_asyncio.fixture
async def seeded_repository(repository, world, location, other_location, content, party,
                            focus_tonic, longsword) -> GameRepository:
    """Repository pre-loaded with the fixture world, party and equipment"""
    await repository.save_world(world)
    await repository.save_location(location)
    await repository.save_location(other_location)
    await repository.save_location_content(content)
    for member in party:
        await repository.save_character(member)
    await repository.save_equipment(focus_tonic)
    await repository.save_equipment(longsword)
    return repository
