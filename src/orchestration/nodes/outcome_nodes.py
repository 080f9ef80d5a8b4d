# ABOUTME: Outcome narration, loot application and experience node handlers for one rolled action.
# ABOUTME: Node factories capture agents and the repository; each node returns a new state dict.

from loguru import logger

from src.agents.loot_generator import LootGenerator
from src.agents.outcome_narrator import OutcomeNarrator
from src.models.equipment import Equipment
from src.models.game_state import ResolutionState
from src.orchestration.context import with_party
from src.orchestration.nodes.helpers import (
    find_character,
    replace_character,
    resolve_target_character,
)
from src.storage.repository import GameRepository
from src.utils.inventory import add_item, apply_gold
from src.utils.progression import grant_experience


def _create_narrate_outcome_node(narrator: OutcomeNarrator):
    """
    Factory for narrate_outcome_node with injected dependencies.

    Args:
        narrator: Outcome narration agent

    Returns:
        Node function with captured narrator dependency
    """

    async def narrate_outcome_node(state: ResolutionState) -> ResolutionState:
        """
        Narrate the rolled action. Always produces prose, failures included.

        Args:
            state: Current resolution state

        Returns:
            Updated state with narrative
        """
        action = state["action"]
        roll = state["roll"]
        logger.info(
            f"[PHASE: NARRATE_OUTCOME] {state['character_name']} -> {roll.outcome.value}"
        )

        narrative = await narrator.narrate_outcome(
            state["context"],
            action,
            roll.outcome,
            roll.total,
            state["character_name"],
            state.get("scene_text"),
        )
        return {**state, "narrative": narrative}

    return narrate_outcome_node


def _create_generate_loot_node(loot_generator: LootGenerator, repository: GameRepository):
    """
    Factory for generate_loot_node with injected dependencies.

    Args:
        loot_generator: Loot agent
        repository: Store access for equipment and characters

    Returns:
        Node function with captured dependencies
    """

    async def generate_loot_node(state: ResolutionState) -> ResolutionState:
        """
        Generate loot and apply it to the party.

        Each grant goes to the character chosen by resolve_target_character.
        New equipment is stored before any inventory references it, and every
        changed character is persisted as a whole object.

        Args:
            state: Current resolution state

        Returns:
            Updated state with loot, party, context, items_granted and gold_granted
        """
        action = state["action"]
        roll = state["roll"]
        actor_id = action.character_id
        logger.info(f"[PHASE: GENERATE_LOOT] {state['character_name']}")

        loot = await loot_generator.generate_loot(
            state["context"],
            action,
            roll.outcome,
            roll.total,
            actor_id,
            state.get("scene_text"),
        )

        party = list(state["party"])
        changed: set[str] = set()
        items_granted: list[Equipment] = []
        gold_granted = 0

        for grant in loot.items:
            target = resolve_target_character(party, grant.character_id, actor_id)
            if target is None:
                logger.warning("No party member can receive loot")
                break
            await repository.save_equipment(grant.equipment)
            party = replace_character(party, add_item(target, grant.equipment, grant.quantity))
            items_granted.append(grant.equipment)
            changed.add(target.id)
            logger.info(f"{target.name} obtained {grant.equipment.name} ({grant.equipment.rarity.value})")

        for change in loot.gold:
            target = resolve_target_character(party, change.character_id, actor_id)
            if target is None:
                break
            updated, applied = apply_gold(target, change.amount)
            party = replace_character(party, updated)
            changed.add(target.id)
            if target.id == actor_id:
                gold_granted += applied

        for member in party:
            if member.id in changed:
                await repository.save_character(member)

        return {
            **state,
            "loot": loot,
            "party": party,
            "context": with_party(state["context"], party, items_granted),
            "items_granted": items_granted,
            "gold_granted": gold_granted,
        }

    return generate_loot_node


def _create_grant_experience_node(repository: GameRepository):
    """
    Factory for grant_experience_node with injected dependencies.

    Args:
        repository: Store access for characters

    Returns:
        Node function with captured repository dependency
    """

    async def grant_experience_node(state: ResolutionState) -> ResolutionState:
        """
        Grant XP to the acting character and persist any change.

        Args:
            state: Current resolution state

        Returns:
            Updated state with xp_granted and level_up
        """
        action = state["action"]
        logger.info(f"[PHASE: GRANT_EXPERIENCE] {state['character_name']}")

        party = list(state["party"])
        actor = find_character(party, action.character_id)
        if actor is None:
            logger.warning(f"Acting character {action.character_id} left the party")
            return {**state, "xp_granted": 0, "level_up": None}

        updated, gained, level_up = grant_experience(actor, action, state["roll"].outcome)
        if not gained:
            return {**state, "xp_granted": 0, "level_up": None}

        party = replace_character(party, updated)
        await repository.save_character(updated)
        return {
            **state,
            "party": party,
            "context": with_party(state["context"], party),
            "xp_granted": gained,
            "level_up": level_up,
        }

    return grant_experience_node
