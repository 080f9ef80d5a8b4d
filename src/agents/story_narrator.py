# ABOUTME: Scene narration agent producing intro and continuation scenes with embedded tags.
# ABOUTME: Raises on failure; the scene cache owns retries and the fallback scene.

from collections.abc import Sequence

from src.agents.exceptions import ParseError
from src.agents.llm_client import LLMClient
from src.agents.shared import build_full_context, parse_json_payload
from src.config.prompts import SCENE_SCHEMA, STORY_SYSTEM_PROMPT
from src.models.narrative import NarrativeContext, NarrativeMood, Scene

PREVIOUS_SCENE_CHARS = 1500

FALLBACK_DESCRIPTION = (
    "The air is heavy and every detail matters. The surroundings reveal possibilities: "
    "people, paths, objects waiting to be noticed. What do you do?"
)


def fallback_scene(location_name: str) -> Scene:
    """Generic exploratory scene used when narration cannot be generated"""
    return Scene(
        title=f"Scene in {location_name}",
        description=FALLBACK_DESCRIPTION,
        mood=NarrativeMood.NEUTRO,
    )


def _audience(party_size: int) -> str:
    if party_size == 1:
        return "Number of players: 1. Address them as \"you\" (singular)."
    return f"Number of players: {party_size}. Address them as \"you all\"."


class StoryNarrator:
    """
    Main story narrator.

    The only stage that emits narrative tags. Does not validate actions,
    interpret dice or create items.
    """

    def __init__(self, llm_client: LLMClient, max_tokens: int = 2000, timeout: float = 25.0):
        self._llm_client = llm_client
        self.max_tokens = max_tokens
        self.timeout = timeout

    async def narrate_intro(self, context: NarrativeContext) -> Scene:
        """
        Narrate the first scene at a location.

        Args:
            context: Round snapshot

        Returns:
            Generated scene

        Raises:
            TransportError: When the completion call fails
            ParseError: When the response is not a usable scene
        """
        intro = ""
        if context.world.intro_narrative:
            intro = (
                "WORLD INTRO (use as the base and expand it):\n"
                f'"{context.world.intro_narrative}"\n\n'
            )

        user_prompt = (
            build_full_context(context)
            + "\n"
            + intro
            + "TASK: Write the OPENING scene at this location.\n"
            + _audience(len(context.party))
            + "\nDescribe the surroundings, the people and what they are doing, and the "
            "elements the players could investigate or interact with.\n"
            + SCENE_SCHEMA
        )
        return await self._generate(user_prompt)

    async def narrate_continuation(
        self,
        context: NarrativeContext,
        outcome_summaries: Sequence[str],
        previous_scene: Scene | None = None,
    ) -> Scene:
        """
        Narrate the scene that follows a closed round.

        Args:
            context: Round snapshot (party already reflects the round's mutations)
            outcome_summaries: One line per resolved action, in resolution order
            previous_scene: Scene the round was played in

        Returns:
            Generated scene

        Raises:
            TransportError: When the completion call fails
            ParseError: When the response is not a usable scene
        """
        previous = ""
        if previous_scene is not None:
            previous = (
                f'PREVIOUS SCENE: "{previous_scene.title}"\n'
                f'"{previous_scene.description[:PREVIOUS_SCENE_CHARS]}"\n\n'
            )
        outcomes = "\n".join(f"  - {line}" for line in outcome_summaries) or "  - (no actions)"

        user_prompt = (
            build_full_context(context)
            + "\n"
            + previous
            + "WHAT THE PLAYERS JUST DID:\n"
            + outcomes
            + "\n\nTASK: Continue the story. Open by showing what changed because of "
            "these actions, respecting each result, then move the story forward.\n"
            + _audience(len(context.party))
            + "\n"
            + SCENE_SCHEMA
        )
        return await self._generate(user_prompt)

    async def _generate(self, user_prompt: str) -> Scene:
        raw = await self._llm_client.complete(
            STORY_SYSTEM_PROMPT, user_prompt, self.max_tokens, self.timeout
        )
        return parse_scene(raw)


def parse_scene(raw: str) -> Scene:
    """
    Build a Scene from a narrator response.

    Raises:
        ParseError: If title or description is missing or blank
    """
    data = parse_json_payload(raw)
    title = data.get("title")
    description = data.get("description")
    if not isinstance(title, str) or not title.strip():
        raise ParseError("Scene response is missing a title")
    if not isinstance(description, str) or not description.strip():
        raise ParseError("Scene response is missing a description")
    return Scene(
        title=title.strip(),
        description=description.strip(),
        mood=NarrativeMood.parse(data.get("mood")),
    )
