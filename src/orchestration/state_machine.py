# ABOUTME: Turn queue state machine sequencing validation, per-character rolls and round closure.
# ABOUTME: Threads an immutable RoundState through each step; rolls resolve strictly one at a time.

import time
from collections.abc import Callable, Sequence
from typing import Any

from loguru import logger

from src.agents.action_validator import ActionValidator
from src.agents.shared import build_outcome_summaries
from src.models.actions import ActionSubmission, ValidatedAction
from src.models.character import Character
from src.models.diary import DiaryAction, DiaryEntry, ObtainedItem
from src.models.dice_models import RollResult
from src.models.equipment import Equipment
from src.models.game_state import (
    ActionValidationResult,
    LevelUpEvent,
    ResolvedOutcome,
    RollSubmissionResult,
    RoundClosure,
    RoundState,
    TurnPhase,
)
from src.models.narrative import NarrativeContext, Scene
from src.orchestration.context import resolve_equipment, with_party
from src.orchestration.exceptions import (
    CharacterNotFound,
    InvalidPhaseTransition,
    ItemNotUsable,
    LevelUpNotPending,
    NoActionError,
    RollNotRequestable,
    ValidationRejected,
)
from src.orchestration.nodes.helpers import find_character, replace_character
from src.orchestration.scene_cache import SceneCache
from src.storage.repository import DIARY, GameRepository
from src.utils.dice import compute_roll_inputs, resolve_roll, roll_d20
from src.utils.inventory import consume_item
from src.utils.logging import log_phase_transition, log_round_event
from src.utils.tags import extract_tags
from src.workers.persistence_queue import PersistenceQueue

VALID_TRANSITIONS: dict[TurnPhase, set[TurnPhase]] = {
    TurnPhase.AWAITING_ACTIONS: {TurnPhase.VALIDATING},
    TurnPhase.VALIDATING: {TurnPhase.RESOLVING, TurnPhase.AWAITING_ACTIONS},
    TurnPhase.RESOLVING: {TurnPhase.RESOLVING, TurnPhase.CLOSING},
    TurnPhase.CLOSING: {TurnPhase.AWAITING_ACTIONS},
}


# ============================================================================
# Helper Functions
# ============================================================================


def format_log_line(character_name: str, description: str, roll: RollResult) -> str:
    """Action log line: [name] description (d20 raw + mod = total) -> Outcome"""
    sign = "+" if roll.modifier >= 0 else "-"
    return (
        f"[{character_name}] {description} "
        f"(d20 {roll.raw} {sign} {abs(roll.modifier)} = {roll.total}) -> {roll.outcome.label}"
    )


def build_diary_entry(
    context: NarrativeContext,
    scene: Scene | None,
    outcomes: Sequence[ResolvedOutcome],
) -> DiaryEntry:
    """Summarize a closed round as an immutable diary entry"""
    actions = []
    for resolved in outcomes:
        member = context.character(resolved.character_id)
        actions.append(
            DiaryAction(
                character_name=resolved.character_name,
                archetype=member.archetype if member else "",
                target_text=resolved.action.target_text,
                target_category=(
                    resolved.action.target_category.value
                    if resolved.action.target_category
                    else None
                ),
                action_text=resolved.action.description,
                dice_outcome=resolved.outcome,
                roll_total=resolved.roll_total,
                outcome_text=resolved.narrative.text,
                consequence=resolved.narrative.consequence,
                items_obtained=[
                    ObtainedItem(name=eq.name, rarity=eq.rarity) for eq in resolved.items_granted
                ],
                gold_obtained=resolved.gold_granted,
            )
        )

    return DiaryEntry(
        id=f"diary-{context.world.id}-{time.time_ns()}",
        world_id=context.world.id,
        location_id=context.location.id,
        location_name=context.location.name,
        scene_title=scene.title if scene else "",
        scene_description=scene.description if scene else "",
        actions=actions,
    )


# ============================================================================
# Turn Queue
# ============================================================================


class TurnQueue:
    """
    Per-round state machine.

    AWAITING_ACTIONS -> VALIDATING -> RESOLVING(n) ... RESOLVING(1) -> CLOSING -> AWAITING_ACTIONS

    Every step replaces the current RoundState with a new instance. Only the
    head of the queue may roll, and only one roll is resolved at a time.
    """

    def __init__(
        self,
        state: RoundState,
        repository: GameRepository,
        validator: ActionValidator,
        resolution_graph: Any,
        scene_cache: SceneCache,
        persistence: PersistenceQueue,
        action_log_limit: int = 50,
        roll_fn: Callable[[], int] = roll_d20,
    ):
        """
        Initialize the turn queue.

        Args:
            state: Initial round state (normally AWAITING_ACTIONS)
            repository: Store access for characters and equipment
            validator: Action validation agent
            resolution_graph: Compiled resolution graph from build_resolution_graph
            scene_cache: Scene cache used when closing a round
            persistence: Write queue for diary and scene rows
            action_log_limit: Maximum action log lines kept
            roll_fn: Source of natural d20 values
        """
        self._state = state
        self.repository = repository
        self.validator = validator
        self.resolution_graph = resolution_graph
        self.scene_cache = scene_cache
        self.persistence = persistence
        self.action_log_limit = action_log_limit
        self._roll_fn = roll_fn

    @property
    def state(self) -> RoundState:
        return self._state

    @property
    def phase(self) -> TurnPhase:
        return self._state.phase

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def _transition(self, **update: Any) -> RoundState:
        current = self._state
        new_phase = update.get("phase", current.phase)
        if new_phase != current.phase:
            if new_phase not in VALID_TRANSITIONS[current.phase]:
                raise InvalidPhaseTransition(
                    f"Cannot move from {current.phase.value} to {new_phase.value}"
                )
            log_phase_transition(current.phase.value, new_phase.value, current.round_number)

        self._state = current.model_copy(update=update)
        return self._state

    def _require_phase(self, phase: TurnPhase, operation: str) -> None:
        if self._state.phase != phase:
            raise InvalidPhaseTransition(
                f"{operation} requires phase {phase.value}, current phase is "
                f"{self._state.phase.value}"
            )

    def replace_context(self, context: NarrativeContext, scene: Scene | None = None) -> None:
        """Swap the round snapshot between rounds (travel, equip, level-up)"""
        self._require_phase(TurnPhase.AWAITING_ACTIONS, "Updating the round context")
        update: dict[str, Any] = {"context": context}
        if scene is not None:
            update["scene"] = scene
        self._transition(**update)

    def consume_level_up(self, character_id: str) -> LevelUpEvent:
        """
        Remove the oldest unspent level-up of a character.

        Raises:
            InvalidPhaseTransition: If a round is in progress
            LevelUpNotPending: If the character has no unspent level-up
        """
        self._require_phase(TurnPhase.AWAITING_ACTIONS, "Level-up allocation")
        pending = list(self._state.pending_level_ups)
        for index, event in enumerate(pending):
            if event.character_id == character_id:
                del pending[index]
                self._transition(pending_level_ups=tuple(pending))
                return event
        raise LevelUpNotPending(f"{character_id} has no level-up to allocate")

    def _checked_targets(
        self, submissions: Sequence[ActionSubmission]
    ) -> list[ActionSubmission]:
        """Drop selected targets that are not tags of the current scene"""
        scene = self._state.scene
        tags = set(extract_tags(scene.description)) if scene else set()
        checked = []
        for submission in submissions:
            target = submission.target
            if target is not None and (target.category, target.text.strip()) not in tags:
                logger.warning(
                    f"Dropping target {target.category.value}:{target.text} for "
                    f"{submission.character_id}; not in the current scene"
                )
                submission = submission.model_copy(update={"target": None})
            checked.append(submission)
        return checked

    # ------------------------------------------------------------------
    # AWAITING_ACTIONS -> VALIDATING -> RESOLVING
    # ------------------------------------------------------------------

    async def submit_actions(
        self, submissions: Sequence[ActionSubmission]
    ) -> ActionValidationResult:
        """
        Validate the round's actions and build the roll queue.

        Args:
            submissions: One submission (or skip) per party member

        Returns:
            Valid and invalid actions

        Raises:
            InvalidPhaseTransition: If the round is not awaiting actions
            NoActionError: If every submission is skipped or blank
            CharacterNotFound: If a submission names a non-party character
            ValidationRejected: If every action was judged invalid
        """
        self._require_phase(TurnPhase.AWAITING_ACTIONS, "Submitting actions")
        for submission in submissions:
            if find_character(self._state.party, submission.character_id) is None:
                raise CharacterNotFound(f"{submission.character_id} is not in the party")
        if not any(s.is_actionable for s in submissions):
            raise NoActionError("At least one character must describe an action")
        submissions = self._checked_targets(submissions)

        # Previous round's diary and scene must be durable before validation starts
        await self.persistence.drain()

        state = self._transition(phase=TurnPhase.VALIDATING)
        try:
            validated = await self.validator.validate(
                state.context,
                submissions,
                state.scene.description if state.scene else None,
                "\n".join(state.previous_summaries) or None,
            )
        except BaseException:
            self._transition(phase=TurnPhase.AWAITING_ACTIONS)
            raise

        valid = [a for a in validated if a.valid]
        invalid = [a for a in validated if not a.valid]
        if not valid:
            self._transition(phase=TurnPhase.AWAITING_ACTIONS)
            log_round_event(
                "All actions rejected", state.round_number, TurnPhase.VALIDATING.value,
                level="WARNING", rejected=len(invalid),
            )
            raise ValidationRejected(invalid)

        self._transition(
            phase=TurnPhase.RESOLVING,
            queue=tuple(valid),
            invalid_actions=tuple(invalid),
            outcomes=(),
        )
        log_round_event(
            "Actions validated", state.round_number, TurnPhase.VALIDATING.value,
            valid=len(valid), invalid=len(invalid),
        )
        return ActionValidationResult(valid_actions=valid, invalid_actions=invalid)

    # ------------------------------------------------------------------
    # RESOLVING
    # ------------------------------------------------------------------

    def pending_roll(self) -> ValidatedAction | None:
        """The action whose roll can be requested now, if any"""
        state = self._state
        if state.phase != TurnPhase.RESOLVING or state.roll_in_flight:
            return None
        return state.head

    def cancel_roll(self) -> ValidatedAction:
        """
        Abandon the head action before its roll is drawn. Side-effect free.

        Returns:
            The dropped action

        Raises:
            InvalidPhaseTransition: If no roll is pending
            RollNotRequestable: If the roll has already been drawn
        """
        self._require_phase(TurnPhase.RESOLVING, "Cancelling a roll")
        state = self._state
        if state.roll_in_flight:
            raise RollNotRequestable("The roll has already been drawn and cannot be cancelled")

        dropped = state.queue[0]
        queue = state.queue[1:]
        self._transition(
            queue=queue,
            phase=TurnPhase.RESOLVING if queue else TurnPhase.CLOSING,
        )
        log_round_event(
            "Roll cancelled", state.round_number, TurnPhase.RESOLVING.value,
            character_id=dropped.character_id,
        )
        return dropped

    async def submit_roll(
        self,
        character_id: str,
        raw: int | None = None,
        item_equipment_id: str | None = None,
    ) -> RollSubmissionResult:
        """
        Roll for the head action and run its full resolution.

        The next character's roll cannot be requested until this call has
        committed narration, loot and experience.

        Args:
            character_id: Character rolling; must own the head action
            raw: Natural d20 value; drawn when None
            item_equipment_id: Optional owned item used before the roll

        Returns:
            Resolved outcome, updated party and any level-up

        Raises:
            InvalidPhaseTransition: If the round is not resolving
            RollNotRequestable: If the character is not next or a roll is in flight
            CharacterNotFound: If the character left the party
            ItemNotUsable: If the item cannot be used before an action
            ValueError: If raw is outside 1-20
        """
        self._require_phase(TurnPhase.RESOLVING, "Rolling")
        state = self._state
        if state.roll_in_flight:
            raise RollNotRequestable("Another roll is still being resolved")

        action = state.queue[0]
        if action.character_id != character_id:
            raise RollNotRequestable(
                f"Next roll belongs to {action.character_id}, not {character_id}"
            )
        if raw is not None and not 1 <= raw <= 20:
            raise ValueError(f"Natural roll must be between 1 and 20, got {raw}")

        character = find_character(state.party, character_id)
        if character is None:
            raise CharacterNotFound(f"{character_id} is not in the party")
        item = self._usable_item(state.context, character, item_equipment_id)

        self._transition(roll_in_flight=True)
        drawn = False
        try:
            modifier, difficulty = compute_roll_inputs(
                character, action.primary_attribute, action.difficulty, item
            )
            roll = resolve_roll(modifier, difficulty, raw if raw is not None else self._roll_fn())
            drawn = True

            context = state.context
            party = list(state.party)
            if item is not None and item.consumable:
                character = consume_item(character, item.id)
                party = replace_character(party, character)
                context = with_party(context, party)
                await self.repository.save_character(character)

            final = await self.resolution_graph.ainvoke(
                {
                    "context": context,
                    "action": action,
                    "roll": roll,
                    "character_name": character.name,
                    "party": party,
                    "scene_text": state.scene.description if state.scene else None,
                }
            )
        except BaseException:
            if drawn:
                self._abandon_head()
            else:
                self._transition(roll_in_flight=False)
            raise

        resolved = ResolvedOutcome(
            character_id=character_id,
            character_name=character.name,
            action=action,
            roll=roll,
            narrative=final["narrative"],
            items_granted=final.get("items_granted", []),
            gold_granted=final.get("gold_granted", 0),
            xp_granted=final.get("xp_granted", 0),
            level_up=final.get("level_up"),
        )

        log = (*state.log, format_log_line(character.name, action.description, roll))
        log = log[-self.action_log_limit:]
        party = final["party"]
        queue = state.queue[1:]
        self._transition(
            context=with_party(final["context"], party, history=log),
            queue=queue,
            outcomes=(*state.outcomes, resolved),
            log=log,
            roll_in_flight=False,
            pending_level_ups=(
                (*state.pending_level_ups, resolved.level_up)
                if resolved.level_up else state.pending_level_ups
            ),
            phase=TurnPhase.RESOLVING if queue else TurnPhase.CLOSING,
        )
        log_round_event(
            "Roll resolved", state.round_number, TurnPhase.RESOLVING.value,
            character_id=character_id, outcome=roll.outcome.value, total=roll.total,
            remaining=len(queue),
        )
        return RollSubmissionResult(
            resolved_outcome=resolved,
            updated_characters=list(party),
            level_up=resolved.level_up,
            remaining=len(queue),
        )

    def _usable_item(
        self,
        context: NarrativeContext,
        character: Character,
        item_equipment_id: str | None,
    ) -> Equipment | None:
        if item_equipment_id is None:
            return None
        item = context.equipment_map.get(item_equipment_id)
        if item is None or character.quantity_of(item_equipment_id) < 1:
            raise ItemNotUsable(f"{character.name} does not own {item_equipment_id}")
        if not item.usable_before_action:
            raise ItemNotUsable(f"{item.name} cannot be used before an action")
        return item

    def _abandon_head(self) -> None:
        """
        Drop the head action after its roll was drawn but resolution did not finish.

        Mutations already committed for that character stay in place; the party
        is marked stale so closing the round reloads it from the store.
        """
        state = self._state
        dropped = state.queue[0]
        queue = state.queue[1:]
        self._transition(
            queue=queue,
            roll_in_flight=False,
            party_stale=True,
            phase=TurnPhase.RESOLVING if queue else TurnPhase.CLOSING,
        )
        log_round_event(
            "Resolution interrupted after roll; committed changes are kept",
            state.round_number, TurnPhase.RESOLVING.value,
            character_id=dropped.character_id, level="WARNING",
        )

    # ------------------------------------------------------------------
    # CLOSING -> AWAITING_ACTIONS
    # ------------------------------------------------------------------

    async def close_round(self) -> RoundClosure:
        """
        Record the round and produce the next scene.

        Writes one diary entry when the round has outcomes, then invalidates and
        regenerates the location's scene with the outcomes as narrative input.

        Returns:
            Diary entry (None for a round without outcomes) and next scene

        Raises:
            InvalidPhaseTransition: If rolls are still pending or the round is already closing
        """
        self._require_phase(TurnPhase.CLOSING, "Closing the round")
        if self._state.closing_in_flight:
            raise InvalidPhaseTransition("The round is already being closed")
        state = self._transition(closing_in_flight=True)
        try:
            diary_entry, next_scene, context = await self._close(state)
        except BaseException:
            self._transition(closing_in_flight=False)
            raise

        summaries = build_outcome_summaries(state.outcomes)
        self._transition(
            phase=TurnPhase.AWAITING_ACTIONS,
            round_number=state.round_number + 1,
            context=context,
            scene=next_scene,
            queue=(),
            invalid_actions=(),
            outcomes=(),
            previous_summaries=tuple(summaries),
            party_stale=False,
            closing_in_flight=False,
        )
        log_round_event(
            "Round closed", state.round_number, TurnPhase.CLOSING.value,
            outcomes=len(state.outcomes),
        )
        return RoundClosure(diary_entry=diary_entry, next_scene=next_scene)

    async def _close(
        self, state: RoundState
    ) -> tuple[DiaryEntry | None, Scene, NarrativeContext]:
        context = state.context
        if state.party_stale:
            party = await self.repository.get_party([m.id for m in state.party])
            equipment = await resolve_equipment(self.repository, party)
            context = with_party(context, party, equipment)
            logger.info("Reloaded party after interrupted resolution")

        diary_entry = None
        next_scene = state.scene
        if state.outcomes:
            next_scene = await self.scene_cache.regenerate(
                context, build_outcome_summaries(state.outcomes), state.scene, state.log
            )
            # Diary entry only once the next scene exists
            diary_entry = build_diary_entry(context, state.scene, state.outcomes)
            self.persistence.enqueue(DIARY, diary_entry)

        if next_scene is None:
            next_scene, _ = await self.scene_cache.get_or_generate(context, log=state.log)

        return diary_entry, next_scene, context
