#!/usr/bin/env python3
# ABOUTME: Demo script playing one round against the seeded world with the live AI stages.
# ABOUTME: Requires Redis seeded by scripts/seed_world.py and OPENAI_API_KEY in the environment.

"""
Demo of one adventure round

Starts a session in Valdren Square, submits one action per character, rolls
for each queued action in order, and closes the round.
"""

import asyncio

from src.models.actions import ActionSubmission, SelectedTarget
from src.orchestration import TurnOrchestrator, ValidationRejected
from src.utils.logging import setup_logging
from src.utils.tags import extract_tags, strip_tags

PARTY = ["char-mira", "char-tobias", "char-selene"]


def print_scene(title: str, description: str) -> None:
    print("\n" + "=" * 70)
    print(title)
    print("=" * 70)
    print(strip_tags(description))
    tags = extract_tags(description)
    if tags:
        print("\nInteractive elements:")
        for category, text in tags:
            print(f"  [{category.value}] {text}")


async def main() -> None:
    setup_logging(log_level="WARNING")
    orchestrator = await TurnOrchestrator.from_settings()

    scene = await orchestrator.start("world-valdren", "loc-valdren-square", PARTY)
    print_scene(scene.title, scene.description)

    # Mira focuses on the first interactive element, if the scene offers one
    target = next(
        (SelectedTarget(text=text, category=category)
         for category, text in extract_tags(scene.description)),
        None,
    )

    submissions = [
        ActionSubmission(
            character_id="char-mira",
            text="I search the edge of the well for tracks",
            target=target,
        ),
        ActionSubmission(character_id="char-tobias", text="I ask the mayor about the letter"),
        ActionSubmission(character_id="char-selene", skip=True),
    ]

    try:
        result = await orchestrator.submit_actions(submissions)
    except ValidationRejected as e:
        for action in e.actions:
            print(f"Rejected {action.character_id}: {action.reason}")
        return

    for action in result.invalid_actions:
        print(f"\nInvalid ({action.character_id}): {action.reason}")

    while (action := orchestrator.pending_roll()) is not None:
        roll = await orchestrator.submit_roll(action.character_id)
        resolved = roll.resolved_outcome
        print(
            f"\n{resolved.character_name}: d20 {resolved.roll.raw} + {resolved.roll.modifier} "
            f"= {resolved.roll_total} vs {resolved.difficulty} -> {resolved.outcome.label}"
        )
        print(resolved.narrative.text)
        for item in resolved.items_granted:
            print(f"  Obtained {item.name} ({item.rarity.value})")
        if roll.level_up:
            print(f"  Level up! Now level {roll.level_up.new_level}")

    closure = await orchestrator.close_round()
    print_scene(closure.next_scene.title, closure.next_scene.description)

    await orchestrator.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
