"""Tests for quest acceptance, objective tracking and grind spot selection."""

from __future__ import annotations

import pytest

from core.models import Position
from logic.quest_executor import QuestExecutor

KOBOLD = 80
WOLF = 81
BOAR = 90
STACKED_ITEM = 1001

HOME = Position(0.0, 0.0, 0.0, 0)


def test_accept_builds_objectives_and_unknown_quest_returns_none(world) -> None:
    executor = QuestExecutor(world)

    assert executor.accept_quest(31337) is None

    progress = executor.accept_quest(202)
    assert progress.status == "accepted"
    assert [(o.type, o.required) for o in progress.objectives] == [("kill", 1), ("collect", 2)]
    assert progress.objectives[0].creature_name == "Kobold Laborer"
    assert progress.objectives[1].item_name == "Boar Tusk"


def test_three_kill_scenario_turns_in_once(world) -> None:
    executor = QuestExecutor(world)
    executor.accept_quest(100)

    for _ in range(3):
        assert executor.register_kill(KOBOLD)

    assert executor.is_quest_complete()
    assert executor.turn_in_quest(100)
    assert executor.get_quest_progress().status == "turned-in"
    assert not executor.turn_in_quest(100)


def test_kills_are_clamped_at_required(world) -> None:
    executor = QuestExecutor(world)
    executor.accept_quest(101)

    executor.register_kill(KOBOLD)
    executor.register_kill(KOBOLD)
    # Objective moved on to the wolf, extra kobolds no longer count.
    assert not executor.register_kill(KOBOLD)
    assert executor.get_quest_progress().objectives[0].current == 2


def test_quest_completes_only_after_every_objective(world) -> None:
    executor = QuestExecutor(world)
    executor.accept_quest(101)

    executor.register_kill(KOBOLD)
    executor.register_kill(KOBOLD)

    progress = executor.get_quest_progress()
    assert progress.current_objective_index == 1
    assert progress.status == "in-progress"
    assert not executor.is_quest_complete()
    assert not executor.turn_in_quest(101)
    assert progress.status == "in-progress"

    assert executor.is_relevant_mob(WOLF)
    assert executor.register_kill(WOLF)
    assert executor.is_quest_complete()


def test_kill_of_unrelated_creature_is_a_miss(world) -> None:
    executor = QuestExecutor(world)

    assert not executor.register_kill(KOBOLD)
    executor.accept_quest(100)
    assert not executor.register_kill(WOLF)
    assert not executor.is_relevant_mob(WOLF)


def test_grind_spots_are_same_map_and_sorted(world) -> None:
    executor = QuestExecutor(world)
    executor.accept_quest(101)
    executor.register_kill(KOBOLD)
    executor.register_kill(KOBOLD)

    spots = executor.find_grind_spots(Position(0.0, 0.0, 0.0, 0))

    assert len(spots) == 1
    assert spots[0].creature_id == WOLF
    assert spots[0].distance == pytest.approx(40.0 * 2 ** 0.5)


def test_next_grind_spot_skips_visited_positions(world) -> None:
    executor = QuestExecutor(world)
    executor.accept_quest(100)

    visited = []
    while True:
        spot = executor.get_next_grind_spot(Position(1.0, 0.0, 0.0, 0))
        if spot is None:
            break
        visited.append(spot.position.x)

    assert visited == [0.0, 10.0, 20.0]

    executor.reset_visited_spawns()
    assert executor.get_next_grind_spot(HOME).position.x == 0.0


def test_accepting_a_quest_resets_tracking(world) -> None:
    executor = QuestExecutor(world)
    executor.accept_quest(100)
    executor.get_next_grind_spot(HOME)
    executor.register_kill(KOBOLD)

    executor.accept_quest(100)

    assert executor.visited_spawns == set()
    assert executor.kill_count == {}
    assert executor.get_quest_progress().objectives[0].current == 0


def test_item_counts_raise_but_never_lower_progress(world) -> None:
    executor = QuestExecutor(world)
    executor.accept_quest(201)

    assert executor.update_item_counts({STACKED_ITEM: 3})
    assert not executor.update_item_counts({STACKED_ITEM: 1})
    objective = executor.get_current_objective()
    assert objective.current == 3

    executor.update_item_counts({STACKED_ITEM: 50})
    assert objective.current == 8
    assert executor.is_quest_complete()


def test_objective_index_skips_already_completed_objectives(world) -> None:
    executor = QuestExecutor(world)
    executor.accept_quest(202)

    executor.update_item_counts({STACKED_ITEM: 2})
    assert executor.get_quest_progress().current_objective_index == 0
    assert not executor.is_quest_complete()

    executor.register_kill(KOBOLD)
    assert executor.is_quest_complete()


def test_collect_objective_hunts_creatures_that_drop_the_item(world) -> None:
    executor = QuestExecutor(world)
    executor.accept_quest(201)

    spots = executor.find_loot_spots(HOME)
    assert [s.creature_id for s in spots] == [BOAR, BOAR]
    assert spots[0].position.x == -30.0
    assert executor.find_grind_spots(HOME) == []

    first = executor.get_next_hunting_spot(HOME)
    second = executor.get_next_hunting_spot(HOME)
    assert (first.position.x, second.position.x) == (-30.0, -35.0)
    assert executor.get_next_hunting_spot(HOME) is None


def test_quest_without_objectives_is_ready_to_turn_in(world) -> None:
    executor = QuestExecutor(world)
    executor.accept_quest(300)

    assert executor.is_quest_complete()
    assert executor.get_current_objective() is None
    assert executor.turn_in_quest(300)
