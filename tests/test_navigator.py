"""Tests for guide step selection and quest destinations."""

from __future__ import annotations

import os

import pytest

from core.config import ConfigError
from core.models import Position
from logic.guide_loader import GuideLoader
from logic.navigator import QuestNavigator

GUIDE_PATH = os.path.join(os.path.dirname(__file__), "..", "resources", "guides.json")


@pytest.fixture
def guides() -> GuideLoader:
    return GuideLoader(GUIDE_PATH)


def test_guide_file_loads_per_race(guides) -> None:
    human = guides.get_guide_for_race("Human")

    assert human.start_zone == "Northshire Valley"
    assert human.segments[0].level_range == (1, 5)
    assert guides.get_guide_for_race("Gnome") is None
    assert guides.get_start_zone("Orc") == "Valley of Trials"


def test_steps_for_level_come_from_the_covering_segment(guides) -> None:
    assert [step.id for step in guides.get_steps_for_level("Human", 3)] == [1, 2, 3, 4, 5, 6]
    assert [step.id for step in guides.get_steps_for_level("Human", 8)] == [7, 8]
    assert guides.get_steps_for_level("Human", 40) == []


def test_next_step_skips_done_quests_and_steps_without_quests(guides) -> None:
    assert guides.get_next_step("Human", 1, "Northshire Valley").quest_ids() == [783]
    assert guides.get_next_step("Human", 1, "Northshire Valley", {783}).quest_ids() == [7]
    # Step 3 is a plain travel step and is never offered.
    assert guides.get_next_step("Human", 2, "Northshire Valley", {783, 7}).quest_ids() == [33]


def test_next_step_respects_recommended_level(guides) -> None:
    assert guides.get_next_step("Human", 1, "Northshire Valley", {783, 7}) is None


def test_next_step_prefers_current_zone(guides) -> None:
    assert guides.get_next_step("Human", 7, "Goldshire").zone == "Goldshire"
    assert guides.get_next_step("Human", 7, "Elwynn Forest").zone == "Elwynn Forest"
    assert guides.get_next_step("Human", 7, None).zone == "Goldshire"


def test_missing_guide_file_means_no_guides(tmp_path) -> None:
    assert GuideLoader(str(tmp_path / "nope.json")).guides == []


def test_malformed_guide_file_raises(tmp_path) -> None:
    path = tmp_path / "guides.json"
    path.write_text("{ not json", encoding="utf-8")

    with pytest.raises(ConfigError):
        GuideLoader(str(path))


def test_destination_from_guide_location(world, guides) -> None:
    navigator = QuestNavigator(world, guides)

    destination = navigator.get_next_destination("Human", 1, "Northshire Valley")

    assert destination.type == "quest-giver"
    assert destination.quest_id == 783
    assert destination.npc_name == "Marshal McBride"
    assert destination.coords == Position(-8902.59, -162.606, 81.9395, 0)


def test_step_with_unknown_quest_yields_nothing(world, guides) -> None:
    navigator = QuestNavigator(world, guides)

    # Level 7 in Elwynn Forest resolves to a bare quest id missing from the world.
    assert navigator.get_next_destination("Human", 7, "Elwynn Forest") is None


def test_level_one_falls_back_to_starter_quest(world) -> None:
    navigator = QuestNavigator(world, GuideLoader(guides=[]))

    destination = navigator.get_next_destination("Human", 1, "Test Vale")

    assert destination.quest_id == 7
    assert destination.npc_id == 500
    assert destination.coords.x == 3.0 and destination.coords.y == 4.0
    assert navigator.get_next_destination("Human", 2, "Test Vale") is None
    assert navigator.get_next_destination("Human", 1, "Test Vale", {7}) is None


def test_start_position_lookup(world) -> None:
    navigator = QuestNavigator(world, GuideLoader(guides=[]))

    assert navigator.get_start_position("Human", "Warrior") == Position(0.0, 0.0, 0.0, 0)
    assert navigator.get_start_position("Human", "Paladin") is None
    assert navigator.get_start_position("Murloc", "Warrior") is None


def test_plan_next_move_includes_travel_estimate(world) -> None:
    navigator = QuestNavigator(world, GuideLoader(guides=[]))

    step = navigator.plan_next_move("Human", 1, "Test Vale", Position(0.0, 0.0, 0.0, 0))

    assert step.travel_info.distance == pytest.approx(5.0)
    assert step.estimated_arrival == "1s"
