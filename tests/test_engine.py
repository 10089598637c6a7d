"""Tests for the tick-driven engine: auto questing, combat timing and manual actions."""

from __future__ import annotations

import pytest

from core.models import Position

KOBOLD = 80
REWARD_ITEM = 1003
REFERENCE_ITEM = 1004


def _logged(engine, text: str) -> bool:
    return any(text in line for line in engine.action_log)


def _auto_engine(make_engine):
    engine = make_engine()
    engine.set_mode("auto")
    engine.start()
    return engine


def test_auto_mode_completes_starter_quest_then_stops(make_engine, run_until) -> None:
    engine = _auto_engine(make_engine)

    run_until(engine, lambda e: not e.running)

    assert engine.completed_quest_ids == {7}
    assert engine.current_quest is None
    # Three kobolds at 150 XP each plus the quest reward.
    assert engine.character.experience == 620
    assert engine.character.level == 2
    counts = engine.inventory_system.get_item_counts(engine.inventory)
    assert counts[REWARD_ITEM] == 1
    assert counts[REFERENCE_ITEM] == 6
    assert engine.inventory.gold >= 35 + 3 * 3
    assert _logged(engine, "Quest accepted: Kobold Camp Cleanup")
    assert _logged(engine, "Quest completed: Kobold Camp Cleanup")
    assert _logged(engine, "Received 35c")
    assert _logged(engine, "LEVEL UP! You are now level 2!")
    assert engine.action_log[-2].endswith("No more quests available")
    assert engine.action_log[-1].endswith("Game engine stopped")


def test_quest_is_accepted_only_at_the_giver(make_engine, run_until) -> None:
    engine = _auto_engine(make_engine)

    assert engine.current_state == "traveling"
    assert engine.current_quest is None

    run_until(engine, lambda e: e.current_quest is not None)

    assert engine.character.position == Position(3.0, 4.0, 0.0, 0)


def test_combat_never_resolves_while_paused(make_engine, run_until, clock) -> None:
    engine = _auto_engine(make_engine)
    run_until(engine, lambda e: e.current_state == "combat")

    engine.pause()
    for _ in range(20):
        clock.advance(1.0)
        engine.tick()

    assert engine.current_state == "combat"
    assert engine.executor.kill_count == {}

    engine.resume()
    engine.tick()

    assert engine.current_state == "idle"
    assert engine.executor.kill_count == {KOBOLD: 1}
    assert _logged(engine, "Kobold Laborer defeated!")


def test_combat_waits_for_its_deadline(make_engine, run_until, clock) -> None:
    engine = _auto_engine(make_engine)
    run_until(engine, lambda e: e.current_state == "combat")

    clock.advance(4.0)
    engine.tick()
    assert engine.current_state == "combat"

    clock.advance(1.0)
    engine.tick()
    assert engine.current_state == "idle"


def test_stop_abandons_combat(make_engine, run_until, clock) -> None:
    engine = _auto_engine(make_engine)
    run_until(engine, lambda e: e.current_state == "combat")

    engine.stop()
    clock.advance(60.0)
    engine.tick()

    assert engine.combat is None
    assert engine.current_state == "idle"
    assert engine.executor.kill_count == {}
    assert _logged(engine, "Combat with Kobold Laborer abandoned")


def test_no_mob_at_spawn_moves_on(make_engine, run_until) -> None:
    engine = make_engine(mob_presence_chance=0.0)
    engine.set_mode("auto")
    engine.start()

    run_until(engine, lambda e: _logged(e, "No mob at this spawn point"))

    assert engine.executor.kill_count == {}


def test_manual_start_lists_zone_actions(make_engine) -> None:
    engine = make_engine()
    engine.start()

    assert engine.current_zone == "Test Vale"
    assert engine.available_actions == ["go-to-inn", "go-to-vendor", "farm-nearby-mobs", "handle-quests"]
    assert _logged(engine, "Current zone: Test Vale")
    assert _logged(engine, "Manual mode: waiting for player input")


def test_manual_travel_to_inn_and_busy_rejection(make_engine, run_until) -> None:
    engine = make_engine()
    engine.start()

    assert engine.execute_action("go-to-inn")
    assert engine.current_state == "traveling"
    assert engine.destination_name == "Test Inn"

    assert not engine.execute_action("go-to-vendor")
    assert _logged(engine, "Cannot execute action while busy")

    run_until(engine, lambda e: e.current_state == "idle")

    assert engine.character.position == Position(5.0, 5.0, 0.0, 0)
    assert _logged(engine, "Arrived at Test Inn")


def test_missing_poi_and_unknown_action(make_engine) -> None:
    engine = make_engine()
    engine.start()

    assert engine.execute_action("go-to-bank")
    assert engine.current_state == "idle"
    assert _logged(engine, "No bank found in this zone")

    assert not engine.execute_action("dance")
    assert _logged(engine, "Unknown action: dance")


def test_handle_quests_then_farm_camp(make_engine, run_until) -> None:
    engine = make_engine()
    engine.start()

    engine.execute_action("farm-nearby-mobs")
    assert _logged(engine, "Nothing to farm: no active quest objective")

    engine.execute_action("handle-quests")
    run_until(engine, lambda e: e.current_state == "idle")
    engine.execute_action("handle-quests")
    assert engine.current_quest.quest_id == 7

    engine.execute_action("farm-nearby-mobs")

    assert engine.current_state == "traveling"
    assert engine.destination_name == "Kobold Laborer camp"
    assert engine.current_destination.x == pytest.approx(10.0)
    assert engine.current_destination.y == pytest.approx(0.0)


def test_entering_a_new_zone_is_logged(make_engine, run_until) -> None:
    engine = make_engine()
    engine.start()

    assert engine.travel_to_coordinates(Position(150.0, 0.0, 0.0, 0), "the field")
    run_until(engine, lambda e: e.current_state == "idle")

    assert engine.current_zone == "Far Field"
    assert _logged(engine, "Entered Far Field")
    assert engine.available_actions == ["go-to-class-trainer", "farm-nearby-mobs", "handle-quests"]


def test_travel_progress_is_reported(make_engine, clock) -> None:
    engine = make_engine()
    engine.start()
    engine.travel_to_coordinates(Position(70.0, 0.0, 0.0, 0), "east")

    clock.advance(5.0)

    assert engine.travel_progress() == pytest.approx(0.5)


def test_action_log_is_capped(make_engine) -> None:
    engine = make_engine()
    for i in range(150):
        engine.log(f"message {i}")

    state = engine.get_state()

    assert len(state.action_log) == 100
    assert state.action_log[-1].endswith("message 149")
    assert engine.log_total == 150


def test_snapshot_is_detached_from_engine(make_engine) -> None:
    engine = make_engine()
    engine.start()

    state = engine.get_state()
    state.character.level = 42
    state.inventory.gold = 999

    assert engine.character.level == 1
    assert engine.inventory.gold == 0


def test_state_change_callback_receives_snapshots(make_engine, clock) -> None:
    engine = make_engine()
    seen = []
    engine.on_state_change = seen.append

    engine.start()
    clock.advance(1.0)
    engine.tick()

    assert len(seen) == 2
    assert seen[-1].current_zone == "Test Vale"


def test_tick_does_nothing_before_start(make_engine, clock) -> None:
    engine = make_engine()
    engine.set_mode("auto")

    clock.advance(10.0)
    engine.tick()

    assert engine.current_state == "idle"
    assert engine.current_quest is None


def test_invalid_mode_is_rejected(make_engine) -> None:
    engine = make_engine()

    with pytest.raises(ValueError):
        engine.set_mode("turbo")
