"""Shared fixtures: an in-memory world, a controllable clock and seeded RNGs."""

from __future__ import annotations

import os
import random
import tempfile

# Keep test runs from writing into the project's logs/ directory.
os.environ.setdefault("IDLE_LEVELER_LOG_DIR", tempfile.mkdtemp(prefix="idle_leveler_logs_"))

import pytest

from core.config import EngineSettings
from core.models import POI, Character, Position, Zone
from data_access.memory_provider import MemoryDataProvider
from logic.engine import GameEngine
from logic.guide_loader import GuideLoader
from logic.navigator import QuestNavigator
from logic.zone_manager import ZoneManager

KOBOLD = 80
WOLF = 81
BOAR = 90
QUEST_GIVER = 500

UNIQUE_ITEM = 1000
STACKED_ITEM = 1001
JUNK_ITEM = 1002
REWARD_ITEM = 1003
REFERENCE_ITEM = 1004


class FakeClock:
    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


def _quest_row(entry: int, title: str, **slots) -> dict:
    row = {"entry": entry, "Title": title, "MinLevel": 1, "QuestLevel": 1}
    row.update(slots)
    return row


def build_world() -> MemoryDataProvider:
    world = MemoryDataProvider()

    world.add_creature(QUEST_GIVER, "Marshal Test", 20, spawns=[(0, 3.0, 4.0, 0.0)])
    world.add_creature(KOBOLD, "Kobold Laborer", 3, spawns=[(0, 0.0, 0.0), (0, 10.0, 0.0), (0, 20.0, 0.0)])
    world.add_creature(WOLF, "Young Wolf", 2, spawns=[(0, 40.0, 40.0), (1, 5.0, 5.0)])
    world.add_creature(BOAR, "Mottled Boar", 2, spawns=[(0, -30.0, 0.0), (0, -35.0, 5.0)])

    world.add_item({"entry": UNIQUE_ITEM, "name": "Marshal's Letter", "stackable": 1, "class": 12})
    world.add_item({"entry": STACKED_ITEM, "name": "Boar Tusk", "stackable": 20, "class": 12})
    world.add_item({"entry": JUNK_ITEM, "name": "Broken Tooth", "stackable": 5})
    world.add_item({"entry": REWARD_ITEM, "name": "Recruit's Boots", "InventoryType": 8, "armor": 12,
                    "stat_type1": 7, "stat_value1": 1})
    world.add_item({"entry": REFERENCE_ITEM, "name": "Tough Jerky", "stackable": 20})

    # Starter quest for Human, used by the engine when the guide is empty.
    world.add_quest(_quest_row(7, "Kobold Camp Cleanup",
                               ReqCreatureOrGOId1=KOBOLD, ReqCreatureOrGOCount1=3,
                               RewItemId1=REWARD_ITEM, RewItemCount1=1,
                               RewXP=170, RewOrReqMoney=35))
    world.add_quest_giver(7, QUEST_GIVER, "Marshal Test")

    world.add_quest(_quest_row(100, "Kobold Trouble",
                               ReqCreatureOrGOId1=KOBOLD, ReqCreatureOrGOCount1=3))
    world.add_quest(_quest_row(101, "Two Targets",
                               ReqCreatureOrGOId1=KOBOLD, ReqCreatureOrGOCount1=2,
                               ReqCreatureOrGOId2=WOLF, ReqCreatureOrGOCount2=1))
    world.add_quest(_quest_row(200, "The Letter",
                               ReqItemId1=UNIQUE_ITEM, ReqItemCount1=1))
    world.add_quest(_quest_row(201, "Tusks",
                               ReqItemId1=STACKED_ITEM, ReqItemCount1=8,
                               RewChoiceItemId1=REFERENCE_ITEM, RewChoiceItemCount1=5))
    world.add_quest(_quest_row(202, "Kill Then Collect",
                               ReqCreatureOrGOId1=KOBOLD, ReqCreatureOrGOCount1=1,
                               ReqItemId1=STACKED_ITEM, ReqItemCount1=2))
    world.add_quest(_quest_row(300, "Just Talk"))

    world.add_loot(BOAR, UNIQUE_ITEM, -100)
    world.add_loot(BOAR, STACKED_ITEM, -100, 1, 3)
    world.add_loot(BOAR, JUNK_ITEM, 100)
    world.add_loot(KOBOLD, 24001, 100, -24001)
    world.add_reference_loot(24001, REFERENCE_ITEM, min_count=2, max_count=2)

    world.start_positions[(1, 1)] = Position(0.0, 0.0, 0.0, 0)
    return world


TEST_ZONES = [
    Zone(1, "Test Vale", 0, -100.0, 100.0, -100.0, 100.0, (1, 5), "Alliance"),
    Zone(2, "Far Field", 0, 100.0, 1000.0, -100.0, 100.0, (5, 10), "Alliance"),
]

TEST_POIS = [
    POI(1, "Test Inn", "inn", "Test Vale", Position(5.0, 5.0, 0.0, 0)),
    POI(2, "Test Vendor", "vendor", "Test Vale", Position(-5.0, 5.0, 0.0, 0)),
    POI(3, "Far Vendor", "vendor", "Test Vale", Position(-50.0, 50.0, 0.0, 0)),
    POI(4, "Field Trainer", "class-trainer", "Far Field", Position(200.0, 0.0, 0.0, 0)),
]


@pytest.fixture
def world() -> MemoryDataProvider:
    return build_world()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def zone_manager() -> ZoneManager:
    return ZoneManager(TEST_ZONES, TEST_POIS)


@pytest.fixture
def make_engine(world, clock, zone_manager):
    def _make(**settings) -> GameEngine:
        options = dict(mob_presence_chance=1.0, combat_min_seconds=5.0, combat_max_seconds=5.0)
        options.update(settings)
        character = Character(name="Tester", race="Human", char_class="Warrior")
        return GameEngine(
            character,
            world,
            settings=EngineSettings(**options),
            zone_manager=zone_manager,
            navigator=QuestNavigator(world, GuideLoader(guides=[])),
            clock=clock,
            rng=random.Random(7),
        )

    return _make


@pytest.fixture
def run_until(clock):
    def _run(engine: GameEngine, predicate, max_ticks: int = 500) -> int:
        """Tick once per simulated second until predicate(engine) holds."""
        for ticks in range(max_ticks):
            if predicate(engine):
                return ticks
            clock.advance(1.0)
            engine.tick()
        raise AssertionError(f"condition not reached after {max_ticks} ticks")

    return _run
