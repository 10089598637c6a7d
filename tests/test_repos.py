"""Tests for row decoding and caching in the MySQL-backed provider, against a canned database."""

from __future__ import annotations

from decimal import Decimal

from core.models import NpcRef, Position, QuestRequirement
from data_access.provider import WorldDataProvider
from data_access.quests_repo import decode_quest_row


class CannedDatabase:
    """Answers each query with the rows of the table in its FROM clause and records every call."""

    def __init__(self, tables: dict) -> None:
        self.tables = tables
        self.calls: list = []

    def execute(self, query, params=None):
        normalized = " ".join(query.split()) + " "
        self.calls.append((normalized.strip(), params))
        for table, rows in self.tables.items():
            if f"FROM {table} " in normalized:
                return [dict(row) for row in rows]
        return []


QUEST_ROW = {
    "entry": 33, "Title": "Wolves Across the Border", "MinLevel": 1, "QuestLevel": 2,
    "ReqCreatureOrGOId1": -1001, "ReqCreatureOrGOCount1": 1,
    "ReqCreatureOrGOId2": 299, "ReqCreatureOrGOCount2": 4,
    "ReqItemId1": 750, "ReqItemCount1": 8, "ReqItemId2": 0, "ReqItemCount2": 0,
    "RewChoiceItemId3": 117, "RewChoiceItemCount3": 5,
    "RewXP": 250, "RewOrReqMoney": 75,
}


def test_quest_slots_skip_empty_and_game_object_slots() -> None:
    quest = decode_quest_row(QUEST_ROW)

    assert quest.required_creatures == [QuestRequirement(299, 4)]
    assert quest.required_items == [QuestRequirement(750, 8)]
    assert quest.reward_choice_items == [QuestRequirement(117, 5)]
    assert quest.reward_items == []
    assert quest.required_count_for_item(750) == 8
    assert quest.required_count_for_item(751) == 0


def test_static_rows_are_cached() -> None:
    db = CannedDatabase({"quest_template": [QUEST_ROW]})
    provider = WorldDataProvider(db)

    assert provider.get_quest(33).title == "Wolves Across the Border"
    provider.get_quest(33)

    assert len(db.calls) == 1


def test_missing_rows_are_cached_as_none() -> None:
    db = CannedDatabase({})
    provider = WorldDataProvider(db)

    assert provider.get_item(4865) is None
    assert provider.get_item(4865) is None
    assert len(db.calls) == 1


def test_spawns_drop_origin_placeholders_and_convert_decimals() -> None:
    db = CannedDatabase({"creature": [
        {"guid": 1, "id": 299, "map": 0, "position_x": Decimal("-8900.5"),
         "position_y": Decimal("-30.25"), "position_z": Decimal("85.1")},
        {"guid": 2, "id": 299, "map": 0, "position_x": Decimal("0"),
         "position_y": Decimal("0"), "position_z": Decimal("0")},
    ]})

    spawns = WorldDataProvider(db).get_creature_spawns(299)

    assert len(spawns) == 1
    assert spawns[0].position == Position(-8900.5, -30.25, 85.1, 0)


def test_relations_start_position_and_xp_rows() -> None:
    db = CannedDatabase({
        "creature_questrelation": [{"id": 197, "name": "Marshal McBride"}],
        "playercreateinfo": [{"map": 0, "position_x": Decimal("-8949.95"),
                              "position_y": Decimal("-132.493"), "position_z": Decimal("83.5312")}],
        "player_xp_for_level": [{"lvl": 1, "xp_for_next_level": 400}, {"lvl": 2, "xp_for_next_level": 900}],
    })
    provider = WorldDataProvider(db)

    assert provider.get_quest_givers(7) == [NpcRef(197, "Marshal McBride")]
    assert provider.get_start_position(1, 1) == Position(-8949.95, -132.493, 83.5312, 0)
    assert [(row.level, row.xp) for row in provider.get_player_xp_for_level()] == [(1, 400), (2, 900)]


def test_loot_rows_and_droppers() -> None:
    db = CannedDatabase({
        "creature_loot_template": [
            {"entry": 299, "item": 750, "ChanceOrQuestChance": -80, "groupid": 0,
             "mincountOrRef": 1, "maxcount": 1},
        ],
    })
    provider = WorldDataProvider(db)

    (row,) = provider.get_loot_table(299)

    assert row.chance == -80.0
    assert provider.get_item_droppers(750) == [299]
    assert db.calls[-1][1] == (750,)
