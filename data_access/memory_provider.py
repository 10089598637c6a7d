# data_access/memory_provider.py
from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple

import yaml

from core.logger import get_logger
from core.models import (
    CreatureSpawn, CreatureTemplate, Item, LootRow, NpcRef, Position, QuestRecord, XpRow,
)
from data_access.loot_repo import decode_item_row
from data_access.quests_repo import decode_quest_row

logger = get_logger(__name__)

class MemoryDataProvider:
    """
    Same lookups as WorldDataProvider, served from plain dicts.
    Rows use world database column names so fixtures read like table dumps.
    """

    def __init__(self):
        self.quests: Dict[int, QuestRecord] = {}
        self.templates: Dict[int, CreatureTemplate] = {}
        self.spawns: Dict[int, List[CreatureSpawn]] = defaultdict(list)
        self.items: Dict[int, Item] = {}
        self.loot: Dict[int, List[LootRow]] = defaultdict(list)
        self.reference_loot: Dict[int, List[LootRow]] = defaultdict(list)
        self.quest_givers: Dict[int, List[NpcRef]] = defaultdict(list)
        self.quest_enders: Dict[int, List[NpcRef]] = defaultdict(list)
        self.start_positions: Dict[Tuple[int, int], Position] = {}
        self.xp_rows: List[XpRow] = []
        self._next_guid = 1

    # --- loading ---------------------------------------------------------

    def add_quest(self, row: Dict[str, Any]) -> QuestRecord:
        quest = decode_quest_row(row)
        self.quests[quest.entry] = quest
        return quest

    def add_creature(self, entry: int, name: str, min_level: int = 1, max_level: Optional[int] = None,
                     spawns: Optional[List[Tuple]] = None) -> CreatureTemplate:
        template = CreatureTemplate(entry=entry, name=name, min_level=min_level,
                                    max_level=max_level if max_level is not None else min_level)
        self.templates[entry] = template
        for spawn in spawns or []:
            self.add_spawn(entry, *spawn)
        return template

    def add_spawn(self, creature_id: int, map_id: int, x: float, y: float, z: float = 0.0) -> CreatureSpawn:
        spawn = CreatureSpawn(guid=self._next_guid, id=creature_id, map=map_id,
                              position_x=float(x), position_y=float(y), position_z=float(z))
        self._next_guid += 1
        self.spawns[creature_id].append(spawn)
        return spawn

    def add_item(self, row: Dict[str, Any]) -> Item:
        item = decode_item_row(row)
        self.items[item.entry] = item
        return item

    def add_loot(self, creature_id: int, item: int, chance: float, min_count_or_ref: int = 1,
                 max_count: int = 1, group_id: int = 0) -> LootRow:
        row = LootRow(creature_id, item, chance, group_id, min_count_or_ref, max_count)
        self.loot[creature_id].append(row)
        return row

    def add_reference_loot(self, reference_id: int, item: int, chance: float = 100.0,
                           min_count: int = 1, max_count: int = 1) -> LootRow:
        row = LootRow(reference_id, item, chance, 0, min_count, max_count)
        self.reference_loot[reference_id].append(row)
        return row

    def add_quest_giver(self, quest_id: int, npc_id: int, name: str, ender: bool = True):
        self.quest_givers[quest_id].append(NpcRef(npc_id, name))
        if ender:
            self.quest_enders[quest_id].append(NpcRef(npc_id, name))

    @classmethod
    def from_yaml(cls, path: str) -> 'MemoryDataProvider':
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        provider = cls()
        for row in data.get('quest_template', []):
            provider.add_quest(row)
        for row in data.get('creature_template', []):
            provider.add_creature(row['Entry'], row['Name'], row.get('MinLevel', 1), row.get('MaxLevel'))
        for row in data.get('creature', []):
            provider.add_spawn(row['id'], row['map'], row['position_x'], row['position_y'], row.get('position_z', 0.0))
        for row in data.get('item_template', []):
            provider.add_item(row)
        for row in data.get('creature_loot_template', []):
            provider.add_loot(row['entry'], row['item'], row['ChanceOrQuestChance'],
                              row.get('mincountOrRef', 1), row.get('maxcount', 1), row.get('groupid', 0))
        for row in data.get('reference_loot_template', []):
            provider.add_reference_loot(row['entry'], row['item'], row.get('ChanceOrQuestChance', 100.0),
                                        row.get('mincountOrRef', 1), row.get('maxcount', 1))
        for row in data.get('creature_questrelation', []):
            provider.quest_givers[row['quest']].append(NpcRef(row['id'], provider._npc_name(row['id'])))
        for row in data.get('creature_involvedrelation', []):
            provider.quest_enders[row['quest']].append(NpcRef(row['id'], provider._npc_name(row['id'])))
        for row in data.get('playercreateinfo', []):
            provider.start_positions[(row['race'], row['class'])] = Position(
                row['position_x'], row['position_y'], row.get('position_z'), row['map'])
        provider.xp_rows = [XpRow(row['lvl'], row['xp_for_next_level'])
                            for row in data.get('player_xp_for_level', [])]

        logger.info(f"Loaded {len(provider.quests)} quests and {len(provider.templates)} creatures from {path}")
        return provider

    def _npc_name(self, npc_id: int) -> str:
        template = self.templates.get(npc_id)
        return template.name if template else f"NPC {npc_id}"

    # --- lookups ---------------------------------------------------------

    def get_quest(self, quest_id: int) -> Optional[QuestRecord]:
        return self.quests.get(quest_id)

    def get_quests_by_level(self, min_level: int, max_level: int) -> List[QuestRecord]:
        quests = [q for q in self.quests.values() if min_level <= q.min_level <= max_level]
        return sorted(quests, key=lambda q: (q.min_level, q.entry))

    def get_creature_spawns(self, creature_id: int) -> List[CreatureSpawn]:
        return list(self.spawns.get(creature_id, []))

    def get_creature_template(self, creature_id: int) -> Optional[CreatureTemplate]:
        return self.templates.get(creature_id)

    def get_quest_givers(self, quest_id: int) -> List[NpcRef]:
        return list(self.quest_givers.get(quest_id, []))

    def get_quest_enders(self, quest_id: int) -> List[NpcRef]:
        return list(self.quest_enders.get(quest_id, []))

    def get_item(self, item_id: int) -> Optional[Item]:
        return self.items.get(item_id)

    def get_loot_table(self, creature_id: int) -> List[LootRow]:
        return list(self.loot.get(creature_id, []))

    def get_reference_loot_table(self, reference_id: int) -> List[LootRow]:
        return list(self.reference_loot.get(reference_id, []))

    def get_item_droppers(self, item_id: int) -> List[int]:
        return sorted(creature_id for creature_id, rows in self.loot.items()
                      if any(r.item == item_id and r.min_count_or_ref > 0 for r in rows))

    def get_start_position(self, race_id: int, class_id: int) -> Optional[Position]:
        return self.start_positions.get((race_id, class_id))

    def get_player_xp_for_level(self) -> List[XpRow]:
        return list(self.xp_rows)
