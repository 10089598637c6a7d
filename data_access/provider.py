# data_access/provider.py
from typing import Dict, List, Optional

from core.db import Database
from core.logger import get_logger
from core.models import (
    CreatureSpawn, CreatureTemplate, Item, LootRow, NpcRef, Position, QuestRecord, XpRow,
)
from data_access import loot_repo, npc_repo, player_repo, quests_repo, spawns_repo

logger = get_logger(__name__)

class WorldDataProvider:
    """
    Read-only lookups against the world database.
    Static rows (quests, templates, items) are cached after the first hit;
    spawns and loot tables go to the database every time.
    """

    def __init__(self, db: Database):
        self.db = db
        self._quests: Dict[int, Optional[QuestRecord]] = {}
        self._templates: Dict[int, Optional[CreatureTemplate]] = {}
        self._items: Dict[int, Optional[Item]] = {}

    def get_quest(self, quest_id: int) -> Optional[QuestRecord]:
        if quest_id not in self._quests:
            self._quests[quest_id] = quests_repo.get_quest(self.db, quest_id)
        return self._quests[quest_id]

    def get_quests_by_level(self, min_level: int, max_level: int) -> List[QuestRecord]:
        return quests_repo.get_quests_by_level(self.db, min_level, max_level)

    def get_creature_spawns(self, creature_id: int) -> List[CreatureSpawn]:
        return spawns_repo.get_creature_spawns(self.db, creature_id)

    def get_creature_template(self, creature_id: int) -> Optional[CreatureTemplate]:
        if creature_id not in self._templates:
            self._templates[creature_id] = spawns_repo.get_creature_template(self.db, creature_id)
        return self._templates[creature_id]

    def get_quest_givers(self, quest_id: int) -> List[NpcRef]:
        return npc_repo.get_quest_givers(self.db, quest_id)

    def get_quest_enders(self, quest_id: int) -> List[NpcRef]:
        return npc_repo.get_quest_enders(self.db, quest_id)

    def get_item(self, item_id: int) -> Optional[Item]:
        if item_id not in self._items:
            self._items[item_id] = loot_repo.get_item(self.db, item_id)
        return self._items[item_id]

    def get_loot_table(self, creature_id: int) -> List[LootRow]:
        return loot_repo.get_loot_table(self.db, creature_id)

    def get_reference_loot_table(self, reference_id: int) -> List[LootRow]:
        return loot_repo.get_reference_loot_table(self.db, reference_id)

    def get_item_droppers(self, item_id: int) -> List[int]:
        return loot_repo.resolve_loot_to_kills(self.db, item_id)

    def get_start_position(self, race_id: int, class_id: int) -> Optional[Position]:
        return player_repo.get_start_position(self.db, race_id, class_id)

    def get_player_xp_for_level(self) -> List[XpRow]:
        return player_repo.get_player_xp_for_level(self.db)
