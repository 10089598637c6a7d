# data_access/quests_repo.py
from core.db import Database
from core.logger import get_logger
from core.models import QuestRecord, QuestRequirement
from typing import Any, Dict, List, Optional

logger = get_logger(__name__)

CREATURE_SLOTS = 4
ITEM_SLOTS = 6
REWARD_SLOTS = 4
REWARD_CHOICE_SLOTS = 6

def _decode_slots(row: Dict[str, Any], id_field: str, count_field: str, slots: int,
                  allow_negative: bool = False) -> List[QuestRequirement]:
    result = []
    for i in range(1, slots + 1):
        target_id = row.get(f'{id_field}{i}') or 0
        count = row.get(f'{count_field}{i}') or 0
        if count <= 0 or target_id == 0:
            continue
        if target_id < 0 and not allow_negative:
            continue
        result.append(QuestRequirement(target_id=int(target_id), count=int(count)))
    return result

def decode_quest_row(row: Dict[str, Any]) -> QuestRecord:
    """
    Decodes a quest_template row once, at load time.
    Fixed-width slot columns (ReqItemId1..6 etc.) become typed requirement lists,
    so nothing downstream indexes columns by computed names.
    Negative ReqCreatureOrGOId values are game objects and are not kill targets.
    """
    return QuestRecord(
        entry=int(row['entry']),
        title=row.get('Title') or f"Quest {row['entry']}",
        min_level=int(row.get('MinLevel') or 1),
        quest_level=int(row.get('QuestLevel') or 1),
        required_creatures=_decode_slots(row, 'ReqCreatureOrGOId', 'ReqCreatureOrGOCount', CREATURE_SLOTS),
        required_items=_decode_slots(row, 'ReqItemId', 'ReqItemCount', ITEM_SLOTS),
        reward_items=_decode_slots(row, 'RewItemId', 'RewItemCount', REWARD_SLOTS),
        reward_choice_items=_decode_slots(row, 'RewChoiceItemId', 'RewChoiceItemCount', REWARD_CHOICE_SLOTS),
        reward_xp=int(row.get('RewXP') or 0),
        reward_money=int(row.get('RewOrReqMoney') or 0),
    )

def get_quest(db: Database, quest_id: int) -> Optional[QuestRecord]:
    results = db.execute("SELECT * FROM quest_template WHERE entry = %s", (quest_id,))
    if not results:
        return None
    return decode_quest_row(results[0])

def get_quests_by_level(db: Database, min_level: int, max_level: int) -> List[QuestRecord]:
    query = """
    SELECT *
    FROM quest_template
    WHERE MinLevel >= %s AND MinLevel <= %s
    ORDER BY MinLevel, entry
    """
    results = db.execute(query, (min_level, max_level))
    quests = [decode_quest_row(row) for row in results]
    logger.info(f"Loaded {len(quests)} quests for levels {min_level}-{max_level}")
    return quests
