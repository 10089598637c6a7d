# data_access/npc_repo.py
from core.db import Database
from core.logger import get_logger
from core.models import NpcRef
from typing import List

logger = get_logger(__name__)

def get_quest_givers(db: Database, quest_id: int) -> List[NpcRef]:
    query = """
    SELECT ct.Entry AS id, ct.Name AS name
    FROM creature_questrelation cq
    JOIN creature_template ct ON cq.id = ct.Entry
    WHERE cq.quest = %s
    """
    results = db.execute(query, (quest_id,))
    return [NpcRef(id=int(row['id']), name=row['name']) for row in results]

def get_quest_enders(db: Database, quest_id: int) -> List[NpcRef]:
    query = """
    SELECT ct.Entry AS id, ct.Name AS name
    FROM creature_involvedrelation ci
    JOIN creature_template ct ON ci.id = ct.Entry
    WHERE ci.quest = %s
    """
    results = db.execute(query, (quest_id,))
    if not results:
        logger.debug(f"Quest {quest_id}: no creature ender")
    return [NpcRef(id=int(row['id']), name=row['name']) for row in results]
