# data_access/spawns_repo.py
from core.db import Database
from core.logger import get_logger
from core.models import CreatureSpawn, CreatureTemplate
from typing import Any, Dict, List, Optional

logger = get_logger(__name__)

def is_valid_spawn(row: Dict[str, Any]) -> bool:
    # Rows parked at the map origin are placeholders, not real spawns.
    if abs(row['position_x']) < 0.1 and abs(row['position_y']) < 0.1:
        return False
    return True

def get_creature_spawns(db: Database, entry: int) -> List[CreatureSpawn]:
    query = "SELECT guid, id, map, position_x, position_y, position_z FROM creature WHERE id = %s"
    results = db.execute(query, (entry,))

    spawns = []
    for row in results:
        # MySQL hands back Decimal coordinates
        row['position_x'] = float(row['position_x'])
        row['position_y'] = float(row['position_y'])
        row['position_z'] = float(row['position_z'])
        if is_valid_spawn(row):
            spawns.append(CreatureSpawn(
                guid=int(row['guid']),
                id=int(row['id']),
                map=int(row['map']),
                position_x=row['position_x'],
                position_y=row['position_y'],
                position_z=row['position_z'],
            ))

    if not spawns:
        logger.warning(f"NPC {entry}: no spawns in the world database.")
    return spawns

def get_creature_template(db: Database, entry: int) -> Optional[CreatureTemplate]:
    query = "SELECT Entry, Name, MinLevel, MaxLevel, `Rank` FROM creature_template WHERE Entry = %s"
    results = db.execute(query, (entry,))
    if not results:
        return None
    row = results[0]
    return CreatureTemplate(
        entry=int(row['Entry']),
        name=row['Name'],
        min_level=int(row.get('MinLevel') or 1),
        max_level=int(row.get('MaxLevel') or row.get('MinLevel') or 1),
        rank=int(row.get('Rank') or 0),
    )
