# data_access/player_repo.py
from core.db import Database
from core.models import Position, XpRow
from typing import List, Optional

def get_start_position(db: Database, race_id: int, class_id: int) -> Optional[Position]:
    query = """
    SELECT map, position_x, position_y, position_z
    FROM playercreateinfo
    WHERE race = %s AND class = %s
    LIMIT 1
    """
    results = db.execute(query, (race_id, class_id))
    if not results:
        return None
    row = results[0]
    return Position(float(row['position_x']), float(row['position_y']), float(row['position_z']), int(row['map']))

def get_player_xp_for_level(db: Database) -> List[XpRow]:
    results = db.execute("SELECT lvl, xp_for_next_level FROM player_xp_for_level ORDER BY lvl")
    return [XpRow(level=int(row['lvl']), xp=int(row['xp_for_next_level'])) for row in results]
