# data_access/loot_repo.py
from core.db import Database
from core.logger import get_logger
from core.models import Item, LootRow
from typing import Any, Dict, List, Optional

logger = get_logger(__name__)

ITEM_STAT_SLOTS = 10

def decode_item_row(row: Dict[str, Any]) -> Item:
    stats = {}
    for i in range(1, ITEM_STAT_SLOTS + 1):
        stat_type = row.get(f'stat_type{i}') or 0
        stat_value = row.get(f'stat_value{i}') or 0
        if stat_type > 0 and stat_value != 0:
            stats[int(stat_type)] = stats.get(int(stat_type), 0) + int(stat_value)
    return Item(
        entry=int(row['entry']),
        name=row.get('name') or f"Item {row['entry']}",
        quality=int(row.get('Quality') or 0),
        inventory_type=int(row.get('InventoryType') or 0),
        required_level=int(row.get('RequiredLevel') or 0),
        stackable=int(row.get('stackable') or 1),
        item_class=int(row.get('class') or 0),
        subclass=int(row.get('subclass') or 0),
        allowable_class=int(row['AllowableClass']) if row.get('AllowableClass') is not None else -1,
        armor=int(row.get('armor') or 0),
        stats=stats,
    )

def _decode_loot_rows(results) -> List[LootRow]:
    return [LootRow(
        entry=int(row['entry']),
        item=int(row['item']),
        chance=float(row['ChanceOrQuestChance']),
        group_id=int(row.get('groupid') or 0),
        min_count_or_ref=int(row['mincountOrRef']),
        max_count=int(row['maxcount']),
    ) for row in results]

def get_item(db: Database, item_id: int) -> Optional[Item]:
    results = db.execute("SELECT * FROM item_template WHERE entry = %s", (item_id,))
    if not results:
        return None
    return decode_item_row(results[0])

def get_loot_table(db: Database, creature_id: int) -> List[LootRow]:
    query = """
    SELECT entry, item, ChanceOrQuestChance, groupid, mincountOrRef, maxcount
    FROM creature_loot_template
    WHERE entry = %s
    """
    return _decode_loot_rows(db.execute(query, (creature_id,)))

def get_reference_loot_table(db: Database, reference_id: int) -> List[LootRow]:
    query = """
    SELECT entry, item, ChanceOrQuestChance, groupid, mincountOrRef, maxcount
    FROM reference_loot_template
    WHERE entry = %s
    """
    return _decode_loot_rows(db.execute(query, (reference_id,)))

def resolve_loot_to_kills(db: Database, item_id: int) -> List[int]:
    """
    Returns the creature entries whose loot table carries item_id.
    """
    query = """
    SELECT DISTINCT entry
    FROM creature_loot_template
    WHERE item = %s AND mincountOrRef > 0
    """
    results = db.execute(query, (item_id,))
    entries = [int(row['entry']) for row in results]

    if entries:
        logger.info(f"Item {item_id}: {len(entries)} creatures drop it")

    return entries
