# logic/inventory.py
from typing import Dict, Iterable, Optional, Tuple

from core.logger import get_logger
from core.models import EQUIPMENT_SLOTS, InventoryState, Item, ItemInstance, LootDrop

logger = get_logger(__name__)

# item_template.InventoryType -> equipment slot
INVENTORY_TYPE_SLOTS = {
    1: 'head',
    2: 'neck',
    3: 'shoulder',
    5: 'chest',
    6: 'waist',
    7: 'legs',
    8: 'feet',
    9: 'wrist',
    10: 'hands',
    11: 'finger1',
    12: 'trinket1',
    13: 'main_hand',
    14: 'off_hand',
    15: 'ranged',
    16: 'back',
    17: 'main_hand',    # two-hand
    20: 'chest',        # robe
    21: 'main_hand',
    22: 'off_hand',
    23: 'off_hand',     # held in off-hand
}

# Slots that come in pairs; the second is used when the first is taken.
PAIRED_SLOTS = {
    'finger1': ('finger1', 'finger2'),
    'trinket1': ('trinket1', 'trinket2'),
}

# AllowableClass bitmask
CLASS_MASKS = {
    'Warrior': 1,
    'Paladin': 2,
    'Hunter': 4,
    'Rogue': 8,
    'Priest': 16,
    'Shaman': 64,
    'Mage': 128,
    'Warlock': 256,
    'Druid': 1024,
}

# item_template stat_type ids that feed the character sheet
STAT_NAMES = {
    3: 'agility',
    4: 'strength',
    5: 'intellect',
    6: 'spirit',
    7: 'stamina',
    38: 'attack_power',
    45: 'spell_power',
}

def format_gold(copper: int) -> str:
    gold, rest = divmod(copper, 10000)
    silver, copper_left = divmod(rest, 100)
    if gold > 0:
        return f"{gold}g {silver}s {copper_left}c"
    if silver > 0:
        return f"{silver}s {copper_left}c"
    return f"{copper_left}c"

def can_equip_item(item: Item, player_class: str, player_level: int) -> Tuple[bool, Optional[str]]:
    if item.required_level > player_level:
        return False, f"Requires level {item.required_level}"
    if item.allowable_class != -1 and not item.allowable_class & CLASS_MASKS.get(player_class, 0):
        return False, "Wrong class"
    return True, None

class InventorySystem:
    """Bags, equipment and copper. The state object is passed in, the system holds no state itself."""

    def __init__(self, provider):
        self.provider = provider

    def create_inventory(self) -> InventoryState:
        return InventoryState()

    def add_item(self, inventory: InventoryState, item: Item, count: int = 1) -> bool:
        if count <= 0:
            return False

        if item.stackable > 1:
            existing = self._find_in_bags(inventory, item.entry)
            if existing:
                existing.count += count
            else:
                inventory.bags.append(ItemInstance(item.entry, count))
            return True

        for _ in range(count):
            inventory.bags.append(ItemInstance(item.entry, 1))
        return True

    def add_loot(self, inventory: InventoryState, loot: Iterable[LootDrop]):
        for drop in loot:
            self.add_item(inventory, drop.item, drop.count)

    def add_gold(self, inventory: InventoryState, copper: int) -> bool:
        if inventory.gold + copper < 0:
            return False
        inventory.gold += copper
        return True

    def remove_item(self, inventory: InventoryState, item_id: int, count: int = 1) -> bool:
        if count <= 0 or self.get_item_counts(inventory).get(item_id, 0) < count:
            return False

        remaining = count
        for instance in [i for i in inventory.bags if i.item_id == item_id]:
            taken = min(instance.count, remaining)
            instance.count -= taken
            remaining -= taken
            if instance.count <= 0:
                inventory.bags.remove(instance)
            if remaining == 0:
                break
        return True

    def _find_in_bags(self, inventory: InventoryState, item_id: int) -> Optional[ItemInstance]:
        return next((i for i in inventory.bags if i.item_id == item_id), None)

    def _return_to_bags(self, inventory: InventoryState, instance: ItemInstance):
        item = self.provider.get_item(instance.item_id)
        if item:
            self.add_item(inventory, item, instance.count)
        else:
            inventory.bags.append(ItemInstance(instance.item_id, instance.count))

    def equip_item(self, inventory: InventoryState, item_id: int, player_class: str,
                   player_level: int) -> Tuple[bool, Optional[str]]:
        item = self.provider.get_item(item_id)
        if not item:
            return False, "Unknown item"

        allowed, reason = can_equip_item(item, player_class, player_level)
        if not allowed:
            return False, reason

        slot = INVENTORY_TYPE_SLOTS.get(item.inventory_type)
        if not slot:
            return False, "Item cannot be equipped"
        if not self._find_in_bags(inventory, item_id):
            return False, "Item not in inventory"

        if slot in PAIRED_SLOTS:
            first, second = PAIRED_SLOTS[slot]
            slot = second if inventory.equipment[first] and not inventory.equipment[second] else first

        self.remove_item(inventory, item_id, 1)
        previous = inventory.equipment[slot]
        inventory.equipment[slot] = ItemInstance(item_id, 1)
        if previous:
            self._return_to_bags(inventory, previous)

        logger.info(f"Equipped {item.name} in {slot}")
        return True, None

    def unequip_item(self, inventory: InventoryState, slot: str) -> bool:
        instance = inventory.equipment.get(slot)
        if not instance:
            return False
        inventory.equipment[slot] = None
        self._return_to_bags(inventory, instance)
        return True

    def calculate_equipment_stats(self, inventory: InventoryState) -> Dict[str, int]:
        stats = {name: 0 for name in STAT_NAMES.values()}
        stats['armor'] = 0

        for slot in EQUIPMENT_SLOTS:
            instance = inventory.equipment.get(slot)
            if not instance:
                continue
            item = self.provider.get_item(instance.item_id)
            if not item:
                continue
            stats['armor'] += item.armor
            for stat_type, value in item.stats.items():
                name = STAT_NAMES.get(stat_type)
                if name:
                    stats[name] += value
        return stats

    def get_item_counts(self, inventory: InventoryState) -> Dict[int, int]:
        counts: Dict[int, int] = {}
        for instance in inventory.bags:
            counts[instance.item_id] = counts.get(instance.item_id, 0) + instance.count
        return counts

    def get_inventory_summary(self, inventory: InventoryState) -> Dict[str, object]:
        return {
            'total_items': sum(i.count for i in inventory.bags),
            'unique_items': len(inventory.bags),
            'gold': format_gold(inventory.gold),
            'equipped_count': sum(1 for slot in EQUIPMENT_SLOTS if inventory.equipment.get(slot)),
        }
