# logic/loot.py
import random
from typing import Dict, Iterable, List, Mapping, Optional

from core.logger import get_logger
from core.models import LootDrop, LootResult, LootRow

logger = get_logger(__name__)

class LootGenerator:
    """
    Rolls creature loot tables.

    Row kinds, told apart by sign:
      - min_count_or_ref < 0: reference row, abs() is a reference_loot_template id
      - chance < 0: quest item, only rolled while an active quest still needs it
      - otherwise: plain item
    """

    def __init__(self, provider, rng: Optional[random.Random] = None):
        self.provider = provider
        self.rng = rng or random.Random()

    def generate_mob_loot(self, creature_id: int, player_level: int,
                          active_quest_ids: Iterable[int] = (),
                          item_counts: Optional[Mapping[int, int]] = None) -> LootResult:
        active_quest_ids = list(active_quest_ids)
        item_counts = item_counts or {}
        drops: List[LootDrop] = []

        gold = 0
        template = self.provider.get_creature_template(creature_id)
        if template:
            level = template.max_level or template.min_level or 1
            gold = self.rng.randrange(level * 5) + level

        for row in self.provider.get_loot_table(creature_id):
            if row.min_count_or_ref < 0:
                if self._roll(abs(row.chance)):
                    drop = self._generate_reference_loot(abs(row.min_count_or_ref))
                    if drop:
                        drops.append(drop)
                continue

            is_quest_item = row.chance < 0
            remaining_need = None
            if is_quest_item:
                remaining_need = self._remaining_quest_need(row.item, active_quest_ids, item_counts)
                if remaining_need <= 0:
                    continue

            if not self._roll(abs(row.chance)):
                continue

            item = self.provider.get_item(row.item)
            if not item:
                logger.debug(f"Loot row {creature_id}/{row.item}: item not found, skipped")
                continue

            count = self._roll_count(row)
            if remaining_need is not None:
                count = min(count, remaining_need)
            drops.append(LootDrop(item=item, count=count, is_quest_item=is_quest_item))

        return LootResult(items=drops, gold=gold)

    def player_needs_quest_item(self, item_id: int, active_quest_ids: Iterable[int],
                                item_counts: Optional[Mapping[int, int]] = None) -> bool:
        return self._remaining_quest_need(item_id, list(active_quest_ids), item_counts or {}) > 0

    def _remaining_quest_need(self, item_id: int, active_quest_ids: List[int],
                              item_counts: Mapping[int, int]) -> int:
        """Largest number of item_id still missing across the active quests (0 if none)."""
        have = item_counts.get(item_id, 0)
        need = 0
        for quest_id in active_quest_ids:
            quest = self.provider.get_quest(quest_id)
            if quest:
                need = max(need, quest.required_count_for_item(item_id) - have)
        return need

    def _generate_reference_loot(self, reference_id: int) -> Optional[LootDrop]:
        rows = self.provider.get_reference_loot_table(reference_id)
        if not rows:
            return None

        row = rows[self.rng.randrange(len(rows))]
        item = self.provider.get_item(row.item)
        if not item:
            return None
        return LootDrop(item=item, count=self._roll_count(row), is_quest_item=False)

    def _roll(self, chance: float) -> bool:
        return self.rng.uniform(0, 100) <= chance

    def _roll_count(self, row: LootRow) -> int:
        low = max(1, row.min_count_or_ref)
        high = max(low, row.max_count)
        return self.rng.randint(low, high)

    def get_quest_rewards(self, quest_id: int, include_choices: bool = True) -> List[LootDrop]:
        """Fixed reward items followed by the choice rewards, unknown items skipped."""
        quest = self.provider.get_quest(quest_id)
        if not quest:
            return []

        slots = quest.reward_items + (quest.reward_choice_items if include_choices else [])
        rewards = []
        for requirement in slots:
            item = self.provider.get_item(requirement.target_id)
            if item:
                rewards.append(LootDrop(item=item, count=requirement.count))
        return rewards

    def get_quest_gold_reward(self, quest_id: int) -> int:
        quest = self.provider.get_quest(quest_id)
        if not quest:
            return 0
        return max(0, quest.reward_money)

def summarize_loot(result: LootResult) -> Dict[int, int]:
    totals: Dict[int, int] = {}
    for drop in result.items:
        totals[drop.item.entry] = totals.get(drop.item.entry, 0) + drop.count
    return totals
