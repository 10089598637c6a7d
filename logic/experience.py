# logic/experience.py
import math
from dataclasses import dataclass
from typing import List, Optional

from core.logger import get_logger
from core.models import MAX_LEVEL

logger = get_logger(__name__)

# Cumulative XP needed to reach each level (index 0 = level 1), classic 1.12 values.
# Used when the world database has no usable player_xp_for_level table.
FALLBACK_XP_TABLE = [
    0, 400, 900, 1400, 2100, 2800, 3600, 4500, 5400, 6500,
    7600, 8700, 9800, 11000, 12300, 13600, 15000, 16400, 17800, 19300,
    20800, 22400, 24000, 25500, 27200, 28900, 30500, 32200, 33900, 36300,
    38800, 41600, 44600, 48000, 51400, 55000, 58700, 62400, 66200, 70200,
    74300, 78500, 82800, 87100, 91600, 96300, 101000, 105800, 110700, 115700,
    120900, 126100, 131500, 137000, 142500, 148200, 154000, 159900, 165800, 171900,
]

# (minimum level difference, multiplier), checked top to bottom
MOB_XP_MULTIPLIERS = [
    (5, 1.2),
    (3, 1.1),
    (-2, 1.0),
    (-4, 0.8),
    (-6, 0.5),
]

@dataclass(frozen=True)
class LevelUpResult:
    new_level: int
    # Total XP since level 1. Not re-based to the new level.
    cumulative_xp: int
    levels_gained: int

@dataclass(frozen=True)
class ExperienceStats:
    level: int
    current_xp: int
    current_level_xp: int
    next_level_xp: int
    xp_into_level: int
    xp_needed: int
    xp_remaining: int
    progress: float

class ExperienceLedger:
    """
    Level/XP bookkeeping over a cumulative threshold table.
    The table is read from the data provider on first use.
    """

    def __init__(self, provider=None, table: Optional[List[int]] = None):
        self._provider = provider
        self._table = list(table) if table is not None else None

    @property
    def table(self) -> List[int]:
        if self._table is None:
            self._table = self._load_table()
        return self._table

    def _load_table(self) -> List[int]:
        if self._provider is None:
            return list(FALLBACK_XP_TABLE)
        try:
            rows = self._provider.get_player_xp_for_level()
        except Exception as e:
            logger.warning(f"Could not load XP table from the world database ({e}), using built-in values")
            return list(FALLBACK_XP_TABLE)

        table = [0] + [row.xp for row in sorted(rows, key=lambda r: r.level)]
        table = table[:MAX_LEVEL]
        if len(table) < MAX_LEVEL or any(b <= a for a, b in zip(table, table[1:])):
            logger.warning("player_xp_for_level is incomplete or not increasing, using built-in values")
            return list(FALLBACK_XP_TABLE)

        logger.info(f"Loaded {len(table) - 1} XP thresholds from the world database")
        return table

    def xp_for_level(self, level: int) -> int:
        if level < 1 or level > MAX_LEVEL:
            return 0
        return self.table[level - 1]

    def xp_to_next_level(self, level: int, current_xp: int) -> int:
        if level >= MAX_LEVEL:
            return 0
        return max(0, self.xp_for_level(level + 1) - current_xp)

    def add_experience(self, level: int, current_xp: int, gained: int) -> LevelUpResult:
        if level >= MAX_LEVEL:
            return LevelUpResult(new_level=MAX_LEVEL, cumulative_xp=current_xp, levels_gained=0)

        xp = current_xp + gained
        levels_gained = 0
        while level < MAX_LEVEL and xp >= self.xp_for_level(level + 1):
            level += 1
            levels_gained += 1

        return LevelUpResult(new_level=level, cumulative_xp=xp, levels_gained=levels_gained)

    def progress_to_next_level(self, level: int, current_xp: int) -> float:
        if level >= MAX_LEVEL:
            return 100.0
        floor = self.xp_for_level(level)
        needed = self.xp_for_level(level + 1) - floor
        if needed <= 0:
            return 100.0
        return min(100.0, max(0.0, (current_xp - floor) / needed * 100))

    def experience_stats(self, level: int, current_xp: int) -> ExperienceStats:
        current_level_xp = self.xp_for_level(level)
        next_level_xp = self.xp_for_level(level + 1) if level < MAX_LEVEL else current_level_xp
        return ExperienceStats(
            level=level,
            current_xp=current_xp,
            current_level_xp=current_level_xp,
            next_level_xp=next_level_xp,
            xp_into_level=current_xp - current_level_xp,
            xp_needed=next_level_xp - current_level_xp,
            xp_remaining=self.xp_to_next_level(level, current_xp),
            progress=self.progress_to_next_level(level, current_xp),
        )

    @staticmethod
    def calculate_mob_xp(mob_level: int, player_level: int) -> int:
        level_diff = mob_level - player_level
        for min_diff, multiplier in MOB_XP_MULTIPLIERS:
            if level_diff >= min_diff:
                # epsilon keeps 500 * 1.2 from flooring to 599
                return math.floor(mob_level * 50 * multiplier + 1e-9)
        # gray mob
        return 0

def format_xp(xp: int) -> str:
    if xp >= 1_000_000:
        return f"{xp / 1_000_000:.1f}M"
    if xp >= 1000:
        return f"{xp / 1000:.1f}K"
    return str(xp)
