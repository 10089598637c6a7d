# core/models.py
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

MAX_LEVEL = 60

@dataclass(frozen=True)
class Position:
    x: float
    y: float
    z: Optional[float] = None
    map: Optional[int] = None

@dataclass
class Character:
    name: str
    race: str
    char_class: str
    level: int = 1
    # Cumulative XP since level 1, not progress inside the current level.
    experience: int = 0
    experience_to_next: int = 0
    position: Position = field(default_factory=lambda: Position(0.0, 0.0))

@dataclass(frozen=True)
class QuestRequirement:
    target_id: int
    count: int

@dataclass
class QuestRecord:
    entry: int
    title: str
    min_level: int = 1
    quest_level: int = 1
    # Decoded ReqCreatureOrGOId1..4 / ReqItemId1..6 / RewItemId1..4 / RewChoiceItemId1..6,
    # empty slots dropped, slot order kept.
    required_creatures: List[QuestRequirement] = field(default_factory=list)
    required_items: List[QuestRequirement] = field(default_factory=list)
    reward_items: List[QuestRequirement] = field(default_factory=list)
    reward_choice_items: List[QuestRequirement] = field(default_factory=list)
    reward_xp: int = 0
    reward_money: int = 0

    def required_count_for_item(self, item_id: int) -> int:
        return max((r.count for r in self.required_items if r.target_id == item_id), default=0)

@dataclass
class QuestObjective:
    type: str          # 'kill', 'collect', 'interact'
    required: int
    creature_id: Optional[int] = None
    creature_name: Optional[str] = None
    item_id: Optional[int] = None
    item_name: Optional[str] = None
    current: int = 0
    completed: bool = False

    def advance(self, value: int) -> bool:
        """Raise progress to `value` (clamped). Returns True if progress moved."""
        new_value = min(max(self.current, value), self.required)
        moved = new_value != self.current
        self.current = new_value
        self.completed = self.current >= self.required
        return moved

    @property
    def target_name(self) -> str:
        return self.creature_name or self.item_name or 'Unknown'

@dataclass
class QuestProgress:
    quest_id: int
    quest_name: str
    status: str = 'accepted'   # 'accepted', 'in-progress', 'completed', 'turned-in'
    objectives: List[QuestObjective] = field(default_factory=list)
    current_objective_index: int = 0

@dataclass
class CreatureTemplate:
    entry: int
    name: str
    min_level: int = 1
    max_level: int = 1
    rank: int = 0

@dataclass
class CreatureSpawn:
    guid: int
    id: int
    map: int
    position_x: float
    position_y: float
    position_z: float = 0.0

    @property
    def position(self) -> Position:
        return Position(self.position_x, self.position_y, self.position_z, self.map)

@dataclass
class NpcRef:
    id: int
    name: str

@dataclass
class Item:
    entry: int
    name: str
    quality: int = 1
    inventory_type: int = 0
    required_level: int = 0
    stackable: int = 1
    item_class: int = 0
    subclass: int = 0
    allowable_class: int = -1
    armor: int = 0
    stats: Dict[int, int] = field(default_factory=dict)   # stat_type -> value

@dataclass
class LootRow:
    entry: int
    item: int
    # Negative chance marks a quest item; a negative min count is a reference table id.
    chance: float
    group_id: int = 0
    min_count_or_ref: int = 1
    max_count: int = 1

@dataclass
class XpRow:
    level: int
    xp: int

@dataclass
class GrindSpot:
    creature_id: int
    creature_name: str
    level: int
    position: Position
    distance: float

@dataclass
class LootDrop:
    item: Item
    count: int
    is_quest_item: bool = False

@dataclass
class LootResult:
    items: List[LootDrop] = field(default_factory=list)
    gold: int = 0

@dataclass
class ItemInstance:
    item_id: int
    count: int = 1

EQUIPMENT_SLOTS = (
    'head', 'neck', 'shoulder', 'back', 'chest', 'wrist',
    'hands', 'waist', 'legs', 'feet', 'finger1', 'finger2',
    'trinket1', 'trinket2', 'main_hand', 'off_hand', 'ranged',
)

@dataclass
class InventoryState:
    bags: List[ItemInstance] = field(default_factory=list)
    equipment: Dict[str, Optional[ItemInstance]] = field(
        default_factory=lambda: {slot: None for slot in EQUIPMENT_SLOTS})
    gold: int = 0    # copper

@dataclass(frozen=True)
class GameEngineState:
    character: Character
    mode: str                 # 'auto', 'manual'
    current_state: str        # 'idle', 'traveling', 'combat', 'looting', 'turning-in-quest'
    current_zone: Optional[str]
    current_quest: Optional[QuestProgress]
    current_destination: Optional[Position]
    destination_name: Optional[str]
    travel_start_time: Optional[float]
    travel_end_time: Optional[float]
    combat_start_time: Optional[float]
    combat_end_time: Optional[float]
    action_log: Tuple[str, ...]
    available_actions: Tuple[str, ...]
    is_paused: bool
    gold: int = 0
    inventory: Optional[InventoryState] = None

@dataclass(frozen=True)
class Zone:
    id: int
    name: str
    map: int
    # World X runs north(+)/south(-), world Y west(+)/east(-).
    min_x: float
    max_x: float
    min_y: float
    max_y: float
    level_range: Tuple[int, int] = (1, MAX_LEVEL)
    faction: str = 'Contested'   # 'Alliance', 'Horde', 'Contested'
    parent_zone: Optional[str] = None

    def contains(self, position: Position) -> bool:
        if position.map is not None and position.map != self.map:
            return False
        return self.min_x <= position.x <= self.max_x and self.min_y <= position.y <= self.max_y

@dataclass(frozen=True)
class POI:
    id: int
    name: str
    type: str     # 'inn', 'class-trainer', 'profession-trainer', 'vendor', 'quest-giver', 'flight-master', 'bank'
    zone: str
    position: Position
    npc_id: Optional[int] = None
    npc_name: Optional[str] = None

@dataclass(frozen=True)
class FarmCluster:
    center: Position
    radius: float
    spawn_count: int
