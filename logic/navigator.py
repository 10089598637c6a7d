# logic/navigator.py
from dataclasses import dataclass
from typing import Iterable, Optional

from core.logger import get_logger
from core.models import Position
from logic.guide_loader import GuideLoader, GuideStep
from logic.movement import MOVEMENT_SPEEDS, TravelInfo, calculate_travel_time, format_travel_time

logger = get_logger(__name__)

RACE_IDS = {
    'Human': 1,
    'Orc': 2,
    'Dwarf': 3,
    'Night Elf': 4,
    'Undead': 5,
    'Tauren': 6,
    'Gnome': 7,
    'Troll': 8,
}

CLASS_IDS = {
    'Warrior': 1,
    'Paladin': 2,
    'Hunter': 3,
    'Rogue': 4,
    'Priest': 5,
    'Shaman': 7,
    'Mage': 8,
    'Warlock': 9,
    'Druid': 11,
}

# First quest per race, used at level 1 when the guide has nothing.
STARTER_QUESTS = {
    'Human': 7,        # Kobold Camp Cleanup
    'Dwarf': 179,      # Dwarven Outfitters
    'Night Elf': 456,  # The Balance of Nature
    'Gnome': 234,
    'Orc': 4641,       # Your Place In The World
    'Undead': 363,     # Rude Awakening
    'Tauren': 747,     # The Hunt Begins
    'Troll': 4641,
}

@dataclass
class QuestDestination:
    type: str          # 'quest-giver', 'quest-ender', 'travel', 'grind-spot'
    coords: Position
    zone: str
    description: str
    quest_id: Optional[int] = None
    npc_id: Optional[int] = None
    npc_name: Optional[str] = None

@dataclass
class NavigationStep:
    destination: QuestDestination
    travel_info: TravelInfo
    estimated_arrival: str

class QuestNavigator:
    """Turns the leveling guide into concrete places to walk to."""

    def __init__(self, provider, guide_loader: Optional[GuideLoader] = None):
        self.provider = provider
        self.guide_loader = guide_loader or GuideLoader()

    def get_start_position(self, race: str, class_name: str) -> Optional[Position]:
        race_id = RACE_IDS.get(race)
        class_id = CLASS_IDS.get(class_name)
        if race_id is None or class_id is None:
            logger.warning(f"Unknown race/class combination: {race} {class_name}")
            return None
        return self.provider.get_start_position(race_id, class_id)

    def get_next_destination(self, race: str, level: int, zone: Optional[str],
                             completed_quest_ids: Iterable[int] = ()) -> Optional[QuestDestination]:
        completed = set(completed_quest_ids)
        step = self.guide_loader.get_next_step(race, level, zone, completed)

        if not step and level == 1:
            quest_id = STARTER_QUESTS.get(race)
            if quest_id is None or quest_id in completed:
                return None
            return self._giver_destination(quest_id, zone or '')

        if not step:
            return None
        return self._resolve_step(step, completed)

    def _resolve_step(self, step: GuideStep, completed: set) -> Optional[QuestDestination]:
        for objective in step.objectives:
            if objective.quest_id is None or objective.quest_id in completed:
                continue
            if objective.location is None:
                return self._giver_destination(objective.quest_id, step.zone)
            return QuestDestination(
                type='quest-giver' if objective.type == 'acceptQuest' else 'quest-ender',
                coords=objective.location,
                zone=step.zone,
                description=objective.quest_name or step.description,
                quest_id=objective.quest_id,
                npc_id=objective.npc_id,
                npc_name=objective.npc_name,
            )

        if step.quest_id is not None and step.quest_id not in completed:
            return self._giver_destination(step.quest_id, step.zone)
        return None

    def _giver_destination(self, quest_id: int, zone: str) -> Optional[QuestDestination]:
        """Resolve a quest id to the first spawn of its first quest giver."""
        quest = self.provider.get_quest(quest_id)
        if not quest:
            logger.warning(f"Guide references unknown quest {quest_id}")
            return None

        givers = self.provider.get_quest_givers(quest_id)
        if not givers:
            return None
        giver = givers[0]

        spawns = self.provider.get_creature_spawns(giver.id)
        if not spawns:
            return None

        return QuestDestination(
            type='quest-giver',
            coords=spawns[0].position,
            zone=zone,
            description=f"Accept quest: {quest.title}",
            quest_id=quest_id,
            npc_id=giver.id,
            npc_name=giver.name,
        )

    def calculate_navigation_step(self, position: Position, destination: QuestDestination,
                                  speed: float = MOVEMENT_SPEEDS['run']) -> NavigationStep:
        travel_info = calculate_travel_time(position, destination.coords, speed)
        return NavigationStep(
            destination=destination,
            travel_info=travel_info,
            estimated_arrival=format_travel_time(travel_info.travel_time_seconds),
        )

    def plan_next_move(self, race: str, level: int, zone: Optional[str], position: Position,
                       completed_quest_ids: Iterable[int] = ()) -> Optional[NavigationStep]:
        destination = self.get_next_destination(race, level, zone, completed_quest_ids)
        if not destination:
            return None
        return self.calculate_navigation_step(position, destination)
