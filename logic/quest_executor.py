# logic/quest_executor.py
from typing import Dict, List, Mapping, Optional, Set

import numpy as np

from core.logger import get_logger
from core.models import CreatureSpawn, GrindSpot, Position, QuestObjective, QuestProgress

logger = get_logger(__name__)

# Objective slots the executor tracks per quest.
MAX_KILL_OBJECTIVES = 4
MAX_COLLECT_OBJECTIVES = 4

def spawn_key(position: Position) -> str:
    return f"{position.x:.1f},{position.y:.1f}"

class QuestExecutor:
    """
    Tracks the single active quest: objectives, kill counts and visited spawns.
    Accepting a quest drops whatever was tracked for the previous one.
    """

    def __init__(self, provider):
        self.provider = provider
        self.current_quest: Optional[QuestProgress] = None
        self.kill_count: Dict[int, int] = {}
        self.visited_spawns: Set[str] = set()

    def accept_quest(self, quest_id: int) -> Optional[QuestProgress]:
        quest = self.provider.get_quest(quest_id)
        if not quest:
            logger.warning(f"Quest {quest_id} not found")
            return None

        objectives: List[QuestObjective] = []
        for req in quest.required_creatures[:MAX_KILL_OBJECTIVES]:
            if req.target_id <= 0 or req.count <= 0:
                continue
            template = self.provider.get_creature_template(req.target_id)
            objectives.append(QuestObjective(
                type='kill',
                required=req.count,
                creature_id=req.target_id,
                creature_name=template.name if template else 'Unknown',
            ))

        for req in quest.required_items[:MAX_COLLECT_OBJECTIVES]:
            if req.target_id <= 0 or req.count <= 0:
                continue
            item = self.provider.get_item(req.target_id)
            objectives.append(QuestObjective(
                type='collect',
                required=req.count,
                item_id=req.target_id,
                item_name=item.name if item else 'Unknown',
            ))

        self.current_quest = QuestProgress(
            quest_id=quest_id,
            quest_name=quest.title,
            status='accepted',
            objectives=objectives,
        )
        self.kill_count.clear()
        self.visited_spawns.clear()

        # Delivery quests have nothing to do before the turn-in.
        if not objectives:
            self.current_quest.status = 'completed'

        logger.info(f"Accepted quest {quest_id} '{quest.title}' with {len(objectives)} objectives")
        return self.current_quest

    # --- spots -----------------------------------------------------------

    def _rank_spawns(self, spawns: List[CreatureSpawn], player_position: Position) -> List[GrindSpot]:
        spawns = [s for s in spawns if s.map == player_position.map]
        if not spawns:
            return []

        coords = np.array([[s.position_x, s.position_y] for s in spawns], dtype=float)
        distances = np.linalg.norm(coords - np.array([player_position.x, player_position.y]), axis=1)

        spots = []
        for index in np.argsort(distances, kind='stable'):
            spawn = spawns[int(index)]
            template = self.provider.get_creature_template(spawn.id)
            spots.append(GrindSpot(
                creature_id=spawn.id,
                creature_name=template.name if template else 'Unknown',
                level=template.min_level if template else 1,
                position=spawn.position,
                distance=float(distances[index]),
            ))
        return spots

    def find_grind_spots(self, player_position: Position) -> List[GrindSpot]:
        objective = self.get_current_objective()
        if not objective or objective.type != 'kill' or not objective.creature_id:
            return []
        return self._rank_spawns(self.provider.get_creature_spawns(objective.creature_id), player_position)

    def find_loot_spots(self, player_position: Position) -> List[GrindSpot]:
        """Spawns of every creature whose loot table carries the current collect item."""
        objective = self.get_current_objective()
        if not objective or objective.type != 'collect' or not objective.item_id:
            return []

        spawns: List[CreatureSpawn] = []
        for creature_id in self.provider.get_item_droppers(objective.item_id):
            spawns.extend(self.provider.get_creature_spawns(creature_id))
        return self._rank_spawns(spawns, player_position)

    def _take_unvisited(self, spots: List[GrindSpot]) -> Optional[GrindSpot]:
        for spot in spots:
            key = spawn_key(spot.position)
            if key not in self.visited_spawns:
                self.visited_spawns.add(key)
                return spot
        return None

    def get_next_grind_spot(self, player_position: Position) -> Optional[GrindSpot]:
        return self._take_unvisited(self.find_grind_spots(player_position))

    def get_next_hunting_spot(self, player_position: Position) -> Optional[GrindSpot]:
        objective = self.get_current_objective()
        if not objective:
            return None
        if objective.type == 'kill':
            return self.get_next_grind_spot(player_position)
        if objective.type == 'collect':
            return self._take_unvisited(self.find_loot_spots(player_position))
        return None

    def reset_visited_spawns(self):
        self.visited_spawns.clear()

    # --- progress --------------------------------------------------------

    def register_kill(self, creature_id: int) -> bool:
        objective = self.get_current_objective()
        if not objective or objective.type != 'kill' or objective.creature_id != creature_id:
            return False

        self.kill_count[creature_id] = self.kill_count.get(creature_id, 0) + 1
        objective.advance(objective.current + 1)
        self._after_progress()
        return True

    def update_item_counts(self, item_counts: Mapping[int, int]) -> bool:
        """Feed inventory counts into the collect objectives. Progress never goes down."""
        if not self.current_quest or self.current_quest.status in ('completed', 'turned-in'):
            return False

        moved = False
        for objective in self.current_quest.objectives:
            if objective.type == 'collect' and objective.item_id is not None:
                moved |= objective.advance(item_counts.get(objective.item_id, 0))

        if moved:
            self._after_progress()
        return moved

    def _after_progress(self):
        quest = self.current_quest
        if quest.status == 'accepted':
            quest.status = 'in-progress'

        if all(obj.completed for obj in quest.objectives):
            quest.status = 'completed'
            logger.info(f"Quest {quest.quest_id} objectives complete")
            return

        while (quest.current_objective_index < len(quest.objectives)
               and quest.objectives[quest.current_objective_index].completed):
            quest.current_objective_index += 1

    def is_quest_complete(self) -> bool:
        return self.current_quest is not None and self.current_quest.status == 'completed'

    def turn_in_quest(self, quest_id: int) -> bool:
        if not self.current_quest or self.current_quest.quest_id != quest_id:
            return False
        if self.current_quest.status != 'completed':
            return False

        self.current_quest.status = 'turned-in'
        logger.info(f"Turned in quest {quest_id}")
        return True

    def get_quest_progress(self) -> Optional[QuestProgress]:
        return self.current_quest

    def get_current_objective(self) -> Optional[QuestObjective]:
        if not self.current_quest:
            return None
        objectives = self.current_quest.objectives
        index = self.current_quest.current_objective_index
        return objectives[index] if index < len(objectives) else None

    def is_relevant_mob(self, creature_id: int) -> bool:
        objective = self.get_current_objective()
        return objective is not None and objective.type == 'kill' and objective.creature_id == creature_id
