# logic/engine.py
import copy
import random
import time
from collections import deque
from dataclasses import dataclass
from functools import partial
from typing import Callable, Dict, List, Optional, Set

from core.config import EngineSettings
from core.logger import get_logger
from core.models import MAX_LEVEL, Character, GameEngineState, GrindSpot, InventoryState, Position
from logic.clustering import cluster_spawns, nearest_cluster
from logic.experience import ExperienceLedger
from logic.guide_loader import GuideLoader
from logic.inventory import InventorySystem, format_gold
from logic.loot import LootGenerator
from logic.movement import MOVEMENT_SPEEDS, TravelSimulation, calculate_distance, format_travel_time
from logic.navigator import QuestDestination, QuestNavigator
from logic.quest_executor import QuestExecutor
from logic.zone_manager import ACTION_LABELS, ZoneManager

logger = get_logger(__name__)

STATES = ('idle', 'traveling', 'combat', 'looting', 'turning-in-quest')
MODES = ('auto', 'manual')

# manual action id -> (POI type, name used in "not found" messages)
POI_TRAVEL_ACTIONS = {
    'go-to-inn': ('inn', 'inn'),
    'go-to-class-trainer': ('class-trainer', 'class trainer'),
    'go-to-profession-trainer': ('profession-trainer', 'profession trainer'),
    'go-to-vendor': ('vendor', 'vendor'),
    'go-to-flight-master': ('flight-master', 'flight master'),
    'go-to-bank': ('bank', 'bank'),
}

@dataclass
class CombatRecord:
    spot: GrindSpot
    start_time: float
    end_time: float

class GameEngine:
    """
    Drives one character: travel, quest pickup, grinding, combat and turn-ins.

    Everything happens inside tick(). Combat is a record with a deadline that
    the tick resolves, so nothing fires while paused or after stop().
    """

    def __init__(self, character: Character, provider,
                 settings: Optional[EngineSettings] = None,
                 zone_manager: Optional[ZoneManager] = None,
                 ledger: Optional[ExperienceLedger] = None,
                 loot: Optional[LootGenerator] = None,
                 inventory_system: Optional[InventorySystem] = None,
                 navigator: Optional[QuestNavigator] = None,
                 executor: Optional[QuestExecutor] = None,
                 clock: Callable[[], float] = time.time,
                 rng: Optional[random.Random] = None,
                 on_state_change: Optional[Callable[[GameEngineState], None]] = None):
        self.settings = (settings or EngineSettings()).validate()
        self.provider = provider
        self.clock = clock
        self.rng = rng or random.Random()
        self.zone_manager = zone_manager or ZoneManager()
        self.ledger = ledger or ExperienceLedger(provider)
        self.loot = loot or LootGenerator(provider, self.rng)
        self.inventory_system = inventory_system or InventorySystem(provider)
        self.navigator = navigator or QuestNavigator(provider, GuideLoader(self.settings.guide_path))
        self.executor = executor or QuestExecutor(provider)
        self.on_state_change = on_state_change

        self.character = character
        self.inventory: InventoryState = self.inventory_system.create_inventory()
        self.mode = 'manual'
        self.current_state = 'idle'
        self.current_zone: Optional[str] = None
        self.current_quest = None
        self.current_destination: Optional[Position] = None
        self.destination_name: Optional[str] = None
        self.travel_start_time: Optional[float] = None
        self.travel_end_time: Optional[float] = None
        self.combat: Optional[CombatRecord] = None
        self.action_log = deque(maxlen=self.settings.log_capacity)
        self.log_total = 0
        self.available_actions: List[str] = []
        self.is_paused = False
        self.running = False

        self.completed_quest_ids: Set[int] = set()
        # Quests that could not be accepted, finished or turned in; the navigator skips them.
        self.skipped_quest_ids: Set[int] = set()
        self._travel: Optional[TravelSimulation] = None
        self._grind_target: Optional[GrindSpot] = None
        self._quest_source: Optional[QuestDestination] = None

        start = self.navigator.get_start_position(character.race, character.char_class)
        if start:
            self.character.position = start
        if not self.character.experience_to_next:
            self.character.experience_to_next = self.ledger.xp_to_next_level(
                character.level, character.experience)

    # --- lifecycle -------------------------------------------------------

    def start(self):
        self.running = True
        pos = self.character.position
        self.log(f"Game engine started for {self.character.name}")
        self.log(f"Starting position: ({pos.x:.1f}, {pos.y:.1f})")
        self._update_zone()

        if self.mode == 'manual':
            self.log("Manual mode: waiting for player input")
            self._update_available_actions(announce=True)
        else:
            self._start_next_quest()
        self._notify()

    def stop(self):
        if not self.running:
            return
        self.running = False
        if self.combat:
            self.log(f"Combat with {self.combat.spot.creature_name} abandoned")
            self.combat = None
            self.current_state = 'idle'
        self.log("Game engine stopped")
        self._notify()

    def run(self, max_ticks: Optional[int] = None):
        """Blocking loop, one tick per tick_interval, until stop() or max_ticks."""
        if not self.running:
            self.start()
        ticks = 0
        while self.running and (max_ticks is None or ticks < max_ticks):
            time.sleep(self.settings.tick_interval)
            self.tick()
            ticks += 1

    def pause(self):
        self.is_paused = True
        self.log("Game paused")
        self._notify()

    def resume(self):
        self.is_paused = False
        self.log("Game resumed")
        self._notify()

    def set_mode(self, mode: str):
        if mode not in MODES:
            raise ValueError(f"Unknown mode: {mode}")
        self.mode = mode
        self.log(f"Mode changed to: {mode}")

        if mode == 'auto':
            if self.running and self.current_state == 'idle':
                self._decide_next_action()
        else:
            self._update_available_actions(announce=True)
        self._notify()

    # --- tick ------------------------------------------------------------

    def tick(self, now: Optional[float] = None):
        if not self.running or self.is_paused:
            return
        now = self.clock() if now is None else now

        if self.current_state == 'traveling':
            self._update_travel(now)
        elif self.current_state == 'combat':
            self._update_combat(now)
        elif self.current_state == 'turning-in-quest':
            self._update_quest_turn_in(now)
        elif self.current_state == 'idle' and self.mode == 'auto':
            self._decide_next_action()

        self._notify()

    def _update_travel(self, now: float):
        if self.travel_end_time is None or now < self.travel_end_time:
            return
        self._arrive()
        self.current_state = 'idle'
        if self.mode == 'manual':
            self._update_available_actions(announce=True)

    def _update_combat(self, now: float):
        if self.combat is None or now < self.combat.end_time:
            return
        combat = self.combat
        self.combat = None
        self._resolve_combat(combat.spot)
        self.current_state = 'idle'

    def _update_quest_turn_in(self, now: float):
        if self.travel_end_time is None or now < self.travel_end_time:
            return
        self._arrive()
        self._turn_in_current_quest()
        self.current_state = 'idle'

    # --- movement --------------------------------------------------------

    def _travel_to(self, destination: Position, name: str, state: str = 'traveling'):
        speed = MOVEMENT_SPEEDS.get(self.settings.movement_speed, MOVEMENT_SPEEDS['run'])
        self._travel = TravelSimulation(self.character.position, destination, speed, self.clock)
        info = self._travel.travel_info

        self.log(f"Traveling to {name} ({info.distance:.1f} yards, {format_travel_time(info.travel_time_seconds)})")
        self.current_state = state
        self.current_destination = destination
        self.destination_name = name
        self.travel_start_time = self._travel.start_time
        self.travel_end_time = self._travel.start_time + info.travel_time_seconds

    def _arrive(self):
        destination = self.current_destination
        if destination is not None:
            if destination.map is None:
                destination = Position(destination.x, destination.y, destination.z, self.character.position.map)
            self.character.position = destination
        self.log(f"Arrived at {self.destination_name or 'destination'}")
        self._update_zone()

        self._travel = None
        self.current_destination = None
        self.destination_name = None
        self.travel_start_time = None
        self.travel_end_time = None

    def travel_progress(self) -> float:
        return self._travel.progress() if self._travel else 0.0

    def travel_to_coordinates(self, position: Position, name: str) -> bool:
        if self.current_state != 'idle':
            self.log("Cannot travel while busy")
            self._notify()
            return False
        self._travel_to(position, name)
        self._notify()
        return True

    def _in_range(self, position: Position) -> bool:
        here = self.character.position
        if position.map is not None and here.map is not None and position.map != here.map:
            return False
        return calculate_distance(here, position) <= self.settings.interact_range

    # --- zone ------------------------------------------------------------

    def _update_zone(self):
        zone = self.zone_manager.get_current_zone(self.character.position)
        new_zone = zone.name if zone else None
        if new_zone == self.current_zone:
            return

        old_zone = self.current_zone
        self.current_zone = new_zone
        if old_zone and new_zone:
            self.log(f"Entered {new_zone}")
        elif new_zone:
            self.log(f"Current zone: {new_zone}")
        self._update_available_actions()

    def _update_available_actions(self, announce: bool = False):
        self.available_actions = self.zone_manager.get_available_actions(self.character.position)
        if announce and self.mode == 'manual':
            self.log("Available actions: " + ", ".join(
                f"[{i}] {ACTION_LABELS.get(a, a)}" for i, a in enumerate(self.available_actions, 1)))

    # --- auto mode -------------------------------------------------------

    def _decide_next_action(self):
        if not self.current_quest:
            self._start_next_quest()
        elif self.executor.is_quest_complete():
            self._return_to_quest_giver()
        else:
            self._continue_grinding()

    def _start_next_quest(self):
        destination = self.navigator.get_next_destination(
            self.character.race, self.character.level, self.current_zone,
            self.completed_quest_ids | self.skipped_quest_ids)

        if not destination:
            self.log("No more quests available")
            if self.mode == 'auto':
                self.stop()
            return

        if not self._in_range(destination.coords):
            self._travel_to(destination.coords, destination.npc_name or destination.description)
            return

        quest = self.executor.accept_quest(destination.quest_id)
        if not quest:
            self.log(f"Quest {destination.quest_id} is not in the world database, skipping it")
            self.skipped_quest_ids.add(destination.quest_id)
            return

        self.current_quest = quest
        self._quest_source = destination
        self._grind_target = None
        self.log(f"Quest accepted: {quest.quest_name}")
        for index, objective in enumerate(quest.objectives, 1):
            self.log(f"  [{index}] {objective.type}: {objective.required}x {objective.target_name}")

    def _continue_grinding(self):
        spot = self._grind_target
        if spot is None:
            spot = self._next_hunting_spot()
            if spot is None:
                return
            self._grind_target = spot

        distance = calculate_distance(self.character.position, spot.position)
        if distance > self.settings.interact_range:
            self._travel_to(spot.position, f"grind spot ({distance:.1f} yards)")
        else:
            self._check_for_mob(spot)

    def _next_hunting_spot(self) -> Optional[GrindSpot]:
        spot = self.executor.get_next_hunting_spot(self.character.position)
        if spot is None and self.executor.visited_spawns:
            self.log("All spawn points visited, starting a new sweep")
            self.executor.reset_visited_spawns()
            spot = self.executor.get_next_hunting_spot(self.character.position)
        if spot is not None:
            return spot

        self.log("No more grind spots available")
        if self.executor.is_quest_complete():
            self._return_to_quest_giver()
        else:
            quest = self.current_quest
            self.log(f"Abandoning {quest.quest_name}: nothing to hunt on this map")
            self.skipped_quest_ids.add(quest.quest_id)
            self.current_quest = None
        return None

    def _check_for_mob(self, spot: GrindSpot):
        if self.rng.random() < self.settings.mob_presence_chance:
            duration = self.rng.uniform(self.settings.combat_min_seconds, self.settings.combat_max_seconds)
            now = self.clock()
            self.combat = CombatRecord(spot=spot, start_time=now, end_time=now + duration)
            self.current_state = 'combat'
            self.log(f"Found {spot.creature_name}! Engaging in combat...")
        else:
            self.log("No mob at this spawn point")
            self._grind_target = None

    def _resolve_combat(self, spot: GrindSpot):
        self._grind_target = None
        self.log(f"{spot.creature_name} defeated!")

        self.executor.register_kill(spot.creature_id)

        mob_level = spot.level or self.character.level
        xp = self.ledger.calculate_mob_xp(mob_level, self.character.level)
        if xp > 0:
            self.award_experience(xp, f"{spot.creature_name} ({mob_level})")

        active_quests = [self.current_quest.quest_id] if self.current_quest else []
        counts = self.inventory_system.get_item_counts(self.inventory)
        loot = self.loot.generate_mob_loot(spot.creature_id, self.character.level, active_quests, counts)
        self.inventory_system.add_loot(self.inventory, loot.items)
        self.inventory_system.add_gold(self.inventory, loot.gold)
        for drop in loot.items:
            self.log(f"Looted {drop.count}x {drop.item.name}")
        if loot.gold:
            self.log(f"Looted {format_gold(loot.gold)}")

        self.executor.update_item_counts(self.inventory_system.get_item_counts(self.inventory))
        self._log_quest_progress()

    def _log_quest_progress(self):
        if not self.current_quest:
            return
        if self.executor.is_quest_complete():
            self.log(f"All objectives of {self.current_quest.quest_name} done")
            return
        objective = self.executor.get_current_objective()
        if objective:
            self.log(f"Progress: {objective.current}/{objective.required} {objective.target_name}")

    # --- turn-in ---------------------------------------------------------

    def _quest_ender_position(self) -> Position:
        quest_id = self.current_quest.quest_id
        for npc in self.provider.get_quest_enders(quest_id) + self.provider.get_quest_givers(quest_id):
            spawns = self.provider.get_creature_spawns(npc.id)
            if spawns:
                return spawns[0].position
        if self._quest_source and self._quest_source.quest_id == quest_id:
            return self._quest_source.coords
        return self.character.position

    def _return_to_quest_giver(self):
        if not self.current_quest:
            return
        self.log("Quest objectives complete! Returning to turn in...")
        self._travel_to(self._quest_ender_position(), "quest giver", state='turning-in-quest')

    def _turn_in_current_quest(self):
        quest = self.current_quest
        if not quest:
            return

        if self.executor.turn_in_quest(quest.quest_id):
            self.log(f"Quest completed: {quest.quest_name}")
            self.completed_quest_ids.add(quest.quest_id)
            self._grant_quest_rewards(quest.quest_id)
        else:
            self.log(f"Could not turn in {quest.quest_name}")
            self.skipped_quest_ids.add(quest.quest_id)

        self.current_quest = None
        self._quest_source = None
        self._grind_target = None

    def _grant_quest_rewards(self, quest_id: int):
        record = self.provider.get_quest(quest_id)
        if not record:
            return

        for requirement in record.required_items:
            have = self.inventory_system.get_item_counts(self.inventory).get(requirement.target_id, 0)
            if have:
                self.inventory_system.remove_item(self.inventory, requirement.target_id,
                                                  min(have, requirement.count))

        if record.reward_xp > 0:
            self.award_experience(record.reward_xp, record.title)

        gold = self.loot.get_quest_gold_reward(quest_id)
        if gold:
            self.inventory_system.add_gold(self.inventory, gold)
            self.log(f"Received {format_gold(gold)}")

        rewards = self.loot.get_quest_rewards(quest_id, include_choices=False)
        self.inventory_system.add_loot(self.inventory, rewards)
        for drop in rewards:
            self.log(f"Received {drop.count}x {drop.item.name}")

    # --- experience ------------------------------------------------------

    def award_experience(self, xp_gained: int, source: str):
        old_level = self.character.level
        if old_level >= MAX_LEVEL:
            return

        result = self.ledger.add_experience(old_level, self.character.experience, xp_gained)
        self.character.level = result.new_level
        self.character.experience = result.cumulative_xp
        self.character.experience_to_next = self.ledger.xp_to_next_level(result.new_level, result.cumulative_xp)

        stats = self.ledger.experience_stats(result.new_level, result.cumulative_xp)
        self.log(f"+{xp_gained} XP from {source} ({stats.xp_into_level}/{stats.xp_needed})")

        for level in range(old_level + 1, result.new_level + 1):
            self.log(f"LEVEL UP! You are now level {level}!")

    # --- manual mode -----------------------------------------------------

    def execute_action(self, action: str) -> bool:
        if self.current_state != 'idle':
            self.log("Cannot execute action while busy")
            self._notify()
            return False

        handlers: Dict[str, Callable[[], None]] = {
            action_id: partial(self._go_to_poi, poi_type, label)
            for action_id, (poi_type, label) in POI_TRAVEL_ACTIONS.items()
        }
        handlers['farm-nearby-mobs'] = self._farm_nearby_mobs
        handlers['handle-quests'] = self._handle_quests
        handler = handlers.get(action)

        if handler is None:
            self.log(f"Unknown action: {action}")
            self._notify()
            return False

        self.log(f"Executing: {ACTION_LABELS.get(action, action)}")
        handler()
        self._notify()
        return True

    def _go_to_poi(self, poi_type: str, label: str):
        poi = self.zone_manager.find_nearest_poi(self.character.position, poi_type)
        if poi:
            self._travel_to(poi.position, poi.name)
        else:
            self.log(f"No {label} found in this zone")

    def _farm_nearby_mobs(self):
        objective = self.executor.get_current_objective()
        if objective is None:
            self.log("Nothing to farm: no active quest objective")
            return

        if objective.type == 'kill':
            creature_ids = [objective.creature_id]
        else:
            creature_ids = self.provider.get_item_droppers(objective.item_id)

        here = self.character.position
        spawns = [s for creature_id in creature_ids
                  for s in self.provider.get_creature_spawns(creature_id) if s.map == here.map]
        cluster = nearest_cluster(cluster_spawns(spawns), here)
        if cluster is None:
            self.log(f"No {objective.target_name} spawns on this map")
            return

        self.log(f"Found a camp of {cluster.spawn_count} spawns for {objective.target_name}")
        self._travel_to(cluster.center, f"{objective.target_name} camp")

    def _handle_quests(self):
        if self.current_quest and self.executor.is_quest_complete():
            self._return_to_quest_giver()
        elif not self.current_quest:
            self._start_next_quest()
        else:
            self._log_quest_progress()

    # --- output ----------------------------------------------------------

    def log(self, message: str):
        timestamp = time.strftime('%H:%M:%S', time.localtime(self.clock()))
        self.action_log.append(f"[{timestamp}] {message}")
        self.log_total += 1
        logger.info(message)

    def get_state(self) -> GameEngineState:
        return GameEngineState(
            character=copy.deepcopy(self.character),
            mode=self.mode,
            current_state=self.current_state,
            current_zone=self.current_zone,
            current_quest=copy.deepcopy(self.current_quest),
            current_destination=self.current_destination,
            destination_name=self.destination_name,
            travel_start_time=self.travel_start_time,
            travel_end_time=self.travel_end_time,
            combat_start_time=self.combat.start_time if self.combat else None,
            combat_end_time=self.combat.end_time if self.combat else None,
            action_log=tuple(self.action_log),
            available_actions=tuple(self.available_actions),
            is_paused=self.is_paused,
            gold=self.inventory.gold,
            inventory=copy.deepcopy(self.inventory),
        )

    def _notify(self):
        if self.on_state_change:
            self.on_state_change(self.get_state())
