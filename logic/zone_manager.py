# logic/zone_manager.py
from typing import List, Optional

from core.models import POI, Position, Zone
from data_access import zones_repo
from logic.movement import calculate_distance

# POI type -> manual action id, in the order actions are offered.
POI_ACTIONS = [
    ('inn', 'go-to-inn'),
    ('class-trainer', 'go-to-class-trainer'),
    ('profession-trainer', 'go-to-profession-trainer'),
    ('vendor', 'go-to-vendor'),
    ('flight-master', 'go-to-flight-master'),
    ('bank', 'go-to-bank'),
]

# Offered everywhere, even outside any known zone.
ALWAYS_AVAILABLE_ACTIONS = ['farm-nearby-mobs', 'handle-quests']

ACTION_LABELS = {
    'go-to-inn': 'Go to the inn',
    'go-to-class-trainer': 'Go to the class trainer',
    'go-to-profession-trainer': 'Go to a profession trainer',
    'go-to-vendor': 'Go to a vendor',
    'go-to-flight-master': 'Go to the flight master',
    'go-to-bank': 'Go to the bank',
    'farm-nearby-mobs': 'Farm nearby mobs',
    'handle-quests': 'Accept / turn in quests',
}

class ZoneManager:
    def __init__(self, zones: Optional[List[Zone]] = None, pois: Optional[List[POI]] = None):
        self.zones = zones if zones is not None else zones_repo.ZONES
        self.pois = pois if pois is not None else zones_repo.POIS

    def get_current_zone(self, position: Position) -> Optional[Zone]:
        return zones_repo.get_zone_for_position(position, self.zones)

    def get_pois_in_zone(self, zone_name: str) -> List[POI]:
        return [poi for poi in self.pois if poi.zone == zone_name]

    def get_pois_by_type(self, zone_name: str, poi_type: str) -> List[POI]:
        return [poi for poi in self.pois if poi.zone == zone_name and poi.type == poi_type]

    def find_nearest_poi(self, position: Position, poi_type: str) -> Optional[POI]:
        """Closest POI of a type, looking only inside the zone the position is in."""
        zone = self.get_current_zone(position)
        if not zone:
            return None
        candidates = self.get_pois_by_type(zone.name, poi_type)
        if not candidates:
            return None
        return min(candidates, key=lambda poi: calculate_distance(position, poi.position))

    def get_available_actions(self, position: Position) -> List[str]:
        zone = self.get_current_zone(position)
        actions = []
        if zone:
            types = {poi.type for poi in self.get_pois_in_zone(zone.name)}
            actions = [action for poi_type, action in POI_ACTIONS if poi_type in types]
        return actions + ALWAYS_AVAILABLE_ACTIONS

    def get_zone_info(self, position: Position) -> str:
        zone = self.get_current_zone(position)
        if not zone:
            return 'Unknown zone'
        low, high = zone.level_range
        return f"{zone.name} ({low}-{high}) - {zone.faction}"
