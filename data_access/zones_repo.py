# data_access/zones_repo.py
from core.logger import get_logger
from core.models import POI, Position, Zone
from typing import List, Optional

logger = get_logger(__name__)

# Hand-measured bounding boxes around the starting areas.
# Subzones come before their parent zone: the first box that contains a position wins.
ZONES: List[Zone] = [
    # ---------- Eastern Kingdoms (map 0) ----------
    Zone(9, 'Northshire Valley', 0, -8960.0, -8640.0, -240.0, 0.0, (1, 5), 'Alliance', 'Elwynn Forest'),
    Zone(87, 'Goldshire', 0, -9530.0, -9400.0, 0.0, 150.0, (5, 10), 'Alliance', 'Elwynn Forest'),
    Zone(1519, 'Stormwind City', 0, -9100.0, -8300.0, 300.0, 1200.0, (1, 60), 'Alliance'),
    Zone(12, 'Elwynn Forest', 0, -10000.0, -8600.0, -1440.0, 960.0, (1, 10), 'Alliance'),

    # ---------- Kalimdor (map 1) ----------
    Zone(363, 'Valley of Trials', 1, -800.0, -400.0, -4600.0, -4100.0, (1, 5), 'Horde', 'Durotar'),
    Zone(362, 'Razor Hill', 1, 200.0, 450.0, -4850.0, -4600.0, (5, 10), 'Horde', 'Durotar'),
    Zone(14, 'Durotar', 1, -1500.0, 1600.0, -5500.0, -3700.0, (1, 10), 'Horde'),
]

POIS: List[POI] = [
    # Northshire Valley
    POI(1, 'Northshire Abbey', 'inn', 'Northshire Valley', Position(-8914.55, -135.43, 81.87, 0)),
    POI(2, 'Warrior Trainer', 'class-trainer', 'Northshire Valley', Position(-8918.78, -121.23, 82.13, 0), 913, 'Llane Beshere'),
    POI(3, 'Northshire Provisioner', 'vendor', 'Northshire Valley', Position(-8901.59, -112.72, 81.85, 0), 1213, 'Godric Rothgar'),

    # Goldshire
    POI(10, "Lion's Pride Inn", 'inn', 'Goldshire', Position(-9466.62, 45.83, 56.95, 0)),
    POI(11, 'Goldshire Warrior Trainer', 'class-trainer', 'Goldshire', Position(-9461.02, 109.05, 56.96, 0), 5113, 'Lyria Du Lac'),
    POI(12, 'Mining Trainer', 'profession-trainer', 'Goldshire', Position(-9456.31, 87.31, 56.96, 0)),
    POI(13, 'Blacksmithing Trainer', 'profession-trainer', 'Goldshire', Position(-9456.31, 87.31, 56.96, 0)),
    POI(14, 'General Goods Vendor', 'vendor', 'Goldshire', Position(-9460.05, 30.12, 56.96, 0)),

    # Stormwind City
    POI(20, 'Stormwind Bank', 'bank', 'Stormwind City', Position(-8922.26, 620.41, 99.52, 0)),
    POI(21, 'Stormwind Gryphon Master', 'flight-master', 'Stormwind City', Position(-8835.76, 490.08, 109.61, 0), 352, 'Dungar Longdrink'),
    POI(22, 'Gilded Rose', 'inn', 'Stormwind City', Position(-8867.79, 673.67, 97.90, 0)),

    # Valley of Trials / Razor Hill
    POI(30, 'Den', 'inn', 'Valley of Trials', Position(-600.13, -4186.19, 41.27, 1)),
    POI(31, 'Frang', 'class-trainer', 'Valley of Trials', Position(-639.34, -4230.19, 38.13, 1), 3153, 'Frang'),
    POI(32, 'Razor Hill Inn', 'inn', 'Razor Hill', Position(340.36, -4686.29, 16.54, 1)),
    POI(33, 'Razor Hill Vendor', 'vendor', 'Razor Hill', Position(321.40, -4780.24, 11.30, 1)),
    POI(34, 'Razor Hill Wind Rider Master', 'flight-master', 'Razor Hill', Position(350.00, -4806.00, 10.00, 1)),
]

def get_zone_for_position(position: Position, zones: Optional[List[Zone]] = None) -> Optional[Zone]:
    for zone in (ZONES if zones is None else zones):
        if zone.contains(position):
            return zone
    return None

def search_zones_by_name(partial_name: str) -> List[Zone]:
    matching = [z for z in ZONES if partial_name.lower() in z.name.lower()]
    logger.info(f"Found {len(matching)} zones matching '{partial_name}'")
    return matching
