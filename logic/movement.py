# logic/movement.py
import math
import time
from dataclasses import dataclass
from typing import Callable

from core.models import Position

# Classic movement speeds, yards per second
MOVEMENT_SPEEDS = {
    'walk': 2.5,
    'run': 7.0,
    'mount_60': 14.0,
    'mount_100': 21.0,
    'swim': 4.72,
    'flight': 32.5,
}

@dataclass(frozen=True)
class TravelInfo:
    distance: float
    travel_time_seconds: float
    speed: float
    from_coords: Position
    to_coords: Position

def calculate_distance(a: Position, b: Position) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)

def calculate_distance_3d(a: Position, b: Position) -> float:
    dz = (b.z or 0.0) - (a.z or 0.0)
    return math.sqrt((b.x - a.x) ** 2 + (b.y - a.y) ** 2 + dz ** 2)

def calculate_travel_time(a: Position, b: Position, speed: float = MOVEMENT_SPEEDS['run']) -> TravelInfo:
    # speed must be positive, callers only pass MOVEMENT_SPEEDS values
    distance = calculate_distance(a, b)
    return TravelInfo(
        distance=distance,
        travel_time_seconds=distance / speed,
        speed=speed,
        from_coords=a,
        to_coords=b,
    )

def format_travel_time(seconds: float) -> str:
    if seconds < 60:
        return f"{round(seconds)}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {round(seconds % 60)}s"

def calculate_position_at_time(a: Position, b: Position, elapsed_seconds: float,
                               speed: float = MOVEMENT_SPEEDS['run']) -> Position:
    total_time = calculate_distance(a, b) / speed
    if total_time <= 0:
        progress = 1.0
    else:
        progress = min(1.0, max(0.0, elapsed_seconds / total_time))

    z = None
    if a.z is not None and b.z is not None:
        z = a.z + (b.z - a.z) * progress

    return Position(
        x=a.x + (b.x - a.x) * progress,
        y=a.y + (b.y - a.y) * progress,
        z=z,
        map=a.map,
    )

class TravelSimulation:
    """Real-time walk between two points, driven by a wall clock."""

    def __init__(self, start: Position, destination: Position, speed: float = MOVEMENT_SPEEDS['run'],
                 clock: Callable[[], float] = time.time):
        self._clock = clock
        self.start_time = clock()
        self.start = start
        self.destination = destination
        self.speed = speed
        self.travel_info = calculate_travel_time(start, destination, speed)
        self._completed = False

    def elapsed(self) -> float:
        return self._clock() - self.start_time

    def current_position(self) -> Position:
        if self.is_completed():
            return Position(self.destination.x, self.destination.y, self.destination.z, self.start.map)
        return calculate_position_at_time(self.start, self.destination, self.elapsed(), self.speed)

    def is_completed(self) -> bool:
        if self._completed:
            return True
        self._completed = self.elapsed() >= self.travel_info.travel_time_seconds
        return self._completed

    def progress(self) -> float:
        total = self.travel_info.travel_time_seconds
        if total <= 0:
            return 1.0
        return min(1.0, self.elapsed() / total)

    def remaining_time(self) -> float:
        return max(0.0, self.travel_info.travel_time_seconds - self.elapsed())
