# logic/guide_loader.py
import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from core.config import ConfigError
from core.logger import get_logger
from core.models import Position

logger = get_logger(__name__)

DEFAULT_GUIDE_PATH = 'resources/guides.json'

@dataclass
class GuideObjective:
    type: str
    description: str = ''
    quest_id: Optional[int] = None
    quest_name: Optional[str] = None
    npc_id: Optional[int] = None
    npc_name: Optional[str] = None
    location: Optional[Position] = None

@dataclass
class GuideStep:
    id: int
    type: str        # 'quest', 'travel', 'grind', 'turnin', 'accept'
    zone: str
    description: str = ''
    recommended_level: int = 1
    quest_id: Optional[int] = None
    objectives: List[GuideObjective] = field(default_factory=list)

    def quest_ids(self) -> List[int]:
        ids = [o.quest_id for o in self.objectives if o.quest_id is not None]
        if self.quest_id is not None:
            ids.append(self.quest_id)
        return ids

    def has_quest_link(self) -> bool:
        return self.type == 'quest' or any(o.quest_id is not None for o in self.objectives)

@dataclass
class GuideSegment:
    level_range: Tuple[int, int]
    zone: str
    steps: List[GuideStep] = field(default_factory=list)

    def covers(self, level: int) -> bool:
        return self.level_range[0] <= level <= self.level_range[1]

@dataclass
class LevelingGuide:
    race: str
    faction: str
    start_zone: str
    starting_level: int = 1
    target_level: int = 60
    segments: List[GuideSegment] = field(default_factory=list)

def _parse_location(raw: Optional[Dict[str, Any]]) -> Optional[Position]:
    if not raw:
        return None
    return Position(float(raw['x']), float(raw['y']), raw.get('z'), raw.get('map'))

def _parse_guide(raw: Dict[str, Any]) -> LevelingGuide:
    segments = []
    for seg in raw.get('segments', []):
        steps = []
        for step in seg.get('steps', []):
            objectives = [
                GuideObjective(
                    type=obj.get('type', ''),
                    description=obj.get('description', ''),
                    quest_id=obj.get('questId'),
                    quest_name=obj.get('questName'),
                    npc_id=obj.get('npcId'),
                    npc_name=obj.get('npcName'),
                    location=_parse_location(obj.get('location')),
                )
                for obj in step.get('objectives', [])
            ]
            steps.append(GuideStep(
                id=step['id'],
                type=step.get('type', 'quest'),
                zone=step.get('zone', seg.get('zone', '')),
                description=step.get('description', ''),
                recommended_level=step.get('recommendedLevel', 1),
                quest_id=step.get('questId'),
                objectives=objectives,
            ))
        low, high = seg['levelRange']
        segments.append(GuideSegment(level_range=(low, high), zone=seg.get('zone', ''), steps=steps))

    return LevelingGuide(
        race=raw['race'],
        faction=raw.get('faction', ''),
        start_zone=raw.get('startZone', ''),
        starting_level=raw.get('startingLevel', 1),
        target_level=raw.get('targetLevel', 60),
        segments=segments,
    )

class GuideLoader:
    """Per-race leveling guides read from a JSON file of segments and steps."""

    def __init__(self, path: str = DEFAULT_GUIDE_PATH, guides: Optional[List[LevelingGuide]] = None):
        self.path = path
        self.guides = guides if guides is not None else self._load(path)

    @staticmethod
    def _load(path: str) -> List[LevelingGuide]:
        if not os.path.exists(path):
            logger.warning(f"Guide file {path} not found, only starter quests will be used")
            return []

        with open(path, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Cannot parse guide file {path}: {e}") from e

        try:
            guides = [_parse_guide(g) for g in data.get('guides', [])]
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Malformed guide in {path}: {e}") from e

        logger.info(f"Loaded {len(guides)} leveling guides from {path}")
        return guides

    def get_guide_for_race(self, race: str) -> Optional[LevelingGuide]:
        return next((g for g in self.guides if g.race == race), None)

    def _segment_for_level(self, race: str, level: int) -> Optional[GuideSegment]:
        guide = self.get_guide_for_race(race)
        if not guide:
            return None
        return next((seg for seg in guide.segments if seg.covers(level)), None)

    def get_next_step(self, race: str, level: int, zone: Optional[str],
                      completed_quest_ids: Iterable[int] = ()) -> Optional[GuideStep]:
        """
        First step of the level's segment that is linked to a quest, not yet done
        and not above the character's level. Steps in the current zone win.
        """
        segment = self._segment_for_level(race, level)
        if not segment:
            return None

        completed = set(completed_quest_ids)
        candidates = []
        for step in segment.steps:
            if not step.has_quest_link() or step.recommended_level > level:
                continue
            ids = step.quest_ids()
            if ids and all(quest_id in completed for quest_id in ids):
                continue
            candidates.append(step)

        if not candidates:
            return None
        in_zone = [s for s in candidates if zone and s.zone == zone]
        return (in_zone or candidates)[0]

    def get_steps_for_level(self, race: str, level: int) -> List[GuideStep]:
        segment = self._segment_for_level(race, level)
        return list(segment.steps) if segment else []

    def get_start_zone(self, race: str) -> Optional[str]:
        guide = self.get_guide_for_race(race)
        return guide.start_zone if guide else None
