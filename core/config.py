# core/config.py
import os
from dataclasses import dataclass, fields

import yaml

from core.logger import get_logger

logger = get_logger(__name__)

DEFAULT_ENGINE_CONFIG = 'config/engine.yaml'


class ConfigError(Exception):
    """Raised when a required config file is missing or a config file cannot be used."""


@dataclass
class EngineSettings:
    tick_interval: float = 1.0
    log_capacity: int = 100
    # Distance (yards) at which the character counts as standing on a target.
    interact_range: float = 1.0
    mob_presence_chance: float = 0.5
    combat_min_seconds: float = 5.0
    combat_max_seconds: float = 10.0
    movement_speed: str = 'run'
    guide_path: str = 'resources/guides.json'

    def validate(self) -> 'EngineSettings':
        if self.tick_interval <= 0:
            raise ConfigError("tick_interval must be positive")
        if self.log_capacity < 1:
            raise ConfigError("log_capacity must be at least 1")
        if not 0.0 <= self.mob_presence_chance <= 1.0:
            raise ConfigError("mob_presence_chance must be within [0, 1]")
        if self.combat_min_seconds > self.combat_max_seconds:
            self.combat_min_seconds, self.combat_max_seconds = self.combat_max_seconds, self.combat_min_seconds
        self.combat_min_seconds = max(0.0, self.combat_min_seconds)
        return self


def load_engine_settings(path: str = DEFAULT_ENGINE_CONFIG) -> EngineSettings:
    if not os.path.exists(path):
        logger.info(f"No engine config at {path}, using defaults.")
        return EngineSettings()

    with open(path, 'r', encoding='utf-8') as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse {path}: {e}") from e

    section = raw.get('engine', {}) if isinstance(raw, dict) else None
    if not isinstance(section, dict):
        raise ConfigError(f"{path}: 'engine' section must be a mapping")

    known = {f.name for f in fields(EngineSettings)}
    unknown = set(section) - known
    if unknown:
        logger.warning(f"Ignoring unknown engine settings: {', '.join(sorted(unknown))}")

    settings = EngineSettings(**{k: v for k, v in section.items() if k in known})
    return settings.validate()
