"""
Configuration for the TowerHunt engine.
Pydantic models for winning rules, search limits and evaluator weights.

The core never reads configuration from a global: callers build a
``TowerHuntConfig`` (defaults, environment, or JSON file) and pass it in.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

ConfigDict = Dict[str, Any]

ENV_PREFIX = "TOWERHUNT_"


class WinningRules(BaseModel):
    """Thresholds that end the game, and the stack height limit."""

    safety_zone_count: int = Field(default=1, ge=1, le=6, description="Secured towers needed to win")
    opponent_vault_threshold: int = Field(default=6, ge=0, le=6, description="Opponent stones in the vault needed to win (0 disables)")
    max_stack_size: int = Field(default=3, ge=1, le=6, description="Stones a tower keeps after stacking")


class SearchRules(BaseModel):
    """Search tree depth and the wall-clock budget applied by the caller."""

    max_depth: int = Field(default=5, ge=0, le=10, description="Depth at which leaves are scored heuristically (integral values only)")
    timeout_seconds: float = Field(default=50, gt=0, description="Deadline for one bot move")


class MaterialAdvantageConquered(BaseModel):
    """Weights for the difference in towers on the board."""

    total_weight: float = Field(default=70, ge=0)
    opponent_weight: float = Field(default=1.0, ge=0)


class SafetyZoneProximity(BaseModel):
    """Weights for reversed towers close to their safety zone."""

    weight_row_distance_1: float = Field(default=10, ge=0)
    weight_row_distance_2: float = Field(default=10, ge=0)
    weight_row_distance_3: float = Field(default=8, ge=0)
    weight_row_distance_4: float = Field(default=7, ge=0)
    weight_row_distance_5: float = Field(default=7, ge=0)
    safety_zone_total_distance: float = Field(default=8, ge=0, description="Bonus when all reversed towers are within 4 rows total")
    opponent_weight: float = Field(default=2.0, ge=0)
    total_weight: float = Field(default=10, ge=0)

    def distance_weights(self) -> tuple:
        return (
            self.weight_row_distance_1,
            self.weight_row_distance_2,
            self.weight_row_distance_3,
            self.weight_row_distance_4,
            self.weight_row_distance_5,
        )


class MaterialAdvantageAccounted(BaseModel):
    """Weight for the difference in opponent stones held in the vaults."""

    total_weight: float = Field(default=40, ge=0)


class LoggingSettings(BaseModel):
    """Logging configuration."""

    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    log_to_file: bool = Field(default=False, description="Write logs to file")
    log_file_path: str = Field(default="towerhunt.log", description="Log file path")

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR']
        v_upper = v.upper() if isinstance(v, str) else str(v).upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper


class TowerHuntConfig(BaseModel):
    """Main configuration model. Defaults are the game's factory settings."""

    winning: WinningRules = Field(default_factory=WinningRules)
    search: SearchRules = Field(default_factory=SearchRules)
    material_conquered: MaterialAdvantageConquered = Field(default_factory=MaterialAdvantageConquered)
    safety_zone: SafetyZoneProximity = Field(default_factory=SafetyZoneProximity)
    material_accounted: MaterialAdvantageAccounted = Field(default_factory=MaterialAdvantageAccounted)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    version: str = Field(default="1.0.0", description="Configuration version")
    config_file: Optional[str] = Field(default=None, description="Path to config file")

    @classmethod
    def from_env(cls) -> 'TowerHuntConfig':
        """Create configuration from TOWERHUNT_* environment variables."""
        winning = WinningRules()
        search = SearchRules()
        return cls(
            winning=WinningRules(
                safety_zone_count=int(os.getenv(ENV_PREFIX + 'SAFETY_ZONE', winning.safety_zone_count)),
                opponent_vault_threshold=int(os.getenv(ENV_PREFIX + 'OPPONENT_STONES', winning.opponent_vault_threshold)),
                max_stack_size=int(os.getenv(ENV_PREFIX + 'MAX_STACK', winning.max_stack_size)),
            ),
            search=SearchRules(
                max_depth=int(os.getenv(ENV_PREFIX + 'DEPTH', search.max_depth)),
                timeout_seconds=float(os.getenv(ENV_PREFIX + 'TIMEOUT', search.timeout_seconds)),
            ),
            logging=LoggingSettings(
                log_level=os.getenv(ENV_PREFIX + 'LOG_LEVEL', 'INFO'),
                log_to_file=os.getenv(ENV_PREFIX + 'LOG_FILE', 'false').lower() == 'true',
            ),
        )

    def to_dict(self) -> ConfigDict:
        return self.model_dump()

    def save_to_file(self, filepath: str) -> None:
        """Save configuration to JSON file."""
        config_dict = self.to_dict()
        config_dict['config_file'] = filepath
        with open(filepath, 'w') as f:
            json.dump(config_dict, f, indent=2)

    @classmethod
    def load_from_file(cls, filepath: str) -> 'TowerHuntConfig':
        """Load configuration from JSON file. Missing sections keep their defaults."""
        with open(filepath, 'r') as f:
            data = json.load(f)
        data['config_file'] = filepath
        return cls.model_validate(data)

    def update_from_dict(self, updates: ConfigDict) -> None:
        """Update sections from a nested dictionary; each section is re-validated."""
        for section, settings in updates.items():
            if section not in type(self).model_fields or not isinstance(settings, dict):
                continue
            current = getattr(self, section)
            merged = {**current.model_dump(), **settings}
            setattr(self, section, type(current).model_validate(merged))

    def restore_factory_default(self) -> None:
        for name, field_info in type(self).model_fields.items():
            if field_info.default_factory is not None:
                setattr(self, name, field_info.default_factory())


def load_config(filepath: Optional[str] = None) -> TowerHuntConfig:
    """Configuration from ``filepath`` if given, else from the environment."""
    if filepath:
        return TowerHuntConfig.load_from_file(filepath)
    return TowerHuntConfig.from_env()


def setup_logging(settings: Optional[LoggingSettings] = None) -> None:
    """Configure root logging once. TOWERHUNT_LOG_LEVEL overrides ``settings``."""
    if getattr(setup_logging, "_configured", False):
        return
    settings = settings or LoggingSettings()
    level_name = os.environ.get(ENV_PREFIX + "LOG_LEVEL", settings.log_level).upper()
    level: int = getattr(logging, level_name, logging.INFO)
    handlers = [logging.StreamHandler()]
    if settings.log_to_file:
        handlers.append(logging.FileHandler(settings.log_file_path))
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
    )
    setup_logging._configured = True  # type: ignore[attr-defined]
