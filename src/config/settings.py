"""
Configuration management for the Monte Carlo pathway engine
"""

import math
from typing import Any, Optional, Union

from pydantic import Field, ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.constants import (
    DEFAULT_MAX_SAMPLES,
    DEFAULT_BATCH_SIZE,
    DEFAULT_CONVERGENCE_THRESHOLD,
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_BURN_IN,
    DEFAULT_THINNING,
    DEFAULT_EXPLORATION_CONSTANT,
    DEFAULT_SIMULATIONS_PER_NODE,
    DEFAULT_MAX_DEPTH,
    SIMULATIONS_PER_NODE_MULTIPLIER,
    DEFAULT_RISK_SAMPLES,
    DEFAULT_SENSITIVITY_SAMPLES,
    DEFAULT_STRATEGY,
    DEFAULT_CRITERION,
    SamplingStrategy,
    ConvergenceCriterion,
)
from utils.exceptions import ConfigurationError

class EngineSettings(BaseSettings):
    """Engine configuration, overridable through ``MCE_*`` environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="MCE_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    # Simulation loop
    max_samples: int = Field(default=DEFAULT_MAX_SAMPLES, gt=0)
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, gt=0)
    convergence_threshold: float = Field(default=DEFAULT_CONVERGENCE_THRESHOLD, gt=0)
    confidence_level: float = Field(default=DEFAULT_CONFIDENCE_LEVEL, gt=0, lt=1)
    burn_in: int = Field(default=DEFAULT_BURN_IN, ge=0)
    thinning: int = Field(default=DEFAULT_THINNING, gt=0)
    seed: Optional[Union[int, str]] = None
    strategy: SamplingStrategy = DEFAULT_STRATEGY
    criterion: ConvergenceCriterion = DEFAULT_CRITERION

    # Tree search
    mcts_exploration_constant: float = Field(default=DEFAULT_EXPLORATION_CONSTANT, ge=0)
    mcts_simulations_per_node: int = Field(default=DEFAULT_SIMULATIONS_PER_NODE, gt=0)
    mcts_max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=0)

    # Analytics
    risk_samples: int = Field(default=DEFAULT_RISK_SAMPLES, gt=0)
    sensitivity_samples: int = Field(default=DEFAULT_SENSITIVITY_SAMPLES, gt=0)

    # Monitoring
    logging_level: str = "INFO"

    @field_validator("convergence_threshold", "mcts_exploration_constant")
    @classmethod
    def validate_finite(cls, v):
        if not math.isfinite(v):
            raise ValueError("must be finite")
        return v

    @field_validator("logging_level")
    @classmethod
    def validate_logging_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown logging level {v!r}")
        return level

    @property
    def mcts_total_simulations(self) -> int:
        """Default number of tree-search iterations per call"""
        return self.mcts_simulations_per_node * SIMULATIONS_PER_NODE_MULTIPLIER

    def with_overrides(self, **overrides: Any) -> "EngineSettings":
        """Return a validated copy with the non-None overrides applied"""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return load_settings(**values)

def load_settings(**kwargs: Any) -> EngineSettings:
    """
    Build settings, translating validation failures into ConfigurationError

    Args:
        **kwargs: Explicit option values; anything omitted falls back to the
            environment and then the defaults

    Returns:
        Validated settings
    """
    try:
        return EngineSettings(**kwargs)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid engine configuration: {e}") from e
