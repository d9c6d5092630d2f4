"""
Utility modules for the Monte Carlo pathway engine
"""

from .exceptions import (
    MonteCarloEngineError,
    ConfigurationError,
    ValidationError,
    SimulationError,
    SimulationCancelledError,
)
from .constants import SamplingStrategy, ConvergenceCriterion
from .logging_config import setup_logging, EngineLogger

__all__ = [
    "MonteCarloEngineError",
    "ConfigurationError",
    "ValidationError",
    "SimulationError",
    "SimulationCancelledError",
    "SamplingStrategy",
    "ConvergenceCriterion",
    "setup_logging",
    "EngineLogger",
]
