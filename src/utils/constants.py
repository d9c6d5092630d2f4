"""
Engine constants and enums
"""

import math
from enum import Enum
from typing import Dict, List

# Application Constants
APP_VERSION = "1.0.0"

# Simulation Constants
DEFAULT_MAX_SAMPLES = 100_000
DEFAULT_BATCH_SIZE = 1_000
DEFAULT_CONVERGENCE_THRESHOLD = 0.001
DEFAULT_CONFIDENCE_LEVEL = 0.95
DEFAULT_BURN_IN = 500
DEFAULT_THINNING = 1
MIN_SAMPLES_FOR_CONVERGENCE = 100

# Search Constants
DEFAULT_EXPLORATION_CONSTANT = math.sqrt(2)
DEFAULT_SIMULATIONS_PER_NODE = 50
DEFAULT_MAX_DEPTH = 20
SIMULATIONS_PER_NODE_MULTIPLIER = 20

# Analytics Constants
DEFAULT_RISK_SAMPLES = 10_000
DEFAULT_SENSITIVITY_SAMPLES = 5_000
RISK_TAIL_QUANTILE = 0.05
BETA_CONCENTRATION = 20

# Z-scores for the supported confidence levels
Z_SCORES: Dict[float, float] = {0.90: 1.645, 0.95: 1.96, 0.99: 2.576}
DEFAULT_Z_SCORE = 1.96

# Halton bases; dimensions beyond the table cycle back to the start
HALTON_PRIMES: List[int] = [2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43]

# Percentile ladder reported on every simulation result
PERCENTILE_LADDER: Dict[str, float] = {
    "p5": 0.05,
    "p25": 0.25,
    "p50": 0.50,
    "p75": 0.75,
    "p95": 0.95,
}

# Fallback dimension when a probability space has no recognisable shape
DEFAULT_DIMENSION_KEY = "default"
DEFAULT_DIMENSION_WEIGHT = 0.5

class SamplingStrategy(str, Enum):
    """Sampling strategies"""
    UNIFORM = "uniform"
    IMPORTANCE = "importance"
    STRATIFIED = "stratified"
    ANTITHETIC = "antithetic"
    LATIN_HYPERCUBE = "latin_hypercube"
    QUASI_RANDOM = "quasi_random"

class ConvergenceCriterion(str, Enum):
    """Convergence criteria"""
    VARIANCE = "variance"
    CONFIDENCE_INTERVAL = "confidence_interval"
    EFFECTIVE_SAMPLE_SIZE = "effective_sample_size"

DEFAULT_STRATEGY = SamplingStrategy.IMPORTANCE
DEFAULT_CRITERION = ConvergenceCriterion.CONFIDENCE_INTERVAL

# Error messages
ERROR_MESSAGES = {
    "invalid_shape": "Shape parameter must be positive, got {value}",
    "invalid_count": "{name} must be a positive integer, got {value}",
    "unknown_strategy": "Unknown sampling strategy: {value}",
    "unknown_criterion": "Unknown convergence criterion: {value}",
    "invalid_range": "{name} must lie in [{low}, {high}], got {value}",
}
