"""
General numeric helpers shared by the engines
"""

import hashlib
import logging
import math
from datetime import datetime
from typing import Any, Optional, Sequence, Union

import numpy as np

from .constants import ERROR_MESSAGES, SamplingStrategy, ConvergenceCriterion
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

def calculate_hash(data: Union[str, bytes]) -> str:
    """Calculate SHA256 hash of data"""
    if isinstance(data, str):
        data = data.encode('utf-8')
    return hashlib.sha256(data).hexdigest()

def get_timestamp() -> float:
    """Current wall-clock time in epoch milliseconds"""
    return datetime.now().timestamp() * 1000.0

def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safe division with default value for zero denominator"""
    if denominator == 0:
        return default
    return numerator / denominator

def sample_variance(values: Union[Sequence[float], np.ndarray]) -> float:
    """Unbiased sample variance; zero for fewer than two values"""
    arr = np.asarray(values, dtype=float)
    if arr.size < 2:
        return 0.0
    return float(np.var(arr, ddof=1))

def floor_percentile(sorted_values: np.ndarray, quantile: float) -> float:
    """
    Order statistic at ``floor(n * quantile)`` of an ascending array

    Returns 0.0 for an empty array.
    """
    n = sorted_values.size
    if n == 0:
        return 0.0
    index = min(int(math.floor(n * quantile)), n - 1)
    return float(sorted_values[index])

def finite_or(value: float, default: float = 0.0) -> float:
    """Replace NaN/inf with a default"""
    return float(value) if math.isfinite(value) else default

def require_positive_int(name: str, value: Any) -> int:
    """Validate a strictly positive integer count"""
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
        raise ConfigurationError(ERROR_MESSAGES["invalid_count"].format(name=name, value=value))
    return int(value)

def require_positive_shape(value: float) -> float:
    """Validate a Gamma/Beta shape parameter"""
    if not isinstance(value, (int, float, np.floating)) or not value > 0 or not math.isfinite(value):
        raise ConfigurationError(ERROR_MESSAGES["invalid_shape"].format(value=value))
    return float(value)

def resolve_strategy(value: Union[str, SamplingStrategy, None],
                     default: Optional[SamplingStrategy] = None) -> SamplingStrategy:
    """Coerce a strategy identifier to the enum"""
    if value is None and default is not None:
        return default
    try:
        return SamplingStrategy(value)
    except ValueError:
        raise ConfigurationError(ERROR_MESSAGES["unknown_strategy"].format(value=value)) from None

def resolve_criterion(value: Union[str, ConvergenceCriterion, None],
                      default: Optional[ConvergenceCriterion] = None) -> ConvergenceCriterion:
    """Coerce a criterion identifier to the enum"""
    if value is None and default is not None:
        return default
    try:
        return ConvergenceCriterion(value)
    except ValueError:
        raise ConfigurationError(ERROR_MESSAGES["unknown_criterion"].format(value=value)) from None
