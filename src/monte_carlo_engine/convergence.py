"""
Convergence monitoring and result aggregation for batched simulation
"""
import logging
import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from utils.constants import (
    Z_SCORES,
    DEFAULT_Z_SCORE,
    MIN_SAMPLES_FOR_CONVERGENCE,
    PERCENTILE_LADDER,
    ConvergenceCriterion,
)
from utils.helpers import calculate_hash, finite_or, floor_percentile, get_timestamp, resolve_criterion, safe_divide

from .distribution import DistributionDimension, EvaluatedSample

logger = logging.getLogger(__name__)

def z_score(confidence_level: float) -> float:
    """Two-sided z for the supported confidence levels, 1.96 otherwise"""
    for level, z in Z_SCORES.items():
        if math.isclose(level, confidence_level):
            return z
    return DEFAULT_Z_SCORE

@dataclass(frozen=True)
class ConfidenceInterval:
    """Symmetric normal-approximation interval around the mean"""
    level: float
    lower: float
    upper: float

@dataclass(frozen=True)
class SimulationResult:
    """Immutable summary of one simulate call"""
    mean: float
    unweighted_mean: float
    variance: float
    std_error: float
    confidence_interval: ConfidenceInterval
    percentiles: Dict[str, float]
    sample_count: int
    effective_sample_size: int
    converged: bool
    batches_run: int
    distribution: Tuple[Tuple[str, float], ...]
    signature: str
    timestamp: float

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["distribution"] = [{"key": k, "probability": p} for k, p in self.distribution]
        return result

    def to_series(self) -> pd.Series:
        """Flat pandas view of the scalar statistics"""
        data = {
            "mean": self.mean,
            "unweighted_mean": self.unweighted_mean,
            "variance": self.variance,
            "std_error": self.std_error,
            "ci_level": self.confidence_interval.level,
            "ci_lower": self.confidence_interval.lower,
            "ci_upper": self.confidence_interval.upper,
            "sample_count": self.sample_count,
            "effective_sample_size": self.effective_sample_size,
            "converged": self.converged,
            "batches_run": self.batches_run,
        }
        data.update(self.percentiles)
        return pd.Series(data, name=self.signature)

class SampleAccumulator:
    """Running store of evaluated payoffs and importance weights"""

    def __init__(self):
        self._values: List[float] = []
        self._weights: List[float] = []

    def extend(self, evaluated: Sequence[EvaluatedSample]) -> None:
        for e in evaluated:
            self._values.append(float(e.value))
            self._weights.append(e.weight)

    def __len__(self) -> int:
        return len(self._values)

    @property
    def values(self) -> np.ndarray:
        return np.asarray(self._values, dtype=float)

    @property
    def weights(self) -> np.ndarray:
        return np.asarray(self._weights, dtype=float)

    def adjusted_values(self) -> np.ndarray:
        """Payoffs multiplied by their importance weights"""
        return self.values * self.weights

def effective_sample_size(weights: np.ndarray) -> float:
    """Kish effective sample size (sum w)^2 / sum w^2; zero for all-zero weights"""
    sum_w2 = float(np.sum(weights * weights))
    if sum_w2 <= 0.0:
        return 0.0
    sum_w = float(np.sum(weights))
    return sum_w * sum_w / sum_w2

class ConvergenceMonitor:
    """Decides when a batched simulation has drawn enough samples"""

    def __init__(
        self,
        criterion: Union[str, ConvergenceCriterion],
        threshold: float,
        confidence_level: float,
        min_samples: int = MIN_SAMPLES_FOR_CONVERGENCE
    ):
        self.criterion = resolve_criterion(criterion)
        self.threshold = threshold
        self.confidence_level = confidence_level
        self.min_samples = min_samples

    def check(self, accumulator: SampleAccumulator) -> bool:
        """Evaluate the active criterion over everything accumulated so far"""
        n = len(accumulator)
        if n < self.min_samples:
            return False

        values = accumulator.adjusted_values()
        mean = float(np.mean(values))
        variance = float(np.var(values, ddof=1))
        std_error = math.sqrt(variance / n)

        if self.criterion is ConvergenceCriterion.VARIANCE:
            return variance < self.threshold

        if self.criterion is ConvergenceCriterion.CONFIDENCE_INTERVAL:
            half_width = z_score(self.confidence_level) * std_error
            return half_width < self.threshold * abs(mean or 1.0)

        if self.criterion is ConvergenceCriterion.EFFECTIVE_SAMPLE_SIZE:
            return effective_sample_size(accumulator.weights) > 0.5 * n

        return False

def build_result(
    accumulator: SampleAccumulator,
    distribution: Sequence[DistributionDimension],
    converged: bool,
    batches_run: int,
    confidence_level: float
) -> SimulationResult:
    """
    Aggregate accumulated samples into a SimulationResult

    Variance, standard error, interval and percentiles are computed over the
    importance-adjusted payoffs. Degenerate inputs (no samples, zero total
    weight) produce zeros rather than NaN.

    Args:
        accumulator: Evaluated samples of the run
        distribution: Dimensions echoed into the result
        converged: Whether the active criterion was met
        batches_run: Number of batches drawn
        confidence_level: Level of the reported interval

    Returns:
        Immutable result summary
    """
    n = len(accumulator)
    values = accumulator.values
    weights = accumulator.weights
    adjusted = values * weights

    sum_w = float(np.sum(weights))
    weighted_mean = safe_divide(float(np.sum(adjusted)), sum_w)
    mean = float(np.mean(adjusted)) if n else 0.0
    variance = float(np.sum((adjusted - mean) ** 2)) / max(n - 1, 1) if n else 0.0
    std_error = math.sqrt(variance / n) if n else 0.0
    z = z_score(confidence_level)

    ordered = np.sort(adjusted)
    percentiles = {
        name: finite_or(floor_percentile(ordered, q))
        for name, q in PERCENTILE_LADDER.items()
    }
    ess = effective_sample_size(weights)

    mean = finite_or(mean)
    variance = finite_or(variance)
    std_error = finite_or(std_error)

    return SimulationResult(
        mean=finite_or(weighted_mean),
        unweighted_mean=mean,
        variance=variance,
        std_error=std_error,
        confidence_interval=ConfidenceInterval(
            level=confidence_level,
            lower=mean - z * std_error,
            upper=mean + z * std_error,
        ),
        percentiles=percentiles,
        sample_count=n,
        effective_sample_size=int(round(finite_or(ess))),
        converged=converged,
        batches_run=batches_run,
        distribution=tuple((d.key, d.weight) for d in distribution),
        signature=calculate_hash(f"{mean}:{variance}:{n}")[:16],
        timestamp=get_timestamp(),
    )
