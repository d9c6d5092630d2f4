"""
Pathway risk analytics: Beta-distributed outcomes with tail-risk statistics
"""
import math
import time
import numpy as np
import pandas as pd
from collections.abc import Mapping
from typing import Any, List, Optional, Sequence
from dataclasses import dataclass, asdict
import logging

from monte_carlo_engine.base_engine import CancellationToken
from monte_carlo_engine.random_engine import RandomEngine
from utils.constants import (
    BETA_CONCENTRATION,
    DEFAULT_RISK_SAMPLES,
    RISK_TAIL_QUANTILE,
    ERROR_MESSAGES,
)
from utils.exceptions import ValidationError
from utils.helpers import floor_percentile, get_timestamp, require_positive_int

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class WeightedAlternative:
    """A pathway with a success probability and a confidence in it"""
    id: Any
    probability: float = 0.5
    confidence: float = 0.5

    def __post_init__(self):
        for name in ("probability", "confidence"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) \
                    or not math.isfinite(value) or not 0.0 <= value <= 1.0:
                raise ValidationError(
                    ERROR_MESSAGES["invalid_range"].format(name=name, low=0, high=1, value=value)
                )

    @property
    def beta_parameters(self):
        """(alpha, beta) concentrated around ``probability`` by ``confidence``"""
        alpha = self.probability * self.confidence * BETA_CONCENTRATION + 1
        beta = (1 - self.probability) * self.confidence * BETA_CONCENTRATION + 1
        return alpha, beta

@dataclass(frozen=True)
class PathwayRisk:
    """Simulated risk profile of one alternative"""
    pathway_id: Any
    mean_probability: float
    std_dev: float
    var_95: float
    cvar_95: Optional[float]
    percentile_25: float
    median: float
    percentile_75: float
    worst_case: float
    best_case: float
    risk_score: float

    @property
    def cvar_defined(self) -> bool:
        """False when the 5% tail held no samples"""
        return self.cvar_95 is not None

@dataclass(frozen=True)
class RiskAssessment:
    """Risk profiles of all alternatives plus the extremes"""
    pathway_risks: List[PathwayRisk]
    overall_risk: float
    safest: PathwayRisk
    riskiest: PathwayRisk
    samples_per_pathway: int
    timestamp: float

    def to_frame(self) -> pd.DataFrame:
        """One row per alternative, indexed by pathway id"""
        frame = pd.DataFrame([asdict(r) for r in self.pathway_risks])
        return frame.set_index("pathway_id")

def _coerce_alternative(item: Any) -> WeightedAlternative:
    if isinstance(item, WeightedAlternative):
        return item
    if isinstance(item, Mapping):
        probability = item.get("probability")
        confidence = item.get("confidence")
        return WeightedAlternative(
            id=item.get("id", item.get("pathway_id")),
            probability=0.5 if probability is None else probability,
            confidence=0.5 if confidence is None else confidence,
        )
    raise ValidationError(f"Alternative must be a mapping or WeightedAlternative, got {type(item).__name__}")

class PathwayRiskAssessor:
    """Monte Carlo risk assessment of weighted alternatives"""

    def __init__(self, rng: RandomEngine, n_samples: int = DEFAULT_RISK_SAMPLES):
        self.rng = rng
        self.n_samples = n_samples

    def simulate_pathway(self, alternative: WeightedAlternative, n: int) -> np.ndarray:
        """Draw ``n`` Beta outcomes for one alternative"""
        alpha, beta = alternative.beta_parameters
        return np.fromiter((self.rng.next_beta(alpha, beta) for _ in range(n)), dtype=float, count=n)

    def calculate_pathway_risk(self, pathway_id: Any, samples: np.ndarray) -> PathwayRisk:
        """
        Summarise simulated outcomes into tail-risk statistics

        Args:
            pathway_id: Identifier echoed into the result
            samples: Simulated success probabilities

        Returns:
            Mean, dispersion, 5% VaR, conditional VaR and quartiles. The
            conditional VaR is None when the 5% tail is empty.
        """
        n = samples.size
        ordered = np.sort(samples)
        mean = float(np.mean(ordered))
        std_dev = float(np.std(ordered, ddof=1)) if n > 1 else 0.0

        tail_size = int(math.floor(n * RISK_TAIL_QUANTILE))
        cvar = float(np.mean(ordered[:tail_size])) if tail_size > 0 else None

        return PathwayRisk(
            pathway_id=pathway_id,
            mean_probability=mean,
            std_dev=std_dev,
            var_95=floor_percentile(ordered, RISK_TAIL_QUANTILE),
            cvar_95=cvar,
            percentile_25=floor_percentile(ordered, 0.25),
            median=floor_percentile(ordered, 0.50),
            percentile_75=floor_percentile(ordered, 0.75),
            worst_case=float(ordered[0]),
            best_case=float(ordered[-1]),
            risk_score=1.0 - mean + std_dev,
        )

    def assess(
        self,
        alternatives: Sequence[Any],
        n: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> RiskAssessment:
        """
        Assess every alternative and pick the safest and riskiest

        Args:
            alternatives: ``{id, probability, confidence}`` records
            n: Samples per alternative
            cancel_token: Checked before each alternative

        Returns:
            Risk assessment; ties keep the earliest alternative
        """
        n = require_positive_int("Samples per pathway", self.n_samples if n is None else n)
        parsed = [_coerce_alternative(a) for a in alternatives]
        if not parsed:
            raise ValidationError("At least one alternative is required for risk assessment")

        logger.info(f"Assessing risk for {len(parsed)} pathways, {n} samples each")
        start_time = time.time()

        risks = []
        for i, alternative in enumerate(parsed):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled("Risk assessment", i)
            samples = self.simulate_pathway(alternative, n)
            risks.append(self.calculate_pathway_risk(alternative.id, samples))

        safest = risks[0]
        riskiest = risks[0]
        for risk in risks[1:]:
            if risk.risk_score < safest.risk_score:
                safest = risk
            if risk.risk_score > riskiest.risk_score:
                riskiest = risk

        logger.info(
            f"Risk assessment completed in {time.time() - start_time:.3f}s: "
            f"safest={safest.pathway_id!r}, riskiest={riskiest.pathway_id!r}"
        )

        return RiskAssessment(
            pathway_risks=risks,
            overall_risk=float(np.mean([r.risk_score for r in risks])),
            safest=safest,
            riskiest=riskiest,
            samples_per_pathway=n,
            timestamp=get_timestamp(),
        )
