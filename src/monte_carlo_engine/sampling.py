"""
Sampling strategies with variance reduction for weighted probability spaces
"""
import logging
import math
import sys
from abc import ABC, abstractmethod
from typing import Dict, List, Sequence, Union

from utils.constants import HALTON_PRIMES, SamplingStrategy
from utils.helpers import require_positive_int, resolve_strategy

from .distribution import DistributionDimension, Sample
from .random_engine import RandomEngine

logger = logging.getLogger(__name__)

# Proposal density used when an importance draw is clamped onto 0 or 1
BOUNDARY_PROPOSAL_DENSITY = sys.float_info.epsilon
MAX_IMPORTANCE_WEIGHT = 1.0 / sys.float_info.epsilon

class Sampler(ABC):
    """Abstract base class for sampling strategies"""

    strategy: SamplingStrategy

    @abstractmethod
    def draw(
        self,
        distribution: Sequence[DistributionDimension],
        n: int,
        rng: RandomEngine
    ) -> List[Sample]:
        """
        Draw samples from a distribution

        Args:
            distribution: Dimensions to sample
            n: Number of samples
            rng: Random engine consumed by the draw

        Returns:
            Exactly ``n`` samples
        """
        pass

class UniformSampler(Sampler):
    """Each dimension drawn independently from U[0, 1)"""

    strategy = SamplingStrategy.UNIFORM

    def draw(self, distribution, n, rng):
        return [
            Sample({dim.key: rng.next_float() for dim in distribution})
            for _ in range(n)
        ]

class ImportanceSampler(Sampler):
    """
    Importance sampling centred on each dimension's normalised weight

    Each draw is shifted toward the normalised weight and clamped to [0, 1];
    the sample's importance weight is the product over dimensions of
    target / proposal, where the proposal density is 1 strictly inside the
    unit interval and machine epsilon on the boundary. This is a heuristic
    ratio and is not unbiased in general.
    """

    strategy = SamplingStrategy.IMPORTANCE

    def _normalized_weights(self, distribution: Sequence[DistributionDimension]) -> List[float]:
        total = sum(dim.weight for dim in distribution)
        if total <= 0.0:
            return [1.0 / len(distribution)] * len(distribution)
        return [dim.weight / total for dim in distribution]

    def draw(self, distribution, n, rng):
        normalized = self._normalized_weights(distribution)
        samples = []

        for _ in range(n):
            values = {}
            weight = 1.0

            for dim, target in zip(distribution, normalized):
                u = rng.next_float()
                shifted = target + (u - 0.5) * (1.0 - target) * 0.5
                values[dim.key] = min(1.0, max(0.0, shifted))

                proposal = 1.0 if 0.0 < shifted < 1.0 else BOUNDARY_PROPOSAL_DENSITY
                if target <= 0.0:
                    weight = 0.0
                elif weight > 0.0:
                    # running product never exceeds MAX_IMPORTANCE_WEIGHT
                    weight = min(weight * (target / proposal), MAX_IMPORTANCE_WEIGHT)

            samples.append(Sample(values, weight))

        return samples

class StratifiedSampler(Sampler):
    """
    Stratified sampling over ceil(sqrt(n)) equal strata of [0, 1]

    Samples are assigned to strata round-robin; all dimensions of one sample
    share the stratum.
    """

    strategy = SamplingStrategy.STRATIFIED

    def draw(self, distribution, n, rng):
        strata = math.ceil(math.sqrt(n))
        samples = []

        for i in range(n):
            s = i % strata
            lo = s / strata
            hi = (s + 1) / strata
            samples.append(Sample({dim.key: lo + rng.next_float() * (hi - lo) for dim in distribution}))

        return samples

class AntitheticSampler(Sampler):
    """Antithetic variates: every draw u is followed by its mirror 1 - u"""

    strategy = SamplingStrategy.ANTITHETIC

    def draw(self, distribution, n, rng):
        samples = []

        for _ in range(math.ceil(n / 2)):
            sample = {}
            anti = {}
            for dim in distribution:
                u = rng.next_float()
                sample[dim.key] = u
                anti[dim.key] = 1.0 - u
            samples.append(Sample(sample))
            samples.append(Sample(anti))

        return samples[:n]

class LatinHypercubeSampler(Sampler):
    """Latin Hypercube sampling: one sample per stratum per dimension"""

    strategy = SamplingStrategy.LATIN_HYPERCUBE

    def draw(self, distribution, n, rng):
        intervals = [rng.permutation(n) for _ in distribution]

        return [
            Sample({
                dim.key: (intervals[j][i] + rng.next_float()) / n
                for j, dim in enumerate(distribution)
            })
            for i in range(n)
        ]

class QuasiRandomSampler(Sampler):
    """Halton sequence with the j-th prime base for dimension j"""

    strategy = SamplingStrategy.QUASI_RANDOM

    def __init__(self, bases: Sequence[int] = None):
        self.bases = list(bases or HALTON_PRIMES)

    def draw(self, distribution, n, rng):
        bases = [self.bases[j % len(self.bases)] for j in range(len(distribution))]

        return [
            Sample({
                dim.key: RandomEngine.halton(i + 1, base)
                for dim, base in zip(distribution, bases)
            })
            for i in range(n)
        ]

SAMPLERS: Dict[SamplingStrategy, Sampler] = {
    sampler.strategy: sampler
    for sampler in (
        UniformSampler(),
        ImportanceSampler(),
        StratifiedSampler(),
        AntitheticSampler(),
        LatinHypercubeSampler(),
        QuasiRandomSampler(),
    )
}

def get_sampler(strategy: Union[str, SamplingStrategy]) -> Sampler:
    """Look up the sampler for a strategy identifier"""
    return SAMPLERS[resolve_strategy(strategy)]

def draw_samples(
    distribution: Sequence[DistributionDimension],
    n: int,
    strategy: Union[str, SamplingStrategy],
    rng: RandomEngine
) -> List[Sample]:
    """
    Draw ``n`` samples with the given strategy

    Raises:
        ConfigurationError: For a non-positive count or an unknown strategy
    """
    n = require_positive_int("Sample count", n)
    sampler = get_sampler(strategy)
    return sampler.draw(distribution, n, rng)
