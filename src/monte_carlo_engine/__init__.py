"""
Monte Carlo simulation engine package
"""

from .random_engine import RandomEngine
from .distribution import DistributionDimension, Sample, EvaluatedSample, extract_distribution, default_payoff
from .sampling import draw_samples, get_sampler, Sampler
from .convergence import SimulationResult, ConfidenceInterval, ConvergenceMonitor
from .base_engine import BaseMonteCarloEngine, CancellationToken
from .engine import MonteCarloEngine, create_monte_carlo_engine
from utils.constants import APP_VERSION

__version__ = APP_VERSION

__all__ = [
    'RandomEngine',
    'DistributionDimension',
    'Sample',
    'EvaluatedSample',
    'extract_distribution',
    'default_payoff',
    'draw_samples',
    'get_sampler',
    'Sampler',
    'SimulationResult',
    'ConfidenceInterval',
    'ConvergenceMonitor',
    'BaseMonteCarloEngine',
    'CancellationToken',
    'MonteCarloEngine',
    'create_monte_carlo_engine',
]
