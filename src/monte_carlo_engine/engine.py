"""
Monte Carlo pathway engine: batched simulation, risk, tree search and sensitivity
"""
import logging
import time
from typing import Any, Optional, Sequence, Union

from config.settings import EngineSettings
from utils.constants import ConvergenceCriterion, SamplingStrategy
from utils.helpers import resolve_criterion, resolve_strategy
from utils.logging_config import EngineLogger

from .base_engine import BaseMonteCarloEngine, CancellationToken
from .convergence import ConvergenceMonitor, SampleAccumulator, SimulationResult, build_result
from .distribution import (
    EvaluatedSample,
    ExpansionFunction,
    PayoffFunction,
    RolloutFunction,
    default_payoff,
    extract_distribution,
)
from .sampling import draw_samples

logger = logging.getLogger(__name__)

class MonteCarloEngine(BaseMonteCarloEngine):
    """
    Configurable Monte Carlo engine over weighted probability spaces

    Every operation draws from the engine's single random stream, so a seeded
    engine replays identically for the same sequence of calls. The engine is
    not thread-safe; give each worker its own engine or ``rng.spawn`` stream.
    """

    def __init__(self, settings: Optional[EngineSettings] = None, **overrides: Any):
        super().__init__(settings, **overrides)
        self.events = EngineLogger(__name__)

    def simulate(
        self,
        probability_space: Any,
        payoff: Optional[PayoffFunction] = None,
        max_samples: Optional[int] = None,
        batch_size: Optional[int] = None,
        strategy: Union[str, SamplingStrategy, None] = None,
        criterion: Union[str, ConvergenceCriterion, None] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> SimulationResult:
        """
        Run a batched simulation until convergence or the sample budget

        Burn-in is dropped from the first batch only and thinning keeps every
        k-th remaining sample before payoffs are evaluated.

        Args:
            probability_space: Caller probability space
            payoff: sample -> float; defaults to the distribution-matching payoff
            max_samples: Sample budget override
            batch_size: Draws per convergence check override
            strategy: Sampling strategy override
            criterion: Convergence criterion override
            cancel_token: Checked at the top of every batch

        Returns:
            Immutable result; ``converged`` is False when the budget ran out
        """
        run = self.settings.with_overrides(max_samples=max_samples, batch_size=batch_size)
        strategy = resolve_strategy(strategy, default=run.strategy)
        criterion = resolve_criterion(criterion, default=run.criterion)

        distribution = extract_distribution(probability_space)
        if payoff is None:
            payoff = lambda sample: default_payoff(sample, distribution)

        monitor = ConvergenceMonitor(criterion, run.convergence_threshold, run.confidence_level)
        accumulator = SampleAccumulator()

        self.events.log_simulation_start("simulation", {
            "dimensions": len(distribution),
            "max_samples": run.max_samples,
            "batch_size": run.batch_size,
            "strategy": strategy.value,
            "criterion": criterion.value,
        })
        start_time = time.time()

        drawn = 0
        batches = 0
        converged = False

        while drawn < run.max_samples and not converged:
            self._check_cancelled(cancel_token, "Simulation", batches)

            n = min(run.batch_size, run.max_samples - drawn)
            samples = draw_samples(distribution, n, strategy, self.rng)
            if drawn == 0:
                samples = samples[run.burn_in:]
            if run.thinning > 1:
                samples = samples[::run.thinning]

            try:
                evaluated = [EvaluatedSample(s, float(payoff(s))) for s in samples]
            except Exception as e:
                self.events.log_error(e, {"operation": "simulation", "batch": batches + 1})
                raise
            accumulator.extend(evaluated)

            converged = monitor.check(accumulator)
            drawn += n
            batches += 1
            self.events.log_batch(batches, len(accumulator), converged)

        result = build_result(accumulator, distribution, converged, batches, run.confidence_level)

        self._stats["total_samples"] += result.sample_count
        self._stats["batches_run"] += batches
        self._stats["last_converged"] = converged

        self.events.log_simulation_complete("simulation", time.time() - start_time, {
            "mean": result.mean,
            "sample_count": result.sample_count,
            "converged": converged,
            "batches_run": batches,
        })
        return result

    def assess_risk(
        self,
        alternatives: Sequence[Any],
        n: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None
    ):
        """Monte Carlo risk profile of weighted alternatives (see PathwayRiskAssessor)"""
        from analytics_engine.risk_analytics import PathwayRiskAssessor

        assessor = PathwayRiskAssessor(self.rng, self.settings.risk_samples)
        return assessor.assess(alternatives, n=n, cancel_token=cancel_token)

    def mcts(
        self,
        root_state: Any,
        expand_fn: ExpansionFunction,
        rollout_fn: RolloutFunction,
        simulations: Optional[int] = None,
        max_depth: Optional[int] = None,
        exploration_constant: Optional[float] = None,
        cancel_token: Optional[CancellationToken] = None
    ):
        """Monte Carlo Tree Search from ``root_state`` (see MonteCarloTreeSearch)"""
        from tree_search.mcts import MonteCarloTreeSearch

        search = MonteCarloTreeSearch(
            self.rng,
            exploration_constant=self.settings.mcts_exploration_constant,
            max_depth=self.settings.mcts_max_depth,
            simulations=self.settings.mcts_total_simulations,
        )
        return search.search(
            root_state,
            expand_fn,
            rollout_fn,
            simulations=simulations,
            max_depth=max_depth,
            exploration_constant=exploration_constant,
            cancel_token=cancel_token,
        )

    def sensitivity_analysis(
        self,
        probability_space: Any,
        payoff: Optional[PayoffFunction] = None,
        n: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None
    ):
        """First-order sensitivity indices per dimension (see SensitivityAnalyzer)"""
        from analytics_engine.sensitivity import SensitivityAnalyzer

        analyzer = SensitivityAnalyzer(self.rng, self.settings.sensitivity_samples)
        return analyzer.analyze(probability_space, payoff, n=n, cancel_token=cancel_token)

def create_monte_carlo_engine(settings: Optional[EngineSettings] = None, **overrides: Any) -> MonteCarloEngine:
    """Factory for a configured engine"""
    return MonteCarloEngine(settings, **overrides)
