"""
Tests for first-order sensitivity analysis
"""
import pandas as pd
import pytest

from analytics_engine.sensitivity import SensitivityAnalyzer, SensitivityReport
from monte_carlo_engine.base_engine import CancellationToken
from monte_carlo_engine.random_engine import RandomEngine
from utils.exceptions import ConfigurationError, SimulationCancelledError

@pytest.fixture
def analyzer(rng):
    return SensitivityAnalyzer(rng, n_samples=500)

def weighted_payoff(sample):
    return 3.0 * sample["alpha"] + sample["beta"] + 0.1 * sample["gamma"]

class TestIndices:
    """Test index normalisation and clamping"""

    def test_normalized_indices_sum_to_one_or_zero(self, analyzer, record_space):
        report = analyzer.analyze(record_space, weighted_payoff)
        normalized = [s.normalized_index for s in report.sensitivities.values()]
        raw = [s.first_order_index for s in report.sensitivities.values()]

        assert all(v >= 0.0 for v in normalized)
        if any(r > 0 for r in raw):
            assert sum(normalized) == pytest.approx(1.0, abs=1e-9)
        else:
            assert sum(normalized) == 0.0

    def test_negative_raw_indices_clamped(self, analyzer, record_space):
        report = analyzer.analyze(record_space, weighted_payoff)
        for s in report.sensitivities.values():
            if s.first_order_index <= 0:
                assert s.normalized_index == 0.0

    def test_variance_contribution_is_magnitude(self, analyzer, record_space):
        report = analyzer.analyze(record_space, weighted_payoff)
        assert report.baseline_variance > 0.0
        assert all(s.variance_contribution >= 0.0 for s in report.sensitivities.values())

    def test_constant_payoff(self, analyzer, record_space):
        """Zero baseline variance reports all-zero indices"""
        report = analyzer.analyze(record_space, lambda s: 1.0)

        assert report.baseline_variance == 0.0
        assert all(s.first_order_index == 0.0 for s in report.sensitivities.values())
        assert all(s.normalized_index == 0.0 for s in report.sensitivities.values())
        assert report.most_sensitive == "alpha"

    def test_most_sensitive_has_largest_index(self, analyzer, record_space):
        report = analyzer.analyze(record_space, weighted_payoff)
        best = max(s.normalized_index for s in report.sensitivities.values())
        assert report.sensitivities[report.most_sensitive].normalized_index == best

    def test_default_payoff(self, analyzer, two_dimension_space):
        report = analyzer.analyze(two_dimension_space)

        assert isinstance(report, SensitivityReport)
        assert list(report.sensitivities) == ["a", "b"]
        assert report.samples_per_param == 500

    def test_seeded_analysis_is_reproducible(self, record_space):
        first = SensitivityAnalyzer(RandomEngine(seed=21), 300).analyze(record_space, weighted_payoff)
        second = SensitivityAnalyzer(RandomEngine(seed=21), 300).analyze(record_space, weighted_payoff)
        assert first == second

class TestValidation:
    """Invalid input and cancellation"""

    @pytest.mark.parametrize("n", [0, -2])
    def test_invalid_sample_count(self, analyzer, record_space, n):
        with pytest.raises(ConfigurationError):
            analyzer.analyze(record_space, weighted_payoff, n=n)

    def test_cancelled(self, analyzer, record_space):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(SimulationCancelledError) as exc_info:
            analyzer.analyze(record_space, weighted_payoff, cancel_token=token)
        assert exc_info.value.completed == 0

    def test_payoff_errors_propagate(self, analyzer, record_space):
        def failing(sample):
            raise KeyError("missing")

        with pytest.raises(KeyError):
            analyzer.analyze(record_space, failing)

class TestViews:
    """Tabular view and engine integration"""

    def test_to_frame_sorted(self, analyzer, record_space):
        frame = analyzer.analyze(record_space, weighted_payoff).to_frame()

        assert isinstance(frame, pd.DataFrame)
        assert frame.index.name == "dimension"
        assert set(frame.index) == {"alpha", "beta", "gamma"}
        assert list(frame["normalized_index"]) == sorted(frame["normalized_index"], reverse=True)

    def test_engine_entry_point(self, engine, record_space):
        report = engine.sensitivity_analysis(record_space, weighted_payoff, n=200)
        assert report.samples_per_param == 200
        assert set(report.sensitivities) == {"alpha", "beta", "gamma"}
