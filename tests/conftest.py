"""
Shared fixtures for engine tests
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from config.settings import load_settings
from monte_carlo_engine.engine import MonteCarloEngine
from monte_carlo_engine.random_engine import RandomEngine

@pytest.fixture(autouse=True)
def clean_engine_env(monkeypatch):
    """Keep MCE_* variables from the outer environment out of the tests"""
    import os
    for name in list(os.environ):
        if name.upper().startswith("MCE_"):
            monkeypatch.delenv(name, raising=False)

@pytest.fixture
def rng():
    return RandomEngine(seed=12345)

@pytest.fixture
def two_dimension_space():
    return {"a": 0.2, "b": 0.8}

@pytest.fixture
def record_space():
    return [
        {"key": "alpha", "probability": 0.6, "phase": 0.3, "coherence": 0.9},
        {"key": "beta", "probability": 0.3},
        {"key": "gamma", "probability": 0.1},
    ]

@pytest.fixture
def engine():
    """Seeded engine with a small budget and a criterion that never fires"""
    settings = load_settings(
        seed=42,
        max_samples=5000,
        batch_size=1000,
        burn_in=0,
        strategy="uniform",
        criterion="variance",
        convergence_threshold=1e-12,
    )
    return MonteCarloEngine(settings)
