"""
Base Monte Carlo Engine
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from config.settings import EngineSettings, load_settings
from utils.exceptions import SimulationCancelledError
from utils.helpers import get_timestamp

from .random_engine import RandomEngine

logger = logging.getLogger(__name__)

class CancellationToken:
    """Cooperative cancellation flag shared between a caller and a running engine"""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, operation: str, completed: int = 0) -> None:
        if self._event.is_set():
            logger.warning(f"{operation} cancelled after {completed} iterations")
            raise SimulationCancelledError(operation, completed)

class BaseMonteCarloEngine(ABC):
    """Base class holding configuration, the random engine and run statistics"""

    def __init__(self, settings: Optional[EngineSettings] = None, **overrides: Any):
        if settings is None:
            settings = load_settings(**overrides)
        elif overrides:
            settings = settings.with_overrides(**overrides)
        self.settings = settings

        self.rng = RandomEngine(settings.seed)
        self._stats = self._fresh_stats()

    @staticmethod
    def _fresh_stats() -> Dict[str, Any]:
        return {
            "total_samples": 0,
            "batches_run": 0,
            "last_converged": False,
            "created_at": get_timestamp(),
        }

    @staticmethod
    def _check_cancelled(token: Optional[CancellationToken], operation: str, completed: int) -> None:
        if token is not None:
            token.raise_if_cancelled(operation, completed)

    def get_stats(self) -> Dict[str, Any]:
        """Copy of the cumulative engine statistics"""
        return dict(self._stats)

    def reset(self) -> None:
        """Clear statistics and re-create the random engine from the configured seed"""
        self._stats = self._fresh_stats()
        self.rng = RandomEngine(self.settings.seed)

    @abstractmethod
    def simulate(self, *args, **kwargs):
        """Run the Monte Carlo simulation"""
        pass
