"""
Logging configuration for the Monte Carlo pathway engine
"""

import logging
import logging.config
import sys
from pathlib import Path
from typing import Dict, Any, Optional, Union
from datetime import datetime

def setup_logging(
    level: str = "INFO",
    log_dir: Optional[Union[str, Path]] = None,
    json_format: bool = False
) -> None:
    """
    Setup logging configuration

    Args:
        level: Level for the engine loggers
        log_dir: Directory for rotating log files; console only when None
        json_format: Emit console records as JSON
    """
    handlers = ["console"]

    log_config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            },
            "simple": {
                "format": "%(levelname)s - %(message)s"
            },
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(funcName)s %(lineno)d %(message)s"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "json" if json_format else "simple",
                "stream": sys.stdout
            }
        },
        "loggers": {},
        "root": {
            "level": "WARNING",
            "handlers": ["console"]
        }
    }

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        log_config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "detailed",
            "filename": str(log_path / "montecarlo.log"),
            "maxBytes": 10485760,  # 10MB
            "backupCount": 10
        }
        log_config["handlers"]["json_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "INFO",
            "formatter": "json",
            "filename": str(log_path / "montecarlo.json.log"),
            "maxBytes": 10485760,
            "backupCount": 5
        }
        handlers += ["file", "json_file"]

    for name in ("monte_carlo_engine", "tree_search", "analytics_engine"):
        log_config["loggers"][name] = {
            "level": level,
            "handlers": handlers,
            "propagate": False
        }

    logging.config.dictConfig(log_config)

class EngineLogger:
    """Structured event logger for engine runs"""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def log_simulation_start(self, simulation_type: str, params: Dict[str, Any]):
        """Log simulation start"""
        self.logger.info(
            f"{simulation_type} started",
            extra={
                "event_type": "simulation_start",
                "simulation_type": simulation_type,
                "parameters": params,
                "timestamp": datetime.now().isoformat()
            }
        )

    def log_simulation_complete(self, simulation_type: str, duration: float, results: Dict[str, Any]):
        """Log simulation completion"""
        self.logger.info(
            f"{simulation_type} completed in {duration:.3f}s",
            extra={
                "event_type": "simulation_complete",
                "simulation_type": simulation_type,
                "duration_seconds": duration,
                "results_summary": results,
                "timestamp": datetime.now().isoformat()
            }
        )

    def log_batch(self, batch_index: int, sample_count: int, converged: bool):
        """Log one batch convergence check"""
        self.logger.debug(
            f"Batch {batch_index}: {sample_count} samples, converged={converged}",
            extra={
                "event_type": "batch_complete",
                "batch_index": batch_index,
                "sample_count": sample_count,
                "converged": converged
            }
        )

    def log_error(self, error: Exception, context: Dict[str, Any] = None):
        """Log error with context"""
        self.logger.error(
            f"Error occurred: {str(error)}",
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_message": str(error),
                "context": context or {},
                "timestamp": datetime.now().isoformat()
            },
            exc_info=True
        )
