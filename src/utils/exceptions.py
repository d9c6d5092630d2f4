"""
Custom exceptions for the Monte Carlo pathway engine
"""

class MonteCarloEngineError(Exception):
    """Base exception for the engine"""
    pass

class ConfigurationError(MonteCarloEngineError):
    """Exception raised for invalid engine configuration or call parameters"""
    pass

class ValidationError(MonteCarloEngineError):
    """Exception raised for malformed caller-supplied data"""
    pass

class SimulationError(MonteCarloEngineError):
    """Exception raised for simulation-related errors"""
    pass

class SimulationCancelledError(SimulationError):
    """Exception raised when a run observes a cancellation request"""
    def __init__(self, operation: str, completed: int = 0):
        super().__init__(f"{operation} cancelled after {completed} completed iterations")
        self.operation = operation
        self.completed = completed
