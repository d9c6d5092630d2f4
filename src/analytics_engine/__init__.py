"""
Analytics engine for pathway risk and sensitivity analysis
"""

from .risk_analytics import (
    PathwayRiskAssessor,
    WeightedAlternative,
    PathwayRisk,
    RiskAssessment,
)
from .sensitivity import SensitivityAnalyzer, SensitivityReport, DimensionSensitivity

__all__ = [
    'PathwayRiskAssessor',
    'WeightedAlternative',
    'PathwayRisk',
    'RiskAssessment',
    'SensitivityAnalyzer',
    'SensitivityReport',
    'DimensionSensitivity',
]
