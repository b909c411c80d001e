"""Score document lines against mined bug patterns."""

from .risk_scorer import RiskScorer, Sensitivity, adjust_for_sensitivity, risk_level
from .scanner import LineScanner

__all__ = [
    "LineScanner",
    "RiskScorer",
    "Sensitivity",
    "adjust_for_sensitivity",
    "risk_level",
]
