from .technical import TechnicalAnalyzer
from .scoring import (
    beginner_recommendation,
    compute_score,
    recommendation,
    risk_level,
    score_analysis,
)
