"""Refresh Balancer.

Load analysis and what-if simulation for BI extract-refresh schedules:
validate schedule definitions, expand them into hourly run occurrences,
score how evenly the load is spread and preview the effect of rescheduling.
"""

__version__ = "0.1.0"

from refresh_balancer.infrastructure.config import AnalyzerConfig
from refresh_balancer.services.analysis import AnalysisResult, RefreshAnalyzer
from refresh_balancer.services.validation import parse_schedule

__all__ = [
    "AnalysisResult",
    "AnalyzerConfig",
    "RefreshAnalyzer",
    "parse_schedule",
]
