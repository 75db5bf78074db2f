"""Round summaries, trends, the processing pipeline and persistence."""

from .models import (
    ConfidenceStats,
    InsightCard,
    InsightType,
    RoundSession,
    RoundSummary,
    TrendData,
    format_sg,
)
from .pipeline import process_round, summarize
from .service import RoundNotFound, RoundService, get_round_service
from .summary import InsightGenerator, RoundAggregator, TrendsCalculator

__all__ = [
    "ConfidenceStats",
    "InsightCard",
    "InsightGenerator",
    "InsightType",
    "RoundAggregator",
    "RoundNotFound",
    "RoundService",
    "RoundSession",
    "RoundSummary",
    "TrendData",
    "TrendsCalculator",
    "format_sg",
    "get_round_service",
    "process_round",
    "summarize",
]
