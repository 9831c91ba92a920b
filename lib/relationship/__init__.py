"""
Relationship analytics: health score, monthly seasons, metric derivation.

All functions here are pure; loading rows is the caller's job (lib/messages.py).
"""

from .health_score import (
    WEIGHTS,
    HealthMetrics,
    calculate_health_score,
    communication_health,
    normalize_metrics,
    score_breakdown,
)
from .metrics import derive_metrics
from .models import Message, Sender
from .seasons import (
    MonthlyBucket,
    Theme,
    classify_theme,
    detect_emotional_seasons,
    extract_key_events,
    group_by_month,
)

__all__ = [
    "WEIGHTS",
    "HealthMetrics",
    "calculate_health_score",
    "communication_health",
    "normalize_metrics",
    "score_breakdown",
    "derive_metrics",
    "Message",
    "Sender",
    "MonthlyBucket",
    "Theme",
    "classify_theme",
    "detect_emotional_seasons",
    "extract_key_events",
    "group_by_month",
]
