"""
Relationship health score.

Combines five relationship signals into a single 0-10 composite. Each raw
signal is first normalized to [0, 1], then weighted. Inputs are not
validated: the calculator never raises on negative or oversized values and
the composite is always clamped to [0, 10].
"""

from dataclasses import dataclass

# Contribution of each normalized signal to the composite (sum to 1.0)
WEIGHTS: dict[str, float] = {
    "communication": 0.25,
    "sentiment": 0.30,
    "conflict": 0.20,  # inverted: more conflict, lower score
    "intimacy": 0.15,
    "responsiveness": 0.10,
}

# Normalization ceilings
MESSAGES_PER_DAY_CEILING = 50
CONFLICTS_PER_WEEK_CEILING = 10
INTIMACY_INDICATOR_CEILING = 10

SCORE_MIN = 0.0
SCORE_MAX = 10.0


@dataclass(frozen=True)
class HealthMetrics:
    """Raw inputs to the health score."""

    communication_frequency: float  # messages per day
    average_sentiment: float  # -1..1
    conflict_frequency: float  # conflict events per week
    intimacy_indicators: float  # count of affection markers
    responsiveness: float  # 0..1 reply ratio

    def to_dict(self) -> dict:
        return {
            "communicationFrequency": self.communication_frequency,
            "averageSentiment": self.average_sentiment,
            "conflictFrequency": self.conflict_frequency,
            "intimacyIndicators": self.intimacy_indicators,
            "responsiveness": self.responsiveness,
        }


def normalize_metrics(metrics: HealthMetrics) -> dict[str, float]:
    """
    Map each raw signal onto [0, 1] for in-range input.

    Only the ceilings are applied here; out-of-range input can push a signal
    below 0 (or sentiment above 1), which the final clamp absorbs.
    """
    return {
        "communication": min(metrics.communication_frequency / MESSAGES_PER_DAY_CEILING, 1),
        "sentiment": (metrics.average_sentiment + 1) / 2,
        "conflict": max(0, 1 - metrics.conflict_frequency / CONFLICTS_PER_WEEK_CEILING),
        "intimacy": min(metrics.intimacy_indicators / INTIMACY_INDICATOR_CEILING, 1),
        "responsiveness": min(metrics.responsiveness, 1),
    }


def calculate_health_score(metrics: HealthMetrics) -> float:
    """
    Weighted 0-10 health score, rounded to two decimals.

    >>> calculate_health_score(HealthMetrics(50, 1, 0, 10, 1))
    10.0
    """
    normalized = normalize_metrics(metrics)
    weighted = sum(normalized[key] * weight for key, weight in WEIGHTS.items())
    score = round(weighted * 10, 2)
    return max(SCORE_MIN, min(score, SCORE_MAX))


def score_breakdown(metrics: HealthMetrics) -> dict[str, dict[str, float]]:
    """Per-signal normalized value, weight and contribution to the 0-10 score."""
    normalized = normalize_metrics(metrics)
    return {
        key: {
            "normalized": round(normalized[key], 4),
            "weight": weight,
            "contribution": round(normalized[key] * weight * 10, 2),
        }
        for key, weight in WEIGHTS.items()
    }


def communication_health(total_messages: int, years_of_data: float) -> float:
    """
    Volume-only 0-10 health heuristic used on the dashboard.

    Messages per year:
      under 1000  -> 0-3
      1000-5000   -> 3-7
      5000+       -> 7-10
    """
    if years_of_data <= 0:
        return 0.0

    messages_per_year = total_messages / years_of_data

    if messages_per_year < 1000:
        return min(3.0, messages_per_year / 333)
    if messages_per_year < 5000:
        return 3 + (messages_per_year - 1000) / 1000
    return min(10.0, 7 + (messages_per_year - 5000) / 2500)
