"""Known remote agents and helpers for presenting their output."""

from collections.abc import Sequence
from dataclasses import asdict, dataclass

DEFAULT_AGENT_NAME = "AI Coach"


@dataclass(frozen=True)
class AgentCapabilities:
    name: str
    description: str
    specialties: tuple[str, ...]
    confidence_threshold: float
    max_context_length: int

    def to_dict(self) -> dict:
        data = asdict(self)
        data["specialties"] = list(self.specialties)
        return data


AGENT_REGISTRY: dict[str, AgentCapabilities] = {
    "coaching-agent": AgentCapabilities(
        name="Relationship Coach",
        description="Provides strategic relationship guidance and actionable advice",
        specialties=("immediate_guidance", "communication_coaching", "strategic_planning"),
        confidence_threshold=0.7,
        max_context_length=4000,
    ),
    "pattern-agent": AgentCapabilities(
        name="Pattern Analyst",
        description="Identifies trends and patterns in relationship dynamics",
        specialties=("trend_analysis", "communication_evolution", "behavioral_patterns"),
        confidence_threshold=0.8,
        max_context_length=8000,
    ),
    "conflict-agent": AgentCapabilities(
        name="Conflict Specialist",
        description="Analyzes and provides resolution strategies for relationship conflicts",
        specialties=("conflict_analysis", "escalation_detection", "resolution_strategies"),
        confidence_threshold=0.85,
        max_context_length=6000,
    ),
    "emotional-agent": AgentCapabilities(
        name="Emotional Intelligence Specialist",
        description="Tracks emotional health and provides attachment-focused insights",
        specialties=("sentiment_analysis", "attachment_coaching", "emotional_health"),
        confidence_threshold=0.75,
        max_context_length=5000,
    ),
    "memory-agent": AgentCapabilities(
        name="Relationship Historian",
        description="Retrieves and contextualizes relationship history and data",
        specialties=("data_retrieval", "historical_context", "timeline_analysis"),
        confidence_threshold=0.9,
        max_context_length=10000,
    ),
}


def get_agent_capabilities(agent_type: str) -> AgentCapabilities | None:
    return AGENT_REGISTRY.get(agent_type)


def format_agent_response(response: str, agent_type: str, confidence: float) -> str:
    """Prefix an agent reply with the agent's name and a confidence label."""
    agent = AGENT_REGISTRY.get(agent_type)
    name = agent.name if agent else DEFAULT_AGENT_NAME

    if confidence >= 0.9:
        label = "High confidence"
    elif confidence >= 0.7:
        label = "Moderate confidence"
    else:
        label = "Initial assessment"

    return f"**{name}** {label}\n\n{response}"


def format_insight_for_user(insight: str, supporting_data: Sequence, confidence: float) -> str:
    # strict thresholds here, unlike format_agent_response
    if confidence > 0.8:
        label = "High confidence"
    elif confidence > 0.6:
        label = "Moderate confidence"
    else:
        label = "Initial assessment"
    return f"{insight}\n\n*{label} based on {len(supporting_data)} data points*"
