"""Remote analysis agents: registry, typed payloads and HTTP client."""

from .client import AgentClient, AgentError
from .models import ChatRequest, ChatTurn, HealthAssessment, OrchestratorReply, PatternAnalysis, Timeline
from .registry import (
    AGENT_REGISTRY,
    AgentCapabilities,
    format_agent_response,
    format_insight_for_user,
    get_agent_capabilities,
)

__all__ = [
    "AgentClient",
    "AgentError",
    "ChatRequest",
    "ChatTurn",
    "HealthAssessment",
    "OrchestratorReply",
    "PatternAnalysis",
    "Timeline",
    "AGENT_REGISTRY",
    "AgentCapabilities",
    "format_agent_response",
    "format_insight_for_user",
    "get_agent_capabilities",
]
