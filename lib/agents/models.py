"""
Typed agent payloads.

Agents answer with loosely shaped JSON. Every field below is optional on the
wire: a missing key or an explicit null falls back to the declared default.
Field names are snake_case in Python and camelCase on the wire.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class AgentPayload(BaseModel):
    """Base for agent responses: camelCase aliases, unknown keys kept, nulls ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class HealthAssessment(AgentPayload):
    """Emotional agent health assessment."""

    health_score: float = 7.5
    breakdown: dict[str, Any] = Field(default_factory=dict)
    trend: str = "stable"
    recommendations: list[Any] = Field(default_factory=list)


class PatternAnalysis(AgentPayload):
    insights: list[Any] = Field(default_factory=list)
    confidence: float = 0.8


class Timeline(AgentPayload):
    events: list[Any] = Field(default_factory=list)
    metrics: dict[str, Any] = Field(default_factory=dict)
    insights: list[Any] = Field(default_factory=list)


class OrchestratorReply(AgentPayload):
    response: str = ""
    agent_type: str | None = None
    confidence: float = 0.0
    supporting_data: Any = None
    next_steps: list[str] = Field(default_factory=list)
    related_insights: list[str] = Field(default_factory=list)


# ==== Inbound requests ====


class ChatTurn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: Literal["user", "assistant"]
    content: str
    timestamp: str | None = None


class ChatRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str = ""
    conversation_history: list[ChatTurn] = Field(default_factory=list)
