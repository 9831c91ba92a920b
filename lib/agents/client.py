"""
HTTP client for the remote analysis agents.

Every call is a single JSON POST with a fixed timeout and no retry. Any
failure (transport error, non-2xx status, body that is not a JSON object
or does not fit the expected model) raises AgentError; callers decide how
to degrade.
"""

import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from lib import config
from lib.agents.models import ChatTurn, HealthAssessment, OrchestratorReply, PatternAnalysis, Timeline

logger = logging.getLogger(__name__)


class AgentError(Exception):
    """A remote agent call failed."""

    def __init__(self, agent: str, message: str, status_code: int | None = None):
        self.agent = agent
        self.status_code = status_code
        super().__init__(f"{agent}: {message}")


class AgentClient:
    """Calls the emotional, pattern, memory and orchestrator agents."""

    def __init__(
        self,
        emotional_url: str | None = None,
        pattern_url: str | None = None,
        memory_url: str | None = None,
        orchestrator_url: str | None = None,
        api_token: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.emotional_url = emotional_url or config.EMOTIONAL_AGENT_URL
        self.pattern_url = pattern_url or config.PATTERN_AGENT_URL
        self.memory_url = memory_url or config.MEMORY_AGENT_URL
        self.orchestrator_url = orchestrator_url or config.ORCHESTRATOR_URL
        self.api_token = api_token if api_token is not None else config.API_TOKEN
        self.timeout = timeout if timeout is not None else config.AGENT_TIMEOUT_SECONDS
        self._transport = transport

    def _headers(self, authorized: bool) -> dict:
        headers = {"Content-Type": "application/json"}
        if authorized and self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def _post(self, agent: str, url: str, payload: dict, authorized: bool = False) -> dict:
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(url, json=payload, headers=self._headers(authorized))
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("%s returned HTTP %s", agent, e.response.status_code)
            raise AgentError(agent, f"HTTP {e.response.status_code}", e.response.status_code) from e
        except httpx.RequestError as e:
            logger.error("%s request failed: %s", agent, e)
            raise AgentError(agent, f"request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise AgentError(agent, "response is not JSON") from e
        if not isinstance(data, dict):
            raise AgentError(agent, "response is not a JSON object")
        return data

    @staticmethod
    def _parse(agent: str, model: type[BaseModel], data: dict):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error("%s returned an unexpected response shape: %s", agent, e)
            raise AgentError(agent, "unexpected response shape") from e

    # ------------------------------------------------------------------

    def health_assessment(self, user_id: str) -> HealthAssessment:
        data = self._post(
            "emotional-agent",
            self.emotional_url,
            {"userId": user_id, "analysisType": "health_assessment", "includeBreakdown": True},
        )
        return self._parse("emotional-agent", HealthAssessment, data)

    def analyze_patterns(
        self,
        user_id: str,
        timeframe: str = "30d",
        analysis_type: str = "communication",
        query: str | None = None,
    ) -> PatternAnalysis:
        data = self._post(
            "pattern-agent",
            self.pattern_url,
            {
                "userId": user_id,
                "analysisType": analysis_type,
                "timeframe": timeframe,
                "query": query or f"Analyze {analysis_type} patterns over {timeframe}",
            },
        )
        return self._parse("pattern-agent", PatternAnalysis, data)

    def timeline(self, user_id: str, start_date: str | None, end_date: str | None) -> Timeline:
        data = self._post(
            "memory-agent",
            self.memory_url,
            {
                "userId": user_id,
                "queryType": "timeline",
                "startDate": start_date,
                "endDate": end_date,
                "includeMetrics": True,
            },
        )
        return self._parse("memory-agent", Timeline, data)

    def chat(
        self,
        user_id: str,
        message: str,
        history: Sequence[ChatTurn | dict[str, Any]] = (),
    ) -> OrchestratorReply:
        """Send a chat turn to the orchestrator with the last few turns of history."""
        recent = list(history)[-config.CHAT_HISTORY_LIMIT :]
        turns = [t.model_dump(exclude_none=True) if isinstance(t, ChatTurn) else t for t in recent]
        data = self._post(
            "orchestrator",
            self.orchestrator_url,
            {"userId": user_id, "message": message, "conversationHistory": turns},
            authorized=True,
        )
        return self._parse("orchestrator", OrchestratorReply, data)
