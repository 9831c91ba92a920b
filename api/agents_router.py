"""
Agent endpoints: orchestrator chat and the agent registry.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from api.identity import RequestIdentity, require_identity
from api.response_models import Envelope, error_body, wrap
from lib.agents import (
    AGENT_REGISTRY,
    AgentClient,
    AgentError,
    ChatRequest,
    format_agent_response,
)

logger = logging.getLogger(__name__)

agents_router = APIRouter(prefix="/api", tags=["agents"])

FALLBACK_REPLY = (
    "I'm having trouble processing your request right now. "
    "Could you try rephrasing your question?"
)
FALLBACK_AGENT_TYPE = "error-fallback"
FALLBACK_CONFIDENCE = 0.1


def get_agent_client() -> AgentClient:
    """Dependency; tests override it with a client on a mock transport."""
    return AgentClient()


@agents_router.post("/chat", response_model=Envelope)
def chat(
    body: ChatRequest,
    identity: RequestIdentity = Depends(require_identity),
    client: AgentClient = Depends(get_agent_client),
):
    """Forward a chat turn to the orchestrator. On agent failure, a fallback reply is returned with 502."""
    if not body.message or not body.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    try:
        reply = client.chat(identity.user_id, body.message, body.conversation_history)
    except AgentError as e:
        logger.warning("chat failed: %s", e)
        return JSONResponse(
            status_code=502,
            content=error_body(
                "Failed to process message",
                data={
                    "response": FALLBACK_REPLY,
                    "agentType": FALLBACK_AGENT_TYPE,
                    "confidence": FALLBACK_CONFIDENCE,
                    "timestamp": datetime.now().isoformat(),
                },
            ),
        )

    logger.info("chat answered by %s (confidence %.2f)", reply.agent_type, reply.confidence)
    return wrap(
        {
            "response": reply.response,
            "agentType": reply.agent_type,
            "confidence": reply.confidence,
            "nextSteps": reply.next_steps,
            "relatedInsights": reply.related_insights,
            "formatted": format_agent_response(
                reply.response, reply.agent_type or "", reply.confidence
            ),
            "timestamp": datetime.now().isoformat(),
        }
    )


@agents_router.get("/agents", response_model=Envelope)
def list_agents():
    return wrap({agent_type: caps.to_dict() for agent_type, caps in AGENT_REGISTRY.items()})
