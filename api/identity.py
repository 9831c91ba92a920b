"""
Request identity for Unmask.

Every handler that touches user data depends on `require_identity`, which
resolves the caller from the X-User-Id header, falling back to
UNMASK_DEFAULT_USER_ID for single-user deployments. With neither, the
request is rejected with 401.

Usage:
    from api.identity import RequestIdentity, require_identity

    @router.get("/thing")
    def thing(identity: RequestIdentity = Depends(require_identity)):
        agents.timeline(identity.user_id, ...)
"""

import logging
from dataclasses import dataclass

from fastapi import HTTPException, Request

from lib import config
from lib.observability.context import bind_user_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestIdentity:
    user_id: str
    source: str  # "header" | "default"


def _get_user_from_request(request: Request) -> str | None:
    value = request.headers.get(config.USER_ID_HEADER, "").strip()
    return value or None


async def require_identity(request: Request) -> RequestIdentity:
    """
    Dependency resolving the caller.

    Binds the user id into the logging context and onto request.state.

    Raises HTTPException 401 when no identity can be determined.
    """
    user_id = _get_user_from_request(request)
    source = "header"
    if user_id is None:
        user_id = config.DEFAULT_USER_ID
        source = "default"

    if not user_id:
        logger.warning("No identity for %s", request.url.path)
        raise HTTPException(
            status_code=401,
            detail=f"Identity required. Provide the {config.USER_ID_HEADER} header.",
        )

    bind_user_id(user_id)
    request.state.user_id = user_id
    return RequestIdentity(user_id=user_id, source=source)
