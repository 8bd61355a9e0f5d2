"""
Inbound webhook endpoints.

GoHighLevel posts inbound SMS messages here; YES/NO replies answer the
volunteer's latest event invitation.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body

from churchsync.core.logging_config import get_logger
from churchsync.core.models.io.common import ActionResponse, ErrorResponse
from churchsync.core.models.io.events import InboundSmsResult
from churchsync.server.services.deps import SessionDep
from churchsync.server.services.events import EventService

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])


@router.post(
    "/ghl/inbound-sms",
    response_model=ActionResponse[InboundSmsResult],
    summary="GoHighLevel Inbound SMS",
    description="Apply a volunteer's YES/NO text reply to their most recent invitation.",
    response_description="What the reply did: confirmed, declined, or why it was ignored.",
    responses={400: {"model": ErrorResponse, "description": "Payload without a contact id"}},
)
async def ghl_inbound_sms(
    session: SessionDep, payload: Dict[str, Any] = Body(...)
) -> ActionResponse[InboundSmsResult]:
    """
    Handle an inbound SMS.

    - **contactId**: GoHighLevel contact that sent the message.
    - **message** / **body** / **text**: The message text.
    """
    logger.debug(f"Inbound SMS webhook with keys {sorted(payload)}")
    return await EventService(session).process_inbound_sms(payload)
