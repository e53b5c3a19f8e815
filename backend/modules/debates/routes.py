"""
Debate API endpoints.

Provides REST endpoints to trigger and inspect debates, and an SSE stream
of each debate's observer channel.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sse_starlette.sse import EventSourceResponse

from api.dependencies import get_debate_service
from modules.realtime import SubscriptionTokenError, channel_for, verify_subscription_token

from .exceptions import UnknownDebateError
from .interfaces import IDebateService
from .models import (
    Debate,
    DebateListResponse,
    SubscriptionTokenResponse,
    TriggerDebateRequest,
    TriggerDebateResponse,
)

router = APIRouter()


@router.post("", response_model=TriggerDebateResponse, status_code=202)
async def trigger_debate(
    request: TriggerDebateRequest,
    service: IDebateService = Depends(get_debate_service),
) -> TriggerDebateResponse:
    """
    Start a new debate.

    The debate runs in the background. Poll GET /{debate_id} for the
    snapshot or request a token and subscribe to /{debate_id}/stream.
    """
    debate_id = await service.trigger_debate(request.topic, request.request_id)
    return TriggerDebateResponse(debate_id=debate_id, channel=channel_for(debate_id))


@router.get("", response_model=DebateListResponse)
async def list_debates(
    service: IDebateService = Depends(get_debate_service),
) -> DebateListResponse:
    """List all debates, most recent first."""
    return await service.list_debates()


@router.get("/{debate_id}", response_model=Debate)
async def get_debate(
    debate_id: str,
    service: IDebateService = Depends(get_debate_service),
) -> Debate:
    """Get the current snapshot of a debate."""
    debate = await service.get_debate(debate_id)
    if not debate:
        raise HTTPException(status_code=404, detail="Debate not found")
    return debate


@router.post("/{debate_id}/token", response_model=SubscriptionTokenResponse)
async def issue_token(
    debate_id: str,
    service: IDebateService = Depends(get_debate_service),
) -> SubscriptionTokenResponse:
    """Issue a short-lived token for the debate's observer channel."""
    try:
        return service.issue_token(debate_id)
    except UnknownDebateError:
        raise HTTPException(status_code=404, detail="Debate not found")


async def event_generator(debate_id: str, service: IDebateService):
    """
    Generate SSE events for a debate.

    Yields events in the format:
        event: <message_type>
        data: <json_data>
    """
    async for message in service.subscribe(debate_id):
        yield {
            "event": message.type.value,
            "id": str(message.sequence),
            "data": message.model_dump_json(exclude_none=True),
        }


@router.get("/{debate_id}/stream")
async def stream_debate(
    debate_id: str,
    token: str = Query(..., description="Subscription token from POST /{debate_id}/token"),
    service: IDebateService = Depends(get_debate_service),
):
    """
    Stream a debate's messages via SSE.

    Messages already published are replayed first; the stream ends when
    the debate completes or fails.

    Event types (from DebateMessageType):
    - init: Topic analysis and agents
    - status: Phase, sub-label and progress
    - opening / rebuttal / closing: One side's statement
    - cross-exam: One cross-examination round
    - lightning: The lightning round
    - verdict-judge: One judge's scores
    - verdict-final: Totals and winner
    - momentum: Momentum snapshot
    """
    try:
        verify_subscription_token(token, channel_for(debate_id))
    except SubscriptionTokenError as e:
        raise HTTPException(status_code=401, detail=e.message)

    if not await service.get_debate(debate_id):
        raise HTTPException(status_code=404, detail="Debate not found")

    return EventSourceResponse(
        event_generator(debate_id, service),
        media_type="text/event-stream",
    )
