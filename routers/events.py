"""
Event log routes. Observers poll with the last sequence they processed;
anyone can re-verify the hash chain.
"""
from fastapi import APIRouter, Depends, Query

from dependencies import get_registry
from schemas.event import ChainVerificationResponse, EventListResponse, EventResponse
from services import ReceiptRegistry

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=EventListResponse)
def list_events(
     after: int = Query(0, ge=0),
     limit: int = Query(100, ge=1, le=500),
     registry: ReceiptRegistry = Depends(get_registry)
):
     events = [EventResponse.model_validate(e) for e in registry.list_events(after, limit)]
     next_after = events[-1].sequence if events else after
     return EventListResponse(events=events, next_after=next_after)


@router.get("/verify", response_model=ChainVerificationResponse, summary="Verify the event hash chain")
def verify_events(registry: ReceiptRegistry = Depends(get_registry)):
     valid, message, checked = registry.verify_event_chain()
     return ChainVerificationResponse(valid=valid, message=message, events_checked=checked)
