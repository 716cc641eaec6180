from typing import List, Optional

from fastapi import APIRouter, Depends, status

from core.auth import get_current_user
from core.dependencies import get_event_store
from core.exceptions import NotFoundError
from schemas import Event, EventCreate, UserIdentity
from services.event_store import EventStore

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=List[Event])
async def list_events(sport: Optional[str] = None, events: EventStore = Depends(get_event_store)):
    return events.list(sport=sport)


@router.get("/{event_id}", response_model=Event)
async def get_event(event_id: str, events: EventStore = Depends(get_event_store)):
    event = events.get(event_id)
    if event is None:
        raise NotFoundError("Event", event_id)
    return event


@router.post("", response_model=Event, status_code=status.HTTP_201_CREATED)
async def create_event(
    data: EventCreate,
    user: UserIdentity = Depends(get_current_user),
    events: EventStore = Depends(get_event_store),
):
    return events.create(data, organizer_email=user.email)
