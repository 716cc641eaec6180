"""In-process store for community sports events."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4

from schemas import Event, EventCreate


class EventStore:
    def __init__(self) -> None:
        self._events: Dict[str, Event] = {}

    def create(self, data: EventCreate, organizer_email: str) -> Event:
        event = Event(
            id=str(uuid4()),
            organizer_email=organizer_email,
            created_at=datetime.now(timezone.utc),
            **data.model_dump(),
        )
        self._events[event.id] = event
        return event

    def get(self, event_id: str) -> Optional[Event]:
        return self._events.get(event_id)

    def list(self, sport: Optional[str] = None) -> List[Event]:
        """Events ordered by start time, optionally filtered by sport (case-insensitive)."""
        events = self._events.values()
        if sport:
            events = [e for e in events if e.sport.lower() == sport.lower()]
        return sorted(events, key=lambda e: e.starts_at)
