"""In-process athlete profile store, keyed by email."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict

from schemas import Profile, ProfileUpdate


class ProfileStore:
    def __init__(self) -> None:
        self._profiles: Dict[str, Profile] = {}

    def get(self, email: str) -> Profile:
        """Stored profile, or an empty one for a user who never saved it."""
        return self._profiles.get(email.lower()) or Profile(email=email.lower())

    def update(self, email: str, changes: ProfileUpdate) -> Profile:
        current = self.get(email)
        merged = current.model_copy(
            update={
                **changes.model_dump(exclude_unset=True),
                "updated_at": datetime.now(timezone.utc),
            }
        )
        self._profiles[email.lower()] = merged
        return merged
