from typing import Any, Dict, Optional
from enum import Enum
from pydantic import BaseModel, Field, field_validator
from google.cloud import firestore


class RegistrationStatus(str, Enum):
    REGISTERED = "registered"
    APPROVED = "approved"
    PENDING = "pending"


class InvalidRegistration(ValueError):
    """Legacy registration that cannot be placed under an event"""

    def __init__(self, registration_id: str, user_id: str):
        super().__init__(f"Registration {registration_id} of user {user_id} has no eventId")
        self.registration_id = registration_id
        self.user_id = user_id


def normalize_event_id(raw: Optional[str]) -> Optional[str]:
    """Return the bare event ID, taking the last segment of path-like values"""
    if not raw:
        return None
    if "/" in raw:
        raw = raw.split("/")[-1]
    return raw or None


def normalize_status(raw: Any) -> Any:
    """Map legacy status values onto the event registration statuses"""
    if raw == RegistrationStatus.REGISTERED.value:
        return RegistrationStatus.APPROVED.value
    return raw or RegistrationStatus.PENDING.value


class LegacyRegistration(BaseModel):
    """Registration stored under users/{user_id}/registrations/{registration_id}"""
    registration_id: str
    user_id: str
    event_id: Optional[str] = Field(None, alias="eventId")
    registered_on: Optional[Any] = Field(None, alias="registeredOn")
    status: Optional[Any] = None  # stored values pass through untouched

    class Config:
        populate_by_name = True

    @field_validator("event_id", mode="before")
    @classmethod
    def _coerce_event_id(cls, value: Any) -> Optional[str]:
        # DocumentReference -> its path; numeric IDs -> str; anything else is unusable
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return str(value)
        path = getattr(value, "path", None)
        return path if isinstance(path, str) else None

    @classmethod
    def from_snapshot(cls, user_id: str, snapshot) -> "LegacyRegistration":
        data = snapshot.to_dict() or {}
        return cls(
            registration_id=snapshot.id,
            user_id=user_id,
            eventId=data.get("eventId"),
            registeredOn=data.get("registeredOn"),
            status=data.get("status"),
        )

    @property
    def canonical_event_id(self) -> Optional[str]:
        return normalize_event_id(self.event_id)


class EventRegistration(BaseModel):
    """Registration stored under events/{event_id}/registrations/{user_id}"""
    user_id: str
    event_id: str
    registered_at: Optional[Any] = None  # datetime or Firestore timestamp
    status: Any = RegistrationStatus.PENDING.value

    @classmethod
    def from_legacy(cls, legacy: LegacyRegistration) -> "EventRegistration":
        """Build the event-side record; raises InvalidRegistration without an eventId"""
        event_id = legacy.canonical_event_id
        if not event_id:
            raise InvalidRegistration(legacy.registration_id, legacy.user_id)
        return cls(
            user_id=legacy.user_id,
            event_id=event_id,
            registered_at=legacy.registered_on,
            status=normalize_status(legacy.status),
        )

    def to_document(self) -> Dict[str, Any]:
        # Missing timestamps are filled in by the server at write time
        return {
            "userId": self.user_id,
            "eventId": self.event_id,
            "registeredAt": self.registered_at or firestore.SERVER_TIMESTAMP,
            "status": self.status,
        }
