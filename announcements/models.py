from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

from .config import DEFAULT_BODY, DEFAULT_SENDER_NAME, DEFAULT_TITLE


class InvalidEventError(ValueError):
    """Raised when a trigger payload cannot be turned into an announcement."""


def _firestore_value(value: Any) -> Any:
    # Firestore document events wrap every field as {"stringValue": ...} etc.
    if not isinstance(value, dict):
        return value
    if "nullValue" in value:
        return None
    for key in ("stringValue", "integerValue", "doubleValue", "booleanValue", "timestampValue"):
        if key in value:
            return value[key]
    return None


def _text(value: Any) -> Optional[str]:
    # FCM only accepts string notification and data values.
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


@dataclass(frozen=True, slots=True)
class AnnouncementRecord:
    """An announcement document as read from the store."""

    id: str
    title: Optional[str] = None
    body: Optional[str] = None
    sender_name: Optional[str] = None

    @property
    def resolved_title(self) -> str:
        return self.title or DEFAULT_TITLE

    @property
    def resolved_body(self) -> str:
        return self.body or DEFAULT_BODY

    @property
    def resolved_sender_name(self) -> str:
        return self.sender_name or DEFAULT_SENDER_NAME

    @classmethod
    def from_fields(cls, announcement_id: str, fields: Dict[str, Any]) -> "AnnouncementRecord":
        return cls(
            id=str(announcement_id),
            title=_text(fields.get("title")),
            body=_text(fields.get("body")),
            sender_name=_text(fields.get("senderName") or fields.get("sender_name")),
        )

    @classmethod
    def from_event(cls, payload: Any) -> "AnnouncementRecord":
        """Parse a document-created event.

        Accepts the plain ``{"announcementId", "data"}`` shape, the
        ``{"params": {"announcementId"}, "data"}`` shape and the Firestore
        ``{"value": {"name", "fields"}}`` document event.
        """
        if not isinstance(payload, dict):
            raise InvalidEventError("Event payload must be a JSON object")

        value = payload.get("value")
        if isinstance(value, dict) and "fields" in value:
            name = str(value.get("name") or "")
            announcement_id = name.rstrip("/").rsplit("/", 1)[-1] if name else ""
            raw_fields = value.get("fields") or {}
            fields = {key: _firestore_value(val) for key, val in raw_fields.items()}
        else:
            params = payload.get("params") or {}
            announcement_id = payload.get("announcementId") or payload.get("id") or params.get("announcementId")
            fields = payload.get("data") or {}

        if not announcement_id:
            raise InvalidEventError("Event payload is missing the announcement id")
        if not isinstance(fields, dict):
            raise InvalidEventError("Announcement data must be a JSON object")
        return cls.from_fields(announcement_id, fields)


@dataclass(slots=True)
class Recipient:
    """A user from the roster that may receive SMS."""

    user_id: str
    phone_number: Optional[str] = None


@dataclass(slots=True)
class PushJob:
    """Notification payload addressed to a broadcast topic."""

    title: str
    body: str
    topic: str
    data: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class SmsJob:
    """One SMS message for one phone number."""

    to: str
    body: str
    user_id: Optional[str] = None


@dataclass(slots=True)
class JobOutcome:
    """Settled result of one concurrently submitted job."""

    job: Any
    ok: bool
    result: Any = None
    error: Optional[BaseException] = None


@dataclass(slots=True)
class DispatchResult:
    push_sent: bool = False
    push_message_id: Optional[str] = None
    sms_enabled: bool = False
    sms_attempted: int = 0
    sms_succeeded: int = 0
    sms_failed: int = 0
    sms_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
