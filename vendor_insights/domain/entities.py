from datetime import UTC, datetime
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- Enums / Literals ---
EventKind = Literal["scan", "page_view", "contact"]
ContactMethod = Literal["phone", "email", "location", "social", "whatsapp"]

EVENT_KINDS: tuple[str, ...] = ("scan", "page_view", "contact")
CONTACT_METHODS: tuple[str, ...] = ("phone", "whatsapp", "email", "location", "social")

# --- Attribution ---


class Attribution(BaseModel):
    """UTM-style marketing fields captured with an event."""

    model_config = ConfigDict(frozen=True)

    source: str | None = None
    medium: str | None = None
    campaign: str | None = None
    content: str | None = None
    term: str | None = None

    def has_any(self) -> bool:
        return any([self.source, self.medium, self.campaign, self.content, self.term])


# --- Events ---


class Event(BaseModel):
    """One interaction fact. Created once, never updated."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    tenant_id: str
    kind: EventKind
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    attribution: Attribution | None = None
    subject: dict[str, Any] = Field(default_factory=dict)

    @field_validator("occurred_at")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are treated as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
