# app/ticket/schemas.py
from datetime import datetime, timezone
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Priority(str, Enum):
    VIP = "VIP"
    REGULAR = "Regular"


class TicketStatus(str, Enum):
    OPEN = "Open"
    ASSIGNED = "Assigned"
    RESOLVED = "Resolved"


class TicketBase(BaseModel):
    title: str = Field(..., min_length=5, max_length=80)
    description: str = Field(..., min_length=20, max_length=500)
    priority: Priority

    model_config = ConfigDict(str_strip_whitespace=True)


class TicketCreate(TicketBase):
    pass


class TicketOut(BaseModel):
    """A ticket as the store returns it. Instances are never mutated in place."""

    id: str
    title: str
    description: str
    priority: Priority
    status: TicketStatus = TicketStatus.OPEN
    created_at: datetime = Field(
        validation_alias=AliasChoices("createdAt", "created_at"),
        serialization_alias="createdAt",
    )
    assignee: str | None = None

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive datetimes; everything we store is UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class TicketList(BaseModel):
    tickets: list[TicketOut]


class AssignRequest(BaseModel):
    assignee: str = Field(..., min_length=1)


class AssignResult(BaseModel):
    id: str
    status: TicketStatus
    assignee: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ResolveResult(BaseModel):
    id: str
    status: TicketStatus

    model_config = ConfigDict(from_attributes=True)
