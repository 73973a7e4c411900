"""
Pydantic models for event ("meet") data.

``EventCreate`` is the creation payload.  Its ``date`` is accepted as a
string and parsed by the service so that an unparseable value is
reported alongside the other per-field errors.  ``EventRead`` is what
the feed returns; ``EventPage`` wraps one page of the feed.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from .base import ApiModel
from .user import UserSummary


class EventType(str, Enum):
    VIRTUAL = "VIRTUAL"
    IN_PERSON = "IN_PERSON"


class SortBy(str, Enum):
    """Feed orderings.  Both are newest first."""

    DATE_POSTED = "DATE_POSTED"
    EVENT_DATE = "EVENT_DATE"


class EventCreate(ApiModel):
    name: str = Field(..., examples=["Sunrise hike"])
    description: str = Field(..., examples=["Easy loop, bring water"])
    location: str = Field(..., examples=["Trailhead parking lot"])
    date: str = Field(..., examples=["2026-11-01T07:00:00Z"])
    type: EventType = Field(..., examples=["IN_PERSON"])
    images: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list, examples=[["outdoors", "hiking"]])


class EventCreated(ApiModel):
    id: str


class EventRead(ApiModel):
    id: str
    name: str
    description: str
    location_name: Optional[str] = None
    date: datetime
    type: EventType
    images: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    coordinator: UserSummary
    num_attendees: int = 0
    # Whether the caller attends; always False for anonymous callers.
    is_registered: bool = False


class EventPage(ApiModel):
    data: List[EventRead]
    has_more: bool
    cursor: Optional[str] = None
