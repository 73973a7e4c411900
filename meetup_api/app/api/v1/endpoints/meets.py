"""
Meet endpoints for API v1.

Create a meet, browse the paginated feed, fetch one meet, register for
it and list its attendees.  Creating and registering require a bearer
token; reading is public, with per-caller annotations when a token is
sent.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from meetup_api.app.core.config import settings
from meetup_api.app.core.security import get_current_user, get_optional_user
from meetup_api.app.schemas.event import EventCreate, EventCreated, EventPage, EventRead, SortBy
from meetup_api.app.schemas.user import UserSummary
from meetup_api.app.services.event_service import EventService
from meetup_api.app.services.registration_service import RegistrationService

router = APIRouter()


@router.post("/", response_model=EventCreated, status_code=status.HTTP_201_CREATED)
async def create_meet(
    payload: EventCreate,
    current_user: dict = Depends(get_current_user),
) -> EventCreated:
    """Create a meet coordinated by the caller and return its id."""
    return EventCreated(id=await EventService.create_event(payload, current_user))


@router.get("/", response_model=EventPage)
async def list_meets(
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    cursor: Optional[str] = Query(None, description="Id of the last meet of the previous page"),
    sort_by: SortBy = Query(SortBy.DATE_POSTED, alias="sortBy"),
    registered: bool = Query(False, description="Only meets the caller is registered for"),
    current_user: Optional[dict] = Depends(get_optional_user),
) -> EventPage:
    """Page through meets, newest first.

    - **limit** – page size, 1 to 100.
    - **cursor** – value of ``cursor`` from the previous response.
    - **sortBy** – ``DATE_POSTED`` or ``EVENT_DATE``.
    - **registered** – requires a token.
    """
    return await EventService.list_events(
        limit=limit,
        cursor=cursor,
        sort_by=sort_by,
        registered_only=registered,
        current_user=current_user,
    )


@router.get("/{event_id}", response_model=EventRead)
async def get_meet(
    event_id: str = Path(..., description="ID of the meet"),
    current_user: Optional[dict] = Depends(get_optional_user),
) -> EventRead:
    return await EventService.get_event(event_id, current_user)


@router.post("/{event_id}/register", response_model=bool)
async def register_for_meet(
    event_id: str = Path(..., description="ID of the meet to attend"),
    current_user: dict = Depends(get_current_user),
) -> bool:
    """Register the caller for a meet.  Repeating the call is harmless."""
    return await RegistrationService.register(event_id, current_user)


@router.get("/{event_id}/attendees", response_model=List[UserSummary])
async def list_meet_attendees(
    event_id: str = Path(..., description="ID of the meet"),
) -> List[UserSummary]:
    return await RegistrationService.list_attendees(event_id)
