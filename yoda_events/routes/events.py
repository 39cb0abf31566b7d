# yoda_events/routes/events.py
import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from yoda_events.database import get_db
from yoda_events.models.event import Event
from yoda_events.models.users import User
from yoda_events.repositories import EventRepository
from yoda_events.schemas.event import AttendingResponse, EventCreate, EventResponse, EventUpdate
from yoda_events.utils.audit import client_ip, write_log
from yoda_events.utils.security import enforce_owner_security, enforce_user_security
from yoda_events.utils.tokenJWT import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["Events"])


def _get_event_or_404(db: Session, event_id: int, detail: str = "Unable to find Event entity.") -> Event:
    event = EventRepository(db).find(event_id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    return event


def _attending_response(request: Request, event: Event, user: User, format: str):
    if format == "json":
        return AttendingResponse(attending=event.has_attendee(user))
    return RedirectResponse(
        str(request.url_for("show_event", slug=event.slug)),
        status_code=status.HTTP_303_SEE_OTHER,
    )


# Upcoming events, soonest first
@router.get("", response_model=List[EventResponse])
def list_events(
    max: Optional[int] = Query(None, ge=1, le=100, description="Maximum number of events"),
    db: Session = Depends(get_db),
):
    return EventRepository(db).get_upcoming_events(max)


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    enforce_user_security(current_user, "ROLE_EVENT_CREATE")

    event = Event(**payload.model_dump(), owner=current_user)
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Event %s created by %s", event.slug, current_user.username)

    write_log(db, user_id=current_user.id, action="EVENT_CREATE", resource="events",
              status="SUCCESS", ip=client_ip(request), meta={"event_id": event.id, "slug": event.slug})
    return event


@router.get("/{slug}", response_model=EventResponse, name="show_event")
def show_event(slug: str, db: Session = Depends(get_db)):
    event = EventRepository(db).find_by_slug(slug)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unable to find Event entity.")
    return event


@router.put("/{event_id}", response_model=EventResponse)
def update_event(
    event_id: int,
    payload: EventUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    enforce_user_security(current_user)
    event = _get_event_or_404(db, event_id)
    enforce_owner_security(current_user, event)

    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None and field != "details":
            continue
        setattr(event, field, value)

    db.commit()
    db.refresh(event)

    write_log(db, user_id=current_user.id, action="EVENT_UPDATE", resource="events",
              status="SUCCESS", ip=client_ip(request), meta={"event_id": event.id, "fields": sorted(changes)})
    return event


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    enforce_user_security(current_user)
    event = _get_event_or_404(db, event_id)
    enforce_owner_security(current_user, event)

    slug = event.slug
    db.delete(event)
    db.commit()
    logger.info("Event %s deleted by %s", slug, current_user.username)

    write_log(db, user_id=current_user.id, action="EVENT_DELETE", resource="events",
              status="SUCCESS", ip=client_ip(request), meta={"event_id": event_id, "slug": slug})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{event_id}/attend", response_model=None)
@router.post("/{event_id}/attend.{format}", response_model=None)
def attend_event(
    event_id: int,
    request: Request,
    format: Literal["html", "json"] = "html",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    event = _get_event_or_404(db, event_id, detail=f"No event found for id {event_id}")

    changed = event.add_attendee(current_user)
    db.commit()

    if changed:
        write_log(db, user_id=current_user.id, action="EVENT_ATTEND", resource="events",
                  status="SUCCESS", ip=client_ip(request), meta={"event_id": event.id})
    return _attending_response(request, event, current_user, format)


@router.post("/{event_id}/unattend", response_model=None)
@router.post("/{event_id}/unattend.{format}", response_model=None)
def unattend_event(
    event_id: int,
    request: Request,
    format: Literal["html", "json"] = "html",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    event = _get_event_or_404(db, event_id, detail=f"No event found for id {event_id}")

    changed = event.remove_attendee(current_user)
    db.commit()

    if changed:
        write_log(db, user_id=current_user.id, action="EVENT_UNATTEND", resource="events",
                  status="SUCCESS", ip=client_ip(request), meta={"event_id": event.id})
    return _attending_response(request, event, current_user, format)
