# yoda_events/routes/logs.py
from datetime import date, datetime, time
from typing import Any, List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Query as OrmQuery, Session

from yoda_events.database import get_db
from yoda_events.models.log import Log
from yoda_events.models.users import User
from yoda_events.utils.tokenJWT import role_required

router = APIRouter(prefix="/logs", tags=["Logs"])


class LogEntry(BaseModel):
    id: int
    ts: datetime
    action: str
    resource: str
    status: str
    user_id: Optional[int] = None
    username: Optional[str] = None
    ip: Optional[str] = None
    meta: Optional[Any] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_log(cls, log: Log) -> "LogEntry":
        entry = cls.model_validate(log)
        entry.username = log.user.username if log.user else None
        return entry


class AuditTrail(BaseModel):
    items: List[LogEntry]
    total: int
    page: int
    page_size: int


def _filter_audit_trail(
    query: OrmQuery,
    action: Optional[str],
    user_id: Optional[int],
    event_id: Optional[int],
    status: Optional[str],
    since: Optional[date],
    until: Optional[date],
) -> OrmQuery:
    if action:
        query = query.filter(Log.action == action.upper())
    if user_id is not None:
        query = query.filter(Log.user_id == user_id)
    if event_id is not None:
        # Event actions record the event id in meta
        query = query.filter(Log.resource == "events", Log.meta["event_id"].as_integer() == event_id)
    if status:
        query = query.filter(Log.status == status)
    if since:
        query = query.filter(Log.ts >= datetime.combine(since, time.min))
    if until:
        query = query.filter(Log.ts <= datetime.combine(until, time.max))
    return query


# Audit trail of registrations, logins and event changes, newest first
@router.get("", response_model=AuditTrail)
def get_audit_trail(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="e.g. LOGIN, EVENT_ATTEND"),
    user_id: Optional[int] = Query(None),
    event_id: Optional[int] = Query(None, description="Only entries about this event"),
    status: Optional[Literal["SUCCESS", "FAIL"]] = Query(None),
    since: Optional[date] = Query(None, description="YYYY-MM-DD, inclusive"),
    until: Optional[date] = Query(None, description="YYYY-MM-DD, inclusive"),
    db: Session = Depends(get_db),
    admin: User = Depends(role_required("ROLE_ADMIN")),
):
    query = _filter_audit_trail(db.query(Log), action, user_id, event_id, status, since, until)

    total = query.count()
    logs = (
        query.order_by(Log.ts.desc(), Log.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return AuditTrail(
        items=[LogEntry.from_log(log) for log in logs],
        total=total,
        page=page,
        page_size=page_size,
    )
