# yoda_events/repositories.py
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from yoda_events.config import settings
from yoda_events.models.event import Event
from yoda_events.models.users import User, utcnow


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_one_by_username_or_email(self, value: str) -> Optional[User]:
        value = (value or "").strip()
        return (
            self.db.query(User)
            .filter(or_(User.username == value, func.lower(User.email) == value.lower()))
            .first()
        )

    def username_taken(self, username: str) -> bool:
        return self.db.query(User.id).filter(User.username == username).first() is not None

    def email_taken(self, email: str) -> bool:
        return self.db.query(User.id).filter(func.lower(User.email) == email.lower()).first() is not None


class EventRepository:
    def __init__(self, db: Session):
        self.db = db

    def find(self, event_id: int) -> Optional[Event]:
        return self.db.get(Event, event_id)

    def find_by_slug(self, slug: str) -> Optional[Event]:
        return self.db.query(Event).filter(Event.slug == slug).first()

    def get_upcoming_events(self, max_results: Optional[int] = None) -> List[Event]:
        query = (
            self.db.query(Event)
            .filter(Event.time > utcnow())
            .order_by(Event.time.asc())
        )
        if max_results:
            query = query.limit(max_results)
        return query.all()

    def get_recently_updated_events(self, hours: Optional[int] = None) -> List[Event]:
        hours = settings.RECENTLY_UPDATED_HOURS if hours is None else hours
        since = utcnow() - timedelta(hours=hours)
        return (
            self.db.query(Event)
            .filter(Event.updated_at > since)
            .order_by(Event.updated_at.desc())
            .all()
        )
