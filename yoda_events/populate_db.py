# yoda_events/populate_db.py
"""
Seed the database with the demo accounts and events.

Fixtures run in order: users first, then events that need an owner.
Existing rows are purged. Run with ``python -m yoda_events.populate_db``.
"""
import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from yoda_events.database import SessionLocal, init_db
from yoda_events.models.event import Event, event_attendees
from yoda_events.models.log import Log
from yoda_events.models.users import User, utcnow
from yoda_events.repositories import UserRepository
from yoda_events.utils.user_listener import get_password_listener

logger = logging.getLogger(__name__)

THURSDAY = 3


def _noon(day: datetime) -> datetime:
    return day.replace(hour=12, minute=0, second=0, microsecond=0)


def tomorrow_noon(now: datetime) -> datetime:
    return _noon(now + timedelta(days=1))


def next_thursday_noon(now: datetime) -> datetime:
    # Today counts if it is Thursday and noon hasn't passed yet
    days_ahead = (THURSDAY - now.weekday()) % 7
    candidate = _noon(now + timedelta(days=days_ahead))
    if candidate <= now:
        candidate += timedelta(days=7)
    return candidate


def load_users(session: Session) -> None:
    darth = User(username="darth", email="darth@deathstar.com")
    darth.plain_password = "darthpass"
    session.add(darth)

    wayne = User(username="wayne", email="wayne@deathstar.com", roles=["ROLE_ADMIN"])
    wayne.plain_password = "waynepass"
    session.add(wayne)

    # Passwords are hashed by the listener during this flush
    session.flush()


def load_events(session: Session, now: datetime = None) -> None:
    now = now or utcnow()
    wayne = UserRepository(session).find_one_by_username_or_email("wayne")

    session.add(Event(
        name="Darth's Birthday Party!",
        location="Deathstar",
        time=tomorrow_noon(now),
        details="Ha! Darth HATES surprises!!!",
        owner=wayne,
    ))
    session.add(Event(
        name="Rebellion Fundraiser Bake Sale!",
        location="Endor",
        time=next_thursday_noon(now),
        details="Ewok pies! Support the rebellion!",
        owner=wayne,
    ))
    session.flush()


FIXTURES = [load_users, load_events]


def purge(session: Session) -> None:
    session.execute(event_attendees.delete())
    session.query(Log).delete()
    session.query(Event).delete()
    session.query(User).delete()


def load_fixtures(session: Session, append: bool = False) -> None:
    if not append:
        purge(session)
    for fixture in FIXTURES:
        logger.info("Loading %s", fixture.__name__)
        fixture(session)
    session.commit()


def main():
    logging.basicConfig(level=logging.INFO)
    get_password_listener().register()
    init_db()

    session = SessionLocal()
    try:
        load_fixtures(session)
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
    logger.info("Fixtures loaded")


if __name__ == "__main__":
    main()
