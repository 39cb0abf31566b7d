# yoda_events/models/event.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, Text, event, inspect, select
from sqlalchemy.orm import object_session, relationship, validates

from yoda_events.database import Base
from yoda_events.models.users import utcnow
from yoda_events.utils.slugs import make_unique, slugify

# Attendance membership; the composite key rules out duplicates
event_attendees = Table(
    "event_attendees",
    Base.metadata,
    Column("event_id", Integer, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    location = Column(String(255), nullable=False)
    time = Column(DateTime, nullable=False, index=True)
    details = Column(Text, nullable=True)

    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow, index=True)

    owner = relationship("User", back_populates="events")
    attendees = relationship(
        "User", secondary=event_attendees, back_populates="attending", collection_class=set
    )

    @validates("owner")
    def _validate_owner(self, key, owner):
        current = self.__dict__.get("owner")
        if current is not None and current is not owner:
            raise ValueError("The owner of an event cannot be changed once set.")
        if current is None and self.owner_id is not None and getattr(owner, "id", None) != self.owner_id:
            raise ValueError("The owner of an event cannot be changed once set.")
        return owner

    def has_attendee(self, user) -> bool:
        return user in self.attendees

    def add_attendee(self, user) -> bool:
        if self.has_attendee(user):
            return False
        self.attendees.add(user)
        return True

    def remove_attendee(self, user) -> bool:
        if not self.has_attendee(user):
            return False
        self.attendees.discard(user)
        return True

    def __repr__(self) -> str:
        return f"<Event {self.slug or self.name!r}>"


def _unique_slug(connection, target: Event) -> str:
    base = slugify(target.name)
    query = select(Event.slug).where(Event.slug.like(f"{base}%"))
    if target.id is not None:
        query = query.where(Event.id != target.id)
    taken = set(connection.execute(query).scalars().all())
    # Events flushed in the same batch are not in the table yet
    session = object_session(target)
    if session is not None:
        taken.update(
            obj.slug for obj in session.new
            if isinstance(obj, Event) and obj is not target and obj.slug
        )
    return make_unique(base, taken)


@event.listens_for(Event, "before_insert")
def _slug_before_insert(mapper, connection, target: Event):
    if not target.slug:
        target.slug = _unique_slug(connection, target)


@event.listens_for(Event, "before_update")
def _slug_before_update(mapper, connection, target: Event):
    if inspect(target).attrs.name.history.has_changes():
        target.slug = _unique_slug(connection, target)
