# yoda_events/models/users.py
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String, inspect
from sqlalchemy.orm import relationship
from sqlalchemy.orm.attributes import flag_modified

from yoda_events.database import Base

DEFAULT_ROLE = "ROLE_USER"


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Represents a registered account. The plain password only lives on the
# instance until the password listener hashes it during flush.
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    roles = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    events = relationship("Event", back_populates="owner")
    attending = relationship(
        "Event", secondary="event_attendees", back_populates="attendees", collection_class=set
    )

    _plain_password = None

    @property
    def plain_password(self) -> Optional[str]:
        return self._plain_password

    @plain_password.setter
    def plain_password(self, value: Optional[str]) -> None:
        self._plain_password = value
        # Non-column attributes don't make a persisted row dirty; flag the
        # hash column so the update hook runs. The old hash stays until then.
        if value and inspect(self).has_identity and self.password is not None:
            flag_modified(self, "password")

    def get_roles(self) -> List[str]:
        roles = list(self.roles or [])
        if DEFAULT_ROLE not in roles:
            roles.append(DEFAULT_ROLE)
        return roles

    def get_salt(self) -> Optional[str]:
        # argon2 generates and embeds its own salt
        return None

    def erase_credentials(self) -> None:
        self._plain_password = None

    def __repr__(self) -> str:
        return f"<User {self.username!r}>"
