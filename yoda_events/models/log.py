# yoda_events/models/log.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import relationship

from yoda_events.database import Base
from yoda_events.models.users import utcnow


# Audit trail of user actions (registration, logins, event changes)
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)

    ts = Column(DateTime, nullable=False, default=utcnow, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action = Column(String(50), index=True)
    resource = Column(String(50), index=True)
    status = Column(String(20), index=True)
    ip = Column(String(64), nullable=True)

    # Free-form context for the entry
    meta = Column(JSON, nullable=True)

    user = relationship("User", lazy="joined", uselist=False)
