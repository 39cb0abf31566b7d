# yoda_events/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from yoda_events.config import settings

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

# Hosted Postgres URLs still use the legacy scheme SQLAlchemy refuses
if SQLALCHEMY_DATABASE_URL.startswith("postgres://"):
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace("postgres://", "postgresql://", 1)

if "sqlite" in SQLALCHEMY_DATABASE_URL:
    connect_args = {"check_same_thread": False}  # SQLite only
else:
    connect_args = {}

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args=connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    # Import models so their tables are registered on Base.metadata
    from yoda_events.models import event, log, users  # noqa: F401

    Base.metadata.create_all(bind=engine)
