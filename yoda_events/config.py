# yoda_events/config.py
from pathlib import Path
from typing import Dict, List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./yoda_events.db"

    # Account class name -> password hashing algorithm
    PASSWORD_ENCODERS: Dict[str, str] = {"User": "argon2"}
    PASSWORD_HASH_TIME_COST: int = 3
    PASSWORD_HASH_MEMORY_COST: int = 65536

    # Role -> roles it implies
    ROLE_HIERARCHY: Dict[str, List[str]] = {
        "ROLE_ADMIN": ["ROLE_USER", "ROLE_EVENT_CREATE"],
    }

    RECENTLY_UPDATED_HOURS: int = 24
    LOG_LEVEL: str = "INFO"
    FRONTEND_URL: str = "http://localhost:5173"

    model_config = SettingsConfigDict(env_file=str(env_path), extra="ignore")


settings = Settings()
