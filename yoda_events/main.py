# yoda_events/main.py
import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from yoda_events.config import settings
from yoda_events.database import init_db
from yoda_events.routes.auth import router as auth_router
from yoda_events.routes.events import router as events_router
from yoda_events.routes.logs import router as logs_router
from yoda_events.routes.reports import router as reports_router
from yoda_events.utils.security import AccessDeniedError
from yoda_events.utils.user_listener import get_password_listener

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Passwords must be hashed before anything can flush a User
get_password_listener().register()
init_db()

app = FastAPI(title="Yoda Events API", version="1.0.0")

origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AccessDeniedError)
def access_denied_handler(request: Request, exc: AccessDeniedError):
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": exc.message})


# Reports first so its static path is matched before /events/{slug}
app.include_router(reports_router)
app.include_router(auth_router)
app.include_router(events_router)
app.include_router(logs_router)


@app.get("/")
def read_root():
    return {"message": "Yoda Events API is running"}
