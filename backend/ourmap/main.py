"""FastAPI application entry point."""
import logging
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ourmap.config import settings
from ourmap.database import Base, engine

# Import routers
from ourmap.routers import users, categories, events, search, friends, geocode, notifications

# Import all models so Base.metadata knows about them
from ourmap.models.user import User                    # noqa: F401
from ourmap.models.category import Category            # noqa: F401
from ourmap.models.event import Event                  # noqa: F401
from ourmap.models.attendee import EventAttendee       # noqa: F401
from ourmap.models.invite import EventInvite           # noqa: F401
from ourmap.models.friendship import Friendship        # noqa: F401
from ourmap.models.rating import EventRating           # noqa: F401
from ourmap.models.notification import Notification    # noqa: F401
from ourmap.models.contact import UserContact           # noqa: F401

# Registers the notification subscribers
from ourmap.services import notification_service       # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="OurMap",
    description="Social event discovery — local events, RSVPs, friends, ratings and notifications",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(categories.router, prefix="/api/categories", tags=["Categories"])
app.include_router(events.router, prefix="/api", tags=["Events"])
app.include_router(search.router, prefix="/api/search", tags=["Search"])
app.include_router(friends.router, prefix="/api", tags=["Friends"])
app.include_router(geocode.router, prefix="/api", tags=["Geocoding"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse({"detail": jsonable_encoder(exc.errors())}, status_code=400)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error while processing %s %s", request.method, request.url.path)
    return JSONResponse({"detail": "Internal server error"}, status_code=500)


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
