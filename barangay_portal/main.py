from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .core.config import settings
from .core.firebase_init import initialize_firebase, get_firebase_status
from .routers import (
    announcements,
    appointments,
    archives,
    blotter,
    certificates,
    dashboard,
    events,
    notifications,
    officials,
    residents,
    staff,
)
from .routers import settings as settings_router

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

if not get_firebase_status()["available"]:
    if initialize_firebase():
        logger.info("✅ Firebase initialized successfully")
    else:
        logger.warning("⚠️ Firebase initialization failed - app will run without Firebase features")

app = FastAPI(
    title="Barangay Portal API",
    description="Certificates, appointments, blotter reports, announcements and events for barangay residents",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (
    certificates,
    appointments,
    blotter,
    announcements,
    events,
    residents,
    officials,
    staff,
    archives,
    settings_router,
    dashboard,
    notifications,
):
    app.include_router(module.router)
    logger.debug(f"Included router {module.router.prefix}")


@app.get("/")
async def root():
    return {"message": "Barangay Portal API", "version": "1.0.0"}


@app.get("/health")
async def health_check():
    firebase_status = get_firebase_status()
    return {
        "status": "healthy" if firebase_status["available"] else "degraded",
        "firebase": firebase_status,
    }
