from pathlib import Path
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
import uvicorn

from checkin.api.routes import admin, checkin, health, roster
from checkin.core.config import settings
from checkin.core.logging import setup_logging
from checkin.models.session import SessionState
from checkin.services.eligibility import EligibilityEngine
from checkin.services.lifecycle import SessionService

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for startup and shutdown"""
    # Startup
    setup_logging()
    logger.info(f"🚀 Starting {settings.PROJECT_NAME} (identity mode: {settings.IDENTITY_MODE})")

    state = SessionState()
    app.state.session = state
    app.state.engine = EligibilityEngine(state)
    app.state.service = SessionService(state)

    yield

    # Shutdown
    logger.info("👋 Shutting down, in-memory session discarded")

async def unhandled_error(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error"},
    )

def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Event check-in with roster, device and geofence checks, plus live polling",
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Exception, unhandled_error)

    app.include_router(health.router, prefix="/api", tags=["Health"])
    app.include_router(roster.router, prefix="/api", tags=["Roster"])
    app.include_router(admin.router, prefix="/api", tags=["Organizer"])
    app.include_router(checkin.router, prefix="/api", tags=["Attendee"])

    public_dir = Path(settings.PUBLIC_DIR)
    index_page = public_dir / "index.html"

    @app.get("/")
    async def root():
        """Browser client when present, otherwise API information"""
        if index_page.is_file():
            return FileResponse(index_page)
        return {
            "service": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "status": "operational",
            "docs": "/docs",
            "endpoints": {
                "health": "/api/health",
                "upload_roster": "/api/upload-roster",
                "event_status": "/api/event-status",
                "checkin": "/api/checkin",
                "vote": "/api/vote",
            }
        }

    if public_dir.is_dir():
        app.mount("/static", StaticFiles(directory=public_dir), name="static")

    return app

app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, reload=False)
