from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .api.v1.api import api_router
from .api.v1.endpoints.websocket_chat import manager
from .config import settings
from .core.logging import configure_logging
from .database import get_db

configure_logging(settings.LOG_LEVEL)

# Create FastAPI app
app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    debug=settings.DEBUG
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


# Root endpoint
@app.get("/")
def read_root():
    """Hello World endpoint"""
    return {
        "message": "Welcome to PesXChange API",
        "version": settings.API_VERSION,
        "status": "running"
    }


# Health check endpoint
@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """API health check"""
    try:
        db.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError:
        database = "unavailable"
    return {
        "status": "healthy" if database == "connected" else "degraded",
        "environment": settings.ENVIRONMENT,
        "database": database,
        "features": {
            "messaging": True,
            "live_updates": True,
            "pesu_auth": True,
        },
        "live_connections": manager.connection_count,
    }
