"""
FastAPI backend for SkillSync.

Internal talent platform: profiles, skills, matching, challenges, ideas
and AI-assisted analytics.

This main file handles app initialization and router mounting.
All endpoints are organized in the routers/ directory.
"""

import uuid
import logging
from pathlib import Path
from datetime import datetime
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables
env_paths = [
    Path(__file__).parent.parent / '.env',
    Path(__file__).parent / '.env',
]
for env_path in env_paths:
    if env_path.exists():
        load_dotenv(env_path)
        break

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from . import __version__
from .routers import (
    auth, profiles, skills, challenges, ideas, matching,
    messages, analytics, admin, batch, sync,
)
from .database import init_db, check_database_health
from .security_middleware import SecurityHeadersMiddleware, HTTPSRedirectMiddleware
from .config import settings

# =============================================================================
# Configuration
# =============================================================================

ALLOWED_ORIGINS = settings.allowed_origins
TESTING = settings.testing

# Logging setup (configurable via environment variable)
LOG_LEVEL = settings.log_level
logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
logger = logging.getLogger(__name__)

# =============================================================================
# Lifespan Event Handler
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan event handler for FastAPI application.
    Handles startup and shutdown events.
    """
    init_db()
    logger.info("Database initialized")
    logger.info(f"LLM provider: {settings.llm_provider}")

    yield  # Application runs here

    logger.info("Application shutting down")

# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="SkillSync",
    description="Internal talent and skill matching platform",
    version=__version__,
    lifespan=lifespan
)

# Custom rate limit handler with Retry-After header
async def custom_rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom handler for rate limit exceeded errors.
    Includes Retry-After header for better client handling.
    """
    detail = str(exc.detail)
    retry_after = 60
    if 'hour' in detail.lower():
        retry_after = 3600
    elif 'second' in detail.lower():
        parts = detail.split()
        retry_after = int(parts[0]) if parts and parts[0].isdigit() else 1

    return JSONResponse(
        status_code=429,
        content={
            "detail": detail,
            "error": "rate_limit_exceeded",
            "retry_after_seconds": retry_after,
            "message": f"Rate limit exceeded. Please wait {retry_after} seconds before retrying."
        },
        headers={"Retry-After": str(retry_after)}
    )

# Rate limiting (relaxed limits in test mode)
if not TESTING:
    limiter = Limiter(key_func=get_remote_address)
    logger.info("Rate limiting enabled")
else:
    limiter = Limiter(key_func=lambda: "test-client")
    logger.info("Rate limiting relaxed (test mode)")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, custom_rate_limit_handler)

# CORS
origins = ALLOWED_ORIGINS.split(',') if ALLOWED_ORIGINS != '*' else ['*']

# Warn if using wildcard CORS in production
if origins == ['*']:
    logger.warning(
        "SECURITY WARNING: CORS is set to allow ALL origins (*). "
        "Set SKILLSYNC_ALLOWED_ORIGINS to specific domains in production."
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

environment = settings.environment
logger.info(f"Running in {environment} environment")

app.add_middleware(SecurityHeadersMiddleware, environment=environment)

# Enforce HTTPS in production
if environment == "production":
    app.add_middleware(HTTPSRedirectMiddleware)
    logger.info("HTTPS enforcement enabled")

# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """
    Add unique request ID to each request for tracing.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    return response

# =============================================================================
# Mount Routers
# =============================================================================

app.include_router(auth.router)
app.include_router(profiles.router)
app.include_router(skills.router)
app.include_router(challenges.router)
app.include_router(ideas.router)
app.include_router(matching.router)
app.include_router(messages.router)
app.include_router(analytics.router)
app.include_router(admin.router)
app.include_router(batch.router)
app.include_router(sync.router)

# =============================================================================
# Health Check Endpoint
# =============================================================================

@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Reports database connectivity and which integrations are configured.
    """
    health_data = {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "dependencies": {
            "llm_provider": settings.llm_provider,
            "openai_configured": bool(settings.openai_api_key),
            "hr_system_configured": bool(settings.hr_system_api_url),
            "mail_configured": bool(settings.mail_api_endpoint),
        }
    }

    try:
        health_data["dependencies"]["database"] = check_database_health()
    except Exception as e:
        health_data["dependencies"]["database"] = {
            "database_connected": False,
            "error": str(e)
        }
        logger.error(f"Failed to check database health: {e}")

    if not health_data["dependencies"]["database"].get("database_connected", False):
        health_data["status"] = "degraded"

    return health_data
