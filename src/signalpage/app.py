"""
SignalPage Backend API Server
Core functionality: resumes, jobs, generated signal pages, analytics, notifications and billing
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from signalpage.config.settings import ALLOWED_ORIGINS
from signalpage.database.connection import init_database, close_database
from signalpage.api.routes import (
    analytics, billing, digest, emails, health, jobs, notifications, pages, profiles,
    resumes, subscription, webhooks
)
from signalpage.utils.error_handling import setup_error_handling

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    await init_database()
    yield
    await close_database()

# FastAPI app initialization
app = FastAPI(
    title="SignalPage Backend",
    description="Backend API for personalized job application landing pages",
    version="1.0.0",
    lifespan=lifespan
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Setup centralized error handling
setup_error_handling(app)

# Include API routes
app.include_router(health.router, tags=["Health"])
app.include_router(profiles.router, prefix="/api", tags=["Profiles"])
app.include_router(resumes.router, prefix="/api", tags=["Resumes"])
app.include_router(jobs.router, prefix="/api", tags=["Jobs"])
app.include_router(pages.router, prefix="/api", tags=["Signal Pages"])
app.include_router(analytics.router, prefix="/api", tags=["Analytics"])
app.include_router(notifications.router, prefix="/api", tags=["Notifications"])
app.include_router(emails.router, prefix="/api", tags=["Emails"])
app.include_router(subscription.router, prefix="/api", tags=["Subscription"])
app.include_router(billing.router, prefix="/api/stripe", tags=["Billing"])
app.include_router(webhooks.router, prefix="/api/webhooks", tags=["Webhooks"])
app.include_router(digest.router, prefix="/api/digest", tags=["Digest"])

# FastAPI app instance is exported for use by uvicorn
# Server startup is handled by main.py at the project root
