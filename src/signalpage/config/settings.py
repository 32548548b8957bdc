"""
Configuration settings for the SignalPage backend
"""

import os
import resend
import stripe
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Environment configuration
ENV = os.getenv("ENV", "PROD")  # PROD or QA
DATABASE_URL = os.getenv("DATABASE_URL")
PORT = int(os.getenv("PORT", 8080))
APP_URL = os.getenv("APP_URL", "http://localhost:3000").rstrip("/")

# Auth backend issues HS256 user tokens; we only verify them
AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET")
AUTH_JWT_AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE", "authenticated")
AUTH_JWT_ALGORITHMS = ["HS256"]
CRON_SECRET = os.getenv("CRON_SECRET")

# LLM providers
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
DEFAULT_LLM_PROVIDER = os.getenv("DEFAULT_LLM_PROVIDER", "openai")

# Stripe
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")
STRIPE_PRO_MONTHLY_PRICE_ID = os.getenv("STRIPE_PRO_MONTHLY_PRICE_ID")
STRIPE_PRO_QUARTERLY_PRICE_ID = os.getenv("STRIPE_PRO_QUARTERLY_PRICE_ID")
STRIPE_COACH_MONTHLY_PRICE_ID = os.getenv("STRIPE_COACH_MONTHLY_PRICE_ID")
STRIPE_COACH_QUARTERLY_PRICE_ID = os.getenv("STRIPE_COACH_QUARTERLY_PRICE_ID")

# Resend (digest + notification emails)
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
FROM_EMAIL = os.getenv("FROM_EMAIL", "SignalPage <digest@signalpage.ai>")
RESEND_WEBHOOK_SECRET = os.getenv("RESEND_WEBHOOK_SECRET")

# Uploads
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", 5 * 1024 * 1024))

logger.info(f"Environment: {ENV}")

# Validate required environment variables
if not DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is required")
if not AUTH_JWT_SECRET:
    logger.warning("AUTH_JWT_SECRET not set - authenticated endpoints will reject all requests")
if not OPENAI_API_KEY and not ANTHROPIC_API_KEY:
    logger.warning("No LLM API key set - page generation will not be available")
if not STRIPE_SECRET_KEY:
    logger.warning("STRIPE_SECRET_KEY not set - billing endpoints will not be available")
if not RESEND_API_KEY:
    logger.warning("RESEND_API_KEY not set - digest emails will be queued but not sent")

# Configure SDKs
if RESEND_API_KEY:
    resend.api_key = RESEND_API_KEY
if STRIPE_SECRET_KEY:
    stripe.api_key = STRIPE_SECRET_KEY

# CORS settings
ALLOWED_ORIGINS = [
    origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", APP_URL).split(",") if origin.strip()
]
