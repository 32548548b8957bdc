"""
Entry point for the SignalPage Backend
"""

import logging
from dotenv import load_dotenv

# Load environment variables from .env file before settings are read
load_dotenv()

from signalpage.config.settings import PORT

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting SignalPage Backend on port {PORT}")
    uvicorn.run("signalpage.app:app", host="0.0.0.0", port=PORT)
