"""
Main entry point for the SMS ledger ingestion service.

This module loads configuration and starts the FastAPI server.
"""
import sys
from pathlib import Path

# Add project root to Python path for module imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv
from pydantic import ValidationError

from core.logger import setup_logger

# Load environment variables from .env file
_env_file = PROJECT_ROOT / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    print("Warning: .env file not found. Using environment variables or defaults.")

logger = setup_logger(__name__)


def main():
    """Main application entry point."""
    from core.config import get_settings

    try:
        settings = get_settings()
    except ValidationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    try:
        import uvicorn
        from app.api import app

        logger.info(f"Starting {settings.app_name}")
        logger.info(f"Ollama: {settings.ollama_url} (model {settings.ollama_model})")
        logger.info(f"Actual server: {settings.actual_server_url}")
        logger.info(f"Timezone: {settings.timezone}")
        logger.info(f"Auth: {'enabled' if settings.api_token else 'disabled'}")

        logger.info(f"Starting server on {settings.host}:{settings.port}")

        uvicorn.run(
            app,
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower()
        )

    except Exception as e:
        logger.error(f"Failed to start application: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
