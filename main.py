"""
TICKERLENS - Main Entry Point
Serves the dashboard API.
"""
import uvicorn
from tickerlens.api.app import create_app
from tickerlens.config.settings import load_settings
from tickerlens.utils.logger import setup_logging, get_logger

logger = get_logger("main")


def run_api():
    """Run the FastAPI application."""
    settings = load_settings()
    setup_logging(settings)
    logger.info("starting_tickerlens", version=settings.version, port=settings.port)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    run_api()
