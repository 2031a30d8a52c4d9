import uvicorn
import sys
from pathlib import Path
from loguru import logger

PROJECT_ROOT_PATH = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT_PATH) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT_PATH))

try:
    from backend.app.config import settings

    logger.info("Settings imported in run.py, logging configured.")
except Exception as e:
    logger.remove()
    logger.add(sys.stderr, level="ERROR")
    logger.critical(f"RUN.PY: Failed to import settings or setup logging: {e}")
    sys.exit("Critical error: Could not initialize application configuration or logging.")


def main():
    logger.info(f"Starting Uvicorn server on {settings.backend.host}:{settings.backend.port}")
    logger.debug(f"WordPress.org API: {settings.wporg.api_url} (locale {settings.wporg.locale})")
    logger.debug(f"Durable cache directory: {settings.backend.cache_dir}")

    uvicorn.run(
        "backend.app.main:app",
        host=settings.backend.host,
        port=settings.backend.port,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
