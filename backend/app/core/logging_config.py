import sys
from pathlib import Path
from typing import Any, Dict
from loguru import logger

DEFAULT_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def _resolve_log_path(file_path_str: str, project_root: Path) -> Path:
    log_file_path = Path(file_path_str)
    if not log_file_path.is_absolute():
        log_file_path = project_root / log_file_path
    return log_file_path


def setup_logging(logging_settings: Dict[str, Any], project_root: Path):
    logger.remove()

    log_format = logging_settings.get("format") or DEFAULT_LOG_FORMAT

    if logging_settings.get("console_enabled", True):
        logger.add(
            sys.stderr,
            level=logging_settings.get("console_level", "DEBUG").upper(),
            format=log_format,
            colorize=True,
        )
        logger.trace("Console logging enabled.")

    if logging_settings.get("file_enabled", True):
        log_file_path = _resolve_log_path(
            logging_settings.get("file_path", "logs/app.log"), project_root
        )
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        file_level = logging_settings.get("file_level", "INFO").upper()
        logger.add(
            log_file_path,
            level=file_level,
            rotation=logging_settings.get("rotation", "10 MB"),
            retention=logging_settings.get("retention", "7 days"),
            format=log_format,
            encoding="utf-8",
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )
        logger.trace(f"File logging enabled. Path: {log_file_path}, Level: {file_level}")

    logger.trace(
        f"Logging setup complete. Default level: {logging_settings.get('level', 'INFO').upper()}"
    )
