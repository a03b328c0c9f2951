import logging
import re
import sys
from datetime import datetime, timedelta
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from app.config import settings

LOG_FILE_NAME = "safekey.log"
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(request_id)s - [%(filename)s:%(lineno)d] - %(funcName)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

REQUEST_ID_PATTERN = re.compile(r'\s*\|\s*RequestID:\s*([a-f0-9-]{36})', re.IGNORECASE)


class RequestIDFormatter(logging.Formatter):
    """Formatter that puts the request ID in its own column, or [SYSTEM] outside requests."""

    def __init__(self, datefmt: str = DATE_FORMAT):
        super().__init__(LOG_FORMAT, datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        request_id = getattr(record, 'RequestID', None) or getattr(record, 'request_id', None)

        # sanitize_log_message appends "| RequestID: <uuid>" to the message
        if not request_id and isinstance(record.msg, str):
            match = REQUEST_ID_PATTERN.search(record.msg)
            if match:
                request_id = match.group(1)
                record.msg = REQUEST_ID_PATTERN.sub('', record.msg)

        record.request_id = f"[{request_id.strip('[]')}]" if request_id else '[SYSTEM]'
        return super().format(record)


def setup_logging() -> None:
    """
    Configure application-wide logging with daily file rotation.
    Creates the log directory if needed and replaces existing root handlers.
    """
    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    log_level = settings.get_log_level()
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    formatter = RequestIDFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Rotates at midnight: safekey.log, safekey.log.2025-01-15, ...
    file_handler = TimedRotatingFileHandler(
        filename=str(log_dir / LOG_FILE_NAME),
        when='midnight',
        interval=1,
        backupCount=settings.LOG_RETENTION_DAYS,
        encoding='utf-8'
    )
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(formatter)
    file_handler.suffix = "%Y-%m-%d"
    root_logger.addHandler(file_handler)

    # Suppress noisy third-party loggers
    for noisy in ("uvicorn.access", "uvicorn.error", "httpx", "httpcore", "asyncio", "aiosqlite", "passlib"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured - Level: {log_level}, Directory: {log_dir.absolute()}"
    )


def cleanup_old_logs() -> int:
    """
    Delete rotated log files older than the retention period.

    Returns:
        Number of files deleted
    """
    log_dir = Path(settings.LOG_DIR)
    if not log_dir.exists():
        return 0

    logger = logging.getLogger(__name__)
    cutoff_date = datetime.now() - timedelta(days=settings.LOG_RETENTION_DAYS)
    deleted_count = 0

    for log_file in log_dir.glob(f"{LOG_FILE_NAME}.*"):
        try:
            file_date = datetime.strptime(log_file.suffix.lstrip('.'), "%Y-%m-%d")
            if file_date < cutoff_date:
                log_file.unlink()
                deleted_count += 1
                logger.debug(f"Deleted old log file: {log_file.name}")
        except (ValueError, OSError) as e:
            logger.warning(f"Error processing log file {log_file.name}: {str(e)}")

    if deleted_count:
        logger.info(
            f"Cleaned up {deleted_count} old log file(s) (older than {settings.LOG_RETENTION_DAYS} days)"
        )
    return deleted_count
