import logging
import os
import structlog
import sys
from pathlib import Path
from dotenv import load_dotenv

def _level(name: str, default: str) -> int:
    return getattr(logging, os.getenv(name, default).upper(), logging.INFO)

def setup_logging(script: str | None = None, db_path: str | None = None):
    """
    Route structlog through the root logger as JSON lines on stderr.

    LOG_LEVEL filters the console, LEDGER_LOG_LEVEL the ledgerbook.* loggers
    (DEBUG shows every month_replayed / baseline_located event), and
    LOG_ERROR_FILE additionally collects errors. script and db_path are bound
    to every event emitted afterwards.
    """
    env_path = Path(__file__).resolve().parents[1] / ".env"
    load_dotenv(dotenv_path=env_path)
    log_level = _level("LOG_LEVEL", "INFO")
    error_log_path = os.getenv("LOG_ERROR_FILE", "").strip()

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)

    formatter = logging.Formatter("%(message)s")
    # stdout is reserved for script reports
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(log_level)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if error_log_path:
        Path(error_log_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(error_log_path)
        file_handler.setLevel(logging.ERROR)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
    )
    logging.getLogger("ledgerbook").setLevel(_level("LEDGER_LOG_LEVEL", "INFO"))

    structlog.contextvars.clear_contextvars()
    context = {k: v for k, v in (("script", script), ("db_path", db_path)) if v}
    if context:
        structlog.contextvars.bind_contextvars(**context)
