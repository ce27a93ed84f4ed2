import logging.config
import os

from .core.config import settings


def setup_logging(config_path: str = None, log_dir: str = None) -> logging.Logger:
    """Apply the file based logging configuration and return the root logger."""
    config_path = config_path or settings.LOGGING_CONFIG_PATH
    log_dir = log_dir or settings.LOG_DIR

    # Ensure logs directory exists
    os.makedirs(log_dir, exist_ok=True)

    if os.path.exists(config_path):
        logging.config.fileConfig(config_path, disable_existing_loggers=False)
    else:
        logging.basicConfig(level=logging.INFO)
        logging.getLogger(__name__).warning(f"Logging config {config_path} not found, using basicConfig")

    return logging.getLogger()
