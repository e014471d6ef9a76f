import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path


def setup_logging(script_name: str, data_dir: Path) -> logging.Logger:
    """
    Configure root logging for a task script.

    Writes DEBUG and above to a rotating file under <data_dir>/logs and INFO and
    above to the console.

    Args:
        script_name: Name of the task, used for the log filename
        data_dir: Base data directory holding the logs folder
    Returns:
        logging.Logger: Logger named after the task
    """
    log_dir = Path(data_dir) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    log_path = log_dir / f"{script_name}.log"

    # Create handlers with different levels
    file_handler = RotatingFileHandler(log_path, maxBytes=10 * 1024 * 1024, backupCount=5)
    file_handler.setLevel(logging.DEBUG)  # File gets DEBUG and above

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)  # Console gets INFO and above

    logging.basicConfig(
        level=logging.DEBUG,  # Root logger must be at lowest level (DEBUG)
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[file_handler, console_handler],
    )

    logger = logging.getLogger(script_name)
    logger.info(f"Logging initialized. Log file: {log_path}")

    return logger
