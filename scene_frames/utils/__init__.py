from .ffmpeg import FfmpegExtractor, run_command
from .logging import setup_logging
from .storage_fs import StorageClient, create_storage
from .yaml_config import check_missing_keys, load_config

__all__ = [
    # ffmpeg
    "FfmpegExtractor",
    "run_command",
    # Logging
    "setup_logging",
    # Storage
    "StorageClient",
    "create_storage",
    # Config
    "load_config",
    "check_missing_keys",
]
