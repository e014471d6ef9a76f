# utils/yaml_config.py
import logging
from pathlib import Path
from typing import Any, Dict, Iterable

import yaml

logger = logging.getLogger(__name__)


def load_config(config_path: Path) -> Dict[str, Any]:
    """Load YAML configuration file for a task script."""
    try:
        with open(config_path, "r") as f:
            script_config = yaml.safe_load(f) or {}
        logger.info(f"Successfully loaded config from {config_path}")
        return script_config
    except FileNotFoundError:
        logger.error(f"Config file not found at {config_path}")
        raise
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML config: {e}")
        raise


def check_missing_keys(required_keys: Iterable[str], script_config: Dict[str, Any]) -> None:
    missing_keys = [key for key in required_keys if key not in script_config]
    if missing_keys:
        logger.error(f"Missing required config keys: {missing_keys}")
        raise ValueError(f"Missing required config keys: {missing_keys}")
