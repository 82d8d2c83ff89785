"""
Configuration loader
"""
import logging
import yaml
from pathlib import Path
from arena.models import ArenaParams


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/arena.yaml"


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> ArenaParams:
    """
    Load battle parameters from YAML file

    Args:
        config_path: Path to config file

    Returns:
        ArenaParams object
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    return ArenaParams(**data)


def load_config_or_default(config_path: str = DEFAULT_CONFIG_PATH) -> ArenaParams:
    """Load config, falling back to built-in defaults when the file is absent"""
    try:
        params = load_config(config_path)
    except FileNotFoundError:
        logger.warning(f"⚠️ {config_path} not found, using default battle parameters")
        return ArenaParams()
    logger.info(f"✅ Loaded battle parameters from {config_path}")
    return params
