"""
Configuration management for Dicecast.

Provides centralized configuration loading from environment variables
with sensible defaults for all settings.
"""

import os
from pathlib import Path
from typing import Optional
import logging

from dotenv import load_dotenv

from .logging_config import parse_level

logger = logging.getLogger(__name__)

SPAWN_EDGES = ('left', 'right', 'top', 'bottom')


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ('true', '1', 'yes')


class Config:
    """
    Centralized configuration management for Dicecast.

    Loads configuration from environment variables with fallback defaults.
    Supports .env files via python-dotenv.

    Example:
        config = Config()
        print(config.settle_threshold)  # 0.05
        print(config.spawn_edge)        # right
    """

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            env_file: Optional path to .env file. If None, auto-discovers .env
                     in project root or skips if not found.
        """
        if env_file:
            load_dotenv(env_file)
            logger.info(f"Loaded configuration from {env_file}")
        else:
            project_root = Path(__file__).parent.parent.parent
            env_path = project_root / '.env'
            if env_path.exists():
                load_dotenv(env_path)
                logger.info(f"Loaded configuration from {env_path}")
            else:
                logger.debug("No .env file found, using environment variables and defaults")

        # === Logging ===
        self.log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
        self.log_file = os.getenv('LOG_FILE', None)

        # === Server Settings ===
        self.host = os.getenv('HOST', '127.0.0.1')
        self.port = int(os.getenv('PORT', '5000'))
        self.debug = _env_bool('DEBUG', 'False')

        # === Table ===
        self.table_width = float(os.getenv('TABLE_WIDTH', '44'))
        self.table_depth = float(os.getenv('TABLE_DEPTH', '28'))
        self.spawn_edge = os.getenv('SPAWN_EDGE', 'right').lower()

        # === Throw and settling ===
        self.settle_threshold = float(os.getenv('SETTLE_THRESHOLD', '0.05'))
        self.throw_force = float(os.getenv('THROW_FORCE', '36'))
        self.spin_force = float(os.getenv('SPIN_FORCE', '20'))

        # === Headless frame loop ===
        self.frame_dt = float(os.getenv('FRAME_DT', str(1 / 60)))
        self.max_frames = int(os.getenv('MAX_FRAMES', '3600'))
        self.max_dice = int(os.getenv('MAX_DICE', '100'))
        seed = os.getenv('DICE_SEED')
        self.dice_seed: Optional[int] = int(seed) if seed else None

    def validate(self) -> bool:
        """
        Validate configuration and log warnings for suspicious values.

        Returns:
            True if config is valid, False if critical values are wrong
        """
        valid = True

        if self.spawn_edge not in SPAWN_EDGES:
            logger.error(f"Invalid SPAWN_EDGE: {self.spawn_edge}. Must be one of {', '.join(SPAWN_EDGES)}")
            valid = False

        if self.table_width <= 0 or self.table_depth <= 0:
            logger.error(f"Table bounds must be positive, got {self.table_width}x{self.table_depth}")
            valid = False

        if self.settle_threshold <= 0:
            logger.error(f"SETTLE_THRESHOLD must be positive, got {self.settle_threshold}")
            valid = False
        elif self.settle_threshold > 1.0:
            logger.warning(f"SETTLE_THRESHOLD {self.settle_threshold} is high; dice may be read mid-tumble")

        if self.frame_dt <= 0:
            logger.error(f"FRAME_DT must be positive, got {self.frame_dt}")
            valid = False

        if self.max_frames <= 0:
            logger.error(f"MAX_FRAMES must be positive, got {self.max_frames}")
            valid = False

        if self.max_dice <= 0:
            logger.error(f"MAX_DICE must be positive, got {self.max_dice}")
            valid = False

        try:
            parse_level(self.log_level)
        except ValueError as e:
            logger.error(f"Invalid LOG_LEVEL: {e}")
            valid = False

        return valid

    def __repr__(self) -> str:
        return (
            f"Config("
            f"table={self.table_width}x{self.table_depth}, "
            f"spawn_edge={self.spawn_edge}, "
            f"settle_threshold={self.settle_threshold}, "
            f"host={self.host}, "
            f"port={self.port}, "
            f"debug={self.debug})"
        )


# Global config instance (lazy-loaded)
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global config instance (singleton pattern).

    Returns:
        Global Config instance
    """
    global _config
    if _config is None:
        _config = Config()
        _config.validate()
    return _config


def reset_config() -> None:
    """Drop the cached config so the next get_config() re-reads the environment."""
    global _config
    _config = None


__all__ = ['Config', 'get_config', 'reset_config', 'SPAWN_EDGES']
