"""Configuration loading for site-to-site transfers.

Configuration Structure
-----------------------

config/
    config.yaml          # Transport (chunk size, timeouts, redirects, SSL) and logging

Main Functions
--------------

    - load_config(): Load transfer configuration from a YAML file
    - get_config(): Get or load singleton config instance
    - set_config(): Replace singleton config instance
    - reset_config(): Reset singleton config instance

Usage Examples
--------------

    >>> from config import get_config
    >>> config = get_config()
    >>> config.chunk_size
    262144

Custom config path:
    >>> from pathlib import Path
    >>> config = load_config(config_path=Path("/custom/path/config.yaml"))

Configuration Priority
---------------------

Settings are merged in the following priority (highest to lowest):

1. Environment variables (TRANSFER_CHUNK_SIZE, TRANSFER_READ_TIMEOUT, LOG_LEVEL, ...)
2. YAML configuration file (after ${VAR:-default} expansion)
3. Dataclass defaults
"""

from config.config import (
    TransferConfig,
    get_config,
    load_config,
    reset_config,
    set_config,
)

__all__ = [
    "load_config",
    "get_config",
    "set_config",
    "reset_config",
    "TransferConfig",
]
