"""Transfer configuration from YAML file.

Loads from config/config.yaml with transport and logging settings in one place.

Environment variables ARE supported using ${VAR_NAME} syntax in YAML files,
and a handful of TRANSFER_* variables override the file directly.
"""

import logging
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

# Configure module logger
logger = logging.getLogger(__name__)


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        # Support both ${VAR} and ${VAR:-default} syntax
        pattern = r"\$\{([^}:]+)(?::-(([^}]*))?)?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


def _to_optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in ("", "none", "null"):
        return None
    return float(value)


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


# Default config file: config/config.yaml next to this module
DEFAULT_CONFIG_FILE = Path(__file__).parent / "config.yaml"

# Environment variable -> (field name, converter)
ENV_OVERRIDES = {
    "TRANSFER_CHUNK_SIZE": ("chunk_size", int),
    "TRANSFER_CONNECT_TIMEOUT": ("connect_timeout_seconds", _to_optional_float),
    "TRANSFER_READ_TIMEOUT": ("read_timeout_seconds", _to_optional_float),
    "TRANSFER_TOTAL_TIMEOUT": ("total_timeout_seconds", _to_optional_float),
    "TRANSFER_ALLOW_REDIRECTS": ("allow_redirects", _to_bool),
    "TRANSFER_VERIFY_SSL": ("verify_ssl", _to_bool),
    "LOG_LEVEL": ("log_level", str),
}


@dataclass
class TransferConfig:
    """Transfer configuration.

    Configuration structure:
        transfer:
          chunk_size: 262144             # bytes read from the download per write
          connect_timeout_seconds: null  # null = no limit
          read_timeout_seconds: null
          total_timeout_seconds: null
          allow_redirects: false
          verify_ssl: true
        logging:
          level: INFO
          dir: logs
          json: true
          to_stdout: true
    """

    # =========================================================================
    # TRANSPORT SETTINGS
    # =========================================================================
    chunk_size: int = 256 * 1024
    connect_timeout_seconds: Optional[float] = None
    read_timeout_seconds: Optional[float] = None
    total_timeout_seconds: Optional[float] = None
    allow_redirects: bool = False
    verify_ssl: bool = True

    # =========================================================================
    # LOGGING SETTINGS
    # =========================================================================
    log_level: str = "INFO"
    log_dir: str = "logs"
    json_logs: bool = True
    log_to_stdout: bool = True

    extra: Dict[str, Any] = field(default_factory=dict)

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If any setting is out of range
        """
        if self.chunk_size < 1024:
            raise ValueError(f"chunk_size must be at least 1024 bytes, got {self.chunk_size}")

        for name in ("connect_timeout_seconds", "read_timeout_seconds", "total_timeout_seconds"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive or null, got {value}")

        if logging.getLevelName(self.log_level.upper()) == f"Level {self.log_level.upper()}":
            raise ValueError(f"Unknown log_level: {self.log_level}")

    @property
    def console_level(self) -> int:
        return logging.getLevelName(self.log_level.upper())


def _apply_env_overrides(values: Dict[str, Any]) -> Dict[str, Any]:
    for env_var, (name, convert) in ENV_OVERRIDES.items():
        raw = os.getenv(env_var)
        if raw is not None and raw != "":
            values[name] = convert(raw)
    return values


def load_config(config_path: Optional[Path] = None) -> TransferConfig:
    """Load transfer configuration from a YAML file.

    A missing file is not an error: defaults (plus environment overrides)
    are used instead.

    Raises:
        ValueError: If a value cannot be converted or fails validation
    """
    config_path = config_path or DEFAULT_CONFIG_FILE
    yaml_data = _expand_env_vars(load_yaml(config_path))

    transfer = yaml_data.get("transfer", {}) or {}
    log_settings = yaml_data.get("logging", {}) or {}

    values: Dict[str, Any] = {
        "chunk_size": int(transfer.get("chunk_size", TransferConfig.chunk_size)),
        "connect_timeout_seconds": _to_optional_float(transfer.get("connect_timeout_seconds")),
        "read_timeout_seconds": _to_optional_float(transfer.get("read_timeout_seconds")),
        "total_timeout_seconds": _to_optional_float(transfer.get("total_timeout_seconds")),
        "allow_redirects": _to_bool(transfer.get("allow_redirects", False)),
        "verify_ssl": _to_bool(transfer.get("verify_ssl", True)),
        "log_level": str(log_settings.get("level", TransferConfig.log_level)),
        "log_dir": str(log_settings.get("dir", TransferConfig.log_dir)),
        "json_logs": _to_bool(log_settings.get("json", True)),
        "log_to_stdout": _to_bool(log_settings.get("to_stdout", True)),
    }
    values = _apply_env_overrides(values)

    known = {f.name for f in fields(TransferConfig)}
    values["extra"] = {k: v for k, v in transfer.items() if k not in known}

    config = TransferConfig(**values)
    config.validate()

    logger.debug(
        "Loaded transfer configuration",
        extra={"operation": "load_config", "chunk_size": config.chunk_size},
    )
    return config


_config: Optional[TransferConfig] = None


def get_config() -> TransferConfig:
    """Get or load the singleton configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: TransferConfig) -> None:
    """Replace the singleton configuration instance (used by the CLI and tests)."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the singleton so the next get_config() reloads from disk."""
    global _config
    _config = None
