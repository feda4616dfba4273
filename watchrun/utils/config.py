# watchrun/utils/config.py

"""
Configuration management for watchrun
"""
import json
import sys
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union, List
from dataclasses import dataclass, field, asdict
import logging

logger = logging.getLogger(__name__)

APP_NAME = "watchrun"


@dataclass
class WatchConfig:
    """File watching configuration"""
    watch_for_creations: bool = True
    recursive: bool = True
    use_polling: bool = False
    poll_interval: float = 1.0  # seconds


@dataclass
class OutputConfig:
    """Command output configuration"""
    results_dir: Path = field(default_factory=lambda: default_data_dir() / "results")

    def __post_init__(self):
        if isinstance(self.results_dir, str):
            self.results_dir = Path(self.results_dir).expanduser()


@dataclass
class Config:
    """Main configuration class"""
    watch: WatchConfig = field(default_factory=WatchConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_format: str = "text"  # text, json, or color

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        def serialize(obj):
            if isinstance(obj, Path):
                return str(obj)
            if isinstance(obj, dict):
                return {k: serialize(v) for k, v in obj.items()}
            return obj

        return serialize(asdict(self))

    def to_yaml(self) -> str:
        """Convert config to YAML string"""
        return yaml.safe_dump(self.to_dict(), default_flow_style=False)

    def save(self, path: Union[str, Path]):
        """Save config to file"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if path.suffix.lower() in ['.yaml', '.yml']:
            with open(path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False)
        else:  # default to JSON
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2, default=str)

        logger.info(f"Configuration saved to {path}")

    def update_from_dict(self, data: Dict[str, Any]):
        """
        Update config from dictionary

        Nested sections (watch, output) are merged key by key; unknown
        keys are logged and skipped.
        """
        for key, value in (data or {}).items():
            if key in ('watch', 'output') and isinstance(value, dict):
                section = getattr(self, key)
                for sub_key, sub_value in value.items():
                    if hasattr(section, sub_key):
                        setattr(section, sub_key, sub_value)
                    else:
                        logger.warning(f"Unknown config key: {key}.{sub_key}")
                post_init = getattr(section, '__post_init__', None)
                if post_init:
                    post_init()
            elif hasattr(self, key):
                setattr(self, key, value)
            else:
                logger.warning(f"Unknown config key: {key}")


def default_config_dir() -> Path:
    """Get platform-specific configuration directory"""
    if sys.platform == "win32":
        import os
        appdata = Path(os.environ.get('APPDATA', Path.home()))
        return appdata / APP_NAME
    elif sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    else:  # linux
        return Path.home() / ".config" / APP_NAME


def default_data_dir() -> Path:
    """Get platform-specific data directory"""
    if sys.platform == "win32":
        import os
        appdata = Path(os.environ.get('LOCALAPPDATA', Path.home()))
        return appdata / APP_NAME
    elif sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    else:  # linux
        return Path.home() / ".local" / "share" / APP_NAME


def get_default_config_path() -> Path:
    """Get default configuration path based on platform"""
    return default_config_dir() / "config.yaml"


def _candidate_paths(path: Union[str, Path, None]) -> List[Path]:
    config_paths = []
    if path:
        config_paths.append(Path(path))
    config_paths.extend([
        Path(f"{APP_NAME}.yaml"),
        Path(f"{APP_NAME}.json"),
        default_config_dir() / "config.yaml",
        default_config_dir() / "config.json",
    ])
    return config_paths


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    if config_path.suffix.lower() in ['.yaml', '.yml']:
        with open(config_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    with open(config_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def load_config(path: Union[str, Path] = None) -> Config:
    """
    Load configuration from the first existing file, or use defaults

    Args:
        path: Explicit config file; must exist when given

    Raises:
        FileNotFoundError: explicit path does not exist
    """
    if path and not Path(path).exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    config = Config()

    for config_path in _candidate_paths(path):
        if not config_path.exists():
            continue

        logger.info(f"Loading configuration from {config_path}")
        config.update_from_dict(_read_config_file(config_path))
        return config

    logger.debug("No configuration file found, using defaults")
    return config
