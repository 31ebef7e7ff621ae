"""
Letterbox Configuration Command

Non-interactive configuration helpers: show, validate, init, set, backup.
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path

import toml

from ..config import Config, load_config

logger = logging.getLogger(__name__)


def run_config(args) -> int:
    """
    Run the config subcommand.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    config_path = getattr(args, 'config', Path('config.toml'))

    if getattr(args, 'init', False):
        return init_config(config_path)

    if getattr(args, 'validate', False):
        config = load_config(config_path)
        errors = config.validate()
        if errors:
            print("Configuration errors:")
            for err in errors:
                print(f"  - {err}")
            return 1
        print("Configuration is valid.")
        return 0

    if getattr(args, 'backup', False):
        return backup_config(config_path)

    if getattr(args, 'set', None):
        key, value = args.set
        return set_config_value(config_path, key, value)

    # Default: show
    config = load_config(config_path)
    print(config_to_toml(config))
    return 0


def config_to_toml(config: Config) -> str:
    """Render config as TOML, with the web secret and API key masked."""
    data = config._to_dict()
    if data["remote"]["api_key"]:
        data["remote"]["api_key"] = "********"
    if data["web"]["secret_key"] != "changeme":
        data["web"]["secret_key"] = "********"
    return "# Letterbox Configuration\n\n" + toml.dumps(data)


def init_config(config_path: Path) -> int:
    """Write a default configuration file if none exists."""
    if config_path.exists():
        print(f"Config file already exists: {config_path}")
        return 1

    Config().save(config_path)
    print(f"Wrote default configuration to: {config_path}")
    return 0


def backup_config(config_path: Path) -> int:
    """Backup configuration file."""
    if not config_path.exists():
        print(f"Config file not found: {config_path}")
        return 1

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = config_path.with_suffix(f".{timestamp}.bak")

    shutil.copy(config_path, backup_path)
    print(f"Backed up to: {backup_path}")
    return 0


def set_config_value(config_path: Path, key: str, value: str) -> int:
    """Set a specific configuration value (e.g. "store.backend rest")."""
    config = load_config(config_path)

    parts = key.split(".")
    obj = config

    for part in parts[:-1]:
        if hasattr(obj, part):
            obj = getattr(obj, part)
        else:
            print(f"Invalid config key: {key}")
            return 1

    final_key = parts[-1]
    if not hasattr(obj, final_key):
        print(f"Invalid config key: {key}")
        return 1

    # Convert value to the type of the current setting
    current = getattr(obj, final_key)
    try:
        if isinstance(current, bool):
            value = value.lower() in ('true', '1', 'yes')
        elif isinstance(current, int):
            value = int(value)
        elif isinstance(current, float):
            value = float(value)
        elif isinstance(current, list):
            value = [item.strip() for item in value.split(",") if item.strip()]
    except ValueError:
        print(f"Invalid value for {key}: {value}")
        return 1

    setattr(obj, final_key, value)
    config.save(config_path)
    logger.info(f"Config {key} updated in {config_path}")

    print(f"Set {key} = {value}")
    return 0
