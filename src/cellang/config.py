"""Configuration loaded from ``cellang.yaml``."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "cellang.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "prompt": "$$ ",
    "continuation_prompt": ".. ",
    "echo_results": True,
    "stop_on_error": True,  # non-interactive runs only
    "log_dir": None,  # structured event logging is off when unset
    "logging_fsync": False,
}

DEFAULT_CONFIG_TEXT = """\
# cellang configuration
prompt: "$$ "
continuation_prompt: ".. "
echo_results: true
stop_on_error: true
# log_dir: .cellang/logs
"""


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration, with defaults for every missing key.

    Args:
        path: A YAML file, or a directory holding ``cellang.yaml``.  ``None``
            means the current working directory.  A missing file yields the
            defaults.

    Returns:
        Merged configuration dict.

    Raises:
        ValueError: If the file does not contain a YAML mapping.
    """
    config = dict(DEFAULT_CONFIG)
    if path is None:
        path = Path.cwd()
    config_path = path / CONFIG_FILENAME if path.is_dir() else path
    if config_path.exists():
        user_config = yaml.safe_load(config_path.read_text()) or {}
        if not isinstance(user_config, dict):
            raise ValueError(f"{config_path}: expected a mapping, got {type(user_config).__name__}")
        config.update(user_config)
    return config


def write_default_config(directory: Path) -> Path:
    """Write a commented default ``cellang.yaml`` into *directory*.

    Raises:
        FileExistsError: If the file already exists.
    """
    target = directory / CONFIG_FILENAME
    if target.exists():
        raise FileExistsError(f"{CONFIG_FILENAME} already exists in {directory}")
    directory.mkdir(parents=True, exist_ok=True)
    target.write_text(DEFAULT_CONFIG_TEXT)
    return target
