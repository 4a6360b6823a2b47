from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any
import logging

import yaml

from .types import InventorySourceError

logger = logging.getLogger(__name__)

DEFAULT_INVENTORY_COMMAND = "ansible-inventory"
REQUIRED_KEYS = ("repo_ssh_address", "key_path", "branch", "target")

CONFIG_TEMPLATE = """\
# repo with inventory file
repo_ssh_address: ssh://git@github.com:your/inventory/repo.git
# absolute path to private ssh key (should be accessible)
key_path: /absolute/path/private_key
# branch name of repo with inventory file
branch: any-name
# relative path to inventory directory or inventory file (inventory.yaml) - it will be used with ansible command
target: inventory
# optional: inventory command to run against the checkout
# inventory_command: ansible-inventory
"""


class ConfigError(InventorySourceError):
    """Raised when the config file cannot be turned into a configuration."""


class ConfigReadError(ConfigError):
    """The config file could not be opened or read."""


class ConfigParseError(ConfigError):
    """The config file is not valid YAML or does not hold a usable config."""


@dataclass(frozen=True)
class InventorySourceConfig:
    repo_ssh_address: str
    key_path: Path
    branch: str
    target: str
    inventory_command: str = DEFAULT_INVENTORY_COMMAND


def load_config(path: Path) -> InventorySourceConfig:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigParseError(f"{path}: not valid UTF-8 text ({exc.reason} at byte {exc.start})") from None
    except OSError as exc:
        raise ConfigReadError(f"{path}: {exc.strerror or exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        location = f"{path}:{mark.line + 1}:{mark.column + 1}" if mark is not None else str(path)
        problem = getattr(exc, "problem", None) or str(exc)
        raise ConfigParseError(f"{location} {problem}") from None

    if not isinstance(data, dict):
        raise ConfigParseError(f"{path}: expected a mapping of settings")

    missing = [key for key in REQUIRED_KEYS if data.get(key) in (None, "")]
    if missing:
        raise ConfigParseError(f"{path}: missing required field(s): {', '.join(missing)}")

    unknown = sorted(str(key) for key in data if key not in REQUIRED_KEYS and key != "inventory_command")
    if unknown:
        logger.debug("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown))

    key_path = Path(_scalar(data, "key_path", path))
    if not key_path.is_absolute():
        raise ConfigParseError(f"{path}: key_path must be an absolute path, got {key_path}")

    target = _scalar(data, "target", path)
    if Path(target).is_absolute():
        raise ConfigParseError(f"{path}: target must be relative to the repository root, got {target}")

    inventory_command = data.get("inventory_command") or DEFAULT_INVENTORY_COMMAND
    return InventorySourceConfig(
        repo_ssh_address=_scalar(data, "repo_ssh_address", path),
        key_path=key_path,
        branch=_scalar(data, "branch", path),
        target=target,
        inventory_command=str(inventory_command),
    )


def _scalar(data: dict[str, Any], key: str, path: Path) -> str:
    value = data[key]
    if isinstance(value, (dict, list)):
        raise ConfigParseError(f"{path}: {key} must be a string")
    return str(value)
