"""Ansible dynamic inventory backed by a git repository."""

from .config import InventorySourceConfig, load_config
from .runner import InventorySourceRunner

__all__ = ["InventorySourceConfig", "InventorySourceRunner", "load_config"]
