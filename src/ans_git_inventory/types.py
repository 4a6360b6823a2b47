from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class InventorySourceError(Exception):
    """Base class for every failure a run can report."""


@dataclass(frozen=True)
class CliOptions:
    config_file: Path
    host: str = ""
    list_all: bool = False
    generate_config: bool = False
    show_help: bool = False
    log_level: str = "WARNING"
    ignored: tuple[str, ...] = ()


@dataclass
class CommandResult:
    command: list[str]
    stdout: bytes
    stderr: bytes
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0
