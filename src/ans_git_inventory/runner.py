from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import BinaryIO, Callable, Optional

from .config import InventorySourceConfig
from .executors import InventoryCommand, InvocationError
from .repository import CloneError, clone_branch
from .types import InventorySourceError
from .workdir import CleanupError, generate_workdir, remove_workdir

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[str, InventorySourceError], None]


def _log_error(prefix: str, exc: InventorySourceError) -> None:
    logger.error("%s: %s", prefix, exc)


class InventorySourceRunner:
    """Clones the inventory repository, renders it and removes the checkout."""

    def __init__(
        self,
        config: InventorySourceConfig,
        *,
        host: str = "",
        workdir: Optional[Path] = None,
        output: Optional[BinaryIO] = None,
        error_callback: Optional[ErrorCallback] = None,
        clone: Callable[..., object] = clone_branch,
    ):
        self.config = config
        self.host = host
        self.workdir = Path(workdir) if workdir is not None else generate_workdir()
        self.output = output
        self.error_callback = error_callback or _log_error
        self.clone = clone

    @property
    def target_path(self) -> Path:
        return self.workdir / self.config.target

    def run(self) -> int:
        try:
            return self._fetch_and_render()
        finally:
            self._cleanup()

    def _fetch_and_render(self) -> int:
        cfg = self.config
        try:
            self.clone(cfg.repo_ssh_address, cfg.key_path, cfg.branch, self.workdir)
        except CloneError as exc:
            self.error_callback("Error cloning repository", exc)
            return 1

        command = InventoryCommand(self.workdir, cfg.inventory_command)
        try:
            result = command.ensure_success(command.run(self.target_path, self.host))
        except InvocationError as exc:
            self.error_callback(f"Error executing '{cfg.inventory_command}' command", exc)
            return 1

        self._emit(result.stdout)
        return 0

    def _emit(self, data: bytes) -> None:
        stream = self.output if self.output is not None else sys.stdout.buffer
        stream.write(data)
        stream.flush()

    def _cleanup(self) -> None:
        try:
            remove_workdir(self.workdir)
        except CleanupError as exc:
            self.error_callback("Error removing working directory", exc)
