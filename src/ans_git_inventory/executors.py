from __future__ import annotations

from pathlib import Path
from typing import Optional, Union
import logging
import os
import subprocess

from .config import DEFAULT_INVENTORY_COMMAND
from .types import CommandResult, InventorySourceError

logger = logging.getLogger(__name__)

ENABLED_PLUGINS = "host_list,auto,yaml,ini,toml"


class InvocationError(InventorySourceError):
    """Raised when the inventory command cannot start or exits non-zero."""

    def __init__(self, message: str, result: Optional[CommandResult] = None):
        super().__init__(message)
        self.result = result


class InventoryCommand:
    """Runs the inventory command inside a cloned repository."""

    def __init__(self, repo_root: Union[str, Path], executable: str = DEFAULT_INVENTORY_COMMAND):
        self.repo_root = Path(repo_root)
        self.executable = executable

    @property
    def env(self) -> dict[str, str]:
        return {"ANSIBLE_INVENTORY_ENABLED": ENABLED_PLUGINS}

    def command_for(self, target: Union[str, Path], host: str = "") -> list[str]:
        if host:
            return [self.executable, "--host", host, "-i", str(target)]
        return [self.executable, "--list", "-i", str(target)]

    def run(self, target: Union[str, Path], host: str = "") -> CommandResult:
        """Run the command and capture its output without checking the status."""

        cmd_list = self.command_for(target, host)
        exec_env = os.environ.copy()
        exec_env.update(self.env)

        logger.info("Running %s in %s", " ".join(cmd_list), self.repo_root)
        try:
            proc = subprocess.run(
                cmd_list,
                capture_output=True,
                check=False,
                env=exec_env,
                cwd=str(self.repo_root),
            )
        except OSError as exc:
            raise InvocationError(exc.strerror or str(exc)) from exc
        logger.debug("%s exited with rc=%s", self.executable, proc.returncode)
        return CommandResult(cmd_list, proc.stdout, proc.stderr, proc.returncode)

    @staticmethod
    def ensure_success(result: CommandResult) -> CommandResult:
        if result.success:
            return result
        message = result.stderr.decode(errors="replace").strip()
        if not message:
            message = f"exited with rc={result.returncode}"
        raise InvocationError(message, result)
