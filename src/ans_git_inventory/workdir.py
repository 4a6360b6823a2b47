from __future__ import annotations

from pathlib import Path
from typing import Optional
import logging
import secrets
import shutil
import string
import tempfile

from .types import InventorySourceError

logger = logging.getLogger(__name__)

SUFFIX_LENGTH = 32
_ALPHABET = string.ascii_letters + string.digits


class CleanupError(InventorySourceError):
    """Raised when a workdir exists but could not be removed."""


def generate_workdir(base: Optional[Path] = None) -> Path:
    """Return a fresh, not yet created path under the system temp directory."""

    root = Path(base) if base is not None else Path(tempfile.gettempdir())
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return root / suffix


def remove_workdir(path: Path) -> bool:
    """Recursively delete ``path``.

    Returns ``False`` when there was nothing to remove, which happens when a
    clone fails before writing anything.
    """

    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        logger.debug("Workdir %s already absent", path)
        return False
    except OSError as exc:
        raise CleanupError(f"{path}: {exc.strerror or exc}") from exc
    logger.debug("Removed workdir %s", path)
    return True
