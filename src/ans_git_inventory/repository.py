from __future__ import annotations

from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit
import logging
import os

import pygit2

from .types import InventorySourceError

logger = logging.getLogger(__name__)


class CloneError(InventorySourceError):
    """Raised when the inventory repository could not be fetched."""


def username_from_url(url: str) -> Optional[str]:
    """Return the user embedded in an ``ssh://`` or scp-like remote address."""

    if "://" in url:
        return urlsplit(url).username or None
    host_part = url.split(":", 1)[0]
    if "@" not in host_part:
        return None
    return host_part.rsplit("@", 1)[0] or None


def resolve_credentials(url: str, key_path: Path) -> pygit2.Keypair:
    """Build the single key based credential used for the whole transfer."""

    username = username_from_url(url)
    if not username:
        raise CloneError(f"no username in remote address {url}")
    key_path = Path(key_path)
    if not key_path.is_file():
        raise CloneError(f"private key {key_path} does not exist or is not a file")
    if not os.access(key_path, os.R_OK):
        raise CloneError(f"private key {key_path} is not readable")
    # Keys are used as-is: no public key file and no passphrase.
    return pygit2.Keypair(username, None, str(key_path), "")


class KeypairCallbacks(pygit2.RemoteCallbacks):
    """Hands a pre-resolved keypair to libgit2 exactly once."""

    def __init__(self, keypair: pygit2.Keypair):
        super().__init__()
        self.keypair = keypair
        self.requests = 0

    def credentials(self, url, username_from_url, allowed_types):  # type: ignore[override]
        self.requests += 1
        if not allowed_types & pygit2.enums.CredentialType.SSH_KEY:
            raise pygit2.GitError(f"{url} does not accept SSH key authentication")
        if self.requests > 1:
            # libgit2 asks again after the server rejects the key.
            raise pygit2.GitError(f"SSH key for {username_from_url} was rejected by {url}")
        return self.keypair


def _single_branch_remote(branch: str):
    def _create(repo: pygit2.Repository, name: str, url: str) -> pygit2.Remote:
        refspec = f"+refs/heads/{branch}:refs/remotes/{name}/{branch}"
        return repo.remotes.create(name, url, refspec)

    return _create


def clone_branch(url: str, key_path: Path, branch: str, dest: Path) -> pygit2.Repository:
    """Clone ``branch`` of ``url`` into ``dest``, which must not exist yet."""

    dest = Path(dest)
    if dest.exists():
        raise CloneError(f"destination {dest} already exists")
    keypair = resolve_credentials(url, key_path)

    logger.info("Cloning branch %s of %s into %s", branch, url, dest)
    try:
        repo = pygit2.clone_repository(
            url,
            str(dest),
            remote=_single_branch_remote(branch),
            checkout_branch=branch,
            callbacks=KeypairCallbacks(keypair),
        )
    except (pygit2.GitError, KeyError, ValueError, OSError) as exc:
        raise CloneError(str(exc) or exc.__class__.__name__) from exc
    logger.debug("Cloned %s", url)
    return repo
