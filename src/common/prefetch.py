"""Compute content checksums of git sources with ``nix-prefetch-git``."""

from __future__ import annotations

import json
import logging
import subprocess

from constants import Constants
from errors import PrefetchError

logger = logging.getLogger(__name__)


def prefetch_git(url: str, rev: str, timeout: int = Constants.PREFETCH_TIMEOUT_SEC) -> str:
    """Return the sha256 of a git checkout.

    Args:
        url: Repository URL.
        rev: Exact revision to fetch.
        timeout: Seconds to wait for the external command.

    Returns:
        The ``sha256`` field reported by ``nix-prefetch-git``.

    Raises:
        PrefetchError: If the command is missing, fails, times out or
            prints something other than the expected JSON object.
    """
    cmd = [Constants.PREFETCH_GIT_COMMAND, "--quiet", "--url", url, "--rev", rev]
    logger.info("Prefetching %s at %s", url, rev)
    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise PrefetchError(f"{Constants.PREFETCH_GIT_COMMAND} not found on PATH") from e
    except subprocess.TimeoutExpired as e:
        raise PrefetchError(f"{Constants.PREFETCH_GIT_COMMAND} timed out after {timeout}s for {url}") from e

    if proc.returncode != 0:
        stderr = (proc.stderr or "").strip()
        raise PrefetchError(
            f"{Constants.PREFETCH_GIT_COMMAND} exited with {proc.returncode} for {url}@{rev}: {stderr}"
        )

    try:
        output = json.loads(proc.stdout)
    except json.JSONDecodeError as e:
        raise PrefetchError(f"unexpected output from {Constants.PREFETCH_GIT_COMMAND}: {e}") from e

    sha256 = output.get("sha256") if isinstance(output, dict) else None
    if not isinstance(sha256, str):
        raise PrefetchError(f"{Constants.PREFETCH_GIT_COMMAND} output has no sha256 for {url}@{rev}")
    return sha256
