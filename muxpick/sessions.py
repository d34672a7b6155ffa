from __future__ import annotations

import logging
import os
import subprocess

from muxpick.authorities import Authority, ListingFailed, SessionRecord

logger = logging.getLogger(__name__)


def list_sessions(authority: Authority) -> list[SessionRecord]:
    """Ask the authority for its sessions, in the order it reports them.

    A recognized "no sessions" exit yields an empty list. Any other
    failure raises ListingFailed with the authority's own message.
    """
    argv = authority.list_argv()
    logger.debug("listing sessions: %s", argv)
    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        raise ListingFailed(str(e)) from e

    if result.returncode != 0:
        if authority.is_empty(result.returncode, result.stdout, result.stderr):
            logger.debug("%s reports no sessions (exit %d)", authority.name, result.returncode)
            return []
        message = (result.stderr or result.stdout).strip()
        raise ListingFailed(message or f"{authority.binary} exited with status {result.returncode}")

    records = authority.parse(result.stdout)
    logger.debug("parsed %d session(s)", len(records))
    return records


def filter_by_directory(records: list[SessionRecord], cwd: str) -> list[SessionRecord]:
    """Keep sessions rooted at cwd or below it. Sessions without a known path are kept."""
    cwd = cwd.rstrip(os.sep) or os.sep
    prefix = cwd if cwd.endswith(os.sep) else cwd + os.sep
    return [r for r in records if r.path is None or r.path == cwd or r.path.startswith(prefix)]
