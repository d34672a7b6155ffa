from __future__ import annotations

import logging
import subprocess
import sys
from dataclasses import dataclass, field
from typing import NoReturn

from muxpick.authorities import ActionFailed, Authority, SessionRecord

logger = logging.getLogger(__name__)


def handoff(argv: list[str]) -> NoReturn:
    """Give the terminal to argv and exit with its status once it ends.

    The child inherits stdin, stdout and stderr and is waited on without a
    timeout. A child killed by a signal reports no status and exits 0.
    """
    logger.debug("handing off terminal to %s", argv)
    try:
        result = subprocess.run(argv)
    except OSError as e:
        raise ActionFailed(f"Could not run {argv[0]}: {e}") from e
    sys.exit(max(result.returncode, 0))


def attach(authority: Authority, name: str) -> NoReturn:
    handoff(authority.attach_argv(name))


def create(authority: Authority, name: str) -> NoReturn:
    handoff(authority.create_argv(name))


@dataclass
class KillReport:
    killed: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def kill_all(authority: Authority, records: list[SessionRecord] | tuple[SessionRecord, ...]) -> KillReport:
    """Kill every listed session, continuing past failures."""
    report = KillReport()
    for record in records:
        argv = authority.kill_argv(record.name)
        logger.debug("killing session: %s", argv)
        try:
            result = subprocess.run(argv, capture_output=True, text=True, encoding="utf-8", errors="replace")
        except (OSError, subprocess.SubprocessError) as e:
            report.failed.append((record.name, str(e)))
            continue
        if result.returncode != 0:
            reason = result.stderr.strip() or f"exit status {result.returncode}"
            report.failed.append((record.name, reason))
        else:
            report.killed.append(record.name)
    return report
