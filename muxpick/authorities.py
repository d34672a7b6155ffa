from __future__ import annotations

import re
import shutil
from dataclasses import dataclass


class MuxpickError(Exception):
    """Base class for errors reported to the user as a single error line."""


class ExternalAuthorityMissing(MuxpickError):
    def __init__(self, authority: Authority) -> None:
        super().__init__(f"{authority.binary} is not installed")
        self.authority = authority


class ListingFailed(MuxpickError):
    pass


class ActionFailed(MuxpickError):
    pass


@dataclass(frozen=True)
class SessionRecord:
    name: str
    attached: bool | None = None
    clients: int | None = None
    windows: int | None = None
    path: str | None = None
    started_at: str | None = None


def _to_int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


class Authority:
    """An external program that owns sessions: how to list, parse, attach, create and kill."""

    name = ""
    binary = ""
    brew_formula: str | None = None

    def list_argv(self) -> list[str]:
        raise NotImplementedError

    def parse(self, text: str) -> list[SessionRecord]:
        raise NotImplementedError

    def is_empty(self, returncode: int, stdout: str, stderr: str) -> bool:
        """Whether a non-zero list exit actually means there are no sessions."""
        return False

    def attach_argv(self, name: str) -> list[str]:
        return [self.binary, "attach", name]

    def create_argv(self, name: str) -> list[str]:
        # Most authorities create on attach to a missing session
        return self.attach_argv(name)

    def kill_argv(self, name: str) -> list[str]:
        return [self.binary, "kill", name]

    def install_hint(self, platform: str) -> list[str]:
        return [f"  Please install {self.binary} for your operating system"]


class TmuxAuthority(Authority):
    name = "tmux"
    binary = "tmux"
    brew_formula = "tmux"

    FORMAT = "#{session_name}|#{session_windows}|#{session_attached}|#{session_path}"

    def list_argv(self) -> list[str]:
        return ["tmux", "list-sessions", "-F", self.FORMAT]

    def parse(self, text: str) -> list[SessionRecord]:
        records = []
        for line in text.strip().splitlines():
            if not line:
                continue
            # Session names may contain "|", so split from the right
            fields = line.rsplit("|", 3)
            if len(fields) < 4 or not fields[0]:
                records.append(SessionRecord(name=line))
                continue
            name, windows, attached, path = fields
            clients = _to_int(attached)
            records.append(
                SessionRecord(
                    name=name,
                    attached=clients > 0 if clients is not None else None,
                    clients=clients,
                    windows=_to_int(windows),
                    path=path,
                )
            )
        return records

    def is_empty(self, returncode: int, stdout: str, stderr: str) -> bool:
        # "no server running" and "no sessions" both exit with 1
        return returncode == 1

    def attach_argv(self, name: str) -> list[str]:
        return ["tmux", "attach-session", "-t", f"={name}"]

    def create_argv(self, name: str) -> list[str]:
        return ["tmux", "new-session", "-s", name]

    def kill_argv(self, name: str) -> list[str]:
        return ["tmux", "kill-session", "-t", f"={name}"]

    def install_hint(self, platform: str) -> list[str]:
        if platform == "darwin":
            return ["  macOS:", "    brew install tmux"]
        if platform.startswith("linux"):
            return [
                "  Ubuntu/Debian:",
                "    sudo apt-get install tmux",
                "  Fedora/RHEL:",
                "    sudo dnf install tmux",
                "  Arch:",
                "    sudo pacman -S tmux",
            ]
        return super().install_hint(platform)


class ShpoolAuthority(Authority):
    name = "shpool"
    binary = "shpool"

    _NO_DAEMON = re.compile(r"(could not connect|connecting) to (the )?daemon", re.IGNORECASE)

    def list_argv(self) -> list[str]:
        return ["shpool", "list"]

    def parse(self, text: str) -> list[SessionRecord]:
        lines = [line for line in text.splitlines() if line.strip()]
        if lines and lines[0].split()[0] == "NAME":
            lines = lines[1:]
        records = []
        for line in lines:
            fields = line.split()
            status = fields[-1] if len(fields) >= 3 else None
            records.append(
                SessionRecord(
                    name=fields[0],
                    attached={"attached": True, "disconnected": False}.get(status or ""),
                    started_at=fields[1] if len(fields) >= 3 else None,
                )
            )
        return records

    def is_empty(self, returncode: int, stdout: str, stderr: str) -> bool:
        # No daemon yet means nothing has ever been started
        return self._NO_DAEMON.search(stderr) is not None

    def install_hint(self, platform: str) -> list[str]:
        return ["  With cargo:", "    cargo install shpool"]


class ZmxAuthority(Authority):
    name = "zmx"
    binary = "zmx"

    _TOKEN_SPLIT = re.compile(r"\t+|\s+(?=[\w-]+=)")

    def list_argv(self) -> list[str]:
        return ["zmx", "list"]

    def parse(self, text: str) -> list[SessionRecord]:
        records = []
        for line in text.splitlines():
            line = line.strip()
            if not line or line.lower().startswith("no sessions"):
                continue
            fields = {}
            for token in self._TOKEN_SPLIT.split(line):
                key, sep, value = token.strip().partition("=")
                if sep:
                    fields[key] = value
            name = fields.get("session_name") or fields.get("name")
            if not name:
                continue
            clients = _to_int(fields["clients"]) if "clients" in fields else None
            records.append(
                SessionRecord(
                    name=name,
                    attached=clients > 0 if clients is not None else None,
                    clients=clients,
                    path=fields.get("start_dir") or fields.get("cwd"),
                    started_at=fields.get("created_at"),
                )
            )
        return records

    def is_empty(self, returncode: int, stdout: str, stderr: str) -> bool:
        return "no sessions" in (stdout + stderr).lower()

    def install_hint(self, platform: str) -> list[str]:
        return ["  See https://github.com/neurosnap/zmx for installation instructions"]


AUTHORITIES: dict[str, type[Authority]] = {
    "tmux": TmuxAuthority,
    "shpool": ShpoolAuthority,
    "zmx": ZmxAuthority,
}


def get_authority(name: str) -> Authority:
    try:
        return AUTHORITIES[name]()
    except KeyError:
        raise ValueError(f"Unknown authority '{name}'. Choose from: {', '.join(AUTHORITIES)}") from None


def ensure_installed(authority: Authority) -> None:
    if shutil.which(authority.binary) is None:
        raise ExternalAuthorityMissing(authority)
