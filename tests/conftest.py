"""Shared fixtures."""

import os
import stat
import sys

import pytest


@pytest.fixture
def fake_binary(tmp_path, monkeypatch):
    """Install an executable shell script under tmp_path and put it first on PATH."""
    if sys.platform == "win32":
        pytest.skip("shell script stubs need a POSIX shell")
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")

    def install(name, body):
        path = bin_dir / name
        path.write_text("#!/bin/sh\n" + body + "\n")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return install
