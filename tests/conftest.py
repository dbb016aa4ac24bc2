"""Shared fixtures for the sync bridge tests."""

from pathlib import Path
from typing import Dict, List

import pytest

from rclone_bridge.core import ErrorKind, RunResult, SyncTarget


@pytest.fixture
def local_root(tmp_path) -> str:
    """An existing directory standing in for the synchronised folder."""
    root = tmp_path / "vault"
    root.mkdir()
    return str(root)


@pytest.fixture
def fake_rclone(tmp_path):
    """Write a /bin/sh script that behaves like rclone for one invocation.

    The script records its arguments (one per line) in ``args.txt`` next to it.
    """

    def _make(stdout: str = "", stderr: str = "", exit_code: int = 0, sleep: int = 0) -> Path:
        script = tmp_path / "rclone"
        args_file = tmp_path / "args.txt"

        lines = ["#!/bin/sh", f'printf "%s\\n" "$@" > "{args_file}"']
        if stdout:
            lines += ["cat <<'EOF'", stdout, "EOF"]
        if stderr:
            lines += ["cat >&2 <<'EOF'", stderr, "EOF"]
        if sleep:
            lines.append(f"exec sleep {sleep}")
        lines.append(f"exit {exit_code}")

        script.write_text("\n".join(lines) + "\n")
        script.chmod(0o755)
        return script

    return _make


class FakeRunner:
    """Records calls and returns canned results keyed by target name."""

    def __init__(self, results: Dict[str, RunResult] = None, events: List[str] = None):
        self.results = results or {}
        self.calls: List[SyncTarget] = []
        self.events = events if events is not None else []
        self.hooks = {}

    async def run(self, executable_path, local_root, target):
        self.calls.append(target)
        self.events.append(f"start:{target.name}")
        hook = self.hooks.get(target.name)
        if hook is not None:
            await hook()
        self.events.append(f"end:{target.name}")

        outcome = self.results.get(target.name, RunResult.success("done (0.0s)"))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def process_failure(message: str, exit_code: int = 1) -> RunResult:
    return RunResult.failure(ErrorKind.PROCESS, message, exit_code=exit_code)
