from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from demo_session import DemoSession, Evidence, Step


class FakeRunner:
    """Records ffmpeg invocations and writes the file each pass would produce."""

    def __init__(self, fail_stage=None, returncode=1, stderr="boom"):
        self.calls: list[list[str]] = []
        self.manifests: list[str] = []
        self.fail_stage = fail_stage
        self.returncode = returncode
        self.stderr = stderr

    def __call__(self, cmd):
        cmd = list(cmd)
        self.calls.append(cmd)
        manifest = Path(cmd[cmd.index("-i") + 1])
        if manifest.exists():
            self.manifests.append(manifest.read_text(encoding="utf-8", errors="surrogateescape"))

        stage = "palette" if len(self.calls) == 1 else "encode"
        if stage == self.fail_stage:
            return subprocess.CompletedProcess(cmd, self.returncode, stdout="", stderr=self.stderr)

        output = Path(cmd[-1])
        output.write_bytes(b"GIF89a" if stage == "encode" else b"\x89PNG")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def make_session(tmp_path):
    """Build a session from (description, screenshot_name, create_file) tuples."""

    def _make(steps, title="Checkout flow"):
        built = []
        for description, name, create in steps:
            if name and create:
                (tmp_path / name).write_bytes(b"\x89PNG\r\n\x1a\n")
            built.append(Step(description=description, evidence=Evidence(screenshot_path=name)))
        return DemoSession(title=title, steps=built)

    return _make
