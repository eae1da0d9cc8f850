from __future__ import annotations

import io
import shutil
import subprocess
import tarfile
from pathlib import Path
from typing import Dict, List

import pytest

from bindcraft_install import shell, weights


class FakeCommands:
    """Stands in for subprocess: records commands, fails on request."""

    def __init__(self):
        self.calls: List[List[str]] = []
        self.missing_modules: set[str] = set()
        self.failing: set[str] = set()
        self.create_interpreter = True

    def _fails(self, cmd: List[str]) -> bool:
        joined = " ".join(cmd)
        return any(marker in joined for marker in self.failing)

    def run(self, cmd, check=False, env=None, cwd=None, stdout=None, stderr=None, **kwargs):
        cmd = [str(c) for c in cmd]
        self.calls.append(cmd)
        returncode = 0
        if self._fails(cmd):
            returncode = 1
        elif len(cmd) >= 3 and cmd[1] == "-c" and cmd[2].startswith("import "):
            module = cmd[2].split()[1].rstrip(";")
            if module in self.missing_modules:
                returncode = 1
        elif cmd[:2] == ["uv", "venv"] and self.create_interpreter:
            python = Path(cmd[-1]) / "bin" / "python"
            python.parent.mkdir(parents=True, exist_ok=True)
            python.write_text("#!/bin/sh\n")
        if check and returncode:
            raise subprocess.CalledProcessError(returncode, cmd)
        return subprocess.CompletedProcess(cmd, returncode)

    def check_output(self, cmd, text=False, **kwargs):
        self.calls.append([str(c) for c in cmd])
        return "uv 0.5.0\n"

    def commands(self, prefix: List[str]) -> List[List[str]]:
        return [c for c in self.calls if c[: len(prefix)] == prefix]


class FakeResponse:
    def __init__(self, payload: bytes, status: int = 200):
        self.payload = payload
        self.status = status
        self.headers: Dict[str, str] = {"content-length": str(len(payload))}

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise weights.requests.HTTPError(f"{self.status} error")

    def iter_content(self, chunk_size: int = 1024):
        for i in range(0, len(self.payload), chunk_size):
            yield self.payload[i : i + chunk_size]


def make_tar(files: Dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tf:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tf.addfile(info, io.BytesIO(data))
    return buf.getvalue()


PARAMS_TAR = make_tar(
    {
        "params_model_1.npz": b"model-1",
        "params_model_5_ptm.npz": b"model-5-ptm",
        "LICENSE": b"CC BY 4.0",
    }
)


@pytest.fixture
def fake_commands(monkeypatch):
    fake = FakeCommands()
    monkeypatch.setattr(shell.subprocess, "run", fake.run)
    monkeypatch.setattr(shell.subprocess, "check_output", fake.check_output)
    return fake


@pytest.fixture
def fake_download(monkeypatch):
    """Serve a payload for every requests.get; set ``.payload`` to change it."""

    class _Download:
        payload = PARAMS_TAR
        urls: List[str] = []

        def get(self, url, stream=False, timeout=None):
            self.urls.append(url)
            return FakeResponse(self.payload)

    dl = _Download()
    dl.urls = []
    monkeypatch.setattr(weights.requests, "get", dl.get)
    return dl


@pytest.fixture
def tools_present(monkeypatch):
    monkeypatch.setattr(shutil, "which", lambda name: f"/usr/bin/{name}")


@pytest.fixture
def install_dir(tmp_path, monkeypatch):
    functions = tmp_path / "functions"
    functions.mkdir()
    for name in ("dssp", "DAlphaBall.gcc"):
        path = functions / name
        path.write_text("binary")
        path.chmod(0o644)
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("BINDCRAFT_INSTALL_CONFIG", raising=False)
    return tmp_path
