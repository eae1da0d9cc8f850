from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict

from . import shell
from .errors import EnvironmentSetupError

log = logging.getLogger(__name__)


class VirtualEnv:
    def __init__(self, path: Path):
        self.path = path
        self.env: Dict[str, str] | None = None

    @property
    def bin_dir(self) -> Path:
        return self.path / "bin"

    @property
    def python(self) -> Path:
        return self.bin_dir / "python"

    def create(self, python_version: str) -> None:
        log.info("Installing BindCraft environment")
        shell.run(
            ["uv", "venv", "--python", python_version, str(self.path)],
            EnvironmentSetupError,
            "Failed to create BindCraft virtual environment",
        )

    def activate(self) -> Dict[str, str]:
        """Return the environment child processes should run with.

        Mirrors what ``bin/activate`` exports, so ``uv pip`` and ``python``
        resolve inside the venv.
        """
        log.info("Loading BindCraft environment")
        if not self.python.exists():
            raise EnvironmentSetupError("Failed to activate the BindCraft environment.")
        env = os.environ.copy()
        env.pop("PYTHONHOME", None)
        env["VIRTUAL_ENV"] = str(self.path)
        env["PATH"] = str(self.bin_dir) + os.pathsep + env.get("PATH", "")
        self.env = env
        log.info("BindCraft environment activated at %s", self.path)
        return env

    def deactivate(self) -> None:
        self.env = None


def clean_uv_cache() -> bool:
    log.info("Cleaning up uv cache to save space")
    if not shell.succeeds(["uv", "cache", "clean"]):
        log.warning("Failed to clean uv cache")
        return False
    log.info("uv cache cleaned up")
    return True
