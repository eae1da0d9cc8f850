from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Dict, List, Type

from .errors import InstallError

log = logging.getLogger(__name__)


def run(
    cmd: List[str],
    error: Type[InstallError],
    message: str,
    env: Dict[str, str] | None = None,
    cwd: Path | None = None,
) -> None:
    log.info("[run] %s", " ".join(cmd))
    try:
        subprocess.run(cmd, check=True, env=env, cwd=cwd)
    except (subprocess.CalledProcessError, OSError) as exc:
        raise error(message) from exc


def succeeds(cmd: List[str], env: Dict[str, str] | None = None) -> bool:
    try:
        proc = subprocess.run(
            cmd,
            env=env,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError:
        return False
    return proc.returncode == 0


def output(cmd: List[str]) -> str | None:
    try:
        return subprocess.check_output(cmd, text=True).strip()
    except (subprocess.CalledProcessError, OSError):
        return None
