from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Iterable

from .errors import PermissionChangeError

log = logging.getLogger(__name__)

EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def make_executable(path: Path) -> None:
    try:
        mode = path.stat().st_mode
        path.chmod(mode | EXEC_BITS)
    except OSError as exc:
        raise PermissionChangeError(f"Failed to chmod {path.name}") from exc


def make_all_executable(paths: Iterable[Path]) -> None:
    log.info("Changing permissions for executables")
    for path in paths:
        make_executable(path)


def is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)
