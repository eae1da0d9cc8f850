from __future__ import annotations

import logging
import shutil

from . import shell
from .errors import MissingToolError

log = logging.getLogger(__name__)

UV_HINT = "Install it with: curl -LsSf https://astral.sh/uv/install.sh | sh"
FFMPEG_HINT = (
    "Install it via your system package manager (e.g., apt install ffmpeg, brew install ffmpeg)."
)


def require_tool(name: str, hint: str) -> str:
    path = shutil.which(name)
    if path is None:
        raise MissingToolError(f"{name} is not installed. {hint}")
    version = shell.output([name, "--version"])
    log.info("%s is installed: %s", name, version or path)
    return path


def warn_if_missing(name: str, hint: str) -> bool:
    # ffmpeg is only needed for trajectory animations
    if shutil.which(name) is None:
        log.warning("%s is not installed. %s", name, hint)
        return False
    return True
