import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

log = logging.getLogger(__name__)


def load_state(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {"stage": "pending"}
    try:
        with path.open("r", encoding="utf-8") as f:
            state = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        log.warning("Ignoring unreadable install record %s: %s", path, exc)
        return {"stage": "pending"}
    if not isinstance(state, dict):
        log.warning("Ignoring malformed install record %s", path)
        return {"stage": "pending"}
    return state


def save_state(path: Path, state: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(state, f, indent=2)
    os.replace(tmp, path)
