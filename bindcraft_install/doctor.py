from __future__ import annotations

import argparse
import json
import shutil
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List

import yaml

from .config import InstallConfig, find_config_file, load_config
from .executables import is_executable
from .packages import verify_modules
from .state import load_state


@dataclass
class CheckResult:
    name: str
    ok: bool
    detail: str
    required: bool = True


def _check_command(cmd: str, required: bool = True) -> CheckResult:
    path = shutil.which(cmd)
    return CheckResult(name=f"command:{cmd}", ok=path is not None, detail=path or "not found", required=required)


def _check_path(path: Path, name: str) -> CheckResult:
    return CheckResult(name=name, ok=path.exists(), detail=str(path))


def _check_modules(python: Path, modules: List[str]) -> List[CheckResult]:
    if not python.exists():
        return [CheckResult(name="python:modules", ok=False, detail=f"no interpreter at {python}")]
    missing = set(verify_modules(python, modules))
    return [
        CheckResult(name=f"python:{m}", ok=m not in missing, detail="missing" if m in missing else "available")
        for m in modules
    ]


def _check_executable(path: Path) -> CheckResult:
    ok = is_executable(path)
    detail = str(path) if ok else f"{path} (missing or not executable)"
    return CheckResult(name=f"executable:{path.name}", ok=ok, detail=detail)


def _check_state(cfg: InstallConfig) -> CheckResult:
    state = load_state(cfg.state_path)
    stage = state.get("stage", "pending")
    detail = f"stage={stage}"
    if state.get("jax_spec"):
        detail += f", jax={state['jax_spec']}"
    return CheckResult(name="install_record", ok=stage == "installed", detail=detail, required=False)


def run_checks(cfg: InstallConfig) -> List[CheckResult]:
    python = cfg.venv_dir / "bin" / "python"
    checks = [
        _check_command("uv"),
        _check_command("ffmpeg", required=False),
        _check_path(python, "venv:python"),
    ]
    checks.extend(_check_modules(python, cfg.packages.required_modules))
    checks.append(_check_path(cfg.expected_weights_path, "weights:alphafold2"))
    checks.extend(_check_executable(p) for p in cfg.executable_paths)
    checks.append(_check_state(cfg))
    return checks


def _print_human(checks: List[CheckResult]) -> None:
    for c in checks:
        status = "OK" if c.ok else ("FAIL" if c.required else "WARN")
        print(f"- {status:4} {c.name}: {c.detail}")
    passed = sum(1 for c in checks if c.ok)
    print(f"[doctor] summary: {passed}/{len(checks)} checks passed")


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check an existing BindCraft installation")
    parser.add_argument("--install-dir", type=str, default=".", help="Directory the installer was run in")
    parser.add_argument("--json", action="store_true", help="Print JSON payload only")
    args = parser.parse_args(argv)

    install_dir = Path(args.install_dir).expanduser().resolve()
    try:
        cfg = load_config(None, install_dir, find_config_file(install_dir))
    except (OSError, TypeError, ValueError, yaml.YAMLError) as exc:
        print(f"[doctor] invalid installer configuration: {exc}", file=sys.stderr)
        return 1
    checks = run_checks(cfg)

    payload = {
        "install_dir": str(install_dir),
        "ok": all(c.ok for c in checks if c.required),
        "checks": [asdict(c) for c in checks],
    }
    if args.json:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        _print_human(checks)
    return 0 if payload["ok"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
