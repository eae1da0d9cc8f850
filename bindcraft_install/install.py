from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List

import yaml

from .config import InstallConfig, find_config_file, load_config, parse_args
from .cuda import select_jax_spec
from .errors import InstallError
from .executables import make_all_executable
from .packages import ensure_modules, install_base_packages, install_colabdesign, install_pyrosetta
from .state import load_state, save_state
from .tools import FFMPEG_HINT, UV_HINT, require_tool, warn_if_missing
from .venv import VirtualEnv, clean_uv_cache
from .weights import install_weights

log = logging.getLogger(__name__)


def format_elapsed(seconds: float) -> str:
    t = int(seconds)
    return f"{t // 3600} hours, {(t // 60) % 60} minutes and {t % 60} seconds"


def run_install(cfg: InstallConfig) -> None:
    t_start = time.time()
    state = load_state(cfg.state_path)
    state.update({"started_at": t_start, "cuda": cfg.cuda})
    state.pop("finished_at", None)

    def _mark(stage: str, **fields) -> None:
        state.update(fields)
        state["stage"] = stage
        if stage == "installed":
            state["finished_at"] = time.time()
        save_state(cfg.state_path, state)

    _mark("checking_tools")
    require_tool("uv", UV_HINT)
    warn_if_missing("ffmpeg", FFMPEG_HINT)

    _mark("creating_env")
    venv = VirtualEnv(cfg.venv_dir)
    venv.create(cfg.env.python_version)
    env = venv.activate()

    jax_spec, warning = select_jax_spec(cfg.cuda, cfg.packages.jax_version)
    if warning:
        log.warning(warning)
    _mark("installing_packages", jax_spec=jax_spec)
    install_base_packages(cfg.packages, jax_spec, env)
    install_pyrosetta(cfg.packages, venv.python, env)
    install_colabdesign(cfg.packages, venv.python, env)

    _mark("verifying_imports")
    ensure_modules(venv.python, cfg.packages.required_modules, env=env)

    _mark("installing_weights")
    install_weights(cfg)

    _mark("fixing_permissions")
    make_all_executable(cfg.executable_paths)

    venv.deactivate()
    log.info("BindCraft environment set up")

    if cfg.env.clean_cache:
        clean_uv_cache()
    _mark("installed")


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="[%(asctime)s] %(levelname)s %(message)s",
    )
    log.info("CUDA: %s", args.cuda or "not specified (CPU only)")

    t_start = time.time()
    install_dir = Path.cwd()
    try:
        cfg = load_config(args.cuda, install_dir, find_config_file(install_dir))
    except (OSError, TypeError, ValueError, yaml.YAMLError) as exc:
        log.error("Invalid installer configuration: %s", exc)
        return 1

    try:
        run_install(cfg)
    except InstallError as exc:
        log.error("Error: %s", exc)
        return 1

    log.info("Successfully finished BindCraft installation!")
    log.info('Activate environment using command: "source %s"', cfg.venv_dir / "bin" / "activate")
    log.info("Installation took %s.", format_elapsed(time.time() - t_start))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
