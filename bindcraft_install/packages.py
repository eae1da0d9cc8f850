from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List

from . import shell
from .config import PackageConfig
from .errors import ImportVerificationError, PackageInstallError

log = logging.getLogger(__name__)

PYROSETTA_LICENSE_HINT = "See https://www.pyrosetta.org/ for licensing."


def _uv_pip_install(args: List[str], env: Dict[str, str], message: str) -> None:
    shell.run(["uv", "pip", "install", *args], PackageInstallError, message, env=env)


def _require_import(python: Path, module: str, env: Dict[str, str]) -> None:
    if not shell.succeeds([str(python), "-c", f"import {module}"], env=env):
        raise PackageInstallError(f"{module} module not found after installation")


def install_base_packages(cfg: PackageConfig, jax_spec: str, env: Dict[str, str]) -> None:
    log.info("Installing Python dependencies")
    _uv_pip_install([*cfg.base, jax_spec], env, "Failed to install Python packages.")


def install_pyrosetta(cfg: PackageConfig, python: Path, env: Dict[str, str]) -> None:
    log.info("Installing PyRosetta")
    _uv_pip_install([cfg.pyrosetta_installer], env, f"Failed to install {cfg.pyrosetta_installer}")
    shell.run(
        [str(python), "-c", "import pyrosetta_installer; pyrosetta_installer.install_pyrosetta()"],
        PackageInstallError,
        f"Failed to install PyRosetta. {PYROSETTA_LICENSE_HINT}",
        env=env,
    )
    _require_import(python, "pyrosetta", env)


def install_colabdesign(cfg: PackageConfig, python: Path, env: Dict[str, str]) -> None:
    log.info("Installing ColabDesign")
    _uv_pip_install([cfg.colabdesign_source, "--no-deps"], env, "Failed to install ColabDesign")
    _require_import(python, "colabdesign", env)


def verify_modules(python: Path, modules: Iterable[str], env: Dict[str, str] | None = None) -> List[str]:
    """Try to import every module inside the venv, return the ones that fail.

    Runs the whole list before returning so all gaps are reported at once.
    """
    missing: List[str] = []
    for module in modules:
        if not shell.succeeds([str(python), "-c", f"import {module}"], env=env):
            missing.append(module)
    return missing


def ensure_modules(python: Path, modules: Iterable[str], env: Dict[str, str] | None = None) -> None:
    missing = verify_modules(python, modules, env=env)
    if missing:
        raise ImportVerificationError(missing)
    log.info("All required modules import successfully")
