from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List
from urllib.parse import urlsplit

import yaml


CONFIG_ENV_VAR = "BINDCRAFT_INSTALL_CONFIG"
DEFAULT_CONFIG_NAME = "install.yaml"

BASE_PACKAGES = [
    "pandas",
    "matplotlib",
    "numpy<2.0.0",
    "biopython",
    "scipy",
    "pdbfixer",
    "seaborn",
    "tqdm",
    "jupyter",
    "fsspec",
    "py3dmol",
    "chex",
    "dm-haiku",
    "flax<0.10.0",
    "dm-tree",
    "joblib",
    "ml-collections",
    "immutabledict",
    "optax",
]

# import names, not distribution names
REQUIRED_MODULES = [
    "pandas",
    "matplotlib",
    "numpy",
    "Bio",
    "scipy",
    "pdbfixer",
    "seaborn",
    "tqdm",
    "fsspec",
    "py3Dmol",
    "chex",
    "haiku",
    "flax",
    "tree",
    "joblib",
    "ml_collections",
    "immutabledict",
    "optax",
    "jaxlib",
    "jax",
    "pyrosetta",
    "colabdesign",
]


@dataclass
class EnvConfig:
    python_version: str = "3.10"
    venv_dir: str = ".venv"
    clean_cache: bool = True


@dataclass
class PackageConfig:
    base: List[str] = field(default_factory=lambda: list(BASE_PACKAGES))
    jax_version: str = ">=0.4,<=0.6.0"
    pyrosetta_installer: str = "pyrosetta-installer"
    colabdesign_source: str = "git+https://github.com/sokrypton/ColabDesign.git"
    required_modules: List[str] = field(default_factory=lambda: list(REQUIRED_MODULES))


@dataclass
class WeightsConfig:
    url: str = "https://storage.googleapis.com/alphafold/alphafold_params_2022-12-06.tar"
    params_dir: str = "params"
    expected_file: str = "params_model_5_ptm.npz"
    timeout: float = 60.0
    chunk_size_kb: int = 1024


@dataclass
class ExecutablesConfig:
    paths: List[str] = field(default_factory=lambda: ["functions/dssp", "functions/DAlphaBall.gcc"])


@dataclass
class InstallConfig:
    cuda: str | None
    install_dir: Path
    env: EnvConfig = field(default_factory=EnvConfig)
    packages: PackageConfig = field(default_factory=PackageConfig)
    weights: WeightsConfig = field(default_factory=WeightsConfig)
    executables: ExecutablesConfig = field(default_factory=ExecutablesConfig)

    def _resolve(self, value: str) -> Path:
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = self.install_dir / path
        return path

    @property
    def venv_dir(self) -> Path:
        return self._resolve(self.env.venv_dir)

    @property
    def params_dir(self) -> Path:
        return self._resolve(self.weights.params_dir)

    @property
    def archive_path(self) -> Path:
        name = urlsplit(self.weights.url).path.rstrip("/").rsplit("/", 1)[-1]
        return self.params_dir / name

    @property
    def expected_weights_path(self) -> Path:
        return self.params_dir / self.weights.expected_file

    @property
    def executable_paths(self) -> List[Path]:
        return [self._resolve(p) for p in self.executables.paths]

    @property
    def state_path(self) -> Path:
        return self.install_dir / ".bindcraft_install.json"


class _ArgumentParser(argparse.ArgumentParser):
    # usage errors exit 1
    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = _ArgumentParser(description="Install the BindCraft environment and AlphaFold2 weights")
    parser.add_argument(
        "-c",
        "--cuda",
        type=str,
        default="",
        help="CUDA version for GPU support, e.g. 12.4 (omit for CPU only)",
    )
    return parser.parse_args(argv)


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def find_config_file(install_dir: Path) -> Path | None:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to a missing file: {path}")
        return path
    default = install_dir / DEFAULT_CONFIG_NAME
    return default if default.exists() else None


def load_config(cuda: str | None, install_dir: Path, path: Path | None = None) -> InstallConfig:
    raw = _load_yaml(path) if path else {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: top level must be a mapping of sections")
    return InstallConfig(
        cuda=cuda or None,
        install_dir=install_dir,
        env=EnvConfig(**(raw.get("env") or {})),
        packages=PackageConfig(**(raw.get("packages") or {})),
        weights=WeightsConfig(**(raw.get("weights") or {})),
        executables=ExecutablesConfig(**(raw.get("executables") or {})),
    )
