from __future__ import annotations

import logging
import tarfile
from pathlib import Path

import requests
from tqdm import tqdm

from .config import InstallConfig
from .errors import WeightsError

log = logging.getLogger(__name__)


def download_archive(url: str, dest: Path, timeout: float = 60.0, chunk_size: int = 1024 * 1024) -> Path:
    dest.parent.mkdir(parents=True, exist_ok=True)
    try:
        with requests.get(url, stream=True, timeout=timeout) as resp:
            resp.raise_for_status()
            total = int(resp.headers.get("content-length", 0)) or None
            with dest.open("wb") as f, tqdm(
                total=total, unit="B", unit_scale=True, unit_divisor=1024, desc=dest.name
            ) as bar:
                for chunk in resp.iter_content(chunk_size=chunk_size):
                    if not chunk:
                        continue
                    f.write(chunk)
                    bar.update(len(chunk))
    except (requests.RequestException, OSError) as exc:
        raise WeightsError("Failed to download AlphaFold2 weights") from exc
    return dest


def check_archive(archive_path: Path) -> int:
    if not archive_path.is_file() or archive_path.stat().st_size == 0:
        raise WeightsError("Could not locate downloaded AlphaFold2 weights")
    try:
        with tarfile.open(archive_path, "r:*") as tf:
            members = tf.getmembers()
    except (tarfile.TarError, OSError) as exc:
        raise WeightsError("Corrupt AlphaFold2 weights download") from exc
    return len(members)


def extract_archive(archive_path: Path, target_dir: Path) -> None:
    try:
        with tarfile.open(archive_path, "r:*") as tf:
            _safe_extract_tar(tf, target_dir)
    except (tarfile.TarError, OSError, RuntimeError) as exc:
        raise WeightsError("Failed to extract AlphaFold2 weights") from exc


def _safe_extract_tar(tf: tarfile.TarFile, target_dir: Path) -> None:
    root = target_dir.resolve()
    for member in tf.getmembers():
        member_path = (target_dir / member.name).resolve()
        if member_path != root and root not in member_path.parents:
            raise RuntimeError(f"Blocked path traversal in tar member: {member.name}")
    tf.extractall(target_dir)


def remove_archive(archive_path: Path) -> bool:
    try:
        archive_path.unlink()
    except OSError as exc:
        log.warning("Failed to remove AlphaFold2 weights archive: %s", exc)
        return False
    return True


def install_weights(cfg: InstallConfig) -> Path:
    """Download, verify and unpack the AlphaFold2 parameters.

    Each check fails fast with its own message; the archive is deleted only
    after the expected parameter file is confirmed on disk.
    """
    log.info("Downloading AlphaFold2 model weights")
    params_dir = cfg.params_dir
    try:
        params_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WeightsError("Failed to create weights directory") from exc

    archive_path = cfg.archive_path
    download_archive(
        cfg.weights.url,
        archive_path,
        timeout=cfg.weights.timeout,
        chunk_size=cfg.weights.chunk_size_kb * 1024,
    )
    n_members = check_archive(archive_path)
    log.info("Extracting %d files into %s", n_members, params_dir)
    extract_archive(archive_path, params_dir)
    if not cfg.expected_weights_path.is_file():
        raise WeightsError("Could not locate extracted AlphaFold2 weights")
    remove_archive(archive_path)
    return cfg.expected_weights_path
