from __future__ import annotations

from typing import Tuple

SUPPORTED_MAJORS = ("12", "11")
FALLBACK_MAJOR = "12"


def cuda_major(value: str) -> str:
    return value.split(".", 1)[0]


def select_jax_spec(cuda: str | None, version_range: str) -> Tuple[str, str | None]:
    """Pick the JAX requirement for a CUDA version string.

    Returns the requirement and an optional warning. No version means the
    CPU-only wheel; an unknown major falls back to the cuda12 extras.
    """
    if not cuda:
        return f"jax{version_range}", None
    major = cuda_major(cuda)
    if major in SUPPORTED_MAJORS:
        return f"jax[cuda{major}]{version_range}", None
    warning = f"Unrecognized CUDA major version '{major}', defaulting to cuda{FALLBACK_MAJOR}"
    return f"jax[cuda{FALLBACK_MAJOR}]{version_range}", warning
