"""Failure taxonomy for the installer.

Every checked failure is an ``InstallError``; the entry point turns any of
them into exit code 1. Only ``ImportVerificationError`` aggregates, the rest
are raised at the first failing step.
"""

from __future__ import annotations

from typing import Iterable


class InstallError(Exception):
    pass


class MissingToolError(InstallError):
    pass


class EnvironmentSetupError(InstallError):
    pass


class PackageInstallError(InstallError):
    pass


class ImportVerificationError(InstallError):
    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        lines = ["The following modules could not be imported:"]
        lines.extend(f" - {name}" for name in self.missing)
        super().__init__("\n".join(lines))


class WeightsError(InstallError):
    pass


class PermissionChangeError(InstallError):
    pass
