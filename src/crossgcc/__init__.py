"""Public package entrypoint for the cross toolchain builder."""

from .errors import (
    BuildDirLockedError,
    BuildError,
    CleanError,
    ConfigureError,
    CrossGccError,
    DownloadError,
    ErrorCode,
    ExtractionError,
    InstallError,
    MissingPrerequisiteError,
    PhaseError,
    ValidationError,
)
from .host import Host
from .models import BuildConfig, BuildResult, BuildState, PackageSpec, Phase, Stage
from .observability import StructuredLogger
from .orchestrator import Orchestrator
from .report import BuildReport

__all__ = [
    "BuildConfig",
    "BuildDirLockedError",
    "BuildError",
    "BuildReport",
    "BuildResult",
    "BuildState",
    "CleanError",
    "ConfigureError",
    "CrossGccError",
    "DownloadError",
    "ErrorCode",
    "ExtractionError",
    "Host",
    "InstallError",
    "MissingPrerequisiteError",
    "Orchestrator",
    "PackageSpec",
    "Phase",
    "PhaseError",
    "Stage",
    "StructuredLogger",
    "ValidationError",
]
