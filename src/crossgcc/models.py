"""Core typed dataclasses for package phases, run configuration and run state."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Literal

from crossgcc.errors import ValidationError

PhaseAction = Literal["configure", "build", "install", "custom"]
PhaseCwd = Literal["build", "source"]
CleanMode = Literal["none", "clean", "clean-all"]

CLEAN_MODES: tuple[CleanMode, ...] = ("none", "clean", "clean-all")

_SHA256_HEX = re.compile(r"[0-9a-f]{64}")


@dataclass(frozen=True, slots=True)
class Phase:
    name: str
    action: PhaseAction
    argv: tuple[str, ...]
    label: str
    cwd: PhaseCwd = "build"

    def render(self, variables: dict[str, str]) -> tuple[str, ...]:
        """Substitute ``{placeholder}`` values into the argument template."""
        return tuple(arg.format(**variables) for arg in self.argv)


@dataclass(frozen=True, slots=True)
class PackageSpec:
    name: str
    version: str
    archive: str
    url: str
    source_dir: str
    build_dir: str
    phases: tuple[Phase, ...]
    sha256: str | None = None


@dataclass(frozen=True, slots=True)
class BuildConfig:
    build_dir: Path
    prefix: Path
    target: str | None = None
    clean_mode: CleanMode = "none"
    versions: dict[str, str] = field(default_factory=dict)
    jobs: int | None = None
    mirror: str | None = None
    with_gdb: bool = True
    checksums: dict[str, str] = field(default_factory=dict)

    @property
    def src_dir(self) -> Path:
        return self.build_dir / "src"

    @property
    def log_path(self) -> Path:
        return self.build_dir / "build.log"

    @property
    def lock_path(self) -> Path:
        return self.build_dir / ".cross-gcc.lock"

    def validate(self) -> None:
        if self.clean_mode not in CLEAN_MODES:
            raise ValidationError(
                f"Unknown clean mode {self.clean_mode!r}.",
                hint="Use one of: " + ", ".join(CLEAN_MODES),
            )
        if self.jobs is not None and self.jobs < 1:
            raise ValidationError(
                "Job count must be a positive integer.",
                context={"jobs": str(self.jobs)},
            )
        for package, version in self.versions.items():
            if not version or not version.strip():
                raise ValidationError(
                    f"Empty version for {package}.",
                    hint=f"Pass --{package} <version> or omit it to use the default.",
                )
        if self.target is not None and not self.target.strip():
            raise ValidationError("Target triple must not be empty.")
        for package, checksum in self.checksums.items():
            if not _SHA256_HEX.fullmatch(checksum):
                raise ValidationError(
                    f"Checksum for {package} is not a sha256 hex digest.",
                    hint="Pass --sha256 <package>=<64 lowercase hex digits>.",
                    context={"package": package, "sha256": checksum},
                )


class Stage(StrEnum):
    INIT = "init"
    PREREQ_CHECK = "prereq_check"
    CLEAN = "clean"
    DOWNLOAD = "download"
    EXTRACT = "extract"
    CONFIGURE = "configure"
    BUILD = "build"
    INSTALL = "install"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class StepRecord:
    package: str
    step: str
    stage: Stage
    ok: bool
    duration_s: float


@dataclass(slots=True)
class BuildState:
    """Transient state of a single run."""

    log_path: Path
    stage: Stage = Stage.INIT
    package: str | None = None
    phase: str | None = None
    ok: bool = True
    steps: list[StepRecord] = field(default_factory=list)

    def enter(self, stage: Stage, *, package: str | None = None, phase: str | None = None) -> None:
        self.stage = stage
        self.package = package
        self.phase = phase

    def fail(self) -> None:
        self.ok = False
        self.stage = Stage.FAILED

    @property
    def failed_at(self) -> tuple[str | None, str | None] | None:
        if self.stage is not Stage.FAILED:
            return None
        return (self.phase, self.package)


@dataclass(frozen=True, slots=True)
class BuildResult:
    config: BuildConfig
    packages: tuple[PackageSpec, ...]
    steps: tuple[StepRecord, ...]

    @property
    def ok(self) -> bool:
        return all(step.ok for step in self.steps)

    def steps_for(self, package: str) -> list[StepRecord]:
        return [step for step in self.steps if step.package == package]
