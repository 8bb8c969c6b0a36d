"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers surfaced by the CLI and the run report."""

    VALIDATION = "E_VALIDATION"
    MISSING_PREREQUISITE = "E_MISSING_PREREQUISITE"
    DOWNLOAD = "E_DOWNLOAD"
    EXTRACTION = "E_EXTRACTION"
    CLEAN = "E_CLEAN"
    CONFIGURE = "E_CONFIGURE"
    BUILD = "E_BUILD"
    INSTALL = "E_INSTALL"
    LOCKED = "E_LOCKED"


class CrossGccError(Exception):
    """Base error class that carries code, optional hint, and context."""

    code: str
    hint: str | None
    context: dict[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    @property
    def message(self) -> str:
        return super().__str__()

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ValidationError(CrossGccError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.VALIDATION, hint=hint, context=context)


class MissingPrerequisiteError(CrossGccError):
    """Raised once with every host tool that could not be found."""

    missing: tuple[str, ...]

    def __init__(
        self,
        missing: tuple[str, ...],
        *,
        hint: str | None = None,
    ) -> None:
        super().__init__(
            "Missing pre-requisites: " + ", ".join(missing),
            code=ErrorCode.MISSING_PREREQUISITE,
            hint=hint,
            context={"missing_commands": ",".join(missing)},
        )
        self.missing = missing


class DownloadError(CrossGccError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.DOWNLOAD, hint=hint, context=context)


class ExtractionError(CrossGccError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.EXTRACTION, hint=hint, context=context)


class CleanError(CrossGccError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.CLEAN, hint=hint, context=context)


class PhaseError(CrossGccError):
    """A native configure/build/install command exited non-zero."""

    package: str
    phase: str

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        package: str,
        phase: str,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        merged = {"package": package, "phase": phase, **dict(context or {})}
        super().__init__(message, code=code, hint=hint, context=merged)
        self.package = package
        self.phase = phase


class ConfigureError(PhaseError):
    def __init__(
        self,
        message: str,
        *,
        package: str,
        phase: str,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.CONFIGURE,
            package=package,
            phase=phase,
            hint=hint,
            context=context,
        )


class BuildError(PhaseError):
    def __init__(
        self,
        message: str,
        *,
        package: str,
        phase: str,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.BUILD,
            package=package,
            phase=phase,
            hint=hint,
            context=context,
        )


class InstallError(PhaseError):
    def __init__(
        self,
        message: str,
        *,
        package: str,
        phase: str,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.INSTALL,
            package=package,
            phase=phase,
            hint=hint,
            context=context,
        )


class BuildDirLockedError(CrossGccError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.LOCKED, hint=hint, context=context)


__all__ = [
    "BuildDirLockedError",
    "BuildError",
    "CleanError",
    "ConfigureError",
    "CrossGccError",
    "DownloadError",
    "ErrorCode",
    "ExtractionError",
    "InstallError",
    "MissingPrerequisiteError",
    "PhaseError",
    "ValidationError",
]
