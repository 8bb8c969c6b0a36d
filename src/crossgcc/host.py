"""Host probing: required tools, native triple, CPU count and Homebrew prefixes."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from dataclasses import dataclass

from crossgcc.errors import MissingPrerequisiteError, ValidationError

REQUIRED_COMMANDS = ("gcc", "make", "python3")
DARWIN_REQUIRED_COMMANDS = ("brew",)

# Cleared before any native build so the host toolchain cannot leak into the cross build.
SEARCH_PATH_VARIABLES = (
    "CPATH",
    "C_INCLUDE_PATH",
    "CPLUS_INCLUDE_PATH",
    "INCLUDE",
    "LD_LIBRARY_PATH",
    "LIBRARY_PATH",
    "PKG_CONFIG_PATH",
)


@dataclass(slots=True)
class Host:
    platform: str = sys.platform

    @property
    def is_darwin(self) -> bool:
        return self.platform.startswith("darwin")

    def required_commands(self) -> tuple[str, ...]:
        if self.is_darwin:
            return REQUIRED_COMMANDS + DARWIN_REQUIRED_COMMANDS
        return REQUIRED_COMMANDS

    def missing_commands(self) -> tuple[str, ...]:
        commands = tuple(dict.fromkeys(self.required_commands()))
        return tuple(command for command in commands if shutil.which(command) is None)

    def ensure_prerequisites(self) -> None:
        """Check every required tool, then fail once listing all that are missing."""
        missing = self.missing_commands()
        if missing:
            raise MissingPrerequisiteError(
                missing,
                hint="Install the listed commands and make sure they are on PATH.",
            )

    def cpu_count(self) -> int:
        return os.cpu_count() or 1

    def native_triple(self) -> str:
        """Return the triple the host compiler targets, e.g. ``x86_64-linux-gnu``."""
        result = subprocess.run(
            ["gcc", "-dumpmachine"],
            capture_output=True,
            text=True,
            check=False,
        )
        triple = result.stdout.strip()
        if result.returncode != 0 or not triple:
            raise ValidationError(
                "Unable to determine the host's native target triple.",
                hint="Pass --target <triple> explicitly.",
                context={
                    "command": "gcc -dumpmachine",
                    "returncode": str(result.returncode),
                    "stderr": result.stderr[:2000] if result.stderr else "",
                },
            )
        return triple

    def python_path(self) -> str:
        return shutil.which("python3") or "python3"

    def brew_prefix(self, formula: str) -> str:
        result = subprocess.run(
            ["brew", "--prefix", formula],
            capture_output=True,
            text=True,
            check=False,
        )
        prefix = result.stdout.strip()
        if result.returncode != 0 or not prefix:
            raise MissingPrerequisiteError(
                (f"brew:{formula}",),
                hint=f"Install it with `brew install {formula}`.",
            )
        return prefix


def build_environment(
    base: dict[str, str] | None = None,
    *,
    prefix: str,
    target: str,
) -> dict[str, str]:
    """Environment for native builds: ``PREFIX``/``TARGET`` set, search paths removed."""
    env = dict(os.environ if base is None else base)
    for name in SEARCH_PATH_VARIABLES:
        env.pop(name, None)
    env["PREFIX"] = prefix
    env["TARGET"] = target
    return env
