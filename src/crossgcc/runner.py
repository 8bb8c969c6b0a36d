"""External command execution with output captured into the build log."""

from __future__ import annotations

import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from crossgcc.buildlog import BuildLog


@dataclass(frozen=True, slots=True)
class CommandResult:
    argv: tuple[str, ...]
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(Protocol):
    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
        log: BuildLog,
    ) -> CommandResult:
        """Run *argv* to completion, appending its stdout/stderr to *log*."""


@dataclass(slots=True)
class SubprocessRunner:
    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
        log: BuildLog,
    ) -> CommandResult:
        command = tuple(argv)
        log.command_header(command, cwd=cwd)
        try:
            with log.stream() as handle:
                completed = subprocess.run(
                    command,
                    cwd=str(cwd),
                    env=dict(env),
                    stdin=subprocess.DEVNULL,
                    stdout=handle,
                    stderr=subprocess.STDOUT,
                    check=False,
                )
        except FileNotFoundError as exc:
            log.append(f"{command[0]}: command not found ({exc})")
            return CommandResult(argv=command, returncode=127)
        except PermissionError as exc:
            log.append(f"{command[0]}: permission denied ({exc})")
            return CommandResult(argv=command, returncode=126)
        return CommandResult(argv=command, returncode=completed.returncode)
