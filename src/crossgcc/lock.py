"""Exclusive lock on a build directory for the duration of a run."""

from __future__ import annotations

import fcntl
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from crossgcc.errors import BuildDirLockedError, ValidationError


@contextmanager
def build_dir_lock(path: str | Path) -> Iterator[Path]:
    lock_path = Path(path)
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(lock_path, os.O_RDWR | os.O_CREAT, 0o644)
    except OSError as exc:
        raise ValidationError(
            f"Cannot open lock file {lock_path}.",
            hint="Choose a writable --build-dir.",
            context={"lock": str(lock_path), "error": str(exc)},
        ) from exc
    try:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as exc:
            raise BuildDirLockedError(
                "Build directory is in use by another run.",
                hint="Wait for the other run to finish or choose a different --build-dir.",
                context={"lock": str(lock_path)},
            ) from exc
        os.ftruncate(fd, 0)
        os.write(fd, f"{os.getpid()}\n".encode())
        try:
            yield lock_path
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
    finally:
        os.close(fd)
