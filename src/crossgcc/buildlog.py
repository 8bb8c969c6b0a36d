"""Append-only build log capturing the output of every external command."""

from __future__ import annotations

import shlex
import time
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import IO


class BuildLog:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def ensure(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)

    def append(self, text: str) -> None:
        self.ensure()
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(text if text.endswith("\n") else text + "\n")

    def command_header(self, argv: Sequence[str], *, cwd: Path) -> None:
        stamp = time.strftime("%Y-%m-%d %H:%M:%S")
        self.append(f"==> [{stamp}] (cd {shlex.quote(str(cwd))} && {shlex.join(argv)})")

    def failure(self, label: str, detail: str | None = None) -> None:
        self.append(f"[FAIL] {label}")
        if detail:
            self.append(detail)

    @contextmanager
    def stream(self) -> Iterator[IO[str]]:
        """Open the log for a child process to write into directly."""
        self.ensure()
        with self.path.open("a", encoding="utf-8") as handle:
            yield handle

    def tail(self, lines: int = 40) -> str:
        if not self.path.exists():
            return ""
        content = self.path.read_text(encoding="utf-8", errors="replace").splitlines()
        return "\n".join(content[-lines:])
