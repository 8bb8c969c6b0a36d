"""Structured logging helpers."""

from __future__ import annotations

import json
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

LEVEL_LABELS = {
    "info": "[INFO] ",
    "error": "[ERROR] ",
}


@dataclass(slots=True)
class StructuredLogger:
    stream: TextIO | None = field(default_factory=lambda: sys.stderr)
    timestamp: bool = True
    records: list[dict[str, Any]] = field(default_factory=list)

    def log(
        self,
        *,
        operation: str,
        package: str | None,
        phase: str | None,
        message: str,
        level: str = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "package": package,
            "phase": phase,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)
        self._emit(level, message)

    def info(
        self,
        message: str,
        *,
        operation: str = "run",
        package: str | None = None,
        phase: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.log(
            operation=operation,
            package=package,
            phase=phase,
            message=message,
            level="info",
            extra=extra,
        )

    def error(
        self,
        message: str,
        *,
        operation: str = "run",
        package: str | None = None,
        phase: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.log(
            operation=operation,
            package=package,
            phase=phase,
            message=message,
            level="error",
            extra=extra,
        )

    def passfail(
        self,
        ok: bool,
        label: str,
        *,
        package: str | None = None,
        phase: str | None = None,
    ) -> bool:
        if ok:
            self.info(f"{label}: pass", operation="passfail", package=package, phase=phase)
        else:
            self.error(f"{label}: FAIL", operation="passfail", package=package, phase=phase)
        return ok

    def records_for_package(self, package: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("package") == package]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path

    def _emit(self, level: str, message: str) -> None:
        if self.stream is None:
            return
        prefix = time.strftime("%Y-%m-%d %H:%M:%S ") if self.timestamp else ""
        label = LEVEL_LABELS.get(level, f"[{level.upper()}] ")
        print(f"{prefix}{label}{message}", file=self.stream, flush=True)
