"""Run report model and export helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import cbor2

from crossgcc.errors import CrossGccError
from crossgcc.models import BuildConfig, BuildState, Stage
from crossgcc.packages import resolve_versions


@dataclass(frozen=True, slots=True)
class BuildReport:
    status: Stage
    config: dict[str, Any]
    packages: dict[str, str]
    steps: tuple[dict[str, Any], ...] = ()
    failed_package: str | None = None
    failed_phase: str | None = None
    error: dict[str, object] | None = None
    logs: tuple[dict[str, Any], ...] = field(default_factory=tuple)
    schema_version: int = 1

    @classmethod
    def from_run(
        cls,
        *,
        config: BuildConfig,
        state: BuildState,
        error: CrossGccError | None = None,
        logs: list[dict[str, Any]] | None = None,
    ) -> BuildReport:
        failed = state.failed_at
        return cls(
            status=state.stage,
            config={
                "build_dir": str(config.build_dir),
                "prefix": str(config.prefix),
                "target": config.target,
                "clean_mode": config.clean_mode,
                "jobs": config.jobs,
                "log": str(state.log_path),
            },
            packages={
                name: version
                for name, version in resolve_versions(config).items()
                if config.with_gdb or name != "gdb"
            },
            steps=tuple(
                {
                    "package": step.package,
                    "step": step.step,
                    "stage": step.stage.value,
                    "ok": step.ok,
                    "duration_s": round(step.duration_s, 3),
                }
                for step in state.steps
            ),
            failed_phase=failed[0] if failed else None,
            failed_package=failed[1] if failed else None,
            error=error.to_dict() if error is not None else None,
            logs=tuple(logs or ()),
        )

    def to_json(self, path: str | Path | None = None) -> str:
        encoded = json.dumps(self._payload(), indent=2, sort_keys=True) + "\n"
        if path is not None:
            Path(path).write_text(encoded, encoding="utf-8")
        return encoded

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        encoded = cbor2.dumps(self._payload(), canonical=True)
        if path is not None:
            Path(path).write_bytes(encoded)
        return encoded

    def write(self, path: str | Path) -> Path:
        """Write JSON, or CBOR when *path* ends in ``.cbor``."""
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        if output_path.suffix == ".cbor":
            self.to_cbor(output_path)
        else:
            self.to_json(output_path)
        return output_path

    def _payload(self) -> dict[str, object]:
        return {
            "schema_version": self.schema_version,
            "status": self.status.value,
            "config": dict(sorted(self.config.items())),
            "packages": dict(sorted(self.packages.items())),
            "steps": [dict(step) for step in self.steps],
            "failed_package": self.failed_package,
            "failed_phase": self.failed_phase,
            "error": self.error,
            "logs": [dict(record) for record in self.logs],
        }
