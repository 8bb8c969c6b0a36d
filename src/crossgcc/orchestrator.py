"""Toolchain build orchestrator.

Drives a run through ``init -> prereq_check -> setup -> clean -> (download ->
extract -> configure -> build -> install) per package -> done``.  Nothing is
written before the prerequisite check passes.  Any failing step, including a
filesystem error, moves the run to ``failed`` and raises a ``CrossGccError``;
there are no retries and no partial runs.
"""

from __future__ import annotations

import shutil
import time
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from pathlib import Path

from crossgcc.buildlog import BuildLog
from crossgcc.errors import (
    BuildDirLockedError,
    BuildError,
    CleanError,
    ConfigureError,
    CrossGccError,
    InstallError,
    PhaseError,
    ValidationError,
)
from crossgcc.extract import extract_archive
from crossgcc.fetch import download_archive
from crossgcc.host import Host, build_environment
from crossgcc.lock import build_dir_lock
from crossgcc.models import (
    BuildConfig,
    BuildResult,
    BuildState,
    PackageSpec,
    Phase,
    PhaseAction,
    Stage,
    StepRecord,
)
from crossgcc.observability import StructuredLogger
from crossgcc.packages import PACKAGE_ORDER, all_package_specs, package_specs, resolve_versions
from crossgcc.runner import CommandRunner, SubprocessRunner

PHASE_STAGES: dict[PhaseAction, Stage] = {
    "custom": Stage.CONFIGURE,
    "configure": Stage.CONFIGURE,
    "build": Stage.BUILD,
    "install": Stage.INSTALL,
}

PHASE_ERRORS: dict[PhaseAction, type[PhaseError]] = {
    "custom": ConfigureError,
    "configure": ConfigureError,
    "build": BuildError,
    "install": InstallError,
}

Downloader = Callable[..., bool]


@dataclass(slots=True)
class Orchestrator:
    host: Host = field(default_factory=Host)
    runner: CommandRunner = field(default_factory=SubprocessRunner)
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    downloader: Downloader = download_archive
    base_env: Mapping[str, str] | None = None
    state: BuildState | None = None

    def run(self, config: BuildConfig) -> BuildResult:
        log = BuildLog(config.log_path)
        state = self.state = BuildState(log_path=log.path)
        try:
            config.validate()
            _check_package_keys(config)
            config, packages = self._check_prerequisites(config)
            state.enter(Stage.INIT, phase="setup")
            _make_dir(config.build_dir, option="--build-dir")
            with build_dir_lock(config.lock_path):
                return self._run_locked(config, packages, log)
        except BuildDirLockedError as exc:
            # The log belongs to the run holding the lock.
            self._record_failure(exc, log, write_log=False)
            raise
        except CrossGccError as exc:
            self._record_failure(exc, log)
            raise

    def _check_prerequisites(
        self,
        config: BuildConfig,
    ) -> tuple[BuildConfig, tuple[PackageSpec, ...]]:
        state = self._require_state()
        state.enter(Stage.PREREQ_CHECK, phase="prereq_check")
        with self._step(None, "prereq_check"):
            self.host.ensure_prerequisites()
            if config.target is None:
                config = replace(config, target=self.host.native_triple())
            config = replace(config, jobs=config.jobs or self.host.cpu_count())
            packages = package_specs(config, self.host)
        return config, packages

    def _run_locked(
        self,
        config: BuildConfig,
        packages: tuple[PackageSpec, ...],
        log: BuildLog,
    ) -> BuildResult:
        state = self._require_state()

        self._print_summary(config, packages)
        _make_dir(config.prefix, option="--prefix")
        _make_dir(config.src_dir, option="--build-dir")
        try:
            log.ensure()
        except OSError as exc:
            raise ValidationError(
                f"Cannot write build log {log.path}.",
                hint="Choose a writable --build-dir.",
                context={"log": str(log.path), "error": str(exc)},
            ) from exc

        if config.clean_mode != "none":
            state.enter(Stage.CLEAN, phase="clean")
            with self._step(None, "clean"):
                self.clean(config)

        env = build_environment(
            dict(self.base_env) if self.base_env is not None else None,
            prefix=str(config.prefix),
            target=str(config.target),
        )
        variables = {
            "target": str(config.target),
            "prefix": str(config.prefix),
            "jobs": str(config.jobs),
            "python": self.host.python_path(),
        }
        for spec in packages:
            self._build_package(
                spec, config=config, env=env, variables=variables, log=log,
            )

        state.enter(Stage.DONE)
        self.logger.info(f"Toolchain for {config.target} installed to {config.prefix}")
        return BuildResult(config=config, packages=packages, steps=tuple(state.steps))

    def clean(self, config: BuildConfig) -> list[Path]:
        """Remove extracted sources and build dirs, plus archives for ``clean-all``."""
        self.logger.info("Cleaning sources...", operation="clean")
        removed: list[Path] = []
        for spec in all_package_specs(config):
            targets = [config.src_dir / spec.source_dir, config.src_dir / spec.build_dir]
            if config.clean_mode == "clean-all":
                targets.append(config.src_dir / spec.archive)
            for path in targets:
                try:
                    deleted = _remove(path)
                except OSError as exc:
                    raise CleanError(
                        f"Cannot remove {path.name}.",
                        hint="Fix the permissions or remove it by hand, then re-run.",
                        context={"operation": "clean", "path": str(path), "error": str(exc)},
                    ) from exc
                if deleted:
                    removed.append(path)
        return removed

    def _build_package(
        self,
        spec: PackageSpec,
        *,
        config: BuildConfig,
        env: dict[str, str],
        variables: dict[str, str],
        log: BuildLog,
    ) -> None:
        state = self._require_state()
        archive = config.src_dir / spec.archive

        state.enter(Stage.DOWNLOAD, package=spec.name, phase="download")
        with self._step(spec.name, "download"):
            label = f"Download {spec.name} ({spec.archive})"
            if not archive.is_file():
                self.logger.info(label, operation="download", package=spec.name)
            if self.downloader(spec.url, archive, sha256=spec.sha256):
                self.logger.passfail(True, label, package=spec.name, phase="download")
            else:
                self.logger.info(
                    f"Using existing {spec.name} archive ({spec.archive})",
                    operation="download",
                    package=spec.name,
                )

        state.enter(Stage.EXTRACT, package=spec.name, phase="extract")
        with self._step(spec.name, "extract"):
            self.logger.info(
                f"Decompressing {spec.name} archive",
                operation="extract",
                package=spec.name,
            )
            extract_archive(archive, config.src_dir, expect=spec.source_dir)
            self.logger.passfail(
                True,
                f"decompress {spec.name} archive",
                package=spec.name,
                phase="extract",
            )

        source = config.src_dir / spec.source_dir
        build = config.src_dir / spec.build_dir
        phase_vars = {**variables, "source": f"../{spec.source_dir}"}
        for phase in spec.phases:
            if phase.action == "configure":
                self._reset_build_dir(spec, phase, build)
            cwd = source if phase.cwd == "source" else build
            self._run_phase(
                spec, phase, cwd=cwd, env=env, variables=phase_vars, log=log,
            )

    def _reset_build_dir(self, spec: PackageSpec, phase: Phase, build: Path) -> None:
        self._require_state().enter(
            PHASE_STAGES[phase.action], package=spec.name, phase=phase.name,
        )
        try:
            _remove(build)
            build.mkdir(parents=True)
        except OSError as exc:
            raise ConfigureError(
                f"Cannot recreate build directory {build.name}.",
                package=spec.name,
                phase=phase.name,
                hint="Fix the permissions or re-run with --clean.",
                context={"path": str(build), "error": str(exc)},
            ) from exc

    def _run_phase(
        self,
        spec: PackageSpec,
        phase: Phase,
        *,
        cwd: Path,
        env: dict[str, str],
        variables: dict[str, str],
        log: BuildLog,
    ) -> None:
        state = self._require_state()
        state.enter(PHASE_STAGES[phase.action], package=spec.name, phase=phase.name)
        self.logger.info(
            f"Running {phase.label}...",
            operation=phase.action,
            package=spec.name,
            phase=phase.name,
        )
        argv = phase.render(variables)
        with self._step(spec.name, phase.name):
            result = self.runner.run(argv, cwd=cwd, env=env, log=log)
            self.logger.passfail(result.ok, phase.label, package=spec.name, phase=phase.name)
            if not result.ok:
                error_cls = PHASE_ERRORS[phase.action]
                raise error_cls(
                    f"{phase.label} failed.",
                    package=spec.name,
                    phase=phase.name,
                    hint=f"See {log.path} for the full output.",
                    context={
                        "returncode": str(result.returncode),
                        "command": " ".join(argv),
                        "log": str(log.path),
                    },
                )

    @contextmanager
    def _step(self, package: str | None, step: str) -> Iterator[None]:
        state = self._require_state()
        stage = state.stage
        started = time.monotonic()
        ok = False
        try:
            yield
            ok = True
        finally:
            state.steps.append(
                StepRecord(
                    package=package or "-",
                    step=step,
                    stage=stage,
                    ok=ok,
                    duration_s=time.monotonic() - started,
                ),
            )

    def _record_failure(
        self,
        exc: CrossGccError,
        log: BuildLog,
        *,
        write_log: bool = True,
    ) -> None:
        state = self._require_state()
        state.fail()
        where = state.package or "run"
        label = f"{where}: {state.phase or 'unknown'}"
        if write_log and log.path.parent.is_dir():
            try:
                tail = log.tail()
                log.failure(label, str(exc))
            except OSError as log_exc:
                tail = ""
                self.logger.error(
                    f"Cannot write build log {log.path}: {log_exc}",
                    operation="failure",
                )
            if tail and isinstance(exc, PhaseError):
                exc.context["output"] = tail
        self.logger.error(
            f"{exc.message} (see {log.path})",
            operation="failure",
            package=state.package,
            phase=state.phase,
            extra={"code": exc.code},
        )

    def _print_summary(self, config: BuildConfig, packages: tuple[PackageSpec, ...]) -> None:
        versions = resolve_versions(config)
        lines = [
            "Cross GCC build configuration:",
            f"  build log:  {config.log_path}",
            f"  prefix:     {config.prefix}",
            f"  target:     {config.target}",
        ]
        built = {spec.name for spec in packages}
        for name in PACKAGE_ORDER:
            version = versions[name] if name in built else "(skipped)"
            lines.append(f"  {name + ':':<11} {version}")
        self.logger.info("\n".join(lines), operation="summary")

    def _require_state(self) -> BuildState:
        if self.state is None:
            raise RuntimeError("Orchestrator state accessed outside of run().")
        return self.state


def _check_package_keys(config: BuildConfig) -> None:
    for option, overrides in (("version", config.versions), ("checksum", config.checksums)):
        unknown = sorted(set(overrides) - set(PACKAGE_ORDER))
        if unknown:
            raise ValidationError(
                f"Unknown packages in {option} overrides.",
                hint="Known packages: " + ", ".join(PACKAGE_ORDER),
                context={"unknown": ",".join(unknown)},
            )


def _make_dir(path: Path, *, option: str) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ValidationError(
            f"Cannot create directory {path}.",
            hint=f"Pass a writable directory with {option}.",
            context={"path": str(path), "error": str(exc)},
        ) from exc


def _remove(path: Path) -> bool:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return True
    if path.exists() or path.is_symlink():
        path.unlink()
        return True
    return False

