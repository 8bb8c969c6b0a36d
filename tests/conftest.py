"""Shared test fixtures."""

from __future__ import annotations

import shutil
import tarfile
import tempfile
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from crossgcc.buildlog import BuildLog
from crossgcc.host import Host
from crossgcc.models import BuildConfig
from crossgcc.observability import StructuredLogger
from crossgcc.orchestrator import Orchestrator
from crossgcc.runner import CommandResult

SOURCE_DIRS = ("binutils-2.37", "gcc-12.1.0", "gdb-12.1")


@dataclass(frozen=True, slots=True)
class RecordedCommand:
    argv: tuple[str, ...]
    cwd: Path
    env: dict[str, str]
    cwd_contents: tuple[str, ...]


@dataclass
class RecordingRunner:
    """Fake runner: records every command and fails the one containing ``fail_on``."""

    fail_on: str | None = None
    returncode: int = 2
    commands: list[RecordedCommand] = field(default_factory=list)

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
        log: BuildLog,
    ) -> CommandResult:
        command = tuple(argv)
        contents = tuple(sorted(p.name for p in cwd.iterdir())) if cwd.is_dir() else ()
        self.commands.append(
            RecordedCommand(argv=command, cwd=cwd, env=dict(env), cwd_contents=contents),
        )
        log.command_header(command, cwd=cwd)
        if self.fail_on is not None and self.fail_on in command:
            log.append(f"simulated failure: {' '.join(command)}")
            return CommandResult(argv=command, returncode=self.returncode)
        log.append("ok")
        return CommandResult(argv=command, returncode=0)

    def index_of(self, *, cwd_name: str, arg: str) -> int:
        for index, recorded in enumerate(self.commands):
            if recorded.cwd.name == cwd_name and arg in recorded.argv:
                return index
        raise AssertionError(f"no command with {arg!r} in {cwd_name}")


@dataclass
class StaticHost(Host):
    platform: str = "linux"
    missing: tuple[str, ...] = ()
    triple: str = "x86_64-linux-gnu"
    cpus: int = 4

    def missing_commands(self) -> tuple[str, ...]:
        return self.missing

    def native_triple(self) -> str:
        return self.triple

    def cpu_count(self) -> int:
        return self.cpus

    def python_path(self) -> str:
        return "/usr/bin/python3"

    def brew_prefix(self, formula: str) -> str:
        return f"/opt/homebrew/opt/{formula}"


@dataclass
class RecordingDownloader:
    """Fake downloader that materialises a valid source archive for each missing URL."""

    calls: list[tuple[str, str | None]] = field(default_factory=list)
    fetched: list[str] = field(default_factory=list)

    def __call__(self, url: str, destination: Path, *, sha256: str | None = None) -> bool:
        self.calls.append((url, sha256))
        if Path(destination).is_file():
            return False
        self.fetched.append(url)
        top = Path(destination).name.removesuffix(".tar.xz")
        make_source_archive(Path(destination), top)
        return True


def make_source_archive(path: Path, top: str) -> Path:
    """Write a small ``.tar.xz`` containing ``top/configure``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    staging = Path(tempfile.mkdtemp(prefix="crossgcc-archive-"))
    try:
        source = staging / top
        (source / "contrib").mkdir(parents=True)
        (source / "configure").write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
        (source / "contrib" / "download_prerequisites").write_text(
            "#!/bin/sh\nexit 0\n",
            encoding="utf-8",
        )
        with tarfile.open(path, "w:xz") as tar:
            tar.add(source, arcname=top)
    finally:
        shutil.rmtree(staging, ignore_errors=True)
    return path


def seed_archives(src_dir: Path, tops: Sequence[str] = SOURCE_DIRS) -> list[Path]:
    return [make_source_archive(src_dir / f"{top}.tar.xz", top) for top in tops]


@pytest.fixture
def config(tmp_path: Path) -> BuildConfig:
    build_dir = tmp_path / "build"
    return BuildConfig(
        build_dir=build_dir,
        prefix=build_dir / "toolchain",
        target="aarch64-linux",
        versions={"gcc": "12.1.0", "binutils": "2.37"},
    )


@pytest.fixture
def seeded_config(config: BuildConfig) -> BuildConfig:
    seed_archives(config.src_dir)
    return config


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def downloader() -> RecordingDownloader:
    return RecordingDownloader()


@pytest.fixture
def orchestrator(runner: RecordingRunner, downloader: RecordingDownloader) -> Orchestrator:
    """Orchestrator wired to fakes so no external tool or network is touched."""
    return Orchestrator(
        host=StaticHost(),
        runner=runner,
        logger=StructuredLogger(stream=None),
        downloader=downloader,
        base_env={"PATH": "/usr/bin:/bin", "CPATH": "/host/include", "LIBRARY_PATH": "/host/lib"},
    )
