from pathlib import Path

from conftest import StaticHost

from crossgcc.models import BuildConfig
from crossgcc.packages import (
    DEFAULT_MIRROR,
    DEFAULT_VERSIONS,
    all_package_specs,
    binutils_spec,
    gcc_spec,
    gdb_spec,
    package_specs,
)


def _config(tmp_path: Path, **kwargs: object) -> BuildConfig:
    return BuildConfig(
        build_dir=tmp_path,
        prefix=tmp_path / "toolchain",
        **kwargs,  # type: ignore[arg-type]
    )


def test_default_versions_and_urls(tmp_path: Path) -> None:
    specs = package_specs(_config(tmp_path), StaticHost())

    assert [(spec.name, spec.version) for spec in specs] == list(DEFAULT_VERSIONS.items())
    assert [spec.url for spec in specs] == [
        f"{DEFAULT_MIRROR}/binutils/binutils-2.37.tar.xz",
        f"{DEFAULT_MIRROR}/gcc/gcc-12.1.0/gcc-12.1.0.tar.xz",
        f"{DEFAULT_MIRROR}/gdb/gdb-12.1.tar.xz",
    ]


def test_version_overrides_change_archive_and_directories() -> None:
    spec = gcc_spec("13.2.0")

    assert spec.archive == "gcc-13.2.0.tar.xz"
    assert spec.source_dir == "gcc-13.2.0"
    assert spec.build_dir == "build-gcc"


def test_gcc_phase_table_keeps_stage_one_ordering() -> None:
    spec = gcc_spec("12.1.0")

    assert [phase.name for phase in spec.phases] == [
        "prerequisites",
        "configure",
        "all-gcc",
        "all-target-libgcc",
        "install-gcc",
        "install-target-libgcc",
    ]
    assert spec.phases[0].cwd == "source"
    assert all(phase.cwd == "build" for phase in spec.phases[1:])


def test_binutils_phase_actions() -> None:
    spec = binutils_spec("2.37")

    assert [phase.action for phase in spec.phases] == ["configure", "build", "install"]
    assert spec.phases[1].argv == ("make", "-j", "{jobs}")


def test_gdb_linux_configure_uses_python_only() -> None:
    configure = gdb_spec("12.1").phases[0]

    assert configure.argv == (
        "{source}/configure",
        "--target={target}",
        "--prefix={prefix}",
        "--with-python={python}",
    )


def test_gdb_on_darwin_resolves_homebrew_prefixes(tmp_path: Path) -> None:
    specs = package_specs(_config(tmp_path), StaticHost(platform="darwin"))
    configure = specs[-1].phases[0]

    assert "--disable-werror" in configure.argv
    assert "--with-libgmp-prefix=/opt/homebrew/opt/gmp" in configure.argv
    assert "--with-isl=/opt/homebrew/opt/isl" in configure.argv
    assert "--with-mpfr=/opt/homebrew/opt/mpfr" in configure.argv


def test_without_gdb_still_cleans_gdb(tmp_path: Path) -> None:
    config = _config(tmp_path, with_gdb=False)

    assert [spec.name for spec in package_specs(config, StaticHost())] == ["binutils", "gcc"]
    assert [spec.name for spec in all_package_specs(config)] == ["binutils", "gcc", "gdb"]


def test_checksums_are_attached_to_matching_packages(tmp_path: Path) -> None:
    digest = "cd" * 32
    specs = package_specs(_config(tmp_path, checksums={"binutils": digest}), StaticHost())

    assert [spec.sha256 for spec in specs] == [digest, None, None]
