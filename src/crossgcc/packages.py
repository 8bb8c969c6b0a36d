"""Declarative package and phase table for the GNU toolchain components.

Each package is a :class:`~crossgcc.models.PackageSpec` whose phases are
argument templates.  The orchestrator renders them with the run variables
(``target``, ``prefix``, ``jobs``, ``source`` and ``python``) and drives every
package through the same loop, so adding a component means adding a table
entry rather than control flow.

Order matters twice over: packages are built binutils, gcc, gdb because gcc
and gdb are configured against the freshly installed binutils, and gcc's
phases must stay ``all-gcc``, ``all-target-libgcc``, ``install-gcc``,
``install-target-libgcc`` since libgcc is compiled by the stage-1 compiler.
"""

from __future__ import annotations

from dataclasses import replace

from crossgcc.host import Host
from crossgcc.models import BuildConfig, PackageSpec, Phase

DEFAULT_MIRROR = "https://ftp.gnu.org/gnu"

DEFAULT_VERSIONS: dict[str, str] = {
    "binutils": "2.37",
    "gcc": "12.1.0",
    "gdb": "12.1",
}

PACKAGE_ORDER = ("binutils", "gcc", "gdb")

# Homebrew formulae whose prefixes gdb needs on macOS, keyed by configure option.
DARWIN_GDB_FORMULAE = (
    ("--with-libgmp-prefix", "gmp"),
    ("--with-gmp", "gmp"),
    ("--with-isl", "isl"),
    ("--with-mpc", "libmpc"),
    ("--with-mpfr", "mpfr"),
)

_MAKE_JOBS = ("make", "-j", "{jobs}")


def binutils_spec(version: str, *, mirror: str = DEFAULT_MIRROR) -> PackageSpec:
    archive = f"binutils-{version}.tar.xz"
    return PackageSpec(
        name="binutils",
        version=version,
        archive=archive,
        url=f"{mirror}/binutils/{archive}",
        source_dir=f"binutils-{version}",
        build_dir="build-binutils",
        phases=(
            Phase(
                name="configure",
                action="configure",
                argv=(
                    "{source}/configure",
                    "--target={target}",
                    "--prefix={prefix}",
                    "--with-sysroot",
                    "--disable-nls",
                    "--disable-werror",
                ),
                label="configure binutils",
            ),
            Phase(name="build", action="build", argv=_MAKE_JOBS, label="build binutils"),
            Phase(
                name="install",
                action="install",
                argv=("make", "install"),
                label="install binutils",
            ),
        ),
    )


def gcc_spec(version: str, *, mirror: str = DEFAULT_MIRROR) -> PackageSpec:
    archive = f"gcc-{version}.tar.xz"
    return PackageSpec(
        name="gcc",
        version=version,
        archive=archive,
        url=f"{mirror}/gcc/gcc-{version}/{archive}",
        source_dir=f"gcc-{version}",
        build_dir="build-gcc",
        phases=(
            Phase(
                name="prerequisites",
                action="custom",
                argv=("./contrib/download_prerequisites",),
                label="obtaining gcc pre-requisites",
                cwd="source",
            ),
            Phase(
                name="configure",
                action="configure",
                argv=(
                    "{source}/configure",
                    "--target={target}",
                    "--prefix={prefix}",
                    "--disable-nls",
                    "--enable-languages=c,c++",
                    "--without-headers",
                ),
                label="configure gcc",
            ),
            Phase(
                name="all-gcc",
                action="build",
                argv=(*_MAKE_JOBS, "all-gcc"),
                label="build gcc",
            ),
            Phase(
                name="all-target-libgcc",
                action="build",
                argv=(*_MAKE_JOBS, "all-target-libgcc"),
                label="build libgcc",
            ),
            Phase(
                name="install-gcc",
                action="install",
                argv=("make", "install-gcc"),
                label="install gcc",
            ),
            Phase(
                name="install-target-libgcc",
                action="install",
                argv=("make", "install-target-libgcc"),
                label="install libgcc",
            ),
        ),
    )


def gdb_spec(
    version: str,
    *,
    mirror: str = DEFAULT_MIRROR,
    brew_prefixes: dict[str, str] | None = None,
) -> PackageSpec:
    """gdb with Python support; ``brew_prefixes`` adds the macOS library options."""
    archive = f"gdb-{version}.tar.xz"
    configure: tuple[str, ...] = (
        "{source}/configure",
        "--target={target}",
        "--prefix={prefix}",
    )
    if brew_prefixes is not None:
        configure += ("--disable-werror", "--with-python={python}")
        configure += tuple(
            f"{option}={brew_prefixes[formula]}" for option, formula in DARWIN_GDB_FORMULAE
        )
    else:
        configure += ("--with-python={python}",)
    return PackageSpec(
        name="gdb",
        version=version,
        archive=archive,
        url=f"{mirror}/gdb/{archive}",
        source_dir=f"gdb-{version}",
        build_dir="build-gdb",
        phases=(
            Phase(name="configure", action="configure", argv=configure, label="configure gdb"),
            Phase(name="build", action="build", argv=_MAKE_JOBS, label="build gdb"),
            Phase(name="install", action="install", argv=("make", "install"), label="install gdb"),
        ),
    )


def resolve_versions(config: BuildConfig) -> dict[str, str]:
    versions = dict(DEFAULT_VERSIONS)
    versions.update(config.versions)
    return versions


def package_specs(config: BuildConfig, host: Host) -> tuple[PackageSpec, ...]:
    """Build the ordered package table for *config* on *host*."""
    versions = resolve_versions(config)
    mirror = (config.mirror or DEFAULT_MIRROR).rstrip("/")
    specs = [
        binutils_spec(versions["binutils"], mirror=mirror),
        gcc_spec(versions["gcc"], mirror=mirror),
    ]
    if config.with_gdb:
        brew_prefixes = None
        if host.is_darwin:
            formulae = dict.fromkeys(formula for _, formula in DARWIN_GDB_FORMULAE)
            brew_prefixes = {formula: host.brew_prefix(formula) for formula in formulae}
        specs.append(gdb_spec(versions["gdb"], mirror=mirror, brew_prefixes=brew_prefixes))
    return tuple(replace(spec, sha256=config.checksums.get(spec.name)) for spec in specs)


def all_package_specs(config: BuildConfig) -> tuple[PackageSpec, ...]:
    """Every known package regardless of ``with_gdb``; used for cleaning."""
    versions = resolve_versions(config)
    mirror = (config.mirror or DEFAULT_MIRROR).rstrip("/")
    return (
        binutils_spec(versions["binutils"], mirror=mirror),
        gcc_spec(versions["gcc"], mirror=mirror),
        gdb_spec(versions["gdb"], mirror=mirror),
    )
