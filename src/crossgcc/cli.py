"""Command line interface for building a GNU cross toolchain.

Usage:
    cross-gcc --target aarch64-linux-gnu
    cross-gcc --target arm-none-eabi --gcc 13.2.0 --binutils 2.41 --clean
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from crossgcc.errors import CrossGccError
from crossgcc.models import BuildConfig, CleanMode
from crossgcc.observability import StructuredLogger
from crossgcc.orchestrator import Orchestrator
from crossgcc.packages import DEFAULT_MIRROR, DEFAULT_VERSIONS
from crossgcc.report import BuildReport


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cross-gcc",
        description="Download and build binutils, gcc and gdb for a cross target.",
    )

    basic = parser.add_argument_group("Basic Options")
    basic.add_argument(
        "--build-dir",
        type=Path,
        help="Path to the temporary build location (default: ./build)",
    )
    clean = basic.add_mutually_exclusive_group()
    clean.add_argument(
        "--clean",
        dest="clean_mode",
        action="store_const",
        const="clean",
        help="Remove extracted sources and build directories before building",
    )
    clean.add_argument(
        "--clean-all",
        dest="clean_mode",
        action="store_const",
        const="clean-all",
        help="Also remove downloaded archives before building",
    )
    basic.add_argument("--jobs", "-j", type=int, help="Parallel make jobs (default: CPU count)")
    basic.add_argument("--mirror", help=f"GNU mirror base URL (default: {DEFAULT_MIRROR})")
    basic.add_argument("--report", type=Path, help="Write a run report (.json or .cbor)")

    install = parser.add_argument_group("Target/Install Configuration")
    install.add_argument("--target", help="Target triple (default: host's native triple)")
    install.add_argument(
        "--prefix",
        type=Path,
        help="Install location for the toolchain (default: <build-dir>/toolchain)",
    )

    versions = parser.add_argument_group("Version Configuration")
    for package, default in DEFAULT_VERSIONS.items():
        versions.add_argument(
            f"--{package}",
            metavar="VERSION",
            help=f"Version of {package} to build (default: {default})",
        )
    versions.add_argument("--without-gdb", action="store_true", help="Do not build gdb")
    versions.add_argument(
        "--sha256",
        dest="checksums",
        metavar="PACKAGE=HEX",
        type=_checksum_arg,
        action="append",
        default=[],
        help="Expected sha256 of a package archive; may be repeated",
    )

    parser.set_defaults(clean_mode="none")
    return parser


def _checksum_arg(value: str) -> tuple[str, str]:
    package, sep, digest = value.partition("=")
    if not sep or not package or not digest:
        raise argparse.ArgumentTypeError(f"expected PACKAGE=HEX, got {value!r}")
    return package.strip(), digest.strip().lower()


def config_from_args(args: argparse.Namespace, *, cwd: Path | None = None) -> BuildConfig:
    base = cwd or Path.cwd()
    build_dir = (args.build_dir or base / "build").resolve()
    prefix = (args.prefix or build_dir / "toolchain").resolve()
    overrides = {
        package: getattr(args, package)
        for package in DEFAULT_VERSIONS
        if getattr(args, package) is not None
    }
    clean_mode: CleanMode = args.clean_mode
    return BuildConfig(
        build_dir=build_dir,
        prefix=prefix,
        target=args.target,
        clean_mode=clean_mode,
        versions=overrides,
        jobs=args.jobs,
        mirror=args.mirror,
        with_gdb=not args.without_gdb,
        checksums=dict(args.checksums),
    )


def main(argv: Sequence[str] | None = None, *, orchestrator: Orchestrator | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = config_from_args(args)
    orch = orchestrator or Orchestrator(logger=StructuredLogger())

    error: CrossGccError | None = None
    try:
        result = orch.run(config)
    except CrossGccError as exc:
        error = exc
        print(f"error: {exc}", file=sys.stderr)
    else:
        config = result.config
        print(f"Toolchain installed to {config.prefix}")

    if args.report is not None and orch.state is not None:
        report = BuildReport.from_run(
            config=config,
            state=orch.state,
            error=error,
            logs=orch.logger.records,
        )
        report.write(args.report)

    return 1 if error is not None else 0


if __name__ == "__main__":
    sys.exit(main())
