"""Build an aarch64 Linux cross toolchain under ./build."""

from pathlib import Path

from crossgcc import BuildConfig, Orchestrator


def build_aarch64_toolchain() -> None:
    build_dir = Path("build").resolve()
    config = BuildConfig(
        build_dir=build_dir,
        prefix=build_dir / "toolchain",
        target="aarch64-linux-gnu",
        versions={"gcc": "12.1.0", "binutils": "2.37", "gdb": "12.1"},
    )
    Orchestrator().run(config)


if __name__ == "__main__":
    build_aarch64_toolchain()
