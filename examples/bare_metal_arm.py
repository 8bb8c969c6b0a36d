"""Bare-metal ARM compiler without gdb, with a CBOR run report."""

from pathlib import Path

from crossgcc import BuildConfig, BuildReport, CrossGccError, Orchestrator


def build_arm_none_eabi(prefix: Path) -> int:
    build_dir = Path("build-arm").resolve()
    config = BuildConfig(
        build_dir=build_dir,
        prefix=prefix,
        target="arm-none-eabi",
        clean_mode="clean",
        with_gdb=False,
    )
    orchestrator = Orchestrator()
    error: CrossGccError | None = None
    try:
        orchestrator.run(config)
    except CrossGccError as exc:
        error = exc
    if orchestrator.state is not None:
        report = BuildReport.from_run(config=config, state=orchestrator.state, error=error)
        report.to_cbor(build_dir / "report.cbor")
    return 1 if error is not None else 0


if __name__ == "__main__":
    raise SystemExit(build_arm_none_eabi(Path.home() / "opt" / "cross"))
