"""End-to-end build of a real cross toolchain.

Downloads binutils and gcc from the GNU mirror and compiles them, which takes
a long time.  Enable with ``CROSS_GCC_INTEGRATION=1``.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

import pytest

from crossgcc.cli import main

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        os.environ.get("CROSS_GCC_INTEGRATION") != "1",
        reason="Set CROSS_GCC_INTEGRATION=1 to run a real toolchain build.",
    ),
    pytest.mark.skipif(
        shutil.which("gcc") is None or shutil.which("make") is None,
        reason="Host compiler and make are required.",
    ),
]

TARGET = "aarch64-linux"


def test_fresh_build_installs_binutils_and_gcc(tmp_path: Path) -> None:
    build_dir = tmp_path / "build"

    code = main(
        [
            "--build-dir",
            str(build_dir),
            "--target",
            TARGET,
            "--gcc",
            "12.1.0",
            "--binutils",
            "2.37",
            "--without-gdb",
        ],
    )

    assert code == 0
    bin_dir = build_dir / "toolchain" / "bin"
    assert (bin_dir / f"{TARGET}-as").exists()
    assert (bin_dir / f"{TARGET}-ld").exists()
    assert (bin_dir / f"{TARGET}-gcc").exists()
