import hashlib
from pathlib import Path

import pytest

from crossgcc.errors import DownloadError
from crossgcc.fetch import download_archive


def test_download_writes_archive(tmp_path: Path) -> None:
    source = tmp_path / "mirror" / "gcc-12.1.0.tar.xz"
    source.parent.mkdir()
    source.write_bytes(b"archive payload")
    destination = tmp_path / "src" / "gcc-12.1.0.tar.xz"

    downloaded = download_archive(source.as_uri(), destination)

    assert downloaded is True
    assert destination.read_bytes() == b"archive payload"
    assert not destination.with_name("gcc-12.1.0.tar.xz.part").exists()


def test_download_is_skipped_when_archive_exists(tmp_path: Path) -> None:
    source = tmp_path / "upstream.tar.xz"
    source.write_bytes(b"new upstream content")
    destination = tmp_path / "binutils-2.37.tar.xz"
    destination.write_bytes(b"already here")

    downloaded = download_archive(source.as_uri(), destination)

    assert downloaded is False
    assert destination.read_bytes() == b"already here"


def test_download_verifies_sha256(tmp_path: Path) -> None:
    source = tmp_path / "gdb-12.1.tar.xz"
    payload = b"gdb sources"
    source.write_bytes(payload)
    digest = hashlib.sha256(payload).hexdigest()

    assert download_archive(source.as_uri(), tmp_path / "out" / "gdb.tar.xz", sha256=digest)

    with pytest.raises(DownloadError) as excinfo:
        download_archive(source.as_uri(), tmp_path / "other" / "gdb.tar.xz", sha256="0" * 64)

    assert excinfo.value.context["actual"] == digest
    assert not (tmp_path / "other" / "gdb.tar.xz").exists()


def test_existing_archive_with_wrong_hash_is_rejected(tmp_path: Path) -> None:
    destination = tmp_path / "gcc.tar.xz"
    destination.write_bytes(b"tampered")

    with pytest.raises(DownloadError) as excinfo:
        download_archive("https://invalid.example/gcc.tar.xz", destination, sha256="0" * 64)

    assert "--clean-all" in str(excinfo.value)


def test_unreachable_url_raises_download_error(tmp_path: Path) -> None:
    missing = tmp_path / "does-not-exist.tar.xz"
    destination = tmp_path / "src" / "binutils-2.37.tar.xz"

    with pytest.raises(DownloadError) as excinfo:
        download_archive(missing.as_uri(), destination)

    assert excinfo.value.code == "E_DOWNLOAD"
    assert excinfo.value.context["url"] == missing.as_uri()
    assert not destination.exists()
    assert not destination.with_name("binutils-2.37.tar.xz.part").exists()
