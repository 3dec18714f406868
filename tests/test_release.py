import hashlib
from datetime import UTC, datetime

import pytest
from debian import deb822

from aptwriter.config import ReleaseHeader
from aptwriter.exceptions import AptRepoError
from aptwriter.release import ReleaseBuilder


@pytest.fixture
def index_files(tmp_path):
    packages = tmp_path / "Packages"
    packages.write_bytes(b"Package: foo\nVersion: 1\n")
    packages_gz = tmp_path / "Packages.gz"
    packages_gz.write_bytes(b"\x1f\x8b not really gzip")
    return packages, packages_gz


def test_sections_and_lines(tmp_path, index_files):
    packages, packages_gz = index_files
    release = ReleaseBuilder(tmp_path)
    release.add_indexed_file(packages)
    release.add_indexed_file(packages_gz)
    text = release.render()

    headers = [line for line in text.splitlines() if not line.startswith(" ")]
    assert headers == ["MD5Sum:", "SHA1:", "SHA256:", "SHA512:"]

    data = packages.read_bytes()
    size = len(data)
    assert f" {hashlib.md5(data).hexdigest()} {size} Packages\n" in text
    assert f" {hashlib.sha1(data).hexdigest()} {size} Packages\n" in text
    assert f" {hashlib.sha256(data).hexdigest()} {size} Packages\n" in text
    assert f" {hashlib.sha512(data).hexdigest()} {size} Packages\n" in text

    # each section lists files in the order they were added
    for section in text.split(":\n")[1:]:
        lines = [line for line in section.splitlines() if line.startswith(" ")]
        assert [line.rsplit(" ", 1)[1] for line in lines] == ["Packages", "Packages.gz"]


def test_parses_as_release(tmp_path, index_files):
    release = ReleaseBuilder(tmp_path)
    for path in index_files:
        release.add_indexed_file(path)
    parsed = deb822.Release(release.render())

    for field, algo in (("MD5Sum", "md5"), ("SHA1", "sha1"), ("SHA256", "sha256"), ("SHA512", "sha512")):
        key = "md5sum" if algo == "md5" else algo
        entries = {e["name"]: e for e in parsed[field]}
        assert set(entries) == {"Packages", "Packages.gz"}
        for path in index_files:
            assert entries[path.name][key] == hashlib.new(algo, path.read_bytes()).hexdigest()
            assert int(entries[path.name]["size"]) == path.stat().st_size


def test_header_fields(tmp_path, index_files):
    header = ReleaseHeader(
        origin="Example",
        suite="stable",
        date=datetime(2024, 5, 1, 12, 30, tzinfo=UTC),
        architectures=["amd64", "arm64"],
    )
    release = ReleaseBuilder(tmp_path, header=header.to_fields())
    release.add_indexed_file(index_files[0])
    text = release.render()

    assert text.startswith(
        "Origin: Example\nSuite: stable\nDate: Wed, 01 May 2024 12:30:00 UTC\nArchitectures: amd64 arm64\nMD5Sum:\n"
    )


def test_unknown_header_field(tmp_path):
    with pytest.raises(AptRepoError, match="unsupported Release fields"):
        ReleaseBuilder(tmp_path, header={"Acquire-By-Hash": "yes"})


def test_write_exact_text(tmp_path, index_files):
    release = ReleaseBuilder(tmp_path)
    for path in index_files:
        release.add_indexed_file(path)
    text = release.render()
    written = release.write(text)
    assert written == tmp_path / "Release"
    assert written.read_bytes() == text.encode("utf-8")


def test_missing_index_file(tmp_path):
    with pytest.raises(AptRepoError, match="reading index file failed"):
        ReleaseBuilder(tmp_path).add_indexed_file(tmp_path / "Packages")
