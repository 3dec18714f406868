import hashlib

import pytest

from aptwriter.constants import CHUNK_SIZE
from aptwriter.digest import default_digests, digest
from aptwriter.exceptions import DigestError, ErrorKind

ABC = {
    "md5": "900150983cd24fb0d6963f7d28e17f72",
    "sha1": "a9993e364706816aba3e25717850c26c9cd0d89d",
    "sha256": "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad",
    "sha512": (
        "ddaf35a193617abacc417349ae20413112e6fa4e89a97ea20a9eeee64b55d39a"
        "2192992a274fc1a836ba3c23a3feebbd454d4423643ce80e2a9ac94fa54ca49f"
    ),
}

EMPTY = {
    "md5": "d41d8cd98f00b204e9800998ecf8427e",
    "sha1": "da39a3ee5e6b4b0d3255bfef95601890afd80709",
    "sha256": "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855",
    "sha512": (
        "cf83e1357eefb8bdf1542850d66d8007d620e4050b5715dc83f4a921d36ce9ce"
        "47d0d13c5d85f2b0ff8318d2877eec2f63b931bd47417a81a538327af927da3e"
    ),
}


@pytest.fixture
def abc_file(tmp_path):
    path = tmp_path / "abc.txt"
    path.write_bytes(b"abc")
    return path


def test_default_digests_known_values(abc_file):
    assert default_digests(abc_file).model_dump() == ABC


def test_default_digests_empty_file(tmp_path):
    path = tmp_path / "empty"
    path.write_bytes(b"")
    assert default_digests(path).model_dump() == EMPTY


@pytest.mark.parametrize(
    "name,expected",
    [("MD5", ABC["md5"]), ("sha1", ABC["sha1"]), ("SHA-256", ABC["sha256"]), ("SHA512", ABC["sha512"])],
)
def test_digest_by_name(abc_file, name, expected):
    assert digest(name, abc_file) == expected


def test_single_pass_matches_individual_digests(tmp_path):
    path = tmp_path / "big.bin"
    data = bytes(range(256)) * (CHUNK_SIZE // 128 + 7)
    path.write_bytes(data)

    hashes = default_digests(path)
    assert hashes.sha256 == hashlib.sha256(data).hexdigest()
    for name in ("md5", "sha1", "sha256", "sha512"):
        assert getattr(hashes, name) == digest(name, path)


def test_unknown_algorithm(abc_file):
    with pytest.raises(DigestError) as exc_info:
        digest("whirlpool", abc_file)
    assert exc_info.value.kind is ErrorKind.DIGEST
    assert "whirlpool" in str(exc_info.value)


def test_unreadable_file(tmp_path):
    with pytest.raises(DigestError, match="could not create digest"):
        digest("sha256", tmp_path / "missing")
