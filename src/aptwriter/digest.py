"""Streaming file digests."""

import hashlib
import logging
from pathlib import Path

from aptwriter.constants import CHUNK_SIZE
from aptwriter.exceptions import DigestError
from aptwriter.models import DefaultHashes

logger = logging.getLogger(__name__)

# accepted spellings -> hashlib constructor name
ALGORITHMS = {
    "md5": "md5",
    "sha1": "sha1",
    "sha224": "sha224",
    "sha256": "sha256",
    "sha384": "sha384",
    "sha512": "sha512",
}


def _hashlib_name(algorithm: str) -> str:
    key = algorithm.strip().lower().replace("-", "").replace("_", "")
    try:
        return ALGORITHMS[key]
    except KeyError:
        raise DigestError(f"unknown digest algorithm: {algorithm}") from None


def digest(algorithm: str, path: Path) -> str:
    """Compute the hex digest of a file with the named algorithm.

    Args:
        algorithm: Algorithm name such as "MD5", "SHA1", "SHA-256" or "sha512"
        path: File to digest; read in chunks, never loaded whole

    Returns:
        The lowercase hex digest
    """
    hasher = hashlib.new(_hashlib_name(algorithm))
    _stream_into(Path(path), [hasher])
    return hasher.hexdigest()


def default_digests(path: Path) -> DefaultHashes:
    """Compute MD5, SHA1, SHA256 and SHA512 of a file in a single pass."""
    path = Path(path)
    hashers = {name: hashlib.new(name) for name in ("md5", "sha1", "sha256", "sha512")}
    _stream_into(path, list(hashers.values()))
    logger.debug(f"Computed default digests for {path}")
    return DefaultHashes(**{name: h.hexdigest() for name, h in hashers.items()})


def _stream_into(path: Path, hashers: list) -> None:
    try:
        with path.open("rb") as f:
            while chunk := f.read(CHUNK_SIZE):
                for hasher in hashers:
                    hasher.update(chunk)
    except OSError as e:
        raise DigestError(f"could not create digest for {path}", cause=e) from e
