"""OpenPGP signing of the Release manifest through GnuPG."""

import logging
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from enum import StrEnum
from pathlib import Path

import gnupg

from aptwriter.constants import DEFAULT_DIGEST, GPG_BINARY
from aptwriter.exceptions import AptRepoError, ErrorKind
from aptwriter.utils import read_first_line

logger = logging.getLogger(__name__)


class HashAlgorithm(StrEnum):
    """Digest algorithms accepted for OpenPGP signatures."""

    MD5 = "MD5"
    SHA1 = "SHA1"
    RIPEMD160 = "RIPEMD160"
    SHA224 = "SHA224"
    SHA256 = "SHA256"
    SHA384 = "SHA384"
    SHA512 = "SHA512"


HASH_ALGORITHMS = {algo.value: algo for algo in HashAlgorithm}


def hash_algorithm(name: str) -> HashAlgorithm:
    """Look up a signature digest algorithm by name (case-insensitive)."""
    try:
        return HASH_ALGORITHMS[name.strip().upper()]
    except (KeyError, AttributeError):
        raise AptRepoError(f"unknown hash algorithm: {name}", kind=ErrorKind.DIGEST) from None


class SigningCoordinator:
    """Produces the detached and clear-signed variants of a manifest.

    The keyring is an exported secret key (armored or binary). For every signing
    run it is imported into a temporary GnuPG home that is removed afterwards,
    so the user's own keyrings are never touched.

    Exactly one of ``passphrase`` and ``passphrase_file`` must be given. A
    passphrase file is read when signing, and only its first line is used.

    Args:
        keyring: Path to the secret key file
        key_id: Key id, fingerprint or user id of the signing key
        passphrase: Passphrase protecting the secret key
        passphrase_file: File whose first line is the passphrase
        digest: Signature digest algorithm name (MD5, SHA1, RIPEMD160, SHA224, SHA256, SHA384, SHA512)
        gpg_binary: GnuPG executable to drive
    """

    def __init__(
        self,
        keyring: Path,
        key_id: str,
        passphrase: str | None = None,
        passphrase_file: Path | None = None,
        digest: str = DEFAULT_DIGEST,
        gpg_binary: str = GPG_BINARY,
    ):
        # validated before touching the filesystem
        self.digest = hash_algorithm(digest)

        self.keyring = Path(keyring)
        if not self.keyring.is_file():
            raise AptRepoError(f"keyring does not exist: {keyring}", kind=ErrorKind.CONFIG)
        if not key_id:
            raise AptRepoError("a key id is required for signing", kind=ErrorKind.CONFIG)

        if passphrase is not None and passphrase_file is not None:
            raise AptRepoError("give either a passphrase or a passphrase file, not both", kind=ErrorKind.CONFIG)
        if passphrase is None and passphrase_file is None:
            raise AptRepoError("a passphrase or a passphrase file is required for signing", kind=ErrorKind.CONFIG)
        if passphrase_file is not None and not Path(passphrase_file).is_file():
            raise AptRepoError(f"passphrase file does not exist: {passphrase_file}", kind=ErrorKind.CONFIG)

        self.key_id = key_id
        self.passphrase_file = Path(passphrase_file) if passphrase_file is not None else None
        self._passphrase = passphrase
        self.gpg_binary = gpg_binary

    def __repr__(self) -> str:
        return f"SigningCoordinator(keyring={self.keyring!s}, key_id={self.key_id!r}, digest={self.digest})"

    def resolve_passphrase(self) -> str:
        if self.passphrase_file is not None:
            return read_first_line(self.passphrase_file)
        return self._passphrase

    @contextmanager
    def session(self) -> Iterator[tuple[gnupg.GPG, str]]:
        """Yield a GnuPG handle with the signing key imported, plus the passphrase."""
        passphrase = self.resolve_passphrase()
        try:
            key_data = self.keyring.read_bytes()
        except OSError as e:
            raise AptRepoError(f"reading keyring failed: {self.keyring}", kind=ErrorKind.IO, cause=e)

        with tempfile.TemporaryDirectory(prefix="aptwriter-gnupg-") as home:
            try:
                gpg = gnupg.GPG(gnupghome=home, gpgbinary=self.gpg_binary)
            except (OSError, ValueError) as e:
                raise AptRepoError(f"unable to run {self.gpg_binary}", kind=ErrorKind.SIGNING, cause=e)

            imported = gpg.import_keys(key_data, passphrase=passphrase)
            if not imported.fingerprints:
                raise AptRepoError(
                    f"no keys could be imported from keyring: {self.keyring}: {imported.stderr.strip()}",
                    kind=ErrorKind.SIGNING,
                )
            if not gpg.list_keys(secret=True, keys=[self.key_id]):
                raise AptRepoError(f"secret key {self.key_id} not found in {self.keyring}", kind=ErrorKind.SIGNING)
            logger.debug(f"Imported {len(imported.fingerprints)} key(s) from {self.keyring}")
            yield gpg, passphrase

    def _sign(self, gpg: gnupg.GPG, passphrase: str, text: str, detach: bool) -> bytes:
        result = gpg.sign(
            text.encode("utf-8"),
            keyid=self.key_id,
            passphrase=passphrase,
            clearsign=not detach,
            detach=detach,
            binary=detach,
            extra_args=["--digest-algo", self.digest.value],
        )
        if result.fingerprint is None:
            mode = "detached" if detach else "clear"
            raise AptRepoError(
                f"{mode} signing with key {self.key_id} failed: {result.status}: {result.stderr.strip()}",
                kind=ErrorKind.SIGNING,
            )
        return result.data

    def sign_detached(self, manifest_text: str) -> bytes:
        """Binary detached signature over the UTF-8 bytes of manifest_text."""
        with self.session() as (gpg, passphrase):
            return self._sign(gpg, passphrase, manifest_text, detach=True)

    def sign_clear(self, manifest_text: str) -> str:
        """Clear-signed document embedding manifest_text."""
        with self.session() as (gpg, passphrase):
            return self._sign(gpg, passphrase, manifest_text, detach=False).decode("utf-8")

    def sign_release(self, manifest_text: str) -> tuple[bytes, str]:
        """Produce both signatures with a single key import.

        Returns:
            Tuple of (detached signature bytes, clear-signed text)
        """
        with self.session() as (gpg, passphrase):
            detached = self._sign(gpg, passphrase, manifest_text, detach=True)
            clear = self._sign(gpg, passphrase, manifest_text, detach=False).decode("utf-8")
        logger.info(f"Signed Release with key {self.key_id} using {self.digest}")
        return detached, clear
