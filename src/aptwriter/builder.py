"""Repository build orchestration."""

import logging
from concurrent.futures import ThreadPoolExecutor
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel

from aptwriter.config import RepoConfig
from aptwriter.constants import INRELEASE, RELEASE_GPG
from aptwriter.exceptions import AptRepoError, ErrorKind
from aptwriter.extractor import extract
from aptwriter.models import PackageEntry
from aptwriter.packages import PackageIndex
from aptwriter.release import ReleaseBuilder
from aptwriter.signing import SigningCoordinator

logger = logging.getLogger(__name__)


class Phase(StrEnum):
    CONFIGURED = "configured"
    PACKAGES_BUILT = "packages_built"
    RELEASE_BUILT = "release_built"
    SIGNED = "signed"
    DONE = "done"


class BuildResult(BaseModel):
    """Paths written by a successful build."""

    packages: Path
    packages_gz: Path
    release: Path
    release_gpg: Path | None = None
    inrelease: Path | None = None
    package_count: int = 0

    @property
    def files(self) -> list[Path]:
        paths = [self.packages, self.packages_gz, self.release, self.release_gpg, self.inrelease]
        return [p for p in paths if p is not None]


class RepoBuilder:
    """Builds a flat APT repository from a set of .deb files.

    Register archives with :meth:`add`, then call :meth:`create` once. Nothing
    is written until every archive has been extracted, so a bad archive never
    leaves a partial Packages index behind.

    Args:
        repo_dir: Output directory; created if missing, its parent must exist
        **options: Any other :class:`RepoConfig` field (sign, keyring, key_id, ...)
    """

    def __init__(self, repo_dir: Path | str, **options):
        self.config = RepoConfig.create(repo_dir=repo_dir, **options)
        self.repo_dir = self.config.repo_dir
        self.signer: SigningCoordinator | None = None
        self._archives: list[Path] = []
        self._phase = Phase.CONFIGURED

        if self.config.sign:
            self.signer = SigningCoordinator(
                keyring=self.config.keyring,
                key_id=self.config.key_id,
                passphrase=self.config.passphrase,
                passphrase_file=self.config.passphrase_file,
                digest=self.config.digest,
            )

        if not self.repo_dir.exists():
            try:
                self.repo_dir.mkdir()
            except OSError as e:
                raise AptRepoError(f"creating repo directory failed: {self.repo_dir}", kind=ErrorKind.CONFIG, cause=e)
            logger.debug(f"Created repository directory {self.repo_dir}")

    @classmethod
    def from_config(cls, config: RepoConfig) -> "RepoBuilder":
        return cls(**config.model_dump())

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def archives(self) -> list[Path]:
        return list(self._archives)

    def add(self, archive_path: Path | str) -> None:
        """Register a package archive; order of registration is the index order."""
        if self._phase is not Phase.CONFIGURED:
            raise AptRepoError(f"cannot add packages after create() ({self._phase})", kind=ErrorKind.CONFIG)
        path = Path(archive_path)
        if not path.is_file():
            raise AptRepoError(f"file not found: {archive_path}", kind=ErrorKind.INPUT)
        self._archives.append(path)
        logger.debug(f"Registered {path}")

    def _extract_all(self) -> list[PackageEntry]:
        if self.config.workers == 1 or len(self._archives) < 2:
            return [extract(path) for path in self._archives]

        # map() yields in submission order and re-raises the first failure
        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            try:
                return list(executor.map(extract, self._archives))
            except Exception:
                executor.shutdown(wait=True, cancel_futures=True)
                raise

    def create(self) -> BuildResult:
        """Write Packages, Packages.gz and Release, then sign if configured."""
        if self._phase is not Phase.CONFIGURED:
            raise AptRepoError(f"create() already ran ({self._phase})", kind=ErrorKind.CONFIG)

        logger.info(f"Building repository in {self.repo_dir} from {len(self._archives)} package(s)")
        index = PackageIndex(self._extract_all())
        packages_path, packages_gz_path = index.write(self.repo_dir)
        self._phase = Phase.PACKAGES_BUILT

        release = ReleaseBuilder(self.repo_dir, header=self.config.release.to_fields())
        release.add_indexed_file(packages_path)
        release.add_indexed_file(packages_gz_path)
        manifest = release.render()
        self._drop_stale_signatures()
        release_path = release.write(manifest)
        self._phase = Phase.RELEASE_BUILT

        result = BuildResult(
            packages=packages_path,
            packages_gz=packages_gz_path,
            release=release_path,
            package_count=len(index),
        )

        if self.signer is not None:
            result.release_gpg, result.inrelease = self._sign(manifest)
            self._phase = Phase.SIGNED

        self._phase = Phase.DONE
        logger.info(f"Repository ready: {', '.join(p.name for p in result.files)}")
        return result

    def _drop_stale_signatures(self) -> None:
        # signatures from an earlier run would not match the new Release
        for name in (RELEASE_GPG, INRELEASE):
            path = self.repo_dir / name
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise AptRepoError(f"removing stale signature failed: {path}", kind=ErrorKind.IO, cause=e)

    def _sign(self, manifest: str) -> tuple[Path, Path]:
        detached, clear = self.signer.sign_release(manifest)
        release_gpg_path = self.repo_dir / RELEASE_GPG
        inrelease_path = self.repo_dir / INRELEASE
        try:
            release_gpg_path.write_bytes(detached)
            inrelease_path.write_bytes(clear.encode("utf-8"))
        except OSError as e:
            raise AptRepoError(f"writing signatures failed in {self.repo_dir}", kind=ErrorKind.IO, cause=e)
        return release_gpg_path, inrelease_path
