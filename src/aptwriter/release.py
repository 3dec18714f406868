"""Release manifest assembly."""

import logging
from pathlib import Path

from debian import deb822

from aptwriter.constants import RELEASE, RELEASE_HEADER_FIELDS, RELEASE_SECTIONS
from aptwriter.digest import default_digests
from aptwriter.exceptions import AptRepoError, ErrorKind
from aptwriter.models import ReleaseInfo

logger = logging.getLogger(__name__)


class ReleaseBuilder:
    """Collects index files and renders the Release manifest.

    Args:
        repo_dir: Directory the indexed files live in; paths are listed relative to it
        header: Optional repository-level fields (Origin, Suite, Date, ...)
    """

    def __init__(self, repo_dir: Path, header: dict[str, str] | None = None):
        self.repo_dir = Path(repo_dir)
        self.header = dict(header or {})
        self.infos: list[ReleaseInfo] = []

        unknown = [k for k in self.header if k not in RELEASE_HEADER_FIELDS]
        if unknown:
            raise AptRepoError(f"unsupported Release fields: {', '.join(unknown)}", kind=ErrorKind.CONFIG)

    def add_indexed_file(self, path: Path) -> ReleaseInfo:
        """Digest an index file and append it to the manifest."""
        path = Path(path)
        try:
            size = path.stat().st_size
        except OSError as e:
            raise AptRepoError(f"reading index file failed: {path}", kind=ErrorKind.IO, cause=e)
        try:
            rel_path = path.relative_to(self.repo_dir).as_posix()
        except ValueError:
            rel_path = path.name

        hashes = default_digests(path)
        info = ReleaseInfo(path=rel_path, size=size, **hashes.model_dump())
        self.infos.append(info)
        logger.debug(f"Added {rel_path} ({size} bytes) to Release")
        return info

    def render(self) -> str:
        """Render the manifest text; these exact bytes are what gets signed."""
        paragraph = deb822.Deb822()
        for key in RELEASE_HEADER_FIELDS:
            if value := self.header.get(key):
                paragraph[key] = value
        for section, attr in RELEASE_SECTIONS:
            lines = [f" {info.digest_for(attr)} {info.size} {info.path}" for info in self.infos]
            paragraph[section] = "\n".join(["", *lines])
        return paragraph.dump()

    def write(self, text: str | None = None) -> Path:
        """Write the manifest to ``Release`` and return its path.

        Args:
            text: Previously rendered manifest text, written verbatim if given
        """
        if text is None:
            text = self.render()
        release_path = self.repo_dir / RELEASE
        try:
            release_path.write_bytes(text.encode("utf-8"))
        except OSError as e:
            raise AptRepoError(f"writing Release failed: {release_path}", kind=ErrorKind.IO, cause=e)
        logger.info(f"Wrote Release listing {len(self.infos)} index files to {release_path}")
        return release_path
