"""Packages index assembly and serialization."""

import gzip
import logging
import os
from collections.abc import Iterator
from pathlib import Path

from aptwriter.constants import PACKAGES, PACKAGES_GZ
from aptwriter.exceptions import AptRepoError, ErrorKind
from aptwriter.models import PackageEntry

logger = logging.getLogger(__name__)


class PackageIndex:
    """Ordered collection of package entries rendered as a Packages file.

    Entries are kept in the order they were added; the index is never sorted.
    """

    def __init__(self, entries: list[PackageEntry] | None = None):
        self._entries: list[PackageEntry] = list(entries or [])

    def add(self, entry: PackageEntry) -> None:
        self._entries.append(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PackageEntry]:
        return iter(self._entries)

    def render(self) -> str:
        """Serialize all entries, one stanza each, separated by a single blank line."""
        return "\n".join(entry.to_paragraph().dump() for entry in self._entries)

    def write(self, repo_dir: Path) -> tuple[Path, Path]:
        """Write ``Packages`` and ``Packages.gz`` into repo_dir.

        Both files carry the same UTF-8 bytes; the gzip member has no file name
        and a zero mtime so identical input always produces identical output.

        Returns:
            Tuple of (plain path, gzip path)
        """
        data = self.render().encode("utf-8")
        plain_path = Path(repo_dir) / PACKAGES
        gz_path = Path(repo_dir) / PACKAGES_GZ

        # both files are staged next to their targets and swapped in together
        plain_tmp = plain_path.with_name(f".{PACKAGES}.tmp")
        gz_tmp = gz_path.with_name(f".{PACKAGES_GZ}.tmp")
        target = plain_path
        try:
            plain_tmp.write_bytes(data)
            target = gz_path
            with gz_tmp.open("wb") as raw, gzip.GzipFile(filename="", mode="wb", fileobj=raw, mtime=0) as gz:
                gz.write(data)
            target = plain_path
            os.replace(plain_tmp, plain_path)
            target = gz_path
            os.replace(gz_tmp, gz_path)
        except OSError as e:
            raise AptRepoError(f"writing packages failed: {target}", kind=ErrorKind.IO, cause=e)
        finally:
            plain_tmp.unlink(missing_ok=True)
            gz_tmp.unlink(missing_ok=True)

        logger.info(f"Wrote {len(self._entries)} package entries to {plain_path} ({len(data)} bytes)")
        return plain_path, gz_path
