"""Package archive (.deb) control metadata extraction."""

import logging
import tarfile
from contextlib import closing
from pathlib import Path

from debian.arfile import ArError, ArFile

from aptwriter.constants import CONTROL_ARCHIVE_NAME, CONTROL_FILE_NAME
from aptwriter.control import parse_control
from aptwriter.digest import default_digests
from aptwriter.exceptions import AptRepoError, ErrorKind
from aptwriter.models import PackageEntry

logger = logging.getLogger(__name__)


def read_control_text(archive_path: Path) -> str:
    """Return the raw ``./control`` text of a package archive.

    The outer ar container is scanned for the first member named exactly
    ``control.tar.gz``; that member is streamed through gzip+tar and scanned for
    ``./control``. Every opened handle is closed on all exit paths.

    Args:
        archive_path: Path to the .deb file

    Raises:
        AptRepoError: If either entry is missing, or the containers are unreadable
    """
    archive_path = Path(archive_path)
    try:
        ar = ArFile(str(archive_path))
        member = next((m for m in ar.getmembers() if m.name == CONTROL_ARCHIVE_NAME), None)
        if member is None:
            raise AptRepoError(f"missing control archive in {archive_path.name}", kind=ErrorKind.FORMAT)

        with closing(member), tarfile.open(fileobj=member, mode="r|gz") as control_tgz:
            for info in control_tgz:
                if info.name != CONTROL_FILE_NAME:
                    continue
                if not info.isfile():
                    break
                handle = control_tgz.extractfile(info)
                if handle is None:
                    break
                with handle:
                    content = handle.read()
                logger.debug(f"Read {len(content)} bytes of control data from {archive_path.name}")
                return content.decode("utf-8")
    except AptRepoError:
        raise
    except UnicodeDecodeError as e:
        raise AptRepoError(f"control file is not UTF-8 in {archive_path.name}", kind=ErrorKind.FORMAT, cause=e)
    except (ArError, tarfile.TarError, EOFError) as e:
        raise AptRepoError(f"unreadable package archive: {archive_path}", kind=ErrorKind.FORMAT, cause=e)
    except OSError as e:
        raise AptRepoError(f"reading package archive failed: {archive_path}", kind=ErrorKind.IO, cause=e)

    raise AptRepoError(f"missing control file in control archive of {archive_path.name}", kind=ErrorKind.FORMAT)


def extract(archive_path: Path) -> PackageEntry:
    """Build the index entry for one package archive.

    Digests and size are computed over the whole archive file, not the control member.
    """
    archive_path = Path(archive_path)
    control = parse_control(read_control_text(archive_path))
    hashes = default_digests(archive_path)
    try:
        size = archive_path.stat().st_size
    except OSError as e:
        raise AptRepoError(f"reading package archive failed: {archive_path}", kind=ErrorKind.IO, cause=e)

    entry = PackageEntry(
        control={str(key): value for key, value in control.items()},
        filename=archive_path.name,
        size=size,
        **hashes.model_dump(),
    )
    logger.debug(f"Extracted {entry.name} {entry.version} from {archive_path.name}")
    return entry
