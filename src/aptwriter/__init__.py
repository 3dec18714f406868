"""aptwriter: build and sign flat APT repositories from .deb files."""

from aptwriter.builder import BuildResult, Phase, RepoBuilder
from aptwriter.config import ReleaseHeader, RepoConfig
from aptwriter.exceptions import AptRepoError, ControlParseError, DigestError, ErrorKind
from aptwriter.models import PackageEntry, ReleaseInfo

__all__ = [
    "AptRepoError",
    "BuildResult",
    "ControlParseError",
    "DigestError",
    "ErrorKind",
    "PackageEntry",
    "Phase",
    "ReleaseHeader",
    "ReleaseInfo",
    "RepoBuilder",
    "RepoConfig",
]
