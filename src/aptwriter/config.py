"""Repository build configuration."""

from datetime import datetime
from pathlib import Path
from typing import Self

from pydantic import BaseModel, Field, ValidationError, model_validator

from aptwriter.constants import DEFAULT_DIGEST, DEFAULT_WORKERS
from aptwriter.exceptions import AptRepoError, ErrorKind
from aptwriter.utils import format_release_date

OptionalStr = str | None


class ReleaseHeader(BaseModel):
    """Optional repository-level fields written at the top of Release."""

    origin: OptionalStr = None
    label: OptionalStr = None
    suite: OptionalStr = None
    codename: OptionalStr = None
    version: OptionalStr = None
    date: datetime | None = None
    architectures: list[str] = Field(default_factory=list)
    components: list[str] = Field(default_factory=list)
    description: OptionalStr = None

    def to_fields(self) -> dict[str, str]:
        """Map to Release field names, dropping unset values."""
        fields = {
            "Origin": self.origin,
            "Label": self.label,
            "Suite": self.suite,
            "Codename": self.codename,
            "Version": self.version,
            "Date": format_release_date(self.date) if self.date else None,
            "Architectures": " ".join(self.architectures) or None,
            "Components": " ".join(self.components) or None,
            "Description": self.description,
        }
        return {k: v for k, v in fields.items() if v}


class RepoConfig(BaseModel):
    """Everything a RepoBuilder needs to know before packages are added."""

    repo_dir: Path
    sign: bool = False
    keyring: Path | None = None
    key_id: OptionalStr = None
    passphrase: OptionalStr = Field(default=None, repr=False)
    passphrase_file: Path | None = None
    digest: str = DEFAULT_DIGEST
    workers: int = Field(default=DEFAULT_WORKERS, ge=1)
    release: ReleaseHeader = Field(default_factory=ReleaseHeader)

    @model_validator(mode="after")
    def check_paths(self) -> Self:
        if not self.repo_dir.exists() and not self.repo_dir.absolute().parent.is_dir():
            raise ValueError(f"repo_dir does not exist: {self.repo_dir}")
        if self.repo_dir.exists() and not self.repo_dir.is_dir():
            raise ValueError(f"repo_dir is not a directory: {self.repo_dir}")
        if not self.sign:
            return self

        if self.keyring is None:
            raise ValueError("keyring is required when signing")
        if not self.keyring.is_file():
            raise ValueError(f"keyring does not exist: {self.keyring}")
        if not self.key_id:
            raise ValueError("key_id is required when signing")
        if self.passphrase is not None and self.passphrase_file is not None:
            raise ValueError("passphrase and passphrase_file are mutually exclusive")
        if self.passphrase is None and self.passphrase_file is None:
            raise ValueError("one of passphrase or passphrase_file is required when signing")
        if self.passphrase_file is not None and not self.passphrase_file.is_file():
            raise ValueError(f"passphrase file does not exist: {self.passphrase_file}")
        return self

    @classmethod
    def create(cls, **kwargs) -> Self:
        """Validate keyword options, raising AptRepoError instead of ValidationError."""
        try:
            return cls(**kwargs)
        except ValidationError as e:
            messages = "; ".join(err["msg"].removeprefix("Value error, ") for err in e.errors())
            raise AptRepoError(f"invalid configuration: {messages}", kind=ErrorKind.CONFIG) from e
