"""Data models for repository index entries."""

import logging
from typing import Annotated

from debian import deb822
from pydantic import BaseModel, ConfigDict, Field

from aptwriter.constants import PACKAGE_FILE_FIELDS

logger = logging.getLogger(__name__)

Md5Hex = Annotated[str, Field(pattern=r"^[0-9a-f]{32}$")]
Sha1Hex = Annotated[str, Field(pattern=r"^[0-9a-f]{40}$")]
Sha256Hex = Annotated[str, Field(pattern=r"^[0-9a-f]{64}$")]
Sha512Hex = Annotated[str, Field(pattern=r"^[0-9a-f]{128}$")]


class DefaultHashes(BaseModel):
    """The digest set every indexed file carries."""

    model_config = ConfigDict(frozen=True)

    md5: Md5Hex
    sha1: Sha1Hex
    sha256: Sha256Hex
    sha512: Sha512Hex


class PackageEntry(DefaultHashes):
    """One package archive as it appears in a Packages index."""

    control: dict[str, str] = Field(repr=False)
    filename: str
    size: int = Field(ge=0)

    @property
    def name(self) -> str | None:
        return self.control.get("Package")

    @property
    def version(self) -> str | None:
        return self.control.get("Version")

    def file_fields(self) -> dict[str, str]:
        """Fields derived from the archive file itself, in stanza order."""
        values = (self.filename, str(self.size), self.md5, self.sha1, self.sha256, self.sha512)
        return dict(zip(PACKAGE_FILE_FIELDS, values, strict=True))

    def to_paragraph(self) -> deb822.Deb822:
        """Build the Packages stanza: control fields, then file fields."""
        file_fields = self.file_fields()
        lowered = {k.lower(): k for k in file_fields}

        paragraph = deb822.Deb822()
        for key, value in self.control.items():
            if key.lower() in lowered:
                computed = file_fields[lowered[key.lower()]]
                if value.strip() != computed:
                    logger.warning(
                        f"{self.filename}: control field {key} ({value.strip()}) "
                        f"replaced by computed value ({computed})"
                    )
                continue
            paragraph[key] = value
        for key, value in file_fields.items():
            paragraph[key] = value
        return paragraph


class ReleaseInfo(DefaultHashes):
    """An index file listed in the Release manifest."""

    path: str
    size: int = Field(ge=0)

    def digest_for(self, attr: str) -> str:
        return getattr(self, attr)
