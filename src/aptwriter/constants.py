from os import getenv

# names of the files written into the repository directory
PACKAGES = "Packages"
PACKAGES_GZ = "Packages.gz"
RELEASE = "Release"
RELEASE_GPG = "Release.gpg"
INRELEASE = "InRelease"

# names looked up inside a package archive
CONTROL_ARCHIVE_NAME = "control.tar.gz"
CONTROL_FILE_NAME = "./control"

# signing and extraction defaults, overridable from the environment
DEFAULT_DIGEST = getenv("APTWRITER_DIGEST", "SHA256")
GPG_BINARY = getenv("APTWRITER_GPG_BINARY", "gpg")
DEFAULT_WORKERS = int(getenv("APTWRITER_WORKERS", "1"))

# read size used when streaming files through hashers
CHUNK_SIZE = 64 * 1024

# Packages stanza fields appended after the control fields, in output order
PACKAGE_FILE_FIELDS = ("Filename", "Size", "MD5sum", "SHA1", "SHA256", "SHA512")

# Release manifest digest sections, in output order
RELEASE_SECTIONS = [
    ("MD5Sum", "md5"),
    ("SHA1", "sha1"),
    ("SHA256", "sha256"),
    ("SHA512", "sha512"),
]

# optional Release header fields, in output order
RELEASE_HEADER_FIELDS = [
    "Origin",
    "Label",
    "Suite",
    "Codename",
    "Version",
    "Date",
    "Architectures",
    "Components",
    "Description",
]
