import io
import shutil
import tarfile
from pathlib import Path
from textwrap import dedent

import pytest

SAMPLE_CONTROL = dedent(
    """\
    Package: hello
    Version: 2.10-3
    Architecture: amd64
    Maintainer: Jane Doe <jane@example.org>
    Installed-Size: 280
    Depends: libc6 (>= 2.34)
    Section: devel
    Priority: optional
    Homepage: https://www.gnu.org/software/hello/
    Description: example package based on GNU hello
     The GNU hello program produces a familiar, friendly greeting.
     .
     It allows non-programmers to use a classic computer science tool.
    """
)


def control_text(name: str, version: str = "1.0", **extra: str) -> str:
    lines = [f"Package: {name}", f"Version: {version}", "Architecture: all", "Maintainer: Test <test@example.org>"]
    lines += [f"{k.replace('_', '-')}: {v}" for k, v in extra.items()]
    lines.append(f"Description: {name} test package")
    return "\n".join(lines) + "\n"


def _ar_member(name: str, data: bytes) -> bytes:
    header = f"{name:<16}{0:<12}{0:<6}{0:<6}{'100644':<8}{len(data):<10}".encode("ascii") + b"`\n"
    padding = b"\n" if len(data) % 2 else b""
    return header + data + padding


def write_ar(path: Path, members: list[tuple[str, bytes]]) -> Path:
    path.write_bytes(b"!<arch>\n" + b"".join(_ar_member(name, data) for name, data in members))
    return path


def tar_gz(files: dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        root = tarfile.TarInfo("./")
        root.type = tarfile.DIRTYPE
        root.mode = 0o755
        tar.addfile(root)
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def build_deb(
    path: Path,
    control: str | None = SAMPLE_CONTROL,
    *,
    with_control_archive: bool = True,
    control_archive_name: str = "control.tar.gz",
) -> Path:
    """Write a minimal but well-formed .deb file."""
    control_files = {"./md5sums": b"d41d8cd98f00b204e9800998ecf8427e  usr/share/doc/empty\n"}
    if control is not None:
        control_files["./control"] = control.encode("utf-8")

    members = [("debian-binary", b"2.0\n")]
    if with_control_archive:
        members.append((control_archive_name, tar_gz(control_files)))
    members.append(("data.tar.gz", tar_gz({"./usr/share/doc/empty": b""})))
    return write_ar(path, members)


@pytest.fixture
def make_deb(tmp_path):
    """Factory writing .deb files into a per-test directory."""
    debs_dir = tmp_path / "debs"
    debs_dir.mkdir()

    def _make(filename: str, control: str | None = SAMPLE_CONTROL, **kwargs) -> Path:
        return build_deb(debs_dir / filename, control, **kwargs)

    return _make


@pytest.fixture
def repo_dir(tmp_path) -> Path:
    return tmp_path / "repo"


@pytest.fixture(scope="session")
def gpg_key(tmp_path_factory):
    """A freshly generated signing key exported to a keyring file."""
    if shutil.which("gpg") is None:
        pytest.skip("gpg is not installed")
    gnupg = pytest.importorskip("gnupg")

    home = tmp_path_factory.mktemp("gnupg")
    home.chmod(0o700)
    gpg = gnupg.GPG(gnupghome=str(home))
    passphrase = "correct horse battery staple"
    key_input = gpg.gen_key_input(
        key_type="RSA",
        key_length=2048,
        name_real="aptwriter test",
        name_email="aptwriter@example.org",
        passphrase=passphrase,
    )
    key = gpg.gen_key(key_input)
    if not key.fingerprint:
        pytest.skip(f"gpg could not generate a key: {key.stderr}")

    keyring = home.parent / "signing-key.asc"
    keyring.write_text(gpg.export_keys(key.fingerprint, secret=True, passphrase=passphrase))
    return {"gpg": gpg, "keyring": keyring, "fingerprint": key.fingerprint, "passphrase": passphrase}
