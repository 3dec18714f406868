"""aptwriter command line."""

import logging
from pathlib import Path

import typer
from rich.logging import RichHandler

from aptwriter.builder import RepoBuilder
from aptwriter.exceptions import AptRepoError
from aptwriter.extractor import extract
from aptwriter.utils import source_date, try_parse_date

cli = typer.Typer(help="Build signed flat APT repositories from .deb files.", no_args_is_help=True)

logger = logging.getLogger("aptwriter")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=verbose)],
        force=True,
    )
    logging.getLogger("gnupg").setLevel(logging.INFO if verbose else logging.WARNING)


def _split(value: str | None) -> list[str]:
    return value.replace(",", " ").split() if value else []


@cli.command()
def build(
    repo_dir: Path = typer.Argument(..., help="Repository directory to write into"),
    debs: list[Path] = typer.Argument(None, help="Package archives, in index order"),
    keyring: Path | None = typer.Option(None, help="Exported secret key used for signing"),
    key_id: str | None = typer.Option(None, "--key-id", help="Signing key id or fingerprint"),
    passphrase: str | None = typer.Option(None, help="Passphrase of the signing key"),
    passphrase_file: Path | None = typer.Option(None, help="File whose first line is the passphrase"),
    digest: str | None = typer.Option(None, help="Signature digest algorithm (default: SHA256)"),
    workers: int = typer.Option(1, min=1, help="Archives to extract in parallel"),
    origin: str | None = typer.Option(None, help="Release Origin field"),
    label: str | None = typer.Option(None, help="Release Label field"),
    suite: str | None = typer.Option(None, help="Release Suite field"),
    codename: str | None = typer.Option(None, help="Release Codename field"),
    version: str | None = typer.Option(None, help="Release Version field"),
    architectures: str | None = typer.Option(None, help="Release Architectures field"),
    components: str | None = typer.Option(None, help="Release Components field"),
    description: str | None = typer.Option(None, help="Release Description field"),
    date: str | None = typer.Option(None, help="Release Date field, any parseable date"),
    stamp_date: bool = typer.Option(False, "--stamp-date", help="Set Date to now (or SOURCE_DATE_EPOCH)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Build Packages, Packages.gz and Release, and sign them when a keyring is given."""
    _setup_logging(verbose)

    release_date = None
    if date:
        release_date = try_parse_date(date)
        if release_date is None:
            raise typer.BadParameter(f"unrecognised date: {date}", param_hint="--date")

    options = dict(
        sign=keyring is not None,
        keyring=keyring,
        key_id=key_id,
        passphrase=passphrase,
        passphrase_file=passphrase_file,
        workers=workers,
        release=dict(
            origin=origin,
            label=label,
            suite=suite,
            codename=codename,
            version=version,
            date=release_date,
            architectures=_split(architectures),
            components=_split(components),
            description=description,
        ),
    )
    if digest:
        options["digest"] = digest

    try:
        if stamp_date and release_date is None:
            options["release"]["date"] = source_date()
        builder = RepoBuilder(repo_dir, **options)
        for deb in debs or []:
            builder.add(deb)
        result = builder.create()
    except AptRepoError as e:
        logger.error(f"{e.kind} error: {e}")
        raise typer.Exit(code=1)

    for path in result.files:
        typer.echo(path)


@cli.command()
def show(deb: Path = typer.Argument(..., help="Package archive to inspect")):
    """Print the Packages stanza generated for a single archive."""
    _setup_logging(False)
    try:
        entry = extract(deb)
    except AptRepoError as e:
        logger.error(f"{e.kind} error: {e}")
        raise typer.Exit(code=1)
    typer.echo(entry.to_paragraph().dump(), nl=False)


def main() -> None:
    """Main entry point for the aptwriter CLI."""
    cli()


if __name__ == "__main__":
    main()
