"""Strict parser for a package's own control stanza."""

import logging

from debian import deb822

from aptwriter.exceptions import ControlParseError

logger = logging.getLogger(__name__)


def _is_continuation(line: str) -> bool:
    return line[:1] in (" ", "\t")


def parse_control(text: str) -> deb822.Deb822:
    """Parse RFC822-style control text into an ordered paragraph.

    A field starts in column 0 as ``Name: value``; following lines that start
    with whitespace continue the previous field and are kept verbatim (minus
    trailing whitespace), so multi-line fields such as Description keep their
    structure. Field names are not checked against any schema.

    Args:
        text: The contents of a ``control`` file

    Returns:
        A Deb822 paragraph with fields in file order

    Raises:
        ControlParseError: On a continuation line before any field, a line
            without a ``:`` separator, a repeated field, or a second stanza
    """
    fields: dict[str, list[str]] = {}
    seen_names: set[str] = set()
    current: str | None = None
    seen_blank = False

    # only "\n" ends a line; other Unicode line breaks belong to the value
    for lineno, raw in enumerate(text.split("\n"), start=1):
        line = raw.rstrip(" \t\r")
        if not line:
            # blank lines end the stanza; only trailing ones are allowed
            if fields:
                seen_blank = True
            continue
        if seen_blank:
            raise ControlParseError("control text contains more than one stanza", line=lineno)

        if _is_continuation(line):
            if current is None:
                raise ControlParseError("continuation line before any field", line=lineno)
            fields[current].append(line)
            continue

        name, sep, value = line.partition(":")
        if not sep or not name or name != name.strip():
            raise ControlParseError(f"malformed field line: {line!r}", line=lineno)
        if name.lower() in seen_names:
            raise ControlParseError(f"duplicate field: {name}", line=lineno)
        seen_names.add(name.lower())
        current = name
        fields[name] = [value.strip()]

    if not fields:
        raise ControlParseError("control text is empty")

    paragraph = deb822.Deb822()
    for name, lines in fields.items():
        paragraph[name] = "\n".join(lines)
    logger.debug(f"Parsed control stanza with {len(fields)} fields")
    return paragraph
