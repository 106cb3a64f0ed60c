#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2node/header.py
"""AsciiDoc document header reader.

The block parser in ``all2md`` treats ``= Title`` as an ordinary level-1
heading and has no notion of author or revision lines. This module splits
the document header off the source text and turns it into attributes the
same way an AsciiDoc processor does::

    = Document Title: A Subtitle
    Jane Q. Doe <jane@example.com>
    v1.2, 2024-05-01: Second draft
    :page-category: tech

The author line is only recognized directly under the title, and the
revision line only directly under the author line. Attribute entries follow
until the first blank line.

"""

from __future__ import annotations

import re
from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from typing import Optional

from adoc2node.constants import TITLE_SEPARATOR

TITLE_PATTERN = re.compile(r"^=\s+(\S.*?)\s*$")
ATTRIBUTE_ENTRY_PATTERN = re.compile(r"^:(!?)([A-Za-z0-9_][A-Za-z0-9_-]*)(!?):(?:\s+(.*?))?\s*$")
ATTRIBUTE_REFERENCE_PATTERN = re.compile(r"\{([A-Za-z0-9_][A-Za-z0-9_-]*)\}")
AUTHOR_INFO_PATTERN = re.compile(
    r"^(\w[\w\-'.]*)(?: +(\w[\w\-'.]*))?(?: +(\w[\w\-'.]*))?(?: +<([^>]+)>)?$"
)
REVISION_NUMBER_PREFIX = re.compile(r"^[^\d{]*")
BARE_REVISION_NUMBER = re.compile(r"^v\d")


@dataclass
class DocumentHeader:
    """Result of reading the header of an AsciiDoc source.

    Parameters
    ----------
    title : str or None
        Raw document title, without the leading ``=``
    attributes : dict[str, str or None]
        Attributes declared by the header in declaration order; ``None``
        marks an attribute the header unsets
    body : str
        Source text following the header

    """

    title: Optional[str] = None
    attributes: dict[str, Optional[str]] = field(default_factory=dict)
    body: str = ""

    @property
    def has_author_line(self) -> bool:
        """Return True when the header declared an author."""
        return self.attributes.get("author") is not None


def _is_comment(line: str) -> bool:
    return line.startswith("//") and not line.startswith("////")


def substitute_attribute_references(value: str, attributes: Mapping[str, Optional[str]]) -> str:
    """Replace ``{name}`` references with known attribute values.

    References to unknown or unset attributes are kept literally.
    """

    def replace(match: re.Match[str]) -> str:
        resolved = attributes.get(match.group(1).lower())
        return resolved if resolved is not None else match.group(0)

    return ATTRIBUTE_REFERENCE_PATTERN.sub(replace, value)


def parse_attribute_entry(line: str) -> Optional[tuple[str, Optional[str]]]:
    """Parse a ``:name: value`` or ``:name!:`` line.

    Returns
    -------
    tuple or None
        ``(name, value)`` with ``value`` None for an unset entry, or None
        when the line is not an attribute entry

    """
    match = ATTRIBUTE_ENTRY_PATTERN.match(line)
    if not match:
        return None
    name = match.group(2).lower()
    if match.group(1) or match.group(3):
        return name, None
    return name, match.group(4) or ""


def _author_from_name(raw_name: str) -> dict[str, str]:
    """Split one author entry into its name attributes."""
    raw_name = " ".join(raw_name.split())
    match = AUTHOR_INFO_PATTERN.match(raw_name)
    if not match:
        # Not a "First Middle Last <email>" shape, keep it whole
        return {"author": raw_name, "firstname": raw_name, "authorinitials": raw_name[:1]}

    first, middle, last, email = match.groups()
    if last is None and middle is not None:
        middle, last = None, middle

    parts = [part.replace("_", " ") for part in (first, middle, last) if part is not None]
    info = {
        "author": " ".join(parts),
        "firstname": parts[0],
        "authorinitials": "".join(part[0] for part in parts),
    }
    if middle is not None:
        info["middlename"] = middle.replace("_", " ")
    if last is not None:
        info["lastname"] = last.replace("_", " ")
    if email is not None:
        info["email"] = email
    return info


def parse_author_line(line: str) -> dict[str, str]:
    """Turn an author line into document attributes.

    Several authors may be separated by ``;``. The first one fills
    ``author``, ``firstname``, ``middlename``, ``lastname``,
    ``authorinitials`` and ``email``; later ones get numbered attributes
    (``author_2``, ``email_2``, ...).

    Parameters
    ----------
    line : str
        Author line from the header

    Returns
    -------
    dict[str, str]
        Author attributes, including ``authorcount`` and ``authors``

    """
    entries = [entry.strip() for entry in line.split(";") if entry.strip()]
    attributes: dict[str, str] = {}
    names = []
    for index, entry in enumerate(entries, start=1):
        info = _author_from_name(entry)
        names.append(info["author"])
        if index == 1:
            attributes.update(info)
        for key, value in info.items():
            attributes[f"{key}_{index}"] = value

    attributes["authorcount"] = str(len(entries))
    attributes["authors"] = ", ".join(names)
    return attributes


def parse_revision_line(line: str) -> dict[str, str]:
    """Turn a revision line (``v1.0, 2024-01-01: remark``) into attributes.

    A line without a comma is a revision date, unless it looks like a bare
    version number such as ``v2.1``.
    """
    attributes: dict[str, str] = {}
    head, separator, remark = line.partition(":")
    if separator and remark.strip():
        attributes["revremark"] = remark.strip()

    head = head.strip().rstrip(",").strip()
    if "," in head:
        number, _, date = head.partition(",")
        number = REVISION_NUMBER_PREFIX.sub("", number.strip())
        if number:
            attributes["revnumber"] = number
        if date.strip():
            attributes["revdate"] = date.strip()
    elif BARE_REVISION_NUMBER.match(head):
        attributes["revnumber"] = head[1:]
    elif head:
        attributes["revdate"] = head
    return attributes


def partition_title(title: str, separator: str = TITLE_SEPARATOR) -> tuple[str, Optional[str]]:
    """Split a title into main title and subtitle on the last separator.

    Examples
    --------
    >>> partition_title("Guide: Part One: Basics")
    ('Guide: Part One', 'Basics')
    >>> partition_title("Guide")
    ('Guide', None)

    """
    main, found, subtitle = title.rpartition(separator)
    if not found or not main.strip():
        return title, None
    return main.rstrip(), subtitle.strip()


def read_header(
    text: str, attributes: Optional[Mapping[str, str]] = None, locked: Collection[str] = ()
) -> DocumentHeader:
    """Split an AsciiDoc source into its header and body.

    ``{name}`` references in attribute entries resolve against
    ``attributes`` and the header values declared before them. Names in
    ``locked`` always resolve to the value given in ``attributes``.

    Parameters
    ----------
    text : str
        Full AsciiDoc source
    attributes : Mapping, optional
        Attributes known before the header is read
    locked : collection of str, optional
        Names the header may not redefine for reference lookups

    Returns
    -------
    DocumentHeader
        Title, header attributes and the remaining body text

    """
    lines = text.splitlines()
    header = DocumentHeader()
    known: dict[str, Optional[str]] = dict(attributes or {})
    index = 0

    def declare(name: str, value: Optional[str]) -> None:
        header.attributes[name] = value
        if name not in locked:
            known[name] = value

    def consume_entries() -> None:
        nonlocal index
        while index < len(lines):
            line = lines[index].strip()
            if not line:
                return
            if _is_comment(line):
                index += 1
                continue
            # Values ending in a backslash continue on the next line
            while line.endswith(" \\") and index + 1 < len(lines):
                index += 1
                line = line[:-2] + " " + lines[index].strip()
            entry = parse_attribute_entry(line)
            if entry is None:
                return
            name, value = entry
            if value is not None:
                value = substitute_attribute_references(value, known)
            declare(name, value)
            index += 1

    # Leading blank lines, comments and attribute entries may precede the title
    while index < len(lines):
        stripped = lines[index].strip()
        if not stripped or _is_comment(stripped):
            index += 1
            continue
        if ATTRIBUTE_ENTRY_PATTERN.match(stripped):
            consume_entries()
            continue
        break

    if index < len(lines):
        title_match = TITLE_PATTERN.match(lines[index].strip())
        if title_match:
            header.title = title_match.group(1)
            index += 1

            author_line = lines[index].strip() if index < len(lines) else ""
            if author_line and not _is_comment(author_line) and not ATTRIBUTE_ENTRY_PATTERN.match(author_line):
                for name, value in parse_author_line(author_line).items():
                    declare(name, value)
                index += 1

                revision_line = lines[index].strip() if index < len(lines) else ""
                if (
                    revision_line
                    and not _is_comment(revision_line)
                    and not ATTRIBUTE_ENTRY_PATTERN.match(revision_line)
                ):
                    for name, value in parse_revision_line(revision_line).items():
                        declare(name, value)
                    index += 1

            consume_entries()

    # An :author: entry without an author line still yields the name parts
    author_entry = header.attributes.get("author")
    if author_entry and "firstname" not in header.attributes:
        derived = _author_from_name(author_entry)
        derived.pop("author")
        for key, value in derived.items():
            header.attributes.setdefault(key, value)

    header.body = "\n".join(lines[index:])
    return header


__all__ = [
    "DocumentHeader",
    "parse_attribute_entry",
    "parse_author_line",
    "parse_revision_line",
    "partition_title",
    "read_header",
    "substitute_attribute_references",
]
