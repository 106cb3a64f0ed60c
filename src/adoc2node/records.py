#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2node/records.py
"""Content node records emitted for converted AsciiDoc documents.

:meth:`DocumentRecord.to_dict` produces the node shape handed to the
content graph::

    {
        "id": "...",
        "parent": "<source node id>",
        "internal": {"type": "Asciidoc", "mediaType": "text/html", "contentDigest": "..."},
        "children": [],
        "html": "<p>Body.</p>\\n",
        "document": {"title": "Title: Sub", "subtitle": "Sub", "main": "Title"},
        "revision": None,
        "author": None,
        "pageAttributes": {},
    }

"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from adoc2node.constants import NODE_MEDIA_TYPE, NODE_TYPE


@dataclass(frozen=True)
class Title:
    """Partitioned document title."""

    main: str
    subtitle: str = ""
    combined: str = ""

    def to_dict(self) -> dict[str, str]:
        """Return the ``document`` entry of the node."""
        return {"title": self.combined, "subtitle": self.subtitle, "main": self.main}


@dataclass(frozen=True)
class Revision:
    """Revision information declared by a document."""

    date: Optional[str] = None
    number: Optional[str] = None
    remark: Optional[str] = None

    def to_dict(self) -> dict[str, Optional[str]]:
        """Return the ``revision`` entry of the node."""
        return {"date": self.date, "number": self.number, "remark": self.remark}


@dataclass(frozen=True)
class Author:
    """Primary author of a document; missing name parts are empty strings."""

    full_name: str = ""
    first_name: str = ""
    last_name: str = ""
    middle_name: str = ""
    author_initials: str = ""
    email: str = ""

    def to_dict(self) -> dict[str, str]:
        """Return the ``author`` entry of the node."""
        return {
            "fullName": self.full_name,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "middleName": self.middle_name,
            "authorInitials": self.author_initials,
            "email": self.email,
        }


@dataclass(frozen=True)
class DocumentRecord:
    """Content node for one converted AsciiDoc source.

    Parameters
    ----------
    id : str
        Node identity derived from the source node id
    parent : str
        Identity of the source node
    html : str
        Rendered HTML fragment
    document : Title
        Partitioned title
    revision : Revision or None
        Present only when the source declares revision info
    author : Author or None
        Present only when the source declares an author
    page_attributes : dict[str, str]
        ``page-*`` attributes with the prefix stripped
    content_digest : str
        Digest of the node, empty until :meth:`with_digest` is called

    """

    id: str
    parent: str
    html: str
    document: Title
    revision: Optional[Revision] = None
    author: Optional[Author] = None
    page_attributes: dict[str, Any] = field(default_factory=dict)
    content_digest: str = ""
    type: str = NODE_TYPE
    media_type: str = NODE_MEDIA_TYPE

    def to_dict(self) -> dict[str, Any]:
        """Return the node shape handed to the content graph."""
        internal: dict[str, str] = {"type": self.type, "mediaType": self.media_type}
        if self.content_digest:
            internal["contentDigest"] = self.content_digest
        return {
            "id": self.id,
            "parent": self.parent,
            "internal": internal,
            "children": [],
            "html": self.html,
            "document": self.document.to_dict(),
            "revision": self.revision.to_dict() if self.revision is not None else None,
            "author": self.author.to_dict() if self.author is not None else None,
            "pageAttributes": dict(self.page_attributes),
        }

    def with_digest(self, content_digest: str) -> DocumentRecord:
        """Return a copy carrying the content digest."""
        return replace(self, content_digest=content_digest)


__all__ = ["Author", "DocumentRecord", "Revision", "Title"]
