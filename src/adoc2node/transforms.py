#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2node/transforms.py
"""AST transforms applied while converting a document to HTML.

Transforms are ``all2md`` :class:`~all2md.ast.transforms.NodeTransformer`
subclasses. The processor always runs :class:`ImagesDirTransform` first and
then any transforms registered by extensions, in registration order.

Examples
--------
Resolve image targets against a site images directory:

    >>> transform = ImagesDirTransform("/blog/images")
    >>> new_doc = transform.transform(doc)

"""

from __future__ import annotations

import re

from all2md.ast.nodes import Image
from all2md.ast.transforms import NodeTransformer

# Targets with a scheme (https:, data:, mailto:) are never rewritten
URI_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")


def resolve_image_target(imagesdir: str, target: str) -> str:
    """Join an image target onto the images directory.

    Parameters
    ----------
    imagesdir : str
        Resolved ``imagesdir`` attribute (without the soft-set marker)
    target : str
        Image target as written in the source

    Returns
    -------
    str
        Target to emit in the ``src`` attribute

    Examples
    --------
    >>> resolve_image_target("/images", "diagram.png")
    '/images/diagram.png'
    >>> resolve_image_target("/images", "https://example.com/a.png")
    'https://example.com/a.png'

    """
    if not imagesdir or not target or target.startswith("/") or URI_SCHEME_PATTERN.match(target):
        return target
    return f"{imagesdir.rstrip('/')}/{target}"


class ImagesDirTransform(NodeTransformer):
    """Prefix relative image targets with the ``imagesdir`` attribute.

    Parameters
    ----------
    imagesdir : str
        Directory prepended to relative image targets

    """

    def __init__(self, imagesdir: str):
        """Initialize with the images directory."""
        self.imagesdir = imagesdir

    def visit_image(self, node: Image) -> Image:
        """Rewrite the image URL against ``imagesdir``."""
        return Image(
            url=resolve_image_target(self.imagesdir, node.url),
            alt_text=node.alt_text,
            title=node.title,
            width=node.width,
            height=node.height,
            metadata=node.metadata.copy(),
            source_location=node.source_location,
        )


__all__ = ["ImagesDirTransform", "resolve_image_target"]
