#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2node/options.py
"""Plugin option normalization for the AsciiDoc processor.

The raw plugin configuration is a plain mapping, usually read from a config
file, using the keys of the site-generator plugin surface:

- ``fileExtensions``: source extensions to process
- ``attributes``: document attributes passed to the processor
- ``plugins``: ordered ``{"resolve": ..., "pluginOptions": {...}}`` entries
- ``parserOptions``: keyword arguments for ``all2md`` ``AsciiDocOptions``

Snake case spellings (``file_extensions``, ``plugin_options``,
``parser_options``) are accepted as well.

Normalizing produces a frozen :class:`ProcessorOptions`. Results are cached
per distinct (configuration, path prefix) value by :class:`OptionsCache`,
which is owned by whoever drives the conversions rather than living in a
module global.

Examples
--------
    >>> options = normalize_options({"attributes": {}}, "/blog")
    >>> options.attributes["imagesdir"]
    '/blog/images@'

"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Optional

from adoc2node.constants import DEFAULT_FILE_EXTENSIONS, DEFAULT_IMAGES_DIR, IMAGES_DIR_ATTRIBUTE
from adoc2node.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

AttributeValue = Any


def _empty_mapping() -> Mapping[str, Any]:
    return MappingProxyType({})


def _get_option(config: Mapping[str, Any], camel_name: str, snake_name: str, default: Any = None) -> Any:
    """Read an option by its camelCase name, falling back to snake_case."""
    if camel_name in config:
        return config[camel_name]
    return config.get(snake_name, default)


@dataclass(frozen=True)
class ExtensionDescriptor:
    """Reference to an extension plus the options it is registered with.

    Parameters
    ----------
    resolve : str or object
        Registry name, entry point name, dotted import path
        (``package.module`` or ``package.module:attr``) or the extension
        object itself
    plugin_options : Mapping[str, Any], default empty
        Options handed to the extension's ``register`` call

    """

    resolve: Any
    plugin_options: Mapping[str, Any] = field(default_factory=_empty_mapping)

    @classmethod
    def from_dict(cls, data: Any) -> ExtensionDescriptor:
        """Build a descriptor from a ``{"resolve", "pluginOptions"}`` mapping.

        Parameters
        ----------
        data : Mapping or ExtensionDescriptor
            Raw descriptor

        Returns
        -------
        ExtensionDescriptor
            Parsed descriptor

        Raises
        ------
        ConfigurationError
            If the entry is not a mapping or lacks ``resolve``

        """
        if isinstance(data, ExtensionDescriptor):
            return data
        if isinstance(data, str):
            return cls(resolve=data)
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Plugin entries must be mappings with a 'resolve' key, got {type(data).__name__}",
                parameter_name="plugins",
                parameter_value=data,
            )
        if not data.get("resolve"):
            raise ConfigurationError("Plugin entry is missing 'resolve'", parameter_name="plugins", parameter_value=data)

        plugin_options = _get_option(data, "pluginOptions", "plugin_options") or {}
        if not isinstance(plugin_options, Mapping):
            raise ConfigurationError(
                f"pluginOptions for '{data['resolve']}' must be a mapping",
                parameter_name="pluginOptions",
                parameter_value=plugin_options,
            )
        return cls(resolve=data["resolve"], plugin_options=MappingProxyType(dict(plugin_options)))

    def to_dict(self) -> dict[str, Any]:
        """Return the descriptor in its configuration-file shape."""
        return {"resolve": self.resolve, "pluginOptions": dict(self.plugin_options)}

    def __deepcopy__(self, memo: dict[int, Any]) -> ExtensionDescriptor:
        """Descriptors are immutable, so copies share the instance."""
        return self


@dataclass(frozen=True)
class ProcessorOptions:
    """Processor-ready options derived from the raw plugin configuration.

    Parameters
    ----------
    attributes : Mapping[str, str | bool]
        Document attributes; ``imagesdir`` is always present
    plugins : tuple of ExtensionDescriptor
        Extensions to register, in declaration order
    parser_options : Mapping[str, Any]
        Keyword arguments for ``all2md.options.asciidoc.AsciiDocOptions``
    path_prefix : str
        Site path prefix the options were computed for

    """

    attributes: Mapping[str, AttributeValue] = field(default_factory=_empty_mapping)
    plugins: tuple[ExtensionDescriptor, ...] = ()
    parser_options: Mapping[str, Any] = field(default_factory=_empty_mapping)
    path_prefix: str = ""

    @property
    def imagesdir(self) -> str:
        """Return the computed ``imagesdir`` attribute."""
        return str(self.attributes[IMAGES_DIR_ATTRIBUTE])

    def to_dict(self) -> dict[str, Any]:
        """Return a plain, mutable copy of the options."""
        return {
            "attributes": dict(self.attributes),
            "plugins": [plugin.to_dict() for plugin in self.plugins],
            "parserOptions": copy.deepcopy(dict(self.parser_options)),
        }


def with_path_prefix(path_prefix: str, url: str) -> str:
    """Prepend the site path prefix to a URL.

    Only the first doubled slash produced by the concatenation is collapsed,
    so ``"/" + "/images"`` gives ``"/images"`` while later ``//`` sequences in
    the URL are left as they are.

    Parameters
    ----------
    path_prefix : str
        Site path prefix, possibly empty
    url : str
        Site-relative URL

    Returns
    -------
    str
        Prefixed URL

    """
    return (path_prefix + url).replace("//", "/", 1)


def resolve_file_extensions(plugin_options: Mapping[str, Any] | None) -> tuple[str, ...]:
    """Return the source extensions the configuration asks to process.

    A ``fileExtensions`` value that is not a list (or tuple) is ignored in
    favour of the defaults.

    Parameters
    ----------
    plugin_options : Mapping or None
        Raw plugin configuration

    Returns
    -------
    tuple of str
        Allowed extensions, matched exactly and case-sensitively

    """
    configured = _get_option(plugin_options or {}, "fileExtensions", "file_extensions")
    if isinstance(configured, (list, tuple)):
        return tuple(configured)
    return DEFAULT_FILE_EXTENSIONS


def normalize_options(plugin_options: Mapping[str, Any] | None, path_prefix: Optional[str] = None) -> ProcessorOptions:
    """Derive processor options from the raw plugin configuration.

    The configuration is deep-copied first so the processor never sees
    caller-owned objects.

    Parameters
    ----------
    plugin_options : Mapping or None
        Raw plugin configuration
    path_prefix : str or None, default None
        Site path prefix; ``None`` means no prefix

    Returns
    -------
    ProcessorOptions
        Frozen processor options

    Raises
    ------
    ConfigurationError
        If the configuration or one of its sections has the wrong shape

    """
    if plugin_options is None:
        plugin_options = {}
    if not isinstance(plugin_options, Mapping):
        raise ConfigurationError(
            f"Plugin options must be a mapping, got {type(plugin_options).__name__}",
            parameter_value=plugin_options,
        )

    current_path_prefix = path_prefix or ""
    cloned = copy.deepcopy(dict(plugin_options))

    attributes = cloned.get("attributes")
    if attributes is None:
        attributes = {}
    if not isinstance(attributes, Mapping):
        raise ConfigurationError("'attributes' must be a mapping", parameter_name="attributes", parameter_value=attributes)
    attributes = dict(attributes)
    configured_imagesdir = attributes.get(IMAGES_DIR_ATTRIBUTE)
    # True, False and None carry no directory and fall back to the default
    if isinstance(configured_imagesdir, bool) or configured_imagesdir is None:
        configured_imagesdir = ""
    attributes[IMAGES_DIR_ATTRIBUTE] = with_path_prefix(
        current_path_prefix, str(configured_imagesdir) or DEFAULT_IMAGES_DIR
    )

    raw_plugins = cloned.get("plugins") or []
    if isinstance(raw_plugins, (str, Mapping)) or not isinstance(raw_plugins, Sequence):
        raise ConfigurationError("'plugins' must be a list", parameter_name="plugins", parameter_value=raw_plugins)
    plugins = tuple(ExtensionDescriptor.from_dict(entry) for entry in raw_plugins)

    parser_options = _get_option(cloned, "parserOptions", "parser_options") or {}
    if not isinstance(parser_options, Mapping):
        raise ConfigurationError(
            "'parserOptions' must be a mapping", parameter_name="parserOptions", parameter_value=parser_options
        )

    return ProcessorOptions(
        attributes=MappingProxyType(attributes),
        plugins=plugins,
        parser_options=MappingProxyType(dict(parser_options)),
        path_prefix=current_path_prefix,
    )


def _key_fallback(value: Any) -> Any:
    if isinstance(value, ExtensionDescriptor):
        return value.to_dict()
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (set, frozenset)):
        return sorted(repr(item) for item in value)
    return repr(value)


def options_cache_key(plugin_options: Mapping[str, Any] | None, path_prefix: Optional[str] = None) -> str:
    """Compute the value key used to memoize :func:`normalize_options`.

    Deep-equal configurations produce the same key. Objects without a JSON
    form (extension objects passed directly) contribute their ``repr``.
    """
    return json.dumps([plugin_options or {}, path_prefix or ""], sort_keys=True, default=_key_fallback)


class OptionsCache:
    """Memoize :func:`normalize_options` by configuration value.

    Cached :class:`ProcessorOptions` are frozen, so sharing one instance
    between concurrent conversions is safe.

    Examples
    --------
    >>> cache = OptionsCache()
    >>> first = cache.get({"attributes": {}}, "/blog")
    >>> cache.get({"attributes": {}}, "/blog") is first
    True

    """

    def __init__(self) -> None:
        """Initialize an empty cache."""
        self._entries: dict[str, ProcessorOptions] = {}

    def get(self, plugin_options: Mapping[str, Any] | None, path_prefix: Optional[str] = None) -> ProcessorOptions:
        """Return normalized options, computing them on first use."""
        key = options_cache_key(plugin_options, path_prefix)
        cached = self._entries.get(key)
        if cached is not None:
            return cached

        options = normalize_options(plugin_options, path_prefix)
        self._entries[key] = options
        logger.debug(f"Normalized plugin options for path prefix '{options.path_prefix}'")
        return options

    def clear(self) -> None:
        """Drop every cached entry."""
        self._entries.clear()

    def __len__(self) -> int:
        """Return the number of cached entries."""
        return len(self._entries)


__all__ = [
    "ExtensionDescriptor",
    "OptionsCache",
    "ProcessorOptions",
    "normalize_options",
    "options_cache_key",
    "resolve_file_extensions",
    "with_path_prefix",
]
