#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2node/extensions.py
"""Extension lookup and registration.

An extension customises the processor before a document is converted. Each
``plugins`` entry of the configuration names one extension and the options
to register it with::

    plugins = [
        {"resolve": "my_package.asciidoc:register", "pluginOptions": {"level": 2}},
        {"resolve": "heading-ids"},
    ]

A reference is looked up in this order:

1. names registered with :meth:`ExtensionRegistry.register`
2. entry points in the ``adoc2node.extensions`` group
3. a dotted import path, ``package.module`` or ``package.module:attr``

The looked-up object is turned into a handler:

- an ``all2md`` ``NodeTransformer`` subclass is instantiated with the
  plugin options and registered as a transform
- a ``NodeTransformer`` instance is registered as is
- a module contributes its ``register`` function
- an object with a ``register`` method, or any other callable, is called
  with ``(context, plugin_options)``
- anything else is skipped

Examples
--------
    >>> def register(context, options):
    ...     context.processor.register_transform(HeadingLevelTransformer(offset=options["offset"]))
    >>> extension_registry.register("heading-offset", register)

"""

from __future__ import annotations

import importlib
import importlib.metadata
import inspect
import logging
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from types import ModuleType
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol, Union, runtime_checkable

from all2md.ast.transforms import NodeTransformer

from adoc2node.constants import EXTENSION_ENTRY_POINT_GROUP
from adoc2node.exceptions import ExtensionLoadError

if TYPE_CHECKING:
    from adoc2node.options import ProcessorOptions
    from adoc2node.processor import AsciidocProcessor

logger = logging.getLogger(__name__)

RegisterCallback = Callable[["ExtensionContext", dict[str, Any]], Union[Awaitable[Any], Any]]


@dataclass(frozen=True)
class ExtensionContext:
    """What an extension receives when it is registered.

    Parameters
    ----------
    processor : AsciidocProcessor
        Processor the extension customises
    path_prefix : str
        Site path prefix
    plugin_options : ProcessorOptions
        Normalized options of the whole conversion

    """

    processor: AsciidocProcessor
    path_prefix: str
    plugin_options: ProcessorOptions


@runtime_checkable
class Extension(Protocol):
    """Interface for extension objects."""

    def register(self, context: ExtensionContext, options: dict[str, Any]) -> Union[Awaitable[Any], Any]:
        """Register the extension with ``context.processor``."""
        ...


@dataclass(frozen=True)
class RegisteredHandler:
    """Resolved extension with a registration callback."""

    reference: str
    callback: RegisterCallback

    async def register(self, context: ExtensionContext, options: Mapping[str, Any]) -> None:
        """Invoke the callback, awaiting it when it returns an awaitable."""
        result = self.callback(context, dict(options))
        if inspect.isawaitable(result):
            await result
        logger.debug(f"Registered extension: {self.reference}")


@dataclass(frozen=True)
class NoOpHandler:
    """Resolved extension that has nothing to register."""

    reference: str

    async def register(self, context: ExtensionContext, options: Mapping[str, Any]) -> None:
        """Do nothing."""
        logger.debug(f"Extension '{self.reference}' is not callable, skipping")


ExtensionHandler = Union[RegisteredHandler, NoOpHandler]


def _transform_class_callback(transform_class: type[NodeTransformer]) -> RegisterCallback:
    def register(context: ExtensionContext, options: dict[str, Any]) -> None:
        context.processor.register_transform(transform_class(**options))

    return register


def _transform_instance_callback(transform: NodeTransformer) -> RegisterCallback:
    def register(context: ExtensionContext, options: dict[str, Any]) -> None:
        context.processor.register_transform(transform)

    return register


def as_handler(reference: str, extension: Any) -> ExtensionHandler:
    """Wrap a looked-up extension object in a handler.

    Parameters
    ----------
    reference : str
        Name the extension was requested by, used in log messages
    extension : Any
        Object the reference resolved to

    Returns
    -------
    RegisteredHandler or NoOpHandler
        Handler for the object

    """
    if isinstance(extension, ModuleType):
        extension = getattr(extension, "register", None)
        if extension is None:
            return NoOpHandler(reference)

    if isinstance(extension, type) and issubclass(extension, NodeTransformer):
        return RegisteredHandler(reference, _transform_class_callback(extension))
    if isinstance(extension, NodeTransformer):
        return RegisteredHandler(reference, _transform_instance_callback(extension))

    register = getattr(extension, "register", None)
    if not isinstance(extension, type) and callable(register):
        return RegisteredHandler(reference, register)
    if callable(extension):
        return RegisteredHandler(reference, extension)
    return NoOpHandler(reference)


def import_extension(reference: str) -> Any:
    """Import ``package.module`` or ``package.module:attr``.

    Raises
    ------
    ExtensionLoadError
        If the module or attribute cannot be found

    """
    module_name, _, attribute_path = reference.partition(":")
    try:
        target: Any = importlib.import_module(module_name)
        for attribute in filter(None, attribute_path.split(".")):
            target = getattr(target, attribute)
    except (ImportError, AttributeError, ValueError) as e:
        raise ExtensionLoadError(reference, original_error=e) from e
    return target


class ExtensionRegistry:
    """Registry mapping extension names to extension objects.

    Entry points of the ``adoc2node.extensions`` group are discovered on
    first lookup. Names registered explicitly take precedence over entry
    points with the same name.

    Parameters
    ----------
    entry_point_group : str, default "adoc2node.extensions"
        Entry point group scanned by :meth:`discover_plugins`

    """

    def __init__(self, entry_point_group: str = EXTENSION_ENTRY_POINT_GROUP) -> None:
        """Initialize an empty registry."""
        self.entry_point_group = entry_point_group
        self._extensions: dict[str, Any] = {}
        self._entry_points: dict[str, Any] = {}
        self._initialized = False

    def _ensure_initialized(self) -> None:
        """Ensure plugin discovery has been run."""
        if not self._initialized:
            self.discover_plugins()
            self._initialized = True

    def register(self, name: str, extension: Any) -> None:
        """Register an extension under a name.

        Notes
        -----
        Registering a name twice overwrites the first registration and logs
        a warning.

        """
        if name in self._extensions:
            logger.warning(f"Extension '{name}' already registered, overwriting")
        self._extensions[name] = extension
        logger.debug(f"Registered extension name: {name}")

    def unregister(self, name: str) -> bool:
        """Remove a registered name, returning False when it was unknown."""
        if name in self._extensions:
            del self._extensions[name]
            return True
        return False

    def has_extension(self, name: str) -> bool:
        """Return True when the name is registered or provided by an entry point."""
        self._ensure_initialized()
        return name in self._extensions or name in self._entry_points

    def list_extensions(self) -> list[str]:
        """Return every known extension name, sorted."""
        self._ensure_initialized()
        return sorted(set(self._extensions) | set(self._entry_points))

    def discover_plugins(self) -> int:
        """Collect entry points of the configured group.

        Entry points are loaded lazily on first lookup.

        Returns
        -------
        int
            Number of entry points found

        """
        discovered = 0
        try:
            for entry_point in importlib.metadata.entry_points().select(group=self.entry_point_group):
                self._entry_points[entry_point.name] = entry_point
                discovered += 1
        except Exception as e:
            logger.warning(f"Failed to discover extension plugins: {e}")

        logger.debug(f"Discovered {discovered} extension(s) from entry points")
        return discovered

    def load(self, reference: Any) -> Any:
        """Return the extension object a reference points to.

        Raises
        ------
        ExtensionLoadError
            If a string reference matches nothing

        """
        if not isinstance(reference, str):
            return reference
        if reference in self._extensions:
            return self._extensions[reference]

        self._ensure_initialized()
        entry_point = self._entry_points.get(reference)
        if entry_point is not None:
            try:
                return entry_point.load()
            except Exception as e:
                raise ExtensionLoadError(reference, original_error=e) from e

        return import_extension(reference)

    def resolve(self, reference: Any) -> ExtensionHandler:
        """Look up a reference and wrap it in a handler."""
        name = reference if isinstance(reference, str) else getattr(reference, "__name__", repr(reference))
        return as_handler(name, self.load(reference))

    def clear(self) -> None:
        """Forget every registration and discovered entry point.

        This is primarily useful for testing.

        """
        self._extensions.clear()
        self._entry_points.clear()
        self._initialized = False


async def register_extensions(
    processor: AsciidocProcessor,
    path_prefix: str,
    options: ProcessorOptions,
    registry: Optional[ExtensionRegistry] = None,
) -> list[ExtensionHandler]:
    """Register every configured extension with the processor, in order.

    Each registration finishes before the next one starts. An exception from
    an extension propagates unchanged; extensions registered before it stay
    registered.

    Parameters
    ----------
    processor : AsciidocProcessor
        Processor the extensions customise
    path_prefix : str
        Site path prefix
    options : ProcessorOptions
        Normalized options holding the extension descriptors
    registry : ExtensionRegistry, optional
        Registry used for lookups, defaults to :data:`extension_registry`

    Returns
    -------
    list of handlers
        The resolved handlers, in registration order

    """
    registry = registry if registry is not None else extension_registry
    context = ExtensionContext(processor=processor, path_prefix=path_prefix, plugin_options=options)

    handlers: list[ExtensionHandler] = []
    for descriptor in options.plugins:
        handler = registry.resolve(descriptor.resolve)
        await handler.register(context, descriptor.plugin_options)
        handlers.append(handler)
    return handlers


# Global registry instance (preferred access pattern)
extension_registry = ExtensionRegistry()

__all__ = [
    "Extension",
    "ExtensionContext",
    "ExtensionHandler",
    "ExtensionRegistry",
    "NoOpHandler",
    "RegisteredHandler",
    "as_handler",
    "extension_registry",
    "import_extension",
    "register_extensions",
]
