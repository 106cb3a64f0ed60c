#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the adoc2node package.

Exception Hierarchy
-------------------
- Adoc2NodeError (base exception)

  - ConfigurationError (invalid plugin options or configuration files)

  - ExtensionLoadError (extension reference cannot be imported)

  - DocumentConversionError (parse, convert or extraction failure for one node)

Errors raised by an extension's own ``register`` callback are not wrapped;
they propagate to the caller unchanged.

"""

from __future__ import annotations

from typing import Any


class Adoc2NodeError(Exception):
    """Base exception class for all adoc2node-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ConfigurationError(Adoc2NodeError):
    """Exception raised for invalid plugin options or configuration files.

    Parameters
    ----------
    message : str
        Description of the configuration problem
    parameter_name : str, optional
        Name of the offending option
    parameter_value : any, optional
        The value that was rejected
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the configuration error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class ExtensionLoadError(Adoc2NodeError):
    """Exception raised when an extension reference cannot be imported.

    Parameters
    ----------
    reference : str
        The ``resolve`` value of the extension descriptor
    original_error : Exception, optional
        The import error

    """

    def __init__(self, reference: str, original_error: Exception | None = None):
        """Initialize with the unresolvable reference."""
        message = f"Could not load AsciiDoc extension '{reference}'"
        if original_error is not None:
            message += f": {original_error}"
        super().__init__(message, original_error=original_error)
        self.reference = reference


class DocumentConversionError(Adoc2NodeError):
    """Exception raised when a source node cannot be turned into a document record.

    Parameters
    ----------
    message : str
        Description of the failure
    node_id : str, optional
        Identity of the source node
    path : str, optional
        Absolute path of the source file, when the node has one
    original_error : Exception, optional
        The underlying exception

    """

    def __init__(
        self,
        message: str,
        node_id: str | None = None,
        path: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the conversion error with the source context."""
        super().__init__(message, original_error=original_error)
        self.node_id = node_id
        self.path = path

    @property
    def location(self) -> str:
        """Describe where the failure happened, preferring the file path."""
        if self.path:
            return f"file {self.path}"
        return f"in node {self.node_id}"


__all__ = [
    "Adoc2NodeError",
    "ConfigurationError",
    "ExtensionLoadError",
    "DocumentConversionError",
]
