"""
Mirror Exceptions

Errors raised synchronously while building the mapping registry. Runtime
I/O failures are never raised to callers; they are logged and reported as
failed operation results instead.

Author: dirmirror Project
License: MIT
"""


class MirrorError(Exception):
    """Base class for dirmirror errors."""


class InvalidArgumentError(MirrorError, ValueError):
    """A path or option passed to the registry is invalid."""


class DuplicateSourceError(MirrorError, ValueError):
    """The source directory is already registered."""

    def __init__(self, source: str):
        self.source = source
        super().__init__(f'Source directory "{source}" is already added.')
