"""
Mapping Registry

Holds the validated (source, destination, options) triples the mirror
operates on. Mappings are keyed by a stable identifier so they can be
removed individually without touching the duplicate-source check.

Author: dirmirror Project
License: MIT
"""

import logging
import os
import uuid
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping as MappingType, Optional, Union

from pydantic import ValidationError

from ..utils.logger import get_logger
from ..utils.file_ops import ensure_directory
from ..config.schema import MirrorOptions
from .exceptions import DuplicateSourceError, InvalidArgumentError


PathInput = Union[str, "os.PathLike[str]"]
OptionsInput = Union[MirrorOptions, MappingType[str, object], None]


@dataclass(frozen=True)
class Mapping:
    """One registered folder pair."""
    source: str
    destination: str
    options: MirrorOptions = field(default_factory=MirrorOptions)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


def normalize_path(path: str) -> str:
    """Resolve a path against the current working directory."""
    return os.path.normpath(os.path.abspath(path))


def merge_options(overrides: OptionsInput = None) -> MirrorOptions:
    """
    Merge explicit options over the defaults, field by field.

    Fields explicitly set in ``overrides`` win; every other field keeps its
    default value.

    Raises:
        InvalidArgumentError: On unknown keys or values of the wrong type
    """
    defaults = MirrorOptions()
    if overrides is None:
        return defaults

    if isinstance(overrides, MirrorOptions):
        explicit = overrides
    elif isinstance(overrides, MappingType):
        try:
            explicit = MirrorOptions(**overrides)
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid mirror options: {e}") from e
    else:
        raise InvalidArgumentError(
            f"Options must be a mapping or MirrorOptions, got {type(overrides).__name__}"
        )

    values = {}
    for name in MirrorOptions.model_fields:
        chosen = explicit if name in explicit.model_fields_set else defaults
        values[name] = getattr(chosen, name)
    return MirrorOptions(**values)


def _validate_dir(path: object) -> str:
    if isinstance(path, os.PathLike):
        path = os.fspath(path)
    if not isinstance(path, str) or path.strip() == "":
        raise InvalidArgumentError("Directory paths must be non-empty strings.")
    return path


class MirrorRegistry:
    """
    Ordered collection of mappings.

    Insertion order is the order in which watchers start and bulk
    operations are submitted.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger(__name__)
        self._mappings: Dict[str, Mapping] = {}

    def add(
        self,
        source: PathInput,
        destination: PathInput,
        options: OptionsInput = None
    ) -> Mapping:
        """
        Register a source/destination pair.

        Both directories are created if they do not exist.

        Args:
            source: Source directory, absolute or relative to the working directory
            destination: Destination directory
            options: Copy options overriding the defaults

        Returns:
            The registered Mapping

        Raises:
            InvalidArgumentError: If a path is empty or not a string
            DuplicateSourceError: If the source is already registered
        """
        source = _validate_dir(source)
        destination = _validate_dir(destination)
        merged = merge_options(options)

        source_path = normalize_path(source)
        destination_path = normalize_path(destination)

        if self.find_by_source(source_path) is not None:
            raise DuplicateSourceError(source)

        ensure_directory(source_path)
        ensure_directory(destination_path)

        mapping = Mapping(
            source=source_path,
            destination=destination_path,
            options=merged
        )
        self._mappings[mapping.id] = mapping

        self.logger.debug(f"Registered mapping {mapping.id}: {source_path} -> {destination_path}")
        return mapping

    def remove(self, mapping_id: str) -> Mapping:
        """
        Unregister a mapping.

        Raises:
            KeyError: If no mapping has this id
        """
        mapping = self._mappings.pop(mapping_id)
        self.logger.debug(f"Removed mapping {mapping_id}: {mapping.source}")
        return mapping

    def get(self, mapping_id: str) -> Optional[Mapping]:
        return self._mappings.get(mapping_id)

    def find_by_source(self, source: PathInput) -> Optional[Mapping]:
        """Find the mapping whose normalized source matches ``source``."""
        source_path = normalize_path(os.fspath(source))
        for mapping in self._mappings.values():
            if mapping.source == source_path:
                return mapping
        return None

    def clear(self) -> None:
        self._mappings.clear()

    @property
    def mappings(self) -> List[Mapping]:
        """Snapshot of the registered mappings in insertion order."""
        return list(self._mappings.values())

    def __len__(self) -> int:
        return len(self._mappings)

    def __iter__(self) -> Iterator[Mapping]:
        return iter(self.mappings)

    def __contains__(self, mapping_id: object) -> bool:
        return mapping_id in self._mappings
