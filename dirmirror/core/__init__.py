"""
dirmirror Core Module

Mapping registry, operation results and the DirectoryMirror facade.

Author: dirmirror Project
License: MIT
"""

from .exceptions import MirrorError, InvalidArgumentError, DuplicateSourceError
from .results import OperationType, OperationResult, OperationReport
from .registry import Mapping, MirrorRegistry
from .mirror import DirectoryMirror

__version__ = "0.1.0"
__all__ = [
    'MirrorError', 'InvalidArgumentError', 'DuplicateSourceError',
    'OperationType', 'OperationResult', 'OperationReport',
    'Mapping', 'MirrorRegistry', 'DirectoryMirror'
]
