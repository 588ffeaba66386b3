"""
dirmirror

Mirrors source directories into destination directories, keeping them in
sync as files change, with bulk copy and clean operations on demand.

Author: dirmirror Project
License: MIT
"""

from .core import (
    DirectoryMirror,
    DuplicateSourceError,
    InvalidArgumentError,
    Mapping,
    MirrorError,
    OperationReport,
    OperationResult,
)
from .config.schema import MirrorOptions

__version__ = "0.1.0"
__all__ = [
    'DirectoryMirror', 'DuplicateSourceError', 'InvalidArgumentError',
    'Mapping', 'MirrorError', 'MirrorOptions', 'OperationReport', 'OperationResult'
]
