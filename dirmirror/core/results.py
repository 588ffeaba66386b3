"""
Operation Results

Per-item outcome records for bulk operations and watch events. Failures are
collected here in addition to being logged, so callers can inspect exactly
which mapping or path failed.

Author: dirmirror Project
License: MIT
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class OperationType(str, Enum):
    """Kinds of filesystem actions the mirror performs."""
    COPY = "copy"
    CLEAN = "clean"
    COPY_FILE = "copy_file"
    CREATE_DIR = "create_dir"
    REMOVE_FILE = "remove_file"
    REMOVE_DIR = "remove_dir"
    WATCH_ERROR = "watch_error"


@dataclass
class OperationResult:
    """Outcome of a single mapping operation or handled event."""
    operation: OperationType
    source: str
    destination: Optional[str] = None
    success: bool = True
    error: Optional[BaseException] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'operation': self.operation.value,
            'source': self.source,
            'destination': self.destination,
            'success': self.success,
            'error': self.error_message,
            'timestamp': self.timestamp.isoformat()
        }

    def __repr__(self) -> str:
        status = "ok" if self.success else f"failed: {self.error_message}"
        return f"OperationResult({self.operation.value}, source={self.source}, {status})"


@dataclass
class OperationReport:
    """Collected results of a bulk operation across all mappings."""
    operation: OperationType
    results: List[OperationResult] = field(default_factory=list)
    message: str = ""

    @property
    def succeeded(self) -> bool:
        """True when every mapping was processed without error."""
        return all(result.success for result in self.results)

    @property
    def failures(self) -> List[OperationResult]:
        return [result for result in self.results if not result.success]

    def __str__(self) -> str:
        return self.message
