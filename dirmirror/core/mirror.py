"""
Directory Mirror

Public entry point tying together the mapping registry, the bulk copy/clean
operators and the watch controller.

Bulk operators run every mapping concurrently on a thread pool. Each
mapping is fault-isolated: its failure is logged and reported in the
returned OperationReport, and never stops the other mappings.

Author: dirmirror Project
License: MIT
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

from ..utils.logger import get_logger
from ..utils.file_ops import copy_tree, empty_directory
from ..config.schema import Config
from .registry import Mapping, MirrorRegistry, OptionsInput, PathInput
from .results import OperationReport, OperationResult, OperationType
from ..monitoring.watcher import WatchController, WatchHandle

COPY_MESSAGE = "Folders copied successfully"
CLEAN_MESSAGE = "Directories cleaned successfully"


class DirectoryMirror:
    """
    Mirrors registered source directories into their destinations.

    Usage:
        mirror = DirectoryMirror()
        mirror.add("src/imgs", "dist/imgs")
        mirror.copy()      # one-off copy
        mirror.watch()     # keep destinations in sync until stop()
    """

    def __init__(
        self,
        max_workers: int = 4,
        watch_controller: Optional[WatchController] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the mirror.

        Args:
            max_workers: Maximum number of mappings processed concurrently
            watch_controller: Controller used for watch mode (default settings if None)
            logger: Logger receiving status and error lines
        """
        self.logger = logger or get_logger(__name__)
        self.max_workers = max_workers
        self.registry = MirrorRegistry(logger=self.logger)
        self.watch_controller = watch_controller or WatchController(logger=self.logger)

    @classmethod
    def from_config(
        cls,
        config: Config,
        logger: Optional[logging.Logger] = None
    ) -> "DirectoryMirror":
        """
        Build a mirror and register every mapping declared in the configuration.

        Raises:
            InvalidArgumentError: If a mapping path is invalid
            DuplicateSourceError: If two mappings share a source
        """
        logger = logger or get_logger(__name__)
        controller = WatchController(
            initial_scan=config.watch.initial_scan,
            use_polling=config.watch.use_polling,
            polling_interval=config.watch.polling_interval,
            stop_timeout=config.watch.stop_timeout,
            history_size=config.watch.history_size,
            logger=logger
        )
        mirror = cls(
            max_workers=config.mirror.max_workers,
            watch_controller=controller,
            logger=logger
        )

        for mapping in config.mappings:
            mirror.add(mapping.source, mapping.destination, mapping.to_options())

        return mirror

    def add(
        self,
        source: PathInput,
        destination: PathInput,
        options: OptionsInput = None
    ) -> Mapping:
        """
        Register a source/destination pair. See MirrorRegistry.add.
        """
        return self.registry.add(source, destination, options)

    def remove(self, mapping_id: str) -> Mapping:
        """
        Stop watching a mapping, if watched, and unregister it.

        Raises:
            KeyError: If no mapping has this id
        """
        if mapping_id not in self.registry:
            raise KeyError(mapping_id)
        self.watch_controller.unwatch(mapping_id)
        return self.registry.remove(mapping_id)

    def reset(self):
        """Stop watching and forget every mapping."""
        self.stop()
        self.registry.clear()

    @property
    def mappings(self) -> List[Mapping]:
        return self.registry.mappings

    def copy(self) -> OperationReport:
        """
        Copy every source tree into its destination.

        Returns:
            Report with one result per mapping
        """
        results = self._run_all(OperationType.COPY, self._copy_mapping)
        report = OperationReport(OperationType.COPY, results, COPY_MESSAGE)
        self._log_report(report)
        return report

    def clean(self) -> OperationReport:
        """
        Empty every destination directory, keeping the directory itself.

        Returns:
            Report with one result per mapping
        """
        results = self._run_all(OperationType.CLEAN, self._clean_mapping)
        report = OperationReport(OperationType.CLEAN, results, CLEAN_MESSAGE)
        self._log_report(report)
        return report

    def watch(self) -> List[WatchHandle]:
        """
        Start watching every registered mapping in the background.

        Returns:
            Handles created by this call
        """
        return self.watch_controller.watch(self.registry.mappings)

    def stop(self):
        """Stop all watchers. Safe to call when nothing is watched."""
        self.watch_controller.stop()

    @property
    def is_watching(self) -> bool:
        return self.watch_controller.is_watching()

    def watch_results(self) -> List[OperationResult]:
        """Results recorded by the active watchers, grouped by mapping."""
        results = []
        for handle in self.watch_controller.handles:
            results.extend(handle.results)
        return results

    def _run_all(
        self,
        operation: OperationType,
        action: Callable[[Mapping], None]
    ) -> List[OperationResult]:
        mappings = self.registry.mappings
        if not mappings:
            return []

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self._run_isolated, operation, action, mapping)
                for mapping in mappings
            ]
            return [future.result() for future in futures]

    def _run_isolated(
        self,
        operation: OperationType,
        action: Callable[[Mapping], None],
        mapping: Mapping
    ) -> OperationResult:
        try:
            action(mapping)
        except Exception as e:
            if operation == OperationType.COPY:
                message = f"Error copying folder from {mapping.source} to {mapping.destination}"
            else:
                message = f"Error cleaning directory {mapping.destination}"
            self.logger.error(
                f"{message}: {e}",
                extra={
                    "operation": operation.value,
                    "source": mapping.source,
                    "destination": mapping.destination
                }
            )
            return OperationResult(
                operation=operation,
                source=mapping.source,
                destination=mapping.destination,
                success=False,
                error=e
            )

        return OperationResult(
            operation=operation,
            source=mapping.source,
            destination=mapping.destination
        )

    def _copy_mapping(self, mapping: Mapping):
        options = mapping.options
        copied = copy_tree(
            mapping.source,
            mapping.destination,
            overwrite=options.overwrite,
            error_on_exist=options.error_on_exist,
            path_filter=options.filter
        )
        self.logger.info(f"Copied {copied} files from {mapping.source} to {mapping.destination}")

    def _clean_mapping(self, mapping: Mapping):
        removed = empty_directory(mapping.destination)
        self.logger.info(f"Cleaned {mapping.destination} ({removed} entries removed)")

    def _log_report(self, report: OperationReport):
        failures = report.failures
        if failures:
            self.logger.warning(
                f"{report.operation.value} finished with {len(failures)} of "
                f"{len(report.results)} mappings failed"
            )
        else:
            self.logger.info(report.message)

    def __enter__(self) -> "DirectoryMirror":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
