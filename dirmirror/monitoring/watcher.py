"""
Mirror Watcher

Watches registered source directories with the watchdog library and
replays every change into the matching destination directory.

One observer runs per mapping. Failures while mirroring an event are
logged and recorded on the mapping's handle; they never stop the observer.

Author: dirmirror Project
License: MIT
"""

import logging
import os
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Deque, Dict, Iterable, List, Optional

from watchdog.events import (
    DirCreatedEvent,
    FileCreatedEvent,
    FileSystemEvent,
    FileSystemEventHandler
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver
from watchdog.observers.polling import PollingObserver

from ..utils.logger import get_logger
from ..utils.file_ops import copy_file, copy_tree, remove_path, replace_with_directory
from ..core.registry import Mapping
from ..core.results import OperationResult, OperationType


class MirrorEventHandler(FileSystemEventHandler):
    """
    Translates filesystem events under one source directory into
    filesystem actions under its destination.
    """

    def __init__(
        self,
        mapping: Mapping,
        logger: Optional[logging.Logger] = None,
        history_size: int = 1000
    ):
        """
        Initialize the handler.

        Args:
            mapping: Mapping whose source is being watched
            logger: Logger receiving status and error lines
            history_size: Number of results kept in ``results``
        """
        super().__init__()
        self.mapping = mapping
        self.source = mapping.source
        self.destination = mapping.destination
        self.logger = logger or get_logger(__name__)

        self._results: Deque[OperationResult] = deque(maxlen=history_size)
        self._lock = Lock()

    @property
    def results(self) -> List[OperationResult]:
        """Recorded outcomes of handled events, oldest first."""
        with self._lock:
            return list(self._results)

    def target_for(self, path: str) -> Optional[str]:
        """
        Map a path under the source directory to the destination.

        Returns None for the source root itself and for paths outside it.
        """
        relative = os.path.relpath(path, self.source)
        if relative == os.curdir or relative == os.pardir or relative.startswith(os.pardir + os.sep):
            return None
        return os.path.join(self.destination, relative)

    def dispatch(self, event: FileSystemEvent):
        """Dispatch an event, reporting anything that escapes a handler as a watcher error."""
        try:
            super().dispatch(event)
        except Exception as e:
            self.on_error(e)

    def on_created(self, event):
        if event.is_directory:
            self.handle_dir_added(event.src_path)
        else:
            self.logger.info(f"File added: {event.src_path}")
            self._copy_file(event.src_path)

    def on_modified(self, event):
        # Directory mtime changes carry no content to mirror
        if event.is_directory:
            return
        self.logger.info(f"File changed: {event.src_path}")
        self._copy_file(event.src_path)

    def on_deleted(self, event):
        if event.is_directory:
            self.handle_dir_removed(event.src_path)
        else:
            self.handle_file_removed(event.src_path)

    def on_moved(self, event):
        """A move is mirrored as removal of the old path plus addition of the new one."""
        if event.is_directory:
            self.handle_dir_removed(event.src_path)
        else:
            self.handle_file_removed(event.src_path)

        if self.target_for(event.dest_path) is None:
            return

        if event.is_directory:
            self._copy_moved_dir(event.dest_path)
        else:
            self.logger.info(f"File added: {event.dest_path}")
            self._copy_file(event.dest_path)

    def on_error(self, error: BaseException):
        """Log a watcher failure for this mapping; the observer is not restarted."""
        self._log_error(f"Watcher error in {self.source}", error, OperationType.WATCH_ERROR)
        self._record(OperationType.WATCH_ERROR, self.source, None, error)

    def handle_dir_added(self, dir_path: str):
        target = self.target_for(dir_path)
        if target is None:
            return

        self.logger.info(f"Directory added: {dir_path}")
        try:
            replace_with_directory(target)
            self.logger.info(f"Created directory {target}")
            self._record(OperationType.CREATE_DIR, dir_path, target)
        except OSError as e:
            self._log_error(f"Error creating directory {target}", e, OperationType.CREATE_DIR, target)
            self._record(OperationType.CREATE_DIR, dir_path, target, e)

    def handle_file_removed(self, file_path: str):
        target = self.target_for(file_path)
        if target is None:
            return

        self.logger.info(f"File removed: {file_path}")
        try:
            remove_path(target)
            self.logger.info(f"Removed {target}")
            self._record(OperationType.REMOVE_FILE, file_path, target)
        except OSError as e:
            self._log_error(f"Error removing file from {target}", e, OperationType.REMOVE_FILE, target)
            self._record(OperationType.REMOVE_FILE, file_path, target, e)

    def handle_dir_removed(self, dir_path: str):
        target = self.target_for(dir_path)
        if target is None:
            return

        self.logger.info(f"Directory removed: {dir_path}")
        try:
            remove_path(target)
            self.logger.info(f"Removed directory {target}")
            self._record(OperationType.REMOVE_DIR, dir_path, target)
        except OSError as e:
            self._log_error(f"Error removing directory {target}", e, OperationType.REMOVE_DIR, target)
            self._record(OperationType.REMOVE_DIR, dir_path, target, e)

    def scan_existing(self):
        """
        Report entries already present under the source as added events.

        Directories are reported before the files they contain. Symlinks
        are reported as files and never descended into.
        """
        for dir_path, dir_names, file_names in os.walk(
            self.source, onerror=self.on_error, followlinks=False
        ):
            for name in dir_names:
                path = os.path.join(dir_path, name)
                if os.path.islink(path):
                    self.dispatch(FileCreatedEvent(path))
                else:
                    self.dispatch(DirCreatedEvent(path))
            for name in file_names:
                self.dispatch(FileCreatedEvent(os.path.join(dir_path, name)))

    def _copy_file(self, file_path: str):
        target = self.target_for(file_path)
        if target is None:
            return

        try:
            copy_file(file_path, target)
            self.logger.info(f"Copied {file_path} to {target}")
            self._record(OperationType.COPY_FILE, file_path, target)
        except OSError as e:
            self._log_error(f"Error copying file from {file_path} to {target}", e, OperationType.COPY_FILE, target)
            self._record(OperationType.COPY_FILE, file_path, target, e)

    def _copy_moved_dir(self, dir_path: str):
        # Native observers may not emit events for the contents of a directory
        # moved into the tree, so its contents are copied here.
        target = self.target_for(dir_path)
        self.logger.info(f"Directory added: {dir_path}")
        try:
            replace_with_directory(target)
            copy_tree(dir_path, target)
            self.logger.info(f"Copied directory {dir_path} to {target}")
            self._record(OperationType.CREATE_DIR, dir_path, target)
        except OSError as e:
            self._log_error(f"Error copying directory from {dir_path} to {target}", e, OperationType.CREATE_DIR, target)
            self._record(OperationType.CREATE_DIR, dir_path, target, e)

    def _record(
        self,
        operation: OperationType,
        path: str,
        target: Optional[str],
        error: Optional[BaseException] = None
    ):
        result = OperationResult(
            operation=operation,
            source=path,
            destination=target,
            success=error is None,
            error=error
        )
        with self._lock:
            self._results.append(result)

    def _log_error(
        self,
        message: str,
        error: BaseException,
        operation: OperationType,
        target: Optional[str] = None
    ):
        self.logger.error(
            f"{message}: {error}",
            extra={
                "operation": operation.value,
                "source": self.source,
                "destination": target or self.destination
            }
        )


@dataclass
class WatchHandle:
    """Active observer for one mapping. Exists only while watching."""
    mapping: Mapping
    observer: BaseObserver
    handler: MirrorEventHandler

    @property
    def source(self) -> str:
        return self.mapping.source

    @property
    def destination(self) -> str:
        return self.mapping.destination

    @property
    def results(self) -> List[OperationResult]:
        return self.handler.results


class WatchController:
    """
    Starts and stops one observer per mapping.

    Each mapping is either idle or watching; ``watch`` moves every given
    mapping to watching and ``stop`` returns all of them to idle.
    """

    def __init__(
        self,
        initial_scan: bool = True,
        use_polling: bool = False,
        polling_interval: float = 1.0,
        stop_timeout: float = 5.0,
        history_size: int = 1000,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the controller.

        Args:
            initial_scan: Mirror entries already present when watching starts
            use_polling: Use PollingObserver instead of the native observer
            polling_interval: Seconds between polls (polling observer only)
            stop_timeout: Seconds to wait for each observer thread on stop
            history_size: Number of event results kept per mapping
            logger: Logger receiving status and error lines
        """
        self.initial_scan = initial_scan
        self.use_polling = use_polling
        self.polling_interval = polling_interval
        self.stop_timeout = stop_timeout
        self.history_size = history_size
        self.logger = logger or get_logger(__name__)

        self._handles: Dict[str, WatchHandle] = {}
        self._lock = Lock()

    def _create_observer(self) -> BaseObserver:
        if self.use_polling:
            return PollingObserver(timeout=self.polling_interval)
        return Observer()

    def watch(self, mappings: Iterable[Mapping]) -> List[WatchHandle]:
        """
        Start watching each mapping that is not already being watched.

        Returns once the observers are running and, with ``initial_scan``,
        the existing entries have been mirrored.

        Args:
            mappings: Mappings to watch, started in the given order

        Returns:
            Handles created by this call
        """
        started = []

        with self._lock:
            for mapping in mappings:
                if mapping.id in self._handles:
                    self.logger.warning(f"Already watching directory: {mapping.source}")
                    continue

                handler = MirrorEventHandler(
                    mapping,
                    logger=self.logger,
                    history_size=self.history_size
                )
                observer = self._create_observer()

                try:
                    observer.schedule(handler, mapping.source, recursive=True)
                    observer.start()
                except OSError as e:
                    handler.on_error(e)
                    continue

                handle = WatchHandle(mapping=mapping, observer=observer, handler=handler)
                self._handles[mapping.id] = handle
                started.append(handle)

                self.logger.info(f"Started watching directory: {mapping.source}")

        # Initial scans run without holding the lock
        if self.initial_scan:
            for handle in started:
                handle.handler.scan_existing()

        return started

    def unwatch(self, mapping_id: str) -> bool:
        """
        Stop watching a single mapping.

        Returns:
            True if the mapping was being watched
        """
        with self._lock:
            handle = self._handles.pop(mapping_id, None)

        if handle is None:
            return False

        self._close([handle])
        return True

    def stop(self):
        """Stop every observer. Calling it with nothing watched is a no-op."""
        with self._lock:
            handles = list(self._handles.values())
            self._handles.clear()

        self._close(handles)

    def _close(self, handles: List[WatchHandle]):
        for handle in handles:
            handle.observer.stop()

        # Wait for observers to finish
        for handle in handles:
            handle.observer.join(timeout=self.stop_timeout)
            if handle.observer.is_alive():
                self.logger.warning(f"Observer for {handle.source} did not stop within {self.stop_timeout}s")
            self.logger.info(f"Stopped watching directory: {handle.source}")

    @property
    def handles(self) -> List[WatchHandle]:
        with self._lock:
            return list(self._handles.values())

    def is_watching(self, mapping_id: Optional[str] = None) -> bool:
        """Check whether anything, or the given mapping, is being watched."""
        with self._lock:
            if mapping_id is None:
                return bool(self._handles)
            return mapping_id in self._handles

    def watched_sources(self) -> List[str]:
        """Get source paths currently being watched."""
        return [handle.source for handle in self.handles]
