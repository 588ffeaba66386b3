"""
dirmirror Monitoring Module

Filesystem watching and event-to-action translation for watch mode.

Author: dirmirror Project
License: MIT
"""

from .watcher import MirrorEventHandler, WatchController, WatchHandle

__all__ = ['MirrorEventHandler', 'WatchController', 'WatchHandle']
