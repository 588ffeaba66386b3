"""
dirmirror Utilities

Logging setup and filesystem primitives.

Author: dirmirror Project
License: MIT
"""
