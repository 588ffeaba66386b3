"""
dirmirror Configuration Module

Loads, validates and manages the mirror configuration: YAML files with
environment variable overrides, validated by pydantic models.

Author: dirmirror Project
License: MIT
"""

from .schema import Config, MappingConfig, MirrorOptions
from .config_loader import ConfigLoader, load_config

__version__ = "0.1.0"
__all__ = ['Config', 'MappingConfig', 'MirrorOptions', 'ConfigLoader', 'load_config']
