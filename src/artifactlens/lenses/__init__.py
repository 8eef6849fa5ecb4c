"""Lens plugin system for artifactlens.

Provides the API for defining, registering, discovering and looking up
lenses, the pluggable viewers that render job artifacts.

Discovery scans directories for .py files that define Lens subclasses.
Built-in lenses ship in ``builtins/``. Users can add custom lenses via
the ``lenses_dir`` config option.
"""

from .base import Lens, LensConfig, resource_dir_for_lens
from .registry import LensRegistry, build_registry, load_builtins, scan_directory

__all__ = [
    "Lens",
    "LensConfig",
    "LensRegistry",
    "build_registry",
    "load_builtins",
    "resource_dir_for_lens",
    "scan_directory",
]
