"""Lens registration, lookup and discovery.

A :class:`LensRegistry` maps lens names to lens instances. Hosts build one
at startup, fill it with :meth:`LensRegistry.register` or by scanning
directories of lens files, and pass it to whatever needs lookups.

Discovery scans directories for .py files containing Lens subclasses.
Built-in lenses ship in ``lenses/builtins/``. Users can add their own by
placing .py files in the directory named by ``lenses_dir`` in config.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import (
    DuplicateLensError,
    InvalidLensMetadataError,
    InvalidLensNameError,
    LensError,
)
from .base import Lens

if TYPE_CHECKING:
    from ..config import ArtifactLensConfig

logger = logging.getLogger(__name__)

# Path to the built-in lenses directory (ships with artifactlens)
_BUILTINS_DIR = Path(__file__).parent / "builtins"


class LensRegistry:
    """Name-keyed table of lenses.

    All operations hold a single lock, so a registry may be shared
    between threads.
    """

    def __init__(self) -> None:
        self._lenses: dict[str, Lens] = {}
        self._lock = threading.Lock()

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._lenses

    def __len__(self) -> int:
        with self._lock:
            return len(self._lenses)

    def register(self, lens: Lens) -> None:
        """Register a lens under the name from its config.

        Raises:
            DuplicateLensError: If the name is already registered.
            InvalidLensMetadataError: If the title is empty or the
                priority is not a non-negative integer.
        """
        config = lens.config()
        with self._lock:
            if config.name in self._lenses:
                raise DuplicateLensError(config.name)
            if not config.title:
                raise InvalidLensMetadataError(
                    f"empty title field in lens metadata for {config.name!r}"
                )
            # priority is a signed int here, so the lower bound is enforceable
            if (
                not isinstance(config.priority, int)
                or isinstance(config.priority, bool)
                or config.priority < 0
            ):
                raise InvalidLensMetadataError(
                    f"priority must be >= 0 for {config.name!r}, "
                    f"got {config.priority!r}"
                )
            self._lenses[config.name] = lens
        logger.info("registered lens %s with title %s", config.name, config.title)

    def get(self, name: str) -> Lens:
        """Return the lens registered under ``name``.

        Raises:
            InvalidLensNameError: If no such lens is registered.
        """
        with self._lock:
            lens = self._lenses.get(name)
        if lens is None:
            raise InvalidLensNameError(name)
        return lens

    def unregister(self, name: str) -> None:
        """Remove a lens. Unknown names are ignored."""
        with self._lock:
            self._lenses.pop(name, None)
        logger.info("unregistered lens %s", name)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._lenses)

    def lenses(self) -> list[Lens]:
        """Return registered lenses in display order.

        Highest priority first; ties are broken by name.
        """
        with self._lock:
            entries = list(self._lenses.values())
        return sorted(
            entries, key=lambda lens: (-lens.config().priority, lens.config().name)
        )

    def clear(self) -> None:
        with self._lock:
            self._lenses.clear()

    def discover(self, directory: Path) -> list[str]:
        """Register every lens found in ``directory``.

        Lenses that fail to register (duplicate name, bad metadata) are
        logged and skipped.

        Returns:
            Names of the lenses that were registered.
        """
        registered = []
        for lens in scan_directory(Path(directory)):
            try:
                self.register(lens)
            except LensError as e:
                logger.warning("Skipping lens from %s: %s", directory, e)
                continue
            registered.append(lens.config().name)
        return registered


def load_builtins(registry: LensRegistry) -> list[str]:
    """Register the lenses shipped in ``lenses/builtins/``."""
    return registry.discover(_BUILTINS_DIR)


def build_registry(config: ArtifactLensConfig | None = None) -> LensRegistry:
    """Create a registry holding the built-in and user lenses.

    Built-ins are registered first, so a user lens reusing a built-in
    name is skipped with a warning. Lenses switched off in the config's
    ``lenses:`` section are then removed.

    Args:
        config: Optional configuration with ``lenses_dir`` and overrides.

    Returns:
        Populated LensRegistry.
    """
    registry = LensRegistry()
    load_builtins(registry)

    if config is not None and config.lenses_dir is not None:
        user_dir = Path(config.lenses_dir)
        if user_dir.is_dir():
            registry.discover(user_dir)
        else:
            logger.warning("lenses_dir does not exist: %s", user_dir)

    if config is not None and config.lenses is not None:
        for name, enabled in config.lenses.items():
            if not enabled and name in registry:
                registry.unregister(name)

    return registry


def scan_directory(directory: Path) -> list[Lens]:
    """Instantiate the lenses defined in a directory of .py files.

    Only classes defined in the scanned file count, so a lens file that
    imports another lens does not produce it twice. Files named ``_*``
    are ignored, as are files that fail to import.
    """
    if not directory.is_dir():
        return []

    found: list[Lens] = []
    for lens_file in sorted(directory.glob("*.py")):
        if lens_file.name.startswith("_"):
            continue
        try:
            module = _load_lens_module(lens_file)
        except Exception:
            logger.warning("Failed to import lens file: %s", lens_file, exc_info=True)
            continue

        lens_classes = [
            cls
            for _, cls in inspect.getmembers(module, inspect.isclass)
            if issubclass(cls, Lens)
            and cls.__module__ == module.__name__
            and not inspect.isabstract(cls)
        ]
        for cls in lens_classes:
            try:
                found.append(cls())
            except Exception:
                logger.warning(
                    "Failed to instantiate lens %s from %s",
                    cls.__name__,
                    lens_file,
                    exc_info=True,
                )
    return found


def _load_lens_module(path: Path):
    """Execute a lens file as a standalone module named after its stem."""
    spec = importlib.util.spec_from_file_location(
        f"artifactlens_lens_{path.stem}", path
    )
    if spec is None or spec.loader is None:
        raise ImportError(f"no loader for lens file {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module
