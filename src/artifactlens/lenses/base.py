"""Base class and metadata for artifactlens lenses."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from ..artifact import Artifact


@dataclass(frozen=True)
class LensConfig:
    """Describes a lens.

    Attributes:
        name: Unique identifier, used as the registry key.
        title: Human-readable title (must be non-empty).
        priority: Display position, higher comes first. Must be >= 0.
        hide_title: Hide the title once the lens has loaded.
    """

    name: str
    title: str
    priority: int = 0
    hide_title: bool = False


class Lens(ABC):
    """Abstract base class for lenses.

    A lens renders a set of artifacts. It must be stateless: the host
    may call any method at any time, for any artifacts.

    Every lens must implement:
        config(): Returns the LensConfig describing the lens.
        header(artifacts, resource_dir): Markup injected into <head>.
        body(artifacts, resource_dir, data): Markup for <body>. The lens's
            front-end may call back into body() with data of its choosing.
        callback(artifacts, resource_dir, data): Answers a request sent by
            the lens's front-end.

    ``resource_dir`` is the directory holding the lens's static files,
    see :func:`resource_dir_for_lens`.
    """

    @abstractmethod
    def config(self) -> LensConfig:
        ...

    @abstractmethod
    def header(self, artifacts: list[Artifact], resource_dir: Path) -> str:
        ...

    @abstractmethod
    def body(self, artifacts: list[Artifact], resource_dir: Path, data: str) -> str:
        ...

    @abstractmethod
    def callback(
        self, artifacts: list[Artifact], resource_dir: Path, data: str
    ) -> str:
        ...


def resource_dir_for_lens(base_dir: Path, name: str) -> Path:
    """Return the path to a lens's resource directory."""
    return Path(base_dir) / name
