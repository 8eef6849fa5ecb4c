"""artifactlens - Tail large job artifacts and render them with pluggable lenses."""

__version__ = "0.1.0"

from .artifact import Artifact, LocalArtifact
from .errors import (
    ArtifactReadError,
    ContextUnsupportedError,
    DuplicateLensError,
    FileTooLargeError,
    GzipOffsetReadError,
    InvalidLensMetadataError,
    InvalidLensNameError,
    LensError,
)
from .tail import last_n_lines, last_n_lines_chunked

__all__ = [
    "Artifact",
    "LocalArtifact",
    "last_n_lines",
    "last_n_lines_chunked",
    "LensError",
    "ArtifactReadError",
    "ContextUnsupportedError",
    "DuplicateLensError",
    "FileTooLargeError",
    "GzipOffsetReadError",
    "InvalidLensMetadataError",
    "InvalidLensNameError",
    "__version__",
]
