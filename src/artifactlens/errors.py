"""Exceptions raised by artifactlens.

Every error derives from :class:`LensError` so callers can catch the whole
family at once. End-of-data during a partial read is never an exception.
"""


class LensError(Exception):
    """Base exception for artifactlens errors."""

    pass


class GzipOffsetReadError(LensError):
    """An offset or tail read was attempted on a gzip-compressed artifact."""

    def __init__(self, message: str = "offset read on gzipped files unsupported"):
        super().__init__(message)


class FileTooLargeError(LensError):
    """A size-limited read (read_all) hit an artifact over its size limit."""

    def __init__(self, message: str = "file size over specified limit"):
        super().__init__(message)


class ContextUnsupportedError(LensError):
    """The artifact cannot honor a deadline or cancellation request."""

    def __init__(
        self, message: str = "artifact does not support context operations"
    ):
        super().__init__(message)


class InvalidLensNameError(LensError):
    """No lens is registered under the requested name.

    Make sure the lens was registered with ``LensRegistry.register`` and
    that the name is spelled the way its ``LensConfig`` spells it.
    """

    def __init__(self, name: str):
        super().__init__(f"invalid lens name: {name}")
        self.name = name


class DuplicateLensError(LensError):
    """A lens with the same name is already registered."""

    def __init__(self, name: str):
        super().__init__(f"lens already registered with name {name}")
        self.name = name


class InvalidLensMetadataError(LensError):
    """A lens config failed registration-time validation."""

    pass


class ArtifactReadError(LensError):
    """Reading from an artifact failed.

    The underlying exception is kept as ``__cause__``.
    """

    pass


class ConfigError(LensError):
    """Configuration file or values are invalid."""

    pass
