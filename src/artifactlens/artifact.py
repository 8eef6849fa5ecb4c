"""Artifact access contract and the local filesystem backend.

An artifact is one read-only output file of a job. Lenses and the tail
reader only depend on the :class:`Artifact` interface; storage backends
(object stores, HTTP, local disk) provide the bytes.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from .errors import ContextUnsupportedError, FileTooLargeError, GzipOffsetReadError

logger = logging.getLogger(__name__)

# Ceiling for read_all() when the caller does not pick one (100 MB)
DEFAULT_SIZE_LIMIT = 100 * 1000 * 1000

GZIP_MAGIC = b"\x1f\x8b"


class Artifact(ABC):
    """Abstract base class for job artifacts.

    Implementations must provide:
        read_at(buffer, offset): Fill ``buffer`` from ``offset``.
        read_at_most(n): Up to ``n`` bytes from the start.
        read_tail(n): The last ``n`` bytes.
        read_all(): Everything, bounded by a size limit.
        size(): Total length in bytes (may hit the network).
        canonical_link(): Link to the artifact in its storage.
        job_path(): Path of the artifact within the job.

    Reads that run past the end of the artifact are not errors: they
    return fewer bytes. Failures to reach the storage raise ``OSError``.
    Backends that cannot seek (gzip streams) raise
    :class:`GzipOffsetReadError` from ``read_at`` and ``read_tail``.
    """

    @abstractmethod
    def read_at(self, buffer: bytearray, offset: int) -> int:
        """Read ``len(buffer)`` bytes starting at ``offset`` into ``buffer``.

        Returns:
            Number of bytes written. Less than ``len(buffer)`` means the
            end of the artifact was reached.
        """
        ...

    @abstractmethod
    def read_at_most(self, n: int) -> bytes:
        """Read at most ``n`` bytes from the beginning of the artifact."""
        ...

    @abstractmethod
    def read_tail(self, n: int) -> bytes:
        """Read the last ``n`` bytes of the artifact."""
        ...

    @abstractmethod
    def read_all(self) -> bytes:
        """Read the whole artifact.

        Raises:
            FileTooLargeError: If the artifact is over the size limit.
        """
        ...

    @abstractmethod
    def size(self) -> int:
        """Return the size of the artifact in bytes."""
        ...

    @abstractmethod
    def canonical_link(self) -> str:
        """Return a link for viewing this artifact in its storage."""
        ...

    @abstractmethod
    def job_path(self) -> str:
        """Return the artifact path relative to the job."""
        ...

    def use_timeout(self, seconds: float) -> None:
        """Apply a deadline to subsequent reads.

        Backends without deadline support keep this default.

        Raises:
            ContextUnsupportedError: Always, unless overridden.
        """
        raise ContextUnsupportedError()


class LocalArtifact(Artifact):
    """Artifact stored as a file on the local filesystem.

    Gzip-compressed files (by ``.gz`` suffix or magic bytes) are served
    as stored: ``read_at`` and ``read_tail`` refuse them because an offset
    into the compressed stream is not an offset into the content.
    """

    def __init__(
        self,
        path: Path,
        job_path: str | None = None,
        canonical_link: str | None = None,
        size_limit: int = DEFAULT_SIZE_LIMIT,
    ):
        self._path = Path(path)
        self._job_path = job_path if job_path is not None else self._path.name
        self._link = canonical_link
        self._size_limit = size_limit
        self._gzipped: bool | None = None

    def __repr__(self) -> str:
        return f"LocalArtifact({str(self._path)!r})"

    @property
    def path(self) -> Path:
        return self._path

    def is_gzipped(self) -> bool:
        """Return True if the file holds gzip-compressed content."""
        if self._gzipped is None:
            if self._path.suffix.lower() == ".gz":
                self._gzipped = True
            else:
                with open(self._path, "rb") as f:
                    self._gzipped = f.read(len(GZIP_MAGIC)) == GZIP_MAGIC
        return self._gzipped

    def read_at(self, buffer: bytearray, offset: int) -> int:
        if offset < 0:
            raise ValueError(f"negative offset: {offset}")
        if self.is_gzipped():
            raise GzipOffsetReadError()
        with open(self._path, "rb") as f:
            f.seek(offset)
            read = f.readinto(buffer)
        logger.debug(
            "read %d/%d bytes at offset %d from %s",
            read,
            len(buffer),
            offset,
            self._path,
        )
        return read

    def read_at_most(self, n: int) -> bytes:
        # f.read() treats a negative size as "everything"
        if n < 0:
            raise ValueError(f"negative read size: {n}")
        with open(self._path, "rb") as f:
            return f.read(n)

    def read_tail(self, n: int) -> bytes:
        if self.is_gzipped():
            raise GzipOffsetReadError()
        size = self.size()
        with open(self._path, "rb") as f:
            f.seek(max(size - n, 0))
            return f.read()

    def read_all(self) -> bytes:
        size = self.size()
        if size > self._size_limit:
            raise FileTooLargeError(
                f"file size over specified limit: {self._job_path} is "
                f"{size} bytes, limit is {self._size_limit}"
            )
        return self._path.read_bytes()

    def size(self) -> int:
        return self._path.stat().st_size

    def canonical_link(self) -> str:
        if self._link is not None:
            return self._link
        return self._path.resolve().as_uri()

    def job_path(self) -> str:
        return self._job_path
