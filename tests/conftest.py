"""Shared fixtures for artifactlens tests."""

import pytest

from artifactlens.artifact import Artifact
from artifactlens.errors import FileTooLargeError


class FakeArtifact(Artifact):
    """In-memory artifact that records every call made to it.

    ``reported_size`` lets a test claim a size different from the
    content, to simulate a file that shrank after the size query.
    ``read_error`` is raised from read_at/read_tail when set.
    """

    def __init__(
        self,
        content: bytes,
        job_path: str = "build-log.txt",
        reported_size: int | None = None,
        read_error: Exception | None = None,
        size_error: Exception | None = None,
        size_limit: int = 1024 * 1024,
    ):
        self.content = content
        self._job_path = job_path
        self._reported_size = reported_size
        self._read_error = read_error
        self._size_error = size_error
        self._size_limit = size_limit
        self.size_calls = 0
        self.reads: list[tuple[int, int]] = []  # (offset, requested length)

    def read_at(self, buffer: bytearray, offset: int) -> int:
        self.reads.append((offset, len(buffer)))
        if self._read_error is not None:
            raise self._read_error
        data = self.content[offset : offset + len(buffer)]
        buffer[: len(data)] = data
        return len(data)

    def read_at_most(self, n: int) -> bytes:
        return self.content[:n]

    def read_tail(self, n: int) -> bytes:
        if self._read_error is not None:
            raise self._read_error
        return self.content[-n:] if n else b""

    def read_all(self) -> bytes:
        if len(self.content) > self._size_limit:
            raise FileTooLargeError()
        return self.content

    def size(self) -> int:
        self.size_calls += 1
        if self._size_error is not None:
            raise self._size_error
        if self._reported_size is not None:
            return self._reported_size
        return len(self.content)

    def canonical_link(self) -> str:
        return f"https://storage.example.com/logs/{self._job_path}"

    def job_path(self) -> str:
        return self._job_path


@pytest.fixture
def make_artifact():
    """Factory for in-memory artifacts."""

    def _make(content, **kwargs):
        if isinstance(content, str):
            content = content.encode("utf-8")
        return FakeArtifact(content, **kwargs)

    return _make
