"""Read the last lines of an artifact without fetching all of it.

The artifact is read backward in fixed-size chunks until the chunks hold
enough newlines to cover the requested lines, or the start of the
artifact is reached. The result matches splitting the whole content on
newlines and keeping the last ``n`` entries.
"""

import logging
from collections import deque

from .artifact import Artifact
from .errors import ArtifactReadError

logger = logging.getLogger(__name__)

# Assumed average log line length in bytes, used to size the chunks
AVERAGE_LINE_LENGTH = 300


def last_n_lines(artifact: Artifact, n: int) -> list[str]:
    """Return the last ``n`` lines of an artifact.

    Chunk size is ``300 * n + 1`` bytes. Use :func:`last_n_lines_chunked`
    when the line lengths of the data are known.
    """
    return last_n_lines_chunked(artifact, n, AVERAGE_LINE_LENGTH * n + 1)


def last_n_lines_chunked(artifact: Artifact, n: int, chunk_size: int) -> list[str]:
    """Return the last ``n`` lines of an artifact, reading ``chunk_size`` at a time.

    Best performance comes from a chunk size just above ``n`` times the
    average line length: one read, little overshoot.

    Args:
        artifact: Artifact to read.
        n: Number of lines wanted (fewer are returned if the artifact has
            fewer lines).
        chunk_size: Bytes to request per backward read.

    Returns:
        The lines in original order, without their terminators.

    Raises:
        ValueError: If ``n`` is negative or ``chunk_size`` is not positive.
        ArtifactReadError: If querying the size or reading fails.
        GzipOffsetReadError: If the artifact cannot be read at an offset.
    """
    if n < 0:
        raise ValueError(f"line count must be >= 0, got {n}")
    if chunk_size < 1:
        raise ValueError(f"chunk size must be >= 1, got {chunk_size}")

    try:
        artifact_size = artifact.size()
    except OSError as e:
        raise ArtifactReadError(
            f"error getting artifact size for {artifact.job_path()}: {e}"
        ) from e

    chunks: deque[bytes] = deque()
    newlines = 0
    needed = n
    end = artifact_size

    while end > 0 and newlines < needed:
        offset = max(end - chunk_size, 0)
        buffer = bytearray(end - offset)
        try:
            read = artifact.read_at(buffer, offset)
        except OSError as e:
            raise ArtifactReadError(
                f"error reading artifact {artifact.job_path()} "
                f"at offset {offset}: {e}"
            ) from e
        if read == 0:
            logger.debug(
                "no data at offset %d of %s, stopping scan",
                offset,
                artifact.job_path(),
            )
            break

        chunk = bytes(buffer[:read])
        # A trailing newline ends the last line, so one more newline is
        # needed to find where the first wanted line starts
        if end == artifact_size and chunk.endswith(b"\n"):
            needed += 1
        newlines += chunk.count(b"\n")
        chunks.appendleft(chunk)
        end = offset

    lines = split_lines(b"".join(chunks))
    logger.debug(
        "read %d of %d bytes from %s for %d lines",
        artifact_size - end,
        artifact_size,
        artifact.job_path(),
        n,
    )
    if len(lines) < n:
        return lines
    return lines[len(lines) - n :]


def split_lines(content: bytes) -> list[str]:
    """Split content into lines on ``\\n``.

    A ``\\r`` before the newline is dropped, an unterminated last line is
    still a line, and a trailing newline does not produce an empty line.
    """
    if not content:
        return []
    text = content.decode("utf-8", errors="replace")
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]
