"""Tests for artifactlens.tail module."""

import pytest

from artifactlens.errors import ArtifactReadError, GzipOffsetReadError
from artifactlens.tail import (
    AVERAGE_LINE_LENGTH,
    last_n_lines,
    last_n_lines_chunked,
    split_lines,
)


def _full_scan(content: str, n: int) -> list[str]:
    """Reference result: split everything, keep the last n lines."""
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    lines = [line[:-1] if line.endswith("\r") else line for line in lines]
    return lines[-n:] if n else []


class TestLastNLinesChunked:
    """Tests for last_n_lines_chunked."""

    def test_last_two_of_four(self, make_artifact):
        """Chunks smaller than the content still give the last lines."""
        artifact = make_artifact("a\nb\nc\nd\n")
        assert last_n_lines_chunked(artifact, 2, 3) == ["c", "d"]

    def test_reads_backward_from_end(self, make_artifact):
        """Each window ends where the previous one started."""
        artifact = make_artifact("a\nb\nc\nd\n")
        last_n_lines_chunked(artifact, 2, 3)
        assert artifact.reads == [(5, 3), (2, 3)]

    def test_single_line_without_newline(self, make_artifact):
        """An unterminated line is still a line."""
        artifact = make_artifact("only one line, no newline")
        assert last_n_lines_chunked(artifact, 5, 4) == ["only one line, no newline"]

    def test_fewer_lines_than_requested(self, make_artifact):
        """All lines come back, in order, when there are fewer than n."""
        artifact = make_artifact("first\nsecond\nthird\n")
        assert last_n_lines_chunked(artifact, 10, 5) == ["first", "second", "third"]

    def test_zero_lines_only_queries_size(self, make_artifact):
        """n=0 returns nothing after a single size query."""
        artifact = make_artifact("a\nb\nc\n")
        assert last_n_lines_chunked(artifact, 0, 4) == []
        assert artifact.size_calls == 1
        assert artifact.reads == []

    def test_small_artifact_single_read(self, make_artifact):
        """An artifact smaller than one chunk is read once from offset 0."""
        artifact = make_artifact("x\ny\n")
        assert last_n_lines_chunked(artifact, 10, 100) == ["x", "y"]
        assert artifact.reads == [(0, 4)]

    def test_empty_artifact(self, make_artifact):
        """An empty artifact has no lines and needs no reads."""
        artifact = make_artifact("")
        assert last_n_lines_chunked(artifact, 3, 10) == []
        assert artifact.reads == []

    def test_does_not_read_whole_artifact(self, make_artifact):
        """Only the end of a large artifact is fetched."""
        content = "".join(f"line {i}\n" for i in range(10000))
        artifact = make_artifact(content)

        result = last_n_lines_chunked(artifact, 3, 64)

        assert result == ["line 9997", "line 9998", "line 9999"]
        assert sum(length for _, length in artifact.reads) < 200

    def test_first_line_not_truncated(self, make_artifact):
        """A line cut by the chunk boundary is never returned."""
        artifact = make_artifact("aaaaaaaa\nbb\ncc\n")
        # The window "\nbb\ncc\n" has exactly 3 newlines but line "aaaaaaaa"
        # starts before it
        assert last_n_lines_chunked(artifact, 2, 7) == ["bb", "cc"]
        assert last_n_lines_chunked(artifact, 3, 7) == ["aaaaaaaa", "bb", "cc"]

    def test_crlf_line_endings(self, make_artifact):
        """Carriage returns before newlines are dropped."""
        artifact = make_artifact("one\r\ntwo\r\nthree\r\n")
        assert last_n_lines_chunked(artifact, 2, 4) == ["two", "three"]

    def test_blank_lines_are_kept(self, make_artifact):
        """Empty lines count as lines."""
        artifact = make_artifact("a\n\n\nb\n")
        assert last_n_lines_chunked(artifact, 3, 2) == ["", "", "b"]

    def test_multibyte_characters_split_across_chunks(self, make_artifact):
        """UTF-8 sequences split by chunk boundaries decode correctly."""
        artifact = make_artifact("héllo\nwörld\n日本語\n")
        assert last_n_lines_chunked(artifact, 2, 1) == ["wörld", "日本語"]

    def test_short_read_is_not_an_error(self, make_artifact):
        """End-of-data during a read keeps the bytes that were read."""
        # Artifact shrank after its size was reported
        artifact = make_artifact("a\nb\n", reported_size=10)
        assert last_n_lines_chunked(artifact, 5, 100) == ["a", "b"]

    def test_empty_read_stops_scan(self, make_artifact):
        """A read returning no bytes ends the scan instead of looping."""
        artifact = make_artifact("", reported_size=50)
        assert last_n_lines_chunked(artifact, 5, 10) == []
        assert len(artifact.reads) == 1

    @pytest.mark.parametrize(
        "content",
        [
            "\n",
            "\n\n\n",
            "a",
            "a\n",
            "a\nb",
            "one\ntwo\nthree\n",
            "x\r\ny\r\nz",
            "a long first line " * 10 + "\nshort\n\nlast",
            "\n\nleading blanks\n",
        ],
    )
    def test_matches_full_scan(self, make_artifact, content):
        """Any chunk size gives the same lines as scanning everything."""
        for n in (1, 2, 3, 5, 20):
            for chunk_size in (1, 2, 3, 7, 64, 1000):
                artifact = make_artifact(content)
                result = last_n_lines_chunked(artifact, n, chunk_size)
                assert result == _full_scan(content, n), (n, chunk_size)

    def test_negative_line_count(self, make_artifact):
        with pytest.raises(ValueError, match="line count"):
            last_n_lines_chunked(make_artifact("a\n"), -1, 10)

    def test_chunk_size_must_be_positive(self, make_artifact):
        with pytest.raises(ValueError, match="chunk size"):
            last_n_lines_chunked(make_artifact("a\n"), 1, 0)


class TestLastNLinesErrors:
    """Tests for error propagation."""

    def test_size_failure_is_wrapped(self, make_artifact):
        """A failing size query surfaces as ArtifactReadError."""
        cause = ConnectionError("storage unreachable")
        artifact = make_artifact("a\n", size_error=cause)

        with pytest.raises(ArtifactReadError, match="error getting artifact size") as exc:
            last_n_lines_chunked(artifact, 1, 10)

        assert exc.value.__cause__ is cause
        assert artifact.reads == []

    def test_read_failure_is_wrapped(self, make_artifact):
        """I/O errors abort the scan with context."""
        cause = OSError("connection reset")
        artifact = make_artifact("a\nb\nc\n", read_error=cause)

        with pytest.raises(ArtifactReadError, match="error reading artifact") as exc:
            last_n_lines_chunked(artifact, 2, 2)

        assert exc.value.__cause__ is cause
        assert "build-log.txt" in str(exc.value)
        assert len(artifact.reads) == 1

    def test_unsupported_offset_read_propagates(self, make_artifact):
        """Gzip artifacts fail on the first read with no retries."""
        artifact = make_artifact("a\nb\nc\n", read_error=GzipOffsetReadError())

        with pytest.raises(GzipOffsetReadError):
            last_n_lines_chunked(artifact, 2, 2)

        assert artifact.size_calls == 1
        assert len(artifact.reads) == 1


class TestLastNLines:
    """Tests for the default chunk size heuristic."""

    def test_default_chunk_size(self, make_artifact):
        """Chunks are 300 bytes per requested line plus one."""
        content = "".join(f"line {i}\n" for i in range(5000))
        artifact = make_artifact(content)

        result = last_n_lines(artifact, 2)

        assert result == ["line 4998", "line 4999"]
        chunk_size = AVERAGE_LINE_LENGTH * 2 + 1
        assert artifact.reads[0] == (len(content) - chunk_size, chunk_size)
        assert len(artifact.reads) == 1

    def test_long_lines_need_more_chunks(self, make_artifact):
        """Lines longer than the average are still returned whole."""
        long_line = "x" * 1000
        content = "\n".join([long_line] * 5) + "\n"
        artifact = make_artifact(content)

        assert last_n_lines(artifact, 2) == [long_line, long_line]
        assert len(artifact.reads) > 1

    def test_zero_lines(self, make_artifact):
        artifact = make_artifact("a\nb\n")
        assert last_n_lines(artifact, 0) == []
        assert artifact.reads == []


class TestSplitLines:
    """Tests for split_lines."""

    def test_empty(self):
        assert split_lines(b"") == []

    def test_trailing_newline_adds_no_line(self):
        assert split_lines(b"a\nb\n") == ["a", "b"]

    def test_unterminated_last_line(self):
        assert split_lines(b"a\nb") == ["a", "b"]

    def test_only_newline(self):
        assert split_lines(b"\n") == [""]

    def test_strips_carriage_return(self):
        assert split_lines(b"a\r\nb\r") == ["a", "b"]

    def test_invalid_utf8_is_replaced(self):
        assert split_lines(b"ok\n\xff\n") == ["ok", "�"]
