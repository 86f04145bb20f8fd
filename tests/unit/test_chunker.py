"""Unit tests for sliding-window chunking."""

import pytest
import pytest_check as check

from chat_playground.parsing.chunker import chunk_text


def _long_text(length: int) -> str:
    words = "alpha beta gamma delta epsilon zeta eta theta iota kappa "
    return (words * (length // len(words) + 1))[:length]


class TestChunkText:
    """Tests for chunk boundaries and limits."""

    @pytest.mark.parametrize("length", [1000, 1001, 1799, 2500, 7321])
    def test_chunks_are_trimmed_and_cover_the_end(self, length: int) -> None:
        text = _long_text(length)
        chunks = chunk_text(text, size=1000, overlap=200)

        check.greater(len(chunks), 0)
        for chunk in chunks:
            check.equal(chunk, chunk.strip())
            check.greater(len(chunk), 0)
            check.less_equal(len(chunk), 1000)
        check.is_true(text.strip().endswith(chunks[-1]))

    def test_short_text_yields_single_chunk(self) -> None:
        chunks = chunk_text("   Hello world, this is short.  ")

        assert chunks == ["Hello world, this is short."]

    def test_consecutive_chunks_overlap(self) -> None:
        text = "".join(chr(ord("a") + i % 26) for i in range(1500))
        chunks = chunk_text(text, size=1000, overlap=200)

        assert len(chunks) == 2
        check.equal(chunks[0], text[:1000])
        check.equal(chunks[1], text[800:1500])
        check.equal(chunks[0][-200:], chunks[1][:200])

    def test_window_advances_by_size_minus_overlap(self) -> None:
        chunks = chunk_text("abcdefghij", size=4, overlap=1)

        assert chunks == ["abcd", "defg", "ghij"]

    def test_respects_max_chunks(self) -> None:
        chunks = chunk_text(_long_text(100_000), size=1000, overlap=200, max_chunks=50)

        assert len(chunks) == 50

    def test_whitespace_windows_are_skipped(self) -> None:
        text = "abc" + " " * 22 + "xyz"
        chunks = chunk_text(text, size=5, overlap=0)

        check.is_true(all(chunk.strip() for chunk in chunks))
        check.equal(chunks[0], "abc")
        check.equal(chunks[-1], "xyz")

    @pytest.mark.parametrize("text", ["", "   ", "\n\t  \n"])
    def test_blank_input_returns_empty(self, text: str) -> None:
        assert chunk_text(text) == []

    def test_is_deterministic(self) -> None:
        text = _long_text(5000)

        assert chunk_text(text) == chunk_text(text)


class TestChunkTextInvalidConfig:
    """Tests for parameters that would stall the window."""

    @pytest.mark.parametrize(
        ("size", "overlap"),
        [(1000, 1000), (1000, 1500), (0, 0), (100, -1)],
    )
    def test_rejects_invalid_window(self, size: int, overlap: int) -> None:
        with pytest.raises(ValueError):
            chunk_text("some text", size=size, overlap=overlap)

    def test_rejects_zero_max_chunks(self) -> None:
        with pytest.raises(ValueError, match="max_chunks"):
            chunk_text("some text", max_chunks=0)
