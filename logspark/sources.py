"""Line sources for analysis runs."""

import os
from typing import Iterable, Iterator, Union

LineSource = Union[str, os.PathLike, Iterable[str]]

DEFAULT_CHUNK_SIZE = 100_000


def read_lines(source: LineSource) -> Iterator[str]:
    """
    Yield input lines from a file path or an iterable of lines.

    Files are streamed, so inputs larger than memory are fine for
    sequential runs. Line terminators are left in place; the format
    handlers strip them.
    """
    if isinstance(source, (str, os.PathLike)):
        # Split on "\n" only; a stray "\r" stays inside its line.
        # utf-8-sig drops a leading byte order mark before the header.
        with open(source, "r", encoding="utf-8-sig", newline="\n") as f:
            yield from f
    else:
        yield from source


def chunk_lines(
    lines: Iterable[str], chunk_size: int = DEFAULT_CHUNK_SIZE
) -> Iterator[tuple[int, list[str]]]:
    """
    Split lines into consecutive chunks.

    Args:
        lines: Input lines.
        chunk_size: Maximum lines per chunk. Must be >= 1.

    Yields:
        (offset, lines) pairs, where offset is the 0-based index of the
        chunk's first line in the whole input.
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")
    chunk: list[str] = []
    offset = 0
    for line in lines:
        chunk.append(line)
        if len(chunk) >= chunk_size:
            yield offset, chunk
            offset += len(chunk)
            chunk = []
    if chunk:
        yield offset, chunk


def get_parallel_workers(requested=None) -> int:
    """Get number of parallel workers to use.

    Args:
        requested: Specific number of workers requested by user.
                   None means one worker per CPU.

    Returns:
        Number of workers to use (minimum 1).
    """
    if requested is not None:
        return max(1, requested)
    return os.cpu_count() or 1
