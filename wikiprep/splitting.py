"""Splitting a dump into intro, main and coda parts by line number, and joining files."""

from __future__ import annotations

import shutil
from collections.abc import Sequence
from os import PathLike
from pathlib import Path

StrPath = str | PathLike

# Line boundaries used when preparing the dump for compression: lines before
# the first value form the intro, lines before the second the main body.
COMPRESSION_BOUNDARIES = (29, 13146932)

# After decompression the main body comes first, followed by intro and coda.
DECOMPRESSION_BOUNDARIES = (13146906, 13146935)


def split_by_lines(data: bytes, boundaries: Sequence[int]) -> list[bytes]:
    """Cut ``data`` into ``len(boundaries) + 1`` parts.

    Part ``n`` holds the lines whose zero-based index is below ``boundaries[n]``
    and not below the previous boundary; the last part holds the rest.
    A line ends with (and includes) a newline byte.
    """
    if any(later < earlier for earlier, later in zip(boundaries, boundaries[1:])):
        raise ValueError("boundaries must be non-decreasing")
    if any(boundary < 0 for boundary in boundaries):
        raise ValueError("boundaries must not be negative")

    cuts = []
    position = 0
    lines_seen = 0
    for boundary in boundaries:
        while lines_seen < boundary and position < len(data):
            newline = data.find(b"\n", position)
            position = len(data) if newline < 0 else newline + 1
            lines_seen += 1
        cuts.append(position)

    starts = [0, *cuts]
    ends = [*cuts, len(data)]
    return [data[start:end] for start, end in zip(starts, ends)]


def _write_parts(parts: Sequence[bytes], paths: Sequence[StrPath]) -> None:
    for part, path in zip(parts, paths):
        Path(path).write_bytes(part)


def split_for_compression(
    source: StrPath, intro_path: StrPath, main_path: StrPath, coda_path: StrPath
) -> None:
    """Split a dump into intro, main body and coda before compression."""
    data = Path(source).read_bytes()
    parts = split_by_lines(data, COMPRESSION_BOUNDARIES)
    _write_parts(parts, (intro_path, main_path, coda_path))


def split_for_decompression(
    source: StrPath, intro_path: StrPath, main_path: StrPath, coda_path: StrPath
) -> None:
    """Split decompressed data, which carries the main body first, into its parts."""
    data = Path(source).read_bytes()
    main, intro, coda = split_by_lines(data, DECOMPRESSION_BOUNDARIES)
    _write_parts((intro, main, coda), (intro_path, main_path, coda_path))


def concatenate(first: StrPath, second: StrPath, target: StrPath) -> None:
    """Write the contents of ``first`` followed by ``second`` into ``target``."""
    with open(target, "wb") as out:
        for path in (first, second):
            with open(path, "rb") as src:
                shutil.copyfileobj(src, out)