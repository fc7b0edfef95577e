"""Reordering dump articles by a stored order and sorting them back by page id."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from os import PathLike
from pathlib import Path

from .remap import PAGE_LINE, REDIRECT_PREFIXES

StrPath = str | PathLike

ARTICLE_COUNT = 243425
"""Number of articles in the full dump body."""

_LINE_LIMIT = 8192 * 8 - 1
_PAGE_LINE = PAGE_LINE.encode()
_REDIRECTS = tuple(prefix.encode() for prefix in REDIRECT_PREFIXES)
_MARKERS = (b"<page>", b"<id>", b"</page>")
_INT = re.compile(rb"[ \t\r\n\v\f]*([+-]?\d+)")


@dataclass(frozen=True)
class Article:
    """An article's page id and the indices of its first and last line."""

    id: int
    start: int
    end: int


def _atoi(data: bytes) -> int:
    match = _INT.match(data)
    return int(match.group(1)) if match else 0


def _parse_order_number(line: bytes | str) -> int:
    raw = line.encode() if isinstance(line, str) else bytes(line)
    match = _INT.match(raw)
    if match is None:
        raise ValueError(f"not an article number: {line!r}")
    return int(match.group(1))


def _dump_lines(data: bytes) -> list[bytes]:
    """Split into lines that keep their newline; very long lines come in chunks."""
    lines = []
    start = 0
    while start < len(data):
        end = data.find(b"\n", start)
        end = len(data) if end < 0 else end + 1
        end = min(end, start + _LINE_LIMIT)
        lines.append(data[start:end])
        start = end
    return lines


def _getline_lines(data: bytes) -> list[bytes]:
    parts = data.split(b"\n")
    if parts[-1] == b"":
        parts.pop()
    return parts


def parse_articles(lines: Iterable[bytes]) -> list[Article]:
    """Find each ``<page>`` ... ``<id>`` ... ``</page>`` run among ``lines``.

    An article that is not closed before the input ends is left out.
    """
    articles = []
    state = 0
    start = 0
    page_id = 0
    for number, line in enumerate(lines):
        marker = line.find(_MARKERS[state])
        if marker < 0:
            continue
        if state == 0:
            start = number
        elif state == 1:
            page_id = _atoi(line[marker + len(_MARKERS[1]) :])
        else:
            articles.append(Article(page_id, start, number))
        state = (state + 1) % len(_MARKERS)
    return articles


def build_order_remap(lines: Iterable[bytes]) -> dict[int, int]:
    """Map numbers among non-redirect articles back to article positions.

    This inverts the numbering used when the article order was stored.
    """
    remap: dict[int, int] = {}
    all_count = -1
    kept_count = -1
    redirect = False
    for raw in lines:
        line = raw[:-1] if raw.endswith(b"\n") else raw
        if line.startswith(_REDIRECTS):
            redirect = True
        if line == _PAGE_LINE:
            remap[kept_count] = all_count
            if not redirect:
                kept_count += 1
            all_count += 1
            redirect = False
    return remap


def _emit(lines: Sequence[bytes], articles: Iterable[Article]) -> bytes:
    return b"".join(
        line for article in articles for line in lines[article.start : article.end + 1]
    )


def _positions(
    order_lines: Iterable[bytes | str], remap: dict[int, int], article_count: int
) -> Iterator[int]:
    used = set()
    listed = 0
    for line in order_lines:
        position = remap.get(_parse_order_number(line), 0)
        if not 0 <= position < article_count:
            raise ValueError(f"article position {position} is out of range")
        used.add(position)
        listed += 1
        yield position
    if listed < article_count:
        yield from (index for index in range(article_count) if index not in used)


def reorder_articles(
    lines: Iterable[bytes],
    order_lines: Iterable[bytes | str],
    article_count: int = ARTICLE_COUNT,
) -> bytes:
    """Write articles in the stored order, followed by all articles not listed.

    Order numbers without a mapping select the first article.
    """
    lines = list(lines)
    articles = parse_articles(lines)
    remap = build_order_remap(lines)
    positions = list(_positions(order_lines, remap, article_count))
    if any(position >= len(articles) for position in positions):
        raise ValueError(
            f"order refers to {article_count} articles, found {len(articles)}"
        )
    return _emit(lines, (articles[position] for position in positions))


def sort_articles(lines: Iterable[bytes]) -> bytes:
    """Write the articles sorted by page id; equal ids keep their order."""
    lines = list(lines)
    articles = sorted(parse_articles(lines), key=lambda article: article.id)
    return _emit(lines, articles)


def reorder_file(main_path: StrPath, order_path: StrPath, target: StrPath) -> None:
    """Reorder the articles of ``main_path`` by the order stored in ``order_path``."""
    lines = _dump_lines(Path(main_path).read_bytes())
    order_lines = _getline_lines(Path(order_path).read_bytes())
    Path(target).write_bytes(reorder_articles(lines, order_lines))


def sort_file(source: StrPath, target: StrPath) -> None:
    """Sort the articles of ``source`` by page id into ``target``."""
    lines = _dump_lines(Path(source).read_bytes())
    Path(target).write_bytes(sort_articles(lines))