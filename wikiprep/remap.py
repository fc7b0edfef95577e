"""Renumber an article order so that redirect articles are skipped."""

from __future__ import annotations

import sys
from collections.abc import Iterable, Iterator, Sequence

REDIRECT_PREFIXES = (
    '      <text xml:space="preserve">#REDIRECT',
    '      <text xml:space="preserve">#redirect',
    '      <text xml:space="preserve">#Redirect',
    '      <text xml:space="preserve">#REdirect',
    '      <text xml:space="preserve">{{softredirect',
)

PAGE_LINE = "  <page>"


def build_remap(lines: Iterable[str]) -> dict[int, int]:
    """Map each article number to its number among non-redirect articles.

    A redirect marker seen before a ``<page>`` line excludes the number
    counted at that line, matching the original numbering scheme.
    """
    remap: dict[int, int] = {}
    all_count = -1
    kept_count = -1
    redirect = False
    for raw in lines:
        line = raw[:-1] if raw.endswith("\n") else raw
        if line.startswith(REDIRECT_PREFIXES):
            redirect = True
        if line == PAGE_LINE:
            if not redirect:
                remap[all_count] = kept_count
                kept_count += 1
            all_count += 1
            redirect = False
    return remap


def remap_order(order_lines: Iterable[str], remap: dict[int, int]) -> Iterator[int]:
    """Yield the remapped number of each listed article that has one."""
    for line in order_lines:
        number = int(line.strip())
        if number in remap:
            yield remap[number]


def _read_lines(path: str) -> Iterator[str]:
    with open(path, encoding="latin-1", newline="") as handle:
        for line in handle:
            yield line.rstrip("\n")


def main(argv: Sequence[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 2:
        print("Usage: remap article_path enwik9_path")
        return 0
    order_path, dump_path = args
    remap = build_remap(_read_lines(dump_path))
    for number in remap_order(_read_lines(order_path), remap):
        print(number)
    return 0


if __name__ == "__main__":
    sys.exit(main())