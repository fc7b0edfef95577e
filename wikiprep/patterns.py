"""Reversible removal of the structural tags around each article.

Each article's tags are reduced to a short pattern string, replaced by a
one-byte identifier written after its closing ``</page>`` tag.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from os import PathLike
from pathlib import Path

StrPath = str | PathLike

_WHITESPACE = b" \t\r\n"
_PAGE_END = b"</page>"

# Order matters: a line that is only a tag counts as ending with it.
_TAG_CHARS = (
    (b"<comment>", ord("c")),
    (b"</comment>", ord("c")),
    (b"<page>", ord("p")),
    (b"</page>", ord("p")),
    (b"<title>", ord("t")),
    (b"</title>", ord("t")),
    (b"<text ", ord("x")),
    (b"</text>", ord("x")),
    (b"<minor />", ord("m")),
    (b"</revision>", ord("r")),
)

PATTERN_MAP = {
    ord("a"): b"pttmccxxrp",
    ord("b"): b"pttmccxrp",
    ord("c"): b"pttccxrp",
    ord("d"): b"pttxrp",
    ord("e"): b"pttmxrp",
    ord("f"): b"pttccxxrp",
    ord("g"): b"pttxxrp",
    ord("h"): b"pttmxxrp",
    ord("i"): b"pttcCxxrp",
    ord("j"): b"pttmcCxrp",
    ord("k"): b"pttmcCxxrp",
    ord("l"): b"pttcCxrp",
}
"""Identifiers of the patterns restored on decoding."""

_TAG_MAP = {
    ord("p"): (b"  <page>", b"  </page>"),
    ord("t"): (b"    <title>", b"</title>"),
    ord("c"): (b"      <comment>", b"</comment>"),
    ord("x"): (b"      <text ", b"</text>"),
    ord("m"): (b"      <minor />",),
    ord("r"): (b"    </revision>",),
}

_P, _X = ord("p"), ord("x")


def lstrip(line: bytes) -> bytes:
    """Remove leading spaces, tabs, carriage returns and newlines."""
    return line.lstrip(_WHITESPACE)


def rstrip(line: bytes) -> bytes:
    """Remove trailing spaces, tabs, carriage returns and newlines."""
    return line.rstrip(_WHITESPACE)


def strip(line: bytes) -> bytes:
    """Remove spaces, tabs, carriage returns and newlines on both sides."""
    return rstrip(lstrip(line))


def _split_lines(data: bytes) -> list[bytes]:
    parts = data.split(b"\n")
    if parts[-1] == b"":
        parts.pop()
    return parts


def _lower(code: int) -> int:
    return bytes((code,)).lower()[0]


def pattern_transform(
    lines: Iterable[bytes],
) -> tuple[list[bytes], dict[bytes, bytes]]:
    """Strip article tags, returning the new lines and each pattern's identifier.

    Lines are given and returned without newlines.  Everything after the
    last article is passed through unchanged.
    """
    out: list[bytes] = []
    identifiers: dict[bytes, bytes] = {}
    next_id = ord("a")
    pattern = b""
    start_line = b""
    finished = False
    after_page_end = False

    for line in lines:
        if finished:
            out.append(line)
            continue
        stripped = strip(line)
        if after_page_end:
            if b"<page>" not in stripped:
                finished = True
                out.append(line)
                continue
            after_page_end = False

        found = False
        opening = closing = b""
        for tag, char in _TAG_CHARS:
            doubled = bytes((char, char))
            if stripped.endswith(tag):
                if doubled not in pattern:
                    if tag == b"</comment>" and stripped != start_line:
                        pattern += bytes((char,)).upper()
                    else:
                        pattern += bytes((char,))
                    found = True
                    closing = tag
                continue
            if stripped.startswith(tag):
                if doubled not in pattern:
                    pattern += bytes((char,))
                    start_line = stripped
                    found = True
                    opening = tag
                continue

        if stripped.startswith(_PAGE_END):
            after_page_end = True
            if pattern not in identifiers:
                identifiers[pattern] = bytes((next_id % 256,))
                next_id += 1
            out.append(_PAGE_END + identifiers[pattern] + stripped[len(_PAGE_END) :])
            pattern = b""
        elif found:
            if opening and stripped.startswith(opening):
                if opening != b"</text>":
                    line = lstrip(line)
                line = line[len(opening) :]
            if closing and stripped.endswith(closing):
                if len(line) < len(closing):
                    raise ValueError(f"cannot remove {closing!r} from {line!r}")
                line = line[: len(line) - len(closing)]
            if line.endswith(b"\n"):
                line = line[:-1]
            out.append(line)
        else:
            out.append(line)
    return out, identifiers


def _pop_front(current: deque[bytes]) -> None:
    if not current:
        raise ValueError("article has fewer lines than its pattern needs")
    current.popleft()


def _rebuild_article(
    pattern: bytes, end_line: bytes, current: deque[bytes]
) -> list[bytes]:
    new: list[bytes] = []
    seen: set[int] = set()
    for code in pattern:
        key = _lower(code)
        tags = _TAG_MAP.get(key)
        if key in b"pmr":
            if key in seen:
                suffix = end_line[8:] if key == _P else b""
                new.append(tags[1] + suffix + b"\n")
            else:
                new.append(tags[0] + b"\n")
                seen.add(key)
            _pop_front(current)
        elif key in b"tc" and current:
            if key in seen:
                if code == ord("C"):
                    while current:
                        if len(current) < 2:
                            raise ValueError("comment runs past the article")
                        if current[1].startswith(b"xml"):
                            break
                        current.popleft()
                        new[-1] += current[0] + b"\n"
                new[-1] = new[-1][:-1] + tags[1] + b"\n"
                current.popleft()
            else:
                new.append(tags[0] + current[0] + b"\n")
                seen.add(key)
        elif key == _X and current:
            if key in seen:
                new[-1] = new[-1][:-1] + tags[1] + b"\n"
                continue
            seen.add(key)
            text = b"".join(line + b"\n" for line in list(current)[:-1])
            new.append(tags[0] + text)
    return new


def pattern_detransform(lines: Iterable[bytes]) -> bytes:
    """Undo :func:`pattern_transform`, returning the restored text.

    The first line is copied as is; an unknown identifier drops the article.
    """
    lines = iter(lines)
    out = bytearray(next(lines, b"") + b"\n")
    current: deque[bytes] = deque()
    for line in lines:
        stripped = strip(line)
        if not stripped.startswith(_PAGE_END):
            current.append(line)
            continue
        ident = stripped[7] if len(stripped) > 7 else 0
        pattern = PATTERN_MAP.get(ident, b"")
        out += b"".join(_rebuild_article(pattern, stripped, current))
        current.clear()
    out += b"".join(line + b"\n" for line in current)
    return bytes(out)


def pattern_transform_file(
    source: StrPath, target: StrPath, map_path: StrPath = "pattern_map.txt"
) -> None:
    """Transform ``source`` into ``target`` and list the patterns in ``map_path``."""
    out, identifiers = pattern_transform(_split_lines(Path(source).read_bytes()))
    Path(target).write_bytes(b"".join(line + b"\n" for line in out))
    Path(map_path).write_bytes(
        b"".join(
            ident + b": " + pattern + b"\n" for pattern, ident in identifiers.items()
        )
    )


def pattern_detransform_file(source: StrPath, target: StrPath) -> None:
    """Restore the tags of ``source`` into ``target``."""
    data = Path(source).read_bytes()
    Path(target).write_bytes(pattern_detransform(_split_lines(data)))