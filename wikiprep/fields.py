"""Moving page header fields out of their tags and back.

Each page's header values (title, ids, restrictions, timestamp,
contributor and minor flag) become nine bare lines, followed by the
page's comment and text blocks.  The reverse step rebuilds the full
page markup around them.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from os import PathLike
from pathlib import Path

from .patterns import strip

StrPath = str | PathLike

MINOR_MARK = b"_"
"""Field value standing for a ``<minor />`` tag."""

FIELD_COUNT = 9

# Opening and closing tag of each field, in output order.  Three fields
# share the ``<id>`` tag: the page id, the revision id and the
# contributor id, filled in that order.
_FIELD_TAGS = (
    (b"<title>", b"</title>"),
    (b"<id>", b"</id>"),
    (b"<restrictions>", b"</restrictions>"),
    (b"<id>", b"</id>"),
    (b"<timestamp>", b"</timestamp>"),
    (b"<username>", b"</username>"),
    (b"<id>", b"</id>"),
    (b"<ip>", b"</ip>"),
    (b"<minor />", b"<minor />"),
)
_PAGE_ID = 1
_REVISION_ID = 3
_CONTRIBUTOR_ID = 6
_MINOR = 8


def _split_lines(data: bytes) -> list[bytes]:
    parts = data.split(b"\n")
    if parts[-1] == b"":
        parts.pop()
    return parts


def _store_field(fields: list[bytes], stripped: bytes) -> None:
    for index, (opening, _closing) in enumerate(_FIELD_TAGS):
        if opening not in stripped:
            continue
        if index == _PAGE_ID and fields[index]:
            index = _REVISION_ID
        if index == _REVISION_ID and fields[index]:
            index = _CONTRIBUTOR_ID
        if index == _MINOR:
            fields[index] = MINOR_MARK
            return
        opening, closing = _FIELD_TAGS[index]
        value = stripped[len(opening) :]
        if len(value) < len(closing):
            raise ValueError(f"cannot take a field value from {stripped!r}")
        fields[index] = value[: len(value) - len(closing)]
        return


def _text_ends(line: bytes) -> bool:
    return b"</text>" in line or (b"/>" in line and b"<text" in line)


def fields_transform(lines: Iterable[bytes]) -> bytes:
    """Replace each page's header markup with its bare field values.

    Lines are given without newlines.  Whatever follows the last
    ``</page>`` line is written once more at the end.
    """
    out = bytearray()
    fields = [b""] * FIELD_COUNT
    started = in_comment = in_text = False
    page = bytearray()
    comment = bytearray()
    text = bytearray()

    for line in lines:
        stripped = strip(line)
        page += line + b"\n"

        if b"<comment>" in stripped:
            comment.clear()
            in_comment = True
        if in_comment:
            comment += line + b"\n"
            if b"</comment>" in stripped:
                in_comment = False
            continue

        if b"<text" in stripped and not in_text:
            text.clear()
            in_text = True
        if in_text:
            text += line + b"\n"
            if _text_ends(stripped):
                in_text = False
            continue

        if b"<page>" in stripped:
            fields = [b""] * FIELD_COUNT
            started = True

        if started:
            _store_field(fields, stripped)
        else:
            out += line + b"\n"

        if b"</page>" in stripped:
            out += b"".join(field + b"\n" for field in fields)
            out += comment + text
            page.clear()
            comment.clear()

    out += page
    return bytes(out)


def _rebuild_page(fields: Sequence[bytes], comment: bytes, text: bytes) -> bytes:
    if len(fields) < FIELD_COUNT:
        raise ValueError(
            f"page needs {FIELD_COUNT} field lines, found {len(fields)}"
        )
    (
        title,
        page_id,
        restrictions,
        revision_id,
        timestamp,
        username,
        contributor_id,
        ip,
        minor,
    ) = fields[:FIELD_COUNT]
    parts = [
        b"  <page>\n",
        b"    <title>" + title + b"</title>\n",
        b"    <id>" + page_id + b"</id>\n",
    ]
    if restrictions:
        parts.append(b"    <restrictions>" + restrictions + b"</restrictions>\n")
    parts.append(b"    <revision>\n")
    if revision_id:
        parts.append(b"      <id>" + revision_id + b"</id>\n")
    if timestamp:
        parts.append(b"      <timestamp>" + timestamp + b"</timestamp>\n")
    parts.append(b"      <contributor>\n")
    if username:
        parts.append(b"        <username>" + username + b"</username>\n")
    if contributor_id:
        parts.append(b"        <id>" + contributor_id + b"</id>\n")
    if ip:
        parts.append(b"        <ip>" + ip + b"</ip>\n")
    parts.append(b"      </contributor>\n")
    if minor == MINOR_MARK:
        parts.append(b"      <minor />\n")
    parts += [comment, text, b"    </revision>\n", b"  </page>\n"]
    return b"".join(parts)


def fields_detransform(lines: Iterable[bytes]) -> bytes:
    """Undo :func:`fields_transform`, rebuilding the markup of each page.

    Lines are given without newlines.  The text block of the last page
    is written once more at the end.
    """
    out = bytearray()
    page = bytearray()
    comment = bytearray()
    text = bytearray()
    in_comment = in_text = False

    for line in lines:
        if b"<comment>" in line:
            in_comment = True
            comment.clear()
        if in_comment:
            comment += line + b"\n"
        if b"</comment>" in line:
            in_comment = False

        if b"<text" in line:
            in_text = True
            text.clear()
        if in_text:
            text += line + b"\n"

        if not in_text and not in_comment:
            page += line + b"\n"

        if _text_ends(line):
            fields = _split_lines(bytes(page)) if page else []
            page.clear()
            out += _rebuild_page(fields, bytes(comment), bytes(text))
            in_text = False
            comment.clear()

        if b"</siteinfo>" in line:
            out += page
            page.clear()

    out += page
    out += text
    return bytes(out)


def fields_transform_file(source: StrPath, target: StrPath) -> None:
    """Apply :func:`fields_transform` to the file ``source``, writing ``target``."""
    lines = _split_lines(Path(source).read_bytes())
    Path(target).write_bytes(fields_transform(lines))


def fields_detransform_file(source: StrPath, target: StrPath) -> None:
    """Apply :func:`fields_detransform` to the file ``source``, writing ``target``."""
    lines = _split_lines(Path(source).read_bytes())
    Path(target).write_bytes(fields_detransform(lines))