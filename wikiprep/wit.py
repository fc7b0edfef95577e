"""Wiki dump transform: page headers and trailing language links move to a tail.

The encoded form starts with a 21-byte decimal field (padded with spaces)
and a newline, giving the size of the tail.  The main body follows, with
entities shortened and bracket runs flipped.  The tail is two number lines
(header size, language block size), the compact page headers and the
language-link lines taken from the end of article texts.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from enum import Enum
from os import PathLike
from pathlib import Path

from .entities import (
    decode_entities,
    decode_extra_entities,
    decode_numeric_entities,
    encode_entities,
    encode_extra_entities,
    encode_numeric_entities,
    flip_brackets,
    remove_amp,
    restore_amp,
)

StrPath = str | PathLike

_SIZE_FIELD = 21
_PREAMBLE = _SIZE_FIELD + 1
_INT = re.compile(rb"[ \t\r\n\v\f]*([+-]?\d+)")
_TEXT_CLOSERS = (b"</text>", b"</revision>", b"</page>")

# Link prefixes that stay in the text even near its end.
_KEPT_AT_2 = (b"http:", b"user:", b"media:")
_KEPT_AT_3 = (b"mage:", b"ategory:")
_KEPT_EXACT = (
    "r:Wikipédia:Aide]]".encode() + b"\x00",
    b"de:Boogie Down Produ",
    b"da:Wikipedia:Hvordan",
    b"sv:Indiska musikinstrument",
)


def _atoi(data: bytes) -> int:
    match = _INT.match(data)
    return int(match.group(1)) if match else 0


def _lines(data: bytes) -> Iterator[bytes]:
    start = 0
    while start < len(data):
        end = data.find(b"\n", start)
        end = len(data) if end < 0 else end + 1
        yield data[start:end]
        start = end


def _closes_text_tag(line: bytes) -> bool:
    """True if ``line`` holds ``</te`` followed two bytes later by ``>``."""
    index = line.find(b"</te")
    while index >= 0:
        if index + 6 < len(line) and line[index + 6] == ord(">"):
            return True
        index = line.find(b"</te", index + 1)
    return False


def _text_tag(line: bytes) -> tuple[int, bool] | None:
    """Offset after an opening ``<text`` tag and whether it is self-closing."""
    start = line.find(b"<text ")
    if start < 0:
        return None
    end = line.find(b">", start)
    if end < 0:
        raise ValueError("unterminated <text> tag")
    return end + 1, line[end - 1] == ord("/")


class TailExtractor:
    """Moves language links at the end of an article text into a separate block."""

    def __init__(self) -> None:
        self.tail = bytearray()
        self._line_no = 0
        self._text_line = 0
        self._in_tail = False
        self._in_comment = False

    def _reset(self) -> None:
        self._line_no = 0
        self._text_line = 0

    def _starts_tail(self, line: bytes) -> bool:
        if not line.startswith(b"[["):
            return False
        end = 2
        while end < len(line) and ord("a") <= line[end] <= ord("z"):
            end += 1
        if end >= len(line) or line[end] != ord(":"):
            return False
        if line[2] == ord(":") or line[3] == ord(":") or self._in_comment:
            return False
        padded = line + b"\x00"
        kept = (
            padded.startswith(_KEPT_AT_2, 2)
            or padded.startswith(_KEPT_AT_3, 3)
            or padded.startswith(_KEPT_EXACT, 2)
            or self._line_no - self._text_line < 4
        )
        return not kept

    def process(self, line: bytes) -> bytes:
        """Return the line for the main body, or ``b""`` if it moved to :attr:`tail`."""
        self._line_no += 1
        if b"<tex" in line:
            self._text_line = self._line_no
        if not self._in_tail:
            if line[6:15] == b"<comment>":
                self._in_comment = True
            if self._in_comment and b"</co" in line:
                self._in_comment = False
                self._reset()
                return line
            if not self._starts_tail(line):
                return line
            self._in_tail = True
            if _closes_text_tag(line):
                self._in_tail = False
                self._reset()
        elif b"</te" in line:
            self._in_tail = False
            self._reset()
        self.tail += flip_brackets(line)
        return b""


class TailRestorer:
    """Puts language links back before the ``</revision>`` line they were cut from."""

    def __init__(self, lang: bytes) -> None:
        self._lang = bytes(lang)
        self._pos = 0
        self._line_no = 0
        self._text_line = 0
        self._in_text = False

    def _next_lang_line(self) -> bytes:
        end = self._lang.find(b"\n", self._pos)
        if end < 0:
            raise ValueError("language block ended early")
        line = self._lang[self._pos : end + 1]
        self._pos = end + 1
        return line

    def process(self, line: bytes) -> bytes | None:
        """Return the restored links plus ``line``, or None if nothing was cut here."""
        self._line_no += 1
        if b"<tex" in line:
            self._in_text = True
            self._text_line = self._line_no
        if _closes_text_tag(line):
            self._in_text = False
        if not (
            len(line) >= 12
            and line[-12:-1] == b"</revision>"
            and self._in_text
            and self._line_no - self._text_line >= 4
        ):
            return None
        self._in_text = False
        out = bytearray()
        while True:
            raw = self._next_lang_line()
            text = flip_brackets(raw)
            if not any(tag in text for tag in _TEXT_CLOSERS):
                text = restore_amp(text, 0)
            out += decode_extra_entities(decode_entities(decode_numeric_entities(text)))
            if raw[-8:-1] == b"</text>":
                break
        out += line
        return bytes(out)


class _Section(Enum):
    BODY = 0
    REVISION = 1
    PAGE_HEAD = 2
    CONTRIBUTOR = 3


def _cut_after_value(line: bytes) -> bytes:
    first = line.find(b">")
    if first >= 0:
        second = line.find(b"<", first + 1)
        if second >= 0:
            return line[:second] + b"\n"
    return line


def _require_indent(line: bytes) -> None:
    if not line.startswith(b"    "):
        raise ValueError(f"unexpected header line: {line!r}")


def _encode_body_line(line: bytes, extractor: TailExtractor, in_text: bool) -> tuple[bytes, bool]:
    encoded = encode_numeric_entities(encode_extra_entities(encode_entities(line)))
    skip = 0
    tag = _text_tag(encoded)
    if tag is not None:
        skip, self_closing = tag
        in_text = not self_closing
    if any(closer in encoded for closer in _TEXT_CLOSERS):
        in_text = False
    if in_text:
        encoded = remove_amp(encoded, skip)
    return flip_brackets(extractor.process(encoded)), in_text


def encode_wit(data: bytes) -> bytes:
    """Encode a dump body into the main-plus-tail form."""
    main = bytearray(b" " * _SIZE_FIELD + b"\n")
    header = bytearray()
    extractor = TailExtractor()
    section = _Section.BODY
    last_id = 0
    in_text = False

    for raw in _lines(bytes(data)):
        if section is _Section.PAGE_HEAD:
            if raw[4:8] == b"<ns>":
                _require_indent(raw)
                header += _cut_after_value(raw)[5:]
                continue
            if raw[4:8] != b"<id>":
                raise ValueError(f"expected page id, got {raw!r}")
            current = _atoi(raw[8:])
            header += b">%d\n" % (current - last_id)
            last_id = current
            section = _Section.REVISION
            continue

        if section is not _Section.BODY:
            if raw[6:10] == b"<tim":
                year, month, day = _atoi(raw[17:]), _atoi(raw[22:]), _atoi(raw[25:])
                hour, minute, second = _atoi(raw[28:]), _atoi(raw[31:]), _atoi(raw[34:])
                header += b"timestamp>%02d%d:%d\n" % (
                    year - 2001,
                    month * 31 + day - 32,
                    hour * 3600 + minute * 60 + second,
                )
                continue
            line = _cut_after_value(raw)
            _require_indent(line)
            if section is _Section.CONTRIBUTOR:
                skip = 7 if line[6:10] == b"</co" else 9
            else:
                skip = 5 if line[4:8] in (b"<rev", b"<res", b"<red") else 7
                if line[6:10] == b"<con":
                    section = (
                        _Section.BODY if line[18:22] == b" del" else _Section.CONTRIBUTOR
                    )
            header += line[skip:]
        else:
            line, in_text = _encode_body_line(raw, extractor, in_text)
            main += line

        if not in_text and b"</title>" in line and line.startswith(b"    "):
            section = _Section.PAGE_HEAD
        if b"</contri" in line:
            section = _Section.BODY

    lang = bytes(extractor.tail)
    sizes = b"%d\n%d\n" % (len(header), len(lang))
    digits = b"%d" % (len(sizes) + len(header) + len(lang))
    if len(digits) > _SIZE_FIELD:
        raise ValueError("tail too large")
    main[: len(digits)] = digits
    return bytes(main) + sizes + bytes(header) + lang


class _HeaderDecoder:
    def __init__(self, header: bytes) -> None:
        entries = header.split(b"\n")
        if entries and entries[-1] == b"":
            entries.pop()
        self._entries = entries
        self._pos = 0
        self._last_id = 0

    def _peek(self) -> bytes:
        if self._pos >= len(self._entries):
            raise ValueError("page header block ended early")
        return self._entries[self._pos]

    def _take(self) -> bytes:
        entry = self._peek()
        self._pos += 1
        return entry

    @staticmethod
    def _tag_line(entry: bytes, indent: int, force_close: bool) -> bytes:
        line = b" " * indent + b"<" + entry
        close_at = entry.index(b">")
        if force_close or close_at != len(entry) - 1:
            line += b"</" + entry[: close_at + 1]
        return line + b"\n"

    @staticmethod
    def _timestamp(entry: bytes) -> bytes:
        year = _atoi(entry[10:12])
        days = _atoi(entry[12:])
        seconds = _atoi(entry[entry.index(b":") + 1 :])
        hours = seconds // 3600
        return b"      <timestamp>%d-%02d-%02dT%02d:%02d:%02dZ</timestamp>\n" % (
            year + 2001,
            days // 31 + 1,
            days % 31 + 1,
            hours,
            seconds // 60 - hours * 60,
            seconds % 60,
        )

    def emit(self) -> bytes:
        out = bytearray()
        fields_seen = 0
        in_contributor = False
        entry = self._take()
        while True:
            indent = 4
            if fields_seen and not entry.startswith((b"redi", b"revi", b"rest")):
                indent += 2
            if in_contributor:
                indent += 2
            if entry.startswith(b"/con"):
                in_contributor = False
            if not fields_seen:
                if entry.startswith(b"ns>"):
                    out += self._tag_line(entry, indent, in_contributor)
                else:
                    fields_seen += 1
                    self._last_id += _atoi(entry[1:])
                    out += b" " * indent + b"<id>%d</id>\n" % self._last_id
            elif entry.startswith(b"time"):
                out += self._timestamp(entry)
            else:
                out += self._tag_line(entry, indent, in_contributor)
                if entry.startswith(b"cont"):
                    in_contributor = True
            following = self._peek()
            if following.startswith((b"contributor dele", b"/contributor>")):
                break
            entry = self._take()
        out += b"      <" + self._take() + b"\n"
        return bytes(out)


def _read_number_line(data: bytes, start: int) -> tuple[int, int]:
    end = data.find(b"\n", start)
    if end < 0:
        raise ValueError("malformed tail")
    return _atoi(data[start:end]), end + 1


def decode_wit(data: bytes) -> bytes:
    """Undo :func:`encode_wit`."""
    data = bytes(data)
    if len(data) < _PREAMBLE:
        raise ValueError("input too short")
    tail_start = len(data) - _atoi(data[:_SIZE_FIELD])
    if tail_start < _PREAMBLE:
        raise ValueError("tail size does not fit the input")
    header_len, pos = _read_number_line(data, tail_start)
    lang_len, pos = _read_number_line(data, pos)
    header = data[pos : pos + header_len]
    lang = data[pos + header_len : pos + header_len + lang_len]

    headers = _HeaderDecoder(header)
    restorer = TailRestorer(lang)
    out = bytearray()
    pending_header = False
    in_text = False
    for raw in _lines(data[_PREAMBLE:tail_start]):
        if pending_header:
            out += headers.emit()
            pending_header = False
        if (
            not in_text
            and len(raw) >= 9
            and raw[-9:-1] == b"</title>"
            and raw.startswith(b"    ")
        ):
            pending_header = True
        line = flip_brackets(raw)
        restored = restorer.process(line)
        if restored is not None:
            out += restored
            continue
        skip = 0
        tag = _text_tag(line)
        if tag is not None:
            skip, self_closing = tag
            in_text = not self_closing
        if any(closer in line for closer in _TEXT_CLOSERS):
            in_text = False
        if in_text:
            line = restore_amp(line, skip)
        out += decode_extra_entities(decode_entities(decode_numeric_entities(line)))
    return bytes(out)


def preprocess_file(source: StrPath, target: StrPath) -> None:
    """Encode the file ``source`` into ``target``."""
    Path(target).write_bytes(encode_wit(Path(source).read_bytes()))


def restore_file(source: StrPath, target: StrPath) -> None:
    """Decode the file ``source`` into ``target``."""
    Path(target).write_bytes(decode_wit(Path(source).read_bytes()))