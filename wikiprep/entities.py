"""Reversible rewriting of HTML entities and bracket runs in dump lines.

All functions work on one line of raw bytes and return new bytes.
The ``encode_*`` functions shorten entity text; the matching ``decode_*``
functions restore it.  The encoder runs ``encode_entities``,
``encode_extra_entities`` and then ``encode_numeric_entities``; the decoder
runs ``decode_numeric_entities``, ``decode_entities`` and then
``decode_extra_entities``.
"""

from __future__ import annotations

import re

AMP_ESCAPE = 3
"""Marks an ``&amp;`` whose follower would otherwise be read as a short entity."""

NUMERIC_ESCAPE = 5
"""Replaces the ``&`` of a numeric entity that was turned into UTF-8."""

_AMP = ord("&")
_SEMICOLON = ord(";")
_HASH = ord("#")
_DIGITS = frozenset(b"0123456789")

# What may follow "&amp;" and would be ambiguous after shortening.
_AMP_ESCAPE_FOLLOWERS = (
    b'"',
    b"<",
    b">",
    b"!",
    b"*",
    b"^",
    b"\xc2\xb2",
    b"\xc2\xb3",
    b"\xc2\xae",
    b"\xc2\xb0",
    b"\xe2\x82\xac",
    b"\xc3\x97",
    b"\xe2\x88\x92",
    b"\xe2\x88\x88",
    b"\xe2\x86\x92",
)

_BASIC_DECODE = {
    ord("&"): b"amp;",
    ord('"'): b"quot;",
    ord("<"): b"lt;",
    ord(">"): b"gt;",
}

_EXTRA_ENCODE = (
    (b"quot;", b'"'),
    (b"nbsp;", b"!"),
    (b"ndash;", b"*"),
    (b"mdash;", b"^"),
    (b"deg;", b"\xc2\xb0"),
    (b"times;", b"\xc3\x97"),
    (b"lt;", b"<"),
    (b"gt;", b">"),
)

_EXTRA_DECODE_SINGLE = {
    ord('"'): b"quot;",
    ord("<"): b"lt;",
    ord(">"): b"gt;",
    ord("!"): b"nbsp;",
    ord("*"): b"ndash;",
    ord("^"): b"mdash;",
}

_EXTRA_DECODE_PAIRS = (
    (b"\xc2\xb0", b"deg;"),
    (b"\xc3\x97", b"times;"),
)

_BRACKET_RUNS = re.compile(rb"\{+|\}+|\[+|\]+")


def utf8_length(lead: int) -> int:
    """Number of bytes in a UTF-8 sequence starting with byte ``lead`` (1 to 6)."""
    if not 0 <= lead <= 0xFF:
        raise ValueError(f"not a byte value: {lead}")
    if lead < 0xC0:
        return 1
    if lead < 0xE0:
        return 2
    if lead < 0xF0:
        return 3
    if lead < 0xF8:
        return 4
    if lead < 0xFC:
        return 5
    return 6


def utf8_to_codepoint(data: bytes) -> int:
    """Decode the UTF-8 sequence at the start of ``data``.

    A lone byte is read as a signed char; sequences longer than four
    bytes decode to 0.
    """
    if not data:
        raise ValueError("no bytes to decode")
    length = utf8_length(data[0])
    if length > 4:
        return 0
    if len(data) < length:
        raise ValueError("truncated UTF-8 sequence")
    first = data[0]
    if length == 1:
        return first - 256 if first >= 0x80 else first
    if length == 2:
        return (first & 0x1F) << 6 | data[1] & 0x3F
    if length == 3:
        return (first & 0x1F) << 12 | (data[1] & 0x3F) << 6 | data[2] & 0x3F
    return (
        (first & 0x0F) << 18
        | (data[1] & 0x3F) << 12
        | (data[2] & 0x3F) << 6
        | data[3] & 0x3F
    )


def codepoint_to_utf8(codepoint: int) -> bytes:
    """Encode ``codepoint`` as UTF-8 without checking for surrogates."""
    if codepoint < 0 or codepoint >= 0x110000:
        raise ValueError(f"code point out of range: {codepoint}")
    if codepoint < 0x80:
        return bytes((codepoint,))
    if codepoint < 0x800:
        return bytes((codepoint >> 6 | 0xC0, codepoint & 0x3F | 0x80))
    if codepoint < 0x10000:
        return bytes(
            (
                codepoint >> 12 | 0xE0,
                codepoint >> 6 & 0x3F | 0x80,
                codepoint & 0x3F | 0x80,
            )
        )
    return bytes(
        (
            codepoint >> 18 | 0xF0,
            codepoint >> 12 & 0x3F | 0x80,
            codepoint >> 6 & 0x3F | 0x80,
            codepoint & 0x3F | 0x80,
        )
    )


def numeric_length(data: bytes) -> int:
    """Count the digits before the first ``;``; 0 if anything else comes first."""
    end = data.find(b";")
    if end < 0:
        return 0
    digits = data[:end]
    return len(digits) if all(byte in _DIGITS for byte in digits) else 0


def encode_entities(line: bytes) -> bytes:
    """Shorten ``&amp;``, ``&quot;``, ``&lt;`` and ``&gt;`` to ``&`` plus one byte."""
    line = bytes(line)
    out = bytearray()
    i = 0
    while i < len(line):
        byte = line[i]
        i += 1
        out.append(byte)
        if byte != _AMP:
            continue
        if line.startswith(b"amp;", i):
            out.append(_AMP)
            i += 4
            if line.startswith(_AMP_ESCAPE_FOLLOWERS, i):
                out.append(AMP_ESCAPE)
        elif line.startswith(b"quot;", i):
            out += b'"'
            i += 5
        elif line.startswith(b"lt;", i):
            out += b"<"
            i += 3
        elif line.startswith(b"gt;", i):
            out += b">"
            i += 3
    return bytes(out)


def decode_entities(line: bytes) -> bytes:
    """Undo :func:`encode_entities`."""
    line = bytes(line)
    out = bytearray()
    i = 0
    while i < len(line):
        byte = line[i]
        i += 1
        out.append(byte)
        if byte != _AMP or i >= len(line):
            continue
        follower = line[i]
        i += 1
        out += _BASIC_DECODE.get(follower, bytes((follower,)))
    return bytes(out)


def encode_extra_entities(line: bytes) -> bytes:
    """Shorten entities written as ``&amp;name;`` (already ``&&name;``)."""
    line = bytes(line)
    out = bytearray()
    i = 0
    while i < len(line):
        byte = line[i]
        i += 1
        out.append(byte)
        if byte != _AMP or i < 2 or line[i - 2] != _AMP:
            continue
        for token, replacement in _EXTRA_ENCODE:
            if line.startswith(token, i):
                out += replacement
                i += len(token)
                break
    return bytes(out)


def decode_extra_entities(line: bytes) -> bytes:
    """Undo :func:`encode_extra_entities` after :func:`decode_entities`."""
    line = bytes(line)
    out = bytearray()
    i = 0
    while i < len(line):
        byte = line[i]
        i += 1
        out.append(byte)
        if (
            byte != _SEMICOLON
            or i < 5
            or line[i - 5 : i - 1] != b"&amp"
            or i >= len(line)
        ):
            continue
        follower = line[i]
        i += 1
        if follower == AMP_ESCAPE:
            continue
        if follower in _EXTRA_DECODE_SINGLE:
            out += _EXTRA_DECODE_SINGLE[follower]
            continue
        for sequence, name in _EXTRA_DECODE_PAIRS:
            if line.startswith(sequence, i - 1):
                out += name
                i += len(sequence) - 1
                break
        else:
            out.append(follower)
    return bytes(out)


def encode_numeric_entities(line: bytes) -> bytes:
    """Turn ``&&#N;`` with N above 255 into ``&``, an escape byte and UTF-8."""
    line = bytes(line)
    out = bytearray()
    i = 0
    while i < len(line):
        byte = line[i]
        i += 1
        out.append(byte)
        if (
            byte != _AMP
            or i < 2
            or line[i - 2] != _AMP
            or i + 1 >= len(line)
            or line[i] != _HASH
            or not ord("1") <= line[i + 1] <= ord("9")
        ):
            continue
        length = numeric_length(line[i + 1 :])
        if not length:
            continue
        value = int(line[i + 1 : i + 1 + length])
        if value <= 255:
            continue
        out[-1] = NUMERIC_ESCAPE
        if value < 0x110000:
            out += codepoint_to_utf8(value)
        i += length + 2
    return bytes(out)


def decode_numeric_entities(line: bytes) -> bytes:
    """Undo :func:`encode_numeric_entities`, giving back ``&&#N;``."""
    line = bytes(line)
    out = bytearray()
    i = 0
    while i < len(line):
        byte = line[i]
        i += 1
        out.append(byte)
        if byte != _AMP or i >= len(line):
            continue
        follower = line[i]
        i += 1
        if follower == NUMERIC_ESCAPE and i < len(line):
            length = utf8_length(line[i])
            value = utf8_to_codepoint(line[i : i + length])
            out += b"&#%d;" % value
            i += length
        else:
            out.append(follower)
    return bytes(out)


def _flip_run(match: re.Match[bytes]) -> bytes:
    run = match.group()
    if len(run) in (1, 2):
        return run[:1] * (3 - len(run))
    return run


def flip_brackets(line: bytes) -> bytes:
    """Swap single and double runs of ``{``, ``}``, ``[`` and ``]``.

    Longer runs are kept.  The operation is its own inverse.
    """
    return _BRACKET_RUNS.sub(_flip_run, bytes(line))


def remove_amp(line: bytes, skip: int) -> bytes:
    """Drop the byte before each ``"``, ``<`` or ``>`` that follows the first ``skip`` bytes."""
    line = bytes(line)
    out = bytearray(line[:skip])
    for byte in line[skip:]:
        if byte in b'"<>' and out:
            out.pop()
        out.append(byte)
    return bytes(out)


def restore_amp(line: bytes, skip: int) -> bytes:
    """Put ``&`` back before each ``"``, ``<`` or ``>`` after the first ``skip`` bytes."""
    line = bytes(line)
    out = bytearray(line[:skip])
    for byte in line[skip:]:
        if byte in b'"<>':
            out.append(_AMP)
        out.append(byte)
    return bytes(out)