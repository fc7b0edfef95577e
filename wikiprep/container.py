"""Header of the compressed container: payload length, dictionary flag and byte vocabulary."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import BinaryIO

MIN_VOCAB_FILE_SIZE = 10000
_LENGTH_BYTES = 5
_VOCAB_BYTES = 32
_MAX_LENGTH = 1 << (8 * _LENGTH_BYTES - 1)


@dataclass(frozen=True)
class ContainerHeader:
    """Decoded container header.

    A length of zero marks a stored (preprocessed but not compressed) payload.
    """

    length: int
    dictionary_used: bool
    vocab: tuple[bool, ...] = field(default=(False,) * 256)


def write_header(length: int, vocab: Sequence[bool], dictionary_used: bool) -> bytes:
    """Encode a container header.

    The vocabulary bitmap is written only for payloads of at least
    :data:`MIN_VOCAB_FILE_SIZE` bytes.
    """
    if not 0 <= length < _MAX_LENGTH:
        raise ValueError(f"length {length} does not fit the header")
    head = bytearray(length.to_bytes(_LENGTH_BYTES, "big"))
    if dictionary_used:
        head[0] |= 0x80
    if length < MIN_VOCAB_FILE_SIZE:
        return bytes(head)
    if len(vocab) != 256:
        raise ValueError("vocab must have 256 entries")
    bitmap = bytes(
        sum(1 << bit for bit in range(8) if vocab[group * 8 + bit])
        for group in range(_VOCAB_BYTES)
    )
    return bytes(head) + bitmap


def storage_header(dictionary_used: bool) -> bytes:
    """Header of a stored payload: zero length plus the dictionary flag."""
    return (b"\x80" if dictionary_used else b"\x00") + b"\x00" * (_LENGTH_BYTES - 1)


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise ValueError("truncated container header")
    return data


def read_header(stream: BinaryIO) -> ContainerHeader:
    """Decode a header from the start of ``stream``."""
    head = bytearray(_read_exact(stream, _LENGTH_BYTES))
    dictionary_used = bool(head[0] & 0x80)
    head[0] &= 0x7F
    length = int.from_bytes(head, "big")
    if length == 0:
        return ContainerHeader(0, dictionary_used)
    if length < MIN_VOCAB_FILE_SIZE:
        return ContainerHeader(length, dictionary_used, (True,) * 256)
    bitmap = _read_exact(stream, _VOCAB_BYTES)
    vocab = tuple(bool(byte & (1 << bit)) for byte in bitmap for bit in range(8))
    return ContainerHeader(length, dictionary_used, vocab)


def extract_vocab(data: bytes) -> list[bool]:
    """Return, for each byte value, whether it occurs in ``data``."""
    if len(data) < 2:
        raise ValueError("vocabulary needs at least two bytes of data")
    present = set(data)
    return [value in present for value in range(256)]