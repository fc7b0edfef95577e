"""Trailer header of a self-extracting archive and extraction of its payload parts."""

from __future__ import annotations

import struct
from collections.abc import Callable
from dataclasses import dataclass
from os import PathLike
from pathlib import Path

StrPath = str | PathLike
Runner = Callable[[Path, Path], object]

_FORMAT = struct.Struct("<3i")


@dataclass(frozen=True)
class HeaderInfo:
    """Sizes of the parts appended to a binary, stored as three 32-bit integers."""

    dict_size: int = 0
    new_article_order_size: int = 0
    decomp_input_size: int = 0

    SIZE = _FORMAT.size

    def pack(self) -> bytes:
        return _FORMAT.pack(
            self.dict_size, self.new_article_order_size, self.decomp_input_size
        )

    @classmethod
    def unpack(cls, data: bytes) -> "HeaderInfo":
        if len(data) != _FORMAT.size:
            raise ValueError(f"header must be {_FORMAT.size} bytes, got {len(data)}")
        return cls(*_FORMAT.unpack(data))


def write_header_info(path: StrPath, header: HeaderInfo) -> None:
    """Write ``header`` to ``path``."""
    Path(path).write_bytes(header.pack())


def read_header_info(path: StrPath) -> HeaderInfo:
    """Read a header written by :func:`write_header_info`."""
    return HeaderInfo.unpack(Path(path).read_bytes()[: HeaderInfo.SIZE])


def _read_trailer(blob: bytes) -> HeaderInfo:
    if len(blob) < HeaderInfo.SIZE:
        raise ValueError("file is too short to hold a header")
    return HeaderInfo.unpack(blob[-HeaderInfo.SIZE :])


def extract_compressor_payload(binary_path: StrPath, runner: Runner) -> HeaderInfo:
    """Split the compressor binary into program, dictionary and article order.

    Parts are written next to ``binary_path``; ``runner(source, target)``
    is called to decompress the article order and then the dictionary.
    """
    binary_path = Path(binary_path)
    workdir = binary_path.parent
    blob = binary_path.read_bytes()
    header = _read_trailer(blob)
    (workdir / "test.dat").write_bytes(blob[-HeaderInfo.SIZE :])
    (workdir / ".dict").unlink(missing_ok=True)

    program_size = (
        len(blob) - header.dict_size - header.new_article_order_size - HeaderInfo.SIZE
    )
    if program_size < 0 or header.dict_size < 0 or header.new_article_order_size < 0:
        raise ValueError("header sizes do not fit the binary")

    dict_end = program_size + header.dict_size
    order_end = dict_end + header.new_article_order_size
    (workdir / ".decomp_bin").write_bytes(blob[:program_size])
    (workdir / ".dict.comp").write_bytes(blob[program_size:dict_end])
    (workdir / ".new_article_order.comp").write_bytes(blob[dict_end:order_end])

    runner(workdir / ".new_article_order.comp", workdir / ".new_article_order")
    runner(workdir / ".dict.comp", workdir / ".dict")
    return header


def extract_archive_payload(archive_path: StrPath, runner: Runner) -> HeaderInfo:
    """Split an archive into its dictionary and compressed input.

    Parts are written next to ``archive_path``; ``runner(source, target)``
    is called to decompress the dictionary.
    """
    archive_path = Path(archive_path)
    workdir = archive_path.parent
    blob = archive_path.read_bytes()
    trailer = blob[-HeaderInfo.SIZE :]
    _read_trailer(blob)
    write_header_info(workdir / "test.dat", HeaderInfo.unpack(trailer))
    header = read_header_info(workdir / "test.dat")
    (workdir / ".dict").unlink(missing_ok=True)

    program_size = (
        len(blob) - header.dict_size - header.decomp_input_size - HeaderInfo.SIZE
    )
    if program_size < 0 or header.dict_size < 0 or header.decomp_input_size < 0:
        raise ValueError("header sizes do not fit the archive")

    dict_end = program_size + header.dict_size
    (workdir / ".dict.comp_decomp").write_bytes(blob[program_size:dict_end])
    runner(workdir / ".dict.comp_decomp", workdir / ".dict")
    input_end = dict_end + header.decomp_input_size
    (workdir / ".ready4cmix_decomp").write_bytes(blob[dict_end:input_end])
    return header