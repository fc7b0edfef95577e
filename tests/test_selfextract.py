import shutil

import pytest

from wikiprep.selfextract import (
    HeaderInfo,
    extract_archive_payload,
    extract_compressor_payload,
    read_header_info,
    write_header_info,
)


class CopyRunner:
    def __init__(self):
        self.calls = []

    def __call__(self, source, target):
        self.calls.append((source.name, target.name))
        shutil.copyfile(source, target)


def test_pack_is_little_endian_ints():
    assert HeaderInfo(1, 2, 3).pack() == b"\x01\x00\x00\x00\x02\x00\x00\x00\x03\x00\x00\x00"


def test_pack_unpack_round_trip():
    header = HeaderInfo(123456, 789, 1_000_000)
    assert HeaderInfo.unpack(header.pack()) == header
    assert len(header.pack()) == HeaderInfo.SIZE


def test_unpack_wrong_size():
    with pytest.raises(ValueError):
        HeaderInfo.unpack(b"\x00" * 5)


def test_write_read_round_trip(tmp_path):
    header = HeaderInfo(10, 20, 30)
    path = tmp_path / "header.dat"
    write_header_info(path, header)
    assert read_header_info(path) == header


def test_extract_compressor_payload(tmp_path):
    program, dictionary, order = b"PROGRAM", b"DICTDATA", b"ORDER"
    header = HeaderInfo(len(dictionary), len(order), 0)
    binary = tmp_path / "cmix"
    binary.write_bytes(program + dictionary + order + header.pack())
    (tmp_path / ".dict").write_bytes(b"stale")
    runner = CopyRunner()

    result = extract_compressor_payload(binary, runner)

    assert result == header
    assert (tmp_path / ".decomp_bin").read_bytes() == program
    assert (tmp_path / ".dict.comp").read_bytes() == dictionary
    assert (tmp_path / ".new_article_order.comp").read_bytes() == order
    assert (tmp_path / "test.dat").read_bytes() == header.pack()
    assert (tmp_path / ".dict").read_bytes() == dictionary
    assert runner.calls == [
        (".new_article_order.comp", ".new_article_order"),
        (".dict.comp", ".dict"),
    ]


def test_extract_compressor_payload_bad_sizes(tmp_path):
    binary = tmp_path / "cmix"
    binary.write_bytes(b"XY" + HeaderInfo(50, 50, 0).pack())
    with pytest.raises(ValueError):
        extract_compressor_payload(binary, CopyRunner())


def test_extract_archive_payload(tmp_path):
    program, dictionary, body = b"DECODER", b"DICT", b"COMPRESSEDBODY"
    header = HeaderInfo(len(dictionary), 0, len(body))
    archive = tmp_path / "archive9"
    archive.write_bytes(program + dictionary + body + header.pack())
    runner = CopyRunner()

    result = extract_archive_payload(archive, runner)

    assert result == header
    assert (tmp_path / ".dict.comp_decomp").read_bytes() == dictionary
    assert (tmp_path / ".dict").read_bytes() == dictionary
    assert (tmp_path / ".ready4cmix_decomp").read_bytes() == body
    assert runner.calls == [(".dict.comp_decomp", ".dict")]


def test_extract_archive_payload_too_short(tmp_path):
    archive = tmp_path / "archive9"
    archive.write_bytes(b"abc")
    with pytest.raises(ValueError):
        extract_archive_payload(archive, CopyRunner())