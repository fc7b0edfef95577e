import pytest

from wikiprep.patterns import (
    lstrip,
    pattern_detransform,
    pattern_detransform_file,
    pattern_transform,
    pattern_transform_file,
    rstrip,
    strip,
)

HEADER = b"<mediawiki>"

ARTICLE = [
    b"  <page>",
    b"    <title>Foo</title>",
    b"      <minor />",
    b"      <comment>fix</comment>",
    b'      <text xml:space="preserve">Hello',
    b"world</text>",
    b"    </revision>",
    b"  </page>",
]


def joined(lines):
    return b"".join(line + b"\n" for line in lines)


def test_strip_helpers():
    assert strip(b"  \tab c\r\n ") == b"ab c"
    assert lstrip(b" \n x ") == b"x "
    assert rstrip(b" x \r\n") == b" x"
    assert strip(b"\x0bx") == b"\x0bx"


def test_transform_removes_tags():
    out, identifiers = pattern_transform([HEADER, *ARTICLE])
    assert out == [
        HEADER,
        b"  ",
        b"Foo",
        b"      ",
        b"fix",
        b'xml:space="preserve">Hello',
        b"world",
        b"    ",
        b"</page>a",
    ]
    assert identifiers == {b"pttmccxxrp": b"a"}


def test_repeated_pattern_shares_identifier():
    out, identifiers = pattern_transform([HEADER, *ARTICLE, *ARTICLE])
    assert len(identifiers) == 1
    assert [line for line in out if line.startswith(b"</page>")] == [
        b"</page>a",
        b"</page>a",
    ]


def test_round_trip():
    original = [HEADER, *ARTICLE, *ARTICLE]
    out, _ = pattern_transform(original)
    assert pattern_detransform(out) == joined(original)


def test_lines_after_last_article_pass_through():
    trailer = [b"</mediawiki>", b"    <title>x</title>"]
    out, _ = pattern_transform([HEADER, *ARTICLE, *trailer])
    assert out[-2:] == trailer


def test_round_trip_with_trailer():
    original = [HEADER, *ARTICLE, b"</mediawiki>"]
    out, _ = pattern_transform(original)
    assert pattern_detransform(out) == joined(original)


def test_multiline_comment_marks_uppercase():
    article = [
        b"  <page>",
        b"    <title>Foo</title>",
        b"      <comment>one",
        b"two</comment>",
        b'      <text xml:space="preserve">x</text>',
        b"    </revision>",
        b"  </page>",
    ]
    _, identifiers = pattern_transform([HEADER, *article])
    (pattern,) = identifiers
    assert b"cC" in pattern


def test_detransform_drops_article_without_identifier():
    assert pattern_detransform([HEADER, b"stuff", b"</page>"]) == HEADER + b"\n"


def test_detransform_rejects_short_article():
    with pytest.raises(ValueError):
        pattern_detransform([HEADER, b"</page>a"])


def test_detransform_of_nothing_gives_empty_line():
    assert pattern_detransform([]) == b"\n"


def test_file_round_trip(tmp_path):
    source = tmp_path / "source"
    encoded = tmp_path / "encoded"
    restored = tmp_path / "restored"
    pattern_map = tmp_path / "map.txt"
    original = joined([HEADER, *ARTICLE, b"</mediawiki>"])
    source.write_bytes(original)

    pattern_transform_file(source, encoded, pattern_map)
    pattern_detransform_file(encoded, restored)

    assert pattern_map.read_bytes() == b"a: pttmccxxrp\n"
    assert b"<title>" not in encoded.read_bytes()
    assert restored.read_bytes() == original