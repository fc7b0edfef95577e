import pytest

from wikiprep.fields import (
    MINOR_MARK,
    fields_detransform,
    fields_detransform_file,
    fields_transform,
    fields_transform_file,
)

TEXT = b'      <text xml:space="preserve">body</text>'


def _page(
    *,
    title=b"T",
    restrictions=None,
    username=b"U",
    contributor_id=b"3",
    ip=None,
    minor=True,
    comment=(b"      <comment>C</comment>",),
    text=(TEXT,),
):
    lines = [b"  <page>", b"    <title>" + title + b"</title>", b"    <id>1</id>"]
    if restrictions is not None:
        lines.append(b"    <restrictions>" + restrictions + b"</restrictions>")
    lines += [
        b"    <revision>",
        b"      <id>2</id>",
        b"      <timestamp>2006-01-01T00:00:00Z</timestamp>",
        b"      <contributor>",
    ]
    if username is not None:
        lines.append(b"        <username>" + username + b"</username>")
    if contributor_id is not None:
        lines.append(b"        <id>" + contributor_id + b"</id>")
    if ip is not None:
        lines.append(b"        <ip>" + ip + b"</ip>")
    lines.append(b"      </contributor>")
    if minor:
        lines.append(b"      <minor />")
    lines += list(comment)
    lines += list(text)
    lines += [b"    </revision>", b"  </page>"]
    return lines


def _joined(lines):
    return b"".join(line + b"\n" for line in lines)


def _round_trip(lines):
    return fields_detransform(fields_transform(lines).split(b"\n")[:-1])


def test_transform_writes_bare_fields_then_comment_and_text():
    out = fields_transform(_page()).split(b"\n")
    assert out[:9] == [
        b"T",
        b"1",
        b"",
        b"2",
        b"2006-01-01T00:00:00Z",
        b"U",
        b"3",
        b"",
        MINOR_MARK,
    ]
    assert out[9:] == [b"      <comment>C</comment>", TEXT, b""]


def test_round_trip_repeats_last_text_block():
    lines = _page()
    assert _round_trip(lines) == _joined(lines) + TEXT + b"\n"


def test_round_trip_with_restrictions_and_ip():
    lines = _page(
        restrictions=b"edit=sysop", username=None, contributor_id=None, ip=b"10.0.0.1"
    )
    assert _round_trip(lines) == _joined(lines) + TEXT + b"\n"


def test_round_trip_without_minor():
    lines = _page(minor=False)
    result = _round_trip(lines)
    assert b"<minor />" not in result
    assert result == _joined(lines) + TEXT + b"\n"


def test_round_trip_multiline_comment():
    comment = (b"      <comment>first", b"second</comment>")
    lines = _page(comment=comment)
    assert _round_trip(lines) == _joined(lines) + TEXT + b"\n"


def test_round_trip_self_closing_text():
    text = b'      <text xml:space="preserve" />'
    lines = _page(text=(text,))
    assert _round_trip(lines) == _joined(lines) + text + b"\n"


def test_round_trip_two_pages():
    second_text = b'      <text xml:space="preserve">other</text>'
    first = _page()
    second = _page(title=b"Second", text=(second_text,))
    result = _round_trip(first + second)
    assert result == _joined(first) + _joined(second) + second_text + b"\n"


def test_lines_outside_pages_pass_through_and_repeat_at_end():
    lines = [b"<mediawiki>", b"x"]
    assert fields_transform(lines) == _joined(lines) * 2


def test_detransform_flushes_siteinfo():
    lines = [b"  <siteinfo>", b"  </siteinfo>"]
    assert fields_detransform(lines) == _joined(lines)


def test_detransform_with_missing_fields_raises():
    with pytest.raises(ValueError):
        fields_detransform([b"T", TEXT])


def test_transform_with_truncated_field_raises():
    with pytest.raises(ValueError):
        fields_transform([b"  <page>", b"    <title>"])


def test_file_round_trip(tmp_path):
    lines = _page()
    source = tmp_path / "main"
    middle = tmp_path / "fields"
    target = tmp_path / "restored"
    source.write_bytes(_joined(lines))
    fields_transform_file(source, middle)
    assert middle.read_bytes() == fields_transform(lines)
    fields_detransform_file(middle, target)
    assert target.read_bytes() == _joined(lines) + TEXT + b"\n"