import pytest

from wikiprep.remap import build_remap
from wikiprep.reorder import (
    Article,
    build_order_remap,
    parse_articles,
    reorder_articles,
    reorder_file,
    sort_articles,
    sort_file,
)

REDIRECT_TEXT = b'      <text xml:space="preserve">#REDIRECT [[Elsewhere]]</text>\n'


def page(page_id, text=None):
    body = text or b"      <text>body %d</text>\n" % page_id
    return [
        b"  <page>\n",
        b"    <title>T</title>\n",
        b"    <id>%d</id>\n" % page_id,
        body,
        b"  </page>\n",
    ]


def test_parse_articles_finds_ranges():
    lines = [b"<mediawiki>\n", *page(12), *page(7)]
    assert parse_articles(lines) == [Article(12, 1, 5), Article(7, 6, 10)]


def test_parse_articles_ignores_unfinished_article():
    assert parse_articles(page(3)[:3]) == []


def test_sort_articles_orders_by_id():
    lines = [*page(3), *page(1), *page(2)]
    assert sort_articles(lines) == b"".join([*page(1), *page(2), *page(3)])


def test_sort_articles_drops_lines_outside_articles():
    lines = [b"<mediawiki>\n", *page(2), *page(1), b"</mediawiki>\n"]
    assert sort_articles(lines) == b"".join([*page(1), *page(2)])


def test_sort_articles_is_stable_for_equal_ids():
    first = page(5, b"      <text>first</text>\n")
    second = page(5, b"      <text>second</text>\n")
    assert sort_articles([*first, *second]) == b"".join([*first, *second])


def test_build_order_remap_inverts_build_remap():
    lines = [*page(1), *page(2, REDIRECT_TEXT), *page(3), *page(4)]
    forward = build_remap(line.decode() for line in lines)
    backward = build_order_remap(lines)
    for article, kept in forward.items():
        assert backward[kept] == article


def test_reorder_follows_order_then_appends_rest():
    lines = [*page(10), *page(20), *page(30)]
    result = reorder_articles(lines, [b"1", b"0"], article_count=3)
    assert result == b"".join([*page(20), *page(10), *page(30)])


def test_reorder_accepts_text_order_lines():
    lines = [*page(10), *page(20), *page(30)]
    result = reorder_articles(lines, ["1", "0"], article_count=3)
    assert result == b"".join([*page(20), *page(10), *page(30)])


def test_unknown_order_number_selects_first_article():
    lines = [*page(10), *page(20), *page(30)]
    assert reorder_articles(lines, [b"7"], article_count=3) == b"".join(lines)


def test_reorder_rejects_missing_articles():
    lines = [*page(10), *page(20), *page(30)]
    with pytest.raises(ValueError):
        reorder_articles(lines, [], article_count=5)


def test_reorder_rejects_negative_position():
    lines = [*page(10), *page(20), *page(30)]
    with pytest.raises(ValueError):
        reorder_articles(lines, [b"-1"], article_count=3)


def test_reorder_rejects_malformed_order_line():
    lines = [*page(10), *page(20)]
    with pytest.raises(ValueError):
        reorder_articles(lines, [b"abc"], article_count=2)


def test_reorder_then_sort_restores_articles():
    lines = [*page(1), *page(2), *page(3)]
    shuffled = reorder_articles(lines, [b"1", b"0"], article_count=3)
    restored = sort_articles(shuffled.splitlines(keepends=True))
    assert restored == b"".join(lines)