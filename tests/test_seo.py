from datetime import datetime, timezone

from app.services.dates import parse_date, to_seconds
from app.services.seo import default_seo_description, import_seo_description, strip_markdown


def test_strip_markdown():
    markdown = "# Title\n\nSome **bold** and _italic_ text with a [link](http://x.y).\n\n> quoted\n\n`code`"
    assert strip_markdown(markdown) == "Title Some bold and italic text with a link. quoted code"


def test_strip_markdown_keeps_image_alt_text():
    assert strip_markdown("![A cat](cat.png) sleeping") == "A cat sleeping"


def test_default_seo_description_is_truncated():
    assert len(default_seo_description("word " * 100)) == 160
    assert default_seo_description("") == ""


class TestImportSeoDescription:
    def test_removes_markers_and_appends_ellipsis(self):
        assert import_seo_description("## Hello *there* `x`") == "Hello there x..."

    def test_truncates_to_155_characters(self):
        description = import_seo_description("a" * 300)
        assert description == "a" * 155 + "..."

    def test_empty_content(self):
        assert import_seo_description("") == ""


class TestDates:
    def test_parse_iso_and_common_formats(self):
        assert parse_date("2023-05-01") == datetime(2023, 5, 1)
        assert parse_date("2023-05-01 10:30:00") == datetime(2023, 5, 1, 10, 30)
        assert parse_date("2023/05/01") == datetime(2023, 5, 1)
        assert parse_date("01/05/2023") == datetime(2023, 5, 1)

    def test_aware_values_become_naive_utc(self):
        assert parse_date("2023-05-01T12:00:00+02:00") == datetime(2023, 5, 1, 10, 0)
        assert parse_date("2023-05-01T12:00:00Z") == datetime(2023, 5, 1, 12, 0)

    def test_unparseable_or_missing(self):
        assert parse_date("yesterday") is None
        assert parse_date("") is None
        assert parse_date(None) is None

    def test_to_seconds(self):
        assert to_seconds(None) == 0
        assert to_seconds(datetime(1970, 1, 1, 0, 1)) == 60
        assert to_seconds(datetime(1970, 1, 1, 1, 1, tzinfo=timezone.utc)) == 3660
