from app.models.blog import Post
from app.services.slug import generate_slug, is_slug_unique, normalize_slug, simple_slug


class TestNormalizeSlug:
    def test_trims_lowercases_and_strips_slashes(self):
        assert normalize_slug("/My-Post/") == "my-post"
        assert normalize_slug("  Hello-World  ") == "hello-world"

    def test_blank_is_empty(self):
        assert normalize_slug("  ") == ""
        assert normalize_slug(None) == ""

    def test_inner_slashes_are_kept(self):
        assert normalize_slug("/2023/05/my-post/") == "2023/05/my-post"

    def test_percent_encoding_is_decoded(self):
        assert normalize_slug("%D9%85%D8%B1%D8%AD%D8%A8%D8%A7") == "مرحبا"
        assert normalize_slug("caf%C3%A9") == "café"

    def test_invalid_encoding_keeps_the_raw_value(self):
        assert normalize_slug("bad-%E0%A4%A") == "bad-%e0%a4%a"
        assert normalize_slug("broken-%ff") == "broken-%ff"


class TestGenerateSlug:
    def test_latin_title(self):
        assert generate_slug("Hello, World!  Again") == "hello-world-again"

    def test_arabic_title_keeps_letters_and_drops_diacritics(self):
        assert generate_slug("مَرْحَبًا بالعالم") == "مرحبا-بالعالم"

    def test_collapses_and_trims_dashes(self):
        assert generate_slug("-- a -- b --") == "a-b"

    def test_empty(self):
        assert generate_slug("") == ""
        assert generate_slug("!!!") == ""


def test_simple_slug():
    assert simple_slug("  Machine   Learning ") == "machine-learning"


def test_is_slug_unique(session):
    post = Post(title="One", slug="one")
    session.add(post)
    session.commit()

    assert is_slug_unique(session, Post, "two")
    assert not is_slug_unique(session, Post, "one")
    assert is_slug_unique(session, Post, "one", exclude_id=post.id)
    assert not is_slug_unique(session, Post, "one", exclude_id="someone-else")
