"""Tests for link extraction."""

from linkcrawler.crawler.parser import extract_links


class TestExtractLinks:
    """Test cases for extract_links."""

    def test_mail_links_are_excluded(self):
        content = """
        <a href="http://a.test/1">one</a>
        <a href="/2">two</a>
        <a href="mailto:x@y">mail</a>
        """
        assert extract_links(content) == ["http://a.test/1", "/2"]

    def test_single_quotes(self):
        assert extract_links("<a href='page.html'>x</a>") == ["page.html"]

    def test_other_attributes_before_href(self):
        content = '<a class="nav" id="home" href="/home">Home</a>'
        assert extract_links(content) == ["/home"]

    def test_case_and_spacing(self):
        content = '<A HREF = "/upper">x</A>\n<a\n  href="/multiline">y</a>'
        assert extract_links(content) == ["/upper", "/multiline"]

    def test_non_anchor_tags_ignored(self):
        content = '<link href="/style.css"><abbr href="/nope">x</abbr><a data-href="/no" href="/yes">'
        assert extract_links(content) == ["/yes"]

    def test_duplicates_kept_in_order(self):
        content = '<a href="/b">b</a><a href="/a">a</a><a href="/b">b</a>'
        assert extract_links(content) == ["/b", "/a", "/b"]

    def test_empty_content(self):
        assert extract_links("") == []
        assert extract_links(None) == []
