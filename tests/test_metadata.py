"""Tests for teaser metadata cleaning."""

import pytest

from featurizer.services.metadata import clean_html, clean_title, clean_url


class TestCleanTitle:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Single sign-on", "Single sign-on"),
            ("  padded  ", "padded"),
            ("<b>Bold</b> title", "Bold title"),
            ("multi\n\tline   title", "multi line title"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_clean_title(self, raw, expected):
        assert clean_title(raw) == expected


class TestCleanHtml:
    def test_post_markup_kept(self):
        out = clean_html(" <p>Hello <strong>there</strong></p>\n")
        assert out == "<p>Hello <strong>there</strong></p>"

    def test_script_removed(self):
        out = clean_html("<p>x</p><script>alert(1)</script>")
        assert "<script>" not in out
        assert "alert(1)" not in out
        assert out.startswith("<p>x</p>")

    def test_event_handlers_removed(self):
        out = clean_html('<img src="https://hive.it/a.png" onerror="alert(2)"><a href="https://hive.it" onclick="x()">go</a>')
        assert "onerror" not in out
        assert "onclick" not in out
        assert 'src="https://hive.it/a.png"' in out
        assert 'href="https://hive.it"' in out

    def test_javascript_links_removed(self):
        assert "javascript" not in clean_html('<a href="javascript:alert(1)">x</a>')

    def test_none(self):
        assert clean_html(None) == ""


class TestCleanUrl:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("https://hive.it/sso", "https://hive.it/sso"),
            ("  http://hive.it  ", "http://hive.it"),
            ("HTTPS://hive.it", "HTTPS://hive.it"),
            ("javascript:alert(1)", ""),
            ("ftp://hive.it/file", ""),
            ("hive.it/sso", "http://hive.it/sso"),
            ("  www.hive.it ", "http://www.hive.it"),
            ("localhost:8080/x", ""),
            ("#anchor", ""),
            ("/relative/path", ""),
            ("https://", ""),
            ("", ""),
            (None, ""),
        ],
    )
    def test_clean_url(self, raw, expected):
        assert clean_url(raw) == expected
