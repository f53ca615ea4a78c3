"""
Tests pour le module core.epub.urls.
"""

import pytest
from epub_navigator.core.epub.urls import join_url, normalize_url

ROOT = "epub:/"


class TestJoinUrl:
    """Tests pour join_url."""

    def test_join_relative_to_root(self):
        assert join_url(ROOT, "EPUB/book.opf") == "epub:/EPUB/book.opf"

    def test_join_relative_to_document(self):
        assert join_url("epub:/EPUB/pkg.opf", "book.html") == "epub:/EPUB/book.html"

    def test_root_cannot_be_escaped(self):
        assert join_url(ROOT, "/") == ROOT
        assert join_url(ROOT, "..") == ROOT
        assert join_url(ROOT, "../../a.html") == "epub:/a.html"

    def test_sibling_and_parent_references(self):
        """Même résolution quel que soit le chemin d'accès."""
        assert join_url(ROOT, "text/a.css") == join_url(join_url(ROOT, "text/a.html"), "a.css")
        assert join_url(ROOT, "nav.html") == join_url(join_url(ROOT, "text/a.html"), "../nav.html")
        assert join_url(ROOT, "text/a.css") == join_url(
            join_url(ROOT, "text/a.html"), "/text/a.css"
        )

    def test_dot_segments_collapsed(self):
        assert join_url("epub:/EPUB/pkg.opf", "./text/../img/x.png") == "epub:/EPUB/img/x.png"

    def test_fragment_kept(self):
        assert join_url("epub:/EPUB/nav.xhtml", "c1.xhtml#sec") == "epub:/EPUB/c1.xhtml#sec"

    def test_spaces_and_escapes_meet(self):
        """Un nom brut et un href déjà encodé donnent la même URL."""
        assert join_url(ROOT, "my file.html") == join_url(ROOT, "my%20file.html")
        assert join_url(ROOT, "my file.html") == "epub:/my%20file.html"

    def test_non_ascii_encoded(self):
        assert join_url(ROOT, "café.html") == "epub:/caf%C3%A9.html"

    def test_absolute_reference_unchanged(self):
        assert join_url(ROOT, "https://example.org/x") == "https://example.org/x"

    def test_invalid_reference(self):
        with pytest.raises(ValueError):
            join_url(ROOT, "//host/x")
        with pytest.raises(ValueError):
            join_url(ROOT, "http://[::1")


class TestNormalizeUrl:
    """Tests pour normalize_url."""

    def test_fragment_dropped(self):
        assert normalize_url("epub:/EPUB/c1.xhtml#top") == "epub:/EPUB/c1.xhtml"

    def test_idempotent(self):
        url = join_url(ROOT, "a b/c.html")
        assert normalize_url(url) == url

    def test_relative_rejected(self):
        with pytest.raises(ValueError):
            normalize_url("c1.xhtml")
