# tests/test_cli.py
"""
Tests pour le module CLI.
"""

import json
from unittest.mock import patch

from epub_navigator.cli import print_book_summary, print_details_json, safe_open_book
from epub_navigator.core.errors import ArchiveError
from epub_navigator.main import run_cli


class TestSafeOpenBook:
    """Tests pour safe_open_book."""

    def test_open_valid_book(self, epub3_path):
        session = safe_open_book(epub3_path)
        assert session is not None
        session.close()

    def test_open_encrypted_book(self, tmp_path, make_epub, corrupt_entry, epub3_files):
        path = tmp_path / "locked.epub"
        stream = corrupt_entry(make_epub(epub3_files).getvalue(), "EPUB/package.opf", flag_bits=0x1)
        path.write_bytes(stream.getvalue())

        assert safe_open_book(str(path)) is None

    @patch("epub_navigator.cli.BookSession.open", side_effect=ArchiveError("bad zip"))
    def test_open_invalid_book(self, mock_open):
        assert safe_open_book("/fake/book.epub") is None
        mock_open.assert_called_once_with("/fake/book.epub")


class TestPrintBookSummary:
    """Tests pour print_book_summary."""

    def test_summary(self, epub3_path, capsys):
        with safe_open_book(epub3_path) as session:
            print_book_summary(session)

        captured = capsys.readouterr()
        assert "=== Philosophical Works ===" in captured.out
        assert "Version: EPUB 3.0" in captured.out
        assert "Auteurs: René Descartes" in captured.out
        assert "ISBN: 9780306406157" in captured.out
        assert "Spine: 3 document(s)" in captured.out
        assert "Ordre de lecture" not in captured.out

    def test_summary_with_spine(self, epub3_path, capsys):
        with safe_open_book(epub3_path) as session:
            print_book_summary(session, show_spine=True)

        captured = capsys.readouterr()
        assert "=== Ordre de lecture ===" in captured.out
        assert "epub:/EPUB/text/chapter2.xhtml" in captured.out

    def test_details_json(self, epub3_path, capsys):
        with safe_open_book(epub3_path) as session:
            print_details_json(session)

        data = json.loads(capsys.readouterr().out)
        assert data["displayTitle"] == "Philosophical Works"
        assert data["spineLength"] == 3


class TestRunCli:
    """Tests pour run_cli."""

    def test_no_argument(self, capsys):
        assert run_cli([]) == 1
        assert "Usage" in capsys.readouterr().out

    def test_not_a_file(self, tmp_path, capsys):
        assert run_cli([str(tmp_path / "absent.epub")]) == 1
        assert "is not a file" in capsys.readouterr().out

    def test_invalid_book(self, tmp_path):
        path = tmp_path / "broken.epub"
        path.write_bytes(b"not a zip")
        assert run_cli([str(path)]) == 1

    def test_summary(self, epub3_path, capsys):
        assert run_cli([epub3_path, "--spine"]) == 0
        assert "Ordre de lecture" in capsys.readouterr().out

    def test_json(self, epub3_path, capsys):
        assert run_cli([epub3_path, "--json"]) == 0
        assert json.loads(capsys.readouterr().out)["isbn"] == "9780306406157"
