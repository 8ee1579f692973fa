"""Tests for CLI commands."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from pdfinspect.cli import _setup_logging, _source, app
from pdfinspect.errors import LoadFailure


runner = CliRunner()


class TestHelpers:
    """Tests for CLI helpers."""

    def test_setup_logging_verbose(self) -> None:
        """Verbose mode sets DEBUG level."""
        with patch("pdfinspect.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=True)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.DEBUG

    def test_setup_logging_normal(self) -> None:
        """Normal mode sets INFO level."""
        with patch("pdfinspect.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=False)
            assert mock_config.call_args[1]["level"] == logging.INFO

    def test_source_detects_urls(self) -> None:
        assert _source("https://example.com/a.pdf") == {"url": "https://example.com/a.pdf"}
        assert _source("docs/a.pdf") == {"path": "docs/a.pdf"}


class TestSearchCommand:
    """Tests for the search command."""

    @patch("pdfinspect.cli.search_pdf_text")
    def test_search_prints_results(self, mock_search: MagicMock, tmp_path: Path) -> None:
        mock_search.return_value = {
            "success": True,
            "data": {
                "results": [
                    {"page": 2, "text": "test", "match_start": 10, "match_end": 14, "context": "a test here"}
                ],
                "total_matches": 1,
            },
        }

        result = runner.invoke(app, ["search", "doc.pdf", "test", "--root", str(tmp_path), "--page", "2"])

        assert result.exit_code == 0
        assert "a test here" in result.stdout
        assert "Total matches: 1" in result.stdout
        args, context = mock_search.call_args[0]
        assert args["source"] == {"path": "doc.pdf"}
        assert args["page"] == 2
        assert list(context.confinement.roots) == [str(tmp_path)]

    @patch("pdfinspect.cli.search_pdf_text")
    def test_search_no_matches(self, mock_search: MagicMock) -> None:
        mock_search.return_value = {"success": True, "data": {"results": [], "total_matches": 0}}
        result = runner.invoke(app, ["search", "doc.pdf", "absent"])
        assert result.exit_code == 0
        assert "No matches found" in result.stdout

    def test_search_traversal_rejected(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["search", "../secret.pdf", "x", "--root", str(tmp_path)])
        assert result.exit_code != 0

    def test_search_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["search", "missing.pdf", "x", "--root", str(tmp_path)])
        assert result.exit_code == 1
        assert "File not found" in result.stdout

    def test_search_depth_out_of_range(self) -> None:
        result = runner.invoke(app, ["search", "doc.pdf", "x", "--depth", "9"])
        assert result.exit_code != 0


class TestTocCommand:
    """Tests for the toc command."""

    @patch("pdfinspect.cli.get_pdf_toc")
    def test_toc_table(self, mock_toc: MagicMock) -> None:
        mock_toc.return_value = {
            "success": True,
            "data": {
                "outline": [
                    {"title": "Chapter 1", "page": 2, "items": [{"title": "Section 1.1", "page": 3}]},
                    {"title": "Appendix"},
                ]
            },
        }

        result = runner.invoke(app, ["toc", "doc.pdf", "--max-depth", "3"])

        assert result.exit_code == 0
        assert "Chapter 1" in result.stdout
        assert "Section 1.1" in result.stdout
        assert "Appendix" in result.stdout
        assert mock_toc.call_args[0][0] == {"source": {"path": "doc.pdf"}, "max_depth": 3}

    @patch("pdfinspect.cli.get_pdf_toc")
    def test_toc_missing(self, mock_toc: MagicMock) -> None:
        mock_toc.return_value = {
            "success": True,
            "data": {"warnings": ["No table of contents found in this PDF."]},
        }
        result = runner.invoke(app, ["toc", "doc.pdf"])
        assert result.exit_code == 0
        assert "No table of contents" in result.stdout


class TestReadCommand:
    """Tests for the read command."""

    @patch("pdfinspect.tools.handlers.load_document")
    def test_read_mixed_batch(self, mock_load: MagicMock) -> None:
        good = MagicMock()
        good.__enter__.return_value = good
        good.page_count = 1
        good.get_metadata.return_value = {"title": "Report"}
        good.get_page_text.return_value = "Hello page"

        def _load(*, path, url, confinement, timeout, max_bytes):
            if path == "bad.pdf":
                raise LoadFailure("File not found at 'bad.pdf'.")
            return good

        mock_load.side_effect = _load

        result = runner.invoke(app, ["read", "good.pdf", "bad.pdf", "--pages", "1"])

        assert result.exit_code == 1
        assert "Pages: 1" in result.stdout
        assert "title: Report" in result.stdout
        assert "Hello page" in result.stdout
        assert "File not found at 'bad.pdf'." in result.stdout


class TestServeCommand:
    """Tests for the serve command."""

    @patch("uvicorn.run")
    def test_serve_configures_app(self, mock_run: MagicMock, tmp_path: Path) -> None:
        from pdfinspect.tools.handlers import ToolContext
        from pdfinspect.web.app import app as web_app

        try:
            result = runner.invoke(app, ["serve", "--root", str(tmp_path), "--port", "9001"])

            assert result.exit_code == 0
            mock_run.assert_called_once()
            assert mock_run.call_args[1]["port"] == 9001
            assert list(web_app.state.context.confinement.roots) == [str(tmp_path)]
        finally:
            web_app.state.context = ToolContext()
