"""
Unit tests for the shared PDF engine and render_pdf.
"""

import asyncio
import os
import subprocess
import sys
from pathlib import Path

import pytest

from worksheet_toolkit.builder.errors import EmptyPdfError, RenderError, RendererInitError
from worksheet_toolkit.builder.layout import build_document
from worksheet_toolkit.builder.output import engine as engine_module
from worksheet_toolkit.builder.output import PdfEngine, get_engine, render_pdf, reset_engine


SRC_PATH = Path(__file__).resolve().parents[3] / "src"


@pytest.fixture(autouse=True)
def fresh_engine():
    """Every test starts without a loaded engine."""
    reset_engine()
    yield
    reset_engine()


class _StubEngine:
    def __init__(self, result=b"", error=None):
        self.result = result
        self.error = error

    def render(self, doc):
        if self.error is not None:
            raise self.error
        return self.result


class TestRenderPdf:
    def test_when_engine_returns_nothing_then_empty_pdf_error(self):
        # Act / Assert
        with pytest.raises(EmptyPdfError, match="empty"):
            asyncio.run(render_pdf(build_document([]), engine=_StubEngine(b"")))

    def test_when_empty_then_distinct_from_init_failure(self):
        assert not issubclass(EmptyPdfError, RendererInitError)
        assert issubclass(EmptyPdfError, RenderError)

    def test_when_engine_raises_then_wrapped_in_render_error(self):
        stub = _StubEngine(error=KeyError("font"))

        with pytest.raises(RenderError, match="Could not render PDF"):
            asyncio.run(render_pdf(build_document([]), engine=stub))

    def test_when_default_engine_then_real_pdf(self):
        data = asyncio.run(render_pdf(build_document([])))

        assert data.startswith(b"%PDF-")


class TestGetEngine:
    def test_when_called_twice_then_same_engine(self):
        async def _main():
            return await get_engine(), await get_engine()

        first, second = asyncio.run(_main())

        assert first is second
        assert isinstance(first, PdfEngine)

    def test_when_concurrent_first_use_then_loaded_once(self, monkeypatch):
        # Arrange
        calls = []

        def fake_load(font_path=None, bold_font_path=None):
            calls.append(font_path)
            return PdfEngine()

        monkeypatch.setattr(engine_module, "load_engine", fake_load)

        async def _main():
            return await asyncio.gather(*(get_engine() for _ in range(5)))

        # Act
        engines = asyncio.run(_main())

        # Assert
        assert len(calls) == 1
        assert all(e is engines[0] for e in engines)

    def test_when_load_fails_then_init_error_and_retry_succeeds(self, monkeypatch):
        # Arrange
        attempts = []

        def flaky_load(font_path=None, bold_font_path=None):
            attempts.append(1)
            if len(attempts) == 1:
                raise ImportError("reportlab missing")
            return PdfEngine()

        monkeypatch.setattr(engine_module, "load_engine", flaky_load)

        # Act
        with pytest.raises(RendererInitError, match="please refresh"):
            asyncio.run(get_engine())
        engine = asyncio.run(get_engine())

        # Assert
        assert isinstance(engine, PdfEngine)
        assert len(attempts) == 2

    def test_when_reset_then_loaded_again(self, monkeypatch):
        calls = []
        monkeypatch.setattr(
            engine_module, "load_engine", lambda *a: calls.append(a) or PdfEngine()
        )

        asyncio.run(get_engine())
        reset_engine()
        asyncio.run(get_engine())

        assert len(calls) == 2

    def test_when_font_missing_then_init_error(self, tmp_path):
        with pytest.raises(RendererInitError):
            asyncio.run(get_engine(tmp_path / "missing.ttf"))

    def test_when_no_fonts_then_builtin_fonts(self):
        engine = engine_module.load_engine()

        assert engine.regular_font is None
        assert engine.bold_font is None


class TestLazyImport:
    def test_when_builder_imported_then_reportlab_not_loaded(self):
        # Arrange
        code = "import sys, worksheet_toolkit.builder; print('reportlab' in sys.modules)"
        env = {**os.environ, "PYTHONPATH": SRC_PATH.as_posix()}

        # Act
        result = subprocess.run(
            [sys.executable, "-c", code], env=env, capture_output=True, text=True, check=True
        )

        # Assert
        assert result.stdout.strip() == "False"

    def test_when_render_document_accessed_then_loaded_on_demand(self):
        from worksheet_toolkit.builder import output
        from worksheet_toolkit.builder.output.renderer import render_document

        assert output.render_document is render_document
