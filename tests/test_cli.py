"""
Tests for the worksheet-builder command line.
"""

import json
from datetime import datetime
from pathlib import Path

import fitz
import pytest

from worksheet_toolkit.builder.output import reset_engine
from worksheet_toolkit.cli import build_parser, find_fonts, load_problem_file, main


@pytest.fixture(autouse=True)
def no_proxy(monkeypatch):
    monkeypatch.delenv("WORKSHEET_IMAGE_PROXY_URL", raising=False)
    reset_engine()
    yield
    reset_engine()


@pytest.fixture
def problem_file(tmp_path: Path, make_png) -> Path:
    """Problem list with local images next to it."""
    images = tmp_path / "images"
    images.mkdir()
    for name, size in {"p1": (800, 600), "p2": (600, 800), "a1": (400, 100)}.items():
        (images / f"{name}.png").write_bytes(make_png(*size))

    path = tmp_path / "problems.json"
    path.write_text(json.dumps({
        "title": "Unit 2 Review",
        "author": "Lopez",
        "subject": "Chemistry",
        "created_at": "2025-02-10",
        "problems": [
            {"id": "p1", "image": "images/p1.png", "answer_image": "images/a1.png",
             "metadata": {"difficulty": "medium", "exam_year": 2022}},
            {"id": "p2", "image": "images/p2.png"},
        ],
    }), encoding="utf-8")
    return path


class TestLoadProblemFile:
    def test_when_loaded_then_records_and_info(self, problem_file):
        # Act
        problems, info = load_problem_file(problem_file)

        # Assert
        assert [p.id for p in problems] == ["p1", "p2"]
        assert problems[0].image_ref == problem_file.parent / "images" / "p1.png"
        assert problems[0].metadata.difficulty == "medium"
        assert info.title == "Unit 2 Review"
        assert info.subject == "Chemistry"
        assert info.created_at == datetime(2025, 2, 10)

    def test_when_bare_list_then_default_info(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text(json.dumps([{"id": "x", "image": "x.png"}]), encoding="utf-8")

        problems, info = load_problem_file(path)

        assert len(problems) == 1
        assert info.subject == "Worksheet"

    def test_when_no_problems_key_then_raises(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"title": "x"}), encoding="utf-8")

        with pytest.raises(ValueError):
            load_problem_file(path)

    def test_when_date_unparseable_then_now(self, tmp_path):
        path = tmp_path / "p.json"
        path.write_text(json.dumps({"created_at": "soon", "problems": []}), encoding="utf-8")

        _, info = load_problem_file(path)

        assert info.created_at.year >= 2025


class TestBuildCommand:
    def test_when_build_then_pdf_written(self, problem_file, tmp_path, capsys):
        # Arrange
        output = tmp_path / "out" / "sheet.pdf"

        # Act
        code = main(["build", str(problem_file), "-o", str(output)])

        # Assert
        assert code == 0
        with fitz.open(output) as pdf:
            assert pdf.page_count == 2
            assert pdf.metadata["title"] == "Unit 2 Review"
        assert "2 pages" in capsys.readouterr().out

    def test_when_no_answers_then_single_page(self, problem_file, tmp_path):
        output = tmp_path / "sheet.pdf"

        main(["build", str(problem_file), "-o", str(output), "--no-answers", "--title", "Quiz"])

        with fitz.open(output) as pdf:
            assert pdf.page_count == 1
            assert pdf.metadata["title"] == "Quiz"

    def test_when_output_omitted_then_download_name_used(self, problem_file, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        code = main(["build", str(problem_file)])

        assert code == 0
        assert (tmp_path / "Unit 2 Review_Lopez.pdf").exists()

    def test_when_file_missing_then_exit_code_1(self, tmp_path, capsys):
        code = main(["build", str(tmp_path / "missing.json")])

        assert code == 1
        assert "Error:" in capsys.readouterr().err

    def test_when_proxy_invalid_then_exit_code_1(self, problem_file, capsys):
        code = main(["build", str(problem_file), "--proxy-url", "not-a-url"])

        assert code == 1


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_find_fonts_splits_bold(self, tmp_path):
        (tmp_path / "Sans-Regular.ttf").write_bytes(b"")
        (tmp_path / "Sans-Bold.ttf").write_bytes(b"")
        (tmp_path / "notes.txt").write_text("x")

        regular, bold = find_fonts(tmp_path)

        assert regular.name == "Sans-Regular.ttf"
        assert bold.name == "Sans-Bold.ttf"
