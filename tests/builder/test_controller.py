"""
Tests for the generation pipeline (controller).

Images are passed as raw bytes or local paths, so no HTTP is involved.
"""

import asyncio
from datetime import datetime

import fitz
import pytest

from worksheet_toolkit.builder import (
    BuilderConfig,
    GenerationStage,
    GenerationTracker,
    OverrideLookupError,
    WorksheetInfo,
    generate_worksheet,
    generate_worksheet_sync,
)
from worksheet_toolkit.builder import controller as controller_module
from worksheet_toolkit.builder.output import reset_engine
from worksheet_toolkit.core.models import ProblemMetadata, ProblemRecord


@pytest.fixture(autouse=True)
def fresh_engine():
    reset_engine()
    yield
    reset_engine()


@pytest.fixture
def config():
    return BuilderConfig(proxy_url=None)


@pytest.fixture
def problems(make_png):
    return [
        ProblemRecord("p1", make_png(800, 600), answer_ref=make_png(400, 100)),
        ProblemRecord("p2", make_png(800, 400), metadata=ProblemMetadata(difficulty="hard")),
        ProblemRecord("p3", make_png(600, 600), answer_ref=make_png(400, 200), answer_id="a3"),
    ]


@pytest.fixture
def info():
    return WorksheetInfo(title="Week 4", author="Kim", created_at=datetime(2025, 4, 1))


@pytest.fixture
def captured_documents(monkeypatch):
    """Record every document the controller builds."""
    documents = []
    real_build = controller_module.build_document

    def _capture(problem_items, answer_items, *args, **kwargs):
        documents.append((problem_items, answer_items))
        return real_build(problem_items, answer_items, *args, **kwargs)

    monkeypatch.setattr(controller_module, "build_document", _capture)
    return documents


class TestGenerateWorksheet:
    def test_when_generated_then_pdf_with_problem_and_answer_pages(self, problems, info, config):
        # Arrange
        request = GenerationTracker().next_request(problems, info)

        # Act
        result = generate_worksheet_sync(request, config)

        # Assert
        assert result.pdf_bytes.startswith(b"%PDF-")
        assert result.problem_page_count == 1
        assert result.answer_page_count == 1
        assert result.page_count == 2
        assert result.placeholder_count == 0
        assert result.filename == "Week 4_Kim.pdf"
        with fitz.open(stream=result.pdf_bytes, filetype="pdf") as pdf:
            assert pdf.page_count == 2

    def test_when_answers_excluded_then_problem_pages_only(self, problems, info, config):
        request = GenerationTracker().next_request(problems, info, include_answers=False)

        result = generate_worksheet_sync(request, config)

        assert result.answer_page_count == 0
        assert result.page_count == 1

    def test_when_generated_then_timings_recorded(self, problems, config):
        request = GenerationTracker().next_request(problems)

        result = generate_worksheet_sync(request, config)

        assert set(result.timings) == {"overrides", "images", "layout", "engine", "render", "total"}
        assert all(value >= 0 for value in result.timings.values())

    def test_when_image_broken_then_placeholder_and_same_item_count(self, problems, config, captured_documents):
        # Arrange
        broken = ProblemRecord("p4", b"not an image")
        request = GenerationTracker().next_request([*problems, broken])

        # Act
        result = generate_worksheet_sync(request, config)

        # Assert
        problem_items, _ = captured_documents[0]
        assert result.placeholder_count == 1
        assert len(problem_items) == 4
        assert problem_items[3].sequence_index == 3
        assert problem_items[3].resolved_image.is_placeholder
        assert (problem_items[3].resolved_image.width, problem_items[3].resolved_image.height) == (300, 200)

    def test_when_answers_laid_out_then_labels_match_problem_numbers(self, problems, config, captured_documents):
        request = GenerationTracker().next_request(problems)

        generate_worksheet_sync(request, config)

        _, answer_items = captured_documents[0]
        assert [item.number_label for item in answer_items] == ["1.", "3."]

    def test_when_problem_has_metadata_then_badge_header_reserved(self, problems, config, captured_documents):
        generate_worksheet_sync(GenerationTracker().next_request(problems), config)

        problem_items, answer_items = captured_documents[0]
        assert problem_items[1].header_height == 17 + 33
        assert problem_items[0].header_height == 17
        assert all(item.metadata is None for item in answer_items)

    def test_when_progress_callback_then_stages_in_order(self, problems, config):
        # Arrange
        events = []

        # Act
        generate_worksheet_sync(
            GenerationTracker().next_request(problems), config, on_progress=events.append
        )

        # Assert
        assert [e.percent for e in events] == [0, 10, 40, 60, 80, 100]
        assert events[-1].stage == GenerationStage.COMPLETE
        assert events[2].stage == GenerationStage.LAYING_OUT

    def test_when_no_problems_then_still_a_pdf(self, config):
        result = generate_worksheet_sync(GenerationTracker().next_request([]), config)

        assert result.page_count == 1
        assert result.pdf_bytes.startswith(b"%PDF-")


class TestOverrides:
    def test_when_override_available_then_used(self, problems, config, captured_documents, make_png, tmp_path):
        # Arrange
        edited = tmp_path / "edited.png"
        edited.write_bytes(make_png(50, 50))
        seen_ids = []

        def lookup(ids):
            seen_ids.extend(ids)
            return {"p1": str(edited), "a3": str(edited)}

        # Act
        generate_worksheet_sync(
            GenerationTracker().next_request(problems), config, override_lookup=lookup
        )

        # Assert
        problem_items, answer_items = captured_documents[0]
        assert seen_ids == ["p1", "p2", "p3", "a3"]
        assert problem_items[0].resolved_image.width == 50
        assert problem_items[2].resolved_image.width == 600
        assert answer_items[1].resolved_image.width == 50

    def test_when_override_unavailable_then_original_used(self, problems, config, captured_documents, tmp_path):
        lookup = lambda ids: {"p1": str(tmp_path / "gone.png")}  # noqa: E731

        result = generate_worksheet_sync(
            GenerationTracker().next_request(problems), config, override_lookup=lookup
        )

        problem_items, _ = captured_documents[0]
        assert problem_items[0].resolved_image.width == 800
        assert result.placeholder_count == 0

    def test_when_override_corrupt_then_original_used(self, problems, config, captured_documents, corrupt_png, tmp_path):
        # Arrange
        edited = tmp_path / "edited.png"
        edited.write_bytes(corrupt_png(50, 50))
        lookup = lambda ids: {"p1": str(edited)}  # noqa: E731

        # Act
        result = generate_worksheet_sync(
            GenerationTracker().next_request(problems), config, override_lookup=lookup
        )

        # Assert
        problem_items, _ = captured_documents[0]
        assert problem_items[0].resolved_image.width == 800
        assert not problem_items[0].resolved_image.is_placeholder
        assert result.placeholder_count == 0

    def test_when_async_lookup_then_awaited(self, problems, config, captured_documents, make_png, tmp_path):
        edited = tmp_path / "edited.png"
        edited.write_bytes(make_png(70, 70))

        async def lookup(ids):
            await asyncio.sleep(0)
            return {"p2": str(edited)}

        generate_worksheet_sync(
            GenerationTracker().next_request(problems), config, override_lookup=lookup
        )

        problem_items, _ = captured_documents[0]
        assert problem_items[1].resolved_image.width == 70

    def test_when_lookup_fails_then_generation_aborts_before_images(self, problems, config):
        # Arrange
        events = []

        def lookup(ids):
            raise ConnectionError("override service down")

        # Act / Assert
        with pytest.raises(OverrideLookupError, match="Could not fetch override data"):
            generate_worksheet_sync(
                GenerationTracker().next_request(problems),
                config,
                override_lookup=lookup,
                on_progress=events.append,
            )
        assert [e.percent for e in events] == [0]

    def test_when_lookup_returns_non_mapping_then_error(self, problems, config):
        with pytest.raises(OverrideLookupError):
            generate_worksheet_sync(
                GenerationTracker().next_request(problems), config, override_lookup=lambda ids: ["x"]
            )


class TestGenerationTracker:
    def test_when_new_request_then_token_increases(self, problems):
        tracker = GenerationTracker()

        first = tracker.next_request(problems)
        second = tracker.next_request(problems)

        assert second.token > first.token
        assert tracker.current_token == second.token

    def test_when_result_is_stale_then_rejected(self, problems, config):
        # Arrange
        tracker = GenerationTracker()
        old_request = tracker.next_request(problems)
        new_request = tracker.next_request(problems)

        # Act
        old_result = generate_worksheet_sync(old_request, config)
        new_result = generate_worksheet_sync(new_request, config)

        # Assert
        assert not tracker.accept(old_result)
        assert tracker.accept(new_result)

    def test_when_requests_run_concurrently_then_only_latest_accepted(self, problems, config):
        tracker = GenerationTracker()
        requests = [tracker.next_request(problems) for _ in range(3)]

        async def _main():
            return await asyncio.gather(*(generate_worksheet(r, config) for r in requests))

        results = asyncio.run(_main())

        assert [tracker.accept(r) for r in results] == [False, False, True]


class TestBuilderConfig:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"request_timeout": 0},
            {"max_concurrent_fetches": 0},
            {"answer_max_height_px": -1},
            {"max_pixel_width": 0},
            {"proxy_url": "ftp://example.com/proxy"},
        ],
    )
    def test_when_invalid_then_raises(self, overrides):
        with pytest.raises(ValueError):
            BuilderConfig(**overrides)

    def test_when_font_missing_then_raises(self, tmp_path):
        with pytest.raises(ValueError, match="Font file not found"):
            BuilderConfig(font_path=tmp_path / "none.ttf")

    def test_when_env_proxy_set_then_default(self, monkeypatch):
        monkeypatch.setenv("WORKSHEET_IMAGE_PROXY_URL", "https://example.com/api/image-proxy")

        assert BuilderConfig().proxy_url == "https://example.com/api/image-proxy"
