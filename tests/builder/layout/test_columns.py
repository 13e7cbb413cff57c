"""
Unit tests for column content (item stacks and gap distribution).
"""

import pytest

from worksheet_toolkit.builder.layout import (
    BadgeRowNode,
    ImageNode,
    LayoutConfig,
    ResolvedImage,
    StackNode,
    TextNode,
    build_content,
    to_rendered_items,
)
from worksheet_toolkit.builder.layout.columns import column_gap_size, item_stack
from worksheet_toolkit.core.models import ProblemMetadata


class TestColumnGapSize:
    def test_when_justified_then_slack_split_between_items(self, items_from_heights):
        # Arrange: 3 x 180, slack 722 - 540 = 182 over 2 gaps
        items = items_from_heights([180] * 3)

        # Act
        gap = column_gap_size(items, 722, LayoutConfig())

        # Assert
        assert gap == pytest.approx(91)

    def test_when_slack_small_then_minimum_gap(self, items_from_heights):
        items = items_from_heights([360, 360])

        assert column_gap_size(items, 722, LayoutConfig()) == 10

    def test_when_not_justified_then_constant_gap(self, items_from_heights):
        items = items_from_heights([100, 100, 100])

        assert column_gap_size(items, 780, LayoutConfig.answer_key()) == 5

    @pytest.mark.parametrize("heights", [[], [100]])
    def test_when_fewer_than_two_items_then_no_gap(self, items_from_heights, heights):
        assert column_gap_size(items_from_heights(heights), 722, LayoutConfig()) == 0


class TestItemStack:
    def test_when_plain_item_then_label_then_image(self):
        # Arrange
        item = to_rendered_items([ResolvedImage(None, 800, 600)])[0]

        # Act
        stack = item_stack(item, LayoutConfig())

        # Assert
        label, image = stack.children
        assert isinstance(label, TextNode) and label.text == "1." and label.bold
        assert isinstance(image, ImageNode)
        assert image.width == 240
        assert image.height == pytest.approx(180)
        assert stack.unbreakable

    def test_when_item_has_badges_then_badge_row_between(self):
        # Arrange
        meta = ProblemMetadata(difficulty="hard", exam_year=2023)
        item = to_rendered_items([ResolvedImage(None, 800, 600)], metadata=[meta])[0]

        # Act
        stack = item_stack(item, LayoutConfig())

        # Assert
        assert isinstance(stack.children[1], BadgeRowNode)
        assert stack.children[1].labels == ("hard", "2023")

    @pytest.mark.parametrize("config", [LayoutConfig(), LayoutConfig.answer_key()])
    def test_when_built_then_height_matches_block_height(self, config):
        """The drawn stack is exactly as tall as the packer assumed."""
        meta = ProblemMetadata(chapter_path=("Geometry",))
        item = to_rendered_items([ResolvedImage(None, 613, 457)], config, metadata=[meta])[0]

        stack = item_stack(item, config)

        assert stack.outer_height == pytest.approx(item.block_height)


class TestBuildContent:
    def test_when_built_then_gap_below_all_but_last(self, items_from_heights):
        # Act
        nodes = build_content(items_from_heights([180] * 3, header_height=17), 722)

        # Assert
        assert all(isinstance(n, StackNode) for n in nodes)
        assert [n.margin.bottom for n in nodes] == pytest.approx([65.5, 65.5, 0])

    def test_when_justified_then_column_fills_height(self, items_from_heights):
        nodes = build_content(items_from_heights([100, 200, 150, 80], header_height=17), 722)

        assert sum(n.outer_height for n in nodes) == pytest.approx(722)

    def test_when_empty_then_no_nodes(self):
        assert build_content([], 722) == []
