"""
Unit tests for the greedy column packer.
"""

import logging

import pytest

from worksheet_toolkit.builder.layout import pack


class TestPackBasics:
    def test_when_items_fit_then_all_accepted(self, items_from_heights):
        # Arrange
        items = items_from_heights([100, 100, 100])

        # Act
        result = pack(items, 722)

        # Assert
        assert result.accepted == tuple(items)
        assert result.remaining == ()
        assert result.height == pytest.approx(360)

    def test_when_column_full_then_rest_remains_in_order(self, items_from_heights):
        # Arrange: cost 200 each, 3 fit in 722
        items = items_from_heights([180] * 5)

        # Act
        result = pack(items, 722)

        # Assert
        assert [i.sequence_index for i in result.accepted] == [0, 1, 2]
        assert [i.sequence_index for i in result.remaining] == [3, 4]
        assert result.column.height == pytest.approx(600)

    def test_when_header_height_set_then_counted(self, items_from_heights):
        # Arrange: 180 + 17 header + 20 margin = 217, 3 fit (651)
        items = items_from_heights([180] * 4, header_height=17)

        # Act
        result = pack(items, 722)

        # Assert
        assert len(result.accepted) == 3
        assert result.height == pytest.approx(651)

    def test_when_custom_margin_then_used_per_item(self, items_from_heights):
        items = items_from_heights([100, 100])

        result = pack(items, 722, inter_item_margin=5)

        assert result.height == pytest.approx(210)

    def test_when_empty_queue_then_empty_result(self):
        result = pack([], 722)

        assert result.accepted == ()
        assert result.remaining == ()
        assert result.column.is_empty


class TestPackOrdering:
    def test_when_later_item_would_fit_then_it_does_not_jump_ahead(self, items_from_heights):
        """A small item never skips past a large one that ended the column."""
        # Arrange: 320 used, 500 needs 520 -> 840 > 722, 100 would fit but must wait
        items = items_from_heights([300, 500, 100])

        # Act
        result = pack(items, 722)

        # Assert
        assert [i.sequence_index for i in result.accepted] == [0]
        assert [i.sequence_index for i in result.remaining] == [1, 2]


class TestPackProgress:
    @pytest.mark.parametrize("heights", [[10], [2000], [2000, 10], [721, 721], [0, 0, 0]])
    def test_when_queue_non_empty_then_accepts_at_least_one(self, items_from_heights, heights):
        result = pack(items_from_heights(heights), 722)

        assert len(result.accepted) >= 1
        assert len(result.accepted) + len(result.remaining) == len(heights)

    def test_when_first_item_oversized_then_placed_alone(self, items_from_heights, caplog):
        # Arrange
        items = items_from_heights([2000, 50])

        # Act
        with caplog.at_level(logging.WARNING):
            result = pack(items, 722)

        # Assert
        assert [i.sequence_index for i in result.accepted] == [0]
        assert [i.sequence_index for i in result.remaining] == [1]
        assert result.height == pytest.approx(2020)
        assert "placing it alone" in caplog.text

    def test_when_oversized_item_follows_then_starts_next_column(self, items_from_heights):
        items = items_from_heights([100, 2000])

        result = pack(items, 722)

        assert [i.sequence_index for i in result.accepted] == [0]
        assert [i.sequence_index for i in result.remaining] == [1]
