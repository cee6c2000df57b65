"""Tests for splitting the tile list across worker threads."""

import pytest

from tile_prefetcher.downloader.utils import partition_ranges


def test_remainder_goes_to_last_worker():
    ranges = partition_ranges(103, 5)
    assert [len(r) for r in ranges] == [20, 20, 20, 20, 23]
    assert ranges[-1] == range(80, 103)


def test_more_workers_than_tiles_collapses_to_one():
    assert partition_ranges(3, 8) == [range(0, 3)]


def test_empty_list():
    assert partition_ranges(0, 4) == [range(0, 0)]


@pytest.mark.parametrize("total, workers", [(1, 1), (10, 3), (64, 8), (1000, 7), (99, 98)])
def test_ranges_cover_every_index_exactly_once(total, workers):
    indices = [i for r in partition_ranges(total, workers) for i in r]
    assert indices == list(range(total))


def test_invalid_worker_count():
    with pytest.raises(ValueError):
        partition_ranges(10, 0)
