"""Tests for RetryQueue."""

import threading

from tile_prefetcher.downloader.retry import RetryQueue
from tile_prefetcher.tile import TileCoord, WorkItem


def item(x):
    return WorkItem(TileCoord(4, x, 0), provider=None)


def test_fifo_order():
    q = RetryQueue()
    for x in range(3):
        q.push(item(x))
    assert len(q) == 3
    assert [q.pop().coord.x for _ in range(3)] == [0, 1, 2]
    assert q.empty()


def test_pop_on_empty_returns_none():
    assert RetryQueue().pop() is None


def test_failure_counts_per_tile():
    q = RetryQueue()
    a, b = item(1), item(2)
    assert q.record_failure(a) == 1
    assert q.record_failure(a) == 2
    assert q.record_failure(b) == 1
    q.forget(a)
    assert q.record_failure(a) == 1


def test_concurrent_producers():
    q = RetryQueue()

    def produce(offset):
        for x in range(100):
            q.push(item(offset + x))

    threads = [threading.Thread(target=produce, args=(i * 100,)) for i in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    popped = []
    while True:
        it = q.pop()
        if it is None:
            break
        popped.append(it.coord.x)
    assert sorted(popped) == list(range(400))
