import threading

import pytest

from kv_cache.application.stats import StatsCounter
from kv_cache.domain.models import Stats


pytestmark = [pytest.mark.unit]


def test_counter_starts_at_zero():
    assert StatsCounter().snapshot() == Stats(hits=0, misses=0)


def test_counter_records_hits_and_misses_independently():
    counter = StatsCounter()
    counter.record_hit()
    counter.record_hit()
    counter.record_miss()

    snapshot = counter.snapshot()
    assert snapshot.hits == 2
    assert snapshot.misses == 1


def test_snapshot_does_not_follow_later_updates():
    counter = StatsCounter()
    counter.record_hit()
    snapshot = counter.snapshot()
    counter.record_hit()

    assert snapshot.hits == 1
    assert counter.snapshot().hits == 2


def test_concurrent_increments_are_not_lost():
    counter = StatsCounter()
    threads_count = 16
    per_thread = 2000
    start = threading.Event()

    def hammer():
        start.wait()
        for _ in range(per_thread):
            counter.record_hit()
            counter.record_miss()

    threads = [threading.Thread(target=hammer) for _ in range(threads_count)]
    for t in threads:
        t.start()
    start.set()
    for t in threads:
        t.join(timeout=30)

    snapshot = counter.snapshot()
    assert snapshot.hits == threads_count * per_thread
    assert snapshot.misses == threads_count * per_thread
