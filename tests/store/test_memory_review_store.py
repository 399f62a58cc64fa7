import threading
from datetime import UTC, datetime, timedelta

from vocab_srs.srs import ReviewItem, Scheduler
from vocab_srs.store import InMemoryReviewStore

D0 = datetime(2026, 3, 1, tzinfo=UTC)


def test_returned_items_are_copies():
    store = InMemoryReviewStore()
    item, created = store.add_if_absent(ReviewItem(item_id="A", content={"front": "x"}, next_review_at=D0))
    assert created

    item.content["front"] = "mutated"
    item.repetitions = 99

    stored = store.get("A")
    assert stored.content == {"front": "x"}
    assert stored.repetitions == 0


def test_add_if_absent_keeps_existing():
    store = InMemoryReviewStore()
    store.add_if_absent(ReviewItem(item_id="A", content={"front": "x"}, next_review_at=D0))
    existing, created = store.add_if_absent(ReviewItem(item_id="A", content={"front": "y"}, next_review_at=D0))

    assert created is False
    assert existing.content == {"front": "x"}
    assert store.count() == 1


def test_concurrent_reviews_of_same_item_are_not_lost():
    store = InMemoryReviewStore()
    scheduler = Scheduler(store, clock=lambda: D0)
    scheduler.seed("A", {}, D0)

    def _worker():
        for _ in range(50):
            scheduler.record_review("A", 4, D0)

    threads = [threading.Thread(target=_worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.get("A").repetitions == 200
    assert store.count_reviews_since(D0) == 200


def test_naive_next_review_at_is_stored_as_utc():
    store = InMemoryReviewStore()
    item, _ = store.add_if_absent(ReviewItem(item_id="A", content={}, next_review_at=datetime(2026, 3, 1)))

    assert item.next_review_at == D0
    assert item.next_review_at.tzinfo is not None
    assert [it.item_id for it in store.iter_due(D0)] == ["A"]
    assert store.count_due(D0 - timedelta(seconds=1)) == 0
    assert store.count_scheduled_between(D0, D0 + timedelta(days=1)) == 1
