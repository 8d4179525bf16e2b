"""
Unit tests for WaitingQueue.

Tests FIFO order, duplicate rejection and arbitrary removal.
"""

from entremetteur.infrastructure.matchmaking import WaitingQueue


class TestWaitingQueue:
    """Unit tests for WaitingQueue."""

    # ================================================================
    # Enqueue
    # ================================================================

    def test_enqueue_appends_in_arrival_order(self, waiting_queue):
        """Test entries keep arrival order."""
        for cid in ("a", "b", "c"):
            assert waiting_queue.enqueue(cid) is True

        assert waiting_queue.snapshot() == ["a", "b", "c"]
        assert len(waiting_queue) == 3

    def test_enqueue_ignores_duplicates(self, waiting_queue):
        """Test a queued connection is not added twice."""
        waiting_queue.enqueue("a")

        assert waiting_queue.enqueue("a") is False
        assert waiting_queue.snapshot() == ["a"]

    def test_enqueue_refuses_paired_connection(self, waiting_queue):
        """Test paired connections never enter the queue."""
        assert waiting_queue.enqueue("a", paired=True) is False
        assert "a" not in waiting_queue

    def test_works_without_reporter(self):
        """Test queue is usable without a reporter."""
        queue = WaitingQueue()

        queue.enqueue("a")
        queue.enqueue("a")

        assert queue.snapshot() == ["a"]

    # ================================================================
    # Dequeue / remove
    # ================================================================

    def test_dequeue_oldest_is_fifo(self, waiting_queue):
        """Test dequeue returns the earliest entry first."""
        for cid in ("a", "b", "c"):
            waiting_queue.enqueue(cid)

        assert waiting_queue.dequeue_oldest() == "a"
        assert waiting_queue.dequeue_oldest() == "b"
        assert waiting_queue.snapshot() == ["c"]

    def test_dequeue_empty_returns_none(self, waiting_queue):
        """Test dequeue on an empty queue."""
        assert waiting_queue.dequeue_oldest() is None

    def test_peek_oldest_does_not_remove(self, waiting_queue):
        """Test peeking leaves the head in place."""
        assert waiting_queue.peek_oldest() is None

        waiting_queue.enqueue("a")
        waiting_queue.enqueue("b")

        assert waiting_queue.peek_oldest() == "a"
        assert waiting_queue.snapshot() == ["a", "b"]

    def test_remove_preserves_order_of_rest(self, waiting_queue):
        """Test removing a middle entry keeps the others in order."""
        for cid in ("a", "b", "c", "d"):
            waiting_queue.enqueue(cid)

        assert waiting_queue.remove("b") is True
        assert waiting_queue.snapshot() == ["a", "c", "d"]

    def test_remove_absent_is_noop(self, waiting_queue):
        """Test removing an unknown connection."""
        waiting_queue.enqueue("a")

        assert waiting_queue.remove("zzz") is False
        assert waiting_queue.snapshot() == ["a"]

    def test_requeue_after_remove_goes_to_back(self, waiting_queue):
        """Test a connection that left and came back waits behind others."""
        for cid in ("a", "b"):
            waiting_queue.enqueue(cid)

        waiting_queue.remove("a")
        waiting_queue.enqueue("a")

        assert waiting_queue.snapshot() == ["b", "a"]

    def test_clear(self, waiting_queue):
        """Test clear empties the queue."""
        waiting_queue.enqueue("a")
        waiting_queue.clear()

        assert len(waiting_queue) == 0
        assert waiting_queue.contains("a") is False
