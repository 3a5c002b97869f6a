"""Tests for the bounded, thread-safe replay guard."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from otpauth.replay_guard import DEFAULT_MAX_CACHE_SIZE, ReplayGuard


class TestCheckAndRecord:

    def test_first_call_admits_second_rejects(self):
        guard = ReplayGuard()
        assert guard.check_and_record("a", 10) is True
        assert guard.check_and_record("a", 10) is False
        assert guard.check_and_record("a", 10) is False

    def test_new_window_overwrites(self):
        guard = ReplayGuard()
        assert guard.check_and_record("a", 10)
        assert guard.check_and_record("a", 11)
        assert guard.last_window("a") == 11
        assert len(guard) == 1

    def test_keys_are_independent(self):
        guard = ReplayGuard()
        assert guard.check_and_record("a", 10)
        assert guard.check_and_record("b", 10)
        assert "a" in guard and "b" in guard

    def test_default_capacity(self):
        assert ReplayGuard().capacity == DEFAULT_MAX_CACHE_SIZE == 500

    @pytest.mark.parametrize("capacity", [0, -1, 1.5, "10", True])
    def test_invalid_capacity(self, capacity):
        with pytest.raises(ValueError):
            ReplayGuard(capacity)

    def test_clear(self):
        guard = ReplayGuard()
        guard.check_and_record("a", 1)
        guard.clear()
        assert len(guard) == 0
        assert guard.check_and_record("a", 1)


class TestEviction:

    def test_full_guard_drops_other_windows(self):
        guard = ReplayGuard(capacity=3)
        for key in "abc":
            guard.check_and_record(key, 1)
        assert len(guard) == 3

        assert guard.check_and_record("d", 2)
        assert len(guard) == 1
        assert guard.last_window("d") == 2
        assert "a" not in guard

    def test_entries_for_current_window_survive(self):
        guard = ReplayGuard(capacity=3)
        guard.check_and_record("a", 1)
        guard.check_and_record("b", 2)
        guard.check_and_record("c", 2)

        assert guard.check_and_record("d", 2)
        assert "a" not in guard
        assert {"b", "c", "d"} == {k for k in "abcd" if k in guard}
        assert guard.check_and_record("b", 2) is False

    def test_same_window_overflow_drops_oldest(self):
        guard = ReplayGuard(capacity=2)
        guard.check_and_record("a", 5)
        guard.check_and_record("b", 5)
        assert guard.check_and_record("c", 5)
        assert len(guard) == 2
        assert "a" not in guard
        assert "b" in guard and "c" in guard

    def test_existing_key_does_not_trigger_eviction(self):
        guard = ReplayGuard(capacity=2)
        guard.check_and_record("a", 1)
        guard.check_and_record("b", 1)
        assert guard.check_and_record("a", 2)
        assert len(guard) == 2

    def test_size_never_exceeds_capacity(self):
        guard = ReplayGuard(capacity=50)
        for i in range(1000):
            guard.check_and_record(f"k{i}", i // 7)
            assert len(guard) <= 50

    def test_shrinking_capacity_trims(self):
        guard = ReplayGuard(capacity=10)
        for i in range(10):
            guard.check_and_record(i, 1)
        guard.set_capacity(4)
        assert guard.capacity == 4
        assert len(guard) == 4
        assert 9 in guard and 0 not in guard


class TestConcurrency:

    def test_exactly_one_admission_under_race(self):
        guard = ReplayGuard()
        n = 32
        barrier = threading.Barrier(n)

        def attempt():
            barrier.wait()
            return guard.check_and_record("shared", 42)

        with ThreadPoolExecutor(max_workers=n) as pool:
            results = list(pool.map(lambda _: attempt(), range(n)))

        assert results.count(True) == 1
        assert results.count(False) == n - 1

    def test_capacity_changes_while_recording(self):
        guard = ReplayGuard(capacity=100)
        stop = threading.Event()

        def resize():
            size = 1
            while not stop.is_set():
                guard.set_capacity(size)
                size = size % 100 + 1

        resizer = threading.Thread(target=resize)
        resizer.start()
        try:
            with ThreadPoolExecutor(max_workers=8) as pool:
                list(pool.map(lambda i: guard.check_and_record(i % 300, i // 300), range(5000)))
        finally:
            stop.set()
            resizer.join()

        guard.set_capacity(100)
        assert len(guard) <= 100
