from __future__ import annotations

import threading
import time

from soundgate.core.locks import KeyedLocks


def test_same_key_is_exclusive() -> None:
    locks = KeyedLocks()
    active = []
    overlaps = []

    def work() -> None:
        with locks.hold("t1"):
            active.append(1)
            if len(active) > 1:
                overlaps.append(True)
            time.sleep(0.01)
            active.pop()

    threads = [threading.Thread(target=work) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not overlaps


def test_different_keys_do_not_block() -> None:
    locks = KeyedLocks()
    with locks.hold("a"):
        done = threading.Event()

        def other() -> None:
            with locks.hold("b"):
                done.set()

        t = threading.Thread(target=other)
        t.start()
        assert done.wait(timeout=2.0)
        t.join()


def test_entries_are_evicted_when_uncontended() -> None:
    locks = KeyedLocks()
    with locks.hold("a"):
        assert len(locks) == 1
    assert len(locks) == 0
