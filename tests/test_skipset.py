import random
import threading
from concurrent.futures import ThreadPoolExecutor

from syncollections.skipset import SkipSet


def _run_parallel(fn, items, workers=8):
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(fn, items))


def test_example():
    s = SkipSet()
    added = [v for v in (10, 12, 15) if s.add(v)]
    assert added == [10, 12, 15]
    assert s.contains(10)
    seen = []
    s.range(lambda v: seen.append(v) or True)
    assert seen == [10, 12, 15]
    assert s.remove(15)
    assert len(s) == 2


def test_int_set_correctness():
    s = SkipSet()
    assert len(s) == 0
    assert not s.contains(0)
    assert s.add(0) and len(s) == 1
    assert s.contains(0)
    assert s.remove(0) and len(s) == 0

    assert s.add(20) and len(s) == 1
    assert s.add(22) and len(s) == 2
    assert s.add(21) and len(s) == 3
    assert list(s) == [20, 21, 22]

    assert s.remove(21) and len(s) == 2
    assert list(s) == [20, 22]


def test_int_set_concurrent_add_contains_remove():
    num = 32767
    s = SkipSet()
    values = list(range(1, num)) + [num + 1]
    random.shuffle(values)

    assert all(_run_parallel(s.add, values))
    assert len(s) == num
    assert not s.contains(0)
    assert all(_run_parallel(s.contains, values))
    assert all(_run_parallel(s.remove, values))
    assert len(s) == 0


def test_int_set_mixed_operations_keep_order():
    num = 32767
    s = SkipSet()
    errors = []

    def op(_):
        r = random.randrange(num)
        v = random.randrange(1 << 8) + 1
        if r < 333:
            s.add(v)
        elif r < 666:
            s.contains(v)
        elif r != 999:
            s.remove(v)
        else:
            values = list(s)
            if values != sorted(set(values)):
                errors.append(values)

    _run_parallel(op, range(1 << 14))
    assert errors == []
    final = list(s)
    assert final == sorted(set(final))
    assert len(final) == len(s)


def test_range_remove_move_to_other_set():
    x = SkipSet()
    y = SkipSet()
    count = 10000
    for i in range(count):
        x.add(i)
    failures = []

    def mover(_):
        def visit(v):
            if x.remove(v) and not y.add(v):
                failures.append(v)
            return True

        x.range(visit)

    _run_parallel(mover, range(16), workers=16)
    assert failures == []
    assert len(x) == 0
    assert len(y) == count


def test_concurrent_add_remove_small_zone():
    x = SkipSet()
    counts = {"add": 0, "remove": 0}
    lock = threading.Lock()

    def worker(_):
        for _ in range(1000):
            if random.randrange(2) == 0:
                if x.remove(random.randrange(10)):
                    with lock:
                        counts["remove"] += 1
            else:
                if x.add(random.randrange(10)):
                    with lock:
                        counts["add"] += 1

    _run_parallel(worker, range(16), workers=16)
    assert counts["add"] >= counts["remove"]
    assert counts["add"] - counts["remove"] == len(x)
    values = list(x)
    assert values == sorted(set(values))


def test_string_set():
    x = SkipSet()
    assert x.add("111") and len(x) == 1
    assert x.add("222") and len(x) == 2
    assert not x.add("111") and len(x) == 2
    assert x.contains("111") and "222" in x
    assert x.remove("111") and len(x) == 1
    assert x.remove("222") and len(x) == 0

    assert all(_run_parallel(lambda i: x.add(str(i)), range(100)))
    got = sorted(int(v) for v in x)
    assert got == list(range(100))


def test_remove_missing_returns_false():
    s = SkipSet()
    s.add(5)
    assert not s.remove(4)
    assert not s.remove(6)
    assert len(s) == 1


def test_range_stops_early():
    s = SkipSet()
    for v in (3, 1, 2, 5, 4):
        s.add(v)
    seen = []

    def visit(v):
        seen.append(v)
        return v < 3

    s.range(visit)
    assert seen == [1, 2, 3]
    assert list(s)[:3] == seen
    assert len(s) == 5


def test_many_levels_insertion_order_independent():
    s = SkipSet()
    values = list(range(5000))
    random.shuffle(values)
    for v in values:
        assert s.add(v)
    assert list(s) == list(range(5000))
    for v in range(0, 5000, 2):
        assert s.remove(v)
    assert list(s) == list(range(1, 5000, 2))
    assert len(s) == 2500