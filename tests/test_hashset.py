from syncollections.hashset import HashSet


def test_int_set_correctness():
    s = HashSet()
    assert len(s) == 0
    assert not s.contains(0)

    s.add(0)
    assert len(s) == 1
    assert s.contains(0)
    s.remove(0)
    assert len(s) == 0

    s.add(20)
    assert len(s) == 1
    s.add(22)
    assert len(s) == 2
    s.add(21)
    assert len(s) == 3
    s.add(21)
    assert len(s) == 3


def test_example_flow():
    s = HashSet()
    for v in (10, 12, 15):
        s.add(v)
    assert s.contains(10)
    seen = []
    s.range(lambda v: seen.append(v) or True)
    assert sorted(seen) == [10, 12, 15]
    s.remove(15)
    assert len(s) == 2


def test_add_and_remove_return_true():
    s = HashSet()
    assert s.add(1) is True
    assert s.add(1) is True
    assert s.remove(1) is True
    assert s.remove(1) is True
    assert len(s) == 0


def test_range_stops_early():
    s = HashSet(range(10))
    calls = []

    def visit(v):
        calls.append(v)
        return len(calls) < 3

    s.range(visit)
    assert len(calls) == 3
    assert len(set(calls)) == 3
    assert set(calls).issubset(set(s))
    assert len(s) == 10
    assert all(s.contains(v) for v in calls)


def test_init_iter_and_contains():
    s = HashSet([1, 2, 2, 3])
    assert len(s) == 3
    assert sorted(s) == [1, 2, 3]
    assert 2 in s
    assert 4 not in s


def test_other_element_types():
    s = HashSet()
    s.add(1.5)
    s.add("a")
    assert s.contains(1.5)
    assert "a" in s
    assert not s.contains("b")