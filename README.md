# syncollections

Collections for Python programs that share data between threads.

- `syncollections.skipset.SkipSet`: an ordered set backed by a skip list with
  per-node locking.
- `syncollections.skipmap.SkipMap`: an ordered map backed by the same kind of
  skip list.
- `syncollections.lscq.Queue`: an unbounded multi-producer, multi-consumer FIFO
  queue made of linked fixed-size rings.
- `syncollections.lscq.BoundedQueue`: a single ring holding at most
  `SCQ_SIZE` (65536) items.
- `syncollections.hashset.HashSet`: a small unordered set with `add`,
  `contains`, `remove` and `range`. It has no locking of its own.

The modules `syncollections.skiplist_util` (node flags `BitFlag` and
`random_level`) and `syncollections.scqutil` (packing and unpacking of ring
slot flags) hold the shared building blocks.

## Installation

```
pip install syncollections
```

## Usage

### Ordered sets

Values must be mutually comparable; they are kept in ascending order.

```python
from syncollections.skipset import SkipSet

s = SkipSet()
s.add(20)
s.add(22)
s.add(21)
print(s.add(21))         # False: already present
print(21 in s)           # True
print(list(s))           # [20, 21, 22]
print(s.remove(21))      # True
print(len(s))            # 2
```

`range(f)` calls `f(value)` for each value in ascending order and stops as
soon as `f` returns a false value.

### Ordered maps

```python
from syncollections.skipmap import SkipMap

m = SkipMap()
m.store(123, "123")
print(m.load(123))                   # ('123', True)
print(m.load_or_store(123, "456"))   # ('123', True)
print(m.load_and_delete(123))        # ('123', True)
print(m.load(123))                   # (None, False)

value, loaded = m.load_or_store_lazy(7, lambda: "computed once")
for key, value in m.items():
    print(key, value)
```

`load_or_store_lazy` calls its factory at most once, and only when the key is
inserted. `delete(key)` returns `True` if that call removed the key.
`range(f)` calls `f(key, value)` in ascending key order until `f` returns a
false value; iterating a `SkipMap` yields its keys.

### Hash sets

```python
from syncollections.hashset import HashSet

h = HashSet([10, 12, 15])
print(h.contains(10))   # True
h.remove(15)            # always returns True
print(len(h))           # 2
```

### Queues

```python
from syncollections.lscq import Queue, BoundedQueue

q = Queue()
q.enqueue(1)
q.enqueue(2)
print(q.dequeue())   # (1, True)
print(q.dequeue())   # (2, True)
print(q.dequeue())   # (None, False)

b = BoundedQueue()
b.enqueue(42)        # returns False once the ring is full
```

`dequeue()` returns a `(value, ok)` pair; `ok` is `False` when nothing is
available. `Queue.enqueue` always returns `True`: when the current ring fills
up, a new ring is linked after it.

## What the package does not do

Everything lives in memory; nothing is persisted. The queues do not block:
`dequeue()` on an empty queue returns `(None, False)` at once rather than
waiting for an item. `HashSet` is not safe to modify from several threads at
the same time.

## Running the tests

```
pip install "syncollections[test]"
pytest
```