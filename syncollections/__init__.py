"""Skip-list sets and maps and FIFO ring queues safe to share between threads, plus a simple hash set."""

__version__ = "0.1.0"

__all__ = ["hashset", "lscq", "scqutil", "skiplist_util", "skipmap", "skipset"]