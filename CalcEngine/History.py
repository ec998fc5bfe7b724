# History.py
"""""
Bounded, newest-first history of successful calculations.

Kept in memory only; storing it anywhere durable is up to the caller.
"""""

import time
from dataclasses import dataclass


@dataclass(frozen=True)
class HistoryItem:
    expression: str
    result: str
    timestamp: float


class History:
    def __init__(self, max_history=100):
        self.max_history = max_history
        self.items = []

    def add(self, expression, result, timestamp=None):
        item = HistoryItem(
            expression=str(expression or ""),
            result=str(result or ""),
            timestamp=time.time() if timestamp is None else timestamp,
        )
        self.items.insert(0, item)
        del self.items[self.max_history:]
        return item

    def remove(self, timestamp):
        self.items = [item for item in self.items if item.timestamp != timestamp]

    def clear(self):
        self.items = []

    def resize(self, max_history):
        self.max_history = max_history
        del self.items[self.max_history:]

    def __iter__(self):
        return iter(self.items)

    def __len__(self):
        return len(self.items)
