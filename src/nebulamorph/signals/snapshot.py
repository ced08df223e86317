"""Single-slot latest-value exchange between producer threads and the frame loop."""

import threading
from typing import Generic, TypeVar

T = TypeVar("T")


class LatestSnapshot(Generic[T]):
    """
    Holds only the newest published value.

    Producers overwrite, the frame loop reads whatever is current. There is
    no queue and no back-pressure; a reader may see a value one frame old.
    """

    def __init__(self, initial: T | None = None):
        self._lock = threading.Lock()
        self._value = initial
        self._version = 0

    def publish(self, value: T) -> int:
        with self._lock:
            self._value = value
            self._version += 1
            return self._version

    def read(self) -> T | None:
        with self._lock:
            return self._value

    @property
    def version(self) -> int:
        with self._lock:
            return self._version
