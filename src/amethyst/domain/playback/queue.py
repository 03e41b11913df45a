"""
Playback queue for Amethyst

Owns the ordered track list and the current index. Every mutating operation
applies all of its changes first and then notifies listeners exactly once.
"""

import random
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, MutableSequence, Optional, Sequence

from amethyst.core.config import DEFAULT_EXTENSIONS


@dataclass(frozen=True)
class QueueEvent:
    """What a queue operation changed."""

    contents_changed: bool = False  # entries added/removed/replaced
    reordered: bool = False  # same entries, new order
    index_changed: bool = False


QueueListener = Callable[[QueueEvent], None]


def flatten(entries: Iterable[Any]) -> List[str]:
    """Depth-first flatten of arbitrarily nested batches, order preserved.

    Strings are track references, never batches.
    """
    flat: List[str] = []
    for entry in entries:
        if isinstance(entry, (list, tuple)):
            flat.extend(flatten(entry))
        else:
            flat.append(entry)
    return flat


def fisher_yates_shuffle(items: MutableSequence, rng: Optional[random.Random] = None) -> MutableSequence:
    """Uniform in-place shuffle."""
    rng = rng or random
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items


def extension_of(path: str) -> str:
    """Lower-cased text after the final dot, or the whole string if there is none."""
    return path[path.rfind(".") + 1 :].lower()


class QueueManager:
    """Ordered list of track references plus the current index (-1 = none)."""

    def __init__(
        self,
        entries: Optional[Sequence[str]] = None,
        allowed_extensions: Optional[Iterable[str]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._queue: List[str] = flatten(entries or [])
        self._index = -1
        self.allowed_extensions = frozenset(
            ext.lower().lstrip(".") for ext in (allowed_extensions or DEFAULT_EXTENSIONS)
        )
        self._rng = rng or random.Random()
        self._listeners: List[QueueListener] = []

    # Observation

    def subscribe(self, listener: QueueListener) -> None:
        self._listeners.append(listener)

    def _emit(self, event: QueueEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    @property
    def tracks(self) -> List[str]:
        """Copy of the queue."""
        return list(self._queue)

    @property
    def index(self) -> int:
        return self._index

    def __len__(self) -> int:
        return len(self._queue)

    def current_path(self) -> Optional[str]:
        """Track at the current index, or None when the index is out of range."""
        if 0 <= self._index < len(self._queue):
            return self._queue[self._index]
        return None

    # Mutation

    def set_queue(self, entries: Iterable[Any]) -> None:
        """Replace the queue with the flattened ``entries``."""
        self._queue = flatten(entries)
        self._emit(QueueEvent(contents_changed=True))

    def is_allowed(self, path: str) -> bool:
        return extension_of(path) in self.allowed_extensions

    def prepend_and_select(self, path: str) -> bool:
        """Put ``path`` at the front and select it, if its extension is allowed.

        Returns:
            True if the queue changed
        """
        if not self.is_allowed(path):
            return False

        self._queue.insert(0, path)
        self._index = 0
        self._emit(QueueEvent(contents_changed=True, index_changed=True))
        return True

    def clear(self) -> None:
        self._queue = []
        self._emit(QueueEvent(contents_changed=True))

    def shuffle(self) -> None:
        fisher_yates_shuffle(self._queue, self._rng)
        self._emit(QueueEvent(reordered=True))

    def next(self, skip: int = 1) -> bool:
        """Advance by ``skip`` if ``index + skip < len - skip``.

        Returns:
            True if the index moved
        """
        if self._index + skip < len(self._queue) - skip:
            return self.set_index(self._index + skip)
        return False

    def previous(self, skip: int = 1) -> bool:
        """Go back by ``skip`` if ``index - skip > 0``.

        Returns:
            True if the index moved
        """
        if self._index - skip > 0:
            return self.set_index(self._index - skip)
        return False

    def set_index(self, index: int) -> bool:
        """Select ``index`` without bounds validation."""
        if index == self._index:
            return False
        self._index = index
        self._emit(QueueEvent(index_changed=True))
        return True
