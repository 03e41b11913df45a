"""Path-keyed result store for enrichment results (tempo, artwork)."""

from typing import Dict, Generic, Iterator, Optional, TypeVar

T = TypeVar("T")


class ResultCache(Generic[T]):
    """Maps track references to a computed result.

    Only successful results are ever stored; absence means "not computed yet
    or failed", never "explicitly empty".
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._entries: Dict[str, T] = {}

    def get(self, path: str) -> Optional[T]:
        return self._entries.get(path)

    def store(self, path: str, value: T) -> None:
        self._entries[path] = value

    def missing(self, paths) -> list[str]:
        """Paths from ``paths`` without an entry, in order, duplicates kept."""
        return [p for p in paths if p and p not in self._entries]

    def snapshot(self) -> Dict[str, T]:
        return dict(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
