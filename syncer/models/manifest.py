"""
Manifest model: key to descriptor mapping for one location.
"""
from typing import Dict, Iterable, Iterator, Optional

from .descriptor import ObjectDescriptor


class Manifest:
    """
    Best known current state of a location, held in memory only.

    Built wholesale from a full listing at startup, then kept current one
    key at a time by puts, deletes and watch events.  Only one writer
    ever touches a given manifest, so no locking is done here.
    """

    def __init__(self, descriptors: Iterable[ObjectDescriptor] = ()):
        self._entries: Dict[str, ObjectDescriptor] = {}
        for descriptor in descriptors:
            self.insert(descriptor)

    def insert(self, descriptor: ObjectDescriptor) -> None:
        """Insert or replace the entry for ``descriptor.key``."""
        self._entries[descriptor.key] = descriptor

    def remove(self, key: str) -> Optional[ObjectDescriptor]:
        """Drop *key* if present and return the old entry."""
        return self._entries.pop(key, None)

    def get(self, key: str) -> Optional[ObjectDescriptor]:
        return self._entries.get(key)

    def keys(self):
        return self._entries.keys()

    def items(self):
        return self._entries.items()

    def values(self):
        return self._entries.values()

    def total_size(self) -> int:
        return sum(d.size for d in self._entries.values())

    def __getitem__(self, key: str) -> ObjectDescriptor:
        return self._entries[key]

    def __contains__(self, key) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self):
        return f"Manifest({len(self._entries)} objects)"
