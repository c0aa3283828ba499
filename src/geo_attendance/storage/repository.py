from __future__ import annotations

from typing import Optional, Protocol


class KeyValueStore(Protocol):
    """Durable string store addressed by fixed keys (one blob per key)."""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError
