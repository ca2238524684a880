"""In-memory registry of what should be subscribed right now."""

from __future__ import annotations


class SubscriptionRegistry:
    """Maps caller-chosen keys to the channel requests they stand for.

    Not locked on its own; the session guards it together with the sends.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[str, ...]] = {}

    def register(self, key: str, channels: list[str]) -> None:
        """Store or replace the channel requests for a key."""
        self._entries[key] = tuple(channels)

    def unregister(self, key: str) -> tuple[str, ...] | None:
        """Remove a key. Returns its channels, or None when it was not registered."""
        return self._entries.pop(key, None)

    def get(self, key: str) -> tuple[str, ...] | None:
        return self._entries.get(key)

    def snapshot(self) -> list[list[str]]:
        """Every registered request set, for replay after a reconnect."""
        return [list(channels) for channels in self._entries.values()]

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
