"""Interface every key-value backend implements."""

from typing import Optional, Protocol


class StoreProtocol(Protocol):
    """String key -> string value persistence, shaped like browser localStorage.

    Implementations raise errors.StorageError when the layer is unreachable
    and errors.StorageQuotaError when a write would not fit.
    """

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...

    def clear(self) -> None: ...

    def snapshot(self) -> dict[str, str]: ...

    def restore(self, snapshot: dict[str, str]) -> None: ...

    def estimate(self) -> Optional[dict]: ...


def used_bytes(items: dict[str, str]) -> int:
    """Size as the browser accounts it: key length plus value length."""
    return sum(len(k) + len(v) for k, v in items.items())
