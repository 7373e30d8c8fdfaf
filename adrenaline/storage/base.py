"""
Snapshot stores
A store keeps opaque text blobs under fixed keys.
"""
from abc import ABC, abstractmethod
from typing import Optional


class StateStore(ABC):
    """Key-value store for persisted engine snapshots"""

    @abstractmethod
    def load(self, key: str) -> Optional[str]:
        """Stored blob, or None when the key was never saved"""
        pass

    @abstractmethod
    def save(self, key: str, blob: str) -> None:
        pass
