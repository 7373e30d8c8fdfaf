from typing import Dict, Optional

from adrenaline.storage.base import StateStore


class InMemoryStore(StateStore):
    """Process-local store, used for tests and the ``memory`` backend"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.blobs: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def save(self, key: str, blob: str) -> None:
        self.blobs[key] = blob
