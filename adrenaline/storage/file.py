import logging
import os
from pathlib import Path
from typing import Optional

from adrenaline.storage.base import StateStore

logger = logging.getLogger(__name__)


class JsonFileStore(StateStore):
    """One JSON file per key inside ``directory``"""

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def save(self, key: str, blob: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(blob, encoding="utf-8")
        # atomic on POSIX and Windows
        os.replace(tmp_path, path)
        logger.debug(f"Saved snapshot to {path}")
