"""
Snapshot encoding with tolerant decoding.

Decoding starts from a default system and overlays the persisted sections
one at a time. Unknown fields are dropped, missing fields keep their
defaults, and a section that fails validation falls back to its defaults
without discarding the others.
"""
import json
import logging
from typing import Any, Dict

from pydantic import ValidationError

from adrenaline.gamification.models import AdrenalineSystem

logger = logging.getLogger(__name__)


def encode_system(system: AdrenalineSystem) -> str:
    return json.dumps(system.model_dump(mode="json"), ensure_ascii=False)


def _overlay(default: Any, persisted: Any) -> Any:
    if isinstance(default, dict) and isinstance(persisted, dict):
        merged = dict(default)
        merged.update(persisted)
        return merged
    return persisted


def decode_system(blob: str, defaults: AdrenalineSystem) -> AdrenalineSystem:
    try:
        data = json.loads(blob)
    except (TypeError, ValueError) as e:
        logger.warning(f"Discarding unreadable snapshot: {e}")
        return defaults.model_copy(deep=True)

    if not isinstance(data, dict):
        logger.warning(f"Discarding snapshot of type {type(data).__name__}")
        return defaults.model_copy(deep=True)

    merged: Dict[str, Any] = defaults.model_dump(mode="json")
    for name in AdrenalineSystem.model_fields:
        if name not in data:
            continue
        candidate = dict(merged)
        candidate[name] = _overlay(merged[name], data[name])
        try:
            AdrenalineSystem.model_validate(candidate)
        except ValidationError as e:
            logger.warning(f"Snapshot section '{name}' is invalid, using defaults: {e.error_count()} error(s)")
            continue
        merged = candidate

    return AdrenalineSystem.model_validate(merged)
