"""
Adrenaline API Endpoints
Answer events, reward composition, treasure boxes and status polling

Handlers are plain functions: the composer blocks on store I/O, so FastAPI
runs them in its threadpool.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from adrenaline.gamification import AdrenalineComposer
from adrenaline.gamification.models import EventKind

router = APIRouter()


def get_composer(request: Request) -> AdrenalineComposer:
    """The composer lives on app.state; see ``create_app``"""
    return request.app.state.composer


class AnswerRequest(BaseModel):
    """Correct answer submission"""
    is_critical: Optional[bool] = None
    forced: bool = False


class RewardRequest(BaseModel):
    """Base reward to scale"""
    base_amount: int = Field(ge=0)
    is_critical: bool = False


class TreasureBoxRequest(BaseModel):
    # plain string: unknown difficulties fall back to easy instead of a 422
    difficulty: str = "normal"
    forced: bool = False


class EnabledRequest(BaseModel):
    enabled: bool


def _events(events) -> dict:
    return {"events": [event.model_dump(mode="json") for event in events]}


@router.post("/answers/correct")
def submit_correct_answer(
    request: AnswerRequest,
    composer: AdrenalineComposer = Depends(get_composer),
):
    """Process a correct answer and return banner events"""
    return _events(composer.on_correct_answer(request.is_critical, request.forced))


@router.post("/answers/incorrect")
def submit_incorrect_answer(composer: AdrenalineComposer = Depends(get_composer)):
    """Process an incorrect answer and return banner events"""
    return _events(composer.on_incorrect_answer())


@router.post("/session/start")
def start_session(composer: AdrenalineComposer = Depends(get_composer)):
    """Evaluate the daily login streak"""
    return _events(composer.start_session())


@router.post("/rewards/compute")
def compute_reward(
    request: RewardRequest,
    composer: AdrenalineComposer = Depends(get_composer),
):
    """Scale a base XP amount by every active multiplier"""
    return composer.compute_reward(request.base_amount, request.is_critical).model_dump()


@router.post("/treasure-boxes")
def earn_treasure_box(
    request: TreasureBoxRequest,
    composer: AdrenalineComposer = Depends(get_composer),
):
    box = composer.earn_treasure_box(request.difficulty, request.forced)
    return {"box": box.model_dump(mode="json")}


@router.get("/treasure-boxes")
def list_treasure_boxes(
    unopened_only: bool = False,
    composer: AdrenalineComposer = Depends(get_composer),
):
    boxes = composer.list_treasure_boxes(unopened_only)
    return {"boxes": [box.model_dump(mode="json") for box in boxes]}


@router.post("/treasure-boxes/{box_id}/open")
def open_treasure_box(
    box_id: str,
    composer: AdrenalineComposer = Depends(get_composer),
):
    """
    Redeem a box.

    Unknown or already-opened boxes return an empty reward list, never an error.
    """
    rewards = composer.open_treasure_box(box_id)
    return {"box_id": box_id, "rewards": [reward.model_dump(mode="json") for reward in rewards]}


@router.get("/status/combo")
def combo_status(composer: AdrenalineComposer = Depends(get_composer)):
    return composer.combo_status().model_dump()


@router.get("/status/fever")
def fever_status(composer: AdrenalineComposer = Depends(get_composer)):
    return composer.fever_status().model_dump()


@router.get("/status/pressure")
def pressure_status(composer: AdrenalineComposer = Depends(get_composer)):
    return composer.pressure_status().model_dump()


@router.get("/snapshot")
def snapshot(composer: AdrenalineComposer = Depends(get_composer)):
    return composer.snapshot().model_dump(mode="json")


@router.get("/stats")
def stats(composer: AdrenalineComposer = Depends(get_composer)):
    return composer.stats().model_dump()


@router.put("/enabled")
def set_enabled(
    request: EnabledRequest,
    composer: AdrenalineComposer = Depends(get_composer),
):
    composer.set_enabled(request.enabled)
    return {"enabled": composer.enabled}


@router.post("/reset")
def reset(composer: AdrenalineComposer = Depends(get_composer)):
    """Restore defaults (testing/administration)"""
    composer.reset()
    return {"status": "reset"}


@router.post("/test-events/{kind}")
def trigger_test_event(
    kind: EventKind,
    composer: AdrenalineComposer = Depends(get_composer),
):
    return _events(composer.trigger_test_event(kind))
