"""
API tests for the adrenaline router

Drives the FastAPI app in-process through httpx with the fake clock and
scripted randomness from conftest.
"""
import asyncio
import threading

import pytest
from httpx import AsyncClient, ASGITransport

from adrenaline.main import create_app
from adrenaline.storage import InMemoryStore

API = "/api/adrenaline"


class SlowStore(InMemoryStore):
    """Store whose save blocks until released"""

    def __init__(self):
        super().__init__()
        self.saving = threading.Event()
        self.release = threading.Event()

    def save(self, key, blob):
        self.saving.set()
        self.release.wait(timeout=2.0)
        super().save(key, blob)


@pytest.mark.asyncio
class TestAnswerEndpoints:

    async def test_correct_answer(self, client):
        response = await client.post(f"{API}/answers/correct", json={})

        assert response.status_code == 200
        assert response.json() == {"events": []}

    async def test_forced_correct_answer(self, client):
        response = await client.post(f"{API}/answers/correct", json={"forced": True})

        events = response.json()["events"]
        assert [e["kind"] for e in events] == ["critical_hit", "fever_time_start"]
        assert events[0]["multiplier"] == 3.0
        assert events[0]["effects"] == ["critical_flash", "screen_shake", "golden_effect"]

    async def test_incorrect_answer_breaks_combo(self, client, clock):
        for _ in range(3):
            clock.advance(1_000)
            await client.post(f"{API}/answers/correct", json={})

        response = await client.post(f"{API}/answers/incorrect")

        events = response.json()["events"]
        assert [e["kind"] for e in events] == ["combo_break"]
        assert events[0]["value"] == 3

    async def test_session_start(self, client):
        response = await client.post(f"{API}/session/start")

        assert response.status_code == 200
        assert response.json() == {"events": []}


@pytest.mark.asyncio
class TestRewardEndpoint:

    async def test_compute(self, client):
        response = await client.post(
            f"{API}/rewards/compute",
            json={"base_amount": 100, "is_critical": True},
        )

        assert response.status_code == 200
        assert response.json() == {
            "final_amount": 300,
            "multiplier": 3.0,
            "breakdown": ["Base XP: 100", "Critical x3"],
        }

    async def test_negative_base_rejected(self, client):
        response = await client.post(f"{API}/rewards/compute", json={"base_amount": -5})

        assert response.status_code == 422


@pytest.mark.asyncio
class TestTreasureBoxEndpoints:

    async def test_earn_list_open(self, client):
        earned = await client.post(f"{API}/treasure-boxes", json={"difficulty": "hard"})
        box = earned.json()["box"]
        assert box["id"].startswith("treasure_")
        assert box["is_opened"] is False

        listing = await client.get(f"{API}/treasure-boxes", params={"unopened_only": True})
        assert [b["id"] for b in listing.json()["boxes"]] == [box["id"]]

        opened = await client.post(f"{API}/treasure-boxes/{box['id']}/open")
        assert opened.json()["rewards"] == box["rewards"]

        again = await client.post(f"{API}/treasure-boxes/{box['id']}/open")
        assert again.status_code == 200
        assert again.json() == {"box_id": box["id"], "rewards": []}

    async def test_unknown_difficulty_accepted(self, client):
        response = await client.post(f"{API}/treasure-boxes", json={"difficulty": "brutal"})

        assert response.status_code == 200
        assert response.json()["box"] is not None

    async def test_open_unknown_box(self, client):
        response = await client.post(f"{API}/treasure-boxes/treasure_nope/open")

        assert response.status_code == 200
        assert response.json()["rewards"] == []


@pytest.mark.asyncio
class TestStatusEndpoints:

    async def test_combo_status(self, client, clock):
        for _ in range(3):
            clock.advance(1_000)
            await client.post(f"{API}/answers/correct", json={})

        response = await client.get(f"{API}/status/combo")

        assert response.json() == {"combo": 3, "multiplier": 1.2, "time_left_ms": 10_000}

    async def test_fever_status(self, client, clock):
        await client.post(f"{API}/test-events/fever_time_start")
        clock.advance(60_000)

        response = await client.get(f"{API}/status/fever")

        assert response.json() == {"active": True, "time_left_ms": 120_000}

    async def test_pressure_status(self, client):
        await client.post(f"{API}/answers/correct", json={})

        data = (await client.get(f"{API}/status/pressure")).json()

        assert data["current"] == 10
        assert data["percentage"] == 10.0
        assert data["can_burst"] is False
        assert data["burst_active"] is False

    async def test_snapshot_and_stats(self, client):
        await client.post(f"{API}/rewards/compute", json={"base_amount": 50})

        snapshot = (await client.get(f"{API}/snapshot")).json()
        stats = (await client.get(f"{API}/stats")).json()

        assert snapshot["enabled"] is True
        assert snapshot["stats"] == stats
        assert stats["rewards_computed"] == 1


@pytest.mark.asyncio
class TestAdministration:

    async def test_disable(self, client):
        response = await client.put(f"{API}/enabled", json={"enabled": False})
        assert response.json() == {"enabled": False}

        events = await client.post(f"{API}/answers/correct", json={"forced": True})
        assert events.json() == {"events": []}

        status = await client.get(f"{API}/status/combo")
        assert status.json()["combo"] == 1

        health = await client.get("/health")
        assert health.json()["enabled"] is False

    async def test_reset(self, client, composer):
        await client.post(f"{API}/answers/correct", json={"forced": True})

        response = await client.post(f"{API}/reset")

        assert response.json() == {"status": "reset"}
        assert composer.snapshot() == composer.default_system()

    async def test_test_event(self, client):
        response = await client.post(f"{API}/test-events/pressure_burst")

        assert [e["kind"] for e in response.json()["events"]] == ["pressure_burst"]

    async def test_unknown_test_event_kind(self, client):
        response = await client.post(f"{API}/test-events/earthquake")

        assert response.status_code == 422

    async def test_root(self, client):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"


@pytest.mark.asyncio
class TestBlockingPersistence:

    async def test_slow_save_keeps_event_loop_responsive(self, make_composer):
        store = SlowStore()
        app = create_app(composer=make_composer(store=store))

        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test"
        ) as client:
            request = asyncio.create_task(client.post(f"{API}/answers/incorrect"))

            assert await asyncio.to_thread(store.saving.wait, 2.0)
            await asyncio.sleep(0.05)
            # the save is still pending, yet the loop keeps running
            assert not request.done()

            store.release.set()
            response = await request

        assert response.status_code == 200
        assert "test-adrenaline" in store.blobs
