"""
HTTP surface tests: the FastAPI app over a studio whose hosted backend is an
httpx.MockTransport.
"""

import base64
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import make_image

REPLY = "Tile works best here; check with an engineer first."


def _provider(request: httpx.Request) -> httpx.Response:
    body = json.loads(request.content)
    if body["stream"]:
        words = REPLY.split(" ")
        pieces = [w + " " for w in words[:-1]] + [words[-1]]
        sse = "".join(
            f"data: {json.dumps({'choices': [{'delta': {'content': p}}]})}\n\n" for p in pieces
        )
        return httpx.Response(200, text=sse + "data: [DONE]\n\n")
    return httpx.Response(200, json={"choices": [{"message": {"content": REPLY}}]})


def _profile(backend_type="openai"):
    from profile_config import load_profile_from_dict

    return load_profile_from_dict({
        "gateway": {"min_interval_seconds": 0},
        "inference": {"backends": [{
            "name": "openrouter",
            "type": backend_type,
            "endpoint": "https://openrouter.test/api",
            "api_key_env": "",
        }]},
    })


def _client(backend_type="openai"):
    from core import RemodelStudio
    from main import create_app

    app = create_app(lambda: RemodelStudio(_profile(backend_type),
                                           transport=httpx.MockTransport(_provider)))
    return TestClient(app)


def _image_payload(image):
    return {
        "data_base64": base64.b64encode(image.data).decode(),
        "width": image.width,
        "height": image.height,
        "channels": image.channels,
    }


LIVING_ROOM = make_image(300, 400, rects=(
    (250, 20, 270, 380, 50), (60, 40, 120, 120, 50), (60, 160, 120, 240, 50), (100, 280, 220, 340, 50),
))


@pytest.fixture
def client():
    with _client() as c:
        yield c


class TestHealthAndAgents:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["ready"] is True
        assert data["backends"] == ["openrouter"]

    def test_agents_list_routes(self, client):
        agents = client.get("/api/agents").json()["agents"]
        assert {a["role"] for a in agents} == {
            "coordinator", "vision", "design", "structural", "project-manager",
        }
        structural = next(a for a in agents if a["role"] == "structural")
        assert structural["route"]["provider"] == "openrouter"
        assert structural["history_size"] == 1

    def test_not_ready_returns_503(self):
        with _client(backend_type="bogus") as c:
            assert c.get("/health").json()["ready"] is False
            assert c.get("/api/agents").status_code == 503
            assert c.post("/api/chat", json={"message": "hi"}).status_code == 503


class TestChat:

    def test_whole_result(self, client):
        resp = client.post("/api/chat", json={"message": "remove the wall", "stream": False})
        assert resp.status_code == 200
        data = resp.json()
        assert data["primary"] == "structural"
        assert data["roles"] == ["structural", "coordinator"]
        assert data["degraded_roles"] == []
        assert data["merged_text"].startswith(f"**Structural Engineer:**\n{REPLY}")

    def test_ndjson_stream(self, client):
        resp = client.post("/api/chat", json={"message": "remove the wall"})
        assert resp.status_code == 200
        lines = [json.loads(line) for line in resp.text.splitlines() if line]

        assert lines[-1]["type"] == "result"
        chunks = [line for line in lines if line["type"] == "chunk"]
        assert chunks[0]["role"] == "structural"
        structural_text = "".join(c["text"] for c in chunks if c["role"] == "structural")
        assert structural_text == REPLY
        assert lines[-1]["data"]["primary"] == "structural"

    def test_image_brings_in_vision(self, client):
        resp = client.post("/api/chat", json={
            "message": "what do you think of this room?",
            "image": _image_payload(LIVING_ROOM),
            "stream": False,
        })
        assert resp.status_code == 200
        assert resp.json()["primary"] == "vision"

    def test_requested_role(self, client):
        resp = client.post("/api/chat", json={"message": "hello", "role": "project_manager",
                                              "stream": False})
        assert resp.json()["primary"] == "project-manager"

    def test_unknown_role_is_404(self, client):
        resp = client.post("/api/chat", json={"message": "hello", "role": "plumber"})
        assert resp.status_code == 404

    def test_empty_message_is_422(self, client):
        assert client.post("/api/chat", json={"message": ""}).status_code == 422

    def test_bad_base64_is_422(self, client):
        resp = client.post("/api/chat", json={
            "message": "look",
            "image": {"data_base64": "***", "width": 2, "height": 2},
        })
        assert resp.status_code == 422


class TestConversations:

    def test_history_then_clear(self, client):
        client.post("/api/chat", json={"message": "remove the wall", "stream": False})

        messages = client.get("/api/conversations/structural").json()["messages"]
        assert [m["role"] for m in messages] == ["system", "user", "assistant"]
        assert messages[1]["content"] == "remove the wall"

        assert client.delete("/api/conversations/structural").json()["status"] == "cleared"
        assert len(client.get("/api/conversations/structural").json()["messages"]) == 1

    def test_unknown_role(self, client):
        assert client.get("/api/conversations/plumber").status_code == 404


class TestIntentsAndGuidance:

    def test_intent(self, client):
        data = client.post("/api/intent", json={"utterance": "remove the wall"}).json()
        assert data["intent"]["command"] == "remove_wall"
        assert data["intent"]["confidence"] >= 0.7

    def test_no_intent(self, client):
        assert client.post("/api/intent", json={"utterance": "hmm"}).json() == {"intent": None}

    def test_guidance(self, client):
        data = client.get("/api/guidance/photo_taken").json()
        assert data["prompt"].startswith("Great photo!")


class TestVision:

    def test_analyze(self, client):
        resp = client.post("/api/vision/analyze", json=_image_payload(LIVING_ROOM))
        assert resp.status_code == 200
        data = resp.json()
        assert data["room_type"] == "living_room"
        assert data["is_fallback"] is False

    def test_oversized_image_is_422(self, client):
        from config import MAX_IMAGE_SIDE

        resp = client.post("/api/vision/analyze", json={
            "data_base64": "AAAA", "width": MAX_IMAGE_SIDE + 1, "height": 2,
        })
        assert resp.status_code == 422

    def test_modifications_need_an_analysis(self, client):
        body = {"modifications": [{"type": "remove_wall", "target_index": 0}]}
        assert client.post("/api/vision/modifications", json=body).status_code == 409

        client.post("/api/vision/analyze", json=_image_payload(LIVING_ROOM))
        plan = client.post("/api/vision/modifications", json=body).json()
        assert plan["warnings"] == ["Removing wall without structural analysis - consult engineer"]


class TestDecisions:

    def test_deliberation(self, client):
        resp = client.post("/api/decisions", json={
            "question": "Which flooring?",
            "options": ["tile", "hardwood"],
            "roles": ["structural", "design"],
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["resolved"] == "tile"
        assert len(data["votes"]) == 2

    def test_duplicate_options_rejected(self, client):
        resp = client.post("/api/decisions", json={
            "question": "Which flooring?",
            "options": ["tile", "tile"],
            "roles": ["design"],
        })
        assert resp.status_code == 422

    def test_unknown_role(self, client):
        resp = client.post("/api/decisions", json={
            "question": "q", "options": ["a"], "roles": ["plumber"],
        })
        assert resp.status_code == 404
