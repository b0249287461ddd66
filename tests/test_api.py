"""
Tests for the HTTP API.
"""

import pytest
from fastapi.testclient import TestClient

from ai_agent_framework.api import create_app
from ai_agent_framework.config import Settings
from ai_agent_framework.exceptions import ProviderError
from ai_agent_framework.store import InMemoryAgentStore

TEMPLATE = {
    "name": "Librarian",
    "persona": {
        "traits": ["helpful", "precise"],
        "backstory": "Has read everything.",
        "instructions": "Cite your sources.",
    },
    "aiEngine": {"provider": "openai", "model": "gpt-4o", "parameters": {"temperature": 0.5}},
    "experienceSettings": {
        "memoryType": "conversation",
        "retentionPeriod": "7_days",
        "summarizationEnabled": True,
    },
}


@pytest.fixture
def llm(make_llm):
    return make_llm(complete="Here is your answer.")


@pytest.fixture
def client(llm):
    app = create_app(
        settings=Settings(_env_file=None, store_backend="memory"),
        store=InMemoryAgentStore(),
        llm_factory=lambda provider: llm,
    )
    with TestClient(app) as test_client:
        yield test_client


def _create_agent(client) -> dict:
    template = client.post("/api/templates", json=TEMPLATE).json()
    response = client.post("/api/agents", json={"name": "Ada", "templateId": template["id"]})
    assert response.status_code == 201
    return response.json()


def test_health(client):
    """Test the health endpoint reports the store backend."""
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["store"] == "memory"


def test_template_crud(client):
    """Test creating, updating, listing and deleting templates."""
    created = client.post("/api/templates", json=TEMPLATE)
    assert created.status_code == 201
    template = created.json()
    assert template["experienceSettings"]["memoryType"] == "conversation"
    assert template["aiEngine"]["parameters"]["temperature"] == 0.5

    updated = client.put(f"/api/templates/{template['id']}", json={"name": "Archivist"})
    assert updated.status_code == 200
    assert updated.json()["name"] == "Archivist"
    assert updated.json()["persona"]["traits"] == ["helpful", "precise"]

    assert [t["id"] for t in client.get("/api/templates").json()] == [template["id"]]

    assert client.delete(f"/api/templates/{template['id']}").status_code == 204
    assert client.get(f"/api/templates/{template['id']}").status_code == 404


def test_template_validation_error(client):
    """Test that an invalid template body returns 400."""
    response = client.post("/api/templates", json={"name": ""})

    assert response.status_code == 400
    assert response.json()["message"] == "Validation error"
    assert response.json()["errors"]


def test_create_agent_starts_idle(client):
    """Test that new agents start idle."""
    agent = _create_agent(client)

    assert agent["status"] == "idle"
    assert agent["name"] == "Ada"


def test_create_agent_with_unknown_template(client):
    """Test that an unknown template id returns 404."""
    response = client.post("/api/agents", json={"name": "Ada", "templateId": 123})
    assert response.status_code == 404


def test_process_message(client, llm):
    """Test a chat turn returns the reply and persists the exchange."""
    agent = _create_agent(client)

    response = client.post(f"/api/agents/{agent['id']}/process", json={"message": "Hello!"})

    assert response.status_code == 200
    assert response.json() == {"response": "Here is your answer.", "status": "idle"}

    stored = client.get(f"/api/agents/{agent['id']}").json()
    messages = stored["conversationHistory"]["messages"]
    assert [(m["role"], m["content"]) for m in messages] == [
        ("user", "Hello!"),
        ("assistant", "Here is your answer."),
    ]
    assert stored["experienceSummary"]["interactions"] == 2


def test_process_message_requires_text(client):
    """Test that an empty message is rejected."""
    agent = _create_agent(client)

    response = client.post(f"/api/agents/{agent['id']}/process", json={"message": ""})

    assert response.status_code == 400


def test_process_unknown_agent(client):
    """Test chatting with a missing agent returns 404."""
    response = client.post("/api/agents/999/process", json={"message": "hi"})
    assert response.status_code == 404


def test_process_agent_without_template(client):
    """Test chatting with an agent that has no template returns 400."""
    agent = client.post("/api/agents", json={"name": "Loose"}).json()

    response = client.post(f"/api/agents/{agent['id']}/process", json={"message": "hi"})

    assert response.status_code == 400


def test_provider_failure(client, llm):
    """Test a provider failure returns 502 and keeps the user message."""
    llm.complete.side_effect = ProviderError("rate limited", provider="openai")
    agent = _create_agent(client)

    response = client.post(f"/api/agents/{agent['id']}/process", json={"message": "hi"})

    assert response.status_code == 502
    assert response.json()["status"] == "error"
    assert response.json()["provider"] == "openai"

    stored = client.get(f"/api/agents/{agent['id']}").json()
    assert stored["status"] == "error"
    assert len(stored["conversationHistory"]["messages"]) == 1


def test_reset_agent(client):
    """Test resetting an agent clears its state."""
    agent = _create_agent(client)
    client.post(f"/api/agents/{agent['id']}/process", json={"message": "hi"})

    response = client.post(f"/api/agents/{agent['id']}/reset")

    assert response.status_code == 200
    assert response.json()["conversationHistory"]["messages"] == []
    assert response.json()["experienceSummary"]["interactions"] == 0


def test_delete_agent(client):
    """Test deleting an agent."""
    agent = _create_agent(client)

    assert client.delete(f"/api/agents/{agent['id']}").status_code == 204
    assert client.get(f"/api/agents/{agent['id']}").status_code == 404


def test_update_agent_rejects_active_status(client):
    """Test that clients cannot mark an agent as mid-turn."""
    agent = _create_agent(client)

    response = client.put(f"/api/agents/{agent['id']}", json={"status": "active"})

    assert response.status_code == 400
    assert client.get(f"/api/agents/{agent['id']}").json()["status"] == "idle"


def test_update_agent_rejects_malformed_history(client):
    """Test that a malformed history is refused and the agent keeps working."""
    agent = _create_agent(client)

    response = client.put(
        f"/api/agents/{agent['id']}",
        json={"conversationHistory": {"messages": [{"role": "bot"}]}},
    )
    assert response.status_code == 400

    reply = client.post(f"/api/agents/{agent['id']}/process", json={"message": "hi"})
    assert reply.status_code == 200


def test_update_agent_accepts_valid_state(client):
    """Test that a well-formed state update is stored in camelCase form."""
    agent = _create_agent(client)

    response = client.put(
        f"/api/agents/{agent['id']}",
        json={
            "status": "error",
            "experienceSummary": {"interactions": 1, "lastSummary": "greeted"},
            "conversationHistory": {
                "messages": [
                    {"role": "user", "content": "hi", "timestamp": "2024-01-01T00:00:00Z"},
                ],
            },
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "error"
    assert body["experienceSummary"]["lastSummary"] == "greeted"
    assert body["conversationHistory"]["messages"][0]["content"] == "hi"


def test_template_role_is_kept(client):
    """Test that the template role round-trips through the API."""
    created = client.post("/api/templates", json={**TEMPLATE, "role": "Reference librarian"})

    assert created.status_code == 201
    fetched = client.get(f"/api/templates/{created.json()['id']}").json()
    assert fetched["role"] == "Reference librarian"
