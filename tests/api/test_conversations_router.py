from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from prelude.api.deps import get_chat_service
from prelude.api.routers.conversations import router as conversations_router
from prelude.core.events import ChatRole
from prelude.core.exceptions import ConversationNotFoundError, SessionNotFoundError


@pytest.fixture
def app():
    app = FastAPI()
    app.include_router(conversations_router)
    return app


@pytest.fixture
def mock_chat_service():
    return AsyncMock()


@pytest.fixture
def client(app, mock_chat_service):
    app.dependency_overrides[get_chat_service] = lambda: mock_chat_service
    return TestClient(app)


def conversation_dict(conversation_id, session_id, title="New Conversation"):
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    return {
        "id": conversation_id,
        "session_id": session_id,
        "title": title,
        "created_at": now,
        "updated_at": now,
    }


def test_create_conversation(client, mock_chat_service):
    conversation_id, session_id = uuid4(), uuid4()
    mock_chat_service.create_conversation.return_value = conversation_dict(
        conversation_id, session_id, "Outline"
    )

    response = client.post(
        "/conversations", json={"sessionId": str(session_id), "title": "Outline"}
    )

    assert response.status_code == 201
    assert response.json()["title"] == "Outline"
    mock_chat_service.create_conversation.assert_called_once_with(session_id, title="Outline")


def test_create_conversation_session_not_found(client, mock_chat_service):
    session_id = uuid4()
    mock_chat_service.create_conversation.side_effect = SessionNotFoundError(session_id)

    response = client.post("/conversations", json={"sessionId": str(session_id)})

    assert response.status_code == 404


def test_list_conversations(client, mock_chat_service):
    session_id = uuid4()
    mock_chat_service.list_conversations.return_value = [
        conversation_dict(uuid4(), session_id),
        conversation_dict(uuid4(), session_id, "Second"),
    ]

    response = client.get("/conversations", params={"sessionId": str(session_id)})

    assert response.status_code == 200
    titles = [c["title"] for c in response.json()["conversations"]]
    assert titles == ["New Conversation", "Second"]


def test_rename_conversation(client, mock_chat_service):
    conversation_id, session_id = uuid4(), uuid4()
    mock_chat_service.rename_conversation.return_value = conversation_dict(
        conversation_id, session_id, "Renamed"
    )

    response = client.patch(f"/conversations/{conversation_id}", json={"title": "Renamed"})

    assert response.status_code == 200
    assert response.json()["title"] == "Renamed"


def test_rename_conversation_empty_title(client, mock_chat_service):
    response = client.patch(f"/conversations/{uuid4()}", json={"title": ""})

    assert response.status_code == 422
    mock_chat_service.rename_conversation.assert_not_called()


def test_delete_conversation_not_found(client, mock_chat_service):
    conversation_id = uuid4()
    mock_chat_service.delete_conversation.side_effect = ConversationNotFoundError(conversation_id)

    response = client.delete(f"/conversations/{conversation_id}")

    assert response.status_code == 404


def test_append_message(client, mock_chat_service):
    conversation_id = uuid4()
    mock_chat_service.append_message.return_value = {
        "id": 3,
        "conversation_id": conversation_id,
        "role": ChatRole.ASSISTANT,
        "content": "Here is an outline.",
        "metadata": {"webSearch": False},
        "timestamp": 1_700_000_000_000,
        "sequence_number": 1,
    }

    response = client.post(
        f"/conversations/{conversation_id}/messages",
        json={"role": "assistant", "content": "Here is an outline.", "metadata": {"webSearch": False}},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["sequenceNumber"] == 1
    assert data["metadata"] == {"webSearch": False}
    mock_chat_service.append_message.assert_called_once_with(
        conversation_id,
        role=ChatRole.ASSISTANT,
        content="Here is an outline.",
        metadata={"webSearch": False},
    )


def test_append_message_unknown_role(client, mock_chat_service):
    response = client.post(
        f"/conversations/{uuid4()}/messages", json={"role": "system", "content": "x"}
    )

    assert response.status_code == 422


def test_list_messages(client, mock_chat_service):
    conversation_id = uuid4()
    mock_chat_service.list_messages.return_value = [
        {
            "id": n,
            "conversation_id": conversation_id,
            "role": ChatRole.USER,
            "content": f"message {n}",
            "metadata": None,
            "timestamp": 1_000 + n,
            "sequence_number": n,
        }
        for n in range(2)
    ]

    response = client.get(f"/conversations/{conversation_id}/messages")

    assert response.status_code == 200
    assert response.json()["total"] == 2
