"""HTTP surface for conversations and the streamed chat turn."""
from uuid import uuid4

from sqlmodel import Session, select

from app.models import Message
from conftest import end_event, parse_sse, text_event


def create_conversation(client, headers, title="Trip planning"):
    response = client.post("/chat/conversation", json={"title": title}, headers=headers)
    assert response.status_code == 201
    return response.json()["id"]


def test_end_to_end_turn(client, register_and_login, cohere_client):
    headers, _ = register_and_login()
    conversation_id = create_conversation(client, headers)

    response = client.post("/chat/stream", json={
        "conversationId": conversation_id, "message": "Suggest a 3-day itinerary",
    }, headers=headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    frames = parse_sse(response.text)
    assert frames[-1] == {"done": True}
    fragments = [frame["content"] for frame in frames[:-1]]
    assert fragments == ["Day 1: ", "Lisbon. ", "Day 2: Sintra."]

    response = client.get(f"/chat/conversation/{conversation_id}", headers=headers)
    assert response.status_code == 200
    messages = response.json()["messages"]
    assert [m["role"] for m in messages] == ["user", "assistant"]
    assert messages[0]["content"] == "Suggest a 3-day itinerary"
    assert messages[1]["content"] == "".join(fragments)

    assert cohere_client.calls[0]["message"] == "Suggest a 3-day itinerary"
    assert cohere_client.calls[0]["chat_history"] == []


def test_second_turn_sends_prior_dialogue_as_history(client, register_and_login, cohere_client):
    headers, _ = register_and_login()
    conversation_id = create_conversation(client, headers)

    client.post("/chat/stream", json={"conversationId": conversation_id, "message": "Hi"}, headers=headers)
    client.post("/chat/stream", json={"conversationId": conversation_id, "message": "More please"}, headers=headers)

    second_call = cohere_client.calls[1]
    assert second_call["message"] == "More please"
    assert second_call["chat_history"] == [
        {"role": "USER", "message": "Hi"},
        {"role": "CHATBOT", "message": "Day 1: Lisbon. Day 2: Sintra."},
    ]


def test_provider_failure_sends_error_frame_and_keeps_user_message(client, register_and_login, cohere_client):
    headers, _ = register_and_login()
    conversation_id = create_conversation(client, headers)
    cohere_client.events = [text_event("Day 1")]
    cohere_client.error = RuntimeError("rate limit exceeded")

    response = client.post("/chat/stream", json={
        "conversationId": conversation_id, "message": "Plan it",
    }, headers=headers)

    assert response.status_code == 200
    frames = parse_sse(response.text)
    assert frames[0] == {"content": "Day 1"}
    assert "rate limit exceeded" in frames[-1]["error"]
    assert {"done": True} not in frames

    messages = client.get(f"/chat/conversation/{conversation_id}", headers=headers).json()["messages"]
    assert [m["role"] for m in messages] == ["user"]


def test_error_finish_reason_sends_error_frame(client, register_and_login, cohere_client):
    headers, _ = register_and_login()
    conversation_id = create_conversation(client, headers)
    cohere_client.events = [text_event("Hmm"), end_event("ERROR")]

    frames = parse_sse(client.post("/chat/stream", json={
        "conversationId": conversation_id, "message": "Plan it",
    }, headers=headers).text)

    assert "error" in frames[-1]


def test_stream_without_conversation_id_is_400(client, register_and_login):
    headers, _ = register_and_login()

    response = client.post("/chat/stream", json={"message": "Hello"}, headers=headers)

    assert response.status_code == 400
    assert response.json()["message"] == "conversationId is required"


def test_stream_requires_auth(client):
    response = client.post("/chat/stream", json={"conversationId": str(uuid4()), "message": "Hi"})
    assert response.status_code == 401


def test_other_users_conversation_is_invisible(client, register_and_login, engine):
    alice, _ = register_and_login("alice@example.com")
    bob, _ = register_and_login("bob@example.com")
    conversation_id = create_conversation(client, alice, "Alice only")

    assert client.get(f"/chat/conversation/{conversation_id}", headers=bob).status_code == 404
    assert client.delete(f"/chat/conversation/{conversation_id}", headers=bob).status_code == 404
    response = client.post("/chat/stream", json={
        "conversationId": conversation_id, "message": "sneaky",
    }, headers=bob)
    assert response.status_code == 404
    assert response.json()["message"] == "Conversation not found"

    assert client.get("/chat/conversations", headers=bob).json() == []
    with Session(engine) as session:
        assert session.exec(select(Message)).all() == []


def test_missing_and_malformed_ids_are_404(client, register_and_login):
    headers, _ = register_and_login()

    assert client.get(f"/chat/conversation/{uuid4()}", headers=headers).status_code == 404
    assert client.get("/chat/conversation/not-a-uuid", headers=headers).status_code == 404
    assert client.delete("/chat/conversation/not-a-uuid", headers=headers).status_code == 404


def test_list_orders_by_latest_activity(client, register_and_login):
    headers, _ = register_and_login()
    first = create_conversation(client, headers, "First")
    create_conversation(client, headers, "Second")

    client.post("/chat/stream", json={"conversationId": first, "message": "Hi"}, headers=headers)

    listed = client.get("/chat/conversations", headers=headers).json()
    assert [c["title"] for c in listed] == ["First", "Second"]
    assert listed[0]["message_count"] == 2
    assert listed[0]["last_message"] == "Day 1: Lisbon. Day 2: Sintra."
    assert listed[1]["message_count"] == 0


def test_delete_cascades_to_messages(client, register_and_login, engine):
    headers, _ = register_and_login()
    conversation_id = create_conversation(client, headers)
    client.post("/chat/stream", json={"conversationId": conversation_id, "message": "Hi"}, headers=headers)

    response = client.delete(f"/chat/conversation/{conversation_id}", headers=headers)
    assert response.status_code == 200

    assert client.get(f"/chat/conversation/{conversation_id}", headers=headers).status_code == 404
    with Session(engine) as session:
        assert session.exec(select(Message)).all() == []


def test_blank_title_is_rejected(client, register_and_login):
    headers, _ = register_and_login()

    response = client.post("/chat/conversation", json={"title": ""}, headers=headers)

    assert response.status_code == 400
