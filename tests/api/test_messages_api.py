from __future__ import annotations

from chatstore.db import StoreError, UnstorableValue


def _thread(client) -> str:
    return client.post("/api/threads").get_json()["id"]


def test_save_and_list_messages(client):
    thread_id = _thread(client)
    first = client.post(
        f"/api/threads/{thread_id}/messages", json={"role": "user", "content": "hi"}
    )
    second = client.post(
        f"/api/threads/{thread_id}/messages", json={"role": "assistant", "content": "hello"}
    )
    assert first.status_code == 201
    assert second.status_code == 201
    second_payload = second.get_json()
    assert second_payload["threadId"] == thread_id
    assert "toolInvocations" not in second_payload

    messages = client.get(f"/api/threads/{thread_id}/messages").get_json()["messages"]
    assert [(m["role"], m["content"]) for m in messages] == [
        ("user", "hi"),
        ("assistant", "hello"),
    ]
    assert all(m["id"] and m["createdAt"] for m in messages)

    threads = client.get("/api/threads").get_json()["threads"]
    assert threads[0]["updatedAt"] == second_payload["createdAt"]


def test_tool_invocations_round_trip(client):
    thread_id = _thread(client)
    invocations = [{"toolCallId": "call_1", "toolName": "fetch", "args": {"url": "https://x"}}]
    saved = client.post(
        f"/api/threads/{thread_id}/messages",
        json={"role": "assistant", "content": "", "toolInvocations": invocations},
    ).get_json()
    assert saved["toolInvocations"] == invocations
    messages = client.get(f"/api/threads/{thread_id}/messages").get_json()["messages"]
    assert messages[0]["toolInvocations"] == invocations


def test_save_to_unknown_thread_conflicts(client):
    response = client.post(
        "/api/threads/missing/messages", json={"role": "user", "content": "orphan"}
    )
    assert response.status_code == 409
    assert "FOREIGN KEY" in response.get_json()["error"]
    assert client.get("/api/threads/missing/messages").get_json()["messages"] == []


def test_save_requires_role_and_content(client):
    thread_id = _thread(client)
    response = client.post(f"/api/threads/{thread_id}/messages", json={"content": "x"})
    assert response.status_code == 400
    response = client.post(
        f"/api/threads/{thread_id}/messages", json={"role": "  ", "content": "x"}
    )
    assert response.status_code == 400


def test_delete_message(client):
    thread_id = _thread(client)
    saved = client.post(
        f"/api/threads/{thread_id}/messages", json={"role": "user", "content": "bye"}
    ).get_json()
    assert client.delete(f"/api/messages/{saved['id']}").status_code == 200
    assert client.delete("/api/messages/missing").status_code == 200
    assert client.get(f"/api/threads/{thread_id}/messages").get_json()["messages"] == []


def test_store_failure_flattened_to_error_string(app, client, monkeypatch):
    state_db = app.config["CHAT_STATE_DB"]

    def _fail(thread_id):
        raise StoreError("disk I/O error")

    monkeypatch.setattr(state_db, "list_messages", _fail)
    response = client.get("/api/threads/abc/messages")
    assert response.status_code == 500
    assert response.get_json() == {"error": "disk I/O error"}


def test_unencodable_content_returns_json_error(client):
    thread_id = _thread(client)
    response = client.post(
        f"/api/threads/{thread_id}/messages",
        data='{"role": "user", "content": "\\ud800"}',
        content_type="application/json",
    )
    assert response.status_code == 400
    assert response.is_json
    assert response.get_json()["error"]
    assert client.get(f"/api/threads/{thread_id}/messages").get_json()["messages"] == []


def test_unstorable_value_from_store_is_json_400(app, client, monkeypatch):
    state_db = app.config["CHAT_STATE_DB"]
    thread_id = _thread(client)

    def _fail(thread_id, message):
        raise UnstorableValue("Object of type set is not JSON serializable")

    monkeypatch.setattr(state_db, "save_message", _fail)
    response = client.post(
        f"/api/threads/{thread_id}/messages", json={"role": "user", "content": "x"}
    )
    assert response.status_code == 400
    assert response.get_json() == {"error": "Object of type set is not JSON serializable"}
