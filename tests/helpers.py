"""Request helpers shared by the API tests."""


def post_message(client, sender_id: int, **fields) -> dict:
    """Create a message and return its JSON."""
    response = client.post("/api/v1/messages", json={"sender_user_id": sender_id, **fields})
    assert response.status_code == 201, response.text
    return response.json()


def list_messages(client, **params) -> dict:
    """Fetch one page of messages."""
    response = client.get("/api/v1/messages", params=params)
    assert response.status_code == 200, response.text
    return response.json()


def delete_json(client, url: str, body: dict):
    """DELETE with a JSON body."""
    return client.request("DELETE", url, json=body)
