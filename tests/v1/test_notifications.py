# mypy: ignore-errors
# tests/v1/test_notifications.py
"""Tests for notification inbox endpoints."""

from __future__ import annotations

import uuid

from fastapi import status


def _comment(client, post_id, headers, content="Interesting") -> None:
    response = client.post(
        f"/api/v1/posts/{post_id}/comments",
        json={"content": content},
        headers=headers,
    )
    assert response.status_code == status.HTTP_201_CREATED


def test_inbox_lists_comment_notification(client, auth_token, other_auth_token, test_post) -> None:
    _comment(client, test_post.id, other_auth_token)

    response = client.get("/api/v1/notifications", headers=auth_token)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert (data["total"], data["unread_count"]) == (1, 1)
    notification = data["notifications"][0]
    assert notification["kind"] == "comment"
    assert notification["actor"]["username"] == "other"
    assert notification["post_title"] == test_post.title
    assert notification["comment_content"] == "Interesting"
    assert notification["read"] is False


def test_count_and_mark_read(client, auth_token, other_auth_token, test_post) -> None:
    _comment(client, test_post.id, other_auth_token, "one")
    _comment(client, test_post.id, other_auth_token, "two")

    count = client.get("/api/v1/notifications/count", headers=auth_token)
    assert count.json() == {"unread_count": 2}

    first_id = client.get("/api/v1/notifications", headers=auth_token).json()["notifications"][0]["id"]
    marked = client.patch(f"/api/v1/notifications/{first_id}/read", headers=auth_token)
    assert marked.status_code == status.HTTP_200_OK

    unread = client.get("/api/v1/notifications", params={"unread_only": True}, headers=auth_token)
    assert first_id not in [n["id"] for n in unread.json()["notifications"]]
    assert unread.json()["total"] == 1

    all_read = client.patch("/api/v1/notifications/read-all", headers=auth_token)
    assert all_read.status_code == status.HTTP_200_OK
    assert client.get("/api/v1/notifications/count", headers=auth_token).json()["unread_count"] == 0


def test_other_agents_cannot_touch_notifications(
    client, auth_token, other_auth_token, test_post
) -> None:
    _comment(client, test_post.id, other_auth_token)
    notification_id = client.get("/api/v1/notifications", headers=auth_token).json()[
        "notifications"
    ][0]["id"]

    read = client.patch(f"/api/v1/notifications/{notification_id}/read", headers=other_auth_token)
    assert read.status_code == status.HTTP_404_NOT_FOUND

    deleted = client.delete(f"/api/v1/notifications/{notification_id}", headers=other_auth_token)
    assert deleted.status_code == status.HTTP_404_NOT_FOUND

    missing = client.delete(f"/api/v1/notifications/{uuid.uuid4()}", headers=auth_token)
    assert missing.status_code == status.HTTP_404_NOT_FOUND


def test_delete_and_clear(client, auth_token, other_auth_token, test_post) -> None:
    for content in ("a", "b", "c"):
        _comment(client, test_post.id, other_auth_token, content)
    notifications = client.get("/api/v1/notifications", headers=auth_token).json()["notifications"]

    deleted = client.delete(f"/api/v1/notifications/{notifications[0]['id']}", headers=auth_token)
    assert deleted.status_code == status.HTTP_200_OK
    assert client.get("/api/v1/notifications", headers=auth_token).json()["total"] == 2

    cleared = client.delete("/api/v1/notifications", headers=auth_token)
    assert cleared.status_code == status.HTTP_200_OK
    assert cleared.json()["message"] == "Deleted 2 notifications"
    assert client.get("/api/v1/notifications", headers=auth_token).json()["total"] == 0


def test_notifications_require_auth(client) -> None:
    response = client.get("/api/v1/notifications")
    assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)
