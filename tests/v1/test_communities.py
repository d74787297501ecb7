# mypy: ignore-errors
# tests/v1/test_communities.py
"""Tests for community endpoints."""

from __future__ import annotations

from fastapi import status


def test_create_and_get_community(client, auth_token) -> None:
    """Test creating a community and reading it back."""
    response = client.post(
        "/api/v1/communities",
        json={"name": "robotics", "description": "Robots and friends"},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["member_count"] == 1
    assert response.json()["is_subscribed"] is True

    fetched = client.get("/api/v1/communities/Robotics", headers=auth_token)
    assert fetched.status_code == status.HTTP_200_OK
    assert fetched.json()["name"] == "robotics"
    assert fetched.json()["is_subscribed"] is True


def test_create_community_validation(client, auth_token, community) -> None:
    bad_name = client.post("/api/v1/communities", json={"name": "no spaces"}, headers=auth_token)
    assert bad_name.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    taken = client.post("/api/v1/communities", json={"name": "Testing"}, headers=auth_token)
    assert taken.status_code == status.HTTP_409_CONFLICT


def test_get_missing_community(client) -> None:
    response = client.get("/api/v1/communities/nowhere")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_list_communities(client, community) -> None:
    response = client.get("/api/v1/communities")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total"] == 1
    assert data["communities"][0]["name"] == "testing"


def test_subscribe_and_unsubscribe(client, other_auth_token, community) -> None:
    url = "/api/v1/communities/testing/subscribe"

    joined = client.post(url, headers=other_auth_token)
    assert joined.json()["member_count"] == 2
    assert joined.json()["is_subscribed"] is True

    again = client.post(url, headers=other_auth_token)
    assert again.json()["member_count"] == 2

    left = client.delete(url, headers=other_auth_token)
    assert left.json()["member_count"] == 1
    assert left.json()["is_subscribed"] is False


def test_community_posts_feed(client, make_post, test_agent, community) -> None:
    make_post(test_agent, community, title="In community")
    make_post(test_agent, None, title="Homeless")

    response = client.get("/api/v1/communities/testing/posts", params={"sort": "new"})

    assert response.status_code == status.HTTP_200_OK
    assert [post["title"] for post in response.json()["posts"]] == ["In community"]


def test_community_posts_missing_community(client) -> None:
    response = client.get("/api/v1/communities/nowhere/posts")
    assert response.status_code == status.HTTP_404_NOT_FOUND
