"""End-to-end tests for the content, engagement and stats routes."""

from datetime import datetime

VISITOR_A = {"X-Forwarded-For": "203.0.113.5, 10.0.0.1", "User-Agent": "UA-X", "CF-IPCountry": "NL"}
VISITOR_B = {"X-Forwarded-For": "203.0.113.9", "User-Agent": "UA-Y"}


def create_post(client, title="Hello"):
    response = client.post("/posts", json={"title": title, "content": "Body", "author": "alice"})
    assert response.status_code == 201
    return response.json()["id"]


class TestPostRoutes:

    def test_list_envelope(self, client):
        for i in range(3):
            create_post(client, f"Post {i}")

        data = client.get("/posts", params={"limit": 2}).json()

        assert data["total"] == 3
        assert data["limit"] == 2
        assert data["offset"] == 0
        assert len(data["items"]) == 2

    def test_search(self, client):
        create_post(client, "Gardening")
        create_post(client, "Cycling")

        data = client.get("/posts", params={"q": "garden"}).json()

        assert data["total"] == 1
        assert data["items"][0]["title"] == "Gardening"

    def test_detail_counts_view_and_logs_statistic(self, client):
        post_id = create_post(client)

        first = client.get(f"/posts/{post_id}", headers=VISITOR_A).json()
        second = client.get(f"/posts/{post_id}", headers=VISITOR_A).json()

        assert first["view_count"] == 1
        assert second["view_count"] == 2
        assert second["liked"] is False
        assert second["shared"] is False
        assert second["comment_count"] == 0

        events = client.get(f"/stats/entity/post/{post_id}").json()
        assert [e["action"] for e in events] == ["post_view", "post_view"]
        assert events[0]["ip_address"] == "203.0.113.5"
        assert events[0]["country"] == "NL"

    def test_oversized_client_headers_are_clipped(self, client):
        post_id = create_post(client)
        headers = {
            "X-Forwarded-For": "198.51.100.1-" + "x" * 60,
            "User-Agent": "UA-X",
            "X-Geo-City": "C" * 150,
            "CF-IPCountry": "N" * 150,
        }

        assert client.get(f"/posts/{post_id}", headers=headers).status_code == 200
        assert client.post(f"/posts/{post_id}/like", headers=headers).json()["liked"] is True

        events = client.get(f"/stats/entity/post/{post_id}").json()
        assert {e["action"] for e in events} == {"post_view", "post_like"}
        for event in events:
            assert len(event["ip_address"]) == 45
            assert len(event["city"]) == 100
            assert len(event["country"]) == 100

    def test_missing_post(self, client):
        assert client.get("/posts/999").status_code == 404
        assert client.put("/posts/999", json={"title": "x"}).status_code == 404
        assert client.delete("/posts/999").status_code == 404

    def test_update_and_delete(self, client):
        post_id = create_post(client)

        assert client.put(f"/posts/{post_id}", json={"title": "Renamed"}).json() == {"updated": True}
        assert client.get(f"/posts/{post_id}").json()["title"] == "Renamed"
        assert client.delete(f"/posts/{post_id}").json() == {"deleted": True}
        assert client.get(f"/posts/{post_id}").status_code == 404

    def test_validation(self, client):
        response = client.post("/posts", json={"title": "", "content": "Body", "author": "alice"})
        assert response.status_code == 422


class TestEngagementRoutes:

    def test_like_toggle_per_visitor(self, client):
        post_id = create_post(client)

        assert client.post(f"/posts/{post_id}/like", headers=VISITOR_A).json() == {"liked": True, "action": "liked"}
        assert client.get(f"/posts/{post_id}/like", headers=VISITOR_A).json() == {"liked": True}
        assert client.get(f"/posts/{post_id}/like", headers=VISITOR_B).json() == {"liked": False}

        detail = client.get(f"/posts/{post_id}", headers=VISITOR_A).json()
        assert detail["like_count"] == 1
        assert detail["liked"] is True

        assert client.post(f"/posts/{post_id}/like", headers=VISITOR_A).json() == {"liked": False, "action": "unliked"}
        assert client.get(f"/posts/{post_id}", headers=VISITOR_B).json()["like_count"] == 0

    def test_like_logs_statistic_only_when_liked(self, client):
        post_id = create_post(client)

        client.post(f"/posts/{post_id}/like", headers=VISITOR_A)
        client.post(f"/posts/{post_id}/like", headers=VISITOR_A)

        events = client.get(f"/stats/entity/post/{post_id}", params={"action": "post_like"}).json()
        assert len(events) == 1

    def test_comment_share(self, client):
        post_id = create_post(client)
        comment_id = client.post(
            "/comments", json={"post_id": post_id, "author": "bob", "content": "Nice"}
        ).json()["id"]

        response = client.post(f"/comments/{comment_id}/share", headers=VISITOR_B)

        assert response.json() == {"shared": True, "action": "shared"}
        assert client.get(f"/comments/{comment_id}/share", headers=VISITOR_B).json() == {"shared": True}
        assert client.get(f"/comments/{comment_id}").json()["shared_count"] == 1

    def test_external_share_is_not_deduplicated(self, client):
        video_id = client.post(
            "/videos", json={"title": "Clip", "url": "https://example.com/v/1", "author": "dave"}
        ).json()["id"]

        for _ in range(3):
            assert client.post(f"/videos/{video_id}/share/external").json() == {"counted": True}

        detail = client.get(f"/videos/{video_id}", headers=VISITOR_A).json()
        assert detail["shared_count"] == 3
        assert detail["shared"] is False

    def test_missing_content(self, client):
        assert client.post("/articles/42/like", headers=VISITOR_A).status_code == 404
        assert client.post("/videos/42/share/external").status_code == 404

    def test_events_are_not_engageable(self, client):
        event_id = client.post(
            "/events", json={"title": "Meetup", "event_date": datetime(2030, 1, 1).isoformat()}
        ).json()["id"]

        assert client.post(f"/events/{event_id}/like", headers=VISITOR_A).status_code in (404, 405)


class TestCommentRoutes:

    def test_comment_on_missing_post(self, client):
        response = client.post("/comments", json={"post_id": 999, "author": "bob", "content": "Hi"})
        assert response.status_code == 404

    def test_comments_for_post(self, client):
        post_id = create_post(client)
        for text in ("One", "Two"):
            client.post("/comments", json={"post_id": post_id, "author": "bob", "content": text})

        comments = client.get(f"/comments/post/{post_id}").json()

        assert [c["content"] for c in comments] == ["One", "Two"]
        assert client.get(f"/posts/{post_id}").json()["comment_count"] == 2


class TestStatsRoutes:

    def test_top_content(self, client):
        popular = create_post(client, "Popular")
        quiet = create_post(client, "Quiet")
        for headers in (VISITOR_A, VISITOR_A, VISITOR_B):
            client.get(f"/posts/{popular}", headers=headers)
        client.get(f"/posts/{quiet}", headers=VISITOR_B)

        rows = client.get("/stats/top/post", params={"action": "view"}).json()

        assert rows == [
            {"entity_id": popular, "total_count": 3, "unique_count": 2},
            {"entity_id": quiet, "total_count": 1, "unique_count": 1},
        ]

    def test_daily_and_geo(self, client):
        post_id = create_post(client)
        client.get(f"/posts/{post_id}", headers=VISITOR_A)
        client.get(f"/posts/{post_id}", headers=VISITOR_B)

        daily = client.get("/stats/daily", params={"entity_type": "post"}).json()
        geo = client.get("/stats/geo").json()

        assert daily[0]["action"] == "post_view"
        assert daily[0]["count"] == 2
        assert daily[0]["unique_users"] == 2
        assert geo == [{"country": "NL", "city": None, "count": 1, "unique_users": 1}]

    def test_cleanup(self, client):
        post_id = create_post(client)
        client.get(f"/posts/{post_id}")

        response = client.delete("/stats/cleanup", params={"days_to_keep": 30})

        assert response.json() == {"deleted": 0, "days_to_keep": 30}
        assert len(client.get(f"/stats/entity/post/{post_id}").json()) == 1
