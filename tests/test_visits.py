"""Test cases for the visit counter."""
from datetime import timedelta

from resort.models import VisitCounter, utcnow
from resort.visits.service import VisitService, visitor_hash

VISITS_URL = "/api/v1/visits"
BROWSER = "Mozilla/5.0 (X11; Linux x86_64)"


class TestVisitService:
    """Test counting and de-duplicating visits."""

    def test_first_visit_is_counted(self, db_session):
        result = VisitService(db_session).hit("site", "10.0.0.1", BROWSER)

        assert result.counted is True
        assert result.count == 1

    def test_repeat_visit_within_window_is_ignored(self, db_session):
        service = VisitService(db_session)
        service.hit("site", "10.0.0.1", BROWSER)

        result = service.hit("site", "10.0.0.1", BROWSER)

        assert result.counted is False
        assert db_session.get(VisitCounter, "site").count == 1

    def test_repeat_visit_after_window_is_counted(self, db_session):
        service = VisitService(db_session, dedup_window=timedelta(hours=24))
        start = utcnow()
        service.hit("site", "10.0.0.1", BROWSER, now=start)

        result = service.hit("site", "10.0.0.1", BROWSER, now=start + timedelta(hours=25))

        assert result.counted is True
        assert result.count == 2

    def test_different_visitors_are_counted(self, db_session):
        service = VisitService(db_session)
        service.hit("site", "10.0.0.1", BROWSER)
        service.hit("site", "10.0.0.2", BROWSER)

        result = service.hit("site", "10.0.0.1", "curl/8.0")

        assert result.count == 3

    def test_keys_are_counted_separately(self, db_session):
        service = VisitService(db_session)
        service.hit("site", "10.0.0.1", BROWSER)

        result = service.hit("gallery", "10.0.0.1", BROWSER)

        assert result.counted is True
        assert result.count == 1

    def test_stats(self, db_session):
        service = VisitService(db_session)
        service.hit("site", "10.0.0.1", BROWSER)
        service.hit("site", "10.0.0.2", BROWSER)
        service.hit("gallery", "10.0.0.1", BROWSER)

        stats = service.stats()

        assert stats.total_visits == 3
        assert stats.unique_visitors == 2
        assert [(d.key, d.count) for d in stats.details] == [("gallery", 1), ("site", 2)]

    def test_visitor_hash_is_not_reversible_text(self):
        fingerprint = visitor_hash("10.0.0.1", BROWSER)

        assert len(fingerprint) == 64
        assert "10.0.0.1" not in fingerprint
        assert fingerprint == visitor_hash("10.0.0.1", BROWSER)


class TestVisitsAPI:
    """Test the visit endpoints."""

    def test_hit_sets_cookie_when_counted(self, client, db_session):
        response = client.post(f"{VISITS_URL}/hit", headers={"user-agent": BROWSER})

        assert response.status_code == 200
        assert response.json() == {"ok": True, "counted": True, "count": 1}
        assert response.cookies["visited_site"] == "true"

    def test_repeat_hit_is_not_counted(self, client, db_session):
        client.post(f"{VISITS_URL}/hit", headers={"user-agent": BROWSER})

        response = client.post(f"{VISITS_URL}/hit", headers={"user-agent": BROWSER})

        assert response.json()["counted"] is False
        assert "visited_site" not in response.cookies

    def test_forwarded_address_identifies_visitor(self, client, db_session):
        client.post(f"{VISITS_URL}/hit", headers={"user-agent": BROWSER, "x-forwarded-for": "203.0.113.5"})

        response = client.post(f"{VISITS_URL}/hit",
                               headers={"user-agent": BROWSER, "x-forwarded-for": "203.0.113.6, 10.0.0.1"})

        assert response.json()["counted"] is True
        assert response.json()["count"] == 2

    def test_custom_key(self, client, db_session):
        response = client.post(f"{VISITS_URL}/hit", params={"key": "gallery"})

        assert response.json()["counted"] is True
        assert "visited_gallery" in response.cookies

    def test_stats(self, client, db_session):
        client.post(f"{VISITS_URL}/hit", headers={"user-agent": BROWSER})
        client.post(f"{VISITS_URL}/hit", params={"key": "gallery"}, headers={"user-agent": BROWSER})

        response = client.get(f"{VISITS_URL}/stats")

        body = response.json()
        assert response.status_code == 200
        assert body["total_visits"] == 2
        assert body["unique_visitors"] == 1
        assert {d["key"] for d in body["details"]} == {"gallery", "site"}
