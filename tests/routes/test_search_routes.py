from fastapi.testclient import TestClient

from dogsearch.core.exceptions import RepositoryException
from dogsearch.main import create_app

VET_SEARCH = {"term": "vet", "location": {"lat": 39.77, "lng": -86.15}}


def test_vet_search_then_cached_repeat(client, fetcher):
    first = client.post("/api/search", json=VET_SEARCH)
    assert first.status_code == 200
    body = first.json()
    assert body["fromCache"] is False
    assert [r["id"] for r in body["results"]] == ["svc-1", "svc-2", "svc-3"]
    assert all(isinstance(r["distance"], float) for r in body["results"])
    assert first.headers["X-Cache"] == "MISS"
    assert first.headers["X-RateLimit-Remaining"] == "9"

    second = client.post("/api/search", json=VET_SEARCH)
    assert second.status_code == 200
    assert second.json() == {"results": body["results"], "fromCache": True}
    assert second.headers["X-Cache"] == "HIT"
    assert len(fetcher.calls) == 1


def test_eleventh_uncached_search_is_rate_limited(client, fetcher):
    for i in range(10):
        res = client.post("/api/search", json={"term": f"vet {i}"})
        assert res.status_code == 200

    res = client.post("/api/search", json={"term": "vet 10"})
    assert res.status_code == 429
    body = res.json()
    assert body["code"] == "RATE_LIMITED"
    assert body["retryAfter"] > 0
    assert int(res.headers["Retry-After"]) > 0
    assert res.headers["X-RateLimit-Limit"] == "10"
    assert res.headers["X-RateLimit-Remaining"] == "0"
    assert "X-RateLimit-Reset" in res.headers
    assert len(fetcher.calls) == 10

    # Cached queries keep working for the limited caller
    cached = client.post("/api/search", json={"term": "vet 3"})
    assert cached.status_code == 200
    assert cached.json()["fromCache"] is True


def test_invalid_coordinates_return_400(client, fetcher):
    res = client.post("/api/search", json={"term": "vet", "location": {"lat": 100, "lng": 0}})
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_QUERY"
    assert "latitude" in res.json()["error"]
    assert fetcher.calls == []


def test_malformed_payload_returns_400(client):
    res = client.post("/api/search", json={"term": "vet", "unexpected": True})
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_QUERY"

    res = client.post("/api/search", json={"location": {"lat": "north"}})
    assert res.status_code == 400


def test_fetch_failure_returns_500_and_caches_nothing(test_settings, make_fetcher):
    failing = make_fetcher(error=RepositoryException("connection refused"))
    app = create_app(test_settings, failing)
    with TestClient(app) as client:
        res = client.post("/api/search", json=VET_SEARCH)
        assert res.status_code == 500
        assert res.json() == {"error": "Search failed", "code": "FETCH_FAILED"}

        stats = client.get("/api/cache/stats").json()["data"]
        assert stats["entries"] == 0


def test_camel_case_aliases_are_accepted(client, fetcher):
    res = client.post(
        "/api/search",
        json={
            "query": "Groomer",
            "verifiedOnly": True,
            "userLocation": {"latitude": 39.77, "longitude": -86.15, "postalCode": "46204"},
            "sortByDistance": False,
        },
    )
    assert res.status_code == 200
    filters = fetcher.calls[0]
    assert filters.term == "groomer"
    assert filters.verified_only is True
    assert filters.postal_code == "46204"
    # Relevance order is kept when distance sorting is off
    assert [r["id"] for r in res.json()["results"]] == ["svc-3", "svc-1", "svc-2"]


def test_rate_limiting_can_be_disabled(test_settings, fetcher):
    settings = test_settings.model_copy(update={"search_rate_limit_enabled": False})
    app = create_app(settings, fetcher)
    with TestClient(app) as client:
        for i in range(15):
            assert client.post("/api/search", json={"term": f"dog {i}"}).status_code == 200


def test_radius_outside_allowed_range_returns_400(client, fetcher):
    res = client.post(
        "/api/search",
        json={"term": "vet", "location": {"lat": 39.77, "lng": -86.15, "radius": 150}},
    )
    assert res.status_code == 400
    assert "radius" in res.json()["error"]
    assert fetcher.calls == []


def test_radius_is_passed_to_the_data_store(client, fetcher):
    res = client.post(
        "/api/search",
        json={"term": "vet", "location": {"lat": 39.77, "lng": -86.15, "radius": 15}},
    )
    assert res.status_code == 200
    assert fetcher.calls[0].radius_miles == 15.0
    assert (fetcher.calls[0].lat, fetcher.calls[0].lng) == (39.77, -86.15)
