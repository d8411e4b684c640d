def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "healthy"
    assert body["environment"] == "test"


def test_metrics_exposes_search_collectors(client):
    client.post("/api/search", json={"term": "vet"})
    res = client.get("/metrics")
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/plain")
    text = res.text
    assert "dogsearch_search_cache_lookups_total" in text
    assert "dogsearch_rl_decisions_total" in text
    assert "dogsearch_http_requests_total" in text


def test_unknown_route_uses_error_envelope(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert res.json() == {"error": "Not Found"}
