def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_metrics_exposed(client):
    client.get("/healthz")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "http_request" in resp.text


def test_domain_errors_use_json_envelope(client, headers, reviewer):
    resp = client.post("/api/v1/requests/999/approve", headers=headers(reviewer))
    assert resp.status_code == 404
    body = resp.json()
    assert set(body) == {"code", "message", "details"}
    assert body["code"] == "NOT_FOUND"
