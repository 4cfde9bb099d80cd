def test_health_ok(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert body["db"] is True
    assert body["catalogue_adapter"] is True
    assert body["store"]["products"] == 16
    assert body["store"]["error"] is None


def test_health_degraded_when_catalogue_down(client):
    catalogue = client.app.state.catalogue
    catalogue.force_failure = True
    try:
        body = client.get("/api/health").json()
        assert body["status"] == "degraded"
        assert body["catalogue_adapter"] is False
    finally:
        catalogue.force_failure = False
