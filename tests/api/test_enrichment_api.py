from fastapi.testclient import TestClient


def test_run_enrichment(client: TestClient, event_store, reverse_provider):
    """Test a manual sweep over created events."""
    client.post("/api/v1/events/", json={
        "title": "Kigali Jazz Night",
        "category": "music",
        "country": "Rwanda",
        "city": "Kigali",
        "venue": "Kigali Convention Centre",
        "start_time": "2030-11-20T19:00:00+02:00",
    })

    response = client.post("/api/v1/enrichment/run")

    assert response.status_code == 200
    assert response.json() == {"enriched": 1}
    assert len(reverse_provider.calls) == 1

    event = client.get("/api/v1/events/1").json()
    assert event["enhanced_location"]["formatted_address"].startswith("KG 2 Roundabout")
    assert event["location_enriched_at"] is not None

    # Nothing left to do
    assert client.post("/api/v1/enrichment/run").json() == {"enriched": 0}
