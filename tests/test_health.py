def test_health_endpoint(client):
    """Health endpoint answers without a database"""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["app_name"] == "WB-Tracks Inventory Service"
